"""Emit Python source from the intermediate representation.

Every render function is pure: it takes IR records and an optional
:class:`~specgen.render.context.RenderContext`, and returns the source text
together with the context it used.
"""

from specgen.render.client import client_class_name, render_client, render_spec_module
from specgen.render.context import RenderContext
from specgen.render.environment import render
from specgen.render.models import render_definition, value_definitions
from specgen.render.operations import render_all_operations, render_operation

__all__ = [
    "RenderContext",
    "client_class_name",
    "render",
    "render_all_operations",
    "render_client",
    "render_definition",
    "render_operation",
    "render_spec_module",
    "value_definitions",
]
