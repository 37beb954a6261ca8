"""Render the ``client.py`` module and the optional spec module.

The client is a subclass of :class:`specgen.runtime.ApiClient` with one
method per operation.  A method takes the operation's ``<Op>Params``
mapping (optional when every parameter is) and, for operations with a
decoder, an ``override_types`` argument handed to the decoder factory.
Operations without a ``2xx`` response have no decoder; their methods
return the raw :class:`httpx.Response`.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from specgen.models import OperationInfo, SpecMetaInfo
from specgen.render.context import RenderContext
from specgen.render.environment import render
from specgen.render.naming import class_name
from specgen.render.operations import OperationRenderer

_WORD = re.compile(r"[0-9A-Za-z]+")


def client_class_name(meta: SpecMetaInfo) -> str:
    """``"Swagger Petstore"`` -> ``SwaggerPetstoreClient``."""
    words = _WORD.findall(meta.title or "")
    base = "".join(class_name(word) for word in words)
    return class_name(base + "Client") if base else "Client"


def render_client(
    meta: SpecMetaInfo,
    operations: list[OperationInfo],
    context: Optional[RenderContext] = None,
) -> tuple[str, RenderContext]:
    """Render ``client.py`` for *operations*.

    Every operation gets a decoder in the client, so the request-types
    module it imports from must be rendered with decoders on.

    Args:
        meta: Supplies the class name, docstring and base path.
        operations: The operations, in the order their methods appear.
        context: The module's accumulator; a new one when ``None``.

    Returns:
        The module source and the context it was rendered with.
    """
    context = context or RenderContext()
    # Views are built in a private context: the client imports names from
    # request_types, not from the definition modules.
    renderer = OperationRenderer(context.fork(), generate_decoders=True)
    views = [renderer.view(operation) for operation in operations]

    imported: list[str] = []
    for view in views:
        imported.extend([f"{view.prefix}Params", f"{view.const}_REQUEST"])
        if view.responses:
            imported.append(f"{view.prefix}Response")
        if view.has_decoder:
            imported.append(f"{view.fn}_decoder")

    context.add_typing("Any")
    if any(not view.has_required_params for view in views):
        context.add_typing("Optional")
    if any(not view.has_decoder for view in views):
        context.add_module("httpx")
    context.add_from("specgen", "runtime as r")

    data: dict[str, Any] = {
        "title": meta.title or "the API",
        "version": meta.version,
        "base_path": (meta.base_path or "").rstrip("/"),
        "client_class": client_class_name(meta),
        "import_groups": context.import_groups(),
        "imported": imported,
        "operations": views,
    }
    return render("client.py.j2", data), context


def render_spec_module(document: dict[str, Any]) -> str:
    """Render *document* as a module exposing it as the ``SPEC`` literal."""
    return render("spec.py.j2", {"document": document})
