"""The templating collaborator: ``render(template_name, data) -> text``.

Templates live in ``render/templates/`` and produce Python source, so
autoescaping is off.  The environment is built once and shared; rendering
a template does not modify it, so concurrent renders are safe.
"""

from __future__ import annotations

import pprint
from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from specgen.exceptions import RenderError

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``render/templates/``)."""


def _pyrepr(value: Any) -> str:
    """Python literal for *value* (strings, numbers, ``None``, containers)."""
    return repr(value)


def _pyliteral(value: Any, indent: int = 0) -> str:
    text = pprint.pformat(value, width=88 - indent, sort_dicts=False)
    return text.replace("\n", "\n" + " " * indent)


def _docstring(value: str) -> str:
    """Make *value* safe inside a triple-quoted docstring."""
    return value.strip().replace("\\", "\\\\").replace('"', '\\"')


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    """Create and configure the Jinja2 environment for code templates.

    Block trimming and lstrip are enabled for cleaner template authoring;
    undefined variables raise instead of rendering as empty strings.
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["pyrepr"] = _pyrepr
    env.filters["pyliteral"] = _pyliteral
    env.filters["docstring"] = _docstring
    return env


def render(template_name: str, data: dict[str, Any]) -> str:
    """Render *template_name* with *data*.

    Raises:
        RenderError: If the template is missing or fails to render.
    """
    try:
        return get_environment().get_template(template_name).render(**data)
    except TemplateError as exc:
        raise RenderError(f"Cannot render template {template_name}: {exc}") from exc
