"""Load specification documents from a URL, local file, or stdin.

This module handles all I/O for fetching raw Swagger 2.0 and OpenAPI 3.x
documents and converting them into Python dictionaries.  JSON and YAML are
both accepted; the format is guessed from the file extension or the
``Content-Type`` of the response, then from the content itself.

The public functions are:

* :func:`load_spec` -- Load and parse a document from any supported source.
* :func:`load_fragment_file` -- Load an external file referenced by a
  ``$ref`` pointer, relative to the referring document.

The dialect is *not* checked here; see
:func:`~specgen.parser.adapter.get_adapter`.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Union

import httpx
import yaml

from specgen.exceptions import SpecParseError

SpecSource = Union[str, Path, dict]
"""Anything :func:`load_spec` accepts: a path, a URL, ``-`` or a parsed document."""


def load_spec(source: SpecSource) -> dict[str, Any]:
    """Load a specification from URL, file path, stdin ('-') or a dict.

    A ``dict`` is returned unchanged so that callers can pass an already
    parsed document through the same entry point.

    Args:
        source: A URL (http/https), file path, ``'-'`` for stdin, or a
            parsed document.

    Returns:
        The parsed document as a dictionary.

    Raises:
        SpecParseError: If the source cannot be loaded or parsed.
    """
    if isinstance(source, dict):
        return source
    if isinstance(source, Path):
        return _load_from_file(source)
    if source == "-":
        return _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source)
    else:
        return _load_from_file(Path(source))


def load_fragment_file(file_part: str, base: Path | None = None) -> dict[str, Any]:
    """Load the external file named by the file part of a ``$ref``.

    Args:
        file_part: The text before ``#`` in a pointer, e.g.
            ``"definitions.yaml"``.  URLs are fetched with httpx.
        base: Directory the referring document lives in.  Relative file
            parts are resolved against it (current directory if ``None``).

    Returns:
        The parsed fragment document.

    Raises:
        SpecParseError: If the file is missing or cannot be parsed.
    """
    if file_part.startswith(("http://", "https://")):
        return _load_from_url(file_part)
    path = Path(file_part)
    if not path.is_absolute() and base is not None:
        path = base / path
    return _load_from_file(path)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document from a URL.

    Raises:
        SpecParseError: If the URL cannot be fetched or content cannot be parsed.
    """
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: Path) -> dict[str, Any]:
    """Load a document from a local file.

    Raises:
        SpecParseError: If the file cannot be read or content cannot be parsed.
    """
    if not path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Spec file is empty: {path}")

    suffix = path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hinted as YAML), then falls back to YAML.

    Args:
        content: The raw string content.
        hint: Optional format hint ('json' or 'yaml').

    Returns:
        The parsed dictionary.

    Raises:
        SpecParseError: If the content cannot be parsed as either format,
            or does not hold an object at the top level.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
        else:
            return _require_object(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse spec as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise SpecParseError(msg) from exc

    return _require_object(result)


def _require_object(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"Spec must be a JSON/YAML object (got {kind})")
    return result
