"""Parse and follow ``$ref`` pointers.

A pointer has the shape ``[file]#/<segment>/.../<name>``.  The file part is
optional; when present, the pointer is *external* and points into another
document.  :func:`parse_pointer` classifies a pointer by the collection it
points into, matching the collection segments by name:

* ``definitions`` and ``components/schemas`` -- :class:`DefinitionPointer`
* ``parameters`` and ``components/parameters`` -- :class:`ParameterPointer`
* anything else -- :class:`OtherPointer`

The same classification therefore holds for both dialects, and for pointers
with extra leading segments (e.g. ``#/x-shared/definitions/Pet``).

:func:`resolve_pointer` walks a JSON pointer inside a document, handling
RFC 6901 escaping (``~0`` for ``~``, ``~1`` for ``/``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from specgen.exceptions import SpecParseError

_DEFINITION_COLLECTIONS = (("definitions",), ("components", "schemas"))
_PARAMETER_COLLECTIONS = (("parameters",), ("components", "parameters"))


@dataclass(frozen=True)
class DefinitionPointer:
    """A pointer to a named schema."""

    name: str
    file: Optional[str] = None
    ref: str = ""


@dataclass(frozen=True)
class ParameterPointer:
    """A pointer to a named, reusable parameter."""

    name: str
    file: Optional[str] = None
    ref: str = ""


@dataclass(frozen=True)
class OtherPointer:
    """A pointer into any other collection (responses, headers, ...)."""

    name: str
    file: Optional[str] = None
    ref: str = ""


Pointer = Union[DefinitionPointer, ParameterPointer, OtherPointer]


def _unescape(segment: str) -> str:
    return segment.replace("~1", "/").replace("~0", "~")


def split_pointer(ref: str) -> tuple[Optional[str], list[str]]:
    """Split a pointer into its file part and decoded path segments.

    Returns:
        ``(file, segments)`` where *file* is ``None`` for a local pointer.

    Raises:
        SpecParseError: If *ref* has no ``#/`` fragment.
    """
    file_part, sep, fragment = ref.partition("#")
    if not sep or not fragment.startswith("/"):
        raise SpecParseError(f"Not a JSON pointer: {ref!r}")
    segments = [_unescape(s) for s in fragment[1:].split("/")]
    return (file_part or None), segments


def parse_pointer(ref: Any) -> Optional[Pointer]:
    """Classify a ``$ref`` string.

    Args:
        ref: The pointer string.  Anything that is not a string with a
            ``#/...`` fragment yields ``None``.

    Returns:
        A :class:`DefinitionPointer`, :class:`ParameterPointer` or
        :class:`OtherPointer`, or ``None`` if *ref* is not a pointer.

    Example::

        >>> parse_pointer("common.yaml#/components/schemas/Pet")
        DefinitionPointer(name='Pet', file='common.yaml', ref='common.yaml#/components/schemas/Pet')
    """
    if not isinstance(ref, str):
        return None
    try:
        file_part, segments = split_pointer(ref)
    except SpecParseError:
        return None
    if len(segments) < 2 or not segments[-1]:
        return None

    name = segments[-1]
    collection = tuple(segments[:-1])
    if _ends_with_any(collection, _DEFINITION_COLLECTIONS):
        return DefinitionPointer(name=name, file=file_part, ref=ref)
    if _ends_with_any(collection, _PARAMETER_COLLECTIONS):
        return ParameterPointer(name=name, file=file_part, ref=ref)
    return OtherPointer(name=name, file=file_part, ref=ref)


def _ends_with_any(collection: tuple[str, ...], candidates: tuple[tuple[str, ...], ...]) -> bool:
    # Longest candidates first so components/schemas wins over a bare "schemas".
    for candidate in sorted(candidates, key=len, reverse=True):
        if collection[-len(candidate):] == candidate:
            return True
    return False


def resolve_pointer(document: dict[str, Any], ref: str) -> Any:
    """Resolve the fragment of *ref* against *document*.

    The file part of *ref*, if any, is ignored: the caller decides which
    document the pointer applies to.

    Args:
        document: The document to navigate.
        ref: The pointer string, e.g. ``"#/definitions/Pet"``.

    Returns:
        The value found at the referenced path.

    Raises:
        SpecParseError: If any segment in the pointer path does not exist.
    """
    _, segments = split_pointer(ref)

    current: Any = document
    for segment in segments:
        if isinstance(current, dict):
            if segment not in current:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise SpecParseError(
                f"Cannot resolve $ref '{ref}': cannot navigate into {type(current).__name__}"
            )

    return current


def local_ref(collection: tuple[str, ...], name: str) -> str:
    """Build a document-local pointer to *name* inside *collection*.

    Example::

        >>> local_ref(("components", "schemas"), "Pet")
        '#/components/schemas/Pet'
    """
    segments = [*collection, name]
    return "#/" + "/".join(s.replace("~", "~0").replace("/", "~1") for s in segments)
