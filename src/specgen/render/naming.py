"""Identifier helpers for emitted code.

Specification names (definition names, property keys, operation ids) are
arbitrary strings; the helpers here turn them into valid, stable Python
identifiers.  The same input always yields the same identifier, which the
renderer relies on when one module refers to a class defined in another.
"""

from __future__ import annotations

import keyword
import re

from pydantic import BaseModel

_NON_IDENTIFIER = re.compile(r"[^0-9a-zA-Z_]+")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

# Names a generated model must not use for a field: pydantic's own
# attributes, and the names its annotations refer to.
_RESERVED_FIELD_NAMES = frozenset(dir(BaseModel)) | frozenset(
    {
        "Annotated",
        "Any",
        "BaseModel",
        "ClassVar",
        "ConfigDict",
        "Enum",
        "Field",
        "Literal",
        "Optional",
        "RootModel",
        "Union",
        "bool",
        "bytes",
        "date",
        "datetime",
        "dict",
        "float",
        "int",
        "list",
        "str",
    }
)


def sanitize_identifier(value: str, fallback: str = "value") -> str:
    """Replace anything that cannot appear in an identifier with ``_``.

    Leading digits get a ``_`` prefix and keywords a ``_`` suffix.
    """
    name = _NON_IDENTIFIER.sub("_", value).strip("_") or fallback
    if name[0].isdigit():
        name = f"_{name}"
    if keyword.iskeyword(name):
        name = f"{name}_"
    return name


def class_name(value: str) -> str:
    """Class name for a definition or operation: first letter upper-cased.

    Example::

        >>> class_name("getPetById")
        'GetPetById'
        >>> class_name("pet-store.Pet")
        'Pet_store_Pet'
    """
    name = sanitize_identifier(value, fallback="Model")
    if name.startswith("_"):
        return name
    return name[0].upper() + name[1:]


def snake_case(value: str) -> str:
    """``getPetById`` -> ``get_pet_by_id``."""
    name = _CAMEL_BOUNDARY.sub("_", sanitize_identifier(value))
    name = re.sub(r"_+", "_", name).lower()
    if keyword.iskeyword(name):
        name = f"{name}_"
    return name


def constant_case(value: str) -> str:
    """``getPetById`` -> ``GET_PET_BY_ID``."""
    return snake_case(value).rstrip("_").upper()


def camel_case(value: str) -> str:
    """Turn each ``_x`` into ``X``: ``first_name`` -> ``firstName``.

    Only underscores followed by a word character are folded; other
    characters are left for :func:`field_name` to deal with.
    """
    return re.sub(r"_(\w)", lambda match: match.group(1).upper(), value)


def field_name(key: str, camel_cased: bool = False) -> str:
    """Attribute name for the property *key* of a generated model.

    When the result differs from *key*, the model keeps *key* as the
    field's alias.
    """
    name = camel_case(key) if camel_cased else key
    name = sanitize_identifier(name, fallback="field")
    if name.startswith("_"):
        name = f"field{name}"
    if name in _RESERVED_FIELD_NAMES or name.startswith("model_"):
        name = f"{name}_"
    return name


def enum_member_name(value: object) -> str:
    """Member name for an enum value: ``"in-stock"`` -> ``IN_STOCK``."""
    if isinstance(value, str):
        name = _NON_IDENTIFIER.sub("_", _CAMEL_BOUNDARY.sub("_", value)).strip("_").upper()
        if not name:
            return "EMPTY"
        return f"VALUE_{name}" if name[0].isdigit() else name
    if isinstance(value, bool):
        return str(value).upper()
    if value is None:
        return "NONE"
    return "VALUE_" + _NON_IDENTIFIER.sub("_", str(value)).strip("_").upper()


def unique(name: str, taken: set[str]) -> str:
    """Return *name*, suffixed with a counter if it is in *taken*; record it."""
    candidate = name
    counter = 2
    while candidate in taken:
        candidate = f"{name}_{counter}" if name.isupper() else f"{name}{counter}"
        counter += 1
    taken.add(candidate)
    return candidate
