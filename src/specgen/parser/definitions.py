"""Normalize raw schema nodes into :class:`~specgen.models.Definition` records.

The normalizer is purely structural: it does not follow pointers (a pointer
node comes back as ``Definition(ref=...)``) and it does not validate the
schema beyond what the IR needs.  Vendor extensions are folded into the
standard fields:

* ``x-one-of: true`` turns an ``allOf`` list into ``oneOf``;
* ``x-extensible-enum`` is used when ``enum`` is absent;
* ``x-import`` is carried as :attr:`~specgen.models.Definition.x_import`.

Pointers into external files are expanded *before* normalization by
:mod:`specgen.parser.flatten`.
"""

from __future__ import annotations

import logging
from typing import Any

from specgen.exceptions import SpecParseError
from specgen.models import Definition

logger = logging.getLogger(__name__)

_PASSTHROUGH_KEYS = {
    "type": "type",
    "title": "title",
    "description": "description",
    "format": "format",
    "default": "default",
    "minimum": "minimum",
    "maximum": "maximum",
    "exclusiveMinimum": "exclusive_minimum",
    "exclusiveMaximum": "exclusive_maximum",
    "minLength": "min_length",
    "maxLength": "max_length",
    "pattern": "pattern",
    "x-import": "x_import",
}


def parse_definition(raw: Any) -> Definition:
    """Normalize one schema node, recursing into nested schemas.

    Args:
        raw: The schema as found in the document (a dict).

    Returns:
        The normalized, frozen :class:`~specgen.models.Definition`.

    Raises:
        SpecParseError: If *raw* is not a mapping.
    """
    if not isinstance(raw, dict):
        raise SpecParseError(f"Schema must be an object, got {type(raw).__name__}")

    if "$ref" in raw:
        return Definition(
            ref=raw["$ref"], title=raw.get("title"), description=raw.get("description")
        )

    fields: dict[str, Any] = {
        attr: raw[key] for key, attr in _PASSTHROUGH_KEYS.items() if key in raw
    }

    one_of = raw.get("oneOf")
    all_of = raw.get("allOf")
    if one_of is None and raw.get("x-one-of") and all_of:
        one_of, all_of = all_of, None
    elif one_of and all_of:
        logger.warning(
            "Schema %r declares both oneOf and allOf; keeping oneOf",
            raw.get("title", "<inline>"),
        )
        all_of = None
    if one_of:
        fields["one_of"] = [parse_definition(item) for item in one_of]
    if all_of:
        fields["all_of"] = [parse_definition(item) for item in all_of]

    if "enum" in raw:
        fields["enum"] = list(raw["enum"])
    elif "x-extensible-enum" in raw:
        fields["enum"] = list(raw["x-extensible-enum"])
        fields["extensible_enum"] = True

    properties = raw.get("properties")
    if isinstance(properties, dict):
        fields["properties"] = {
            name: parse_definition(prop) for name, prop in properties.items()
        }

    required = raw.get("required")
    if isinstance(required, list):
        fields["required"] = [str(name) for name in required]

    items = raw.get("items")
    if isinstance(items, list):
        if len(items) > 1:
            logger.warning("Schema declares %d item schemas; keeping the first", len(items))
        if items:
            fields["items"] = parse_definition(items[0])
    elif isinstance(items, dict):
        fields["items"] = parse_definition(items)

    additional = raw.get("additionalProperties")
    if isinstance(additional, bool):
        fields["additional_properties"] = additional
    elif isinstance(additional, dict):
        fields["additional_properties"] = parse_definition(additional)

    return Definition(**fields)
