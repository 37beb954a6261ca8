"""Build a :class:`~specgen.models.ParsedSpec` from a raw document.

This module ties the parser together.  :func:`extract_spec` runs, in order:

* :func:`~specgen.parser.adapter.get_adapter` -- decide the dialect once;
* :class:`~specgen.parser.flatten.DefinitionFlattener` -- make every pointer
  local;
* :func:`~specgen.parser.definitions.parse_definition` -- once per named
  schema, in declaration order;
* :class:`~specgen.parser.operations.OperationParser` -- every supported
  operation, in path order.

:func:`parse_spec` adds loading in front, for callers holding a path or URL.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from specgen.models import GenerationOptions, ParsedSpec
from specgen.parser.adapter import get_adapter
from specgen.parser.definitions import parse_definition
from specgen.parser.flatten import DefinitionFlattener, FragmentLoader
from specgen.parser.loader import SpecSource, load_spec
from specgen.parser.operations import OperationParser

logger = logging.getLogger(__name__)


def extract_spec(
    document: dict[str, Any],
    options: Optional[GenerationOptions] = None,
    source: Optional[str] = None,
    loader: Optional[FragmentLoader] = None,
) -> ParsedSpec:
    """Extract definitions, operations and metadata from a raw document.

    Args:
        document: The parsed document, as returned by
            :func:`~specgen.parser.loader.load_spec`.  It is not modified.
        options: Supplies the default response types; defaults are used
            when ``None``.
        source: Location of *document*, used to resolve relative pointers
            into other files.
        loader: Fragment loader collaborator for external files.

    Returns:
        The :class:`~specgen.models.ParsedSpec`.  Its ``document`` is the
        flattened, self-contained document.

    Raises:
        SpecParseError: If the dialect cannot be determined or an external
            pointer cannot be followed.

    Example::

        parsed = extract_spec(load_spec("api.yaml"), source="api.yaml")
        for operation in parsed.operations:
            print(operation.method.value.upper(), operation.path)
    """
    options = options or GenerationOptions()

    flattened = DefinitionFlattener(get_adapter(document), source=source, loader=loader).flatten()
    adapter = get_adapter(flattened)
    logger.debug("Detected %s document", adapter.dialect.value)

    definitions = {
        name: parse_definition(raw) for name, raw in adapter.definitions().items()
    }
    operations = OperationParser(
        adapter,
        default_success_type=options.default_success_type,
        default_error_type=options.default_error_type,
    ).parse_all_operations()
    logger.debug("Parsed %d definitions and %d operations", len(definitions), len(operations))

    return ParsedSpec(
        dialect=adapter.dialect,
        meta=adapter.spec_meta(),
        definitions=definitions,
        operations=operations,
        document=flattened,
    )


def source_location(source: SpecSource) -> Optional[str]:
    """Return the location string of *source*, or ``None`` for stdin and dicts."""
    if isinstance(source, Path):
        return str(source)
    if isinstance(source, str) and source != "-":
        return source
    return None


def parse_spec(
    source: SpecSource,
    options: Optional[GenerationOptions] = None,
    loader: Optional[FragmentLoader] = None,
) -> ParsedSpec:
    """Load *source* and extract it in one step.

    Args:
        source: A path, URL, ``'-'`` for stdin, or a parsed document.
        options: Passed through to :func:`extract_spec`.
        loader: Fragment loader collaborator for external files.
    """
    document = load_spec(source)
    return extract_spec(document, options, source=source_location(source), loader=loader)
