"""Bundle a multi-file specification into one self-contained document."""

from __future__ import annotations

from typing import Any, Optional

from specgen.parser.adapter import get_adapter
from specgen.parser.extractor import source_location
from specgen.parser.flatten import DefinitionFlattener, FragmentLoader
from specgen.parser.loader import SpecSource, load_spec


def bundle(
    source: SpecSource,
    version: Optional[str] = None,
    loader: Optional[FragmentLoader] = None,
) -> dict[str, Any]:
    """Load *source* and return it with every pointer made local.

    Args:
        source: A path, URL, ``'-'`` for stdin, or a parsed document.
        version: If given, replaces ``info.version`` in the result.
        loader: Fragment loader collaborator for external files.

    Returns:
        A new document; *source*, if a dict, is not modified.

    Raises:
        SpecParseError: If the document or one of its fragments cannot be
            loaded, or its dialect cannot be determined.
    """
    document = load_spec(source)
    flattened = DefinitionFlattener(
        get_adapter(document), source=source_location(source), loader=loader
    ).flatten()
    if version is not None:
        flattened["info"] = {**flattened.get("info", {}), "version": version}
    return flattened
