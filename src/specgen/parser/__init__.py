"""Specification parser -- load, flatten, and normalize into the IR.

This sub-package is the first half of the specgen pipeline: turning a raw
Swagger 2.0 or OpenAPI 3.x document (JSON or YAML, local file or remote URL)
into a :class:`~specgen.models.ParsedSpec` that the renderer can consume.

Typical usage::

    from specgen.parser import parse_spec

    parsed = parse_spec("api.yaml")

Sub-modules:

* :mod:`~specgen.parser.loader` -- I/O layer (URL, file, stdin) plus format
  detection.
* :mod:`~specgen.parser.pointer` -- ``$ref`` grammar and JSON pointer walk.
* :mod:`~specgen.parser.adapter` -- one accessor surface over both dialects.
* :mod:`~specgen.parser.flatten` -- external pointer expansion.
* :mod:`~specgen.parser.definitions` -- schema normalization.
* :mod:`~specgen.parser.auth` -- security schemes to auth headers.
* :mod:`~specgen.parser.operations` -- path items to operation records.
* :mod:`~specgen.parser.extractor` -- the pipeline tying these together.
* :mod:`~specgen.parser.bundle` -- write a self-contained copy of a document.
"""

from specgen.parser.bundle import bundle
from specgen.parser.extractor import extract_spec, parse_spec
from specgen.parser.loader import load_spec

__all__ = ["bundle", "extract_spec", "load_spec", "parse_spec"]
