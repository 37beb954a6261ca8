"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specgen.exceptions.SpecgenError` subclass.
Build scripts can inspect the exit code to tell a broken spec apart from a
broken template without parsing stderr.

Example::

    $ specgen generate api.yaml --out-dir generated/
    $ echo $?
    7   # EXIT_SPEC_PARSE_ERROR -- the document is neither Swagger 2 nor OpenAPI 3
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI specification could not be loaded, detected or resolved."""

EXIT_RENDER_ERROR = 8
"""A code template failed to render."""
