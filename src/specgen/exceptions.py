"""Exception hierarchy for specgen.

All exceptions inherit from :class:`SpecgenError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specgen.exit_codes`.
The top-level error handler in :func:`specgen.app.main` catches
``SpecgenError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    SpecgenError (exit 1)
    +-- InvalidUsageError             (exit 2)
    +-- SpecParseError                (exit 7)
    |   +-- UnresolvableReferenceError (exit 7)
    +-- RenderError                   (exit 8)
    +-- ConfigError                   (exit 1)

Recoverable problems (an operation without ``operationId``, a response
pointing to an unknown collection) are *not* raised: the parser logs a
warning and drops the offending item.
"""

from specgen.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_RENDER_ERROR,
    EXIT_SPEC_PARSE_ERROR,
)


class SpecgenError(Exception):
    """Base exception for all specgen errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specgen.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecgenError):
    """Raised for invalid CLI arguments or contradictory generation options."""

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(SpecgenError):
    """Raised when the OpenAPI spec cannot be loaded, detected or resolved."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class UnresolvableReferenceError(SpecParseError):
    """Raised when a pointer must be followed but its target does not exist.

    Args:
        ref: The offending pointer string.
        message: Optional message; a default one naming *ref* is built otherwise.
    """

    def __init__(self, ref: str, message: str | None = None):
        super().__init__(message or f"Cannot resolve reference '{ref}'")
        self.ref = ref


class RenderError(SpecgenError):
    """Raised when a code template fails to render."""

    exit_code = EXIT_RENDER_ERROR


class ConfigError(SpecgenError):
    """Raised for configuration problems (invalid ``specgen.json``, bad env values)."""

    exit_code = EXIT_GENERIC_FAILURE
