"""Output system with strict stdout/stderr discipline.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- primary data only (the list of written files, a bundled
  document).  This is what downstream tools pipe and parse.
* **stderr** -- all diagnostics (progress, warnings, errors).
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  ``--no-color`` CLI flag.

The module exposes three layers:

1. :class:`OutputManager` -- a stateful object holding Rich consoles and
   quiet/verbose flags.  Created once in :func:`~specgen.app.main_callback`
   and installed via :func:`set_output`.
2. Module-level convenience functions (:func:`info`, :func:`error`,
   :func:`debug`, etc.) that delegate to the global ``OutputManager``.
3. :class:`OutputLogHandler` -- a :mod:`logging` handler forwarding the
   library's log records (parser warnings, debug traces) to the manager,
   so that library code only ever talks to :mod:`logging`.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from rich.console import Console
from rich.markup import escape


class OutputManager:
    """Central manager for all CLI output.

    Args:
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential informational messages on stderr.
        verbose: Enable debug-level messages on stderr.
    """

    def __init__(
        self,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Print raw text to stdout."""
        print(text, file=sys.stdout, flush=True)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Print an informational message to stderr. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._emit(message, "{}")

    def success(self, message: str) -> None:
        """Print a green success message to stderr. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._emit(message, "[green]{}[/green]")

    def warning(self, message: str) -> None:
        """Print a yellow warning to stderr. NOT suppressed by ``--quiet``."""
        self._emit(message, "[yellow]Warning:[/yellow] {}", plain_prefix="Warning: ")

    def error(self, message: str) -> None:
        """Print a bold-red error to stderr. Never suppressed."""
        self._emit(message, "[bold red]Error:[/bold red] {}", plain_prefix="Error: ")

    def debug(self, message: str) -> None:
        """Print a debug message to stderr. Only shown when ``--verbose`` is active."""
        if self._verbose:
            self._emit(message, "[dim][debug] {}[/dim]", plain_prefix="[debug] ")

    def _emit(self, message: str, markup: str, plain_prefix: str = "") -> None:
        if self._no_color:
            print(f"{plain_prefix}{message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup.format(escape(message)))


class OutputLogHandler(logging.Handler):
    """Route :mod:`logging` records to the global :class:`OutputManager`.

    ``WARNING`` and above become warnings or errors; lower levels become
    debug messages, which the manager only shows in verbose mode.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
        except Exception:  # noqa: BLE001
            self.handleError(record)
            return
        output = get_output()
        if record.levelno >= logging.ERROR:
            output.error(message)
        elif record.levelno >= logging.WARNING:
            output.warning(message)
        else:
            output.debug(message)


def install_log_handler(verbose: bool = False) -> OutputLogHandler:
    """Attach an :class:`OutputLogHandler` to the ``specgen`` logger.

    Any handler installed by a previous call is replaced, so the CLI can be
    invoked repeatedly in one process (as the test-suite does).

    Args:
        verbose: Also forward ``DEBUG`` records.

    Returns:
        The installed handler.
    """
    logger = logging.getLogger("specgen")
    for handler in list(logger.handlers):
        if isinstance(handler, OutputLogHandler):
            logger.removeHandler(handler)
    handler = OutputLogHandler()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
    return handler


def _should_disable_color() -> bool:
    """Return True when NO_COLOR is set (any value) or TERM=dumb."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False


# ------------------------------------------------------------------ #
# Global output instance (set during app startup)
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance."""
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None``.

    Primarily useful in test suites to ensure a clean state between tests.
    """
    global _output
    _output = None


# ------------------------------------------------------------------ #
# Convenience functions that use the global instance
# ------------------------------------------------------------------ #


def print_data(text: str) -> None:
    """Print raw data to stdout via the global OutputManager."""
    get_output().print_data(text)


def info(message: str) -> None:
    """Print info message to stderr via the global OutputManager."""
    get_output().info(message)


def error(message: str) -> None:
    """Print error to stderr via the global OutputManager."""
    get_output().error(message)


def success(message: str) -> None:
    """Print success message to stderr via the global OutputManager."""
    get_output().success(message)


def warning(message: str) -> None:
    """Print warning to stderr via the global OutputManager."""
    get_output().warning(message)


def debug(message: str) -> None:
    """Print debug message to stderr via the global OutputManager."""
    get_output().debug(message)
