"""Typer application and CLI entry point for specgen.

Two commands:

* ``specgen generate SPEC --out-dir DIR`` -- parse a Swagger 2.0 or
  OpenAPI 3.x document and write the generated package;
* ``specgen bundle SPEC`` -- write a self-contained copy of a document
  whose pointers reach into other files.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.  :class:`~specgen.exceptions.SpecgenError` ends the run
with the error's exit code; any other exception is written to a crash log
under the data directory.

See Also:
    :mod:`specgen.config`: Option precedence resolution.
    :mod:`specgen.output`: Output initialised in :func:`main_callback`.
"""

from __future__ import annotations

import json
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer
import yaml

from specgen import __version__
from specgen.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="specgen",
    help="Generate typed Python clients from Swagger 2.0 and OpenAPI 3.x specs.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"specgen {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~specgen.output.OutputManager` from CLI
    flags and routes library log records to it.

    Args:
        version: If ``True``, print the version string and exit.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output.
    """
    from specgen.output import OutputManager, install_log_handler, set_output

    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))
    install_log_handler(verbose=verbose)


@app.command("generate")
def generate_command(
    spec: str = typer.Argument(..., help="Spec path, URL, or '-' for stdin."),
    out_dir: Path = typer.Option(
        ..., "--out-dir", "-o", help="Directory of the generated package."
    ),
    strict: Optional[bool] = typer.Option(
        None, "--strict/--no-strict", help="Generated models reject unknown properties."
    ),
    camel_cased: Optional[bool] = typer.Option(
        None, "--camel-cased/--no-camel-cased", help="Rename snake_case properties to camelCase."
    ),
    default_success_type: Optional[str] = typer.Option(
        None, "--default-success-type", help="Type of 2xx responses without a schema."
    ),
    default_error_type: Optional[str] = typer.Option(
        None, "--default-error-type", help="Type of other responses without a schema."
    ),
    request_types: bool = typer.Option(
        False, "--request-types", help="Emit request_types.py."
    ),
    response_decoders: bool = typer.Option(
        False, "--response-decoders", help="Emit response decoders (implies --request-types)."
    ),
    client: bool = typer.Option(
        False, "--client", help="Emit client.py (implies --response-decoders)."
    ),
    spec_module: Optional[str] = typer.Option(
        None, "--spec-module", help="Also emit the document as a module with this name."
    ),
    concurrency: Optional[int] = typer.Option(
        None, "--concurrency", "-j", min=1, help="Maximum concurrent render tasks."
    ),
) -> None:
    """Generate a Python package from a spec.

    Options not given on the command line come from ``SPECGEN_*``
    environment variables, then ``./specgen.json``.

    Example::

        specgen generate api.yaml --out-dir generated/petstore --client
    """
    from specgen.config import resolve_options
    from specgen.generator import generate_api
    from specgen.output import debug, print_data, success

    options = resolve_options(
        {
            "strict_interfaces": strict,
            "camel_cased_props": camel_cased,
            "default_success_type": default_success_type,
            "default_error_type": default_error_type,
            "generate_request_types": request_types or None,
            "generate_response_decoders": response_decoders or None,
            "generate_client": client or None,
            "spec_module": spec_module,
            "concurrency": concurrency,
        }
    )
    debug(f"Options: {options.model_dump_json()}")

    written = generate_api(spec, out_dir, options)
    for path in written:
        print_data(str(path))
    success(f"Generated {len(written)} files in {out_dir}")


@app.command("bundle")
def bundle_command(
    spec: str = typer.Argument(..., help="Spec path, URL, or '-' for stdin."),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Output file (.json or .yaml); stdout if omitted."
    ),
    api_version: Optional[str] = typer.Option(
        None, "--api-version", help="Replace info.version in the output."
    ),
) -> None:
    """Write a self-contained copy of a multi-file spec.

    Example::

        specgen bundle api.yaml -o bundled.yaml
    """
    from specgen.output import print_data, success
    from specgen.parser import bundle
    from specgen.writer import atomic_write

    document = bundle(spec, version=api_version)
    if output is not None and output.suffix == ".json":
        text = json.dumps(document, indent=2, ensure_ascii=False) + "\n"
    else:
        text = yaml.safe_dump(document, sort_keys=False, allow_unicode=True)

    if output is None:
        print_data(text.rstrip("\n"))
        return
    atomic_write(output, text)
    success(f"Bundled {spec} into {output}")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from specgen.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text("".join(traceback.format_exception(exc)))
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``specgen`` console script.

    Unhandled :class:`~specgen.exceptions.SpecgenError` instances cause a
    clean exit with the error's ``exit_code``.  All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from specgen.exceptions import SpecgenError
        from specgen.output import error

        if isinstance(exc, SpecgenError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
