"""Shared test fixtures for specgen.

Provides the fixture documents (raw and parsed), an isolated environment
for configuration tests, and resets the global output and logging state
that the CLI installs.  These fixtures are automatically discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest
import yaml

from specgen.models import ParsedSpec
from specgen.output import OutputLogHandler, reset_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_yaml(name: str) -> dict[str, Any]:
    """Load a YAML fixture by its path relative to ``fixtures/``."""
    return yaml.safe_load((FIXTURES_DIR / name).read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# Auto-reset global output and logging state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and the ``specgen`` logger after every test.

    The CLI callback caches stderr in a new OutputManager and attaches an
    :class:`OutputLogHandler` that stops propagation.  Left in place, the
    first would write to a stream closed by CliRunner and the second would
    hide parser warnings from ``caplog``.
    """
    yield
    reset_output()
    logger = logging.getLogger("specgen")
    for handler in list(logger.handlers):
        if isinstance(handler, OutputLogHandler):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Raw document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def api_v2_raw() -> dict[str, Any]:
    """Load the raw Swagger 2.0 fixture."""
    return load_yaml("api_v2.yaml")


@pytest.fixture
def api_v3_raw() -> dict[str, Any]:
    """Load the raw OpenAPI 3.0 fixture."""
    return load_yaml("api_v3.yaml")


# ---------------------------------------------------------------------------
# Parsed document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def api_v2(api_v2_raw: dict[str, Any]) -> ParsedSpec:
    """Parsed Swagger 2.0 fixture."""
    from specgen.parser.extractor import extract_spec

    return extract_spec(api_v2_raw)


@pytest.fixture
def api_v3(api_v3_raw: dict[str, Any]) -> ParsedSpec:
    """Parsed OpenAPI 3.0 fixture."""
    from specgen.parser.extractor import extract_spec

    return extract_spec(api_v3_raw)


@pytest.fixture
def library_api() -> ParsedSpec:
    """Parsed two-file fixture (``multifile/api.yaml`` + ``definitions.yaml``)."""
    from specgen.parser.extractor import parse_spec

    return parse_spec(FIXTURES_DIR / "multifile" / "api.yaml")


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_DATA_HOME to a subdirectory of tmp_path so that crash logs
    never touch the real user directory, clears all SPECGEN_* environment
    variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("specgen.config._is_xdg_platform", lambda: True)

    for var in [
        "SPECGEN_STRICT",
        "SPECGEN_CAMEL_CASED",
        "SPECGEN_DEFAULT_SUCCESS_TYPE",
        "SPECGEN_DEFAULT_ERROR_TYPE",
        "SPECGEN_CONCURRENCY",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path
