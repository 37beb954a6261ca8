"""Tests for the specgen command line: generate, bundle, and the entry point."""

from __future__ import annotations

import json
import re
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from typer.testing import CliRunner

from specgen import __version__
from specgen.app import app, main
from specgen.exceptions import ConfigError, InvalidUsageError, SpecParseError
from specgen.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INVALID_USAGE, EXIT_SPEC_PARSE_ERROR

runner = CliRunner()

FIXTURES_DIR = Path(__file__).parent / "fixtures"

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def _strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


class TestRoot:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"specgen {__version__}" in result.stdout

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        output = _strip_ansi(result.stdout)
        assert "generate" in output
        assert "bundle" in output


# ---------------------------------------------------------------------------
# generate
# ---------------------------------------------------------------------------


class TestGenerateCommand:
    def test_writes_package_and_lists_files(self, isolated_config: Path) -> None:
        out = isolated_config / "generated"
        result = runner.invoke(
            app,
            [
                "--quiet",
                "generate",
                str(FIXTURES_DIR / "api_v2.yaml"),
                "--out-dir",
                str(out),
                "--client",
            ],
        )
        assert result.exit_code == 0, result.output
        listed = [line for line in result.stdout.splitlines() if line.strip()]
        assert str(out / "client.py") in listed
        assert str(out / "request_types.py") in listed
        assert (out / "Message.py").is_file()

    def test_models_only_by_default(self, isolated_config: Path) -> None:
        out = isolated_config / "models"
        result = runner.invoke(
            app, ["generate", str(FIXTURES_DIR / "api_v3.yaml"), "-o", str(out)]
        )
        assert result.exit_code == 0, result.output
        assert not (out / "request_types.py").exists()
        assert (out / "Problem.py").is_file()

    def test_project_config_is_applied(self, isolated_config: Path) -> None:
        (isolated_config / "specgen.json").write_text(
            json.dumps({"generate_request_types": True}), encoding="utf-8"
        )
        out = isolated_config / "pkg"
        result = runner.invoke(
            app, ["generate", str(FIXTURES_DIR / "api_v2.yaml"), "-o", str(out)]
        )
        assert result.exit_code == 0, result.output
        assert (out / "request_types.py").is_file()
        assert not (out / "client.py").exists()

    def test_cli_flag_beats_environment(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SPECGEN_STRICT", "true")
        out = isolated_config / "loose"
        with patch("specgen.generator.generate_api", return_value=[]) as mock_generate:
            result = runner.invoke(
                app,
                ["generate", "api.yaml", "-o", str(out), "--no-strict", "--spec-module", "spec"],
            )
        assert result.exit_code == 0, result.output
        _, _, options = mock_generate.call_args.args
        assert options.strict_interfaces is False
        assert options.spec_module == "spec"

    def test_unknown_dialect(self, isolated_config: Path) -> None:
        spec = isolated_config / "weird.yaml"
        spec.write_text("info:\n  title: nothing\n", encoding="utf-8")
        result = runner.invoke(app, ["generate", str(spec), "-o", str(isolated_config / "x")])
        assert isinstance(result.exception, SpecParseError)

    def test_colliding_spec_module_is_usage_error(self, isolated_config: Path) -> None:
        out = isolated_config / "clash"
        result = runner.invoke(
            app,
            [
                "generate",
                str(FIXTURES_DIR / "api_v2.yaml"),
                "-o",
                str(out),
                "--client",
                "--spec-module",
                "client",
            ],
        )
        assert isinstance(result.exception, InvalidUsageError)
        assert not out.exists()

    def test_missing_out_dir_is_usage_error(self) -> None:
        result = runner.invoke(app, ["generate", "api.yaml"])
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# bundle
# ---------------------------------------------------------------------------


class TestBundleCommand:
    def test_stdout(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["bundle", str(FIXTURES_DIR / "multifile" / "api.yaml")])
        assert result.exit_code == 0, result.output
        document = yaml.safe_load(result.stdout)
        assert list(document["definitions"]) == ["Person", "Book", "BookList"]

    def test_json_file_with_version(self, isolated_config: Path) -> None:
        target = isolated_config / "bundled.json"
        result = runner.invoke(
            app,
            [
                "--quiet",
                "bundle",
                str(FIXTURES_DIR / "multifile" / "api.yaml"),
                "-o",
                str(target),
                "--api-version",
                "9.9.9",
            ],
        )
        assert result.exit_code == 0, result.output
        document = json.loads(target.read_text(encoding="utf-8"))
        assert document["info"]["version"] == "9.9.9"

    def test_yaml_file(self, isolated_config: Path) -> None:
        target = isolated_config / "bundled.yaml"
        result = runner.invoke(
            app, ["bundle", str(FIXTURES_DIR / "api_v3.yaml"), "--output", str(target)]
        )
        assert result.exit_code == 0, result.output
        assert yaml.safe_load(target.read_text(encoding="utf-8"))["openapi"].startswith("3.")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


class TestMain:
    @pytest.fixture(autouse=True)
    def _no_signal_handlers(self):
        with patch("specgen.app._setup_signal_handlers"):
            yield

    def test_specgen_error_uses_its_exit_code(self, capsys) -> None:
        with patch("specgen.app.app", side_effect=SpecParseError("Unknown dialect")):
            with pytest.raises(SystemExit) as excinfo:
                main()
        assert excinfo.value.code == EXIT_SPEC_PARSE_ERROR
        assert "Unknown dialect" in capsys.readouterr().err

    def test_invalid_usage_exit_code(self) -> None:
        with patch("specgen.app.app", side_effect=InvalidUsageError("clash")):
            with pytest.raises(SystemExit) as excinfo:
                main()
        assert excinfo.value.code == EXIT_INVALID_USAGE

    def test_config_error_is_generic_failure(self) -> None:
        with patch("specgen.app.app", side_effect=ConfigError("bad specgen.json")):
            with pytest.raises(SystemExit) as excinfo:
                main()
        assert excinfo.value.code == EXIT_GENERIC_FAILURE

    def test_crash_writes_log(self, isolated_config: Path, capsys) -> None:
        with patch("specgen.app.app", side_effect=RuntimeError("kaboom")):
            with pytest.raises(SystemExit) as excinfo:
                main()
        assert excinfo.value.code == EXIT_GENERIC_FAILURE
        [log] = list((isolated_config / "data" / "specgen" / "logs").glob("crash-*.log"))
        assert "RuntimeError: kaboom" in log.read_text()
        assert "Debug log:" in capsys.readouterr().err

    def test_keyboard_interrupt(self, capsys) -> None:
        with patch("specgen.app.app", side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as excinfo:
                main()
        assert excinfo.value.code == 130
        assert "Cancelled." in capsys.readouterr().err

    def test_system_exit_passes_through(self) -> None:
        with patch("specgen.app.app", side_effect=SystemExit(0)):
            with pytest.raises(SystemExit) as excinfo:
                main()
        assert excinfo.value.code == 0
