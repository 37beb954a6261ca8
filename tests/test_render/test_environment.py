"""Tests for specgen.render.environment and specgen.render.context."""

from __future__ import annotations

import pytest

from specgen.exceptions import RenderError
from specgen.render.context import RenderContext
from specgen.render.environment import get_environment, render


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


class TestEnvironment:
    def test_environment_is_shared(self) -> None:
        assert get_environment() is get_environment()

    def test_autoescape_is_off(self) -> None:
        assert get_environment().autoescape is False

    def test_docstring_filter_escapes_quotes(self) -> None:
        template = get_environment().from_string('"""{{ text|docstring }}"""')
        assert template.render(text=' say "hi" \\ ') == '"""say \\"hi\\" \\\\"""'

    def test_pyrepr_filter(self) -> None:
        template = get_environment().from_string("{{ value|pyrepr }}")
        assert template.render(value="it's") == '"it\'s"'
        assert template.render(value=None) == "None"

    def test_pyliteral_filter_indents_continuation_lines(self) -> None:
        template = get_environment().from_string("{{ value|pyliteral(4) }}")
        value = {f"key{index}": "x" * 20 for index in range(5)}
        text = template.render(value=value)
        assert text.startswith("{'key0'")
        assert all(line.startswith("     ") for line in text.splitlines()[1:])

    def test_render_spec_template(self) -> None:
        text = render("spec.py.j2", {"document": {"swagger": "2.0"}})
        assert "SPEC: dict[str, Any] = {'swagger': '2.0'}" in text

    def test_missing_template_raises(self) -> None:
        with pytest.raises(RenderError, match="nope.j2"):
            render("nope.j2", {})

    def test_undefined_variable_raises(self) -> None:
        with pytest.raises(RenderError, match="operation.py.j2"):
            render("operation.py.j2", {})


# ---------------------------------------------------------------------------
# RenderContext
# ---------------------------------------------------------------------------


class TestRenderContext:
    def test_imports_keep_first_use_order(self) -> None:
        context = RenderContext()
        context.add_import("Pet")
        context.add_import("Owner")
        context.add_import("Pet")
        assert context.imports == ["Pet", "Owner"]

    def test_import_groups(self) -> None:
        context = RenderContext()
        context.add_typing("Optional", "Any")
        context.add_pydantic("BaseModel")
        context.add_module("datetime")
        context.add_from("specgen", "runtime as r")
        context.add_import("pet-tag")
        context.add_import("Owner")

        assert context.import_groups() == [
            ["import datetime", "from typing import Any, Optional"],
            ["from pydantic import BaseModel", "from specgen import runtime as r"],
            ["from .Owner import Owner", "from .Pet_tag import Pet_tag"],
        ]

    def test_import_groups_exclude_own_module(self) -> None:
        context = RenderContext()
        context.add_import("Pet")
        assert context.import_groups(exclude=frozenset({"Pet"})) == []

    def test_typing_only_imports(self) -> None:
        context = RenderContext()
        context.add_import("Owner", typing_only=True)
        context.add_import("Tag", typing_only=True)
        context.add_import("Tag")
        context.add_import("Pet", typing_only=True)

        assert context.type_checking_imports(exclude=frozenset({"Pet"})) == [
            "from .Owner import Owner"
        ]
        assert context.import_groups() == [
            ["from typing import TYPE_CHECKING"],
            ["from .Tag import Tag"],
        ]

    def test_no_typing_only_imports(self) -> None:
        context = RenderContext()
        context.add_import("Tag")
        assert context.type_checking_imports() == []
        assert context.from_imports == {}

    def test_third_party_modules(self) -> None:
        context = RenderContext()
        context.add_module("httpx")
        assert context.import_groups() == [["import httpx"]]

    def test_fork_keeps_only_known_definitions(self) -> None:
        context = RenderContext(
            known_definitions=frozenset({"Pet", "Code"}), value_definitions=frozenset({"Code"})
        )
        context.add_import("Pet")
        context.add_typing("Any")
        forked = context.fork()
        assert forked.known_definitions == frozenset({"Pet", "Code"})
        assert forked.value_definitions == frozenset({"Code"})
        assert forked.imports == []
        assert forked.from_imports == {}
