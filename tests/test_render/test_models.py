"""Tests for specgen.render.models."""

from __future__ import annotations

import logging

import pytest

from specgen.models import Definition, GenerationOptions, ParsedSpec
from specgen.render.context import RenderContext
from specgen.render.models import constraint_kwargs, render_definition, value_definitions


def _render(
    parsed: ParsedSpec, name: str, options: GenerationOptions | None = None
) -> tuple[str, RenderContext]:
    context = RenderContext(
        known_definitions=frozenset(parsed.definitions),
        value_definitions=value_definitions(parsed.definitions),
    )
    text, context = render_definition(name, parsed.definitions[name], options, context)
    compile(text, f"{name}.py", "exec")
    return text, context


# ---------------------------------------------------------------------------
# Constraints
# ---------------------------------------------------------------------------


class TestConstraintKwargs:
    def test_inclusive_bounds(self) -> None:
        assert constraint_kwargs(Definition(minimum=0, maximum=10)) == ["ge=0", "le=10"]

    def test_boolean_exclusive_bounds(self) -> None:
        definition = Definition(
            minimum=0, maximum=1.5, exclusive_minimum=True, exclusive_maximum=True
        )
        assert constraint_kwargs(definition) == ["gt=0", "lt=1.5"]

    def test_numeric_exclusive_bounds(self) -> None:
        definition = Definition(exclusive_minimum=0.5, exclusive_maximum=5.5)
        assert constraint_kwargs(definition) == ["gt=0.5", "lt=5.5"]

    def test_string_constraints(self) -> None:
        definition = Definition(min_length=2, max_length=8, pattern="^[a-z]+$")
        assert constraint_kwargs(definition) == [
            "min_length=2",
            "max_length=8",
            "pattern='^[a-z]+$'",
        ]

    def test_no_constraints(self) -> None:
        assert constraint_kwargs(Definition(type="string")) == []


# ---------------------------------------------------------------------------
# Object models
# ---------------------------------------------------------------------------


class TestObjectModels:
    def test_model_with_sibling_reference(self, api_v2: ParsedSpec) -> None:
        text, context = _render(api_v2, "Message")
        assert "\nif TYPE_CHECKING:\n    from .MessageContent import MessageContent\n" in text
        assert "from pydantic import BaseModel, ConfigDict" in text
        assert "from typing import Optional, TYPE_CHECKING" in text
        assert "class Message(BaseModel):" in text
        assert '    model_config = ConfigDict(extra="forbid", populate_by_name=True)' in text
        assert "    id: str\n" in text
        assert "    content: MessageContent\n" in text
        assert "    sender_id: Optional[str] = None\n" in text
        assert context.imports == []
        assert context.type_imports == ["MessageContent"]

    def test_field_constraints(self, api_v2: ParsedSpec) -> None:
        text, _ = _render(api_v2, "MessageContent")
        assert (
            "    subject: Optional[str] = Field(default=None, min_length=10, max_length=120)"
            in text
        )
        assert "    markdown: str = Field(min_length=20)" in text
        assert "from pydantic import BaseModel, ConfigDict, Field" in text

    def test_loose_interfaces(self, api_v2: ParsedSpec) -> None:
        text, _ = _render(api_v2, "Message", GenerationOptions(strict_interfaces=False))
        assert 'ConfigDict(extra="allow", populate_by_name=True)' in text

    def test_camel_cased_properties_keep_alias(self, api_v2: ParsedSpec) -> None:
        text, _ = _render(api_v2, "Message", GenerationOptions(camel_cased_props=True))
        assert "    senderId: Optional[str] = Field(default=None, alias='sender_id')" in text

    def test_inline_parts_become_auxiliary_classes(self, api_v2: ParsedSpec) -> None:
        text, context = _render(api_v2, "Order")
        assert "class OrderStatus(str, Enum):" in text
        assert "    PLACED = 'placed'" in text
        assert "    IN_TRANSIT = 'in-transit'" in text
        assert "class OrderShipping(BaseModel):" in text
        assert "    status: Optional[OrderStatus] = None" in text
        assert "    shipping: Optional[OrderShipping] = None" in text
        assert "    created_at: Optional[datetime.datetime] = None" in text
        assert "    quantity: Optional[int] = Field(default=1, ge=1)" in text
        assert "import datetime" in text
        assert "from enum import Enum" in text
        assert '"""An order with inline parts."""' in text
        # Auxiliary classes are emitted ahead of the main class
        assert text.index("class OrderStatus") < text.index("class Order(")
        assert [spec.name for spec in context.aliases] == ["OrderStatus", "OrderShipping"]

    def test_all_of_subclasses_pointed_models(self, api_v2: ParsedSpec) -> None:
        text, _ = _render(api_v2, "AllOfTest")
        assert "\nfrom .LimitedProfile import LimitedProfile\n" in text
        assert "class AllOfTest(LimitedProfile):" in text
        assert "    nickname: str\n" in text

    def test_array_property_of_extensible_enum(self, api_v2: ParsedSpec) -> None:
        text, _ = _render(api_v2, "LimitedProfile")
        assert (
            "    preferred_languages: Optional[list[PreferredLanguage]] = None" in text
        )
        assert "from .PreferredLanguage import PreferredLanguage" in text

    def test_additional_properties_false_forbids(self) -> None:
        definition = Definition(
            type="object",
            properties={"a": Definition(type="string")},
            additional_properties=False,
        )
        text, _ = render_definition("Closed", definition, GenerationOptions(strict_interfaces=False))
        assert 'extra="forbid"' in text

    def test_self_reference_is_not_imported(self) -> None:
        definition = Definition(
            type="object",
            properties={
                "children": Definition(type="array", items=Definition(ref="#/definitions/Node"))
            },
        )
        text, context = render_definition("Node", definition)
        assert "    children: Optional[list[Node]] = None" in text
        assert context.imports == []
        assert "from .Node import" not in text

    def test_reserved_field_name_gets_alias(self) -> None:
        definition = Definition(
            type="object",
            properties={"model_config": Definition(type="string")},
            required=["model_config"],
        )
        text, _ = render_definition("Settings", definition)
        assert "    model_config_: str = Field(alias='model_config')" in text


# ---------------------------------------------------------------------------
# Root models, enums and aliases
# ---------------------------------------------------------------------------


class TestRootModels:
    def test_one_of_union(self, api_v2: ParsedSpec) -> None:
        text, _ = _render(api_v2, "OneOfTest")
        assert "class OneOfTest(RootModel):" in text
        assert "    root: Union[LimitedProfile, ExtendedProfile]\n" in text
        assert "    from .ExtendedProfile import ExtendedProfile\n" in text
        assert "    from .LimitedProfile import LimitedProfile\n" in text

    def test_constrained_scalar(self, api_v2: ParsedSpec) -> None:
        text, _ = _render(api_v2, "FiscalCode")
        assert "class FiscalCode(RootModel):" in text
        assert "    root: Annotated[str, Field(pattern='^[A-Z]{6}[0-9]{2}$')]\n" in text
        assert '"""User\'s fiscal code."""' in text
        assert "from typing import Annotated" in text

    def test_integer_range(self, api_v2: ParsedSpec) -> None:
        text, _ = _render(api_v2, "WithinRangeInteger")
        assert "    root: Annotated[int, Field(ge=0, le=10)]\n" in text

    def test_closed_enum(self, api_v2: ParsedSpec) -> None:
        text, _ = _render(api_v2, "EnumTest")
        assert "class EnumTest(str, Enum):" in text
        assert "    VALUE1 = 'value1'" in text
        assert "    VALUE2 = 'value2'" in text

    def test_extensible_enum_is_open_string(self, api_v2: ParsedSpec) -> None:
        text, _ = _render(api_v2, "PreferredLanguage")
        assert "class PreferredLanguage(RootModel):" in text
        assert "    root: str\n" in text
        assert "Known values: 'it_IT', 'en_GB'" in text

    def test_map_of_arrays(self, api_v2: ParsedSpec) -> None:
        text, _ = _render(api_v2, "AdditionalPropsTest")
        assert "class AdditionalPropsTest(RootModel):" in text
        assert "    root: dict[str, list[str]]\n" in text

    def test_pointer_becomes_module_alias(self) -> None:
        context = RenderContext(known_definitions=frozenset({"Pet", "Animal"}))
        text, _ = render_definition("Pet", Definition(ref="#/definitions/Animal"), context=context)
        compile(text, "Pet.py", "exec")
        assert "from .Animal import Animal" in text
        assert "\nPet = Animal\n" in text

    def test_unknown_pointer_is_any(self, caplog: pytest.LogCaptureFixture) -> None:
        definition = Definition(
            type="object", properties={"x": Definition(ref="#/definitions/Missing")}
        )
        with caplog.at_level(logging.WARNING, logger="specgen"):
            text, _ = render_definition("Holder", definition)
        assert "    x: Any = None" in text
        assert "does not name a known definition" in caplog.text

    def test_integer_enum(self) -> None:
        text, _ = render_definition("Level", Definition(type="integer", enum=[1, 2]))
        assert "class Level(int, Enum):" in text
        assert "    VALUE_1 = 1" in text

    def test_binary_and_date_formats(self) -> None:
        definition = Definition(
            type="object",
            properties={
                "blob": Definition(type="string", format="binary"),
                "day": Definition(type="string", format="date"),
            },
            required=["blob", "day"],
        )
        text, _ = render_definition("Attachment", definition)
        assert "    blob: bytes\n" in text
        assert "    day: datetime.date\n" in text


# ---------------------------------------------------------------------------
# Sibling references
# ---------------------------------------------------------------------------


def _object(**properties: Definition) -> Definition:
    return Definition(type="object", properties=properties)


class TestSiblingReferences:
    def test_annotation_only_references_are_type_checking_imports(self) -> None:
        context = RenderContext(known_definitions=frozenset({"Parent", "Child"}))
        text, context = render_definition(
            "Parent", _object(child=Definition(ref="#/definitions/Child")), context=context
        )
        compile(text, "Parent.py", "exec")
        assert "\nif TYPE_CHECKING:\n    from .Child import Child\n" in text
        assert "\nfrom .Child import Child\n" not in text
        assert "    child: Optional[Child] = None\n" in text

    def test_alias_target_is_imported_outright(self) -> None:
        context = RenderContext(known_definitions=frozenset({"Pet", "Animal"}))
        text, context = render_definition(
            "Pet", Definition(ref="#/definitions/Animal"), context=context
        )
        assert context.imports == ["Animal"]
        assert "TYPE_CHECKING" not in text

    def test_field_named_like_its_class_is_renamed(self) -> None:
        context = RenderContext(known_definitions=frozenset({"Person", "Address"}))
        text, _ = render_definition(
            "Person", _object(Address=Definition(ref="#/definitions/Address")), context=context
        )
        assert "    Address_: Optional[Address] = Field(default=None, alias='Address')" in text

    def test_field_named_like_an_auxiliary_class_is_renamed(self) -> None:
        definition = _object(
            status=Definition(type="string", enum=["on", "off"]),
            PetStatus=Definition(type="string"),
        )
        text, _ = render_definition("Pet", definition)
        assert "    status: Optional[PetStatus] = None\n" in text
        assert "    PetStatus_: Optional[str] = Field(default=None, alias='PetStatus')" in text


# ---------------------------------------------------------------------------
# allOf over non-object definitions
# ---------------------------------------------------------------------------


class TestValueAllOf:
    DEFINITIONS = {
        "ZipCode": Definition(type="string", pattern="^[0-9]{5}$"),
        "Colour": Definition(type="string", enum=["red", "green"]),
        "Base": _object(id=Definition(type="string")),
        "BaseAlias": Definition(ref="#/definitions/Base"),
        "ColourAlias": Definition(ref="#/definitions/Colour"),
        "HomeZip": Definition(all_of=[Definition(ref="#/definitions/ZipCode")]),
        "Extended": Definition(
            all_of=[
                Definition(ref="#/definitions/BaseAlias"),
                _object(name=Definition(type="string")),
            ]
        ),
    }

    def _context(self) -> RenderContext:
        return RenderContext(
            known_definitions=frozenset(self.DEFINITIONS),
            value_definitions=value_definitions(self.DEFINITIONS),
        )

    def test_value_definitions(self) -> None:
        assert value_definitions(self.DEFINITIONS) == frozenset(
            {"ZipCode", "Colour", "ColourAlias", "HomeZip"}
        )

    def test_all_of_scalar_is_root_model(self) -> None:
        text, context = render_definition(
            "HomeZip", self.DEFINITIONS["HomeZip"], context=self._context()
        )
        compile(text, "HomeZip.py", "exec")
        assert "class HomeZip(RootModel):" in text
        assert "    root: ZipCode\n" in text
        assert "model_config" not in text
        assert context.type_imports == ["ZipCode"]

    def test_all_of_enum_with_constraint_member(self) -> None:
        definition = Definition(
            all_of=[Definition(ref="#/definitions/Colour"), Definition(description="The hue")]
        )
        text, _ = render_definition("Hue", definition, context=self._context())
        assert "class Hue(RootModel):" in text
        assert "    root: Colour\n" in text

    def test_alias_of_model_is_still_a_base(self) -> None:
        text, context = render_definition(
            "Extended", self.DEFINITIONS["Extended"], context=self._context()
        )
        assert "class Extended(BaseAlias):" in text
        assert "    name: Optional[str] = None\n" in text
        assert context.imports == ["BaseAlias"]

    def test_inline_all_of_of_values_is_annotation(self) -> None:
        definition = _object(
            zip=Definition(
                all_of=[Definition(ref="#/definitions/ZipCode"), Definition(min_length=5)]
            )
        )
        text, context = render_definition("Address", definition, context=self._context())
        assert "    zip: Optional[ZipCode] = None\n" in text
        assert [spec.name for spec in context.aliases] == []


# ---------------------------------------------------------------------------
# x-import
# ---------------------------------------------------------------------------


class TestImportHint:
    def test_format_class_is_imported_from_module(self) -> None:
        definition = _object(
            amount=Definition(type="string", format="money", x_import="billing.types")
        )
        text, context = render_definition("Invoice", definition)
        compile(text, "Invoice.py", "exec")
        assert "from billing.types import Money" in text
        assert "    amount: Optional[Money] = None\n" in text
        assert "Money" in context.taken_names

    def test_format_without_import_hint_stays_scalar(self) -> None:
        definition = _object(amount=Definition(type="string", format="money"))
        text, _ = render_definition("Invoice", definition)
        assert "    amount: Optional[str] = None\n" in text
        assert "import Money" not in text
