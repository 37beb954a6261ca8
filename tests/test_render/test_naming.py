"""Tests for specgen.render.naming."""

from __future__ import annotations

import pytest

from specgen.render.naming import (
    camel_case,
    class_name,
    constant_case,
    enum_member_name,
    field_name,
    sanitize_identifier,
    snake_case,
    unique,
)


class TestSanitizeIdentifier:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("pet-store", "pet_store"),
            ("a.b c", "a_b_c"),
            ("123abc", "_123abc"),
            ("class", "class_"),
            ("", "value"),
            ("--", "value"),
        ],
    )
    def test_sanitize(self, value: str, expected: str) -> None:
        assert sanitize_identifier(value) == expected

    def test_custom_fallback(self) -> None:
        assert sanitize_identifier("!!", fallback="Model") == "Model"


class TestCaseHelpers:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("getPetById", "GetPetById"),
            ("pet-store.Pet", "Pet_store_Pet"),
            ("Message", "Message"),
            ("1pet", "_1pet"),
        ],
    )
    def test_class_name(self, value: str, expected: str) -> None:
        assert class_name(value) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("getPetById", "get_pet_by_id"),
            ("testAuthBearer", "test_auth_bearer"),
            ("HTTPResponse", "http_response"),
            ("list-pets", "list_pets"),
            ("import", "import_"),
        ],
    )
    def test_snake_case(self, value: str, expected: str) -> None:
        assert snake_case(value) == expected

    def test_constant_case(self) -> None:
        assert constant_case("getPetById") == "GET_PET_BY_ID"
        assert constant_case("import") == "IMPORT"

    def test_camel_case(self) -> None:
        assert camel_case("first_name") == "firstName"
        assert camel_case("already") == "already"


class TestFieldName:
    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("name", "name"),
            ("is-enabled", "is_enabled"),
            ("1st", "field_1st"),
            ("model_config", "model_config_"),
            ("model_anything", "model_anything_"),
            ("json", "json_"),
            ("str", "str_"),
            ("from", "from_"),
        ],
    )
    def test_field_name(self, key: str, expected: str) -> None:
        assert field_name(key) == expected

    def test_camel_cased(self) -> None:
        assert field_name("sender_id", camel_cased=True) == "senderId"
        assert field_name("sender_id") == "sender_id"


class TestEnumMemberName:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("in-stock", "IN_STOCK"),
            ("placed", "PLACED"),
            ("it_IT", "IT_IT"),
            ("camelValue", "CAMEL_VALUE"),
            ("2fa", "VALUE_2FA"),
            ("", "EMPTY"),
            (True, "TRUE"),
            (None, "NONE"),
            (1, "VALUE_1"),
            (1.5, "VALUE_1_5"),
        ],
    )
    def test_enum_member_name(self, value: object, expected: str) -> None:
        assert enum_member_name(value) == expected


class TestUnique:
    def test_free_name_is_kept(self) -> None:
        taken: set[str] = set()
        assert unique("Pet", taken) == "Pet"
        assert taken == {"Pet"}

    def test_counter_suffix(self) -> None:
        taken = {"Pet", "Pet2"}
        assert unique("Pet", taken) == "Pet3"

    def test_constants_use_underscore(self) -> None:
        assert unique("GET", {"GET"}) == "GET_2"
