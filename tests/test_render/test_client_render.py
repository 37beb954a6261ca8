"""Tests for specgen.render.client."""

from __future__ import annotations

from typing import Any

import pytest

from specgen.models import ParsedSpec, SpecMetaInfo
from specgen.render.client import client_class_name, render_client, render_spec_module


class TestClientClassName:
    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Test API", "TestAPIClient"),
            ("swagger petstore", "SwaggerPetstoreClient"),
            ("my-api v2", "MyApiV2Client"),
            ("Pets & Owners", "PetsOwnersClient"),
            (None, "Client"),
            ("", "Client"),
        ],
    )
    def test_client_class_name(self, title: str | None, expected: str) -> None:
        assert client_class_name(SpecMetaInfo(title=title)) == expected


class TestRenderClient:
    @pytest.fixture()
    def text(self, api_v2: ParsedSpec) -> str:
        text, _ = render_client(api_v2.meta, api_v2.operations)
        return text

    def test_module_compiles(self, text: str) -> None:
        compile(text, "client.py", "exec")

    def test_class_and_base_path(self, text: str) -> None:
        assert "class TestAPIClient(r.ApiClient):" in text
        assert "    BASE_PATH = '/api/v1'" in text
        assert '"""Client for Test API (version 1.0.0).' in text

    def test_imports(self, text: str) -> None:
        assert "from specgen import runtime as r" in text
        assert "from typing import Any, Optional" in text
        assert "import httpx" in text
        assert "from .request_types import (" in text
        assert "    TestAuthBearerParams,\n" in text
        assert "    TEST_AUTH_BEARER_REQUEST,\n" in text
        assert "    TestAuthBearerResponse,\n" in text
        assert "    test_auth_bearer_decoder,\n" in text
        assert "test_no_success_decoder" not in text

    def test_method_with_required_parameters(self, text: str) -> None:
        assert (
            "    def test_auth_bearer(self, params: TestAuthBearerParams, "
            "override_types: Any = None) -> TestAuthBearerResponse:"
        ) in text
        assert (
            "        return self.call(TEST_AUTH_BEARER_REQUEST, params, "
            "test_auth_bearer_decoder(override_types))"
        ) in text

    def test_method_with_optional_parameters(self, text: str) -> None:
        assert (
            "    def test_query_token(self, params: Optional[TestQueryTokenParams] = None, "
            "override_types: Any = None) -> TestQueryTokenResponse:"
        ) in text
        assert "TEST_QUERY_TOKEN_REQUEST, params or {}, " in text

    def test_method_without_decoder_returns_raw_response(self, text: str) -> None:
        assert (
            "    def test_no_success(self, params: Optional[TestNoSuccessParams] = None)"
            " -> httpx.Response:"
        ) in text
        assert "        return self.call(TEST_NO_SUCCESS_REQUEST, params or {})" in text

    def test_method_docstring(self, text: str) -> None:
        assert '        """``GET /test-auth-bearer`` (testAuthBearer)."""' in text

    def test_no_httpx_import_when_every_operation_decodes(self, api_v3: ParsedSpec) -> None:
        text, _ = render_client(api_v3.meta, api_v3.operations)
        compile(text, "client.py", "exec")
        assert "import httpx" not in text
        assert "class TestAPIClient(r.ApiClient):" in text

    def test_missing_base_path(self) -> None:
        text, _ = render_client(SpecMetaInfo(title="Bare"), [])
        compile(text, "client.py", "exec")
        assert "    BASE_PATH = ''" in text
        assert "from .request_types import" not in text

    def test_trailing_slash_is_dropped(self) -> None:
        text, _ = render_client(SpecMetaInfo(title="Bare", base_path="/v1/"), [])
        assert "    BASE_PATH = '/v1'" in text


class TestRenderSpecModule:
    def test_document_literal(self, api_v2: ParsedSpec) -> None:
        text = render_spec_module(api_v2.document)
        namespace: dict[str, Any] = {}
        exec(compile(text, "spec.py", "exec"), namespace)
        assert namespace["SPEC"] == api_v2.document
