"""Dialect adapters: one read-only view per supported document dialect.

Swagger 2.0 and OpenAPI 3.x describe the same things in different places
(``definitions`` vs ``components/schemas``, ``consumes`` vs
``requestBody.content``, ...).  Everything that differs between the two is
answered by a :class:`SpecAdapter`, so the operation parser and the
extraction pipeline are written once against this interface.

The dialect is decided exactly once, by :func:`get_adapter`, from the
top-level marker field (``swagger`` or ``openapi``); the version value is
not inspected.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any, Optional

from specgen.exceptions import SpecParseError
from specgen.models import Dialect, SpecMetaInfo
from specgen.parser.pointer import local_ref, resolve_pointer

DEFAULT_MEDIA_TYPE = "application/json"
MULTIPART_MEDIA_TYPE = "multipart/form-data"

_SCHEME_AND_AUTHORITY = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://[^/]*")


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _first(values: Any) -> Optional[str]:
    if isinstance(values, list) and values:
        return values[0]
    return None


class SpecAdapter(ABC):
    """Read-only accessors over a raw document of one dialect.

    Args:
        document: The parsed document, as returned by
            :func:`~specgen.parser.loader.load_spec`.  It is never modified.
    """

    dialect: Dialect
    definitions_location: tuple[str, ...]
    parameters_location: tuple[str, ...]

    def __init__(self, document: dict[str, Any]) -> None:
        self.document = document

    # ------------------------------------------------------------------
    # Document-level accessors
    # ------------------------------------------------------------------

    @abstractmethod
    def security_schemes(self) -> dict[str, Any]:
        """Return the security scheme registry (name -> scheme object)."""
        ...

    @abstractmethod
    def parameters_registry(self) -> dict[str, Any]:
        """Return the reusable parameter registry (name -> parameter object)."""
        ...

    @abstractmethod
    def definitions(self) -> dict[str, Any]:
        """Return the raw named schemas (name -> schema object)."""
        ...

    @abstractmethod
    def base_path(self) -> Optional[str]:
        """Return the path prefix shared by every operation, if any."""
        ...

    @abstractmethod
    def global_consumes(self) -> Optional[str]:
        ...

    @abstractmethod
    def global_produces(self) -> Optional[str]:
        ...

    def definition_pointer(self, name: str) -> str:
        """Return this document's own pointer to the definition *name*."""
        return local_ref(self.definitions_location, name)

    def parameter_pointer(self, name: str) -> str:
        return local_ref(self.parameters_location, name)

    def path_items(self) -> dict[str, Any]:
        return _mapping(self.document.get("paths"))

    def global_security(self) -> Optional[list[dict[str, Any]]]:
        """Return the top-level security requirements.

        ``None`` when the document declares none, which is different from
        an explicit empty list.
        """
        security = self.document.get("security")
        return security if isinstance(security, list) else None

    def spec_meta(self) -> SpecMetaInfo:
        info = _mapping(self.document.get("info"))
        version = info.get("version")
        return SpecMetaInfo(
            base_path=self.base_path(),
            version=str(version) if version is not None else None,
            title=info.get("title"),
        )

    # ------------------------------------------------------------------
    # Operation-level accessors
    # ------------------------------------------------------------------

    @abstractmethod
    def parameter_schema(self, parameter: dict[str, Any]) -> dict[str, Any]:
        """Return the schema-like object describing a parameter's type.

        For a Swagger 2 non-body parameter this is the parameter itself;
        otherwise it is the nested ``schema``.
        """
        ...

    @abstractmethod
    def request_body(self, operation: dict[str, Any]) -> Optional[tuple[str, dict[str, Any]]]:
        """Return ``(content_type, schema)`` of the operation's request body.

        Swagger 2 documents carry bodies as ``in: body`` parameters and
        always return ``None`` here.
        """
        ...

    def request_body_required(self, operation: dict[str, Any]) -> bool:
        return False

    @abstractmethod
    def response_schema(self, response: dict[str, Any]) -> Optional[dict[str, Any]]:
        ...

    @abstractmethod
    def operation_consumes(self, operation: dict[str, Any]) -> str:
        ...

    @abstractmethod
    def operation_produces(self, operation: dict[str, Any]) -> Optional[str]:
        ...

    def response_header_names(self, response: dict[str, Any]) -> tuple[str, ...]:
        return tuple(_mapping(response.get("headers")).keys())


class SwaggerV2Adapter(SpecAdapter):
    """Adapter for Swagger 2.0 documents (``swagger: "2.0"``)."""

    dialect = Dialect.SWAGGER_2
    definitions_location = ("definitions",)
    parameters_location = ("parameters",)

    def security_schemes(self) -> dict[str, Any]:
        return _mapping(self.document.get("securityDefinitions"))

    def parameters_registry(self) -> dict[str, Any]:
        return _mapping(self.document.get("parameters"))

    def definitions(self) -> dict[str, Any]:
        return _mapping(self.document.get("definitions"))

    def base_path(self) -> Optional[str]:
        return self.document.get("basePath")

    def global_consumes(self) -> Optional[str]:
        return _first(self.document.get("consumes"))

    def global_produces(self) -> Optional[str]:
        return _first(self.document.get("produces"))

    def parameter_schema(self, parameter: dict[str, Any]) -> dict[str, Any]:
        if parameter.get("in") == "body":
            return _mapping(parameter.get("schema"))
        return parameter

    def request_body(self, operation: dict[str, Any]) -> Optional[tuple[str, dict[str, Any]]]:
        return None

    def response_schema(self, response: dict[str, Any]) -> Optional[dict[str, Any]]:
        schema = response.get("schema")
        return schema if isinstance(schema, dict) else None

    def operation_consumes(self, operation: dict[str, Any]) -> str:
        return _first(operation.get("consumes")) or self.global_consumes() or DEFAULT_MEDIA_TYPE

    def operation_produces(self, operation: dict[str, Any]) -> Optional[str]:
        return _first(operation.get("produces")) or self.global_produces()


class OpenAPIV3Adapter(SpecAdapter):
    """Adapter for OpenAPI 3.x documents (``openapi: "3.x.y"``)."""

    dialect = Dialect.OPENAPI_3
    definitions_location = ("components", "schemas")
    parameters_location = ("components", "parameters")

    def _components(self) -> dict[str, Any]:
        return _mapping(self.document.get("components"))

    def security_schemes(self) -> dict[str, Any]:
        return _mapping(self._components().get("securitySchemes"))

    def parameters_registry(self) -> dict[str, Any]:
        return _mapping(self._components().get("parameters"))

    def definitions(self) -> dict[str, Any]:
        return _mapping(self._components().get("schemas"))

    def base_path(self) -> Optional[str]:
        servers = self.document.get("servers")
        if not isinstance(servers, list) or not servers:
            return None
        url = _mapping(servers[0]).get("url")
        if not isinstance(url, str):
            return None
        return _SCHEME_AND_AUTHORITY.sub("", url)

    def global_consumes(self) -> Optional[str]:
        return None

    def global_produces(self) -> Optional[str]:
        return None

    def parameter_schema(self, parameter: dict[str, Any]) -> dict[str, Any]:
        return _mapping(parameter.get("schema"))

    def _request_body_object(self, operation: dict[str, Any]) -> dict[str, Any]:
        body = _mapping(operation.get("requestBody"))
        ref = body.get("$ref")
        if isinstance(ref, str) and ref.startswith("#/"):
            # Shared request bodies live under components/requestBodies
            body = _mapping(resolve_pointer(self.document, ref))
        return body

    def _request_body_content(self, operation: dict[str, Any]) -> dict[str, Any]:
        return _mapping(self._request_body_object(operation).get("content"))

    def request_body_required(self, operation: dict[str, Any]) -> bool:
        return self._request_body_object(operation).get("required") is True

    def request_body(self, operation: dict[str, Any]) -> Optional[tuple[str, dict[str, Any]]]:
        content = self._request_body_content(operation)
        if not content:
            return None
        content_type = MULTIPART_MEDIA_TYPE if MULTIPART_MEDIA_TYPE in content else next(iter(content))
        return content_type, _mapping(_mapping(content[content_type]).get("schema"))

    def response_schema(self, response: dict[str, Any]) -> Optional[dict[str, Any]]:
        content = _mapping(response.get("content"))
        for media in content.values():
            schema = _mapping(media).get("schema")
            if isinstance(schema, dict):
                return schema
        return None

    def operation_consumes(self, operation: dict[str, Any]) -> str:
        content = self._request_body_content(operation)
        return next(iter(content), DEFAULT_MEDIA_TYPE)

    def operation_produces(self, operation: dict[str, Any]) -> Optional[str]:
        for response in _mapping(operation.get("responses")).values():
            content = _mapping(_mapping(response).get("content"))
            if content:
                return next(iter(content))
        return DEFAULT_MEDIA_TYPE


def get_adapter(document: dict[str, Any]) -> SpecAdapter:
    """Select the adapter for *document* by its top-level marker field.

    Args:
        document: A parsed specification document.

    Returns:
        A :class:`SwaggerV2Adapter` when ``swagger`` is present, an
        :class:`OpenAPIV3Adapter` when ``openapi`` is present.

    Raises:
        SpecParseError: If neither marker field is present.
    """
    if "swagger" in document:
        return SwaggerV2Adapter(document)
    if "openapi" in document:
        return OpenAPIV3Adapter(document)
    raise SpecParseError(
        "Document declares neither 'swagger' nor 'openapi'; cannot determine its dialect"
    )
