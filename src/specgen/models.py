"""Canonical Pydantic models shared across all specgen modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into two groups:

**Configuration models** -- the options a caller hands to the generator:
    :class:`GenerationOptions`.

**Intermediate representation** -- produced by the parser and consumed by the
renderer:
    :class:`Dialect`, :class:`HTTPMethod`, :class:`ParameterLocation`,
    :class:`Definition`, :class:`ParameterInfo`, :class:`HeaderParameterInfo`,
    :class:`AuthHeaderParameterInfo`, :class:`ResponseInfo`,
    :class:`OperationInfo`, :class:`SpecMetaInfo` and :class:`ParsedSpec`.

IR models are frozen: once the parser has built a record, nothing downstream
may change it. :class:`Definition` uses field aliases matching the OpenAPI
keyword spelling (``$ref``, ``oneOf``, ``additionalProperties``, ...), so
``definition.model_dump(by_alias=True, exclude_none=True)`` yields a document
fragment again.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, model_validator

ABSENT_PAYLOAD_TYPE = "undefined"
"""Type name standing for "no payload expected" (default for unreferenced responses)."""

BASIC_ERROR_TYPE = "Error"
"""Type name that selects the generic error-envelope decoder."""

BINARY_TYPE = "bytes"
"""Type name used for responses whose inline schema has ``format: binary``."""

FILE_TYPE = "File"
"""Opaque type name used for multipart and binary form uploads."""

FILE_UPLOAD_TYPE = "FileUpload"
"""Opaque type name used for Swagger 2 ``type: file`` form parameters."""


# --- Configuration ---


class GenerationOptions(BaseModel):
    """Options controlling what the generator emits and how.

    Loaded by :func:`~specgen.config.resolve_options` from CLI flags,
    ``SPECGEN_*`` environment variables and ``./specgen.json``. The flags
    imply each other the same way the generated modules depend on each
    other: the client needs response decoders, and decoders live in the
    request-types module.

    Example::

        GenerationOptions(generate_client=True, camel_cased_props=True)
    """

    model_config = ConfigDict(extra="forbid")

    strict_interfaces: bool = Field(
        default=True, description="Generated models reject unknown properties"
    )
    camel_cased_props: bool = Field(
        default=False, description="Rename snake_case properties to camelCase"
    )
    default_success_type: str = Field(
        default=ABSENT_PAYLOAD_TYPE,
        description="Type name for 2xx responses that declare no schema pointer",
    )
    default_error_type: str = Field(
        default=ABSENT_PAYLOAD_TYPE,
        description="Type name for non-2xx responses that declare no schema pointer",
    )
    generate_request_types: bool = Field(
        default=False, description="Emit request_types.py"
    )
    generate_response_decoders: bool = Field(
        default=False, description="Emit response decoders (implies request types)"
    )
    generate_client: bool = Field(
        default=False, description="Emit client.py (implies request types and decoders)"
    )
    spec_module: Optional[str] = Field(
        default=None,
        description="If set, also emit the raw document as a Python module with this name",
    )
    concurrency: Optional[int] = Field(
        default=None, ge=1, description="Maximum number of concurrent render tasks"
    )

    @model_validator(mode="after")
    def _apply_implications(self) -> GenerationOptions:
        if self.generate_client:
            self.generate_response_decoders = True
        if self.generate_response_decoders:
            self.generate_request_types = True
        return self


# --- Intermediate representation ---


class Dialect(str, Enum):
    """The two specification dialects specgen understands."""

    SWAGGER_2 = "swagger2"
    OPENAPI_3 = "openapi3"


class HTTPMethod(str, Enum):
    """HTTP methods recognised as operation keys of a path item."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"
    TRACE = "trace"


SUPPORTED_METHODS = frozenset(
    {HTTPMethod.GET, HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.DELETE, HTTPMethod.PATCH}
)
"""Methods for which request types are generated; others are skipped with a warning."""

BODY_METHODS = frozenset({HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH})
"""Methods that carry a request body and therefore a ``Content-Type`` header."""


class ParameterLocation(str, Enum):
    """Locations where a parameter can appear, per the OpenAPI ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"
    BODY = "body"
    FORM_DATA = "formData"


class Definition(BaseModel):
    """A normalized schema node.

    One instance is created per named schema (and per inline occurrence)
    by :func:`~specgen.parser.definitions.parse_definition`. A node that is a
    pointer to another named schema carries ``ref`` and nothing structural.

    ``one_of`` and ``all_of`` are mutually exclusive; construction fails if
    both are populated.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ref: Optional[str] = Field(default=None, alias="$ref")
    type: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    format: Optional[str] = None
    default: Any = None
    properties: Optional[dict[str, Definition]] = None
    required: Optional[list[str]] = None
    items: Optional[Definition] = None
    additional_properties: Optional[Union[bool, Definition]] = Field(
        default=None, alias="additionalProperties"
    )
    enum: Optional[list[Any]] = None
    extensible_enum: bool = Field(default=False, exclude=True)
    one_of: Optional[list[Definition]] = Field(default=None, alias="oneOf")
    all_of: Optional[list[Definition]] = Field(default=None, alias="allOf")
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    exclusive_minimum: Optional[Union[bool, float]] = Field(
        default=None, alias="exclusiveMinimum"
    )
    exclusive_maximum: Optional[Union[bool, float]] = Field(
        default=None, alias="exclusiveMaximum"
    )
    min_length: Optional[int] = Field(default=None, alias="minLength")
    max_length: Optional[int] = Field(default=None, alias="maxLength")
    pattern: Optional[str] = None
    x_import: Optional[str] = Field(default=None, alias="x-import")

    @model_validator(mode="after")
    def _check_composition(self) -> Definition:
        if self.one_of and self.all_of:
            raise ValueError("a definition cannot declare both oneOf and allOf")
        return self

    @property
    def is_ref(self) -> bool:
        """Whether this node is a pointer to another definition."""
        return self.ref is not None

    @property
    def ref_name(self) -> Optional[str]:
        """The last segment of ``ref`` (the referenced definition's name)."""
        if self.ref is None:
            return None
        return self.ref.rsplit("/", 1)[-1]


class ParameterInfo(BaseModel):
    """A request parameter as it appears in a generated request type.

    ``name`` ends with ``?`` when the parameter is optional; the type is the
    same either way.  Parameters taken from the parameters registry have
    their first letter lower-cased in ``name``; ``wire_name`` then keeps the
    declared spelling.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    type: str
    location: str = Field(alias="in")
    wire_name: Optional[str] = Field(
        default=None, description="Declared name, when ``name`` was derived from it and differs"
    )

    @property
    def is_required(self) -> bool:
        return not self.name.endswith("?")

    @property
    def bare_name(self) -> str:
        """``name`` without the optional marker."""
        return self.name[:-1] if self.name.endswith("?") else self.name

    @property
    def declared_name(self) -> str:
        """The name sent on the wire: path placeholder, query key or form field."""
        return self.wire_name or self.bare_name


class HeaderParameterInfo(ParameterInfo):
    """A parameter sent as an HTTP header."""

    header_name: str


class AuthHeaderParameterInfo(HeaderParameterInfo):
    """A header parameter derived from a security scheme.

    ``name`` is the security scheme key, ``token_type`` one of ``basic``,
    ``apiKey`` or ``oauth2``, and ``auth_scheme`` the prefix the client puts
    in front of the token (``bearer``, ``basic``) or ``none``.
    """

    token_type: str
    auth_scheme: str = "none"


def is_success_status(status: str) -> bool:
    """Whether *status* is a three-digit ``2xx`` code."""
    return len(status) == 3 and status.startswith("2") and status.isdigit()


class ResponseInfo(BaseModel):
    """One declared response of an operation."""

    model_config = ConfigDict(frozen=True)

    status: str
    type_name: str
    header_names: tuple[str, ...] = ()

    @property
    def is_success(self) -> bool:
        return is_success_status(self.status)


class OperationInfo(BaseModel):
    """A single parsed operation (one path + HTTP method + operationId).

    Parameter order is significant: path-level parameters first, then
    security-derived headers, then the operation's own parameters and body.
    """

    model_config = ConfigDict(frozen=True)

    method: HTTPMethod
    operation_id: str
    path: str
    parameters: list[SerializeAsAny[ParameterInfo]] = Field(default_factory=list)
    responses: list[ResponseInfo] = Field(default_factory=list)
    headers: list[str] = Field(default_factory=list)
    imported_types: list[str] = Field(
        default_factory=list, description="Definition names referenced, deduplicated"
    )
    consumes: Optional[str] = None
    produces: Optional[str] = None


class SpecMetaInfo(BaseModel):
    """Document-level metadata used by the client template."""

    model_config = ConfigDict(frozen=True)

    base_path: Optional[str] = None
    version: Optional[str] = None
    title: Optional[str] = None


class ParsedSpec(BaseModel):
    """Complete parsed representation of a specification document.

    Produced by :func:`~specgen.parser.extractor.extract_spec` and consumed by
    :func:`~specgen.generator.generate_api`.
    """

    dialect: Dialect
    meta: SpecMetaInfo
    definitions: dict[str, Definition] = Field(default_factory=dict)
    operations: list[OperationInfo] = Field(default_factory=list)
    document: Optional[dict[str, Any]] = Field(
        default=None, description="Original document for reference"
    )
