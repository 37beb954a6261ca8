"""Request descriptors used by generated ``request_types.py`` modules.

Every generated operation gets a :class:`RequestDescriptor` constant: the
method, path template, media types and, per parameter, where its value
goes.  :func:`build_request` turns a descriptor plus the caller's
parameter mapping into the keyword arguments of :meth:`httpx.Client.request`,
so generated clients stay declarative.

Only the standard headers a caller is expected to think about (auth,
content negotiation, caching) are listed in ``headers``; the others are
still sent, through their parameters.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import IO, Any, Optional, Union
from urllib.parse import quote

from pydantic import BaseModel
from pydantic_core import to_jsonable_python

File = Union[bytes, IO[bytes]]
"""Payload of a multipart or binary form upload."""

FileUpload = Union[bytes, IO[bytes], tuple[str, Union[bytes, IO[bytes]]]]
"""Payload of a ``type: file`` form parameter; a tuple adds a file name."""

STANDARD_HEADERS = (
    "Accept-Encoding",
    "Authorization",
    "Content-Type",
    "Host",
    "If-None-Match",
    "Ocp-Apim-Subscription-Key",
    "X-Functions-Key",
)

_AUTH_PREFIXES = {"bearer": "Bearer", "basic": "Basic"}


@dataclass(frozen=True)
class ParameterSpec:
    """Where one parameter of an operation is sent.

    ``name`` is the key in the caller's parameter mapping; ``wire_name`` is
    the name on the wire (header name, query key, path placeholder).
    ``auth_scheme`` is set for security-derived headers and selects the
    token prefix (``bearer``, ``basic`` or ``none``).
    """

    name: str
    location: str
    wire_name: str
    required: bool = True
    auth_scheme: Optional[str] = None


@dataclass(frozen=True)
class RequestDescriptor:
    """Static description of one operation."""

    method: str
    path: str
    operation_id: str
    parameters: tuple[ParameterSpec, ...] = ()
    headers: tuple[str, ...] = ()
    consumes: Optional[str] = None
    produces: Optional[str] = None


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    return to_jsonable_python(value, by_alias=True, exclude_none=True)


def _format_simple(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_format_simple(item) for item in value)
    if isinstance(value, (BaseModel, dict)):
        return json.dumps(_jsonable(value), separators=(",", ":"))
    return str(value)


def _auth_value(token: Any, scheme: Optional[str]) -> str:
    prefix = _AUTH_PREFIXES.get((scheme or "none").lower())
    token = str(token)
    if prefix is None or token.lower().startswith(prefix.lower() + " "):
        return token
    return f"{prefix} {token}"


def build_request(descriptor: RequestDescriptor, params: Mapping[str, Any]) -> dict[str, Any]:
    """Build :meth:`httpx.Client.request` keyword arguments for one call.

    Args:
        descriptor: The operation being called.
        params: The caller's parameters, keyed by
            :attr:`ParameterSpec.name`.  Optional parameters may be
            missing or ``None``.

    Returns:
        A dict with ``method`` and ``url``, plus ``params``, ``headers``,
        ``json``, ``content``, ``data`` and ``files`` where needed.

    Raises:
        ValueError: If a required parameter is missing, or *params* names
            a parameter the operation does not have.
    """
    known = {parameter.name for parameter in descriptor.parameters}
    unknown = sorted(set(params) - known)
    if unknown:
        raise ValueError(
            f"Unknown parameters for {descriptor.operation_id}: {', '.join(unknown)}"
        )

    path = descriptor.path
    query: dict[str, Any] = {}
    headers: dict[str, str] = {}
    cookies: dict[str, str] = {}
    data: dict[str, Any] = {}
    files: dict[str, Any] = {}
    body: Any = None
    has_body = False

    for parameter in descriptor.parameters:
        value = params.get(parameter.name)
        if value is None:
            if parameter.required:
                raise ValueError(
                    f"Missing required parameter {parameter.name!r} for {descriptor.operation_id}"
                )
            continue

        if parameter.location == "path":
            path = path.replace(
                "{" + parameter.wire_name + "}", quote(_format_simple(value), safe="")
            )
        elif parameter.location == "query":
            query[parameter.wire_name] = (
                [_format_simple(item) for item in value]
                if isinstance(value, (list, tuple))
                else _format_simple(value)
            )
        elif parameter.location == "header":
            headers[parameter.wire_name] = (
                _auth_value(value, parameter.auth_scheme)
                if parameter.auth_scheme is not None
                else _format_simple(value)
            )
        elif parameter.location == "cookie":
            cookies[parameter.wire_name] = _format_simple(value)
        elif parameter.location == "formData":
            if isinstance(value, (bytes, tuple)) or hasattr(value, "read"):
                files[parameter.wire_name] = value
            else:
                data[parameter.wire_name] = _format_simple(value)
        elif parameter.location == "body":
            body = value
            has_body = True

    request: dict[str, Any] = {"method": descriptor.method.upper(), "url": path}
    if query:
        request["params"] = query
    if cookies:
        headers["Cookie"] = "; ".join(f"{key}={value}" for key, value in cookies.items())
    if descriptor.produces:
        headers.setdefault("Accept", descriptor.produces)

    if has_body:
        if isinstance(body, (bytes, str)):
            request["content"] = body
            if descriptor.consumes:
                headers.setdefault("Content-Type", descriptor.consumes)
        else:
            request["json"] = _jsonable(body)
    if files:
        request["files"] = files
    if data:
        request["data"] = data
    if headers:
        request["headers"] = headers
    return request
