"""Response decoders used by generated ``request_types.py`` modules.

A *decoder* is a callable taking an HTTP response and returning:

* ``None`` when the response status is not the one it handles;
* a :class:`ResponseType` when it is, and the payload validated;
* a :class:`DecodeFailure` when it is, but the payload did not validate.

Per-status decoders are built with :func:`io_response_decoder`,
:func:`constant_response_decoder` and :func:`basic_error_response_decoder`,
then combined with :func:`compose_response_decoders`, which returns the
first non-``None`` result.  Payload validation goes through
:class:`pydantic.TypeAdapter`, so any type pydantic understands (models,
``list[...]``, ``Union[...]``, plain scalars) can describe a payload.

Generated decoder factories accept an override of their default type table;
:func:`merge_decoder_types` implements the merge and rejects malformed
overrides with :class:`DecoderOverrideError`.

Example::

    decoder = compose_response_decoders(
        io_response_decoder(200, Pet),
        constant_response_decoder(404),
    )
    result = decoder(httpx.get("https://example.com/pets/1"))
    if isinstance(result, ResponseType) and result.status == 200:
        print(result.value.name)
"""

from __future__ import annotations

import json
import typing
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, Generic, Optional, Protocol, TypeVar, Union

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError


S = TypeVar("S")
T = TypeVar("T")
H = TypeVar("H")

Status = Union[int, str]
"""A response key: the numeric status, or a non-numeric key such as ``"default"``."""


class ResponseLike(Protocol):
    """The part of :class:`httpx.Response` the decoders rely on."""

    status_code: int

    @property
    def headers(self) -> Mapping[str, str]: ...

    @property
    def content(self) -> bytes: ...

    @property
    def text(self) -> str: ...


@dataclass(frozen=True)
class ResponseType(Generic[S, T, H]):
    """A successfully decoded response.

    ``headers`` holds the declared response headers that were present,
    keyed by their declared spelling.
    """

    status: S
    value: T
    headers: Mapping[H, str] = field(default_factory=dict)


@dataclass(frozen=True)
class DecodeFailure:
    """The status matched but the payload did not have the expected shape."""

    status: Status
    errors: list[dict[str, Any]]

    def __str__(self) -> str:
        messages = "; ".join(str(error.get("msg", error)) for error in self.errors)
        return f"Cannot decode response with status {self.status}: {messages}"


class BasicError(BaseModel):
    """Generic error envelope: the response body as text."""

    model_config = ConfigDict(frozen=True)

    message: str = ""


DecodeResult = Optional[Union[ResponseType[Any, Any, Any], DecodeFailure]]
ResponseDecoder = Callable[[ResponseLike], DecodeResult]


class DecoderOverrideError(TypeError):
    """Raised by a decoder factory given an override it cannot use."""


# ------------------------------------------------------------------ #
# Per-status decoders
# ------------------------------------------------------------------ #


@lru_cache(maxsize=None)
def _adapter(type_: Any) -> TypeAdapter[Any]:
    return TypeAdapter(type_)


def _pick_headers(response: ResponseLike, header_names: tuple[str, ...]) -> dict[str, str]:
    picked: dict[str, str] = {}
    for name in header_names:
        value = response.headers.get(name)
        if value is not None:
            picked[name] = value
    return picked


def io_response_decoder(
    status: Status, type_: Any, header_names: tuple[str, ...] = ()
) -> ResponseDecoder:
    """Decode responses with *status* by validating the payload against *type_*.

    ``bytes`` takes the raw body; any other type is validated against the
    JSON-decoded body (``None`` for an empty body).
    """

    def decode(response: ResponseLike) -> DecodeResult:
        if response.status_code != status:
            return None
        headers = _pick_headers(response, header_names)
        if type_ is bytes:
            return ResponseType(status, response.content, headers)
        try:
            payload = json.loads(response.content) if response.content else None
        except ValueError as exc:
            return DecodeFailure(status, [{"type": "json_invalid", "msg": str(exc)}])
        try:
            value = _adapter(type_).validate_python(payload)
        except ValidationError as exc:
            return DecodeFailure(status, exc.errors(include_url=False))
        return ResponseType(status, value, headers)

    return decode


def constant_response_decoder(
    status: Status, value: Any = None, header_names: tuple[str, ...] = ()
) -> ResponseDecoder:
    """Decode responses with *status* to *value*, ignoring the body."""

    def decode(response: ResponseLike) -> DecodeResult:
        if response.status_code != status:
            return None
        return ResponseType(status, value, _pick_headers(response, header_names))

    return decode


def basic_error_response_decoder(
    status: Status, header_names: tuple[str, ...] = ()
) -> ResponseDecoder:
    """Decode responses with *status* to a :class:`BasicError` holding the body text."""

    def decode(response: ResponseLike) -> DecodeResult:
        if response.status_code != status:
            return None
        return ResponseType(
            status, BasicError(message=response.text), _pick_headers(response, header_names)
        )

    return decode


def response_decoder_for(
    status: Status, type_: Any, header_names: tuple[str, ...] = ()
) -> ResponseDecoder:
    """Pick the decoder for one entry of a status table.

    :class:`BasicError` selects :func:`basic_error_response_decoder`,
    ``None`` (no payload) :func:`constant_response_decoder`, and any other
    type :func:`io_response_decoder`.
    """
    if type_ is BasicError:
        return basic_error_response_decoder(status, header_names)
    if type_ is None:
        return constant_response_decoder(status, None, header_names)
    return io_response_decoder(status, type_, header_names)


def compose_response_decoders(*decoders: ResponseDecoder) -> ResponseDecoder:
    """Combine *decoders* into one that returns the first non-``None`` result."""
    if not decoders:
        raise ValueError("compose_response_decoders needs at least one decoder")

    def decode(response: ResponseLike) -> DecodeResult:
        for decoder in decoders:
            result = decoder(response)
            if result is not None:
                return result
        return None

    return decode


# ------------------------------------------------------------------ #
# Override tables
# ------------------------------------------------------------------ #


def is_decoder_type(value: Any) -> bool:
    """Whether *value* can describe a payload on its own.

    Classes (``Pet``, ``bytes``) and parameterized typing forms
    (``list[Pet]``, ``Optional[Pet]``) qualify; mappings never do, so a
    status table is never mistaken for a single type.
    """
    if isinstance(value, Mapping):
        return False
    return isinstance(value, type) or typing.get_origin(value) is not None


def merge_decoder_types(
    defaults: Mapping[Status, Any],
    override: Any = None,
    primary_status: Optional[Status] = None,
) -> dict[Status, Any]:
    """Merge a decoder factory's override over its default type table.

    Args:
        defaults: Status to payload type; ``None`` means no payload.
        override: ``None``, a single payload type applying to
            *primary_status*, or a mapping replacing some statuses.
        primary_status: The first ``2xx`` status of the operation.

    Returns:
        A new table; keys of *override* win.

    Raises:
        DecoderOverrideError: If *override* is neither a type nor a
            mapping, names statuses the operation does not declare, maps a
            status to something that is not a type, or is a single type
            while the operation has no ``2xx`` status.
    """
    merged = dict(defaults)
    if override is None:
        return merged

    if is_decoder_type(override):
        if primary_status is None:
            raise DecoderOverrideError(
                "A single decoder type needs a 2xx response to apply to"
            )
        merged[primary_status] = override
        return merged

    if not isinstance(override, Mapping):
        raise DecoderOverrideError(
            f"Decoder override must be a type or a status mapping, got {type(override).__name__}"
        )

    unknown = [status for status in override if status not in defaults]
    if unknown:
        raise DecoderOverrideError(
            f"Decoder override names undeclared statuses: {', '.join(map(str, unknown))}"
        )
    for status, type_ in override.items():
        if type_ is not None and not is_decoder_type(type_):
            raise DecoderOverrideError(
                f"Decoder override for status {status} is not a type: {type_!r}"
            )
        merged[status] = type_
    return merged
