"""Base class for generated API clients.

A generated ``client.py`` subclasses :class:`ApiClient` and adds one method
per operation.  Each method hands its :class:`~specgen.runtime.requests.RequestDescriptor`,
the caller's parameters and the operation's decoder to :meth:`ApiClient.call`,
which sends the request through :class:`httpx.Client` and decodes the
response.

Example::

    with PetstoreClient("https://petstore.example.com/v1") as client:
        result = client.get_pet_by_id({"petId": "42"})
        if result.status == 200:
            print(result.value.name)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional, cast

import httpx

from specgen.runtime.requests import RequestDescriptor, build_request
from specgen.runtime.responses import DecodeFailure, ResponseDecoder, ResponseType

logger = logging.getLogger(__name__)


class ApiClientError(Exception):
    """Base class for errors raised by generated clients."""


class UnexpectedResponseError(ApiClientError):
    """The response status is not one the operation declares."""

    def __init__(self, operation_id: str, response: httpx.Response):
        super().__init__(
            f"Unexpected response {response.status_code} from {operation_id}"
        )
        self.response = response


class ResponseDecodeError(ApiClientError):
    """The response status is declared, but its payload has the wrong shape."""

    def __init__(self, operation_id: str, failure: DecodeFailure, response: httpx.Response):
        super().__init__(f"{operation_id}: {failure}")
        self.failure = failure
        self.response = response


class ApiClient:
    """Synchronous client over :class:`httpx.Client`.

    Must be used as a context manager (or closed with :meth:`close`) so the
    underlying transport is released.

    Args:
        base_url: Scheme, host and base path of the API.
        timeout: Request timeout in seconds.
        headers: Headers sent with every request.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers=dict(headers or {}),
            transport=transport,
            follow_redirects=True,
        )

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------ #
    # Calls
    # ------------------------------------------------------------------ #

    def call(
        self,
        descriptor: RequestDescriptor,
        params: Mapping[str, Any],
        decoder: Optional[ResponseDecoder] = None,
    ) -> Any:
        """Send one request and decode its response.

        Args:
            descriptor: The operation being called.
            params: The operation's parameters.
            decoder: Decoder for the operation's responses.  When ``None``
                the raw :class:`httpx.Response` is returned.

        Returns:
            The decoded :class:`~specgen.runtime.responses.ResponseType`,
            or the raw response when no decoder is given.

        Raises:
            UnexpectedResponseError: The status is not declared.
            ResponseDecodeError: The payload does not match its declared type.
        """
        request = build_request(descriptor, params)
        logger.debug("%s %s", request["method"], request["url"])
        response = self._client.request(**request)
        if decoder is None:
            return response

        result = decoder(response)
        if result is None:
            raise UnexpectedResponseError(descriptor.operation_id, response)
        if isinstance(result, DecodeFailure):
            raise ResponseDecodeError(descriptor.operation_id, result, response)
        return cast(ResponseType, result)
