"""Support library imported by generated code.

Generated modules import this package as ``r`` and use it for request
descriptors (:mod:`specgen.runtime.requests`), response decoders
(:mod:`specgen.runtime.responses`), the client base class
(:mod:`specgen.runtime.client`) and the binding of model modules
(:mod:`specgen.runtime.models`).
"""

from specgen.runtime.client import (
    ApiClient,
    ApiClientError,
    ResponseDecodeError,
    UnexpectedResponseError,
)
from specgen.runtime.models import link_models
from specgen.runtime.requests import (
    STANDARD_HEADERS,
    File,
    FileUpload,
    ParameterSpec,
    RequestDescriptor,
    build_request,
)
from specgen.runtime.responses import (
    BasicError,
    DecodeFailure,
    DecoderOverrideError,
    DecodeResult,
    ResponseDecoder,
    ResponseLike,
    ResponseType,
    Status,
    basic_error_response_decoder,
    compose_response_decoders,
    constant_response_decoder,
    io_response_decoder,
    is_decoder_type,
    merge_decoder_types,
    response_decoder_for,
)

__all__ = [
    "STANDARD_HEADERS",
    "ApiClient",
    "ApiClientError",
    "BasicError",
    "DecodeFailure",
    "DecodeResult",
    "DecoderOverrideError",
    "File",
    "FileUpload",
    "ParameterSpec",
    "RequestDescriptor",
    "ResponseDecodeError",
    "ResponseDecoder",
    "ResponseLike",
    "ResponseType",
    "Status",
    "UnexpectedResponseError",
    "basic_error_response_decoder",
    "build_request",
    "compose_response_decoders",
    "constant_response_decoder",
    "io_response_decoder",
    "is_decoder_type",
    "link_models",
    "merge_decoder_types",
    "response_decoder_for",
]
