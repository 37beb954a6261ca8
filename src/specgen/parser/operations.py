"""Parse path items into :class:`~specgen.models.OperationInfo` records.

The parser is written once against :class:`~specgen.parser.adapter.SpecAdapter`
and never branches on the dialect itself.  For each path it first collects
the path-level parameters and the globally required auth headers, which are
prepended to the parameters of every operation on that path.  Then, per
operation:

1. operation-level auth headers;
2. the operation's own parameters, inline or by pointer;
3. the request body (OpenAPI 3 only; Swagger 2 bodies are parameters).

Responses map to a type name: the pointed definition, ``bytes`` for an
inline binary schema, or one of the caller-supplied defaults.

Malformed pieces (unsupported methods, missing ``operationId``, pointers
that cannot be followed) are skipped with a warning.  The one exception is a
parameter ``$ref`` that is not a JSON pointer at all: nothing can be
inferred from it, so it raises
:class:`~specgen.exceptions.UnresolvableReferenceError`.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from specgen.exceptions import SpecParseError, UnresolvableReferenceError
from specgen.models import (
    ABSENT_PAYLOAD_TYPE,
    BINARY_TYPE,
    BODY_METHODS,
    FILE_TYPE,
    FILE_UPLOAD_TYPE,
    SUPPORTED_METHODS,
    HeaderParameterInfo,
    HTTPMethod,
    OperationInfo,
    ParameterInfo,
    ParameterLocation,
    ResponseInfo,
    is_success_status,
)
from specgen.parser.adapter import MULTIPART_MEDIA_TYPE, SpecAdapter
from specgen.parser.auth import get_auth_headers
from specgen.parser.pointer import (
    DefinitionPointer,
    ParameterPointer,
    parse_pointer,
    resolve_pointer,
)

logger = logging.getLogger(__name__)

CONTENT_TYPE_HEADER = "Content-Type"

_HTTP_METHODS = {method.value for method in HTTPMethod}


def _uncapitalize(value: str) -> str:
    return value[:1].lower() + value[1:]


def _optional_marker(name: str, required: bool) -> str:
    return name if required else f"{name}?"


def _make_parameter(name: str, location: str, type_name: str, declared: str) -> ParameterInfo:
    if location == ParameterLocation.HEADER.value:
        return HeaderParameterInfo(
            name=name, location=location, type=type_name, header_name=declared
        )
    parameter = ParameterInfo(name=name, location=location, type=type_name)
    if parameter.bare_name != declared:
        return parameter.model_copy(update={"wire_name": declared})
    return parameter


class OperationParser:
    """Turns the path items of one document into operation records.

    Args:
        adapter: Adapter over a self-contained (flattened) document.
        default_success_type: Type name for ``2xx`` responses without a
            schema pointer.
        default_error_type: Type name for every other response without a
            schema pointer.
    """

    def __init__(
        self,
        adapter: SpecAdapter,
        default_success_type: str = ABSENT_PAYLOAD_TYPE,
        default_error_type: str = ABSENT_PAYLOAD_TYPE,
    ) -> None:
        self.adapter = adapter
        self.default_success_type = default_success_type
        self.default_error_type = default_error_type
        self._registry = adapter.parameters_registry()
        self._schemes = adapter.security_schemes()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse_all_operations(self) -> list[OperationInfo]:
        """Parse every supported operation of the document, in path order.

        When two operations share an ``operationId`` the later one is
        skipped with a warning.
        """
        global_security = self.adapter.global_security()
        global_auth = (
            get_auth_headers(self._schemes, global_security)
            if global_security is not None
            else []
        )

        operations: list[OperationInfo] = []
        seen_ids: set[str] = set()
        for path, path_item in self.adapter.path_items().items():
            if not isinstance(path_item, dict):
                continue
            path_parameters = self._parse_parameter_list(path_item.get("parameters"), path)
            for key in path_item:
                operation = self.parse_operation(path, key, path_parameters, global_auth)
                if operation is None:
                    continue
                if operation.operation_id in seen_ids:
                    logger.warning(
                        "Skipping duplicate operationId [%s] at %s %s",
                        operation.operation_id,
                        operation.method.value.upper(),
                        path,
                    )
                    continue
                seen_ids.add(operation.operation_id)
                operations.append(operation)
        return operations

    def parse_operation(
        self,
        path: str,
        method_key: str,
        path_parameters: Optional[list[ParameterInfo]] = None,
        global_auth: Optional[list[ParameterInfo]] = None,
    ) -> Optional[OperationInfo]:
        """Parse the operation stored under *method_key* of the path item at *path*.

        Args:
            path: The path template, e.g. ``"/pets/{petId}"``.
            method_key: The path item key (``"get"``, ``"post"``, ...).
                Keys that are not HTTP methods are ignored silently.
            path_parameters: Parameters declared on the path item.
            global_auth: Auth headers required by the document-level
                security requirements.

        Returns:
            The parsed operation, or ``None`` if it was skipped.
        """
        path_item = self.adapter.path_items().get(path)
        if not isinstance(path_item, dict):
            logger.warning("Cannot find api path %s", path)
            return None

        method_name = method_key.lower()
        if method_name not in _HTTP_METHODS:
            return None
        method = HTTPMethod(method_name)
        if method not in SUPPORTED_METHODS:
            logger.warning("Skipping unsupported method [%s] at %s", method_name, path)
            return None

        operation = path_item.get(method_key)
        if not isinstance(operation, dict):
            return None
        operation_id = operation.get("operationId")
        if not operation_id:
            logger.warning("Skipping method with missing operationId [%s] at %s", method_name, path)
            return None

        path_parameters = list(path_parameters or [])
        global_auth = list(global_auth or [])
        imported_types: list[str] = []

        operation_security = operation.get("security")
        operation_auth = (
            get_auth_headers(self._schemes, operation_security)
            if isinstance(operation_security, list)
            else []
        )
        operation_parameters = self._parse_parameter_list(
            operation.get("parameters"), operation_id, imported_types
        )
        body_parameters = self._parse_request_body(operation, method, imported_types)
        for parameter in path_parameters:
            self._note_import(parameter, imported_types)

        parameters = [
            *path_parameters,
            *global_auth,
            *operation_auth,
            *operation_parameters,
            *body_parameters,
        ]

        headers: list[str] = []
        if method in BODY_METHODS and (operation_parameters or body_parameters):
            headers.append(CONTENT_TYPE_HEADER)
        for parameter in [*operation_auth, *global_auth, *path_parameters]:
            if isinstance(parameter, HeaderParameterInfo) and parameter.header_name not in headers:
                headers.append(parameter.header_name)

        responses = self._parse_responses(operation, imported_types)

        return OperationInfo(
            method=method,
            operation_id=operation_id,
            path=path,
            parameters=parameters,
            responses=responses,
            headers=headers,
            imported_types=imported_types,
            consumes=None if method is HTTPMethod.GET else self.adapter.operation_consumes(operation),
            produces=self.adapter.operation_produces(operation),
        )

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    def _parse_parameter_list(
        self, raw_parameters: Any, context: str, imported_types: Optional[list[str]] = None
    ) -> list[ParameterInfo]:
        if not isinstance(raw_parameters, list):
            return []
        parsed: list[ParameterInfo] = []
        for raw in raw_parameters:
            if not isinstance(raw, dict):
                continue
            parameter = self.parse_parameter(raw, context)
            if parameter is None:
                continue
            if imported_types is not None:
                self._note_import(parameter, imported_types)
            parsed.append(parameter)
        return parsed

    def parse_parameter(self, raw: dict[str, Any], context: str = "") -> Optional[ParameterInfo]:
        """Parse one parameter object, inline or by pointer.

        Args:
            raw: The parameter object or a ``{"$ref": ...}`` pointer to the
                parameter registry.
            context: Operation id or path, used in warnings.

        Returns:
            The parsed parameter, or ``None`` if it had to be dropped.
        """
        if "$ref" in raw or "$ref" in self.adapter.parameter_schema(raw):
            return self._parse_pointer_parameter(raw, context)

        type_name = self._inline_type(raw)
        if type_name is None:
            logger.warning(
                "Skipping parameter without a type in operation [%s] [%s]",
                context,
                raw.get("name"),
            )
            return None
        name = raw.get("name", "")
        return _make_parameter(
            _optional_marker(name, raw.get("required") is True),
            raw.get("in", ""),
            type_name,
            name,
        )

    def _parse_pointer_parameter(self, raw: dict[str, Any], context: str) -> Optional[ParameterInfo]:
        is_registry_pointer = "$ref" in raw
        ref = raw["$ref"] if is_registry_pointer else self.adapter.parameter_schema(raw)["$ref"]
        pointer = parse_pointer(ref)
        if pointer is None:
            raise UnresolvableReferenceError(
                str(ref), f"Cannot classify parameter pointer {ref!r} in operation [{context}]"
            )

        if not is_registry_pointer:
            # Inline parameter whose schema points to a definition
            if not isinstance(pointer, DefinitionPointer):
                logger.warning("Unrecognized ref type [%s] in operation [%s]", ref, context)
                return None
            name = raw.get("name", "")
            return _make_parameter(
                _optional_marker(_uncapitalize(name), raw.get("required") is True),
                raw.get("in", ""),
                pointer.name,
                name,
            )

        if not isinstance(pointer, ParameterPointer):
            logger.warning("Unrecognized ref type [%s] in operation [%s]", ref, context)
            return None

        entry = self._registry.get(pointer.name)
        if not isinstance(entry, dict) or "$ref" in entry:
            logger.warning("Cannot resolve parameter %s in operation [%s]", pointer.name, context)
            return None

        entry_ref = self.adapter.parameter_schema(entry).get("$ref")
        if entry_ref is not None:
            target = parse_pointer(entry_ref)
            if not isinstance(target, DefinitionPointer):
                logger.warning("Unrecognized ref type [%s] in parameter %s", entry_ref, pointer.name)
                return None
            type_name: Optional[str] = target.name
        else:
            type_name = self._inline_type(entry)
        if type_name is None:
            logger.warning("Cannot resolve parameter %s in operation [%s]", pointer.name, context)
            return None

        name = entry.get("name", "")
        return _make_parameter(
            _optional_marker(_uncapitalize(name), entry.get("required") is True),
            entry.get("in", ""),
            type_name,
            name,
        )

    def _inline_type(self, parameter: dict[str, Any]) -> Optional[str]:
        schema = self.adapter.parameter_schema(parameter)
        location = parameter.get("in")
        if location == ParameterLocation.FORM_DATA.value and schema.get("format") == "binary":
            return FILE_TYPE
        schema_type = schema.get("type")
        if schema_type == "integer":
            return "number"
        if schema_type == "file":
            return FILE_UPLOAD_TYPE
        if schema_type is None and location == ParameterLocation.BODY.value:
            return schema.get("title") or "object"
        return schema_type

    def _parse_request_body(
        self, operation: dict[str, Any], method: HTTPMethod, imported_types: list[str]
    ) -> list[ParameterInfo]:
        if method not in BODY_METHODS:
            return []
        body = self.adapter.request_body(operation)
        if body is None:
            return []
        content_type, schema = body
        name = _optional_marker("body", self.adapter.request_body_required(operation))

        if content_type == MULTIPART_MEDIA_TYPE:
            return [ParameterInfo(name=name, location=ParameterLocation.FORM_DATA.value, type=FILE_TYPE)]

        pointer = parse_pointer(schema.get("$ref"))
        if isinstance(pointer, DefinitionPointer):
            type_name = pointer.name
            if type_name not in imported_types:
                imported_types.append(type_name)
        else:
            type_name = schema.get("title") or "object"
        return [ParameterInfo(name=name, location=ParameterLocation.BODY.value, type=type_name)]

    def _note_import(self, parameter: ParameterInfo, imported_types: list[str]) -> None:
        if parameter.type in self.adapter.definitions() and parameter.type not in imported_types:
            imported_types.append(parameter.type)

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    def _parse_responses(
        self, operation: dict[str, Any], imported_types: list[str]
    ) -> list[ResponseInfo]:
        raw_responses = operation.get("responses")
        if not isinstance(raw_responses, dict):
            return []

        responses: list[ResponseInfo] = []
        for raw_status, response in raw_responses.items():
            status = str(raw_status)
            response = self._follow_response_pointer(response, status, operation)
            schema = self.adapter.response_schema(response)
            pointer = parse_pointer(schema.get("$ref")) if schema else None

            if isinstance(pointer, DefinitionPointer):
                type_name = pointer.name
                if type_name not in imported_types:
                    imported_types.append(type_name)
            elif schema is not None and schema.get("format") == "binary":
                type_name = BINARY_TYPE
            else:
                if pointer is not None:
                    logger.warning(
                        "Response %s of [%s] points outside definitions (%s); using default type",
                        status,
                        operation.get("operationId"),
                        pointer.ref,
                    )
                type_name = (
                    self.default_success_type
                    if is_success_status(status)
                    else self.default_error_type
                )

            responses.append(
                ResponseInfo(
                    status=status,
                    type_name=type_name,
                    header_names=self.adapter.response_header_names(response),
                )
            )
        return responses

    def _follow_response_pointer(
        self, response: Any, status: str, operation: dict[str, Any]
    ) -> dict[str, Any]:
        if not isinstance(response, dict):
            return {}
        ref = response.get("$ref")
        if not isinstance(ref, str):
            return response
        try:
            target = resolve_pointer(self.adapter.document, ref)
        except SpecParseError:
            logger.warning(
                "Cannot resolve response %s of [%s] (%s); using default type",
                status,
                operation.get("operationId"),
                ref,
            )
            return {}
        return target if isinstance(target, dict) else {}


def parse_all_operations(
    adapter: SpecAdapter,
    default_success_type: str = ABSENT_PAYLOAD_TYPE,
    default_error_type: str = ABSENT_PAYLOAD_TYPE,
) -> list[OperationInfo]:
    """Convenience wrapper around :meth:`OperationParser.parse_all_operations`."""
    return OperationParser(adapter, default_success_type, default_error_type).parse_all_operations()
