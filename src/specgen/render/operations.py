"""Render :class:`~specgen.models.OperationInfo` records as request types.

Each operation contributes one block to ``request_types.py``:

* ``<Op>Params`` -- a ``TypedDict`` of the parameters, optional ones as
  ``NotRequired``;
* ``<OP>_REQUEST`` -- a :class:`~specgen.runtime.RequestDescriptor`;
* ``<Op>Response`` -- the union of the declared responses, each a
  :class:`~specgen.runtime.ResponseType` of its status, payload type and
  declared header names;
* with decoders enabled and a ``2xx`` response declared, the default status
  table and the decoder factories ``<op>_decoder(override_types=None)`` and
  ``<op>_default_decoder()``.

The decoder factory looks like::

    def get_pet_decoder(override_types: Any = None) -> r.ResponseDecoder:
        types = r.merge_decoder_types(GET_PET_DEFAULT_RESPONSES, override_types, 200)
        return r.compose_response_decoders(
            r.response_decoder_for(200, types[200], ()),
            r.response_decoder_for(404, types[404], ()),
        )

``override_types`` is either one payload type, which replaces the type of
the first ``2xx`` status (the *primary* status), or a mapping replacing the
types of the statuses it names.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from specgen.models import (
    ABSENT_PAYLOAD_TYPE,
    BASIC_ERROR_TYPE,
    BINARY_TYPE,
    FILE_TYPE,
    FILE_UPLOAD_TYPE,
    AuthHeaderParameterInfo,
    HeaderParameterInfo,
    OperationInfo,
    ParameterInfo,
    is_success_status,
)
from specgen.render.context import RenderContext
from specgen.render.environment import render
from specgen.render.naming import class_name, constant_case, snake_case, unique
from specgen.runtime.requests import STANDARD_HEADERS

_PARAMETER_TYPES = {
    "string": "str",
    "number": "float",
    "integer": "int",
    "boolean": "bool",
    FILE_TYPE: "r.File",
    FILE_UPLOAD_TYPE: "r.FileUpload",
}

# Method names of the generated client that operations must not shadow.
RESERVED_METHOD_NAMES = frozenset({"call", "close"})


@dataclass
class ResponseView:
    status: str
    annotation: str
    table_type: str
    header_names: tuple[str, ...]


@dataclass
class OperationView:
    """Everything the templates need to know about one operation."""

    operation_id: str
    method: str
    path: str
    prefix: str
    fn: str
    const: str
    params: list[tuple[str, str]] = field(default_factory=list)
    parameter_specs: list[str] = field(default_factory=list)
    headers: tuple[str, ...] = ()
    consumes: Optional[str] = None
    produces: Optional[str] = None
    responses: list[ResponseView] = field(default_factory=list)
    primary: Optional[str] = None
    has_decoder: bool = False
    has_required_params: bool = False


def status_literal(status: str) -> str:
    """``"200"`` -> ``200``; non-numeric keys stay strings."""
    return status if status.isdigit() else repr(status)


def primary_success_status(operation: OperationInfo) -> Optional[str]:
    """The first three-digit ``2xx`` status of *operation*, if any."""
    for response in operation.responses:
        if is_success_status(response.status):
            return response.status
    return None


class OperationRenderer:
    """Builds :class:`OperationView` records, collecting imports in a context.

    Args:
        context: Accumulator of the module being rendered.
        generate_decoders: Emit decoder factories.
    """

    def __init__(self, context: RenderContext, generate_decoders: bool = False) -> None:
        self.context = context
        self.generate_decoders = generate_decoders
        context.taken_names.update(RESERVED_METHOD_NAMES)

    def view(self, operation: OperationInfo) -> OperationView:
        fn = unique(snake_case(operation.operation_id), self.context.taken_names)
        primary = primary_success_status(operation)
        view = OperationView(
            operation_id=operation.operation_id,
            method=operation.method.value,
            path=operation.path,
            prefix=class_name("".join(part[:1].upper() + part[1:] for part in fn.split("_"))),
            fn=fn,
            const=constant_case(fn),
            headers=tuple(header for header in operation.headers if header in STANDARD_HEADERS),
            consumes=operation.consumes,
            produces=operation.produces,
            primary=status_literal(primary) if primary is not None else None,
            has_decoder=self.generate_decoders and primary is not None,
        )
        self.context.add_typing("TypedDict")
        if view.has_decoder:
            self.context.add_typing("Any")
        for parameter in operation.parameters:
            annotation = self.parameter_type(parameter.type)
            if not parameter.is_required:
                self.context.add_typing("NotRequired")
                annotation = f"NotRequired[{annotation}]"
            view.params.append((parameter.bare_name, annotation))
            view.parameter_specs.append(self._parameter_spec(parameter))
        view.has_required_params = any(p.is_required for p in operation.parameters)

        for response in operation.responses:
            view.responses.append(
                self._response(response.status, response.type_name, response.header_names)
            )
        return view

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def definition_type(self, type_name: str) -> Optional[str]:
        if type_name in self.context.known_definitions:
            self.context.add_import(type_name)
            return class_name(type_name)
        return None

    def parameter_type(self, type_name: str) -> str:
        """Annotation of a parameter whose IR type is *type_name*."""
        known = self.definition_type(type_name)
        if known is not None:
            return known
        if type_name in _PARAMETER_TYPES:
            return _PARAMETER_TYPES[type_name]
        if type_name == "array":
            self.context.add_typing("Any")
            return "list[Any]"
        self.context.add_typing("Any")
        return "dict[str, Any]" if type_name == "object" else "Any"

    def payload_type(self, type_name: str) -> str:
        """Runtime payload type of a response whose IR type is *type_name*."""
        if type_name == ABSENT_PAYLOAD_TYPE:
            return "None"
        if type_name == BASIC_ERROR_TYPE:
            return "r.BasicError"
        if type_name == BINARY_TYPE:
            return "bytes"
        known = self.definition_type(type_name)
        if known is not None:
            return known
        self.context.add_typing("Any")
        return "Any"

    def _response(self, status: str, type_name: str, header_names: tuple[str, ...]) -> ResponseView:
        payload = self.payload_type(type_name)
        literal = status_literal(status)
        self.context.add_typing("Literal", "Union")
        if header_names:
            headers = f"Literal[{', '.join(repr(name) for name in header_names)}]"
        else:
            self.context.add_typing("Never")
            headers = "Never"
        return ResponseView(
            status=literal,
            annotation=f"r.ResponseType[Literal[{literal}], {payload}, {headers}]",
            table_type=payload,
            header_names=tuple(header_names),
        )

    @staticmethod
    def _parameter_spec(parameter: ParameterInfo) -> str:
        wire_name = (
            parameter.header_name
            if isinstance(parameter, HeaderParameterInfo)
            else parameter.declared_name
        )
        args = [
            f"name={parameter.bare_name!r}",
            f"location={parameter.location!r}",
            f"wire_name={wire_name!r}",
        ]
        if not parameter.is_required:
            args.append("required=False")
        if isinstance(parameter, AuthHeaderParameterInfo):
            args.append(f"auth_scheme={parameter.auth_scheme!r}")
        return f"r.ParameterSpec({', '.join(args)})"


def render_operation(
    operation: OperationInfo,
    generate_decoders: bool = False,
    context: Optional[RenderContext] = None,
) -> tuple[str, RenderContext]:
    """Render the ``request_types.py`` block of one operation.

    The block does not include the module's imports; they are collected in
    the returned context.

    Args:
        operation: The operation to render.
        generate_decoders: Also emit the decoder factories.
        context: The module's accumulator; a new one when ``None``.

    Returns:
        The block source and the context it was rendered with.
    """
    context = context or RenderContext()
    view = OperationRenderer(context, generate_decoders).view(operation)
    return render("operation.py.j2", {"op": view}), context


def render_all_operations(
    operations: list[OperationInfo],
    generate_decoders: bool = False,
    context: Optional[RenderContext] = None,
) -> tuple[str, RenderContext]:
    """Render the whole ``request_types.py`` module.

    Operation blocks follow the order of *operations*.  Imports are
    collected across all blocks, so each definition is imported once.
    """
    context = context or RenderContext()
    renderer = OperationRenderer(context, generate_decoders)
    views = [renderer.view(operation) for operation in operations]
    context.add_from("specgen", "runtime as r")
    blocks = [render("operation.py.j2", {"op": view}) for view in views]
    text = render(
        "request_types.py.j2",
        {"import_groups": context.import_groups(), "blocks": blocks},
    )
    return text, context
