"""Render one :class:`~specgen.models.Definition` as a pydantic module.

Each top-level definition becomes one module holding one main class, named
after the definition, plus the auxiliary classes its inline parts need:

============================  ==============================================
Definition                    Emitted
============================  ==============================================
object with ``properties``    ``BaseModel`` subclass, one field per property
``oneOf``                     ``RootModel`` with ``root: Union[...]``
``allOf``                     subclass of every pointed model, plus the
                              properties of inline members; with no object
                              member, ``RootModel`` over the first member
``enum``                      ``Enum`` subclass (``x-extensible-enum``:
                              ``RootModel`` over ``str`` listing the values)
pointer                       module-level alias of the pointed class
array, map, scalar            ``RootModel`` over ``list``, ``dict`` or the
                              scalar, with constraints as ``Field(...)``
============================  ==============================================

Inline objects and enums inside properties become auxiliary classes named
after their owner and property (``PetStatus`` for ``Pet.status``), emitted
ahead of the main class.

Models are strict (``extra="forbid"``) unless the options turn strict
interfaces off or the definition says otherwise through
``additionalProperties``.

Sibling definitions named only in annotations are imported for type
checking alone; base classes and alias targets are imported outright.
A string property with ``x-import`` is typed with the class named after
its ``format``, imported from the ``x-import`` module.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Optional

from specgen.models import Definition, GenerationOptions
from specgen.render.context import RenderContext
from specgen.render.environment import render
from specgen.render.naming import class_name, enum_member_name, field_name, unique

logger = logging.getLogger(__name__)

_SCALAR_TYPES = {"integer": "int", "number": "float", "boolean": "bool", "string": "str"}
_ENUM_BASES = {"string": "str", "integer": "int", "number": "float"}
_STRING_FORMATS = {"date-time": "datetime.datetime", "date": "datetime.date", "binary": "bytes"}


@dataclass
class ClassSpec:
    """One class (or alias) of a generated module, ready for the template.

    ``body`` holds the lines of the class body, unindented; an empty
    string is a blank line.
    """

    name: str
    kind: str
    bases: list[str] = field(default_factory=list)
    description: Optional[str] = None
    body: list[str] = field(default_factory=list)
    target: Optional[str] = None


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(value)


def constraint_kwargs(definition: Definition) -> list[str]:
    """``Field`` keyword arguments for the numeric and string constraints of *definition*."""
    kwargs: list[str] = []
    if definition.minimum is not None:
        key = "gt" if definition.exclusive_minimum is True else "ge"
        kwargs.append(f"{key}={_number(definition.minimum)}")
    elif not isinstance(definition.exclusive_minimum, (bool, type(None))):
        kwargs.append(f"gt={_number(definition.exclusive_minimum)}")
    if definition.maximum is not None:
        key = "lt" if definition.exclusive_maximum is True else "le"
        kwargs.append(f"{key}={_number(definition.maximum)}")
    elif not isinstance(definition.exclusive_maximum, (bool, type(None))):
        kwargs.append(f"lt={_number(definition.exclusive_maximum)}")
    if definition.min_length is not None:
        kwargs.append(f"min_length={definition.min_length}")
    if definition.max_length is not None:
        kwargs.append(f"max_length={definition.max_length}")
    if definition.pattern is not None:
        kwargs.append(f"pattern={definition.pattern!r}")
    return kwargs


def _is_object(definition: Definition) -> bool:
    return definition.properties is not None or definition.type == "object"


def value_definitions(definitions: Mapping[str, Definition]) -> frozenset[str]:
    """Names of the definitions whose main class is not a ``BaseModel`` with fields.

    These render as root models, enums or aliases of either, so an
    ``allOf`` pointing at them cannot subclass them.
    """

    def is_model(name: str, seen: frozenset[str]) -> bool:
        definition = definitions.get(name)
        if definition is None or name in seen:
            return False
        seen = seen | {name}
        if definition.is_ref:
            return is_model(definition.ref_name or "", seen)
        if definition.one_of:
            return False
        if definition.all_of:
            return bool(definition.properties) or any(
                bool(member.properties)
                or (member.is_ref and is_model(member.ref_name or "", seen))
                for member in definition.all_of
            )
        return not definition.enum and bool(definition.properties)

    return frozenset(name for name in definitions if not is_model(name, frozenset()))


class DefinitionRenderer:
    """Builds the :class:`ClassSpec` list of one definition module.

    Args:
        options: Supplies strictness and property camel-casing.
        context: Accumulator for this module's imports and auxiliary
            classes.
    """

    def __init__(self, options: GenerationOptions, context: RenderContext) -> None:
        self.options = options
        self.context = context
        self._current: Optional[str] = None
        context.taken_names.update(class_name(name) for name in context.known_definitions)

    # ------------------------------------------------------------------
    # Top level
    # ------------------------------------------------------------------

    def render_class(self, name: str, definition: Definition) -> ClassSpec:
        """Build the main class of the module for definition *name*."""
        self._current = name
        cls = class_name(name)
        self.context.taken_names.add(cls)
        description = definition.description or definition.title

        if definition.is_ref:
            return ClassSpec(
                name=cls, kind="alias", target=self.reference(definition, runtime=True)
            )
        if definition.one_of:
            return self._root_class(cls, self._union(definition.one_of, cls), description)
        if definition.all_of:
            if not self._is_object_all_of(definition):
                return self._root_class(cls, self._all_of_value(definition, cls), description)
            return self._all_of_class(cls, definition, description)
        if definition.enum:
            if definition.extensible_enum:
                return self._extensible_enum_class(cls, definition, description)
            return self._enum_class(cls, definition, description)
        if definition.properties:
            return self._model_class(cls, definition, description)
        return self._root_class(cls, self.type_expr(definition, cls), description)

    # ------------------------------------------------------------------
    # Type expressions
    # ------------------------------------------------------------------

    def reference(self, definition: Definition, runtime: bool = False) -> str:
        """Class name for a pointer node, importing the sibling module.

        Args:
            definition: The pointer node.
            runtime: The name is evaluated when the module runs (a base
                class, an alias target) rather than only in annotations.
        """
        name = definition.ref_name or ""
        if name == self._current:
            return class_name(name)
        if name not in self.context.known_definitions:
            logger.warning(
                "Pointer %s does not name a known definition; typing it as Any", definition.ref
            )
            self.context.add_typing("Any")
            return "Any"
        self.context.add_import(name, typing_only=not runtime)
        return class_name(name)

    def type_expr(self, definition: Definition, hint: str, constrain: bool = True) -> str:
        """Annotation for *definition*, creating auxiliary classes as needed.

        Args:
            definition: The node to type.
            hint: Name for an auxiliary class, should one be needed.
            constrain: Wrap constrained scalars in ``Annotated[..., Field(...)]``.
                Properties pass ``False`` and put the constraints on their
                own ``Field``.
        """
        if definition.is_ref:
            return self.reference(definition)
        if definition.one_of:
            return self._union(definition.one_of, hint)
        if definition.all_of:
            if len(definition.all_of) == 1:
                return self.type_expr(definition.all_of[0], hint, constrain)
            if not self._is_object_all_of(definition):
                return self._all_of_value(definition, hint)
            spec = self._all_of_class(self._claim(hint), definition, definition.description)
            self.context.add_alias(spec)
            return spec.name
        if definition.enum:
            if definition.extensible_enum:
                return self._scalar(definition)
            spec = self._enum_class(self._claim(hint), definition, None)
            self.context.add_alias(spec)
            return spec.name
        if definition.properties:
            spec = self._model_class(self._claim(hint), definition, definition.description)
            self.context.add_alias(spec)
            return spec.name
        if _is_object(definition):
            values = definition.additional_properties
            if isinstance(values, Definition):
                return f"dict[str, {self.type_expr(values, hint + 'Value')}]"
            self.context.add_typing("Any")
            return "dict[str, Any]"
        if definition.type == "array":
            if definition.items is None:
                self.context.add_typing("Any")
                return "list[Any]"
            return f"list[{self.type_expr(definition.items, hint + 'Item')}]"

        scalar = self._scalar(definition)
        kwargs = constraint_kwargs(definition) if constrain else []
        if kwargs and scalar != "Any":
            self.context.add_typing("Annotated")
            self.context.add_pydantic("Field")
            return f"Annotated[{scalar}, Field({', '.join(kwargs)})]"
        return scalar

    def _scalar(self, definition: Definition) -> str:
        if definition.x_import and definition.format:
            imported = class_name(definition.format)
            self.context.add_from(definition.x_import, imported)
            self.context.taken_names.add(imported)
            return imported
        if definition.type == "string" and definition.format in _STRING_FORMATS:
            annotation = _STRING_FORMATS[definition.format]
            if annotation.startswith("datetime."):
                self.context.add_module("datetime")
            return annotation
        if definition.type in _SCALAR_TYPES:
            return _SCALAR_TYPES[definition.type]
        if definition.type == "null":
            return "None"
        if definition.enum and all(isinstance(value, str) for value in definition.enum):
            return "str"
        self.context.add_typing("Any")
        return "Any"

    def _union(self, members: list[Definition], hint: str) -> str:
        options: list[str] = []
        for index, member in enumerate(members, start=1):
            option = self.type_expr(member, f"{hint}Option{index}")
            if option not in options:
                options.append(option)
        if len(options) == 1:
            return options[0]
        self.context.add_typing("Union")
        return f"Union[{', '.join(options)}]"

    def _claim(self, hint: str) -> str:
        return unique(class_name(hint), self.context.taken_names)

    # ------------------------------------------------------------------
    # Class shapes
    # ------------------------------------------------------------------

    def _extra(self, definition: Definition) -> str:
        if definition.additional_properties is False:
            return "forbid"
        if definition.additional_properties is not None:
            return "allow"
        return "forbid" if self.options.strict_interfaces else "allow"

    def _fields(
        self,
        owner: str,
        properties: dict[str, Definition],
        required: set[str],
        taken: set[str],
    ) -> list[str]:
        lines: list[str] = []
        for key, prop in properties.items():
            annotation = self.type_expr(prop, owner + class_name(key), constrain=False)
            name = field_name(key, self.options.camel_cased_props)
            if name in self.context.taken_names:
                # A field named like a class would shadow it in annotations
                name = f"{name}_"
            name = unique(name, taken)

            kwargs: list[str] = []
            is_required = key in required
            if not is_required:
                if annotation != "Any":
                    self.context.add_typing("Optional")
                    annotation = f"Optional[{annotation}]"
                kwargs.append(f"default={prop.default!r}")
            if name != key:
                kwargs.append(f"alias={key!r}")
            kwargs.extend(constraint_kwargs(prop))
            if prop.description:
                kwargs.append(f"description={prop.description!r}")

            if kwargs == [f"default={prop.default!r}"]:
                lines.append(f"{name}: {annotation} = {prop.default!r}")
            elif kwargs:
                self.context.add_pydantic("Field")
                lines.append(f"{name}: {annotation} = Field({', '.join(kwargs)})")
            else:
                lines.append(f"{name}: {annotation}")
        return lines

    def _is_model_ref(self, member: Definition) -> bool:
        name = member.ref_name
        return (
            member.is_ref
            and name != self._current
            and name in self.context.known_definitions
            and name not in self.context.value_definitions
        )

    def _is_object_all_of(self, definition: Definition) -> bool:
        """Whether the ``allOf`` of *definition* has a member with fields."""
        if definition.properties:
            return True
        return any(
            bool(member.properties) or self._is_model_ref(member)
            for member in definition.all_of or []
        )

    def _all_of_value(self, definition: Definition, hint: str) -> str:
        """Annotation of an ``allOf`` without object members: its first pointer, if any."""
        members = definition.all_of or []
        member = next((member for member in members if member.is_ref), members[0])
        return self.type_expr(member, hint)

    def _model_class(
        self, cls: str, definition: Definition, description: Optional[str]
    ) -> ClassSpec:
        self.context.add_pydantic("BaseModel", "ConfigDict")
        body = [f'model_config = ConfigDict(extra="{self._extra(definition)}", populate_by_name=True)']
        fields = self._fields(
            cls, definition.properties or {}, set(definition.required or ()), set()
        )
        if fields:
            body += ["", *fields]
        return ClassSpec(
            name=cls, kind="model", bases=["BaseModel"], description=description, body=body
        )

    def _all_of_class(
        self, cls: str, definition: Definition, description: Optional[str]
    ) -> ClassSpec:
        bases: list[str] = []
        properties: dict[str, Definition] = {}
        required: set[str] = set()
        for member in definition.all_of or []:
            if self._is_model_ref(member):
                base = self.reference(member, runtime=True)
                if base not in bases:
                    bases.append(base)
            elif member.properties:
                properties.update(member.properties)
                required.update(member.required or ())
            else:
                logger.debug("Ignoring allOf member of %s that is not an object", cls)
        properties.update(definition.properties or {})
        required.update(definition.required or ())

        self.context.add_pydantic("ConfigDict")
        if not bases:
            self.context.add_pydantic("BaseModel")
            bases = ["BaseModel"]
        body = [f'model_config = ConfigDict(extra="{self._extra(definition)}", populate_by_name=True)']
        fields = self._fields(cls, properties, required, set())
        if fields:
            body += ["", *fields]
        return ClassSpec(name=cls, kind="model", bases=bases, description=description, body=body)

    def _enum_class(
        self, cls: str, definition: Definition, description: Optional[str]
    ) -> ClassSpec:
        self.context.add_from("enum", "Enum")
        values = definition.enum or []
        enum_type = definition.type
        if enum_type is None and all(isinstance(value, str) for value in values):
            enum_type = "string"
        mixin = _ENUM_BASES.get(enum_type or "")
        bases = [mixin, "Enum"] if mixin else ["Enum"]

        taken: set[str] = set()
        body = [f"{unique(enum_member_name(value), taken)} = {value!r}" for value in values]
        return ClassSpec(name=cls, kind="enum", bases=bases, description=description, body=body)

    def _extensible_enum_class(
        self, cls: str, definition: Definition, description: Optional[str]
    ) -> ClassSpec:
        known = ", ".join(repr(value) for value in definition.enum or [])
        text = f"{description}\n\nKnown values: {known}" if description else f"Known values: {known}"
        return self._root_class(cls, self._scalar(definition), text)

    def _root_class(self, cls: str, annotation: str, description: Optional[str]) -> ClassSpec:
        # Annotating ``root`` rather than parametrizing RootModel keeps the
        # annotation lazy, so it may name a sibling imported for type checking.
        self.context.add_pydantic("RootModel")
        return ClassSpec(
            name=cls,
            kind="root",
            bases=["RootModel"],
            description=description,
            body=[f"root: {annotation}"],
        )


def render_definition(
    name: str,
    definition: Definition,
    options: Optional[GenerationOptions] = None,
    context: Optional[RenderContext] = None,
) -> tuple[str, RenderContext]:
    """Render the module for definition *name*.

    Args:
        name: The definition's top-level name.
        definition: The normalized definition.
        options: Generation options; defaults when ``None``.
        context: The module's accumulator.  A new one (knowing only *name*)
            is created when ``None``; pass one built with every definition
            name so pointers to siblings are imported.

    Returns:
        The module source and the context it was rendered with.

    Raises:
        RenderError: If the template fails.
    """
    options = options or GenerationOptions()
    context = context or RenderContext(known_definitions=frozenset({name}))
    renderer = DefinitionRenderer(options, context)
    main = renderer.render_class(name, definition)
    own = frozenset({name})
    type_checking_imports = context.type_checking_imports(exclude=own)
    text = render(
        "definition.py.j2",
        {
            "name": name,
            "module_doc": definition.description or definition.title or name,
            "import_groups": context.import_groups(exclude=own),
            "type_checking_imports": type_checking_imports,
            "classes": [*context.aliases, main],
        },
    )
    return text, context
