"""Expand pointers into external files so a document is self-contained.

Specifications are often split across files::

    definitions:
      Person:
        $ref: "definitions.yaml#/definitions/Person"

:class:`DefinitionFlattener` rewrites such a document so that every pointer
is local.  The rules mirror what a reader of the generated code expects:

* A top-level definition whose body is a bare pointer into another file is an
  **alias**: it takes the body of its target, and every other pointer to that
  target becomes a pointer to the alias.
* Inside a definition, a pointer to any other external schema is **inlined**
  by value, recursively.  ``Person.address`` pointing at an external
  ``Address`` becomes an inline object; no ``Address`` definition appears.
* If inlining would recurse forever, the schema that closes the cycle is
  **promoted** to a top-level definition and referenced by pointer.
* Outside definitions (operations, parameters, responses), external schemas
  are always promoted, and external parameters are added to the parameter
  registry.  Other external pointers are inlined.

Pointers that are already local are left untouched.  Fragment files are
loaded once each.

Cycles are detected with the set of targets currently being expanded on
the branch, copied per branch so that siblings do not interfere.
"""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any, Callable, Optional
from urllib.parse import urljoin

from specgen.exceptions import SpecParseError, UnresolvableReferenceError
from specgen.parser.adapter import SpecAdapter
from specgen.parser.loader import load_fragment_file
from specgen.parser.pointer import (
    DefinitionPointer,
    ParameterPointer,
    parse_pointer,
    resolve_pointer,
)

logger = logging.getLogger(__name__)

FragmentLoader = Callable[[str], dict[str, Any]]
"""Loads the document at a location (absolute path or URL)."""

_Target = tuple[str, str]
"""An absolute pointer target: ``(location, "#/fragment")``."""


def _is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


class DefinitionFlattener:
    """Rewrite a document so all ``$ref`` pointers are local.

    Args:
        adapter: Adapter over the working document.  Its document is
            not modified; :meth:`flatten` returns a new one.
        source: Location of the working document (path or URL), used to
            resolve relative file parts.  ``None`` for in-memory documents,
            in which case file parts are resolved against the current
            directory.
        loader: Collaborator loading a fragment file by location.

    Example::

        adapter = get_adapter(load_spec("api.yaml"))
        document = DefinitionFlattener(adapter, source="api.yaml").flatten()
    """

    def __init__(
        self,
        adapter: SpecAdapter,
        source: Optional[str] = None,
        loader: Optional[FragmentLoader] = None,
    ) -> None:
        self.adapter = adapter
        self._loader = loader or load_fragment_file
        self._source = self._normalize(source) if source else None
        self._cache: dict[str, dict[str, Any]] = {}
        self._aliases: dict[_Target, str] = {}
        self._promoted: dict[_Target, str] = {}
        self._promoted_definitions: dict[str, Any] = {}
        self._promoted_parameters: dict[str, Any] = {}
        self._taken_definitions: set[str] = set(adapter.definitions())
        self._taken_parameters: set[str] = set(adapter.parameters_registry())

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def flatten(self) -> dict[str, Any]:
        """Return a self-contained copy of the working document."""
        definitions = self.flatten_definitions()

        remainder = copy.deepcopy(self.adapter.document)
        _pop_path(remainder, self.adapter.definitions_location)
        document = self._expand(remainder, None, frozenset(), inline=False)

        definitions.update(
            (name, body)
            for name, body in self._promoted_definitions.items()
            if name not in definitions
        )
        if definitions:
            _set_path(document, self.adapter.definitions_location, definitions)
        if self._promoted_parameters:
            registry = _get_path(document, self.adapter.parameters_location) or {}
            registry.update(self._promoted_parameters)
            _set_path(document, self.adapter.parameters_location, registry)
        return document

    def flatten_definitions(self) -> dict[str, Any]:
        """Return the working document's definitions with external pointers expanded.

        Definitions promoted while flattening are appended after the
        declared ones, in promotion order.
        """
        raw_definitions = self.adapter.definitions()
        for name, body in raw_definitions.items():
            target = self._external_target(body, None)
            if target is not None and set(body) <= {"$ref", "description", "title"}:
                self._aliases[target] = name

        flattened: dict[str, Any] = {}
        for name, body in raw_definitions.items():
            target = self._external_target(body, None)
            if target is not None and self._aliases.get(target) == name:
                flattened[name] = self._expand(
                    self._load_target(target), target[0], frozenset({target}), inline=True
                )
            else:
                flattened[name] = self._expand(body, None, frozenset(), inline=True)

        for name, body in self._promoted_definitions.items():
            flattened.setdefault(name, body)
        return flattened

    # ------------------------------------------------------------------
    # Expansion
    # ------------------------------------------------------------------

    def _expand(
        self, node: Any, context: Optional[str], stack: frozenset[_Target], inline: bool
    ) -> Any:
        """Expand every pointer inside *node*.

        Args:
            node: The node to expand.
            context: Location of the file *node* comes from; ``None`` for
                the working document.
            stack: Targets currently being inlined on this branch.
            inline: ``True`` inside definitions (external schemas are
                inlined), ``False`` elsewhere (they are promoted).
        """
        if isinstance(node, list):
            return [self._expand(item, context, stack, inline) for item in node]
        if not isinstance(node, dict):
            return node
        if isinstance(node.get("$ref"), str):
            return self._expand_ref(node, context, stack, inline)
        return {key: self._expand(value, context, stack, inline) for key, value in node.items()}

    def _expand_ref(
        self, node: dict[str, Any], context: Optional[str], stack: frozenset[_Target], inline: bool
    ) -> Any:
        ref: str = node["$ref"]
        target = self._external_target(node, context)
        if target is None:
            if context is None:
                return dict(node)
            # A fragment pointing back into the working document
            return {**node, "$ref": "#" + ref.partition("#")[2]}

        pointer = parse_pointer(ref)
        if target in self._aliases:
            return {"$ref": self.adapter.definition_pointer(self._aliases[target])}
        if target in self._promoted:
            return {"$ref": self._local_pointer(pointer, self._promoted[target])}

        if isinstance(pointer, ParameterPointer):
            name = self._reserve(target, pointer)
            self._promoted_parameters[name] = self._expand(
                self._load_target(target), target[0], stack | {target}, inline=False
            )
            return {"$ref": self.adapter.parameter_pointer(name)}

        if isinstance(pointer, DefinitionPointer) and not inline:
            name = self._reserve(target, pointer)
            self._promoted_definitions[name] = self._expand(
                self._load_target(target), target[0], frozenset({target}), inline=True
            )
            return {"$ref": self.adapter.definition_pointer(name)}

        if target in stack:
            name = self._reserve(target, pointer)
            logger.debug("Promoting %s to definition %r to break a cycle", ref, name)
            return {"$ref": self.adapter.definition_pointer(name)}

        body = self._expand(self._load_target(target), target[0], stack | {target}, inline)
        if target in self._promoted:
            # A nested pointer closed a cycle back to this target
            name = self._promoted[target]
            self._promoted_definitions[name] = body
            return {"$ref": self.adapter.definition_pointer(name)}
        return body

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _reserve(self, target: _Target, pointer: Any) -> str:
        """Pick a free top-level name for a promoted target."""
        is_parameter = isinstance(pointer, ParameterPointer)
        taken = self._taken_parameters if is_parameter else self._taken_definitions
        base = pointer.name if pointer is not None else target[1].rsplit("/", 1)[-1]
        name = base
        counter = 2
        while name in taken:
            name = f"{base}{counter}"
            counter += 1
        taken.add(name)
        self._promoted[target] = name
        return name

    def _local_pointer(self, pointer: Any, name: str) -> str:
        if isinstance(pointer, ParameterPointer):
            return self.adapter.parameter_pointer(name)
        return self.adapter.definition_pointer(name)

    def _external_target(self, node: Any, context: Optional[str]) -> Optional[_Target]:
        """Return the absolute target of *node*'s pointer, or ``None`` if it is local."""
        if not isinstance(node, dict) or not isinstance(node.get("$ref"), str):
            return None
        file_part, _, fragment = node["$ref"].partition("#")
        location = self._locate(file_part or None, context)
        if location is None or location == self._source:
            return None
        return location, "#" + fragment

    def _locate(self, file_part: Optional[str], context: Optional[str]) -> Optional[str]:
        if file_part is None:
            return context
        if _is_url(file_part):
            return file_part
        anchor = context or self._source
        if anchor is not None and _is_url(anchor):
            return urljoin(anchor, file_part)
        base = Path(anchor).parent if anchor is not None else Path(".")
        return self._normalize(str(base / file_part))

    @staticmethod
    def _normalize(location: str) -> str:
        return location if _is_url(location) else os.path.normpath(location)

    def _load_target(self, target: _Target) -> Any:
        location, fragment = target
        if location not in self._cache:
            logger.debug("Loading external fragment file %s", location)
            self._cache[location] = self._loader(location)
        try:
            return resolve_pointer(self._cache[location], fragment)
        except SpecParseError as exc:
            raise UnresolvableReferenceError(
                f"{location}{fragment}", f"Cannot resolve external reference: {exc}"
            ) from exc


def _get_path(document: dict[str, Any], path: tuple[str, ...]) -> Optional[dict[str, Any]]:
    current: Any = document
    for segment in path:
        if not isinstance(current, dict):
            return None
        current = current.get(segment)
    return current if isinstance(current, dict) else None


def _set_path(document: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    current = document
    for segment in path[:-1]:
        current = current.setdefault(segment, {})
    current[path[-1]] = value


def _pop_path(document: dict[str, Any], path: tuple[str, ...]) -> None:
    parent = _get_path(document, path[:-1]) if len(path) > 1 else document
    if parent is not None:
        parent.pop(path[-1], None)
