"""Per-render accumulator of imports and auxiliary classes.

Rendering one module collects, as it walks the IR, what the module must
import and which auxiliary classes (inline enums, inline objects) must be
emitted ahead of the main class.  A :class:`RenderContext` holds that state
for exactly one module.  Every render call takes an optional context and
returns the one it used, so callers thread it explicitly, and two renders
never share one unless the caller passes it on deliberately.

Sibling definitions are imported one of two ways.  A name needed while the
module executes (a base class, an alias target) is imported outright.  A
name used only in annotations is imported under ``if TYPE_CHECKING:``, so
definitions may refer to each other; the generated package binds those
names when it is imported (see :func:`specgen.runtime.link_models`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from specgen.render.naming import class_name

_STDLIB = frozenset({"datetime", "enum", "typing"})


@dataclass
class RenderContext:
    """Imports and auxiliary classes collected while rendering one module.

    Attributes:
        known_definitions: Names of every top-level definition of the
            document, so references can be resolved to sibling modules.
        value_definitions: The known definitions whose class is not a
            ``BaseModel`` with fields (root models, enums, aliases of
            those), and so cannot be subclassed.
        imports: Definition names to import from sibling modules, in first
            use order.
        type_imports: Definition names used only in annotations.
        from_imports: ``module -> names`` for ``from module import ...``
            lines (``typing``, ``pydantic``, ``enum``, ...).
        module_imports: Whole modules to import (``datetime``).
        aliases: Auxiliary class specs, in the order they must be emitted.
        taken_names: Class names already used in the module.
    """

    known_definitions: frozenset[str] = frozenset()
    value_definitions: frozenset[str] = frozenset()
    imports: list[str] = field(default_factory=list)
    type_imports: list[str] = field(default_factory=list)
    from_imports: dict[str, set[str]] = field(default_factory=dict)
    module_imports: set[str] = field(default_factory=set)
    aliases: list[Any] = field(default_factory=list)
    taken_names: set[str] = field(default_factory=set)

    def add_import(self, name: str, typing_only: bool = False) -> None:
        target = self.type_imports if typing_only else self.imports
        if name not in target:
            target.append(name)

    def add_from(self, module: str, *names: str) -> None:
        self.from_imports.setdefault(module, set()).update(names)

    def add_typing(self, *names: str) -> None:
        self.add_from("typing", *names)

    def add_pydantic(self, *names: str) -> None:
        self.add_from("pydantic", *names)

    def add_module(self, name: str) -> None:
        self.module_imports.add(name)

    def add_alias(self, spec: Any) -> None:
        self.aliases.append(spec)

    def fork(self) -> RenderContext:
        """A fresh context for another module of the same document."""
        return RenderContext(
            known_definitions=self.known_definitions,
            value_definitions=self.value_definitions,
        )

    def type_checking_imports(self, exclude: frozenset[str] = frozenset()) -> list[str]:
        """Sibling import lines for names used only in annotations.

        Names also imported outright are left out.  A non-empty result
        registers ``TYPE_CHECKING`` with the ``typing`` imports, so call
        this before :meth:`import_groups`.
        """
        lines = [
            f"from .{class_name(name)} import {class_name(name)}"
            for name in sorted(self.type_imports)
            if name not in exclude and name not in self.imports
        ]
        if lines:
            self.add_typing("TYPE_CHECKING")
        return lines

    def import_groups(self, exclude: frozenset[str] = frozenset()) -> list[list[str]]:
        """Import lines grouped as stdlib, third party and sibling modules.

        Args:
            exclude: Definition names not to import (the module's own).
        """
        stdlib = [f"import {name}" for name in sorted(self.module_imports) if name in _STDLIB]
        third_party = [
            f"import {name}" for name in sorted(self.module_imports) if name not in _STDLIB
        ]
        for module in sorted(self.from_imports):
            line = f"from {module} import {', '.join(sorted(self.from_imports[module]))}"
            if module in _STDLIB:
                stdlib.append(line)
            else:
                third_party.append(line)
        siblings = [
            f"from .{class_name(name)} import {class_name(name)}"
            for name in sorted(self.imports)
            if name not in exclude
        ]
        return [group for group in (stdlib, third_party, siblings) if group]
