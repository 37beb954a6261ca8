"""Bind the model modules of a generated package to each other.

Definition modules import the siblings they only mention in annotations
under ``if TYPE_CHECKING:``, so two definitions may refer to each other
without an import cycle.  Those names are therefore missing at runtime,
and pydantic leaves the affected models incomplete.  The generated
``__init__.py`` calls :func:`link_models`, which imports every model
module, makes each definition class visible in every model module, and
rebuilds the models.
"""

from __future__ import annotations

import importlib
from collections.abc import Iterable
from types import ModuleType
from typing import Any

from pydantic import BaseModel


def _own_models(module: ModuleType) -> list[type[BaseModel]]:
    return [
        value
        for value in list(vars(module).values())
        if isinstance(value, type)
        and issubclass(value, BaseModel)
        and value.__module__ == module.__name__
    ]


def link_models(package: str, names: Iterable[str]) -> None:
    """Import and rebuild the model modules *names* of *package*.

    Each module is named after the class it defines, as the generator
    lays packages out.

    Args:
        package: The generated package (its ``__name__``).
        names: Module names of the definitions, relative to *package*.

    Raises:
        pydantic.PydanticUndefinedAnnotation: If an annotation names a
            class that no module defines.
    """
    modules = [importlib.import_module(f"{package}.{name}") for name in names]
    namespace: dict[str, Any] = {}
    for module in modules:
        name = module.__name__.rpartition(".")[2]
        namespace[name] = getattr(module, name)

    for module in modules:
        for name, value in namespace.items():
            vars(module).setdefault(name, value)
    for module in modules:
        for model in _own_models(module):
            model.model_rebuild(_types_namespace=namespace)
