"""Declarations that mark classes as providers and fields as imports."""

from __future__ import annotations

import weakref
from typing import Any, Callable, TypeVar

from .definitions import Cardinality, ExportDefinition, ImportDefinition

EXPORTS_ATTRIBUTE = "__nef_exports__"

_ClassT = TypeVar("_ClassT", bound=type)

_CLASS_KEY = object()
_import_cache: "weakref.WeakKeyDictionary[type, tuple[ImportDefinition, ...]]" = (
    weakref.WeakKeyDictionary()
)


def export(key: Any = _CLASS_KEY) -> Callable[[_ClassT], _ClassT]:
    """Declare that the decorated class provides ``key``.

    Without a key the class itself is the service key. Decorators may be
    stacked; every application adds one export definition and therefore one
    provider instance. Definitions are recorded in application order, i.e.
    the decorator closest to the class comes first.
    """

    def wrap(target: _ClassT) -> _ClassT:
        if not isinstance(target, type):
            raise TypeError("Decorated object must be a class.")
        definition = ExportDefinition(key=target if key is _CLASS_KEY else key)
        setattr(target, EXPORTS_ATTRIBUTE, export_definitions(target) + (definition,))
        return target

    return wrap


def export_definitions(cls: type) -> tuple[ExportDefinition, ...]:
    """Return the export definitions declared on ``cls`` itself.

    Exports are never inherited: a subclass of a provider is not a provider
    unless it is decorated on its own.
    """

    return tuple(vars(cls).get(EXPORTS_ATTRIBUTE, ()))


class Import:
    """Field declaring a single-provider import.

    Reading the field before the owning object was composed raises
    ``AttributeError``. Composition stores the resolved provider in the
    instance ``__dict__``, which then shadows this descriptor.
    """

    cardinality = Cardinality.SINGLE

    def __init__(self, key: Any) -> None:
        self.key = key
        self.name: str | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        raise AttributeError(
            f"{type(instance).__name__}.{self.name} has not been composed yet"
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.key!r})"

    @property
    def definition(self) -> ImportDefinition:
        if self.name is None:
            raise TypeError(f"{self!r} is not bound to a class attribute")
        return ImportDefinition(
            target_property=self.name, key=self.key, cardinality=self.cardinality
        )


class ImportMany(Import):
    """Field declaring an import of every provider matching the key."""

    cardinality = Cardinality.MANY


def import_definitions(cls: type) -> tuple[ImportDefinition, ...]:
    """Collect the import fields of ``cls`` and its bases, once per class."""

    cached = _import_cache.get(cls)
    if cached is not None:
        return cached

    collected: dict[str, ImportDefinition] = {}
    for klass in reversed(cls.__mro__):
        for name, value in vars(klass).items():
            if isinstance(value, Import):
                collected[name] = value.definition
            elif name in collected:
                del collected[name]

    definitions = tuple(collected.values())
    _import_cache[cls] = definitions
    return definitions
