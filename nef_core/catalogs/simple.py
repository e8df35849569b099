"""In-memory catalogs: a single class, a module namespace, a filtered view."""

from __future__ import annotations

import logging
from typing import Any, Callable

from nef_core.api.abc import Catalog
from nef_core.errors import InvalidCatalogInputError

_logger = logging.getLogger(__name__)

CatalogPredicate = Callable[[type, int, Catalog], Any]


def classes_from_namespace(namespace: Any) -> list[type]:
    """Return the classes ``namespace`` lists in ``__all__``, in that order."""

    exported = getattr(namespace, "__all__", None)
    if exported is None:
        _logger.debug(
            "%s declares no __all__, nothing to export",
            getattr(namespace, "__name__", namespace),
        )
        return []

    classes: list[type] = []
    for name in exported:
        candidate = getattr(namespace, name, None)
        if isinstance(candidate, type):
            classes.append(candidate)
    return classes


class ClassCatalog(Catalog):
    """Catalog holding exactly one class."""

    def __init__(self, cls: type) -> None:
        if not isinstance(cls, type):
            raise InvalidCatalogInputError(
                f"ClassCatalog requires a class, got {type(cls).__name__}"
            )
        self.cls = cls

    def list_classes_sync(self) -> list[type]:
        return [self.cls]

    def __repr__(self) -> str:
        return f"ClassCatalog({self.cls.__qualname__})"


class ModuleCatalog(Catalog):
    """Catalog over the classes a module (or namespace) lists in ``__all__``."""

    def __init__(self, module: Any) -> None:
        if module is None:
            raise InvalidCatalogInputError("ModuleCatalog requires a module, got None")
        self.module = module

    def list_classes_sync(self) -> list[type]:
        return classes_from_namespace(self.module)

    def __repr__(self) -> str:
        return f"ModuleCatalog({getattr(self.module, '__name__', self.module)!r})"


class FilteredCatalog(Catalog):
    """View of another catalog keeping the classes ``predicate`` accepts.

    The base catalog is queried again on every call. The predicate receives
    ``(cls, index, base_catalog)``.
    """

    def __init__(self, catalog: Catalog, predicate: CatalogPredicate) -> None:
        if not isinstance(catalog, Catalog):
            raise InvalidCatalogInputError("FilteredCatalog requires a base Catalog")
        if not callable(predicate):
            raise InvalidCatalogInputError("FilteredCatalog requires a callable predicate")
        self.catalog = catalog
        self.predicate = predicate

    def list_classes_sync(self) -> list[type]:
        return self._apply(self.catalog.list_classes_sync())

    async def list_classes(self) -> list[type]:
        return self._apply(await self.catalog.list_classes())

    def _apply(self, classes: list[type]) -> list[type]:
        return [
            cls
            for index, cls in enumerate(classes)
            if self.predicate(cls, index, self.catalog)
        ]

    def __repr__(self) -> str:
        return f"FilteredCatalog({self.catalog!r})"
