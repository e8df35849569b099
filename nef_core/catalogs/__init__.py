"""Catalog adapters that feed classes to the composition container."""

from nef_core.api.abc import Catalog

from .files import ApplicationCatalog, DirectoryCatalog, FileCatalog
from .loading import load_module
from .simple import (
    CatalogPredicate,
    ClassCatalog,
    FilteredCatalog,
    ModuleCatalog,
    classes_from_namespace,
)

__all__ = [
    "Catalog",
    "CatalogPredicate",
    "ApplicationCatalog",
    "ClassCatalog",
    "DirectoryCatalog",
    "FileCatalog",
    "FilteredCatalog",
    "ModuleCatalog",
    "classes_from_namespace",
    "load_module",
]
