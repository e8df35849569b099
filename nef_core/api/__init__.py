"""Convenience imports for the nef declaration API."""

from .abc import Catalog, Disposable
from .decorators import (
    Import,
    ImportMany,
    export,
    export_definitions,
    import_definitions,
)
from .definitions import Cardinality, ExportDefinition, ImportDefinition

__all__ = [
    "Catalog",
    "Disposable",
    "Cardinality",
    "ExportDefinition",
    "ImportDefinition",
    "Import",
    "ImportMany",
    "export",
    "export_definitions",
    "import_definitions",
]
