"""Service composition engine: catalogs, exports, imports and a lazy container."""

from .api import (
    Cardinality,
    Catalog,
    Disposable,
    ExportDefinition,
    Import,
    ImportDefinition,
    ImportMany,
    export,
)
from .catalogs import (
    ApplicationCatalog,
    ClassCatalog,
    DirectoryCatalog,
    FileCatalog,
    FilteredCatalog,
    ModuleCatalog,
)
from .composition import CompositionContainer, ProviderInstance
from .config import Settings, default_config_path
from .errors import (
    AmbiguousServiceError,
    CatalogLoadError,
    CompositionError,
    CompositionStateError,
    ConfigError,
    ContainerDisposedError,
    DisposalError,
    InvalidCatalogInputError,
    NotFoundError,
)
from .events import Event, EventBus

__version__ = "0.1.0"

__all__ = [
    "Cardinality",
    "Catalog",
    "Disposable",
    "ExportDefinition",
    "Import",
    "ImportDefinition",
    "ImportMany",
    "export",
    "ApplicationCatalog",
    "ClassCatalog",
    "DirectoryCatalog",
    "FileCatalog",
    "FilteredCatalog",
    "ModuleCatalog",
    "CompositionContainer",
    "ProviderInstance",
    "Settings",
    "default_config_path",
    "AmbiguousServiceError",
    "CatalogLoadError",
    "CompositionError",
    "CompositionStateError",
    "ConfigError",
    "ContainerDisposedError",
    "DisposalError",
    "InvalidCatalogInputError",
    "NotFoundError",
    "Event",
    "EventBus",
]
