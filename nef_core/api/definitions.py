"""Immutable export/import descriptors attached to component classes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Cardinality(Enum):
    """How many providers an import accepts."""

    SINGLE = "single"
    MANY = "many"


@dataclass(frozen=True)
class ExportDefinition:
    """A service key a class provides; each definition yields one instance."""

    key: Any


@dataclass(frozen=True)
class ImportDefinition:
    """A request, declared on a field, for provider instances matching ``key``."""

    target_property: str
    key: Any
    cardinality: Cardinality = Cardinality.SINGLE

    def __post_init__(self) -> None:
        if not self.target_property:
            raise ValueError("target_property cannot be empty.")
