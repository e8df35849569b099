"""The composition engine: container, realization gate and import resolution."""

from .container import CompositionContainer
from .gate import RealizationGate
from .resolution import (
    ProviderInstance,
    build_providers,
    resolve_many,
    resolve_single,
    satisfy_imports,
)

__all__ = [
    "CompositionContainer",
    "ProviderInstance",
    "RealizationGate",
    "build_providers",
    "resolve_many",
    "resolve_single",
    "satisfy_imports",
]
