"""Provider construction and import resolution against a provider set."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from nef_core.api.decorators import export_definitions, import_definitions
from nef_core.api.definitions import Cardinality, ImportDefinition
from nef_core.errors import AmbiguousServiceError, NotFoundError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderInstance:
    """An instance created for one export definition of ``source``."""

    instance: Any
    key: Any
    source: type


def build_providers(classes: Iterable[Any]) -> list[ProviderInstance]:
    """Instantiate every export definition of every class, in order.

    Each definition produces its own instance, constructed without
    arguments. Non-class values are skipped.
    """

    providers: list[ProviderInstance] = []
    for cls in classes:
        if not isinstance(cls, type):
            _logger.debug("skipping non-class catalog entry %r", cls)
            continue
        for definition in export_definitions(cls):
            providers.append(
                ProviderInstance(instance=cls(), key=definition.key, source=cls)
            )
    return providers


def matching_providers(
    providers: Sequence[ProviderInstance], key: Any
) -> list[ProviderInstance]:
    return [provider for provider in providers if provider.key == key]


def resolve_single(providers: Sequence[ProviderInstance], key: Any) -> Any:
    """Return the only instance exported for ``key``."""

    matches = matching_providers(providers, key)
    if not matches:
        raise NotFoundError(key)
    if len(matches) > 1:
        raise AmbiguousServiceError(key, len(matches))
    return matches[0].instance


def resolve_many(providers: Sequence[ProviderInstance], key: Any) -> list[Any]:
    """Return every instance exported for ``key`` in creation order."""

    return [provider.instance for provider in matching_providers(providers, key)]


def resolve_import(
    providers: Sequence[ProviderInstance], definition: ImportDefinition
) -> Any:
    if definition.cardinality is Cardinality.MANY:
        return resolve_many(providers, definition.key)
    return resolve_single(providers, definition.key)


def satisfy_imports(target: Any, providers: Sequence[ProviderInstance]) -> None:
    """Assign resolved providers to every import field declared on ``target``.

    All imports are resolved before any is assigned, so a failing import
    leaves ``target`` untouched.
    """

    definitions = import_definitions(type(target))
    if not definitions:
        return
    resolved = [
        (definition.target_property, resolve_import(providers, definition))
        for definition in definitions
    ]
    for name, value in resolved:
        setattr(target, name, value)
