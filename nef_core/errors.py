"""Error types raised by the nef composition engine and its catalogs."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence


class CompositionError(Exception):
    """Base class for composition failures."""


class NotFoundError(CompositionError):
    """Raised when a single import or lookup matches no provider."""

    def __init__(self, key: Any) -> None:
        super().__init__(f"no provider exported for {describe_key(key)}")
        self.key = key


class AmbiguousServiceError(CompositionError):
    """Raised when a single import or lookup matches more than one provider."""

    def __init__(self, key: Any, count: int) -> None:
        super().__init__(
            f"{count} providers exported for {describe_key(key)}, expected exactly one"
        )
        self.key = key
        self.count = count


class InvalidCatalogInputError(CompositionError):
    """Raised when a catalog is built from a value that cannot yield classes."""


class CatalogLoadError(CompositionError):
    """Raised when a catalog cannot import one of its source files."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


class DisposalError(CompositionError):
    """Raised after disposal when one or more providers failed to dispose."""

    def __init__(self, failures: Sequence[tuple[Any, BaseException]]) -> None:
        names = ", ".join(type(instance).__name__ for instance, _ in failures)
        super().__init__(f"{len(failures)} provider(s) failed to dispose: {names}")
        self.failures = tuple(failures)

    @property
    def errors(self) -> tuple[BaseException, ...]:
        return tuple(error for _, error in self.failures)


class CompositionStateError(CompositionError):
    """Raised when an operation is not allowed in the container's current state."""


class ContainerDisposedError(CompositionStateError):
    """Raised when a disposed container is used again."""


class ConfigError(CompositionError):
    """Raised when the settings file cannot be read or validated."""


def describe_key(key: Any) -> str:
    """Human readable form of a service key for messages."""

    if isinstance(key, type):
        return f"{key.__module__}.{key.__qualname__}"
    return repr(key)
