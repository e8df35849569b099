"""Abstract contracts the composition engine depends on."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Protocol, runtime_checkable


class Catalog(ABC):
    """A source of component classes, independent of where they reside."""

    @abstractmethod
    def list_classes_sync(self) -> list[type]:
        """Return the catalog's classes without suspending."""

    async def list_classes(self) -> list[type]:
        """Return the same classes as :meth:`list_classes_sync`, awaitably."""

        return self.list_classes_sync()


@runtime_checkable
class Disposable(Protocol):
    """A provider that releases resources when its container is disposed."""

    def dispose(self) -> Any: ...
