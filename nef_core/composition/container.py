"""Composition container: owns catalogs, realizes providers once, wires imports."""

from __future__ import annotations

import inspect
import logging
from pathlib import Path
from typing import Any, Iterable

from nef_core.api.abc import Catalog, Disposable
from nef_core.catalogs import (
    ApplicationCatalog,
    ClassCatalog,
    DirectoryCatalog,
    FileCatalog,
    ModuleCatalog,
)
from nef_core.config import Settings
from nef_core.errors import (
    CompositionStateError,
    ContainerDisposedError,
    DisposalError,
    InvalidCatalogInputError,
)
from nef_core.events import (
    POST_DISPOSE_EVENT,
    POST_REALIZATION_EVENT,
    PRE_DISPOSE_EVENT,
    PRE_REALIZATION_EVENT,
    EventBus,
)

from .gate import RealizationGate
from .resolution import (
    ProviderInstance,
    build_providers,
    resolve_many,
    resolve_single,
    satisfy_imports,
)

__all__ = ["CompositionContainer"]


class CompositionContainer:
    """Service composition engine.

    Catalogs are registered first. The first ``compose`` or lookup call
    queries every catalog in registration order, constructs one provider per
    export definition, wires the providers' own imports and freezes the
    result. Every later call reuses that provider set.

    Registering catalogs after realization raises ``CompositionStateError``.
    Disposal is terminal: a disposed container rejects further use with
    ``ContainerDisposedError``.
    """

    def __init__(
        self,
        *,
        events: EventBus | None = None,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.events = events or EventBus()
        self.settings = settings or Settings()
        self._logger = logger or logging.getLogger(__name__)
        self._catalogs: list[Catalog] = []
        self._gate: RealizationGate[ProviderInstance] = RealizationGate()
        self._disposed = False

    def __repr__(self) -> str:
        if self._disposed:
            state = "disposed"
        elif self._gate.done:
            state = f"{len(self.providers)} providers"
        else:
            state = "unrealized"
        return f"<CompositionContainer catalogs={len(self._catalogs)} {state}>"

    @property
    def catalogs(self) -> tuple[Catalog, ...]:
        return tuple(self._catalogs)

    @property
    def realized(self) -> bool:
        return self._gate.done

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def providers(self) -> tuple[ProviderInstance, ...]:
        """Realized providers in creation order; empty before realization."""

        return self._gate.value or ()

    # registration

    def add_catalogs(self, *catalogs: Catalog | None) -> "CompositionContainer":
        self._ensure_open_for_registration()
        for catalog in catalogs:
            if catalog is None:
                continue
            if not isinstance(catalog, Catalog):
                raise InvalidCatalogInputError(
                    f"expected a Catalog, got {type(catalog).__name__}"
                )
            self._catalogs.append(catalog)
        return self

    def add_classes(self, *classes: type | None) -> "CompositionContainer":
        return self.add_catalogs(
            *(ClassCatalog(cls) for cls in classes if cls is not None)
        )

    def add_modules(self, *modules: Any) -> "CompositionContainer":
        return self.add_catalogs(
            *(ModuleCatalog(module) for module in modules if module is not None)
        )

    def add_files(
        self, *files: Path | str | None, cwd: Path | str | None = None
    ) -> "CompositionContainer":
        return self.add_catalogs(
            *(FileCatalog(file, cwd=cwd) for file in _non_blank(files))
        )

    def add_directories(
        self,
        *directories: Path | str | None,
        patterns: Iterable[str] | None = None,
        exclude: Iterable[str] | None = None,
        cwd: Path | str | None = None,
    ) -> "CompositionContainer":
        """Add one directory catalog per path; patterns default to the settings."""

        return self.add_catalogs(
            *(
                DirectoryCatalog(
                    directory,
                    patterns=patterns if patterns is not None else self.settings.patterns,
                    exclude=exclude if exclude is not None else self.settings.exclude,
                    cwd=cwd,
                )
                for directory in _non_blank(directories)
            )
        )

    def add_application(
        self,
        *,
        patterns: Iterable[str] | None = None,
        exclude: Iterable[str] | None = None,
        main_file: Path | str | None = None,
    ) -> "CompositionContainer":
        """Add the entry script's directory; excludes default to the settings."""

        return self.add_catalogs(
            ApplicationCatalog(
                patterns=patterns,
                exclude=exclude if exclude is not None else self.settings.exclude,
                main_file=main_file,
            )
        )

    # composition

    async def compose(self, *consumers: Any) -> None:
        """Realize providers if needed, then satisfy the consumers' imports."""

        providers = await self._realize_async()
        self._compose_all(consumers, providers)

    def compose_sync(self, *consumers: Any) -> "CompositionContainer":
        """Blocking variant of :meth:`compose`; catalogs are listed synchronously."""

        providers = self._realize_sync()
        self._compose_all(consumers, providers)
        return self

    async def lookup_single(self, key: Any) -> Any:
        return resolve_single(await self._realize_async(), key)

    def lookup_single_sync(self, key: Any) -> Any:
        return resolve_single(self._realize_sync(), key)

    async def lookup_many(self, key: Any) -> list[Any]:
        return resolve_many(await self._realize_async(), key)

    def lookup_many_sync(self, key: Any) -> list[Any]:
        return resolve_many(self._realize_sync(), key)

    def _compose_all(
        self, consumers: Iterable[Any], providers: tuple[ProviderInstance, ...]
    ) -> None:
        for consumer in consumers:
            if consumer is not None:
                satisfy_imports(consumer, providers)

    # realization

    def _realize_sync(self) -> tuple[ProviderInstance, ...]:
        self._ensure_alive()
        return self._gate.run(lambda: self._commit(self._gather_sync()))

    async def _realize_async(self) -> tuple[ProviderInstance, ...]:
        self._ensure_alive()
        return await self._gate.run_async(self._gather_async, self._commit)

    def _gather_sync(self) -> list[type]:
        self._emit_pre_realization()
        classes: list[type] = []
        for catalog in self._catalogs:
            classes.extend(catalog.list_classes_sync())
        return classes

    async def _gather_async(self) -> list[type]:
        self._emit_pre_realization()
        classes: list[type] = []
        for catalog in self._catalogs:
            classes.extend(await catalog.list_classes())
        return classes

    def _emit_pre_realization(self) -> None:
        self.events.emit(PRE_REALIZATION_EVENT, {"catalogs": len(self._catalogs)})

    def _commit(self, classes: list[type]) -> tuple[ProviderInstance, ...]:
        providers = tuple(build_providers(classes))
        for provider in providers:
            satisfy_imports(provider.instance, providers)
        self._logger.debug(
            "realized %d provider(s) from %d catalog(s)",
            len(providers),
            len(self._catalogs),
        )
        self.events.emit(POST_REALIZATION_EVENT, {"providers": providers})
        return providers

    # disposal

    def dispose(self) -> None:
        """Dispose providers in reverse creation order, then retire the container.

        Raises ``DisposalError`` listing every provider whose ``dispose``
        failed; the remaining providers are still disposed.
        """

        providers = self._begin_dispose()
        if providers is None:
            return
        failures: list[tuple[Any, BaseException]] = []
        for instance in _disposables(providers):
            try:
                result = instance.dispose()
                if inspect.isawaitable(result):
                    _discard_awaitable(result)
                    raise CompositionStateError(
                        "dispose() returned an awaitable; use dispose_async()"
                    )
            except Exception as exc:
                self._record_failure(failures, instance, exc)
        self._finish_dispose(providers, failures)

    async def dispose_async(self) -> None:
        """Like :meth:`dispose`, awaiting providers whose ``dispose`` is async."""

        providers = self._begin_dispose()
        if providers is None:
            return
        failures: list[tuple[Any, BaseException]] = []
        for instance in _disposables(providers):
            try:
                result = instance.dispose()
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                self._record_failure(failures, instance, exc)
        self._finish_dispose(providers, failures)

    def _begin_dispose(self) -> tuple[ProviderInstance, ...] | None:
        # waits for an in-flight realization so its providers are disposed too
        providers = self._gate.close()
        if providers is None:
            return None
        self._disposed = True
        self.events.emit(PRE_DISPOSE_EVENT, {"providers": len(providers)})
        return providers

    def _record_failure(
        self,
        failures: list[tuple[Any, BaseException]],
        instance: Any,
        exc: Exception,
    ) -> None:
        self._logger.warning("failed to dispose %s: %s", type(instance).__name__, exc)
        failures.append((instance, exc))

    def _finish_dispose(
        self,
        providers: tuple[ProviderInstance, ...],
        failures: list[tuple[Any, BaseException]],
    ) -> None:
        self.events.emit(
            POST_DISPOSE_EVENT,
            {"providers": len(providers), "failures": len(failures)},
        )
        if failures:
            raise DisposalError(failures)

    def __enter__(self) -> "CompositionContainer":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.dispose()

    async def __aenter__(self) -> "CompositionContainer":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.dispose_async()

    # state checks

    def _ensure_alive(self) -> None:
        if self._disposed:
            raise ContainerDisposedError("container has been disposed")

    def _ensure_open_for_registration(self) -> None:
        self._ensure_alive()
        if self._gate.done:
            raise CompositionStateError(
                "catalogs cannot be added after providers were realized"
            )


def _non_blank(paths: Iterable[Path | str | None]) -> list[Path | str]:
    return [path for path in paths if path is not None and str(path).strip()]


def _disposables(providers: tuple[ProviderInstance, ...]) -> list[Any]:
    return [
        provider.instance
        for provider in reversed(providers)
        if isinstance(provider.instance, Disposable)
        and callable(provider.instance.dispose)
    ]


def _discard_awaitable(result: Any) -> None:
    close = getattr(result, "close", None)
    if callable(close):
        close()
