"""Disposal ordering and failure aggregation."""

from __future__ import annotations

import asyncio

import pytest

from nef_core import CompositionContainer, DisposalError, export


def _disposable_classes(log: list[str]) -> list[type]:
    @export("first")
    class First:
        def dispose(self) -> None:
            log.append("first")

    @export("broken")
    class Broken:
        def dispose(self) -> None:
            log.append("broken")
            raise RuntimeError("cannot release")

    @export("plain")
    class Plain:
        dispose = None

    @export("last")
    class Last:
        def dispose(self) -> None:
            log.append("last")

    return [First, Broken, Plain, Last]


def test_dispose_runs_in_reverse_order_and_aggregates_failures() -> None:
    log: list[str] = []
    container = CompositionContainer().add_classes(*_disposable_classes(log))
    container.compose_sync()
    broken = container.lookup_single_sync("broken")

    with pytest.raises(DisposalError) as excinfo:
        container.dispose()

    assert log == ["last", "broken", "first"]
    assert len(excinfo.value.failures) == 1
    assert excinfo.value.failures[0][0] is broken
    assert isinstance(excinfo.value.errors[0], RuntimeError)
    assert container.disposed


def test_dispose_twice_is_a_noop() -> None:
    log: list[str] = []

    @export("svc")
    class Service:
        def dispose(self) -> None:
            log.append("disposed")

    container = CompositionContainer().add_classes(Service)
    container.compose_sync()
    container.dispose()
    container.dispose()

    assert log == ["disposed"]


def test_dispose_before_realization_constructs_nothing() -> None:
    created: list[object] = []

    @export("svc")
    class Service:
        def __init__(self) -> None:
            created.append(self)

    container = CompositionContainer().add_classes(Service)
    container.dispose()

    assert created == []
    assert container.disposed


def test_context_manager_disposes_on_exit() -> None:
    log: list[str] = []

    @export("svc")
    class Service:
        def dispose(self) -> None:
            log.append("disposed")

    with CompositionContainer().add_classes(Service) as container:
        container.lookup_single_sync("svc")

    assert log == ["disposed"]
    assert container.disposed


def test_dispose_async_awaits_coroutines() -> None:
    log: list[str] = []

    @export("async")
    class AsyncService:
        async def dispose(self) -> None:
            await asyncio.sleep(0)
            log.append("async")

    @export("sync")
    class SyncService:
        def dispose(self) -> None:
            log.append("sync")

    async def scenario() -> None:
        async with CompositionContainer().add_classes(AsyncService, SyncService) as container:
            await container.compose()

    asyncio.run(scenario())

    assert log == ["sync", "async"]


def test_blocking_dispose_reports_async_disposers() -> None:
    @export("async")
    class AsyncService:
        async def dispose(self) -> None:
            raise AssertionError("never awaited")

    container = CompositionContainer().add_classes(AsyncService)
    container.compose_sync()

    with pytest.raises(DisposalError) as excinfo:
        container.dispose()

    assert "dispose_async" in str(excinfo.value.errors[0])
