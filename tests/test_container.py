"""Behavioural tests for the CompositionContainer."""

from __future__ import annotations

import asyncio
import types
from typing import Any

import pytest

from nef_core import (
    AmbiguousServiceError,
    ClassCatalog,
    CompositionContainer,
    CompositionStateError,
    ContainerDisposedError,
    Import,
    ImportMany,
    InvalidCatalogInputError,
    NotFoundError,
    export,
)
from nef_core.api.abc import Catalog


class _Counter:
    """Counts provider constructions per test."""

    def __init__(self) -> None:
        self.count = 0


def _counting_classes(counter: _Counter) -> tuple[type, type]:
    @export("svcA")
    class A:
        def __init__(self) -> None:
            counter.count += 1

    @export("svcA")
    @export("svcB")
    class B:
        def __init__(self) -> None:
            counter.count += 1

    return A, B


class _ListCatalog(Catalog):
    """Catalog over a fixed list, counting how often it is queried."""

    def __init__(self, *classes: Any) -> None:
        self.classes = list(classes)
        self.sync_calls = 0
        self.async_calls = 0

    def list_classes_sync(self) -> list[type]:
        self.sync_calls += 1
        return list(self.classes)

    async def list_classes(self) -> list[type]:
        self.async_calls += 1
        await asyncio.sleep(0)
        return list(self.classes)


def test_one_instance_per_export_definition() -> None:
    counter = _Counter()
    A, B = _counting_classes(counter)
    container = CompositionContainer().add_classes(A, B)

    container.compose_sync()

    assert counter.count == 3
    assert [(type(p.instance), p.key) for p in container.providers] == [
        (A, "svcA"),
        (B, "svcB"),
        (B, "svcA"),
    ]
    first_b, second_b = container.providers[1].instance, container.providers[2].instance
    assert first_b is not second_b


def test_realization_happens_once_regardless_of_call_count() -> None:
    counter = _Counter()
    A, B = _counting_classes(counter)
    catalog = _ListCatalog(A, B)
    container = CompositionContainer().add_catalogs(catalog)

    assert not container.realized
    assert counter.count == 0

    container.compose_sync()
    container.lookup_many_sync("svcA")
    container.lookup_single_sync("svcB")
    asyncio.run(container.compose())
    asyncio.run(container.lookup_many("svcA"))

    assert container.realized
    assert counter.count == 3
    assert catalog.sync_calls == 1
    assert catalog.async_calls == 0


def test_lookup_single_cardinality() -> None:
    @export("one")
    class One:
        pass

    container = CompositionContainer().add_classes(One, *_counting_classes(_Counter()))

    assert isinstance(container.lookup_single_sync("one"), One)
    with pytest.raises(NotFoundError) as missing:
        container.lookup_single_sync("nothing")
    assert missing.value.key == "nothing"
    with pytest.raises(AmbiguousServiceError) as ambiguous:
        container.lookup_single_sync("svcA")
    assert ambiguous.value.key == "svcA"
    assert ambiguous.value.count == 2


def test_lookup_many_with_no_match_is_empty() -> None:
    container = CompositionContainer()

    assert container.lookup_many_sync("nothing") == []
    assert asyncio.run(container.lookup_many("nothing")) == []


def test_two_catalogs_exporting_the_same_key() -> None:
    @export("svcA")
    class A:
        pass

    @export("svcA")
    class B:
        pass

    container = CompositionContainer().add_catalogs(ClassCatalog(A), ClassCatalog(B))

    with pytest.raises(AmbiguousServiceError):
        container.lookup_single_sync("svcA")
    services = container.lookup_many_sync("svcA")
    assert [type(service) for service in services] == [A, B]


def test_provider_imports_another_provider() -> None:
    K = object()

    @export(K)
    class A:
        pass

    @export("K2")
    class B:
        dep = Import(K)

    container = CompositionContainer().add_classes(B, A)

    consumer = container.lookup_single_sync("K2")
    assert consumer.dep is container.lookup_single_sync(K)
    assert isinstance(consumer.dep, A)


def test_provider_imports_resolve_across_catalog_order() -> None:
    @export("sink")
    class Sink:
        sources = ImportMany("source")
        primary = Import("primary")

    @export("source")
    @export("primary")
    class Source:
        pass

    @export("source")
    class OtherSource:
        pass

    container = CompositionContainer().add_classes(Sink, Source, OtherSource)

    sink = container.lookup_single_sync("sink")
    assert [type(item) for item in sink.sources] == [Source, OtherSource]
    assert sink.primary is container.lookup_single_sync("primary")
    assert sink.primary is not sink.sources[0]


def test_class_keys_use_identity() -> None:
    @export()
    class Logger:
        pass

    class Consumer:
        logger = Import(Logger)
        everything = ImportMany(Logger)

    consumer = Consumer()
    container = CompositionContainer().add_classes(Logger)
    container.compose_sync(consumer)

    assert isinstance(consumer.logger, Logger)
    assert consumer.everything == [consumer.logger]


def test_compose_assigns_imports_on_consumers() -> None:
    @export("greeter")
    class Greeter:
        pass

    class Consumer:
        greeter = Import("greeter")
        greeters = ImportMany("greeter")
        nothing = ImportMany("nothing")

    consumers = [Consumer(), Consumer()]
    container = CompositionContainer().add_classes(Greeter)
    asyncio.run(container.compose(*consumers, None))

    assert consumers[0].greeter is consumers[1].greeter
    assert consumers[0].greeters == [consumers[0].greeter]
    assert consumers[0].nothing == []


def test_failed_single_import_leaves_consumer_untouched() -> None:
    @export("present")
    class Present:
        pass

    class Consumer:
        present = Import("present")
        missing = Import("missing")

    consumer = Consumer()
    container = CompositionContainer().add_classes(Present)

    with pytest.raises(NotFoundError):
        container.compose_sync(consumer)
    assert "present" not in vars(consumer)


def test_compose_sync_returns_container_for_chaining() -> None:
    container = CompositionContainer()
    assert container.compose_sync() is container


def test_add_helpers_skip_none_and_validate() -> None:
    class Plain:
        pass

    module = types.SimpleNamespace(Plain=Plain, __all__=["Plain"])
    container = (
        CompositionContainer()
        .add_classes(None, Plain)
        .add_modules(None, module)
        .add_catalogs(None)
        .add_files(None, "  ")
        .add_directories(None, "")
    )

    assert len(container.catalogs) == 2
    with pytest.raises(InvalidCatalogInputError):
        container.add_catalogs(object())  # type: ignore[arg-type]
    with pytest.raises(InvalidCatalogInputError):
        container.add_classes("not a class")  # type: ignore[arg-type]


def test_non_class_entries_are_skipped() -> None:
    @export("real")
    class Real:
        pass

    container = CompositionContainer().add_catalogs(_ListCatalog("text", 3, Real))

    services = container.lookup_many_sync("real")
    assert [type(service) for service in services] == [Real]
    assert len(container.providers) == 1


def test_late_registration_is_rejected() -> None:
    container = CompositionContainer()
    container.compose_sync()

    class Late:
        pass

    with pytest.raises(CompositionStateError):
        container.add_classes(Late)


def test_failed_catalog_leaves_container_retryable() -> None:
    @export("svc")
    class Service:
        pass

    class FlakyCatalog(Catalog):
        def __init__(self) -> None:
            self.fail = True

        def list_classes_sync(self) -> list[type]:
            if self.fail:
                raise OSError("catalog unavailable")
            return [Service]

    flaky = FlakyCatalog()
    container = CompositionContainer().add_catalogs(flaky)

    with pytest.raises(OSError):
        container.lookup_single_sync("svc")
    assert not container.realized
    assert container.providers == ()

    flaky.fail = False
    assert isinstance(container.lookup_single_sync("svc"), Service)


def test_failed_provider_import_leaves_container_retryable() -> None:
    counter = _Counter()

    @export("needy")
    class Needy:
        dep = Import("dep")

        def __init__(self) -> None:
            counter.count += 1

    @export("dep")
    class Dep:
        pass

    catalog = _ListCatalog(Needy)
    container = CompositionContainer().add_catalogs(catalog)

    with pytest.raises(NotFoundError):
        container.compose_sync()
    assert not container.realized

    catalog.classes.append(Dep)
    needy = container.lookup_single_sync("needy")
    assert isinstance(needy.dep, Dep)
    assert counter.count == 2


def test_disposed_container_rejects_use() -> None:
    container = CompositionContainer().add_classes(*_counting_classes(_Counter()))
    container.compose_sync()
    container.dispose()

    assert container.disposed
    assert container.providers == ()
    with pytest.raises(ContainerDisposedError):
        container.compose_sync()
    with pytest.raises(ContainerDisposedError):
        asyncio.run(container.lookup_many("svcA"))
    with pytest.raises(ContainerDisposedError):
        container.add_catalogs()


def test_reentrant_lookup_from_provider_constructor_raises() -> None:
    container = CompositionContainer()

    @export("reentrant")
    class Reentrant:
        def __init__(self) -> None:
            container.lookup_many_sync("reentrant")

    container.add_classes(Reentrant)

    with pytest.raises(CompositionStateError):
        container.compose_sync()
    assert not container.realized


def test_repr_reports_state() -> None:
    container = CompositionContainer()
    assert "unrealized" in repr(container)
    container.compose_sync()
    assert "0 providers" in repr(container)
    container.dispose()
    assert "disposed" in repr(container)
