"""Tests for archengine.execution.cache — single-flight class set cache."""

from __future__ import annotations

import threading
import time

import pytest

from archengine.core.classes import ClassSet
from archengine.core.configuration import AnalysisConfiguration
from archengine.core.errors import CacheComputationError
from archengine.execution.cache import ClassCache
from conftest import FakeImporter
from testexamples.unwanted_class import UnwantedClass, WantedClass

CONFIG_ONE = AnalysisConfiguration(packages=("some.dummy.package",))
CONFIG_TWO = AnalysisConfiguration(packages=("some.other.dummy.package",))


class RootOne:
    pass


class RootTwo:
    pass


class SlowImporter:
    """Importer that blocks until released, counting how often it ran.

    With *blocked_roots* given, only those root classes block.
    """

    def __init__(self, *blocked_roots: type) -> None:
        self.blocked_roots = blocked_roots
        self.release = threading.Event()
        self.calls = 0
        self._lock = threading.Lock()

    def import_classes(self, root_class: type, configuration: AnalysisConfiguration) -> ClassSet:
        with self._lock:
            self.calls += 1
        if not self.blocked_roots or root_class in self.blocked_roots:
            self.release.wait(timeout=5)
        return ClassSet.of(UnwantedClass)


class NoneImporter:
    """Broken importer that returns nothing instead of a class set."""

    def __init__(self) -> None:
        self.calls = 0

    def import_classes(self, root_class: type, configuration: AnalysisConfiguration) -> None:
        self.calls += 1


class TestClassCache:
    def test_first_get_imports(self, fake_importer: FakeImporter) -> None:
        fake_importer.simulate(RootOne, UnwantedClass)
        cache = ClassCache(fake_importer)
        classes = cache.get(RootOne, CONFIG_ONE)
        assert UnwantedClass in classes
        assert fake_importer.calls == [(RootOne, CONFIG_ONE)]

    def test_second_get_is_a_hit(self, fake_importer: FakeImporter) -> None:
        cache = ClassCache(fake_importer)
        first = cache.get(RootOne, CONFIG_ONE)
        second = cache.get(RootOne, CONFIG_ONE)
        assert first is second
        assert len(fake_importer.calls) == 1

    def test_equal_configurations_share_entry(self, fake_importer: FakeImporter) -> None:
        cache = ClassCache(fake_importer)
        cache.get(RootOne, AnalysisConfiguration(packages=("a",)))
        cache.get(RootOne, AnalysisConfiguration(packages=("a",)))
        assert len(fake_importer.calls) == 1

    def test_different_keys_compute_separately(self, fake_importer: FakeImporter) -> None:
        fake_importer.simulate(RootOne, UnwantedClass)
        fake_importer.simulate(RootTwo, WantedClass)
        cache = ClassCache(fake_importer)

        assert UnwantedClass in cache.get(RootOne, CONFIG_ONE)
        assert WantedClass in cache.get(RootTwo, CONFIG_ONE)
        cache.get(RootOne, CONFIG_TWO)

        assert len(fake_importer.calls) == 3
        assert cache.stats() == {"entries": 3, "computations": 3}

    def test_failure_is_memoized(self, fake_importer: FakeImporter) -> None:
        fake_importer.failure = ImportError("no module named some")
        cache = ClassCache(fake_importer)

        with pytest.raises(CacheComputationError) as first:
            cache.get(RootOne, CONFIG_ONE)
        with pytest.raises(CacheComputationError) as second:
            cache.get(RootOne, CONFIG_ONE)

        assert isinstance(first.value.__cause__, ImportError)
        assert second.value.__cause__ is first.value.__cause__
        assert len(fake_importer.calls) == 1
        assert "RootOne" in str(first.value)

    def test_importer_returning_nothing_fails_once(self) -> None:
        importer = NoneImporter()
        cache = ClassCache(importer)  # type: ignore[arg-type]

        with pytest.raises(CacheComputationError) as first:
            cache.get(RootOne, CONFIG_ONE)
        with pytest.raises(CacheComputationError):
            cache.get(RootOne, CONFIG_ONE)

        assert isinstance(first.value.__cause__, TypeError)
        assert "NoneImporter returned no class set" in str(first.value.__cause__)
        assert importer.calls == 1
        assert cache.stats() == {"entries": 1, "computations": 1}

    def test_clear_evicts_only_that_root(self, fake_importer: FakeImporter) -> None:
        cache = ClassCache(fake_importer)
        cache.get(RootOne, CONFIG_ONE)
        cache.get(RootOne, CONFIG_TWO)
        cache.get(RootTwo, CONFIG_ONE)

        cache.clear(RootOne)

        assert cache.stats()["entries"] == 1
        cache.get(RootTwo, CONFIG_ONE)
        assert len(fake_importer.calls) == 3
        cache.get(RootOne, CONFIG_ONE)
        assert len(fake_importer.calls) == 4

    def test_clear_forgets_failure(self, fake_importer: FakeImporter) -> None:
        fake_importer.failure = RuntimeError("boom")
        cache = ClassCache(fake_importer)
        with pytest.raises(CacheComputationError):
            cache.get(RootOne, CONFIG_ONE)

        cache.clear(RootOne)
        fake_importer.failure = None

        assert cache.get(RootOne, CONFIG_ONE) == ClassSet()

    def test_clear_unknown_root_is_noop(self, fake_importer: FakeImporter) -> None:
        cache = ClassCache(fake_importer)
        cache.clear(RootOne)
        assert cache.stats() == {"entries": 0, "computations": 0}


class TestSingleFlight:
    def test_concurrent_callers_share_one_computation(self) -> None:
        importer = SlowImporter()
        cache = ClassCache(importer)
        results: list[ClassSet] = []
        results_lock = threading.Lock()

        def worker() -> None:
            classes = cache.get(RootOne, CONFIG_ONE)
            with results_lock:
                results.append(classes)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        time.sleep(0.05)
        importer.release.set()
        for thread in threads:
            thread.join(timeout=5)

        assert importer.calls == 1
        assert len(results) == 8
        assert all(result is results[0] for result in results)

    def test_different_keys_do_not_block_each_other(self) -> None:
        importer = SlowImporter(RootOne)
        cache = ClassCache(importer)

        thread = threading.Thread(target=cache.get, args=(RootOne, CONFIG_ONE))
        thread.start()
        try:
            assert UnwantedClass in cache.get(RootTwo, CONFIG_ONE)
        finally:
            importer.release.set()
            thread.join(timeout=5)
        assert cache.stats() == {"entries": 2, "computations": 2}
