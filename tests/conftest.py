"""Shared test fixtures for archengine."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from archengine.core.classes import ClassSet
from archengine.core.unique_id import UniqueId
from archengine.engine import ArchTestEngine

if TYPE_CHECKING:
    from archengine.core.configuration import AnalysisConfiguration


class FakeImporter:
    """Class importer returning canned class sets per root class, recording every call."""

    def __init__(self) -> None:
        self.classes_by_root: dict[type, ClassSet] = {}
        self.calls: list[tuple[type, AnalysisConfiguration]] = []
        self.failure: Exception | None = None
        self._lock = threading.Lock()

    def simulate(self, root_class: type, *python_classes: type) -> None:
        self.classes_by_root[root_class] = ClassSet.of(*python_classes)

    def import_classes(self, root_class: type, configuration: AnalysisConfiguration) -> ClassSet:
        with self._lock:
            self.calls.append((root_class, configuration))
        if self.failure is not None:
            raise self.failure
        return self.classes_by_root.get(root_class, ClassSet())


@pytest.fixture()
def engine_id() -> UniqueId:
    return UniqueId.for_engine("archengine")


@pytest.fixture()
def fake_importer() -> FakeImporter:
    return FakeImporter()


@pytest.fixture()
def engine(fake_importer: FakeImporter) -> ArchTestEngine:
    return ArchTestEngine(importer=fake_importer)


@pytest.fixture()
def examples_root() -> Path:
    """Directory of the ``testexamples`` package (importable via ``tests/`` on sys.path)."""
    import testexamples

    return Path(testexamples.__file__).parent
