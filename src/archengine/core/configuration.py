"""Analysis configuration: which classes the rules of a root class are evaluated against."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path


# ---------------------------------------------------------------------------
# Extension points
# ---------------------------------------------------------------------------


@runtime_checkable
class ImportOption(Protocol):
    """Decides per module whether its classes take part in the analysis."""

    def includes(self, module_name: str) -> bool: ...


@runtime_checkable
class LocationProvider(Protocol):
    """Supplies extra source locations (directories or ``.py`` files) for a root class."""

    def get(self, root_class: type) -> Iterable[Path]: ...


_TEST_MODULE_NAMES = frozenset({"test", "tests", "testing", "conftest"})


def _is_test_module(module_name: str) -> bool:
    return any(
        part in _TEST_MODULE_NAMES or part.startswith("test_") or part.endswith("_test")
        for part in module_name.split(".")
    )


class DoNotIncludeTests:
    """Skip test modules (``tests`` packages, ``test_*.py``, ``*_test.py``, ``conftest``)."""

    def includes(self, module_name: str) -> bool:
        return not _is_test_module(module_name)


class OnlyIncludeTests:
    def includes(self, module_name: str) -> bool:
        return _is_test_module(module_name)


# ---------------------------------------------------------------------------
# Value object
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnalysisConfiguration:
    """Resolved inputs of the class importer.

    Together with the identity of the owning root class this is the key of
    the class cache, so all fields are hashable tuples and two configurations
    are equal exactly when all fields are equal.
    """

    packages: tuple[str, ...] = ()
    package_roots: tuple[type, ...] = ()  # classes whose package is analyzed
    location_providers: tuple[type[LocationProvider], ...] = ()
    import_options: tuple[type[ImportOption], ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.packages or self.package_roots or self.location_providers)

    def resolved_packages(self) -> tuple[str, ...]:
        """Explicit packages followed by the packages of ``package_roots``, deduplicated."""
        seen: dict[str, None] = dict.fromkeys(self.packages)
        for root in self.package_roots:
            seen.setdefault(package_of(root), None)
        return tuple(seen)

    def __str__(self) -> str:
        parts = [f"packages={list(self.resolved_packages())}"]
        if self.location_providers:
            parts.append(f"locations={[p.__name__ for p in self.location_providers]}")
        if self.import_options:
            parts.append(f"import_options={[o.__name__ for o in self.import_options]}")
        return f"AnalysisConfiguration({', '.join(parts)})"


def package_of(python_class: type) -> str:
    """Package that contains the module defining *python_class*.

    A class defined at the top level of a plain module resolves to the module
    itself so that the analysis never widens to unrelated top-level code.
    """
    module = python_class.__module__
    package, _, _ = module.rpartition(".")
    return package or module
