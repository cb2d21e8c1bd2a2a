"""Analyzed classes: the immutable snapshot every rule is evaluated against."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator


@dataclass(frozen=True)
class AnalyzedClass:
    """What an importer knows about one class.

    ``imports`` holds the absolute module names imported at the top level of
    the module that defines the class.
    """

    name: str  # fully qualified: module + qualname
    simple_name: str
    module: str
    bases: tuple[str, ...] = ()
    imports: frozenset[str] = frozenset()
    python_class: type | None = field(default=None, compare=False, repr=False, hash=False)

    @classmethod
    def of(cls, python_class: type, *, imports: Iterable[str] = ()) -> AnalyzedClass:
        return cls(
            name=qualified_name(python_class),
            simple_name=python_class.__name__,
            module=python_class.__module__,
            bases=tuple(
                qualified_name(base) for base in python_class.__bases__ if base is not object
            ),
            imports=frozenset(imports),
            python_class=python_class,
        )

    @property
    def package(self) -> str:
        """Dotted package of the defining module (empty for top-level modules)."""
        return self.module.rpartition(".")[0]

    def resides_in(self, package: str) -> bool:
        return self.module == package or self.module.startswith(package + ".")

    def depends_on(self, module: str) -> bool:
        """Return True if the defining module imports *module* or something below it."""
        return any(imp == module or imp.startswith(module + ".") for imp in self.imports)


class ClassSet:
    """Immutable, ordered, name-deduplicated collection of :class:`AnalyzedClass`."""

    __slots__ = ("_by_name",)

    def __init__(self, classes: Iterable[AnalyzedClass] = ()) -> None:
        by_name: dict[str, AnalyzedClass] = {}
        for analyzed in classes:
            by_name.setdefault(analyzed.name, analyzed)
        self._by_name = by_name

    @classmethod
    def of(cls, *python_classes: type) -> ClassSet:
        return cls(AnalyzedClass.of(python_class) for python_class in python_classes)

    def __iter__(self) -> Iterator[AnalyzedClass]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)

    def __bool__(self) -> bool:
        return bool(self._by_name)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, AnalyzedClass):
            return item.name in self._by_name
        if isinstance(item, type):
            return qualified_name(item) in self._by_name
        if isinstance(item, str):
            return item in self._by_name
        return False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ClassSet):
            return NotImplemented
        return self._by_name.keys() == other._by_name.keys()

    def __hash__(self) -> int:
        return hash(frozenset(self._by_name))

    def __repr__(self) -> str:
        return f"ClassSet({sorted(self._by_name)})"

    def get(self, name: str | type) -> AnalyzedClass | None:
        key = qualified_name(name) if isinstance(name, type) else name
        return self._by_name.get(key)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._by_name)

    def that(self, predicate: Callable[[AnalyzedClass], bool]) -> ClassSet:
        return ClassSet(analyzed for analyzed in self if predicate(analyzed))


def qualified_name(python_class: type) -> str:
    """Fully qualified, importable name of a class (``module.QualName``)."""
    return f"{python_class.__module__}.{python_class.__qualname__}"
