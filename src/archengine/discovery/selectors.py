"""Discovery requests and their resolution into root classes and requested ids."""

from __future__ import annotations

import importlib
import inspect
import logging
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Union

from archengine.core.classes import qualified_name
from archengine.core.errors import DiscoveryConfigurationError
from archengine.core.unique_id import CLASS_SEGMENT_TYPE, UniqueId

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from types import ModuleType

    from archengine.discovery.reflection import MemberReflector

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Selectors and filters
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClassSelector:
    """Select a whole rule class, given as class object or fully qualified name."""

    target: type | str

    @property
    def class_name(self) -> str:
        return self.target if isinstance(self.target, str) else qualified_name(self.target)

    def load(self) -> type:
        if isinstance(self.target, type):
            return self.target
        try:
            return load_class(self.target)
        except LookupError as exc:
            msg = f"Could not load selected class {self.target}: {exc}"
            raise DiscoveryConfigurationError(msg) from exc


@dataclass(frozen=True)
class UniqueIdSelector:
    """Select exactly one node (and, for containers, everything below it)."""

    unique_id: UniqueId

    @classmethod
    def parse(cls, text: str) -> UniqueIdSelector:
        return cls(UniqueId.parse(text))


@dataclass(frozen=True)
class ClasspathRootSelector:
    """Select all rule classes in modules under a directory or ``.py`` file on ``sys.path``."""

    path: Path


Selector = Union[ClassSelector, UniqueIdSelector, ClasspathRootSelector]


@dataclass(frozen=True)
class ClassNameFilter:
    """Include/exclude regular expressions, full-matched against fully qualified class names.

    A name is accepted when it matches none of the exclude patterns and
    either no include pattern is given or at least one include pattern
    matches; exclude wins over include.
    """

    include_patterns: tuple[str, ...] = ()
    exclude_patterns: tuple[str, ...] = ()

    @classmethod
    def include(cls, *patterns: str) -> ClassNameFilter:
        return cls(include_patterns=patterns)

    @classmethod
    def exclude(cls, *patterns: str) -> ClassNameFilter:
        return cls(exclude_patterns=patterns)

    @classmethod
    def merge(cls, filters: Iterable[ClassNameFilter]) -> ClassNameFilter:
        includes: list[str] = []
        excludes: list[str] = []
        for name_filter in filters:
            includes.extend(name_filter.include_patterns)
            excludes.extend(name_filter.exclude_patterns)
        return cls(tuple(includes), tuple(excludes))

    def accepts(self, class_name: str) -> bool:
        if any(re.fullmatch(pattern, class_name) for pattern in self.exclude_patterns):
            return False
        if not self.include_patterns:
            return True
        return any(re.fullmatch(pattern, class_name) for pattern in self.include_patterns)


@dataclass
class DiscoveryRequest:
    """Everything a consumer asks discovery for.

    The ``with_*`` methods return the request itself so requests can be
    built fluently.
    """

    selectors: list[Selector] = field(default_factory=list)
    filters: list[ClassNameFilter] = field(default_factory=list)
    configuration_parameters: dict[str, str] = field(default_factory=dict)

    def with_class(self, target: type | str) -> DiscoveryRequest:
        self.selectors.append(ClassSelector(target))
        return self

    def with_unique_id(self, unique_id: UniqueId | str) -> DiscoveryRequest:
        if isinstance(unique_id, str):
            unique_id = UniqueId.parse(unique_id)
        self.selectors.append(UniqueIdSelector(unique_id))
        return self

    def with_classpath_root(self, path: Path | str) -> DiscoveryRequest:
        self.selectors.append(ClasspathRootSelector(Path(path)))
        return self

    def with_filter(self, name_filter: ClassNameFilter) -> DiscoveryRequest:
        self.filters.append(name_filter)
        return self

    def with_parameter(self, key: str, value: str) -> DiscoveryRequest:
        self.configuration_parameters[key] = value
        return self


@dataclass(frozen=True)
class ResolvedSelection:
    """Canonical result of selector resolution.

    ``root_classes`` is ordered and free of duplicates. A class selector
    contributes the id of its class container to ``requested_ids``, which
    requests the whole subtree.
    """

    root_classes: tuple[type, ...]
    requested_ids: frozenset[UniqueId]


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class SelectorResolver:
    """Turn a :class:`DiscoveryRequest` into a :class:`ResolvedSelection`."""

    def __init__(self, reflector: MemberReflector, engine_id: UniqueId) -> None:
        self._reflector = reflector
        self._engine_id = engine_id

    def class_id(self, cls: type) -> UniqueId:
        return self._engine_id.append(CLASS_SEGMENT_TYPE, qualified_name(cls))

    def resolve(self, request: DiscoveryRequest) -> ResolvedSelection:
        roots: dict[type, None] = {}
        requested: set[UniqueId] = set()
        name_filter = ClassNameFilter.merge(request.filters)

        def add_whole_class(cls: type) -> None:
            roots.setdefault(cls, None)
            requested.add(self.class_id(cls))

        for selector in request.selectors:
            if isinstance(selector, ClassSelector):
                cls = selector.load()
                if self._reflector.is_rule_bearing(cls):
                    add_whole_class(cls)
                else:
                    logger.debug("Ignoring %s: no rules declared", selector.class_name)
            elif isinstance(selector, UniqueIdSelector):
                root = self._root_class_of(selector.unique_id)
                if root is not None:
                    roots.setdefault(root, None)
                    requested.add(selector.unique_id)
            else:
                for cls in scan_classpath_root(selector.path):
                    if not name_filter.accepts(qualified_name(cls)):
                        continue
                    if self._reflector.is_rule_bearing(cls):
                        add_whole_class(cls)

        logger.debug(
            "Resolved %d selectors to %d root classes", len(request.selectors), len(roots)
        )
        return ResolvedSelection(tuple(roots), frozenset(requested))

    def _root_class_of(self, unique_id: UniqueId) -> type | None:
        if unique_id.engine_name != self._engine_id.engine_name:
            logger.debug("Ignoring foreign unique id %s", unique_id)
            return None
        class_name = unique_id.first_class_name()
        if class_name is None:
            logger.debug("Ignoring unique id without class segment: %s", unique_id)
            return None
        try:
            cls = load_class(class_name)
        except LookupError as exc:
            logger.warning("Cannot resolve unique id %s: %s", unique_id, exc)
            return None
        if not self._reflector.is_rule_bearing(cls):
            logger.warning("Cannot resolve unique id %s: no rules declared", unique_id)
            return None
        return cls


# ---------------------------------------------------------------------------
# Class loading and classpath scanning
# ---------------------------------------------------------------------------


def load_class(name: str) -> type:
    """Import a class by fully qualified name, nested classes included.

    The longest importable module prefix is imported, the rest is resolved
    attribute by attribute. Raises ``LookupError`` when nothing matches or
    the target is not a class.
    """
    parts = name.split(".")
    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            obj: object = importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            # Only a missing module_name itself means "try a shorter prefix".
            if exc.name is not None and (
                module_name == exc.name or module_name.startswith(exc.name + ".")
            ):
                continue
            raise
        for attribute in parts[split:]:
            obj = getattr(obj, attribute, None)
            if obj is None:
                break
        if inspect.isclass(obj):
            return obj
        msg = f"{name} is not a class"
        raise LookupError(msg)
    msg = f"No module found for {name}"
    raise LookupError(msg)


def scan_classpath_root(path: Path) -> list[type]:
    """Import every module under *path* and return the classes they define.

    Modules that fail to import are skipped with a debug log entry; scanning
    never fails because of unrelated broken code.
    """
    classes: list[type] = []
    for module_name in iter_module_names(path):
        try:
            module = importlib.import_module(module_name)
        except Exception as exc:  # ImportError, SyntaxError, errors raised at import time
            logger.debug("Skipping module %s: %s", module_name, exc)
            continue
        classes.extend(classes_defined_in(module))
    return classes


def classes_defined_in(module: ModuleType) -> Iterator[type]:
    def nested(cls: type) -> Iterator[type]:
        yield cls
        for value in vars(cls).values():
            if inspect.isclass(value) and value.__qualname__.startswith(cls.__qualname__ + "."):
                yield from nested(value)

    for value in vars(module).values():
        if inspect.isclass(value) and value.__module__ == module.__name__:
            yield from nested(value)


def find_import_root(path: Path) -> Path | None:
    """Return the deepest ``sys.path`` entry that contains *path*."""
    resolved = path.resolve()
    best: Path | None = None
    for entry in sys.path:
        try:
            candidate = Path(entry or ".").resolve()
        except OSError:
            continue
        if (candidate == resolved or candidate in resolved.parents) and (
            best is None or len(candidate.parts) > len(best.parts)
        ):
            best = candidate
    return best


def module_name_for(file_path: Path, import_root: Path) -> str | None:
    """Dotted module name of *file_path* relative to *import_root*, or None if not importable."""
    relative = file_path.resolve().relative_to(import_root).with_suffix("")
    parts = list(relative.parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    if not parts or not all(part.isidentifier() for part in parts):
        return None
    return ".".join(parts)


def iter_module_names(path: Path) -> list[str]:
    """Sorted dotted names of all modules in *path* (a directory or a ``.py`` file)."""
    import_root = find_import_root(path)
    if import_root is None:
        logger.warning("Classpath root %s is not on sys.path; skipping", path)
        return []
    if path.is_file():
        files: Iterable[Path] = [path] if path.suffix == ".py" else []
    else:
        files = (
            candidate
            for candidate in path.rglob("*.py")
            if "__pycache__" not in candidate.parts
        )
    names = {name for name in (module_name_for(f, import_root) for f in files) if name}
    return sorted(names)
