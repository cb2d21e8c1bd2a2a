"""In-memory cache of imported class sets, scoped per root class."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from archengine.core.classes import qualified_name
from archengine.core.errors import CacheComputationError

if TYPE_CHECKING:
    from archengine.core.classes import ClassSet
    from archengine.core.configuration import AnalysisConfiguration

logger = logging.getLogger(__name__)

# Cache key: (root class, analysis configuration)
CacheKey = tuple[type, "AnalysisConfiguration"]


class ClassImporter(Protocol):
    """Turns an analysis configuration into the set of analyzed classes."""

    def import_classes(
        self, root_class: type, configuration: AnalysisConfiguration
    ) -> ClassSet: ...


@dataclass
class CacheEntry:
    """A lazily computed class set. ``lock`` serializes its single computation."""

    lock: threading.Lock = field(default_factory=threading.Lock)
    classes: ClassSet | None = None
    failure: Exception | None = None

    @property
    def done(self) -> bool:
        return self.classes is not None or self.failure is not None


class ClassCache:
    """Class sets keyed by root class and configuration, computed at most once per key.

    Concurrent callers asking for the same key wait for the one computation
    in flight instead of starting their own. A failed import is remembered
    and re-raised as :class:`CacheComputationError` to every later caller of
    that key until the root is cleared.

    Entries for different root classes never share state; ``clear(root)``
    drops every entry of that root.
    """

    def __init__(self, importer: ClassImporter) -> None:
        self._importer = importer
        self._store: dict[CacheKey, CacheEntry] = {}
        self._lock = threading.Lock()
        self._computations = 0

    def get(self, root_class: type, configuration: AnalysisConfiguration) -> ClassSet:
        """Return the class set for *root_class* and *configuration*, importing it on first use."""
        key: CacheKey = (root_class, configuration)
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                entry = CacheEntry()
                self._store[key] = entry

        with entry.lock:
            if not entry.done:
                self._compute(entry, root_class, configuration)

        if entry.classes is None:
            root_name = qualified_name(root_class)
            raise CacheComputationError(root_name, configuration) from entry.failure
        return entry.classes

    def _compute(
        self, entry: CacheEntry, root_class: type, configuration: AnalysisConfiguration
    ) -> None:
        start = time.monotonic()
        try:
            classes = self._importer.import_classes(root_class, configuration)
        except Exception as exc:
            entry.failure = exc
        else:
            if classes is None:
                importer_name = type(self._importer).__name__
                entry.failure = TypeError(f"{importer_name} returned no class set")
            else:
                entry.classes = classes
        if entry.failure is not None:
            logger.warning(
                "Importing classes for %s failed: %s", root_class.__name__, entry.failure
            )
        with self._lock:
            self._computations += 1
        if entry.classes is not None:
            logger.debug(
                "Imported %d classes for %s in %.1fms",
                len(entry.classes),
                root_class.__name__,
                (time.monotonic() - start) * 1000,
            )

    def clear(self, root_class: type) -> None:
        """Remove all entries for *root_class*. Clearing an unknown root is a no-op."""
        with self._lock:
            keys_to_remove = [k for k in self._store if k[0] is root_class]
            for k in keys_to_remove:
                del self._store[k]
        if keys_to_remove:
            logger.debug("Cleared %d cache entries of %s", len(keys_to_remove), root_class.__name__)

    def stats(self) -> dict[str, int]:
        """Return cache statistics."""
        with self._lock:
            return {"entries": len(self._store), "computations": self._computations}
