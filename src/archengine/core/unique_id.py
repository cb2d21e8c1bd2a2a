"""Hierarchical identifiers for discovered nodes: ``[engine:x]/[class:y]/[field:z]``."""

from __future__ import annotations

import re
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ENGINE_SEGMENT_TYPE = "engine"
CLASS_SEGMENT_TYPE = "class"
FIELD_SEGMENT_TYPE = "field"
METHOD_SEGMENT_TYPE = "method"

VALID_SEGMENT_TYPES: frozenset[str] = frozenset(
    {ENGINE_SEGMENT_TYPE, CLASS_SEGMENT_TYPE, FIELD_SEGMENT_TYPE, METHOD_SEGMENT_TYPE}
)

_SEGMENT_RE = re.compile(r"\[(?P<type>[^:\[\]]+):(?P<value>[^\[\]]*)\]")


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Segment:
    """A single ``(type, value)`` pair of a :class:`UniqueId`."""

    type: str
    value: str

    def __str__(self) -> str:
        return f"[{self.type}:{self.value}]"


@dataclass(frozen=True)
class UniqueId:
    """Ordered, immutable sequence of segments.

    Two ids are equal when their segments are equal, so ids can be used as
    dictionary keys to dedup nodes reached through different selectors.
    """

    segments: tuple[Segment, ...]

    def __post_init__(self) -> None:
        if not self.segments:
            msg = "UniqueId needs at least one segment"
            raise ValueError(msg)
        for segment in self.segments:
            if segment.type not in VALID_SEGMENT_TYPES:
                msg = f"Unknown segment type {segment.type!r} in {self}"
                raise ValueError(msg)

    @classmethod
    def for_engine(cls, engine_name: str) -> UniqueId:
        return cls((Segment(ENGINE_SEGMENT_TYPE, engine_name),))

    @classmethod
    def parse(cls, text: str) -> UniqueId:
        """Parse the textual form produced by ``str(unique_id)``.

        Raises ``ValueError`` when *text* is not a ``/``-joined list of
        ``[type:value]`` segments.
        """
        segments: list[Segment] = []
        pos = 0
        while pos < len(text):
            match = _SEGMENT_RE.match(text, pos)
            if match is None:
                msg = f"Malformed unique id: {text!r}"
                raise ValueError(msg)
            segments.append(Segment(match.group("type"), match.group("value")))
            pos = match.end()
            if pos < len(text):
                if text[pos] != "/":
                    msg = f"Malformed unique id: {text!r}"
                    raise ValueError(msg)
                pos += 1
                if pos == len(text):
                    msg = f"Malformed unique id (trailing separator): {text!r}"
                    raise ValueError(msg)
        if not segments:
            msg = f"Malformed unique id: {text!r}"
            raise ValueError(msg)
        return cls(tuple(segments))

    def append(self, segment_type: str, value: str) -> UniqueId:
        return UniqueId((*self.segments, Segment(segment_type, value)))

    @property
    def engine_name(self) -> str | None:
        first = self.segments[0]
        return first.value if first.type == ENGINE_SEGMENT_TYPE else None

    @property
    def last_segment(self) -> Segment:
        return self.segments[-1]

    @property
    def parent(self) -> UniqueId | None:
        if len(self.segments) == 1:
            return None
        return UniqueId(self.segments[:-1])

    def is_prefix_of(self, other: UniqueId) -> bool:
        """Return True if *other* equals this id or lies below it."""
        size = len(self.segments)
        return len(other.segments) >= size and other.segments[:size] == self.segments

    def first_class_name(self) -> str | None:
        """Return the value of the first ``class`` segment, i.e. the root class."""
        for segment in self.segments:
            if segment.type == CLASS_SEGMENT_TYPE:
                return segment.value
        return None

    def __str__(self) -> str:
        return "/".join(str(segment) for segment in self.segments)
