"""Violations and per-node execution results."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from archengine.core.classes import AnalyzedClass


@dataclass(frozen=True)
class Violation:
    """A single rule violation, naming the classes that caused it."""

    message: str
    classes: tuple[AnalyzedClass, ...] = ()

    @property
    def class_names(self) -> tuple[str, ...]:
        return tuple(analyzed.simple_name for analyzed in self.classes)


class Status(enum.Enum):
    SUCCESSFUL = "successful"
    FAILED = "failed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class TestResult:
    """Outcome reported to a listener when a node finishes."""

    __test__ = False

    status: Status
    message: str | None = None
    cause: BaseException | None = None

    @classmethod
    def successful(cls) -> TestResult:
        return cls(Status.SUCCESSFUL)

    @classmethod
    def failed(cls, message: str, cause: BaseException | None = None) -> TestResult:
        return cls(Status.FAILED, message, cause)

    @classmethod
    def aborted(cls, message: str | None = None) -> TestResult:
        return cls(Status.ABORTED, message)


def format_violations(rule_description: str, violations: Sequence[Violation]) -> str:
    """Build the failure message for a violated rule.

    Every implicated class appears by simple name, even when the violation's
    own message does not mention it::

        Architecture Violation [rule 'no classes should be named X'] was violated (1 times):
        Class <pkg.mod.X> is named X
    """
    lines = [
        f"Architecture Violation [rule '{rule_description}'] was violated "
        f"({len(violations)} times):"
    ]
    for violation in violations:
        missing = [name for name in violation.class_names if name not in violation.message]
        if missing:
            lines.append(f"{violation.message} ({', '.join(missing)})")
        else:
            lines.append(violation.message)
    return "\n".join(lines)
