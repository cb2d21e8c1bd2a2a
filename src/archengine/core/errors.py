"""Exception taxonomy shared by discovery and execution."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from archengine.core.configuration import AnalysisConfiguration
    from archengine.core.results import Violation


class ArchEngineError(Exception):
    """Base class for all errors raised by archengine."""


class DiscoveryConfigurationError(ArchEngineError):
    """Raised when a rule member is malformed; aborts discovery before execution."""


class RuleViolationFailure(ArchEngineError, AssertionError):
    """A rule found violating classes.

    This is the expected way for a rule to fail, not a defect. It derives from
    ``AssertionError`` so rule methods can let it propagate like any failed
    check.
    """

    def __init__(self, message: str, violations: Sequence[Violation] = ()) -> None:
        super().__init__(message)
        self.violations = tuple(violations)

    @property
    def class_names(self) -> tuple[str, ...]:
        """Simple names of all implicated classes, in first-seen order."""
        seen: dict[str, None] = {}
        for violation in self.violations:
            for name in violation.class_names:
                seen.setdefault(name, None)
        return tuple(seen)


class UnexpectedEvaluationError(ArchEngineError):
    """A rule or the evaluator itself failed with something other than a violation."""

    def __init__(self, rule_name: str, cause: BaseException) -> None:
        super().__init__(f"Rule {rule_name} raised {type(cause).__name__}: {cause}")
        self.rule_name = rule_name


class CacheComputationError(ArchEngineError):
    """The class importer failed for a configuration."""

    def __init__(self, root_name: str, configuration: AnalysisConfiguration) -> None:
        super().__init__(f"Could not import classes for {root_name} using {configuration}")
        self.root_name = root_name
        self.configuration = configuration
