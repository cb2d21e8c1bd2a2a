"""Rule language: describe class predicates and combine them into rules.

Example::

    domain_is_pure = classes_that(reside_in("shop.domain")).should_not(depend_on("shop.web"))
    no_helpers = no_classes_that(reside_in("shop")).should(have_simple_name_ending_with("Helper"))

Rules are plain values: ``rule.evaluate(classes)`` returns the violations,
``rule.check(classes)`` raises :class:`RuleViolationFailure` when there are any.
"""

from __future__ import annotations

import fnmatch
import re
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from archengine.core.classes import qualified_name
from archengine.core.errors import RuleViolationFailure
from archengine.core.results import Violation, format_violations

if TYPE_CHECKING:
    from collections.abc import Callable

    from archengine.core.classes import AnalyzedClass, ClassSet

# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClassPredicate:
    """A described test on one analyzed class.

    The description completes the sentence "classes that ..." and
    "... should ...", so it reads as a verb phrase (``reside in 'x'``).
    """

    description: str
    test: Callable[[AnalyzedClass], bool]

    def __call__(self, analyzed: AnalyzedClass) -> bool:
        return self.test(analyzed)

    def and_(self, other: ClassPredicate) -> ClassPredicate:
        return ClassPredicate(
            f"{self.description} and {other.description}",
            lambda analyzed: self(analyzed) and other(analyzed),
        )

    def or_(self, other: ClassPredicate) -> ClassPredicate:
        return ClassPredicate(
            f"{self.description} or {other.description}",
            lambda analyzed: self(analyzed) or other(analyzed),
        )

    def negate(self) -> ClassPredicate:
        return ClassPredicate(f"not {self.description}", lambda analyzed: not self(analyzed))

    def __str__(self) -> str:
        return self.description


def reside_in(package: str) -> ClassPredicate:
    return ClassPredicate(
        f"reside in package '{package}'", lambda analyzed: analyzed.resides_in(package)
    )


def have_simple_name(name: str) -> ClassPredicate:
    return ClassPredicate(
        f"have simple name '{name}'", lambda analyzed: analyzed.simple_name == name
    )


def have_simple_name_ending_with(suffix: str) -> ClassPredicate:
    return ClassPredicate(
        f"have simple name ending with '{suffix}'",
        lambda analyzed: analyzed.simple_name.endswith(suffix),
    )


def have_name_matching(pattern: str) -> ClassPredicate:
    """Full regular-expression match against the fully qualified name."""
    compiled = re.compile(pattern)
    return ClassPredicate(
        f"have name matching '{pattern}'",
        lambda analyzed: compiled.fullmatch(analyzed.name) is not None,
    )


def have_module_matching(glob: str) -> ClassPredicate:
    """Glob match (``fnmatch``) against the defining module name."""
    return ClassPredicate(
        f"have module matching '{glob}'", lambda analyzed: fnmatch.fnmatch(analyzed.module, glob)
    )


def are_subclasses_of(base: type | str) -> ClassPredicate:
    """Direct subclasses of *base* (given as class or fully qualified name)."""
    name = base if isinstance(base, str) else qualified_name(base)
    return ClassPredicate(f"are subclasses of '{name}'", lambda analyzed: name in analyzed.bases)


def depend_on(module: str) -> ClassPredicate:
    """The defining module imports *module* or a module below it."""
    return ClassPredicate(f"depend on '{module}'", lambda analyzed: analyzed.depends_on(module))


def any_class() -> ClassPredicate:
    return ClassPredicate("", lambda analyzed: True)


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ArchRule:
    """Classes selected by ``selector`` must (or must not) satisfy ``condition``."""

    description: str
    selector: ClassPredicate
    condition: ClassPredicate
    expected: bool = True

    def evaluate(self, classes: ClassSet) -> list[Violation]:
        violations: list[Violation] = []
        for analyzed in classes.that(self.selector):
            if self.condition(analyzed) is self.expected:
                continue
            verb = "does not" if self.expected else "does"
            violations.append(
                Violation(
                    f"Class <{analyzed.name}> {verb} {self.condition.description}",
                    (analyzed,),
                )
            )
        return violations

    def check(self, classes: ClassSet) -> None:
        violations = self.evaluate(classes)
        if violations:
            raise RuleViolationFailure(format_violations(self.description, violations), violations)

    def because(self, reason: str) -> ArchRule:
        return replace(self, description=f"{self.description}, because {reason}")

    def as_(self, description: str) -> ArchRule:
        return replace(self, description=description)

    def __str__(self) -> str:
        return self.description


class GivenClasses:
    """The "classes that ..." half of a rule, waiting for its condition."""

    def __init__(self, selector: ClassPredicate, *, negated: bool = False) -> None:
        self._selector = selector
        self._negated = negated

    def that(self, predicate: ClassPredicate) -> GivenClasses:
        selector = predicate if not self._selector.description else self._selector.and_(predicate)
        return GivenClasses(selector, negated=self._negated)

    def should(self, condition: ClassPredicate) -> ArchRule:
        return self._rule("should", condition, expected=not self._negated)

    def should_not(self, condition: ClassPredicate) -> ArchRule:
        return self._rule("should not", condition, expected=self._negated)

    def _rule(self, verb: str, condition: ClassPredicate, *, expected: bool) -> ArchRule:
        subject = "no classes" if self._negated else "classes"
        if self._selector.description:
            subject = f"{subject} that {self._selector.description}"
        description = f"{subject} {verb} {condition.description}"
        return ArchRule(description, self._selector, condition, expected)


def classes() -> GivenClasses:
    return GivenClasses(any_class())


def no_classes() -> GivenClasses:
    return GivenClasses(any_class(), negated=True)


def classes_that(predicate: ClassPredicate) -> GivenClasses:
    return classes().that(predicate)


def no_classes_that(predicate: ClassPredicate) -> GivenClasses:
    return no_classes().that(predicate)
