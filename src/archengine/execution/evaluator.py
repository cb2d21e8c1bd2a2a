"""Rule evaluation: run one rule member against a class set and collect its violations."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol, Union

from archengine.core.classes import AnalyzedClass
from archengine.core.errors import RuleViolationFailure, UnexpectedEvaluationError
from archengine.core.results import Violation
from archengine.discovery.reflection import MethodRule

if TYPE_CHECKING:
    from collections.abc import Callable

    from archengine.core.classes import ClassSet
    from archengine.discovery.reflection import FieldRule

ExecutableMember = Union["FieldRule", "MethodRule"]


class RuleEvaluator(Protocol):
    """Evaluates a rule member; returns violations, raises only on defects."""

    def evaluate(self, member: ExecutableMember, classes: ClassSet) -> list[Violation]: ...


class DefaultRuleEvaluator:
    """Evaluate rule fields and rule methods.

    * A rule field whose rule has ``evaluate(classes)`` contributes the
      violations it returns.
    * A rule field with only ``check(classes)``, and every rule method, is
      called; a raised :class:`RuleViolationFailure` or ``AssertionError``
      becomes violations.
    * A returned value is reported, never dropped: ``None`` means no
      violations, a :class:`Violation` is kept, an
      :class:`~archengine.core.classes.AnalyzedClass` becomes a violation
      naming that class and a string becomes a violation with that text.
      An iterable contributes each of its items, any other item becoming a
      violation with its text.
    * Any other exception is a defect and surfaces as
      :class:`UnexpectedEvaluationError` chained to the original error, and so
      does any other returned value.
    """

    def evaluate(self, member: ExecutableMember, classes: ClassSet) -> list[Violation]:
        if isinstance(member, MethodRule):
            return self._call(member.name, lambda: member.function(classes))
        rule = member.rule
        evaluate = getattr(rule, "evaluate", None)
        if callable(evaluate):
            return self._call(member.name, lambda: evaluate(classes))
        return self._call(member.name, lambda: rule.check(classes))

    @staticmethod
    def _call(name: str, invoke: Callable[[], object]) -> list[Violation]:
        try:
            returned = invoke()
        except RuleViolationFailure as failure:
            return list(failure.violations) or [Violation(str(failure))]
        except AssertionError as failure:
            return [Violation(str(failure) or f"{name} failed")]
        except Exception as exc:
            raise UnexpectedEvaluationError(name, exc) from exc
        if returned is None:
            return []
        if isinstance(returned, (Violation, AnalyzedClass, str)):
            return [_as_violation(name, returned)]
        if isinstance(returned, Iterable) and not isinstance(returned, bytes):
            return [_as_violation(name, item) for item in returned]
        error = TypeError(f"unsupported return value of type {type(returned).__name__}")
        raise UnexpectedEvaluationError(name, error) from error


def _as_violation(rule_name: str, item: object) -> Violation:
    if isinstance(item, Violation):
        return item
    if isinstance(item, AnalyzedClass):
        return Violation(f"Class <{item.name}> violates {rule_name}", (item,))
    return Violation(str(item) or f"{rule_name} failed")
