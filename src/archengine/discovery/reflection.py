"""Member reflection: read rule members, tags and configuration from marked classes."""

from __future__ import annotations

import inspect
import logging
import typing
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, Union

from archengine.core.classes import ClassSet, qualified_name
from archengine.core.configuration import AnalysisConfiguration
from archengine.core.descriptor import FieldSource, MethodSource, Tag
from archengine.core.errors import DiscoveryConfigurationError
from archengine.core.unique_id import FIELD_SEGMENT_TYPE, METHOD_SEGMENT_TYPE
from archengine.markers import (
    ARCH_TEST,
    CONFIGURATION_ATTRIBUTE,
    IGNORE_ATTRIBUTE,
    MARKER_ATTRIBUTE,
    TAGS_ATTRIBUTE,
    ArchRules,
    ArchTestField,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

logger = logging.getLogger(__name__)

CLASS_SET_TYPE_NAME = qualified_name(ClassSet)

# ---------------------------------------------------------------------------
# Rule members
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldRule:
    """A rule held by a marked class attribute."""

    segment_type: ClassVar[str] = FIELD_SEGMENT_TYPE

    declaring_class: type
    name: str
    rule: Any
    tags: frozenset[Tag] = frozenset()
    ignored_reason: str | None = None

    @property
    def source(self) -> FieldSource:
        return FieldSource(qualified_name(self.declaring_class), self.name)

    @property
    def description(self) -> str:
        return str(getattr(self.rule, "description", self.name))


@dataclass(frozen=True)
class MethodRule:
    """A marked static method that checks the class set itself."""

    segment_type: ClassVar[str] = METHOD_SEGMENT_TYPE

    declaring_class: type
    name: str
    function: Callable[[ClassSet], object] = field(compare=False)
    parameter_type_names: str = CLASS_SET_TYPE_NAME
    tags: frozenset[Tag] = frozenset()
    ignored_reason: str | None = None

    @property
    def source(self) -> MethodSource:
        return MethodSource(
            qualified_name(self.declaring_class), self.name, self.parameter_type_names
        )

    @property
    def description(self) -> str:
        return self.name


@dataclass(frozen=True)
class RuleLibrary:
    """A marked attribute referencing another rule class (``ArchRules.in_(...)``)."""

    segment_type: ClassVar[str] = FIELD_SEGMENT_TYPE

    declaring_class: type
    name: str
    definition: type
    tags: frozenset[Tag] = frozenset()
    ignored_reason: str | None = None


RuleMember = Union[FieldRule, MethodRule, RuleLibrary]


# ---------------------------------------------------------------------------
# Reflector port
# ---------------------------------------------------------------------------


class MemberReflector(Protocol):
    """Inspects classes for rule members and marker metadata."""

    def is_rule_bearing(self, cls: type) -> bool: ...

    def rule_members(self, cls: type) -> list[RuleMember]: ...

    def class_tags(self, cls: type) -> frozenset[Tag]: ...

    def class_ignored_reason(self, cls: type) -> str | None: ...

    def configuration_of(self, cls: type) -> AnalysisConfiguration: ...


def _tags(names: Iterable[str]) -> frozenset[Tag]:
    return frozenset(Tag(name) for name in names)


def _raw_function(raw: object) -> Any:
    return raw.__func__ if isinstance(raw, (staticmethod, classmethod)) else raw


def _is_marked_method(raw: object) -> bool:
    target = _raw_function(raw)
    return inspect.isfunction(target) and getattr(target, MARKER_ATTRIBUTE, False) is True


def _is_rule(value: object) -> bool:
    return callable(getattr(value, "evaluate", None)) or callable(getattr(value, "check", None))


class InspectReflector:
    """Default reflector built on :mod:`inspect` and the class namespaces of the MRO.

    Members are reported in declaration order, base classes first; a name
    redefined in a subclass is reported once, from the subclass.
    """

    def is_rule_bearing(self, cls: type) -> bool:
        if not inspect.isclass(cls):
            return False
        return any(
            isinstance(raw, ArchTestField) or _is_marked_method(raw)
            for _, _, raw in self._declared(cls)
        )

    def rule_members(self, cls: type) -> list[RuleMember]:
        members: list[RuleMember] = []
        for declaring_class, name, raw in self._declared(cls):
            if isinstance(raw, ArchTestField):
                members.append(self._field_member(declaring_class, name, raw))
            elif _is_marked_method(raw):
                members.append(self._method_member(cls, declaring_class, name, raw))
        return members

    def class_tags(self, cls: type) -> frozenset[Tag]:
        return _tags(cls.__dict__.get(TAGS_ATTRIBUTE, ()))

    def class_ignored_reason(self, cls: type) -> str | None:
        reason = cls.__dict__.get(IGNORE_ATTRIBUTE)
        return reason if isinstance(reason, str) else None

    def configuration_of(self, cls: type) -> AnalysisConfiguration:
        configuration = getattr(cls, CONFIGURATION_ATTRIBUTE, None)
        if isinstance(configuration, AnalysisConfiguration):
            return configuration
        return AnalysisConfiguration()

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _declared(cls: type) -> list[tuple[type, str, object]]:
        by_name: dict[str, tuple[type, str, object]] = {}
        for klass in reversed(cls.__mro__):
            if klass is object:
                continue
            for name, raw in vars(klass).items():
                by_name.pop(name, None)
                by_name[name] = (klass, name, raw)
        return list(by_name.values())

    @staticmethod
    def _field_member(declaring_class: type, name: str, raw: ArchTestField) -> RuleMember:
        tags = _tags(raw.tags)
        if isinstance(raw.value, ArchRules):
            return RuleLibrary(
                declaring_class, name, raw.value.definition, tags, raw.ignored_reason
            )
        if not _is_rule(raw.value):
            msg = (
                f"@{ARCH_TEST} field {declaring_class.__name__}.{name} "
                f"must be an ArchRule or ArchRules, got {type(raw.value).__name__}"
            )
            raise DiscoveryConfigurationError(msg)
        return FieldRule(declaring_class, name, raw.value, tags, raw.ignored_reason)

    @staticmethod
    def _method_member(cls: type, declaring_class: type, name: str, raw: object) -> MethodRule:
        where = f"@{ARCH_TEST} method {declaring_class.__name__}.{name}"
        if not isinstance(raw, (staticmethod, classmethod)):
            msg = f"{where} must be static"
            raise DiscoveryConfigurationError(msg)

        function = _raw_function(raw)
        parameters = list(inspect.signature(function).parameters.values())
        if isinstance(raw, classmethod):
            parameters = parameters[1:]
        if len(parameters) != 1 or not _accepts_class_set(function, parameters[0]):
            msg = f"{where} must have exactly one parameter of type {CLASS_SET_TYPE_NAME}"
            raise DiscoveryConfigurationError(msg)

        function_tags = getattr(function, TAGS_ATTRIBUTE, ())
        ignored = getattr(function, IGNORE_ATTRIBUTE, None)
        return MethodRule(
            declaring_class,
            name,
            getattr(cls, name),
            tags=_tags(function_tags),
            ignored_reason=ignored if isinstance(ignored, str) else None,
        )


def _accepts_class_set(function: Callable[..., object], parameter: inspect.Parameter) -> bool:
    """Check kind and annotation of the only rule-method parameter.

    A missing annotation is accepted. String annotations that cannot be
    resolved (``TYPE_CHECKING`` imports) are compared by name.
    """
    if parameter.kind not in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        return False
    annotation = parameter.annotation
    if annotation is inspect.Parameter.empty:
        return True
    try:
        annotation = typing.get_type_hints(function).get(parameter.name, annotation)
    except (NameError, TypeError):
        logger.debug("Could not resolve annotations of %s", function.__qualname__)
    if isinstance(annotation, str):
        return annotation in (ClassSet.__name__, CLASS_SET_TYPE_NAME)
    return annotation is ClassSet
