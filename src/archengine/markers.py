"""Markers that declare rules, rule libraries, tags and analysis configuration on classes.

Example::

    @analyze_classes(packages=("shop",), import_options=(DoNotIncludeTests,))
    @arch_tag("layers")
    class ShopArchitecture:
        domain_is_pure = arch_test(
            classes_that(reside_in("shop.domain")).should_not(depend_on("shop.web"))
        )
        naming = arch_test(ArchRules.in_(NamingRules), tags=("naming",))

        @arch_test
        @staticmethod
        def no_cycles(classes: ClassSet) -> None:
            ...
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from archengine.core.configuration import AnalysisConfiguration

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from pathlib import Path

    from archengine.core.configuration import ImportOption, LocationProvider

ARCH_TEST = "ArchTest"  # marker name as shown in error messages

MARKER_ATTRIBUTE = "__arch_test__"
TAGS_ATTRIBUTE = "__arch_tags__"
IGNORE_ATTRIBUTE = "__arch_ignore__"
CONFIGURATION_ATTRIBUTE = "__analyze_classes__"

T = TypeVar("T")


@dataclass(frozen=True)
class ArchRules:
    """Reference to a rule library, a class whose rule members become a nested container."""

    definition: type

    @classmethod
    def in_(cls, definition: type) -> ArchRules:
        if not isinstance(definition, type):
            msg = f"ArchRules.in_() expects a class, got {definition!r}"
            raise TypeError(msg)
        return cls(definition)


class ArchTestField:
    """Class attribute created by ``arch_test(rule)``.

    Attribute access on the class returns the wrapped rule, so rule fields
    stay usable as plain values; discovery reads the wrapper from the class
    namespace.
    """

    def __init__(
        self, value: object, *, tags: Iterable[str] = (), ignored_reason: str | None = None
    ) -> None:
        self.value = value
        self.tags: tuple[str, ...] = tuple(tags)
        self.ignored_reason = ignored_reason
        self.name: str | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: object, owner: type | None = None) -> object:
        return self.value

    def __repr__(self) -> str:
        return f"ArchTestField({self.name}={self.value!r})"


def _is_method_like(obj: object) -> bool:
    return inspect.isfunction(obj) or isinstance(obj, (staticmethod, classmethod))


def _function_of(obj: Any) -> Any:
    return obj.__func__ if isinstance(obj, (staticmethod, classmethod)) else obj


def _mark(obj: T, tags: Iterable[str], ignored_reason: str | None) -> T:
    target = _function_of(obj)
    setattr(target, MARKER_ATTRIBUTE, True)
    if tags:
        _add_tags(target, tags)
    if ignored_reason is not None:
        setattr(target, IGNORE_ATTRIBUTE, ignored_reason)
    return obj


def arch_test(
    obj: Any = None, *, tags: Iterable[str] = (), ignore: str | None = None
) -> Any:
    """Declare a rule.

    * ``name = arch_test(rule)`` declares a rule field (``rule`` has
      ``evaluate()`` or ``check()``) or a nested library when ``rule`` is an
      :class:`ArchRules`.
    * ``@arch_test`` on a static method declares a rule method taking the
      :class:`~archengine.core.classes.ClassSet` as its only parameter.
    * ``@arch_test(tags=..., ignore=...)`` is the parameterized decorator form.
    """
    if obj is None:

        def decorator(target: Any) -> Any:
            return arch_test(target, tags=tags, ignore=ignore)

        return decorator
    if _is_method_like(obj):
        return _mark(obj, tuple(tags), ignore)
    return ArchTestField(obj, tags=tags, ignored_reason=ignore)


def _add_tags(target: Any, names: Iterable[str]) -> None:
    if isinstance(target, type):
        existing = target.__dict__.get(TAGS_ATTRIBUTE, ())
    else:
        existing = getattr(target, TAGS_ATTRIBUTE, ())
    setattr(target, TAGS_ATTRIBUTE, (*existing, *names))


def arch_tag(*names: str) -> Callable[[T], T]:
    """Attach tags to a rule class, rule method or rule field. Stacks."""

    def decorator(target: T) -> T:
        if isinstance(target, ArchTestField):
            target.tags = (*target.tags, *names)
        else:
            _add_tags(_function_of(target), names)
        return target

    return decorator


def arch_ignore(reason: str = "") -> Callable[[T], T]:
    """Keep a rule class or member in the tree but skip it during execution."""

    def decorator(target: T) -> T:
        if isinstance(target, ArchTestField):
            target.ignored_reason = reason
        else:
            setattr(_function_of(target), IGNORE_ATTRIBUTE, reason)
        return target

    return decorator


def analyze_classes(
    *,
    packages: Iterable[str] = (),
    packages_of: Iterable[type] = (),
    locations: Iterable[type[LocationProvider]] = (),
    import_options: Iterable[type[ImportOption]] = (),
) -> Callable[[type[T]], type[T]]:
    """Declare which classes the rules of a root class are evaluated against."""
    configuration = AnalysisConfiguration(
        packages=tuple(packages),
        package_roots=tuple(packages_of),
        location_providers=tuple(locations),
        import_options=tuple(import_options),
    )

    def decorator(cls: type[T]) -> type[T]:
        setattr(cls, CONFIGURATION_ATTRIBUTE, configuration)
        return cls

    return decorator


class LocationsOf:
    """Location provider base: return fixed paths. Subclass and set ``paths``."""

    paths: tuple[Path, ...] = ()

    def get(self, root_class: type) -> Iterable[Path]:
        return self.paths
