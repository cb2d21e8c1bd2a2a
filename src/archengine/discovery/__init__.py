"""Discovery — selectors, member reflection, tree building and pruning."""

from archengine.discovery.builder import ENGINE_DISPLAY_NAME, DescriptorTreeBuilder
from archengine.discovery.pruning import prune
from archengine.discovery.reflection import (
    FieldRule,
    InspectReflector,
    MemberReflector,
    MethodRule,
    RuleLibrary,
    RuleMember,
)
from archengine.discovery.selectors import (
    ClassNameFilter,
    ClasspathRootSelector,
    ClassSelector,
    DiscoveryRequest,
    ResolvedSelection,
    Selector,
    SelectorResolver,
    UniqueIdSelector,
    load_class,
    scan_classpath_root,
)

__all__ = [
    "ENGINE_DISPLAY_NAME",
    "ClassNameFilter",
    "ClassSelector",
    "ClasspathRootSelector",
    "DescriptorTreeBuilder",
    "DiscoveryRequest",
    "FieldRule",
    "InspectReflector",
    "MemberReflector",
    "MethodRule",
    "ResolvedSelection",
    "RuleLibrary",
    "RuleMember",
    "Selector",
    "SelectorResolver",
    "UniqueIdSelector",
    "load_class",
    "prune",
    "scan_classpath_root",
]
