"""Core model — unique ids, descriptor tree, analyzed classes, configuration, results, errors."""

from archengine.core.classes import AnalyzedClass, ClassSet, qualified_name
from archengine.core.configuration import (
    AnalysisConfiguration,
    DoNotIncludeTests,
    ImportOption,
    LocationProvider,
    OnlyIncludeTests,
)
from archengine.core.descriptor import (
    ClassSource,
    DescriptorNode,
    FieldSource,
    MethodSource,
    NodeType,
    Source,
    Tag,
)
from archengine.core.errors import (
    ArchEngineError,
    CacheComputationError,
    DiscoveryConfigurationError,
    RuleViolationFailure,
    UnexpectedEvaluationError,
)
from archengine.core.results import Status, TestResult, Violation, format_violations
from archengine.core.unique_id import (
    CLASS_SEGMENT_TYPE,
    ENGINE_SEGMENT_TYPE,
    FIELD_SEGMENT_TYPE,
    METHOD_SEGMENT_TYPE,
    Segment,
    UniqueId,
)

__all__ = [
    "CLASS_SEGMENT_TYPE",
    "ENGINE_SEGMENT_TYPE",
    "FIELD_SEGMENT_TYPE",
    "METHOD_SEGMENT_TYPE",
    "AnalysisConfiguration",
    "AnalyzedClass",
    "ArchEngineError",
    "CacheComputationError",
    "ClassSet",
    "ClassSource",
    "DescriptorNode",
    "DiscoveryConfigurationError",
    "DoNotIncludeTests",
    "FieldSource",
    "ImportOption",
    "LocationProvider",
    "MethodSource",
    "NodeType",
    "OnlyIncludeTests",
    "RuleViolationFailure",
    "Segment",
    "Source",
    "Status",
    "Tag",
    "TestResult",
    "UnexpectedEvaluationError",
    "UniqueId",
    "Violation",
    "format_violations",
    "qualified_name",
]
