"""archengine — discover and run architecture rules declared on Python classes."""

__version__ = "0.3.0"

from archengine.core.classes import AnalyzedClass, ClassSet
from archengine.core.configuration import DoNotIncludeTests, OnlyIncludeTests
from archengine.core.errors import (
    ArchEngineError,
    CacheComputationError,
    DiscoveryConfigurationError,
    RuleViolationFailure,
    UnexpectedEvaluationError,
)
from archengine.core.results import Status, TestResult, Violation
from archengine.core.unique_id import UniqueId
from archengine.discovery.selectors import ClassNameFilter, DiscoveryRequest
from archengine.engine import ENGINE_ID, ArchTestEngine, ExecutionRequest
from archengine.execution.coordinator import RecordingListener
from archengine.lang import (
    ArchRule,
    classes,
    classes_that,
    depend_on,
    have_name_matching,
    have_simple_name,
    no_classes,
    no_classes_that,
    reside_in,
)
from archengine.markers import (
    ArchRules,
    LocationsOf,
    analyze_classes,
    arch_ignore,
    arch_tag,
    arch_test,
)

__all__ = [
    "ENGINE_ID",
    "AnalyzedClass",
    "ArchEngineError",
    "ArchRule",
    "ArchRules",
    "ArchTestEngine",
    "CacheComputationError",
    "ClassNameFilter",
    "ClassSet",
    "DiscoveryConfigurationError",
    "DiscoveryRequest",
    "DoNotIncludeTests",
    "ExecutionRequest",
    "LocationsOf",
    "OnlyIncludeTests",
    "RecordingListener",
    "RuleViolationFailure",
    "Status",
    "TestResult",
    "UnexpectedEvaluationError",
    "UniqueId",
    "Violation",
    "__version__",
    "analyze_classes",
    "arch_ignore",
    "arch_tag",
    "arch_test",
    "classes",
    "classes_that",
    "depend_on",
    "have_name_matching",
    "have_simple_name",
    "no_classes",
    "no_classes_that",
    "reside_in",
]
