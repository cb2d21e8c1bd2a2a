"""Execution — class cache, default importer, rule evaluation and tree traversal."""

from archengine.execution.cache import CacheEntry, ClassCache, ClassImporter
from archengine.execution.coordinator import (
    ExecutionCoordinator,
    ExecutionListener,
    ExecutionSummary,
    RecordingListener,
)
from archengine.execution.evaluator import DefaultRuleEvaluator, RuleEvaluator
from archengine.execution.importer import ModuleClassImporter, extract_module_imports

__all__ = [
    "CacheEntry",
    "ClassCache",
    "ClassImporter",
    "DefaultRuleEvaluator",
    "ExecutionCoordinator",
    "ExecutionListener",
    "ExecutionSummary",
    "ModuleClassImporter",
    "RecordingListener",
    "RuleEvaluator",
    "extract_module_imports",
]
