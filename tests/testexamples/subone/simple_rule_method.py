from __future__ import annotations

from archengine import ClassSet, analyze_classes, arch_test
from testexamples.unwanted_class import no_unwanted_classes

SIMPLE_RULE_METHOD_NAME = "simple_rule"


@analyze_classes(packages=("some.dummy.package",))
class SimpleRuleMethod:
    @arch_test
    @staticmethod
    def simple_rule(classes: ClassSet) -> None:
        no_unwanted_classes().check(classes)
