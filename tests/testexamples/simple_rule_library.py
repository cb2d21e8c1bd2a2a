from __future__ import annotations

from archengine import ArchRules, analyze_classes, arch_test
from testexamples.subone.simple_rule_field import SimpleRuleField
from testexamples.subtwo.simple_rules import SimpleRules

RULES_ONE_FIELD = "rules_one"
RULES_TWO_FIELD = "rules_two"


@analyze_classes(packages=("some.dummy.package",))
class SimpleRuleLibrary:
    rules_one = arch_test(ArchRules.in_(SimpleRules))
    rules_two = arch_test(ArchRules.in_(SimpleRuleField))
