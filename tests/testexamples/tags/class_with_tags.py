from __future__ import annotations

from archengine import ArchRules, ClassSet, analyze_classes, arch_tag, arch_test
from testexamples.subone.simple_rule_field import SimpleRuleField
from testexamples.unwanted_class import no_unwanted_classes

FIELD_RULE_NAME = "field_rule_in_class_with_tags"
METHOD_RULE_NAME = "method_rule_in_class_with_tags"


@arch_tag("tag-one")
@arch_tag("tag-two")
@analyze_classes(packages=("some.dummy.package",))
class ClassWithTags:
    field_rule_in_class_with_tags = arch_test(no_unwanted_classes())
    library_in_class_with_tags = arch_test(ArchRules.in_(SimpleRuleField))

    @arch_test
    @staticmethod
    def method_rule_in_class_with_tags(classes: ClassSet) -> None:
        no_unwanted_classes().check(classes)
