from __future__ import annotations

from archengine import ArchRules, ClassSet, arch_tag, arch_test
from testexamples.tags.class_with_tags import ClassWithTags
from testexamples.unwanted_class import no_unwanted_classes

FIELD_RULE_NAME = "complex_field_rule"
METHOD_RULE_NAME = "complex_method_rule"


@arch_tag("library-tag")
class ComplexTags:
    classes_with_tags = arch_tag("rules-tag")(arch_test(ArchRules.in_(ClassWithTags)))
    complex_field_rule = arch_test(no_unwanted_classes(), tags=("field-tag",))

    @arch_test(tags=("method-tag",))
    @staticmethod
    def complex_method_rule(classes: ClassSet) -> None:
        no_unwanted_classes().check(classes)
