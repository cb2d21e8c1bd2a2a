from __future__ import annotations

from archengine import (
    ClassSet,
    DoNotIncludeTests,
    analyze_classes,
    arch_test,
    classes_that,
    depend_on,
    reside_in,
)
from archengine.lang import have_simple_name_ending_with

DOMAIN = "testexamples.analyzed.domain"
WEB = "testexamples.analyzed.web"


@analyze_classes(packages=("testexamples.analyzed",), import_options=(DoNotIncludeTests,))
class LayeredArchitecture:
    domain_does_not_depend_on_web = arch_test(
        classes_that(reside_in(DOMAIN)).should_not(depend_on(WEB))
    )
    web_classes_are_views = arch_test(
        classes_that(reside_in(WEB)).should(have_simple_name_ending_with("View"))
    )

    @arch_test
    @staticmethod
    def test_helpers_are_not_analyzed(classes: ClassSet) -> None:
        assert not any(".tests." in analyzed.module + "." for analyzed in classes), (
            "test helpers were imported"
        )
