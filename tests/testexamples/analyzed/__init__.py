"""A small layered application analyzed by ``testexamples.layered_rules``."""
