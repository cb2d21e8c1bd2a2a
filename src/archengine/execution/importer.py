"""Default class importer: import modules of the configured packages and snapshot their classes."""

from __future__ import annotations

import importlib
import logging
import pkgutil
from pathlib import Path
from typing import TYPE_CHECKING

import tree_sitter_python as tspython
from tree_sitter import Language, Parser

from archengine.core.classes import AnalyzedClass, ClassSet
from archengine.core.configuration import package_of
from archengine.discovery.selectors import classes_defined_in, iter_module_names

if TYPE_CHECKING:
    from types import ModuleType

    from tree_sitter import Node as TSNode

    from archengine.core.configuration import AnalysisConfiguration

logger = logging.getLogger(__name__)

# Compile the Python grammar once at module level.
_PY_LANGUAGE = Language(tspython.language())


# ---------------------------------------------------------------------------
# Import extraction
# ---------------------------------------------------------------------------


def _text(node: TSNode | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def _resolve_relative(node: TSNode, package: str) -> str | None:
    """Turn ``from ..x import y`` into an absolute module name, relative to *package*."""
    level = 0
    rest = ""
    for sub in node.children:
        if sub.type == "import_prefix":
            level = len(_text(sub))
        elif sub.type == "dotted_name":
            rest = _text(sub)
    parts = package.split(".") if package else []
    if level - 1 > len(parts):
        return None
    base = parts[: len(parts) - (level - 1)]
    resolved = ".".join([*base, rest] if rest else base)
    return resolved or None


def extract_module_imports(source: str, package: str = "") -> frozenset[str]:
    """Return the absolute module names imported at the top level of *source*.

    Only statements directly at module level count; imports nested in
    functions, classes, ``if TYPE_CHECKING:`` or ``try`` blocks are not
    runtime dependencies of the module itself. Relative imports are resolved
    against *package*.
    """
    if not source.strip():
        return frozenset()
    parser = Parser(_PY_LANGUAGE)
    tree = parser.parse(source.encode("utf-8"))

    results: set[str] = set()
    for child in tree.root_node.children:
        if child.type == "import_statement":
            # `import X`, `import X.Y as Z`
            for sub in child.named_children:
                if sub.type == "dotted_name":
                    results.add(_text(sub))
                elif sub.type == "aliased_import":
                    results.add(_text(sub.child_by_field_name("name")))
        elif child.type == "import_from_statement":
            module_node = child.child_by_field_name("module_name")
            if module_node is None:
                continue
            if module_node.type == "relative_import":
                resolved = _resolve_relative(module_node, package)
                if resolved:
                    results.add(resolved)
            else:
                results.add(_text(module_node))
    results.discard("")
    return frozenset(results)


def module_imports(module: ModuleType) -> frozenset[str]:
    """Top-level imports of a loaded module, read from its source file."""
    file_name = getattr(module, "__file__", None)
    if not file_name or not file_name.endswith(".py"):
        return frozenset()
    try:
        source = Path(file_name).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        logger.debug("Cannot read source of %s", module.__name__)
        return frozenset()
    is_package = Path(file_name).name == "__init__.py"
    package = module.__name__ if is_package else module.__name__.rpartition(".")[0]
    return extract_module_imports(source, package)


# ---------------------------------------------------------------------------
# Importer
# ---------------------------------------------------------------------------


def walk_package(name: str) -> list[str]:
    """Return *name* and, if it is a package, all modules below it."""
    module = importlib.import_module(name)
    names = [name]
    search_path = getattr(module, "__path__", None)
    if search_path is not None:
        names.extend(info.name for info in pkgutil.walk_packages(search_path, prefix=name + "."))
    return names


class ModuleClassImporter:
    """Import the modules named by an :class:`AnalysisConfiguration` and collect their classes.

    Packages are the explicit ``packages`` plus the packages of
    ``package_roots``. Location providers add modules found under the
    returned paths. A configuration naming nothing analyzes the package of
    the root class. Import options filter by module name; a module is used
    only if every option includes it.

    Modules are really imported, so an import error in analyzed code
    propagates and fails the whole computation.
    """

    def import_classes(self, root_class: type, configuration: AnalysisConfiguration) -> ClassSet:
        options = [option_type() for option_type in configuration.import_options]
        classes: list[AnalyzedClass] = []
        for module_name in self._module_names(root_class, configuration):
            if not all(option.includes(module_name) for option in options):
                continue
            module = importlib.import_module(module_name)
            imports = module_imports(module)
            classes.extend(
                AnalyzedClass.of(cls, imports=imports) for cls in classes_defined_in(module)
            )
        logger.debug("Collected %d classes for %s", len(classes), root_class.__name__)
        return ClassSet(classes)

    @staticmethod
    def _module_names(root_class: type, configuration: AnalysisConfiguration) -> list[str]:
        packages = configuration.resolved_packages()
        if configuration.is_empty:
            packages = (package_of(root_class),)

        names: dict[str, None] = {}
        for package in packages:
            names.update(dict.fromkeys(walk_package(package)))
        for provider_type in configuration.location_providers:
            for location in provider_type().get(root_class):
                names.update(dict.fromkeys(iter_module_names(Path(location))))
        return list(names)
