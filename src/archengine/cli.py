"""archengine CLI entry point."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

import click

from archengine import __version__

if TYPE_CHECKING:
    from collections.abc import Callable

    from archengine.discovery.selectors import DiscoveryRequest

F = TypeVar("F", bound="Callable[..., Any]")


@click.group()
@click.version_option(version=__version__, prog_name="archengine")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """archengine - architecture rules as tests."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    elif quiet:
        logging.basicConfig(level=logging.ERROR)


# ---------------------------------------------------------------------------
# Shared selection options
# ---------------------------------------------------------------------------

_PROJECT_OPTION = click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)
_FORMAT_OPTION = click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "json", "porcelain"]),
    default=None,
    help="Output format (default: rich if TTY, porcelain if piped).",
)


def _selection_options(func: F) -> F:
    options = [
        click.option(
            "--class",
            "-c",
            "class_names",
            multiple=True,
            help="Fully qualified rule class to select (repeatable).",
        ),
        click.option(
            "--id",
            "unique_ids",
            multiple=True,
            help="Unique id of a class or rule to select (repeatable).",
        ),
        click.option(
            "--path",
            "paths",
            multiple=True,
            type=click.Path(exists=True, path_type=Path),
            help="Directory or .py file to scan (repeatable; default: scan_paths from config).",
        ),
        click.option("--include", multiple=True, help="Include class names matching regex."),
        click.option("--exclude", multiple=True, help="Exclude class names matching regex."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _ensure_importable(*paths: Path) -> None:
    for path in paths:
        entry = str(path.resolve())
        if entry not in sys.path:
            sys.path.insert(0, entry)


def _build_request(
    project_root: Path,
    *,
    class_names: tuple[str, ...],
    unique_ids: tuple[str, ...],
    paths: tuple[Path, ...],
    include: tuple[str, ...],
    exclude: tuple[str, ...],
) -> DiscoveryRequest:
    from archengine.config import load_settings
    from archengine.discovery.selectors import ClassNameFilter, DiscoveryRequest

    settings = load_settings(project_root)
    request = DiscoveryRequest(configuration_parameters=dict(settings.parameters))

    scan_roots = list(paths)
    if not (class_names or unique_ids or paths):
        scan_roots = [root for root in settings.scan_roots(project_root) if root.exists()]

    # Scan roots become import roots, so their modules import by package name.
    _ensure_importable(project_root, *(root for root in scan_roots if root.is_dir()))

    for name in class_names:
        request.with_class(name)
    for unique_id in unique_ids:
        request.with_unique_id(unique_id)
    for root in scan_roots:
        request.with_classpath_root(root)
    request.with_filter(
        ClassNameFilter(
            (*settings.include_patterns, *include), (*settings.exclude_patterns, *exclude)
        )
    )
    return request


def _resolve_format(fmt: str | None) -> str:
    if fmt is None:
        return "rich" if sys.stdout.isatty() else "porcelain"
    return fmt


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@main.command()
@_selection_options
@_FORMAT_OPTION
@_PROJECT_OPTION
def discover(
    *,
    class_names: tuple[str, ...],
    unique_ids: tuple[str, ...],
    paths: tuple[Path, ...],
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    fmt: str | None,
    project: Path | None,
) -> None:
    """Show the rule tree without running it.

    Exit codes: 0 = discovered, 2 = malformed rule or bad selection.
    """
    from archengine.core.errors import ArchEngineError
    from archengine.engine import ArchTestEngine
    from archengine.reporting import format_tree_json, format_tree_porcelain, render_tree

    project_root = project or Path.cwd()
    fmt = _resolve_format(fmt)

    try:
        request = _build_request(
            project_root,
            class_names=class_names,
            unique_ids=unique_ids,
            paths=paths,
            include=include,
            exclude=exclude,
        )
        root = ArchTestEngine().discover(request)
    except (ArchEngineError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    if fmt == "rich":
        from rich.console import Console

        render_tree(root, Console())
        return

    output = format_tree_json(root) if fmt == "json" else format_tree_porcelain(root)
    if output:
        click.echo(output)


@main.command()
@_selection_options
@_FORMAT_OPTION
@_PROJECT_OPTION
def run(
    *,
    class_names: tuple[str, ...],
    unique_ids: tuple[str, ...],
    paths: tuple[Path, ...],
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    fmt: str | None,
    project: Path | None,
) -> None:
    """Discover and run architecture rules.

    Exit codes: 0 = all rules passed, 1 = rule failures,
    2 = malformed rule or bad selection.
    """
    from archengine.core.errors import ArchEngineError
    from archengine.engine import ArchTestEngine, ExecutionRequest
    from archengine.execution.coordinator import RecordingListener
    from archengine.reporting import (
        format_summary_json,
        format_summary_porcelain,
        format_summary_rich,
    )

    project_root = project or Path.cwd()
    fmt = _resolve_format(fmt)
    engine = ArchTestEngine()

    try:
        request = _build_request(
            project_root,
            class_names=class_names,
            unique_ids=unique_ids,
            paths=paths,
            include=include,
            exclude=exclude,
        )
        root = engine.discover(request)
    except (ArchEngineError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    listener = RecordingListener()
    engine.execute(ExecutionRequest(root, listener, request.configuration_parameters))
    summary = listener.summary()

    if fmt == "rich":
        from rich.console import Console

        Console().print(format_summary_rich(summary), highlight=False)
    else:
        formatters = {
            "json": format_summary_json,
            "porcelain": format_summary_porcelain,
        }
        output = formatters[fmt](summary)
        if output:
            click.echo(output)

    if summary.has_failures:
        sys.exit(1)
