"""
XFeature command line interface.

Commands:
- compile: Compile a feature (file or name in the spec directory) to JSON
- check: Report duplicate ids and unresolved references
- params: Show the parameters of a query text
- inspect: Summarise a feature
- features: List the features in the spec directory
- checksum: MD5 of a feature file or every feature file in a directory
  (the configured spec directory by default)
- load: Load a feature through the runtime (live backend or mock bundle)
- query: Run one query through the runtime
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from xfeature import __version__
from xfeature.config import XFeatureConfig, load_config
from xfeature.core.errors import XFeatureError
from xfeature.core.loader import (
    FEATURE_SUFFIX,
    directory_checksums,
    feature_checksum,
    list_features,
    load_feature,
)
from xfeature.core.params import convert_placeholders, parameter_names
from xfeature.core.parser import parse_feature_file
from xfeature.logging import parse_level, setup_logging
from xfeature.runtime.context import FeatureContext
from xfeature.runtime.gateway import MockBundle
from xfeature.runtime.state import LoadState
from xfeature.specs import FeatureDefinition

logger = logging.getLogger(__name__)

console = Console()

app = typer.Typer(
    help="XFeature - compile and run declarative feature specifications",
    no_args_is_help=True,
)


def get_version() -> str:
    """Get XFeature version from package metadata."""
    try:
        from importlib.metadata import version

        return version("xfeature")
    except Exception:
        return __version__


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"xfeature {get_version()}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    log_dir: Path | None = typer.Option(  # noqa: B008
        None,
        "--log-dir",
        help="Also write JSONL logs to this directory",
    ),
) -> None:
    """XFeature CLI main callback for global options."""
    level = logging.DEBUG if verbose else logging.WARNING
    setup_logging(log_dir=log_dir, level=level)


# =============================================================================
# Helpers
# =============================================================================


def _load_config(config_path: Path | None) -> XFeatureConfig:
    try:
        return load_config(config_path)
    except XFeatureError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


def _is_file_target(target: str) -> bool:
    """A target naming an .xml file or containing a path separator is a path."""
    return target.lower().endswith(FEATURE_SUFFIX) or "/" in target or "\\" in target


def _compile(
    target: str,
    strict: bool | None = None,
    config_path: Path | None = None,
) -> FeatureDefinition:
    """
    Compile a feature given as a file path or as a name in the spec directory.

    ``strict`` falls back to ``[specs] strict`` from the configuration.
    """
    config = _load_config(config_path)
    if strict is None:
        strict = config.specs.strict

    try:
        if _is_file_target(target):
            path = Path(target)
            if not path.is_file():
                typer.echo(f"Error: file not found: {path}", err=True)
                raise typer.Exit(code=1)
            return parse_feature_file(path, strict=strict)
        return load_feature(target, config.specs.directory, strict=strict)
    except XFeatureError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


def _parse_params(values: list[str]) -> dict[str, Any]:
    params: dict[str, Any] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected key=value, got '{item}'", param_hint="--param")
        params[key] = value
    return params


def _context(
    feature: str,
    config_path: Path | None,
    api_url: str | None,
    mock: Path | None,
) -> FeatureContext:
    config: XFeatureConfig = load_config(config_path)
    if api_url:
        config.api.base_url = api_url
    if config.logging.directory is not None:
        current = logging.getLogger("xfeature").getEffectiveLevel()
        setup_logging(
            config.logging.directory,
            level=min(current, parse_level(config.logging.level)),
        )
    bundle = MockBundle.from_file(mock) if mock else None
    return FeatureContext.from_config(feature, config, mock=bundle)


# =============================================================================
# Compiler commands
# =============================================================================


STRICT_HELP = "Reject missing ids and unknown values (default: [specs] strict)"
TARGET_HELP = "Feature XML file, or a feature name looked up in the spec directory"


@app.command(name="compile")
def compile_command(
    target: str = typer.Argument(..., metavar="FEATURE", help=TARGET_HELP),
    strict: bool | None = typer.Option(None, "--strict/--lenient", help=STRICT_HELP),
    indent: int = typer.Option(2, "--indent", help="JSON indentation"),
    config: Path | None = typer.Option(None, "--config", help="xfeature.toml path"),  # noqa: B008
) -> None:
    """
    Compile a feature and print it as JSON.

    Examples:
        xfeature compile specs/xfeature/UserManagement.xml
        xfeature compile UserManagement --strict --indent 0
    """
    definition = _compile(target, strict=strict, config_path=config)
    typer.echo(json.dumps(definition.to_wire(), indent=indent or None, ensure_ascii=False))


@app.command(name="check")
def check_command(
    target: str = typer.Argument(..., metavar="FEATURE", help=TARGET_HELP),
    strict: bool | None = typer.Option(None, "--strict/--lenient", help=STRICT_HELP),
    config: Path | None = typer.Option(None, "--config", help="xfeature.toml path"),  # noqa: B008
) -> None:
    """Check a feature for duplicate ids and unresolved references."""
    definition = _compile(target, strict=strict, config_path=config)
    problems = definition.validate_references()
    if problems:
        for problem in problems:
            typer.echo(f"  - {problem}", err=True)
        typer.echo(f"{definition.name}: {len(problems)} problem(s) found", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"{definition.name}: OK")


@app.command(name="params")
def params_command(
    sql: str = typer.Argument(..., help="Query text"),
    driver: str | None = typer.Option(None, "--driver", "-d", help="Convert placeholders for driver"),
) -> None:
    """Print the parameter names of a query text, one per line."""
    for name in parameter_names(sql):
        typer.echo(name)
    if driver:
        typer.echo(convert_placeholders(sql, driver))


@app.command(name="inspect")
def inspect_command(
    target: str = typer.Argument(..., metavar="FEATURE", help=TARGET_HELP),
    strict: bool | None = typer.Option(None, "--strict/--lenient", help=STRICT_HELP),
    config: Path | None = typer.Option(None, "--config", help="xfeature.toml path"),  # noqa: B008
) -> None:
    """Summarise the queries, tables, forms and mappings of a feature."""
    definition = _compile(target, strict=strict, config_path=config)

    console.print(f"[bold]{definition.name}[/bold] version {definition.version or '-'}")

    queries = Table(title="Queries")
    queries.add_column("Id")
    queries.add_column("Type")
    queries.add_column("Parameters")
    for query in definition.backend.queries:
        queries.add_row(query.id, query.kind.value, ", ".join(query.parameter_names))
    for action in definition.backend.action_queries:
        queries.add_row(action.id, action.kind.value, ", ".join(action.parameter_names))
    console.print(queries)

    elements = Table(title="Frontend")
    elements.add_column("Element")
    elements.add_column("Id")
    elements.add_column("Source")
    elements.add_column("Children")
    for table in definition.frontend.data_tables:
        elements.add_row("DataTable", table.id, table.query_ref, str(len(table.columns)))
    for form in definition.frontend.forms:
        elements.add_row("Form", form.id, form.action_ref or "", str(len(form.fields)))
    console.print(elements)

    if definition.mappings:
        mappings = Table(title="Mappings")
        mappings.add_column("Name")
        mappings.add_column("Data type")
        mappings.add_column("Label")
        mappings.add_column("Options")
        for mapping in definition.mappings:
            source = "list query" if mapping.list_query else str(len(mapping.option_items))
            mappings.add_row(mapping.name, mapping.data_type, mapping.label, source)
        console.print(mappings)


@app.command(name="features")
def features_command(
    config: Path | None = typer.Option(None, "--config", help="xfeature.toml path"),  # noqa: B008
) -> None:
    """List the feature names found in the spec directory."""
    directory = _load_config(config).specs.directory
    names = list_features(directory)
    if not names:
        typer.echo(f"No features in {directory}", err=True)
        return
    for name in names:
        typer.echo(name)


@app.command(name="checksum")
def checksum_command(
    path: Path | None = typer.Argument(  # noqa: B008
        None, help="Feature file or directory (default: [specs] directory)"
    ),
    config: Path | None = typer.Option(None, "--config", help="xfeature.toml path"),  # noqa: B008
) -> None:
    """Print the MD5 checksum of a feature file, or of every feature file below a directory."""
    if path is None:
        path = _load_config(config).specs.directory
    if path.is_dir():
        for relative, digest in directory_checksums(path).items():
            typer.echo(f"{digest}  {relative}")
    elif path.is_file():
        typer.echo(f"{feature_checksum(path)}  {path}")
    else:
        typer.echo(f"Error: path not found: {path}", err=True)
        raise typer.Exit(code=1)


# =============================================================================
# Runtime commands
# =============================================================================


@app.command(name="load")
def load_command(
    feature: str = typer.Argument(..., help="Feature name"),
    api_url: str | None = typer.Option(None, "--api-url", help="Backend API base URL"),
    mock: Path | None = typer.Option(None, "--mock", help="JSON mock bundle"),  # noqa: B008
    config: Path | None = typer.Option(None, "--config", help="xfeature.toml path"),  # noqa: B008
) -> None:
    """Load a feature through the runtime and report the result."""

    async def run() -> tuple[LoadState, int, Exception | None, dict[str, int]]:
        async with _context(feature, config, api_url, mock) as ctx:
            state = await ctx.load()
            stats = ctx.definition.stats if ctx.definition else {}
            return state, ctx.revision, ctx.error, stats

    try:
        state, revision, error, stats = asyncio.run(run())
    except XFeatureError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if state is LoadState.FAILED:
        typer.echo(f"{feature}: {state.value} ({error})", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"{feature}: {state.value} (revision {revision})")
    for key, count in stats.items():
        typer.echo(f"  {key}: {count}")


@app.command(name="query")
def query_command(
    feature: str = typer.Argument(..., help="Feature name"),
    query_id: str = typer.Argument(..., help="Query id"),
    param: list[str] = typer.Option([], "--param", "-p", help="Parameter as key=value"),  # noqa: B008
    api_url: str | None = typer.Option(None, "--api-url", help="Backend API base URL"),
    mock: Path | None = typer.Option(None, "--mock", help="JSON mock bundle"),  # noqa: B008
    config: Path | None = typer.Option(None, "--config", help="xfeature.toml path"),  # noqa: B008
) -> None:
    """Run one query and print its JSON response."""
    params = _parse_params(param)

    async def run() -> dict[str, Any]:
        async with _context(feature, config, api_url, mock) as ctx:
            response = await ctx.execute_query(query_id, params)
            return response.to_wire()

    try:
        payload = asyncio.run(run())
    except (XFeatureError, LookupError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(json.dumps(payload, indent=2, default=str))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
