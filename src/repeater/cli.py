# src/repeater/cli.py
"""Repeater command-line interface.

Entry point for the repeater CLI tool.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from pydantic import ValidationError

from repeater import __version__
from repeater.core.config import RepeaterSettings, load_settings

if TYPE_CHECKING:
    from repeater.plugins.base import BaseProcessor
    from repeater.plugins.manager import PluginManager

__all__ = [
    "app",
]

# Trigger budget for `run --loop-back`; without loop-back the input size bounds the run
DEFAULT_MAX_TRIGGERS = 1_000_000

# Module-level singleton for plugin manager
_plugin_manager_cache: PluginManager | None = None


def _get_plugin_manager() -> PluginManager:
    """Get initialized plugin manager (singleton)."""
    global _plugin_manager_cache

    from repeater.plugins.manager import PluginManager

    if _plugin_manager_cache is None:
        manager = PluginManager()
        manager.register_builtin_plugins()
        _plugin_manager_cache = manager
    return _plugin_manager_cache


app = typer.Typer(
    name="repeater",
    help="Repeater: count record passes and route repeat / no-repeat.",
    no_args_is_help=True,
)

plugins_app = typer.Typer(help="Inspect registered processors.")
app.add_typer(plugins_app, name="plugins")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"repeater version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None) -> None:
    """Load REPEATER_* overrides from a .env file; variables already set win."""
    from dotenv import find_dotenv, load_dotenv

    if env_file is None:
        load_dotenv(find_dotenv(usecwd=True), override=False)
    elif env_file.is_file():
        load_dotenv(env_file, override=False)
    else:
        typer.secho(f"Error: .env file not found: {env_file}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """Repeater: count record passes and route repeat / no-repeat."""
    from repeater.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")
    ctx.obj = {"verbose": verbose, "json_logs": json_logs}

    if not no_dotenv:
        _load_dotenv(env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _error_panel(title: str, message: str, details: list[str] | None = None) -> None:
    """Print a red rich panel on stderr with one bullet per detail."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.text import Text

    body = Text(message)
    for detail in details or []:
        body.append(f"\n  • {detail}", style="dim")
    Console(stderr=True).print(Panel(body, title=f"[red bold]{title}[/]", border_style="red", expand=False))


def _load_settings_or_exit(ctx: typer.Context, settings: Path) -> RepeaterSettings:
    """Load settings and switch logging to the file's logging section."""
    from repeater.core.logging import configure_from_settings

    try:
        config = load_settings(settings.expanduser())
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None

    flags = ctx.obj or {}
    configure_from_settings(config.logging, verbose=flags.get("verbose", False), json_output=flags.get("json_logs", False))
    return config


def _resolve_processor_or_exit(name: str) -> type[BaseProcessor]:
    manager = _get_plugin_manager()
    processor_cls = manager.get_processor_by_name(name)
    if processor_cls is None:
        available = ", ".join(sorted(p.name for p in manager.get_processors()))
        typer.echo(f"Error: Unknown processor '{name}'. Available: {available}", err=True)
        raise typer.Exit(1)
    return processor_cls


@app.command()
def describe(
    name: str = typer.Argument("repeat_counter", help="Processor name."),
) -> None:
    """Show a processor's options, relationships and written attributes."""
    processor_cls = _resolve_processor_or_exit(name)

    typer.echo(f"{processor_cls.name} (version {processor_cls.plugin_version})")
    if processor_cls.capability_description:
        typer.echo(f"  {processor_cls.capability_description}")
    if processor_cls.tags:
        typer.echo(f"  Tags: {', '.join(processor_cls.tags)}")

    typer.echo("\nPROPERTIES:")
    for prop in processor_cls.property_descriptors:
        flags = ["required" if prop.required else "optional"]
        if prop.default is not None:
            flags.append(f"default: {prop.default}")
        if prop.allowable_values:
            flags.append(f"allowed: {', '.join(prop.allowable_values)}")
        typer.echo(f"  {prop.name:28} - {prop.description} ({'; '.join(flags)})")

    typer.echo("\nRELATIONSHIPS:")
    for rel in processor_cls.relationships:
        typer.echo(f"  {rel.name:28} - {rel.description}")

    typer.echo("\nWRITES ATTRIBUTES:")
    if processor_cls.writes_attributes:
        for attr in processor_cls.writes_attributes:
            typer.echo(f"  {attr.attribute:28} - {attr.description}")
    else:
        typer.echo("  (none)")


@app.command()
def validate(
    ctx: typer.Context,
    settings: Path = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """Validate settings and processor options without processing records."""
    config = _load_settings_or_exit(ctx, settings)
    processor_cls = _resolve_processor_or_exit(config.processor.plugin)

    problems = processor_cls.config_model.validation_messages(config.processor.options)
    if problems:
        _error_panel(
            "Invalid processor options",
            f"Processor '{processor_cls.name}' cannot be scheduled.",
            details=problems,
        )
        raise typer.Exit(1)

    typer.echo(f"Configuration valid: {processor_cls.name}")


@app.command()
def run(
    ctx: typer.Context,
    settings: Path = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    input_path: Path = typer.Option(
        ...,
        "--input",
        "-i",
        help="JSON lines file of records.",
    ),
    output_path: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write emitted records here instead of stdout.",
    ),
    loop_back: bool = typer.Option(
        False,
        "--loop-back",
        help="Feed records routed to 'repeat' back in until every record leaves via another route.",
    ),
    max_triggers: int = typer.Option(
        DEFAULT_MAX_TRIGGERS,
        "--max-triggers",
        min=1,
        help="With --loop-back, give up after this many processor triggers.",
    ),
) -> None:
    """Run records through the configured processor."""
    from repeater.cli_helpers import RecordFormatError, read_records, write_records
    from repeater.engine.runner import ProcessorRunner, RunawayLoopError
    from repeater.plugins.config_base import PluginConfigError

    config = _load_settings_or_exit(ctx, settings)

    try:
        runner = ProcessorRunner.from_settings(config, _get_plugin_manager())
        runner.schedule()
    except PluginConfigError as e:
        _error_panel("Invalid processor options", str(e))
        raise typer.Exit(1) from None

    try:
        for record in read_records(input_path.expanduser()):
            runner.enqueue(record)
    except FileNotFoundError:
        typer.echo(f"Error: Input file not found: {input_path}", err=True)
        raise typer.Exit(1) from None
    except RecordFormatError as e:
        typer.echo(f"Error: Invalid record in {input_path}: {e}", err=True)
        raise typer.Exit(1) from None

    try:
        summary = runner.drain(loop_back=loop_back, max_triggers=max_triggers if loop_back else None)
    except RunawayLoopError as e:
        _error_panel("Run aborted", str(e), details=["Raise --max-triggers or check Repeat Count and incoming repeater.count values."])
        raise typer.Exit(1) from None

    if output_path is not None:
        with output_path.open("w", encoding="utf-8") as out:
            write_records(summary.emitted, out)
    else:
        write_records(summary.emitted, sys.stdout)

    routed = ", ".join(f"{name}={count}" for name, count in sorted(summary.routed.items()))
    typer.echo(f"Processed {summary.triggers} pass(es): {routed}; penalized={summary.penalized}", err=True)


@plugins_app.command("list")
def plugins_list() -> None:
    """List available processors."""
    from repeater.plugins.discovery import get_plugin_description

    processors = _get_plugin_manager().get_processors()
    typer.echo("\nPROCESSORS:")
    if not processors:
        typer.echo("  (none available)")
    for cls in sorted(processors, key=lambda c: c.name):
        typer.echo(f"  {cls.name:20} - {get_plugin_description(cls)}")
    typer.echo()
