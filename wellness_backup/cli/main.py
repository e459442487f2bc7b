"""
Main CLI entry point for the wellness backup tool.

This module provides the command-line interface using Click with Rich
formatting. Commands operate on a JSON file store.
"""

import asyncio
import json
import sys
from typing import Optional

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from wellness_backup import __version__
from wellness_backup.backup.codec import ArchiveCodec
from wellness_backup.backup.manager import BackupOrchestrator
from wellness_backup.backup.migrations.pipeline import MigrationPipeline
from wellness_backup.core.exceptions import BackupSystemError, ConfigurationError
from wellness_backup.models.config import load_config
from wellness_backup.models.snapshot import ImportOutcome
from wellness_backup.store.file import JsonFileStore
from wellness_backup.store.registry import CURRENT_SCHEMA_VERSION
from wellness_backup.utils.helpers import format_bytes
from wellness_backup.utils.logging import setup_logging

console = Console()


def _orchestrator(ctx: click.Context, store_path: str) -> BackupOrchestrator:
    return BackupOrchestrator(JsonFileStore(store_path), config=ctx.obj['config'])


def _print_outcome(outcome: ImportOutcome, verbose: bool = False):
    table = Table(
        title="Restore Results",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Section", style="cyan")
    table.add_column("Status")
    table.add_column("Records", justify="right")
    table.add_column("Error", style="dim")

    for item in outcome.items:
        if not verbose and item.success and item.record_count == 0:
            continue
        status = "[green]✅ OK[/green]" if item.success else "[red]❌ Failed[/red]"
        table.add_row(item.label, status, str(item.record_count), item.error_message or "")

    if outcome.items:
        console.print(table)

    style = "green" if outcome.overall_success and not outcome.partial_failure else (
        "yellow" if outcome.overall_success else "red"
    )
    console.print(Panel(Text(outcome.message), border_style=style, padding=(0, 2)))


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='Configuration file path (YAML or JSON)')
@click.pass_context
def main(ctx: click.Context, version: bool, verbose: bool, config_path: Optional[str]):
    """
    Wellness Backup

    Export, inspect and restore backups of wellness app data.
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose

    if version:
        console.print(f"Wellness Backup version {__version__}")
        sys.exit(0)

    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e.message}[/red]")
        sys.exit(2)
    ctx.obj['config'] = config

    setup_logging(
        level="DEBUG" if verbose else config.log_level,
        log_file=config.log_file,
        structured_logging=config.structured_logging
    )

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@main.command()
@click.option('--store', '-s', 'store_path', required=True, type=click.Path(dir_okay=False),
              help='JSON store file')
@click.option('--output', '-o', required=True, type=click.Path(), help='Backup file or directory')
@click.option('--plain', is_flag=True, help='Write plain JSON instead of a zip archive')
@click.pass_context
def export(ctx: click.Context, store_path: str, output: str, plain: bool):
    """Export the store to a backup file."""
    if plain:
        ctx.obj['config'] = ctx.obj['config'].model_copy(update={'compress': False})

    orchestrator = _orchestrator(ctx, store_path)
    try:
        result = asyncio.run(orchestrator.export_to_path(output))
    except BackupSystemError as e:
        console.print(f"[red]Export failed: {e.message}[/red]")
        sys.exit(1)

    if not result.success:
        console.print(f"[red]{result.message}[/red]")
        sys.exit(1)

    console.print(f"[green]✅ {result.message}[/green] ({format_bytes(result.size or 0)})")
    if ctx.obj.get('verbose', False) and result.statistics:
        for name, value in result.statistics.items():
            console.print(f"[dim]{name}: {value}[/dim]")


@main.command()
@click.option('--store', '-s', 'store_path', required=True, type=click.Path(dir_okay=False),
              help='JSON store file')
@click.option('--input', '-i', 'input_path', required=True, type=click.Path(dir_okay=False),
              help='Backup file to restore')
@click.pass_context
def restore(ctx: click.Context, store_path: str, input_path: str):
    """Restore a backup file into the store."""
    orchestrator = _orchestrator(ctx, store_path)
    try:
        outcome = asyncio.run(orchestrator.restore_from_path(input_path))
    except BackupSystemError as e:
        console.print(f"[red]Restore failed: {e.message}[/red]")
        sys.exit(1)

    _print_outcome(outcome, verbose=ctx.obj.get('verbose', False))
    if not outcome.overall_success:
        sys.exit(1)


@main.command()
@click.option('--input', '-i', 'input_path', required=True,
              type=click.Path(exists=True, dir_okay=False), help='Backup file to inspect')
@click.option('--format', '-f', 'output_format', type=click.Choice(['table', 'json']),
              default='table', help='Output format')
@click.pass_context
def inspect(ctx: click.Context, input_path: str, output_format: str):
    """Show metadata and statistics of a backup file."""
    codec = ArchiveCodec(ctx.obj['config'].archive_entry_name)
    pipeline = MigrationPipeline()

    with open(input_path, 'rb') as f:
        data = f.read()
    try:
        document = json.loads(codec.decode(data))
    except BackupSystemError as e:
        console.print(f"[red]{e.message}[/red]")
        sys.exit(1)
    except (ValueError, RecursionError) as e:
        console.print(f"[red]Backup is not valid JSON: {e}[/red]")
        sys.exit(1)

    if not isinstance(document, dict):
        console.print("[red]Backup document is not a JSON object[/red]")
        sys.exit(1)

    legacy = pipeline.is_legacy_format(document)
    statistics = document.get("statistics") if isinstance(document.get("statistics"), dict) else {}
    info = {
        "file": input_path,
        "size": len(data),
        "container": "zip" if codec.is_archive(data) else "json",
        "legacy_format": legacy,
        "schema_version": document.get("schemaVersion"),
        "current_schema_version": CURRENT_SCHEMA_VERSION,
        "export_date": document.get("exportDate") or document.get("exportedAt"),
        "app_version": document.get("appVersion") or document.get("version"),
        "build_number": document.get("buildNumber"),
        "statistics": statistics,
    }

    if output_format == 'json':
        click.echo(json.dumps(info, indent=2, default=str))
        return

    table = Table(title="Backup Details", box=box.ROUNDED, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("File", input_path)
    table.add_row("Size", format_bytes(len(data)))
    table.add_row("Container", info["container"])
    table.add_row("Format", "legacy (pre-versioning)" if legacy else f"schema v{info['schema_version']}")
    table.add_row("Exported", str(info["export_date"] or "unknown"))
    table.add_row("App version", str(info["app_version"] or "unknown"))
    console.print(table)

    if statistics:
        stats_table = Table(title="Statistics", box=box.SIMPLE, header_style="bold magenta")
        stats_table.add_column("Counter", style="cyan")
        stats_table.add_column("Value", justify="right")
        for name, value in statistics.items():
            stats_table.add_row(name, str(value))
        console.print(stats_table)

    version = info["schema_version"]
    if isinstance(version, int) and version > CURRENT_SCHEMA_VERSION:
        console.print(
            f"[yellow]⚠️  This backup needs a newer app version (schema v{version}).[/yellow]"
        )


@main.command(name='migrate-store')
@click.option('--store', '-s', 'store_path', required=True, type=click.Path(dir_okay=False),
              help='JSON store file')
def migrate_store(store_path: str):
    """Upgrade stored data to the current schema version."""
    pipeline = MigrationPipeline()
    store = JsonFileStore(store_path)
    try:
        previous = asyncio.run(pipeline.migrate_store(store))
    except BackupSystemError as e:
        console.print(f"[red]Migration failed: {e}[/red]")
        sys.exit(1)

    if previous == pipeline.current_version:
        console.print(f"[green]Store is already at schema v{previous}[/green]")
    else:
        console.print(
            f"[green]✅ Migrated store from v{previous} to v{pipeline.current_version}[/green]"
        )


if __name__ == '__main__':
    main()
