"""Catalog and dependency diagnostics.

Built on Click with Rich tables for human output and ``--json`` for
scripting, e.g. ``heicsconv deps --json | jq '.ffmpeg.available'``.
"""

import json

import click
from rich.console import Console
from rich.table import Table

from ..config import DEFAULT_ENGINE_CONFIG
from ..formats import OutputFormat, describe
from ..system_tools import get_available_tools


@click.command("formats")
def formats() -> None:
    """List the supported output formats."""
    console = Console()
    table = Table(title="🎞️ Output Formats", show_header=True, header_style="bold magenta")
    table.add_column("Format", style="cyan", no_wrap=True)
    table.add_column("Extension")
    table.add_column("MIME type")
    table.add_column("Notes", style="dim")

    for fmt in OutputFormat:
        descriptor = describe(fmt)
        table.add_row(descriptor.label, descriptor.extension, descriptor.mime_type, descriptor.description)

    console.print(table)


@click.command("deps")
@click.option("--json", "output_json", is_flag=True, help="Output results in JSON format")
def deps(output_json: bool) -> None:
    """Check that FFmpeg and FFprobe can be found."""
    tools = get_available_tools(DEFAULT_ENGINE_CONFIG)

    if output_json:
        payload = {
            key: {"name": info.name, "available": info.available, "version": info.version}
            for key, info in tools.items()
        }
        click.echo(json.dumps(payload, indent=2))
        return

    console = Console()
    table = Table(title="📦 External Tools", show_header=True, header_style="bold magenta")
    table.add_column("Tool", style="cyan", no_wrap=True)
    table.add_column("Status", justify="center")
    table.add_column("Details", style="dim")

    for key, info in tools.items():
        status = "[green]✅ Available[/green]" if info.available else "[red]❌ Missing[/red]"
        details = f"{info.name} ({info.version or 'unknown version'})" if info.available else ""
        table.add_row(key, status, details)

    console.print(table)

    if not tools["ffmpeg"].available:
        console.print("\n💡 Install FFmpeg with libwebp support, or set HEICSCONV_FFMPEG_PATH.")
        raise SystemExit(1)
