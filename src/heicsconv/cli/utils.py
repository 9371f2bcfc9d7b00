"""Shared utilities for CLI commands."""

import sys
from pathlib import Path

import click

from ..error_handling import ValidationError
from ..io import read_container


def handle_generic_error(command_name: str, error: Exception) -> None:
    """Handle generic command errors with consistent formatting."""
    click.echo(f"❌ {command_name} failed: {error}", err=True)
    sys.exit(1)


def handle_keyboard_interrupt(command_name: str) -> None:
    """Handle keyboard interrupt with consistent formatting."""
    click.echo(f"\n⏹️  {command_name} interrupted by user", err=True)
    sys.exit(1)


def validate_and_read_input(input_path: Path) -> bytes:
    """Validate INPUT and return its bytes."""
    try:
        return read_container(input_path)
    except ValidationError as e:
        click.echo(f"❌ Invalid INPUT: {e}", err=True)
        click.echo("💡 Please provide a .heic or .heics Live Photo sticker", err=True)
        sys.exit(1)


def display_path_info(label: str, path: Path, emoji: str = "📁") -> None:
    """Display path information with consistent formatting."""
    click.echo(f"{emoji} {label}: {path}")


def format_size(num_bytes: int) -> str:
    if num_bytes < 1024:
        return f"{num_bytes} B"
    return f"{num_bytes / 1024:.1f} KB"
