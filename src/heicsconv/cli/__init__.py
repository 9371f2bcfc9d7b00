"""CLI module for heicsconv commands.

Each command lives in its own module; this package assembles the group used
by the ``heicsconv`` console script.
"""

import click

from .. import __version__
from .convert_cmd import convert
from .frames_cmd import frames
from .info_cmd import deps, formats


@click.group()
@click.version_option(version=__version__, prog_name="heicsconv")
def main() -> None:
    """🎞️ heicsconv: animated HEICS stickers to GIF, APNG or WebP."""
    pass


main.add_command(convert)
main.add_command(frames)
main.add_command(formats)
main.add_command(deps)

__all__ = [
    "convert",
    "deps",
    "formats",
    "frames",
    "main",
]
