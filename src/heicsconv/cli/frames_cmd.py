"""Export every frame of a HEICS sticker as an RGBA PNG."""

from pathlib import Path

import click

from ..engines.ffmpeg import FFmpegEngineFactory
from ..error_handling import ConversionExhaustedError, EngineAcquisitionError
from ..io import atomic_write_bytes, setup_logging
from ..session import ConversionSession
from .utils import (
    display_path_info,
    handle_generic_error,
    handle_keyboard_interrupt,
    validate_and_read_input,
)


@click.command()
@click.argument(
    "input_path",
    metavar="INPUT",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the PNG frames (default: <INPUT stem>_frames)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every engine attempt")
def frames(input_path: Path, output_dir: Path | None, verbose: bool) -> None:
    """Export the frames of INPUT with the alpha track merged in."""
    try:
        setup_logging("DEBUG" if verbose else "WARNING")

        data = validate_and_read_input(input_path)
        target_dir = output_dir or input_path.with_name(f"{input_path.stem}_frames")
        display_path_info("Input", input_path)
        display_path_info("Frames", target_dir)

        session = ConversionSession(factory=FFmpegEngineFactory())
        exported = session.export_frames(data)

        for name, png in exported:
            atomic_write_bytes(target_dir / name, png)

        click.echo(f"✅ Wrote {len(exported)} frame(s) to {target_dir}")

    except EngineAcquisitionError as e:
        click.echo(f"❌ Could not load the processing engine: {e}", err=True)
        raise SystemExit(1)
    except ConversionExhaustedError:
        click.echo("❌ Frame export failed. The file might be corrupted or incompatible.", err=True)
        raise SystemExit(1)
    except KeyboardInterrupt:
        handle_keyboard_interrupt("Frame export")
    except Exception as e:
        handle_generic_error("Frame export", e)
