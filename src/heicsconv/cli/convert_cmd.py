"""Convert a HEICS sticker into an animated GIF, APNG or WebP."""

from pathlib import Path

import click

from ..engines.ffmpeg import FFmpegEngineFactory
from ..error_handling import ConversionExhaustedError, EngineAcquisitionError, ValidationError
from ..formats import OutputFormat, describe
from ..io import atomic_write_bytes, default_output_path, setup_logging
from ..models import ConversionRequest, PreprocessOptions
from ..probe import inspect_output
from ..session import ConversionSession
from .utils import (
    display_path_info,
    format_size,
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
    "--format",
    "-f",
    "format_name",
    type=click.Choice([f.value for f in OutputFormat], case_sensitive=False),
    default=OutputFormat.GIF.value,
    show_default=True,
    help="Animated output format",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output file (default: INPUT name with the format's extension)",
)
@click.option(
    "--max-128",
    "constrain",
    is_flag=True,
    help="Bound the longer side to 128px (never upscales)",
)
@click.option(
    "--fps-10",
    "cap_fps",
    is_flag=True,
    help="Cap the frame rate at 10 fps",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every engine attempt")
def convert(
    input_path: Path,
    format_name: str,
    output: Path | None,
    constrain: bool,
    cap_fps: bool,
    verbose: bool,
) -> None:
    """Convert an animated HEICS sticker, keeping its transparency.

    Each known color/alpha track layout is tried in turn; the first one that
    FFmpeg accepts wins.

    INPUT: .heic or .heics Live Photo sticker
    """
    try:
        setup_logging("DEBUG" if verbose else "WARNING")

        data = validate_and_read_input(input_path)
        fmt = OutputFormat(format_name.lower())
        descriptor = describe(fmt)
        target = output or default_output_path(input_path, descriptor.extension)

        click.echo(f"🎞️  Converting to {descriptor.label} ({descriptor.description})")
        display_path_info("Input", input_path)
        display_path_info("Output", target, emoji="💾")

        request = ConversionRequest(
            format=fmt,
            options=PreprocessOptions(constrain_to_128px=constrain, cap_frame_rate_10=cap_fps),
        )
        session = ConversionSession(
            factory=FFmpegEngineFactory(),
            on_progress=lambda percent, label: click.echo(f"   {percent:3d}% {label}"),
        )
        result = session.convert(data, request)
        atomic_write_bytes(target, result.data)

        click.echo(f"\n✅ Your {descriptor.label} has been saved.")
        click.echo(f"   • Stream layout: {result.hypothesis}")
        click.echo(f"   • Attempts: {len(result.attempts)}")
        click.echo(f"   • Size: {format_size(len(result.data))}")

        try:
            info = inspect_output(result.data)
        except ValidationError:
            return
        click.echo(f"   • Frames: {info.frame_count} @ {info.width}x{info.height}")
        click.echo(f"   • Transparency: {'yes' if info.has_transparency else 'no'}")

    except EngineAcquisitionError as e:
        click.echo(f"❌ Could not load the processing engine: {e}", err=True)
        raise SystemExit(1)
    except ConversionExhaustedError as e:
        click.echo(
            "❌ Conversion failed. The file might be corrupted or incompatible.", err=True
        )
        click.echo(f"   Tried {len(e.attempts)} stream layout(s).", err=True)
        raise SystemExit(1)
    except KeyboardInterrupt:
        handle_keyboard_interrupt("Conversion")
    except Exception as e:
        handle_generic_error("Conversion", e)
