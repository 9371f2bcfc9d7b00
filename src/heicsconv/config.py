"""Configuration settings for heicsconv."""

import os
from dataclasses import dataclass

from .error_handling import ConfigurationError


@dataclass
class EngineConfig:
    """Configuration for the frame-processing engine with environment variable overrides."""

    # Path to FFmpeg executable.
    # Usually "ffmpeg" works if installed via package manager
    # Override with: HEICSCONV_FFMPEG_PATH
    FFMPEG_PATH: str = "ffmpeg"

    # Path to FFprobe executable (companion to FFmpeg).
    # Only used by the `deps` diagnostics command.
    # Override with: HEICSCONV_FFPROBE_PATH
    FFPROBE_PATH: str = "ffprobe"

    # Hard timeout (seconds) for a single engine command, None disables it.
    # An engine that timed out must be discarded, never reused.
    # Override with: HEICSCONV_RUN_TIMEOUT
    RUN_TIMEOUT: float | None = None

    # Parent directory for per-engine scratch storage (None = system temp dir).
    # Override with: HEICSCONV_WORK_DIR
    WORK_DIR: str | None = None

    def __post_init__(self) -> None:
        """Apply environment variable overrides after initialization."""
        env_overrides = {
            "FFMPEG_PATH": "HEICSCONV_FFMPEG_PATH",
            "FFPROBE_PATH": "HEICSCONV_FFPROBE_PATH",
            "WORK_DIR": "HEICSCONV_WORK_DIR",
        }

        for attr_name, env_var_name in env_overrides.items():
            env_value = os.getenv(env_var_name)
            if env_value:
                setattr(self, attr_name, env_value)

        env_timeout = os.getenv("HEICSCONV_RUN_TIMEOUT")
        if env_timeout:
            try:
                self.RUN_TIMEOUT = float(env_timeout)
            except ValueError as e:
                raise ConfigurationError(
                    f"HEICSCONV_RUN_TIMEOUT must be a number, got {env_timeout!r}",
                    cause=e,
                ) from e

        if self.RUN_TIMEOUT is not None and self.RUN_TIMEOUT <= 0:
            raise ConfigurationError(
                f"RUN_TIMEOUT must be positive, got {self.RUN_TIMEOUT}"
            )


@dataclass(frozen=True)
class ConversionConfig:
    """Fixed logical names and pre-processing constants used by the core."""

    # Logical name the input container is staged under.
    INPUT_NAME: str = "input.heics"

    # Output logical name is f"{OUTPUT_STEM}.{extension}".
    OUTPUT_STEM: str = "output"

    # Pattern for PNG frame export (ffmpeg image2 muxer numbering).
    FRAME_PATTERN: str = "frame_%03d.png"

    # File suffixes accepted by the CLI.
    ACCEPTED_SUFFIXES: tuple[str, ...] = (".heic", ".heics")

    # Longer-side bound applied by the "constrain to 128px" option.
    MAX_DIMENSION: int = 128

    # Frame rate applied by the "cap frame rate" option.
    CAPPED_FPS: int = 10

    def output_name(self, extension: str) -> str:
        return f"{self.OUTPUT_STEM}.{extension}"


DEFAULT_ENGINE_CONFIG = EngineConfig()
DEFAULT_CONVERSION_CONFIG = ConversionConfig()
