"""heicsconv - animated HEICS sticker to GIF/APNG/WebP converter."""

__version__: str = "0.1.0"

from .error_handling import (
    ConversionExhaustedError,
    EngineAcquisitionError,
    HeicsConvError,
)
from .formats import FormatDescriptor, OutputFormat, describe
from .models import ConversionRequest, ConversionResult, PreprocessOptions
from .session import ConversionSession, convert

__all__ = [
    "ConversionExhaustedError",
    "ConversionRequest",
    "ConversionResult",
    "ConversionSession",
    "EngineAcquisitionError",
    "FormatDescriptor",
    "HeicsConvError",
    "OutputFormat",
    "PreprocessOptions",
    "convert",
    "describe",
]
