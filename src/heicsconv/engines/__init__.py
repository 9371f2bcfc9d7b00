from .base import EngineFactory, FrameEngine
from .ffmpeg import FFmpegEngine, FFmpegEngineFactory
from .lifecycle import EngineLifecycle

__all__ = [
    # Protocols
    "EngineFactory",
    "FrameEngine",
    # FFmpeg
    "FFmpegEngine",
    "FFmpegEngineFactory",
    # Lifetime
    "EngineLifecycle",
]
