from __future__ import annotations

"""Utility helpers for locating the external FFmpeg binaries.

These lightweight checks make sure FFmpeg is present *before* an engine is
handed to a conversion session, so a missing install surfaces as one explicit
acquisition failure instead of three failed attempts.
"""

import os
import platform
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from shutil import which


@dataclass(frozen=True, slots=True)
class ToolInfo:
    """Metadata for an external binary discovered on the system."""

    name: str
    available: bool
    version: str | None = None

    def require(self) -> None:
        """Raise *RuntimeError* if the tool isn’t available."""
        if not self.available:
            raise RuntimeError(
                f"Required tool '{self.name}' not found in PATH.\n"
                "📖 Install FFmpeg (built with libwebp) or set HEICSCONV_FFMPEG_PATH."
            )


# ---------------------------------------------------------------------------
# Low-level helpers
# ---------------------------------------------------------------------------


def _which(cmd: str) -> str | None:
    """Return full path if *cmd* is executable in $PATH, else *None*."""
    return which(cmd)


def _extract_version(output: str, pattern: str) -> str | None:
    match = re.search(pattern, output)
    if match:
        return match.group(1)
    return None


def _run_version_cmd(cmd: list[str], regex: str) -> str | None:
    try:
        completed = subprocess.run(
            cmd, capture_output=True, encoding="utf-8", errors="replace", timeout=5
        )
    except (OSError, subprocess.SubprocessError):
        return None

    version = _extract_version(completed.stdout, regex) or _extract_version(
        completed.stderr, regex
    )
    if version:
        return version

    if completed.returncode != 0:
        return None

    return version


def _find_repository_binary(tool_key: str) -> str | None:
    """Find binary in repository bin/ directory for current platform."""
    platform_map = {
        "Darwin": "darwin",
        "Linux": "linux",
        "Windows": "windows",
    }

    arch_map = {
        "x86_64": "x86_64",
        "AMD64": "x86_64",  # Windows
        "arm64": "arm64",  # Apple Silicon
        "aarch64": "arm64",  # Linux ARM64
    }

    platform_dir = platform_map.get(platform.system())
    arch_dir = arch_map.get(platform.machine())

    if not platform_dir or not arch_dir:
        return None

    # Project root is the first parent holding a packaging marker
    current = Path(__file__).parent
    while current.parent != current:
        if any(
            (current / marker).exists()
            for marker in ["pyproject.toml", "setup.py", ".git"]
        ):
            break
        current = current.parent
    else:
        return None

    if platform_dir == "windows":
        binary_path = current / "bin" / platform_dir / arch_dir / f"{tool_key}.exe"
    else:
        binary_path = current / "bin" / platform_dir / arch_dir / tool_key

    if binary_path.exists() and os.access(binary_path, os.X_OK):
        return str(binary_path)

    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

_FALLBACK_TOOLS: dict[str, list[str]] = {
    "ffmpeg": ["ffmpeg"],
    "ffprobe": ["ffprobe"],
}

_VERSION_PATTERNS: dict[str, str] = {
    "ffmpeg": r"ffmpeg version (\S+)",
    "ffprobe": r"ffprobe version (\S+)",
}

# Map tool keys to configuration attributes
_CONFIG_MAPPING: dict[str, str] = {
    "ffmpeg": "FFMPEG_PATH",
    "ffprobe": "FFPROBE_PATH",
}


def discover_tool(tool_key: str, engine_config=None) -> ToolInfo:
    """Return *ToolInfo* for *tool_key* using configuration and fallback discovery.

    Lookup order: configured path, repository ``bin/<platform>/<arch>/``,
    then ``$PATH``.

    Args:
        tool_key: Tool identifier (ffmpeg, ffprobe)
        engine_config: EngineConfig instance (uses DEFAULT_ENGINE_CONFIG if None)
    """
    if tool_key not in _FALLBACK_TOOLS and tool_key not in _CONFIG_MAPPING:
        raise ValueError(f"Unknown tool: {tool_key}")

    if engine_config is None:
        from .config import DEFAULT_ENGINE_CONFIG

        engine_config = DEFAULT_ENGINE_CONFIG

    version_regex = _VERSION_PATTERNS.get(tool_key, r"(\d+\.\d+\.\d+)")

    if tool_key in _CONFIG_MAPPING:
        configured_path = getattr(engine_config, _CONFIG_MAPPING[tool_key], None)

        if configured_path and _which(configured_path):
            version = _run_version_cmd([configured_path, "-version"], version_regex)
            return ToolInfo(name=configured_path, available=True, version=version)

    repo_binary_path = _find_repository_binary(tool_key)
    if repo_binary_path:
        version = _run_version_cmd([repo_binary_path, "-version"], version_regex)
        return ToolInfo(name=repo_binary_path, available=True, version=version)

    for candidate in _FALLBACK_TOOLS.get(tool_key, []):
        if _which(candidate):
            version = _run_version_cmd([candidate, "-version"], version_regex)
            return ToolInfo(name=candidate, available=True, version=version)

    fallback_name = _FALLBACK_TOOLS.get(tool_key, [tool_key])[0]
    return ToolInfo(name=fallback_name, available=False, version=None)


def get_available_tools(engine_config=None) -> dict[str, ToolInfo]:
    """Get availability status for all supported tools without requiring them."""
    return {key: discover_tool(key, engine_config) for key in _CONFIG_MAPPING}
