"""Tests for CLI commands using click.testing.CliRunner."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from conftest import FailingFactory, StubFactory, make_transparent_gif

from heicsconv.cli import convert, deps, formats, frames, main
from heicsconv.error_handling import EngineAcquisitionError
from heicsconv.system_tools import ToolInfo


@pytest.fixture
def sticker(tmp_path) -> Path:
    path = tmp_path / "sticker.heics"
    path.write_bytes(b"\x00\x00\x00\x18ftypheics")
    return path


class TestMainCLI:
    """Tests for main CLI group."""

    def test_main_help(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "heicsconv: animated HEICS stickers to GIF, APNG or WebP." in result.output
        for command in ("convert", "frames", "formats", "deps"):
            assert command in result.output

    def test_main_version(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert "heicsconv, version 0.1.0" in result.output

    def test_main_invalid_command(self):
        runner = CliRunner()
        result = runner.invoke(main, ["invalid-command"])

        assert result.exit_code == 2
        assert "No such command" in result.output


class TestConvertCommand:
    """Tests for convert CLI command."""

    def test_convert_help(self):
        runner = CliRunner()
        result = runner.invoke(convert, ["--help"])

        assert result.exit_code == 0
        assert "--format" in result.output
        assert "--max-128" in result.output
        assert "--fps-10" in result.output

    def test_convert_gif_success(self, sticker):
        factory = StubFactory(outcomes=[1, 0], output=make_transparent_gif(frames=2))

        with patch("heicsconv.cli.convert_cmd.FFmpegEngineFactory", return_value=factory):
            result = CliRunner().invoke(convert, [str(sticker)])

        assert result.exit_code == 0, result.output
        assert "✅ Your GIF has been saved." in result.output
        assert "Stream layout: (0,1)" in result.output
        assert "Attempts: 2" in result.output
        assert "Frames: 2" in result.output
        assert "Transparency: yes" in result.output
        assert "100% Done" in result.output
        assert sticker.with_suffix(".gif").read_bytes() == factory.last.output

    def test_convert_webp_with_options(self, sticker, tmp_path):
        factory = StubFactory(output=b"RIFF-fake-webp")
        target = tmp_path / "out" / "small.webp"

        with patch("heicsconv.cli.convert_cmd.FFmpegEngineFactory", return_value=factory):
            result = CliRunner().invoke(
                convert,
                [str(sticker), "-f", "WEBP", "-o", str(target), "--max-128", "--fps-10"],
            )

        assert result.exit_code == 0, result.output
        assert target.read_bytes() == b"RIFF-fake-webp"
        run = factory.last.runs[0]
        assert run[-1] == "output.webp"
        assert "libwebp" in run
        assert "fps=10" in run[3]

    def test_convert_exhausted(self, sticker):
        factory = StubFactory(outcomes=[1])

        with patch("heicsconv.cli.convert_cmd.FFmpegEngineFactory", return_value=factory):
            result = CliRunner().invoke(convert, [str(sticker), "--format", "apng"])

        assert result.exit_code == 1
        assert "Conversion failed. The file might be corrupted or incompatible." in result.output
        assert "Tried 3 stream layout(s)." in result.output
        assert not sticker.with_suffix(".png").exists()

    def test_convert_engine_unavailable(self, sticker):
        factory = FailingFactory(EngineAcquisitionError("FFmpeg is not available"))

        with patch("heicsconv.cli.convert_cmd.FFmpegEngineFactory", return_value=factory):
            result = CliRunner().invoke(convert, [str(sticker)])

        assert result.exit_code == 1
        assert "Could not load the processing engine" in result.output

    def test_convert_rejects_wrong_suffix(self, tmp_path):
        clip = tmp_path / "clip.mov"
        clip.write_bytes(b"x")

        result = CliRunner().invoke(convert, [str(clip)])

        assert result.exit_code == 1
        assert "Invalid INPUT" in result.output

    def test_convert_unknown_format(self, sticker):
        result = CliRunner().invoke(convert, [str(sticker), "-f", "mp4"])

        assert result.exit_code == 2


class TestFramesCommand:
    def test_frames_written(self, sticker, tmp_path):
        factory = StubFactory(frame_count=3)
        out_dir = tmp_path / "frames"

        with patch("heicsconv.cli.frames_cmd.FFmpegEngineFactory", return_value=factory):
            result = CliRunner().invoke(frames, [str(sticker), "-o", str(out_dir)])

        assert result.exit_code == 0, result.output
        assert "Wrote 3 frame(s)" in result.output
        assert sorted(p.name for p in out_dir.iterdir()) == [
            "frame_000.png",
            "frame_001.png",
            "frame_002.png",
        ]

    def test_frames_default_directory(self, sticker):
        factory = StubFactory(frame_count=1)

        with patch("heicsconv.cli.frames_cmd.FFmpegEngineFactory", return_value=factory):
            result = CliRunner().invoke(frames, [str(sticker)])

        assert result.exit_code == 0, result.output
        assert (sticker.parent / "sticker_frames" / "frame_000.png").exists()

    def test_frames_failure(self, sticker):
        with patch(
            "heicsconv.cli.frames_cmd.FFmpegEngineFactory",
            return_value=StubFactory(outcomes=[1]),
        ):
            result = CliRunner().invoke(frames, [str(sticker)])

        assert result.exit_code == 1
        assert "Frame export failed" in result.output


class TestInfoCommands:
    def test_formats_table(self):
        result = CliRunner().invoke(formats)

        assert result.exit_code == 0
        for label in ("GIF", "APNG", "WebP", "image/webp"):
            assert label in result.output

    @patch("heicsconv.cli.info_cmd.get_available_tools")
    def test_deps_json(self, mock_tools):
        mock_tools.return_value = {
            "ffmpeg": ToolInfo(name="/usr/bin/ffmpeg", available=True, version="6.1"),
            "ffprobe": ToolInfo(name="ffprobe", available=False),
        }

        result = CliRunner().invoke(deps, ["--json"])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["ffmpeg"] == {"name": "/usr/bin/ffmpeg", "available": True, "version": "6.1"}
        assert payload["ffprobe"]["available"] is False

    @patch("heicsconv.cli.info_cmd.get_available_tools")
    def test_deps_missing_ffmpeg(self, mock_tools):
        mock_tools.return_value = {
            "ffmpeg": ToolInfo(name="ffmpeg", available=False),
            "ffprobe": ToolInfo(name="ffprobe", available=False),
        }

        result = CliRunner().invoke(deps)

        assert result.exit_code == 1
        assert "Missing" in result.output
