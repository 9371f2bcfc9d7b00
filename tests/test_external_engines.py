"""End-to-end runs against a real FFmpeg binary.

A plain animated GIF stands in for the sticker container: it carries a single
video stream, so both alpha layouts are rejected by FFmpeg and the no-alpha
command has to produce the output.
"""

import pytest
from conftest import make_transparent_gif

from heicsconv.engines import FFmpegEngineFactory
from heicsconv.formats import OutputFormat
from heicsconv.models import NO_ALPHA, ConversionRequest, PreprocessOptions
from heicsconv.probe import inspect_output
from heicsconv.session import ConversionSession, SessionState

pytestmark = pytest.mark.external_tools


@pytest.fixture
def session(ffmpeg_available):
    return ConversionSession(factory=FFmpegEngineFactory())


@pytest.fixture
def source_gif():
    return make_transparent_gif(frames=4, size=(200, 100))


def test_gif_falls_back_to_no_alpha(session, source_gif):
    result = session.convert(source_gif, ConversionRequest(OutputFormat.GIF))

    assert result.hypothesis is NO_ALPHA
    assert [a.exit_code != 0 for a in result.attempts] == [True, True, False]
    info = inspect_output(result.data)
    assert info.format == "GIF"
    assert info.frame_count >= 1
    assert session.state is SessionState.SUCCEEDED


def test_apng_with_size_constraint(session, source_gif):
    request = ConversionRequest(
        OutputFormat.APNG, PreprocessOptions(constrain_to_128px=True, cap_frame_rate_10=True)
    )

    result = session.convert(source_gif, request)
    info = inspect_output(result.data)

    assert info.format == "PNG"
    assert max(info.width, info.height) <= 128
    assert info.width == 128


def test_engine_storage_is_discarded(session, source_gif):
    engines = []
    factory = session.lifecycle.factory
    original_acquire = factory.acquire

    def tracking_acquire():
        engine = original_acquire()
        engines.append(engine)
        return engine

    factory.acquire = tracking_acquire
    session.convert(source_gif)

    assert engines[0].closed
    assert not engines[0].root.exists()


def test_export_frames(session, source_gif):
    exported = session.export_frames(source_gif)

    assert [name for name, _ in exported][:2] == ["frame_000.png", "frame_001.png"]
    info = inspect_output(exported[0][1])
    assert info.format == "PNG"
    assert (info.width, info.height) == (200, 100)
