import io
import shutil

import pytest
from PIL import Image

from heicsconv.error_handling import EngineError

# ---------------------------------------------------------------------------
# Synthetic animations
# ---------------------------------------------------------------------------


def make_transparent_gif(frames: int = 3, size: tuple[int, int] = (16, 12)) -> bytes:
    """Small animated GIF whose left half is transparent in every frame."""
    imgs = []
    for i in range(frames):
        img = Image.new("RGBA", size, (0, 0, 0, 0))
        for x in range(size[0] // 2, size[0]):
            for y in range(size[1]):
                img.putpixel((x, y), (40 * i % 256, 120, 200, 255))
        imgs.append(img)

    buf = io.BytesIO()
    imgs[0].save(
        buf,
        format="GIF",
        save_all=True,
        append_images=imgs[1:],
        duration=100,
        loop=0,
        disposal=2,
    )
    return buf.getvalue()


def make_png(size: tuple[int, int] = (4, 4)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", size, (255, 0, 0, 128)).save(buf, format="PNG")
    return buf.getvalue()


# ---------------------------------------------------------------------------
# In-memory engine
# ---------------------------------------------------------------------------


class RecordingEngine:
    """FrameEngine stub that records every call.

    ``outcomes`` lists the exit code of each successive ``run``; the last
    value repeats. A successful run writes ``output`` (or ``frame_count``
    PNGs for numbered patterns) under the command's last argument.
    """

    def __init__(
        self,
        outcomes=(0,),
        output: bytes = b"GIF89a-fake",
        frame_count: int = 3,
        fail_remove: bool = False,
        partial_on_failure: bool = False,
    ):
        self.outcomes = list(outcomes)
        self.output = output
        self.frame_count = frame_count
        self.fail_remove = fail_remove
        self.partial_on_failure = partial_on_failure
        self.storage: dict[str, bytes] = {}
        self.calls: list[tuple[str, object]] = []
        self.runs: list[list[str]] = []
        self.closed = False

    def _write_result(self, target: str, count: int) -> None:
        if "%" in target:
            for i in range(count):
                self.storage[target.replace("%03d", f"{i:03d}")] = make_png()
        else:
            self.storage[target] = self.output

    def stage(self, name, data):
        self.calls.append(("stage", name))
        self.storage[name] = data

    def run(self, arguments):
        self.calls.append(("run", tuple(arguments)))
        self.runs.append(list(arguments))
        index = min(len(self.runs), len(self.outcomes)) - 1
        code = self.outcomes[index]
        if code == 0:
            self._write_result(arguments[-1], self.frame_count)
        elif self.partial_on_failure:
            self._write_result(arguments[-1], self.frame_count + 2)
        return code

    def retrieve(self, name):
        self.calls.append(("retrieve", name))
        if name not in self.storage:
            raise EngineError(f"No entry named '{name}'")
        return self.storage[name]

    def remove(self, name):
        self.calls.append(("remove", name))
        if self.fail_remove:
            raise RuntimeError("storage is read-only")
        del self.storage[name]

    def list_names(self):
        return sorted(self.storage)

    def close(self):
        self.closed = True

    def names_for(self, op: str) -> list:
        return [arg for name, arg in self.calls if name == op]


class StubFactory:
    """EngineFactory returning a new RecordingEngine on each acquire()."""

    def __init__(self, **engine_kwargs):
        self.engine_kwargs = engine_kwargs
        self.engines: list[RecordingEngine] = []

    def acquire(self):
        engine = RecordingEngine(**self.engine_kwargs)
        self.engines.append(engine)
        return engine

    @property
    def last(self) -> RecordingEngine:
        return self.engines[-1]


class FailingFactory:
    def __init__(self, error: Exception):
        self.error = error

    def acquire(self):
        raise self.error


@pytest.fixture
def transparent_gif() -> bytes:
    return make_transparent_gif()


@pytest.fixture
def stub_factory():
    return StubFactory()


@pytest.fixture
def ffmpeg_available() -> bool:
    if shutil.which("ffmpeg") is None:
        pytest.skip("FFmpeg not installed")
    return True
