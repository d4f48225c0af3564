"""Shared test fixtures and configuration."""

import os
import subprocess
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from shortcomposer.core.errors import ProbeError
from shortcomposer.media.context import MediaContext
from shortcomposer.media.probe import MediaProbe

# Auto-load .env file for tests
try:
    from dotenv import load_dotenv

    load_dotenv()  # Load .env file automatically
except ImportError:
    pass  # dotenv not available, use regular env vars


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield tmp_dir


def _write(path: str, data: bytes) -> str:
    with open(path, "wb") as f:
        f.write(data)
    return path


@pytest.fixture
def sample_image_paths(temp_dir):
    """Create three fake image files."""
    return [
        _write(os.path.join(temp_dir, f"slide{i}.jpg"), b"fake image data")
        for i in range(3)
    ]


@pytest.fixture
def sample_video_paths(temp_dir):
    """Create two fake video files."""
    return [
        _write(os.path.join(temp_dir, f"clip{i}.mp4"), b"fake video data")
        for i in range(2)
    ]


@pytest.fixture
def sample_audio_path(temp_dir):
    """Create a fake narration file."""
    return _write(os.path.join(temp_dir, "voice.mp3"), b"fake audio data")


@pytest.fixture
def media_ctx(temp_dir):
    """Media context whose binary check is patched out."""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value.returncode = 0
        mock_run.return_value.stderr = ""
        ctx = MediaContext(tmp_root=temp_dir, render_timeout=30.0)
    yield ctx
    ctx.cleanup()


class FakeProbe(MediaProbe):
    """Probe answering from a table keyed by staged file stem (e.g. "audio_000")."""

    def __init__(self, ctx, known=None):
        super().__init__(ctx)
        self.known = dict(known or {})
        self.calls = []

    async def duration(self, path):
        self.calls.append(path)
        value = self.known.get(Path(path).stem)
        if value is None:
            raise ProbeError(f"No duration for {path}", path=path)
        return value


@pytest.fixture
def ffmpeg_calls():
    """
    Replace the FFmpeg runner used for renders.

    Every call is recorded and writes fake bytes to the output path (the
    last argument), as a successful render would.
    """
    calls = []

    async def fake_run(args, **kwargs):
        calls.append(list(args))
        with open(args[-1], "wb") as f:
            f.write(b"rendered")
        return subprocess.CompletedProcess(args, 0, "", "")

    with patch("shortcomposer.media.composition.run_ffmpeg_async", fake_run):
        yield calls


@pytest.fixture
def make_probe(media_ctx):
    """Factory for probes answering from a {stem: seconds} table."""

    def _make(known=None):
        return FakeProbe(media_ctx, known)

    return _make


@pytest.fixture
def request_dirs(media_ctx):
    """Callable listing the request directories left under the context's temp root."""

    def _list():
        return [name for name in os.listdir(media_ctx.tmp) if name.startswith("req_")]

    return _list
