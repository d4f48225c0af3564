"""End-to-end renders with real FFmpeg.

These tests generate small inputs with FFmpeg's lavfi sources, render them
through the Composer and measure the output with ffprobe:
- Images with a motion effect, a cross-fade and an image outro
- Video clips in fit and speed mode with a cross-fade and a video outro
- An explicit per-clip duration longer than the audio
"""

import asyncio
import json
import shutil
import subprocess
from pathlib import Path

import pytest

from shortcomposer import ComposeMode, Composer, MediaContext

FPS = 25
FRAME_TOLERANCE = 1 / FPS + 0.01

pytestmark = pytest.mark.skipif(
    shutil.which("ffmpeg") is None or shutil.which("ffprobe") is None,
    reason="FFmpeg and ffprobe must be on PATH",
)


def get_video_duration(file_path: str) -> float:
    """Get the duration of the first video stream using ffprobe."""
    cmd = [
        "ffprobe",
        "-v",
        "quiet",
        "-print_format",
        "json",
        "-select_streams",
        "v:0",
        "-show_entries",
        "stream=duration",
        file_path,
    ]
    result = subprocess.run(cmd, capture_output=True, text=True, timeout=10)
    if result.returncode != 0:
        return 0.0
    streams = json.loads(result.stdout).get("streams", [])
    duration = streams[0].get("duration") if streams else None
    return float(duration) if duration else 0.0


def lavfi(out_path: Path, source: str, *extra: str) -> str:
    """Render one lavfi source to a file."""
    cmd = ["ffmpeg", "-y", "-v", "error", "-f", "lavfi", "-i", source, *extra, str(out_path)]
    subprocess.run(cmd, check=True, capture_output=True, timeout=60)
    return str(out_path)


@pytest.fixture(scope="module")
def assets(tmp_path_factory):
    """Generate images, clips, an outro and a 6s narration track."""
    root = tmp_path_factory.mktemp("assets")
    images = [
        lavfi(root / f"slide{i}.png", f"color=c={color}:s=320x240", "-frames:v", "1")
        for i, color in enumerate(["red", "green", "blue"])
    ]
    # 30 fps sources so the chains have to resample to 25
    videos = [
        lavfi(root / "clip0.mp4", "testsrc=duration=1.5:size=320x240:rate=30", "-pix_fmt", "yuv420p"),
        lavfi(root / "clip1.mp4", "testsrc=duration=5:size=320x240:rate=30", "-pix_fmt", "yuv420p"),
    ]
    return {
        "images": images,
        "videos": videos,
        "outro_image": lavfi(root / "outro.png", "color=c=white:s=200x200", "-frames:v", "1"),
        "outro_video": lavfi(
            root / "outro.mp4", "testsrc2=duration=1:size=240x240:rate=30", "-pix_fmt", "yuv420p"
        ),
        "audio": lavfi(root / "voice.wav", "sine=frequency=440:duration=6"),
    }


@pytest.fixture
def composer(tmp_path):
    ctx = MediaContext(tmp_root=str(tmp_path), render_timeout=300.0)
    yield Composer(ctx=ctx)
    ctx.cleanup()


def render_and_measure(composer, tmp_path, mode, uploads, settings) -> float:
    """Render a request, write it next to the test and measure it."""
    result = asyncio.run(composer.compose(mode, uploads, json.dumps(settings)))
    assert result.content_type == "video/mp4"
    out_path = tmp_path / "short.mp4"
    out_path.write_bytes(result.data)
    return get_video_duration(str(out_path))


@pytest.mark.functional
class TestRenderedDurations:
    """Rendered shorts last exactly as long as their timeline."""

    SMALL = {"width": 360, "height": 640}

    def test_images_with_crossfade_and_outro(self, composer, assets, tmp_path):
        """Test zoomed images cross-faded into an image outro match the audio."""
        settings = {
            **self.SMALL,
            "effect": "zoom_in",
            "transition": "fade",
            "transition_duration": 0.5,
            "outro_duration": 1.5,
            "vignette": True,
        }
        uploads = {
            "images": assets["images"],
            "audio": [assets["audio"]],
            "outro": [assets["outro_image"]],
        }
        duration = render_and_measure(
            composer, tmp_path, ComposeMode.IMAGES_TO_VIDEO, uploads, settings
        )
        print(f"✅ Images short rendered: {duration:.3f}s (expected 6.000s)")
        assert abs(duration - 6.0) <= FRAME_TOLERANCE

    @pytest.mark.parametrize("mode", ["fit", "speed"])
    def test_videos_with_crossfade_and_outro(self, composer, assets, tmp_path, mode):
        """Test looped, trimmed or retimed clips cross-faded into a video outro."""
        settings = {
            **self.SMALL,
            "mode": mode,
            "transition": "dissolve",
            "transition_duration": 0.4,
            "outro_duration": 1.0,
        }
        uploads = {
            "videos": assets["videos"],
            "audio": [assets["audio"]],
            "outro": [assets["outro_video"]],
        }
        duration = render_and_measure(
            composer, tmp_path, ComposeMode.VIDEOS_TO_VIDEO, uploads, settings
        )
        print(f"✅ Videos short ({mode}) rendered: {duration:.3f}s (expected 6.000s)")
        assert abs(duration - 6.0) <= FRAME_TOLERANCE

    def test_explicit_duration_outlasts_audio(self, composer, assets, tmp_path):
        """Test that three 2s slides plus a 1s outro give 7s over 6s of audio."""
        settings = {**self.SMALL, "duration": 2, "transition": "wipeleft", "outro_duration": 1.0}
        uploads = {
            "images": assets["images"],
            "audio": [assets["audio"]],
            "outro": [assets["outro_image"]],
        }
        duration = render_and_measure(
            composer, tmp_path, ComposeMode.IMAGES_TO_VIDEO, uploads, settings
        )
        assert abs(duration - 7.0) <= FRAME_TOLERANCE
