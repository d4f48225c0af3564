"""Duration probing for audio and video files with ffprobe."""

import asyncio
import json
from typing import List, Optional, Sequence

from ..core.errors import ProbeError, RenderError
from .context import MediaContext, default_context
from .runner import run_ffmpeg_async


class MediaProbe:
    """Query media durations through ffprobe."""

    def __init__(self, ctx: Optional[MediaContext] = None):
        self.ctx = ctx or default_context()

    async def duration(self, path: str) -> float:
        """
        Probe the duration of an audio or video file.

        Args:
            path: File to inspect

        Returns:
            Duration in seconds

        Raises:
            ProbeError: If ffprobe fails or reports no usable duration
        """
        cmd = [
            self.ctx.ffprobe,
            "-v",
            "quiet",
            "-print_format",
            "json",
            "-show_entries",
            "stream=codec_type,duration:format=duration",
            path,
        ]
        try:
            result = await run_ffmpeg_async(
                cmd,
                logger=self.ctx.logger,
                timeout=self.ctx.probe_timeout,
                error_log_level=None,
            )
        except RenderError as e:
            raise ProbeError(f"ffprobe failed for {path}: {e}", path=path) from e

        return parse_duration(result.stdout, path)

    async def durations(self, paths: Sequence[str]) -> List[Optional[float]]:
        """
        Probe several files concurrently.

        Args:
            paths: Files to inspect

        Returns:
            One duration per path, None where probing failed
        """
        results = await asyncio.gather(
            *(self.duration(p) for p in paths), return_exceptions=True
        )
        durations: List[Optional[float]] = []
        for path, result in zip(paths, results):
            if isinstance(result, ProbeError):
                self.ctx.logger.warning(f"Could not probe {path}: {result}")
                durations.append(None)
            elif isinstance(result, BaseException):
                raise result
            else:
                durations.append(result)
        return durations

    async def try_duration(self, path: str) -> Optional[float]:
        """Probe one file, returning None instead of raising ProbeError."""
        return (await self.durations([path]))[0]


def parse_duration(output: str, path: str = "<unknown>") -> float:
    """
    Extract a duration from ffprobe JSON output.

    The container duration wins; the first stream reporting a duration is
    used when the container has none.
    """
    try:
        data = json.loads(output or "{}")
    except json.JSONDecodeError as e:
        raise ProbeError(f"Unparsable ffprobe output for {path}: {e}", path=path)

    candidates = [data.get("format", {}).get("duration")]
    candidates.extend(s.get("duration") for s in data.get("streams", []))

    for value in candidates:
        if value in (None, "N/A"):
            continue
        try:
            seconds = float(value)
        except (TypeError, ValueError):
            continue
        if seconds > 0:
            return seconds

    raise ProbeError(f"No duration reported for {path}", path=path)
