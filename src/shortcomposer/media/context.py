"""Media runtime context for FFmpeg operations and per-request staging."""

import tempfile
import logging
import subprocess
from typing import Optional

from .staging import StagingArea


class MediaContext:
    """Context for media operations with FFmpeg and temporary file management."""

    def __init__(
        self,
        ffmpeg: str = "ffmpeg",
        ffprobe: str = "ffprobe",
        tmp_root: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
        render_timeout: Optional[float] = 600.0,
        probe_timeout: float = 10.0,
    ):
        """
        Initialize media context.

        Args:
            ffmpeg: Path to ffmpeg binary
            ffprobe: Path to ffprobe binary
            tmp_root: Root directory for temporary files
            logger: Logger instance for debugging
            render_timeout: Maximum seconds a render may run (None for no limit)
            probe_timeout: Maximum seconds a single ffprobe call may run
        """
        self.ffmpeg = ffmpeg
        self.ffprobe = ffprobe
        self.logger = logger or logging.getLogger(__name__)
        self.render_timeout = render_timeout
        self.probe_timeout = probe_timeout

        # Root directory; every request gets its own subdirectory below it
        self._tmp = tempfile.TemporaryDirectory(dir=tmp_root, prefix="shortcomposer_")
        self.tmp = self._tmp.name

        # Verify FFmpeg is available
        self._verify_ffmpeg()

    def _verify_ffmpeg(self) -> None:
        """Verify that FFmpeg binaries are available."""
        try:
            result = subprocess.run(
                [self.ffmpeg, "-version"], capture_output=True, text=True, timeout=10
            )
            if result.returncode != 0:
                raise RuntimeError(f"FFmpeg not working: {result.stderr}")

            result = subprocess.run(
                [self.ffprobe, "-version"], capture_output=True, text=True, timeout=10
            )
            if result.returncode != 0:
                raise RuntimeError(f"FFprobe not working: {result.stderr}")

            self.logger.debug("FFmpeg binaries verified successfully")

        except FileNotFoundError as e:
            raise RuntimeError(f"FFmpeg not found. Please install FFmpeg: {e}")
        except subprocess.TimeoutExpired:
            raise RuntimeError("FFmpeg verification timed out")

    def staging(self) -> StagingArea:
        """
        Open a fresh staging area for one request.

        Returns:
            StagingArea rooted in a unique subdirectory; use it as a context
            manager so it is removed on every exit path
        """
        return StagingArea(root=self.tmp, logger=self.logger)

    def cleanup(self) -> None:
        """Clean up temporary files."""
        try:
            self._tmp.cleanup()
            self.logger.debug("Temporary files cleaned up")
        except OSError as e:
            self.logger.warning(f"Error cleaning up temporary files: {e}")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.cleanup()


# Global default context
_DEFAULT_CTX: Optional[MediaContext] = None


def default_context() -> MediaContext:
    """
    Get the default media context.

    Returns:
        Default MediaContext instance
    """
    global _DEFAULT_CTX
    if _DEFAULT_CTX is None:
        _DEFAULT_CTX = MediaContext()
    return _DEFAULT_CTX


def set_default_context(ctx: MediaContext) -> None:
    """
    Set the default media context.

    Args:
        ctx: MediaContext to use as default
    """
    global _DEFAULT_CTX
    _DEFAULT_CTX = ctx
