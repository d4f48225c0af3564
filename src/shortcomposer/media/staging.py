"""Per-request staging area for uploaded inputs and intermediate files."""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Dict, List, Optional


class StagingArea:
    """
    Scoped arena of staged files for a single composition request.

    Each area owns a unique directory, so concurrent requests never share
    file names. Everything inside is removed when the area is closed.
    """

    def __init__(self, root: Optional[str] = None, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.path = tempfile.mkdtemp(prefix="req_", dir=root)
        self._fields: Dict[str, List[str]] = {}
        self._closed = False

    def _next_name(self, field: str, suffix: str) -> str:
        count = len(self._fields.get(field, []))
        return os.path.join(self.path, f"{field}_{count:03d}{suffix.lower()}")

    def stage(self, field: str, src: str) -> str:
        """
        Copy an uploaded file into the area under a logical field.

        Args:
            field: Logical upload field ("images", "audio", "outro", ...)
            src: Path of the uploaded file

        Returns:
            Path of the staged copy
        """
        dest = self._next_name(field, Path(src).suffix)
        shutil.copyfile(src, dest)
        self._fields.setdefault(field, []).append(dest)
        self.logger.debug(f"Staged {src} as {dest}")
        return dest

    def write(self, field: str, filename: str, data: bytes) -> str:
        """
        Write uploaded bytes into the area under a logical field.

        Args:
            field: Logical upload field
            filename: Original file name (only the extension is kept)
            data: File content

        Returns:
            Path of the staged file
        """
        dest = self._next_name(field, Path(filename).suffix)
        with open(dest, "wb") as f:
            f.write(data)
        self._fields.setdefault(field, []).append(dest)
        return dest

    def files(self, field: str) -> List[str]:
        """Return staged paths for a field, in upload order."""
        return list(self._fields.get(field, []))

    def temp_path(self, suffix: str = "", prefix: str = "tmp_") -> str:
        """
        Generate a path for an intermediate or output file inside the area.

        Args:
            suffix: File suffix/extension (e.g., ".mp4")
            prefix: File prefix

        Returns:
            Temporary file path
        """
        fd, path = tempfile.mkstemp(suffix=suffix, prefix=prefix, dir=self.path)
        os.close(fd)  # Close file descriptor, we just need the path
        return path

    def cleanup(self) -> None:
        """Remove the area and everything staged in it."""
        if self._closed:
            return
        self._closed = True
        shutil.rmtree(self.path, ignore_errors=True)
        self._fields.clear()
        self.logger.debug(f"Staging area {self.path} removed")

    def __enter__(self) -> "StagingArea":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cleanup()
