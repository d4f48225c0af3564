"""Error taxonomy for composition requests."""

from typing import List, Optional


class ComposerError(Exception):
    """Base exception for composition failures."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ComposerError):
    """A required input group is missing or the request cannot be timed."""

    status_code = 400


class ProbeError(ComposerError):
    """Duration inspection of a media file failed."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class SettingsParseError(ComposerError):
    """The settings payload could not be parsed."""

    status_code = 400

    def __init__(self, message: str, invalid_keys: Optional[List[str]] = None):
        super().__init__(message)
        self.invalid_keys = invalid_keys or []


class GraphAssemblyError(ComposerError):
    """The filter graph violates an internal invariant."""


class RenderError(ComposerError):
    """FFmpeg exited non-zero or was stopped before finishing."""

    def __init__(
        self,
        message: str,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
    ):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
