"""Client for a deployed composition service."""

import json
import mimetypes
import os
from contextlib import ExitStack
from typing import List, Optional, Sequence, Tuple, Union

import requests
from pydantic import BaseModel

from ..__version__ import __version__
from ..media.settings import CaptionStyle, CompositionSettings
from .models import ApiError, InvalidRequestError, RenderFailedError

Settings = Union[BaseModel, dict, str, None]


class ShortsClient:
    """Client for the merge-audio, images/videos-to-video and burn-captions endpoints."""

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        session: Optional[requests.Session] = None,
        timeout: float = 300.0,
    ):
        """
        Initialize the API client.

        Args:
            base_url: Base URL of the composition service
            session: Optional requests session to use
            timeout: Request timeout in seconds (renders can take a while)
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

        self.session.headers.update({"User-Agent": f"shortcomposer-python/{__version__}"})

    def _post(
        self,
        endpoint: str,
        uploads: Sequence[Tuple[str, str]],
        settings: Settings = None,
    ) -> bytes:
        """Upload files as multipart form data and return the rendered bytes."""
        url = f"{self.base_url}{endpoint}"
        data = {}
        payload = _settings_json(settings)
        if payload is not None:
            data["settings"] = payload

        try:
            with ExitStack() as stack:
                files = []
                for field, path in uploads:
                    mime = mimetypes.guess_type(path)[0] or "application/octet-stream"
                    handle = stack.enter_context(open(path, "rb"))
                    files.append((field, (os.path.basename(path), handle, mime)))
                response = self.session.post(
                    url, files=files, data=data, timeout=self.timeout
                )
        except requests.exceptions.Timeout:
            raise ApiError(f"Request timed out after {self.timeout} seconds")
        except requests.exceptions.ConnectionError:
            raise ApiError("Failed to connect to the composition service")
        except requests.exceptions.RequestException as e:
            raise ApiError(f"Request failed: {str(e)}")

        if response.status_code >= 400:
            error_data = None
            try:
                error_data = response.json()
                error_message = error_data.get("error", f"HTTP {response.status_code}")
            except (ValueError, AttributeError):
                error_message = response.text or f"HTTP {response.status_code}"

            if response.status_code in (400, 422):
                raise InvalidRequestError(error_message, response.status_code, error_data)
            elif response.status_code >= 500:
                raise RenderFailedError(error_message, response.status_code, error_data)
            else:
                raise ApiError(error_message, response.status_code, error_data)

        return response.content

    def merge_audio(self, audio: Sequence[str]) -> bytes:
        """
        Concatenate audio files into one MP3.

        Args:
            audio: Audio file paths, in playback order

        Returns:
            MP3 bytes
        """
        return self._post("/merge-audio", [("audio", p) for p in audio])

    def images_to_video(
        self,
        images: Sequence[str],
        audio: str,
        outro: Optional[str] = None,
        settings: Optional[CompositionSettings] = None,
    ) -> bytes:
        """
        Compose a short from images and a narration track.

        Args:
            images: Image paths, in display order
            audio: Narration or music track
            outro: Optional outro image or video
            settings: Composition settings

        Returns:
            MP4 bytes
        """
        uploads = _visual_uploads("images", images, audio, outro)
        return self._post("/images-to-video", uploads, settings)

    def videos_to_video(
        self,
        videos: Sequence[str],
        audio: str,
        outro: Optional[str] = None,
        settings: Optional[CompositionSettings] = None,
    ) -> bytes:
        """
        Compose a short from video clips and a narration track.

        Args:
            videos: Video clip paths, in display order
            audio: Narration or music track
            outro: Optional outro image or video
            settings: Composition settings

        Returns:
            MP4 bytes
        """
        uploads = _visual_uploads("videos", videos, audio, outro)
        return self._post("/videos-to-video", uploads, settings)

    def burn_captions(
        self, video: str, captions: str, style: Optional[CaptionStyle] = None
    ) -> bytes:
        """
        Burn an ASS caption script into a video.

        Args:
            video: Video path
            captions: ASS script path
            style: Optional style replacing the script's default style

        Returns:
            MP4 bytes
        """
        return self._post(
            "/burn-captions", [("video", video), ("captions", captions)], style
        )


def _visual_uploads(
    field: str, paths: Sequence[str], audio: str, outro: Optional[str]
) -> List[Tuple[str, str]]:
    uploads = [(field, p) for p in paths]
    uploads.append(("audio", audio))
    if outro:
        uploads.append(("outro", outro))
    return uploads


def _settings_json(settings: Settings) -> Optional[str]:
    if settings is None:
        return None
    if isinstance(settings, BaseModel):
        return settings.model_dump_json()
    if isinstance(settings, dict):
        return json.dumps(settings)
    return str(settings)
