"""Composition operations: one coroutine per mode over a per-request staging area."""

import asyncio
import mimetypes
from pathlib import Path
from typing import Literal, Mapping, Optional, Sequence, Union

from pydantic import BaseModel

from ..core.errors import ComposerError, RenderError, ValidationError
from ..core.types import ComposeMode, MediaKind, StatusCb
from .captions import apply_caption_style
from .composition import AudioMerge, CaptionBurn, ShortComposition, Assembly
from .context import MediaContext, default_context
from .probe import MediaProbe
from .settings import CaptionStyle, CompositionSettings
from .staging import StagingArea
from .timeline import ClipSource, resolve_timeline

Payload = Union[str, bytes, dict, None]


class RenderResult(BaseModel):
    """Rendered output handed back to the caller."""

    content_type: Literal["audio/mpeg", "video/mp4"]
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def media_kind(path: str) -> MediaKind:
    """Guess whether a staged file is an image or a video from its name."""
    mime, _ = mimetypes.guess_type(path)
    if mime and mime.startswith("image/"):
        return MediaKind.IMAGE
    return MediaKind.VIDEO


class Composer:
    """Runs composition requests end to end."""

    def __init__(
        self,
        ctx: Optional[MediaContext] = None,
        probe: Optional[MediaProbe] = None,
    ):
        """
        Initialize the composer.

        Args:
            ctx: Media context (binaries, temp root, logger, render timeout)
            probe: Duration probe; defaults to ffprobe through ctx
        """
        self.ctx = ctx or default_context()
        self.probe = probe or MediaProbe(self.ctx)
        self._handlers = {
            ComposeMode.MERGE_AUDIO: self.merge_audio,
            ComposeMode.IMAGES_TO_VIDEO: self.images_to_video,
            ComposeMode.VIDEOS_TO_VIDEO: self.videos_to_video,
            ComposeMode.BURN_CAPTIONS: self.burn_captions,
        }

    async def compose(
        self,
        mode: Union[ComposeMode, str],
        uploads: Mapping[str, Sequence[str]],
        settings: Payload = None,
        on_status: StatusCb = None,
    ) -> RenderResult:
        """
        Stage uploads into a fresh area, run one mode, and clean up.

        Args:
            mode: Composition mode
            uploads: Uploaded file paths per logical field
            settings: Raw settings payload
            on_status: Optional callback receiving "staged", "rendering", "completed"

        Returns:
            Rendered output

        Raises:
            ValidationError: Missing inputs or unknown mode
            GraphAssemblyError: Internal graph inconsistency
            RenderError: FFmpeg failed
        """
        try:
            mode = ComposeMode(mode)
        except ValueError:
            raise ValidationError(f"Unknown composition mode: {mode}")

        with self.ctx.staging() as area:
            for field, paths in uploads.items():
                for path in paths:
                    area.stage(field, path)
            if on_status:
                on_status("staged")
            try:
                result = await self._handlers[mode](area, settings, on_status=on_status)
            except ComposerError as e:
                self.ctx.logger.error(f"{mode.value} failed: {e}")
                raise
        if on_status:
            on_status("completed")
        return result

    async def merge_audio(
        self, area: StagingArea, settings: Payload = None, on_status: StatusCb = None
    ) -> RenderResult:
        """Concatenate the staged "audio" files into one MP3."""
        audio = area.files("audio")
        if not audio:
            raise ValidationError("No audio files uploaded")
        return await self._render(AudioMerge(audio, ctx=self.ctx), area, on_status)

    async def images_to_video(
        self, area: StagingArea, settings: Payload = None, on_status: StatusCb = None
    ) -> RenderResult:
        """Turn staged "images" (+ optional "outro") and "audio" into a short."""
        images = area.files("images")
        audio = area.files("audio")
        if not images:
            raise ValidationError("No images uploaded")
        if not audio:
            raise ValidationError("No audio uploaded")

        opts = CompositionSettings.from_payload(settings, self.ctx.logger)
        outro = self._outro(area, index=len(images))

        audio_duration = None
        if opts.explicit_duration is None:
            audio_duration = await self.probe.try_duration(audio[0])

        clips = [ClipSource.image(path, i) for i, path in enumerate(images)]
        timeline = resolve_timeline(
            clips, opts, audio_duration, outro is not None, logger=self.ctx.logger
        )
        comp = ShortComposition(clips, audio[0], timeline, opts, outro=outro, ctx=self.ctx)
        return await self._render(comp, area, on_status)

    async def videos_to_video(
        self, area: StagingArea, settings: Payload = None, on_status: StatusCb = None
    ) -> RenderResult:
        """Turn staged "videos" (+ optional "outro") and "audio" into a short."""
        videos = area.files("videos")
        audio = area.files("audio")
        if not videos:
            raise ValidationError("No video clips uploaded")
        if not audio:
            raise ValidationError("No audio uploaded")

        opts = CompositionSettings.from_payload(settings, self.ctx.logger)
        outro = self._outro(area, index=len(videos))

        # Clips (and the audio in auto mode) are probed concurrently
        audio_duration = None
        if opts.explicit_duration is None:
            audio_duration, *clip_durations = await self.probe.durations([audio[0], *videos])
        else:
            clip_durations = await self.probe.durations(videos)

        clips = [
            ClipSource.video(path, i, duration)
            for i, (path, duration) in enumerate(zip(videos, clip_durations))
        ]
        timeline = resolve_timeline(
            clips, opts, audio_duration, outro is not None, logger=self.ctx.logger
        )
        comp = ShortComposition(clips, audio[0], timeline, opts, outro=outro, ctx=self.ctx)
        return await self._render(comp, area, on_status)

    async def burn_captions(
        self, area: StagingArea, settings: Payload = None, on_status: StatusCb = None
    ) -> RenderResult:
        """Burn the staged "captions" script into the staged "video"."""
        video = area.files("video")
        captions = area.files("captions")
        if not video:
            raise ValidationError("No video uploaded")
        if not captions:
            raise ValidationError("No captions uploaded")

        script_path = captions[0]
        if not _is_empty(settings):
            style = CaptionStyle.from_payload(settings, self.ctx.logger)
            script_path = self._styled_script(area, script_path, style)

        return await self._render(CaptionBurn(video[0], script_path, ctx=self.ctx), area, on_status)

    def _outro(self, area: StagingArea, index: int) -> Optional[ClipSource]:
        outro = area.files("outro")
        if not outro:
            return None
        return ClipSource(kind=media_kind(outro[0]), path=outro[0], index=index)

    def _styled_script(self, area: StagingArea, script_path: str, style: CaptionStyle) -> str:
        with open(script_path, "r", encoding="utf-8", newline="") as f:
            script = f.read()
        styled = apply_caption_style(script, style)
        if styled == script:
            self.ctx.logger.info("No default caption style line found, script left as is")
            return script_path
        out_path = area.temp_path(suffix=".ass", prefix="styled_")
        with open(out_path, "w", encoding="utf-8", newline="") as f:
            f.write(styled)
        return out_path

    async def _render(
        self, assembly: Assembly, area: StagingArea, on_status: StatusCb = None
    ) -> RenderResult:
        out_path = area.temp_path(suffix=assembly.encoder.suffix, prefix="out_")
        if on_status:
            on_status("rendering")
        await assembly.to_file(out_path)

        data = await asyncio.to_thread(Path(out_path).read_bytes)
        if not data:
            raise RenderError("FFmpeg produced no output")
        return RenderResult(content_type=assembly.encoder.content_type, data=data)


def _is_empty(payload: Payload) -> bool:
    if payload is None:
        return True
    if isinstance(payload, (str, bytes)):
        return not payload.strip()
    return not payload

