"""Timeline resolution: per-clip durations, loops and speed factors."""

import logging
import math
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from ..core.errors import ValidationError
from ..core.types import ClipMode, MediaKind, Transition
from .settings import CompositionSettings

# Per-clip duration used when the authoritative duration cannot be probed
FALLBACK_CLIP_DURATION = 5.0

# Tolerance for duration sums
DURATION_TOLERANCE = 1e-3


class ClipSource(BaseModel):
    """One visual input of a composition."""

    model_config = ConfigDict(frozen=True)

    kind: MediaKind
    path: str
    index: int
    duration: Optional[float] = None  # Probed intrinsic duration, video only

    @staticmethod
    def image(path: str, index: int) -> "ClipSource":
        return ClipSource(kind=MediaKind.IMAGE, path=path, index=index)

    @staticmethod
    def video(path: str, index: int, duration: Optional[float] = None) -> "ClipSource":
        return ClipSource(kind=MediaKind.VIDEO, path=path, index=index, duration=duration)


class TimelineEntry(BaseModel):
    """Placement of one clip (or the outro) on the output timeline."""

    index: int
    start: float
    duration: float  # Share of the output timeline
    render_duration: float  # Duration plus the cross-fade lead-in, if any
    frames: int
    loops: int = 0  # Extra passes over the source (demuxer loop count)
    speed: float = 1.0
    source_duration: Optional[float] = None  # None when unknown or not a video

    @property
    def plays(self) -> int:
        """Number of times the source is decoded."""
        return self.loops + 1

    @property
    def pad_duration(self) -> float:
        """Seconds of last-frame padding needed to fill the rendered slot."""
        if self.source_duration is None:
            return self.render_duration
        available = self.source_duration * self.plays / self.speed
        return max(0.0, self.render_duration - available)


class Timeline(BaseModel):
    """Resolved timing of one composition."""

    entries: List[TimelineEntry]
    outro: Optional[TimelineEntry] = None
    total_duration: float
    content_duration: float
    fps: int
    transition: Transition = Transition.NONE
    transition_duration: float = 0.0
    mode: ClipMode = ClipMode.FIT

    @property
    def overlap(self) -> float:
        """Cross-fade overlap between consecutive segments (0 without transition)."""
        return self.transition_duration if self.transition != Transition.NONE else 0.0

    @property
    def durations(self) -> List[float]:
        return [e.duration for e in self.entries]

    def crossfade_offsets(self) -> List[float]:
        """
        Offsets of the chained cross-fades between clips.

        Fade i (joining clip i) starts where the first i clips end on the
        output timeline, one overlap earlier: sum(d_0..d_{i-1}) - T.
        """
        if self.overlap <= 0:
            return []
        offsets = []
        cumulative = 0.0
        for entry in self.entries[:-1]:
            cumulative += entry.duration
            offsets.append(cumulative - self.overlap)
        return offsets

    def outro_offset(self) -> Optional[float]:
        """Offset of the cross-fade into the outro, if one is rendered."""
        if self.outro is None or self.overlap <= 0:
            return None
        return self.content_duration - self.overlap


def resolve_timeline(
    clips: Sequence[ClipSource],
    settings: CompositionSettings,
    audio_duration: Optional[float] = None,
    has_outro: bool = False,
    logger: Optional[logging.Logger] = None,
) -> Timeline:
    """
    Resolve per-clip durations so clips plus outro fill the target duration.

    Args:
        clips: Visual clips in output order (all images or all videos)
        settings: Composition settings
        audio_duration: Probed audio duration; None when not probed or failed
        has_outro: Whether an outro segment is appended
        logger: Logger for the resolved timing

    Returns:
        Resolved timeline

    Raises:
        ValidationError: If there are no clips or the timing cannot be satisfied
    """
    logger = logger or logging.getLogger(__name__)
    count = len(clips)
    if count == 0:
        raise ValidationError("At least one clip is required")

    fps = settings.fps
    outro_duration = settings.outro_duration if has_outro else 0.0

    # Target total duration
    explicit = settings.explicit_duration
    if explicit is not None:
        total = explicit * count + outro_duration
    elif audio_duration is not None and audio_duration > 0:
        total = audio_duration
    else:
        logger.warning(
            f"Audio duration unavailable, using {FALLBACK_CLIP_DURATION:.1f}s per clip"
        )
        total = FALLBACK_CLIP_DURATION * count + outro_duration

    content = total - outro_duration
    if content <= 0:
        raise ValidationError(
            f"Target duration {total:.3f}s leaves no room for clips after a "
            f"{outro_duration:.3f}s outro"
        )

    is_video = clips[0].kind == MediaKind.VIDEO
    speed = 1.0
    sources: List[Optional[float]] = [None] * count
    if is_video:
        sources = [
            c.duration if c.duration and c.duration > 0 else FALLBACK_CLIP_DURATION
            for c in clips
        ]

    if is_video and settings.mode == ClipMode.SPEED:
        speed = sum(sources) / content
        durations = [s / speed for s in sources]
    else:
        durations = [content / count] * count

    # Last clip absorbs floating-point remainder so the sum is exact
    durations[-1] = content - sum(durations[:-1])

    overlap = settings.transition_duration if settings.has_transition else 0.0
    _check_overlap(overlap, durations, outro_duration if has_outro else None)

    entries: List[TimelineEntry] = []
    start = 0.0
    for i, (clip, duration) in enumerate(zip(clips, durations)):
        render_duration = duration + (overlap if i > 0 else 0.0)
        loops = 0
        if is_video and settings.mode == ClipMode.FIT and sources[i] < render_duration:
            loops = math.ceil(render_duration / sources[i])
        entries.append(
            TimelineEntry(
                index=i,
                start=start,
                duration=duration,
                render_duration=render_duration,
                frames=_frames(render_duration, fps, i),
                loops=loops,
                speed=speed,
                source_duration=clip.duration if is_video else None,
            )
        )
        start += duration

    outro = None
    if has_outro:
        render_duration = outro_duration + overlap
        outro = TimelineEntry(
            index=count,
            start=content,
            duration=outro_duration,
            render_duration=render_duration,
            frames=_frames(render_duration, fps, count),
        )

    timeline = Timeline(
        entries=entries,
        outro=outro,
        total_duration=total,
        content_duration=content,
        fps=fps,
        transition=settings.transition,
        transition_duration=overlap,
        mode=settings.mode,
    )

    logger.info(
        f"🎬 Timeline: {count} clip(s), {content:.2f}s content"
        f"{f' + {outro_duration:.2f}s outro' if has_outro else ''} = {total:.2f}s"
    )
    if is_video and settings.mode == ClipMode.SPEED:
        logger.info(f"🎬 Using global speed factor {speed:.3f}")
    return timeline


def _check_overlap(
    overlap: float, durations: Sequence[float], outro_duration: Optional[float]
) -> None:
    if overlap <= 0:
        return
    shortest = min(durations)
    if outro_duration is not None:
        shortest = min(shortest, outro_duration)
    elif len(durations) < 2:
        return
    if overlap >= shortest:
        raise ValidationError(
            f"Transition duration {overlap:.3f}s must be shorter than every "
            f"clip it joins (shortest is {shortest:.3f}s)"
        )


def _frames(duration: float, fps: int, index: int) -> int:
    frames = round(duration * fps)
    if frames <= 0:
        raise ValidationError(
            f"Clip {index} would be {duration:.3f}s long, shorter than one frame"
        )
    return frames
