"""Per-clip visual filter chains: fit, motion effect, trim, vignette."""

from typing import Callable, Dict, List, NamedTuple, Optional

from ..core.types import Effect, MediaKind
from .graph import Filter, FilterNode, fmt_number
from .settings import CompositionSettings
from .timeline import ClipSource, TimelineEntry

# Oversize factor applied before cropping when the frame moves
OVERSCAN = 1.5

VIGNETTE_ANGLE = "PI/5"

# Outro fade-in length in seconds
OUTRO_FADE_IN = 0.5

OUTRO_LABEL = "outro"

_CENTER_X = "iw/2-(iw/zoom/2)"
_CENTER_Y = "ih/2-(ih/zoom/2)"


class Motion(NamedTuple):
    """zoompan expressions for one effect."""

    zoom: str
    x: str
    y: str


def progress_expr(frames: int) -> str:
    """Clip progress in [0, 1] as a function of the output frame number."""
    return f"min(on,{frames})/{frames}"


def _still(p: str, i: str) -> Optional[Motion]:
    return None


# Every effect maps to a motion law; static effects map to None
MOTION_LAWS: Dict[Effect, Callable[[str, str], Optional[Motion]]] = {
    Effect.NONE: _still,
    Effect.PAD: _still,
    Effect.ZOOM_IN: lambda p, i: Motion(f"1+{i}*{p}", _CENTER_X, _CENTER_Y),
    Effect.ZOOM_OUT: lambda p, i: Motion(f"1+{i}*(1-{p})", _CENTER_X, _CENTER_Y),
    Effect.ZOOM_IN_OUT: lambda p, i: Motion(
        f"1+{i}*(1-abs(2*{p}-1))", _CENTER_X, _CENTER_Y
    ),
    Effect.ZOOM_OUT_IN: lambda p, i: Motion(f"1+{i}*abs(2*{p}-1)", _CENTER_X, _CENTER_Y),
    Effect.PULSE: lambda p, i: Motion(
        f"1+{i}*(1-cos(2*PI*{p}))/2", _CENTER_X, _CENTER_Y
    ),
    Effect.PAN_LEFT: lambda p, i: Motion(f"1+{i}", f"(iw-iw/zoom)*(1-{p})", _CENTER_Y),
    Effect.PAN_RIGHT: lambda p, i: Motion(f"1+{i}", f"(iw-iw/zoom)*{p}", _CENTER_Y),
}


def motion_for(effect: Effect, frames: int, intensity: float) -> Optional[Motion]:
    """
    Build the zoompan expressions for an effect.

    Args:
        effect: Selected effect
        frames: Frames in the clip; motion completes at this frame
        intensity: Maximum extra zoom (0.1 = 10%)

    Returns:
        Motion expressions, or None when the frame does not move
        (static effects, or zero intensity)
    """
    if intensity <= 0 or frames <= 0:
        return None
    return MOTION_LAWS[effect](progress_expr(frames), fmt_number(intensity))


def _even(value: float) -> int:
    v = int(round(value))
    return v - v % 2


def _fill(width: int, height: int) -> List[Filter]:
    return [
        Filter(
            name="scale",
            args=[width, height],
            options={"force_original_aspect_ratio": "increase"},
        ),
        Filter(name="crop", args=[width, height]),
    ]


def _letterbox(width: int, height: int) -> List[Filter]:
    return [
        Filter(
            name="scale",
            args=[width, height],
            options={"force_original_aspect_ratio": "decrease"},
        ),
        Filter(
            name="pad",
            args=[width, height, "(ow-iw)/2", "(oh-ih)/2"],
            options={"color": "black"},
        ),
    ]


def _finish(render_duration: float, fps: int) -> List[Filter]:
    # setpts leaves the frame rate unset; xfade only accepts constant-rate inputs
    return [
        Filter(name="trim", options={"duration": render_duration}),
        Filter(name="setpts", args=["PTS-STARTPTS"]),
        Filter(name="fps", args=[fps]),
        Filter(name="setsar", args=[1]),
        Filter(name="format", args=["yuv420p"]),
    ]


def _vignette() -> Filter:
    return Filter(name="vignette", options={"angle": VIGNETTE_ANGLE})


def _retime(entry: TimelineEntry, fps: int) -> List[Filter]:
    filters = []
    if entry.speed != 1.0:
        filters.append(
            Filter(name="setpts", args=[f"(PTS-STARTPTS)/{fmt_number(entry.speed)}"])
        )
    filters.append(Filter(name="fps", args=[fps]))
    return filters


def _hold(seconds: float) -> List[Filter]:
    if seconds <= 0:
        return []
    return [
        Filter(name="tpad", options={"stop_mode": "clone", "stop_duration": seconds})
    ]


def clip_node(
    clip: ClipSource,
    entry: TimelineEntry,
    settings: CompositionSettings,
    effect: Optional[Effect] = None,
) -> FilterNode:
    """
    Build the filter chain for one clip.

    Args:
        clip: Clip source; its index is both the input number and the label suffix
        entry: Resolved timing for the clip
        settings: Composition settings (size, intensity, vignette)
        effect: Effect override; defaults to settings.effect for images and
            no effect for videos

    Returns:
        Node reading [<index>:v] and producing [v<index>]
    """
    width, height = settings.width, settings.height
    if effect is None:
        effect = settings.effect if clip.kind == MediaKind.IMAGE else Effect.NONE

    filters: List[Filter] = []
    if clip.kind == MediaKind.VIDEO:
        filters.extend(_retime(entry, settings.fps))

    motion = motion_for(effect, entry.frames, settings.zoom_intensity)
    if motion is not None:
        big_w, big_h = _even(width * OVERSCAN), _even(height * OVERSCAN)
        filters.extend(_fill(big_w, big_h))
        filters.append(
            Filter(
                name="zoompan",
                options={
                    "z": motion.zoom,
                    "x": motion.x,
                    "y": motion.y,
                    "d": 1,
                    "s": f"{width}x{height}",
                    "fps": settings.fps,
                },
            )
        )
    elif effect == Effect.PAD:
        filters.extend(_letterbox(width, height))
    else:
        filters.extend(_fill(width, height))

    if clip.kind == MediaKind.VIDEO:
        filters.extend(_hold(entry.pad_duration))

    filters.extend(_finish(entry.render_duration, settings.fps))
    if settings.vignette:
        filters.append(_vignette())

    return FilterNode(
        inputs=[f"{clip.index}:v"], filters=filters, output=f"v{clip.index}"
    )


def outro_node(
    outro: ClipSource,
    entry: TimelineEntry,
    settings: CompositionSettings,
    input_index: int,
) -> FilterNode:
    """
    Build the outro chain: letterboxed (never cropped), faded in, optional vignette.

    Args:
        outro: Outro source (image or video)
        entry: Resolved outro timing
        settings: Composition settings
        input_index: FFmpeg input number of the outro

    Returns:
        Node producing [outro]
    """
    filters: List[Filter] = []
    if outro.kind == MediaKind.VIDEO:
        filters.append(Filter(name="fps", args=[settings.fps]))
    filters.extend(_letterbox(settings.width, settings.height))
    if outro.kind == MediaKind.VIDEO:
        filters.extend(_hold(entry.render_duration))
    filters.extend(_finish(entry.render_duration, settings.fps))
    filters.append(
        Filter(name="fade", options={"t": "in", "st": 0, "d": OUTRO_FADE_IN})
    )
    if settings.vignette:
        filters.append(_vignette())
    return FilterNode(
        inputs=[f"{input_index}:v"], filters=filters, output=OUTRO_LABEL
    )
