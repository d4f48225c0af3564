"""Core types and enums for the shortcomposer package."""

from enum import Enum
from typing import Optional, Callable

# Status callback type: receives status strings ("staged", "rendering", "completed")
StatusCb = Optional[Callable[[str], None]]


class MediaKind(str, Enum):
    """Kind of a visual clip source."""

    IMAGE = "image"
    VIDEO = "video"


class Effect(str, Enum):
    """Per-clip visual effect (image clips only)."""

    NONE = "none"  # Scale and crop to fill, no motion
    ZOOM_IN = "zoom_in"
    ZOOM_OUT = "zoom_out"
    ZOOM_IN_OUT = "zoom_in_out"
    ZOOM_OUT_IN = "zoom_out_in"
    PULSE = "pulse"
    PAN_LEFT = "pan_left"
    PAN_RIGHT = "pan_right"
    PAD = "pad"  # Fit inside the frame and pad, no crop

    @property
    def animated(self) -> bool:
        """Whether the effect moves the frame over time."""
        return self not in (Effect.NONE, Effect.PAD)


class Transition(str, Enum):
    """Transition between consecutive clips (values are xfade transition names)."""

    NONE = "none"
    FADE = "fade"
    FADE_BLACK = "fadeblack"
    DISSOLVE = "dissolve"
    WIPE_LEFT = "wipeleft"
    WIPE_RIGHT = "wiperight"
    SLIDE_LEFT = "slideleft"
    SLIDE_RIGHT = "slideright"
    SLIDE_UP = "slideup"
    CIRCLE_OPEN = "circleopen"


class ClipMode(str, Enum):
    """How video clips are fitted to their timeline slot."""

    FIT = "fit"  # Trim or loop each clip to an equal share
    SPEED = "speed"  # Retime all clips with one global speed factor


class ComposeMode(str, Enum):
    """Composition operations exposed by the composer."""

    MERGE_AUDIO = "merge-audio"
    IMAGES_TO_VIDEO = "images-to-video"
    VIDEOS_TO_VIDEO = "videos-to-video"
    BURN_CAPTIONS = "burn-captions"


class Anchor(str, Enum):
    """Anchor positions for captions."""

    CENTER = "center"
    TOP_LEFT = "top-left"
    TOP_CENTER = "top-center"
    TOP_RIGHT = "top-right"
    CENTER_LEFT = "center-left"
    CENTER_RIGHT = "center-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_CENTER = "bottom-center"
    BOTTOM_RIGHT = "bottom-right"
