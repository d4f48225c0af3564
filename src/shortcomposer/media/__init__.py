"""Media module for timeline resolution, filter graphs and rendering."""

from .context import MediaContext, default_context, set_default_context
from .staging import StagingArea
from .settings import CompositionSettings, CaptionStyle, FPS
from .probe import MediaProbe
from .timeline import ClipSource, Timeline, TimelineEntry, resolve_timeline
from .graph import Filter, FilterNode, FilterGraph
from .effects import clip_node, outro_node, motion_for
from .transitions import compose_transitions
from .encoders import EncoderProfile
from .composition import ShortComposition, AudioMerge, CaptionBurn
from .captions import apply_caption_style
from .composer import Composer, RenderResult

__all__ = [
    "MediaContext",
    "default_context",
    "set_default_context",
    "StagingArea",
    "CompositionSettings",
    "CaptionStyle",
    "FPS",
    "MediaProbe",
    "ClipSource",
    "Timeline",
    "TimelineEntry",
    "resolve_timeline",
    "Filter",
    "FilterNode",
    "FilterGraph",
    "clip_node",
    "outro_node",
    "motion_for",
    "compose_transitions",
    "EncoderProfile",
    "ShortComposition",
    "AudioMerge",
    "CaptionBurn",
    "apply_caption_style",
    "Composer",
    "RenderResult",
]
