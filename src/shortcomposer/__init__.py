"""shortcomposer - Compose vertical short videos from images or clips, narration and captions with FFmpeg."""

from .__version__ import __version__
from .client import ShortsClient
from .media import (
    Composer,
    RenderResult,
    CompositionSettings,
    CaptionStyle,
    ClipSource,
    Timeline,
    resolve_timeline,
    ShortComposition,
    AudioMerge,
    CaptionBurn,
    EncoderProfile,
    MediaContext,
    StagingArea,
    default_context,
    set_default_context,
)
from .core import (
    MediaKind,
    Effect,
    Transition,
    ClipMode,
    ComposeMode,
    Anchor,
    ComposerError,
    ValidationError,
    ProbeError,
    SettingsParseError,
    GraphAssemblyError,
    RenderError,
)


__all__ = [
    "__version__",
    "ShortsClient",
    "Composer",
    "RenderResult",
    "CompositionSettings",
    "CaptionStyle",
    "ClipSource",
    "Timeline",
    "resolve_timeline",
    "ShortComposition",
    "AudioMerge",
    "CaptionBurn",
    "EncoderProfile",
    "MediaContext",
    "StagingArea",
    "default_context",
    "set_default_context",
    "MediaKind",
    "Effect",
    "Transition",
    "ClipMode",
    "ComposeMode",
    "Anchor",
    "ComposerError",
    "ValidationError",
    "ProbeError",
    "SettingsParseError",
    "GraphAssemblyError",
    "RenderError",
]
