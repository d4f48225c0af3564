"""Core module for shortcomposer."""

from .types import (
    StatusCb,
    MediaKind,
    Effect,
    Transition,
    ClipMode,
    ComposeMode,
    Anchor,
)
from .errors import (
    ComposerError,
    ValidationError,
    ProbeError,
    SettingsParseError,
    GraphAssemblyError,
    RenderError,
)

__all__ = [
    "StatusCb",
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
