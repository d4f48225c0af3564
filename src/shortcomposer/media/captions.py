"""Rewriting the default style line of an ASS caption script."""

import re
from typing import Dict, Optional

from ..core.types import Anchor
from .graph import fmt_number
from .settings import CaptionStyle

# Fields in an ASS V4+ style line, the name included
STYLE_FIELD_COUNT = 23

# "Style: Default," followed by the remaining 22 fields on one line
_DEFAULT_STYLE = re.compile(
    r"^Style:[ \t]*Default((?:,[^,\r\n]*){%d})(?=\r?$)" % (STYLE_FIELD_COUNT - 1),
    re.MULTILINE,
)

# Numpad alignment codes used by ASS
ALIGNMENT_CODES: Dict[Anchor, int] = {
    Anchor.BOTTOM_LEFT: 1,
    Anchor.BOTTOM_CENTER: 2,
    Anchor.BOTTOM_RIGHT: 3,
    Anchor.CENTER_LEFT: 4,
    Anchor.CENTER: 5,
    Anchor.CENTER_RIGHT: 6,
    Anchor.TOP_LEFT: 7,
    Anchor.TOP_CENTER: 8,
    Anchor.TOP_RIGHT: 9,
}

# Default vertical margin per alignment row (top, middle, bottom)
TOP_MARGIN_V = 250
MIDDLE_MARGIN_V = 0
BOTTOM_MARGIN_V = 150

# Semi-transparent black behind shadows
BACK_COLOR = "&H80000000"


def color_to_ass(color: str, alpha: int = 0) -> str:
    """Convert #RRGGBB to alpha-prefixed ASS &HAABBGGRR."""
    hex_rgb = color.lstrip("#")
    r, g, b = hex_rgb[0:2], hex_rgb[2:4], hex_rgb[4:6]
    return f"&H{alpha:02X}{b}{g}{r}".upper()


def alignment_code(position: Anchor) -> int:
    return ALIGNMENT_CODES[position]


def margin_v_for(style: CaptionStyle) -> int:
    """Vertical margin: explicit value, else larger near the top, smaller near the bottom."""
    if style.margin_v is not None:
        return style.margin_v
    code = alignment_code(style.position)
    if code >= 7:
        return TOP_MARGIN_V
    if code >= 4:
        return MIDDLE_MARGIN_V
    return BOTTOM_MARGIN_V


def format_style_line(style: CaptionStyle, encoding: str = "1") -> str:
    """Format a complete "Style: Default,..." line for the given style."""
    primary = color_to_ass(style.primary_color)
    fields = [
        "Default",
        style.font,
        str(style.font_size),
        primary,
        primary,
        color_to_ass(style.outline_color),
        BACK_COLOR,
        "1" if style.bold else "0",
        "1" if style.italic else "0",
        "0",  # Underline
        "0",  # StrikeOut
        "100",  # ScaleX
        "100",  # ScaleY
        "0",  # Spacing
        "0",  # Angle
        "1",  # BorderStyle: outline + drop shadow
        fmt_number(style.outline),
        fmt_number(style.shadow),
        str(alignment_code(style.position)),
        str(style.margin_l),
        str(style.margin_r),
        str(margin_v_for(style)),
        encoding,
    ]
    return "Style: " + ",".join(fields)


def find_default_style(script: str) -> Optional[re.Match]:
    return _DEFAULT_STYLE.search(script)


def apply_caption_style(script: str, style: CaptionStyle) -> str:
    """
    Replace the default style declaration of an ASS script.

    Only the first "Style: Default" line with the full field count is
    replaced, as a whole line. Scripts without one are returned unchanged.

    Args:
        script: ASS subtitle script text
        style: Style to apply

    Returns:
        Script with the styled line
    """
    match = find_default_style(script)
    if match is None:
        return script
    encoding = match.group(1).rsplit(",", 1)[-1].strip() or "1"
    line = format_style_line(style, encoding=encoding)
    return script[: match.start()] + line + script[match.end():]
