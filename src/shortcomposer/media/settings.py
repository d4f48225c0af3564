"""Composition and caption settings parsed from request payloads."""

import json
import logging
from typing import Any, Literal, Optional, Union, Annotated, TypeAlias

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PositiveFloat,
    StringConstraints,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import SettingsParseError
from ..core.types import Anchor, ClipMode, Effect, Transition

# Fixed output frame rate
FPS = 25

# Hex color pattern for validation
HexColor: TypeAlias = Annotated[str, StringConstraints(pattern=r"^#[0-9A-Fa-f]{6}$")]


class PayloadModel(BaseModel):
    """Settings model that can be loaded from an opaque request payload."""

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def parse_payload(cls, payload: Union[str, bytes, dict, None]):
        """
        Parse a settings payload strictly.

        Args:
            payload: JSON text, bytes, an already decoded dict, or None

        Returns:
            Settings instance (defaults for an empty payload)

        Raises:
            SettingsParseError: If the payload is not a valid settings object
        """
        return cls._validate(cls._decode(payload))

    @staticmethod
    def _decode(payload: Union[str, bytes, dict, None]) -> dict:
        if payload is None:
            return {}
        if isinstance(payload, (str, bytes)):
            if not payload.strip():
                return {}
            try:
                payload = json.loads(payload)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise SettingsParseError(f"Settings are not valid JSON: {e}")
        if not isinstance(payload, dict):
            raise SettingsParseError("Settings must be a JSON object")
        return payload

    @classmethod
    def _validate(cls, data: dict):
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            keys = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            raise SettingsParseError(f"Invalid settings: {e}", invalid_keys=keys)

    @classmethod
    def from_payload(
        cls,
        payload: Union[str, bytes, dict, None],
        logger: Optional[logging.Logger] = None,
    ):
        """
        Parse a payload leniently.

        Keys with invalid values are dropped and the rest is kept; a payload
        that cannot be decoded at all gives the defaults.
        """
        logger = logger or logging.getLogger(__name__)
        try:
            data = cls._decode(payload)
            return cls._validate(data)
        except SettingsParseError as e:
            if not e.invalid_keys:
                logger.warning(f"{e.message}; using default {cls.__name__}")
                return cls()
            invalid = e.invalid_keys

        logger.warning(f"Ignoring invalid {cls.__name__} keys: {', '.join(invalid)}")
        kept = {k: v for k, v in data.items() if k not in invalid}
        try:
            return cls._validate(kept)
        except SettingsParseError as e:
            logger.warning(f"{e.message}; using default {cls.__name__}")
            return cls()


class CompositionSettings(PayloadModel):
    """Options recognized by the video composition modes."""

    duration: Union[Literal["auto"], PositiveFloat] = "auto"
    effect: Effect = Effect.NONE
    vignette: bool = False
    zoom_intensity: float = Field(default=0.1, ge=0)
    width: int = Field(default=1080, gt=0)
    height: int = Field(default=1920, gt=0)
    outro_duration: float = Field(default=2.0, gt=0)
    mode: ClipMode = ClipMode.FIT
    transition: Transition = Transition.NONE
    transition_duration: float = Field(default=0.5, gt=0)

    @field_validator("width", "height")
    @classmethod
    def even_dimensions(cls, v: int) -> int:
        """yuv420p output needs even frame dimensions."""
        return max(2, v - v % 2)

    @property
    def fps(self) -> int:
        """Output frame rate (not configurable)."""
        return FPS

    @property
    def explicit_duration(self) -> Optional[float]:
        """Per-clip duration chosen by the user, or None in auto mode."""
        return None if self.duration == "auto" else float(self.duration)

    @property
    def has_transition(self) -> bool:
        return self.transition != Transition.NONE


class CaptionStyle(PayloadModel):
    """Style applied to the default caption style line."""

    font: str = "Arial"
    font_size: int = Field(default=72, gt=0)
    primary_color: HexColor = "#FFFFFF"
    outline_color: HexColor = "#000000"
    bold: bool = True
    italic: bool = False
    outline: float = Field(default=3.0, ge=0)
    shadow: float = Field(default=0.0, ge=0)
    position: Anchor = Anchor.BOTTOM_CENTER
    margin_v: Optional[int] = Field(default=None, ge=0)
    margin_l: int = Field(default=40, ge=0)
    margin_r: int = Field(default=40, ge=0)

    @field_validator("font")
    @classmethod
    def no_separators(cls, v: Any) -> str:
        """Commas would shift every following style field."""
        v = str(v).strip()
        if not v or "," in v or "\n" in v:
            raise ValueError("font name must be non-empty and contain no commas")
        return v
