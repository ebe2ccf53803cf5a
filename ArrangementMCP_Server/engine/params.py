"""Caller-facing parameters for transform_clips.

Fields are snake_case; camelCase aliases (``clipIds``, ``gainDbMin``...)
are accepted too, so payloads from JS-style agents validate unchanged.
"""

from typing import Any, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ArrangementMCP_Server.engine.errors import ValidationError

SEED_MIN = -(2 ** 31)
SEED_MAX = 2 ** 32 - 1

# (min field, max field) pairs that must be given together
_PAIRS: Tuple[Tuple[str, str], ...] = (
    ("velocity_min", "velocity_max"),
    ("transpose_min", "transpose_max"),
    ("gain_db_min", "gain_db_max"),
    ("duration_min", "duration_max"),
)


class TransformParams(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    clip_ids: Optional[str] = None
    arrangement_track_index: Optional[int] = None
    arrangement_start: Optional[str] = None
    arrangement_length: Optional[str] = None

    velocity_min: Optional[float] = Field(default=None, ge=-127, le=127)
    velocity_max: Optional[float] = Field(default=None, ge=-127, le=127)
    velocity_range: Optional[float] = Field(default=None, ge=-127, le=127)
    probability: Optional[float] = Field(default=None, ge=-1, le=1)
    gain_db_min: Optional[float] = Field(default=None, ge=-70, le=24)
    gain_db_max: Optional[float] = Field(default=None, ge=-70, le=24)
    transpose_min: Optional[float] = Field(default=None, ge=-128, le=128)
    transpose_max: Optional[float] = Field(default=None, ge=-128, le=128)
    transpose_values: Optional[str] = None
    duration_min: Optional[float] = Field(default=None, gt=0, le=16)
    duration_max: Optional[float] = Field(default=None, gt=0, le=16)

    slice: Optional[str] = None
    split: Optional[str] = None
    shuffle_order: bool = False
    seed: Optional[int] = Field(default=None, ge=SEED_MIN, le=SEED_MAX)

    @model_validator(mode="after")
    def _check_target_and_pairs(self) -> "TransformParams":
        has_ids = self.clip_ids is not None and self.clip_ids.strip() != ""
        if not has_ids and self.arrangement_track_index is None:
            raise ValueError("clipIds or arrangementTrackIndex is required")
        for low_name, high_name in _PAIRS:
            low = getattr(self, low_name)
            high = getattr(self, high_name)
            if low_name == "transpose_min" and self.transpose_values is not None:
                # the discrete list wins; the range is reported and ignored
                continue
            if (low is None) != (high is None):
                raise ValueError(
                    f"{to_camel(low_name)} and {to_camel(high_name)} must be provided together"
                )
            if low is not None and low > high:
                raise ValueError(
                    f"{to_camel(low_name)} ({low}) must not be greater than {to_camel(high_name)} ({high})"
                )
        return self

    @property
    def has_midi_modifications(self) -> bool:
        return any(v is not None for v in (
            self.velocity_min, self.velocity_range, self.probability, self.duration_min,
        ))

    @property
    def has_audio_modifications(self) -> bool:
        return self.gain_db_min is not None

    @property
    def has_transpose(self) -> bool:
        return self.transpose_values is not None or self.transpose_min is not None

    @property
    def has_modifications(self) -> bool:
        return self.has_midi_modifications or self.has_audio_modifications or self.has_transpose


def _describe(errors: List[dict]) -> str:
    parts = []
    for err in errors:
        msg = err.get("msg", "")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


def parse_params(raw: Union[TransformParams, Mapping[str, Any]]) -> TransformParams:
    """Validate caller parameters, raising the engine's ValidationError."""
    if isinstance(raw, TransformParams):
        return raw
    try:
        return TransformParams.model_validate(dict(raw))
    except PydanticValidationError as e:
        raise ValidationError(_describe(e.errors())) from None
