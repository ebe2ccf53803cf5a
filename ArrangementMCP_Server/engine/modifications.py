"""Seeded note and clip-property randomization.

Draw order is fixed so a seed always reproduces the same result: clips in
working-set order, notes by ascending note id, and per note velocity,
transpose, then duration. Audio clips draw gain, then transpose. Gain offsets
are applied in dB and mapped back onto Live's 0..1 gain through a
breakpoint table.
"""

import logging
import math
from bisect import bisect_right
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ArrangementMCP_Server.engine.errors import ValidationError
from ArrangementMCP_Server.engine.host import ClipInfo, Host, NoteInfo
from ArrangementMCP_Server.engine.notices import WarningLog
from ArrangementMCP_Server.engine.params import TransformParams
from ArrangementMCP_Server.engine.seeded import SeededRandom

logger = logging.getLogger("ArrangementMCP.modifications")

VELOCITY_MIN, VELOCITY_MAX = 1, 127
PITCH_MIN, PITCH_MAX = 0, 127
DEVIATION_MIN, DEVIATION_MAX = -127.0, 127.0
GAIN_MIN, GAIN_MAX = 0.0, 1.0
GAIN_DB_MIN, GAIN_DB_MAX = -70.0, 24.0
UNITY_GAIN = 0.4
# (live gain, dB) breakpoints, both columns strictly increasing
_GAIN_TABLE = (
    (0.0, -70.0), (0.05, -48.0), (0.1, -36.0), (0.2, -18.0), (0.3, -7.0),
    (0.4, 0.0), (0.55, 6.0), (0.7, 12.0), (0.85, 18.0), (1.0, 24.0),
)
_GAIN_POINTS = tuple(point for point, _ in _GAIN_TABLE)
_GAIN_DBS = tuple(db for _, db in _GAIN_TABLE)
PITCH_COARSE_MIN, PITCH_COARSE_MAX = -48, 48
PITCH_FINE_MIN, PITCH_FINE_MAX = -50, 49
MIN_NOTE_DURATION = 0.001


def _clamp(value, low, high):
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_transpose_values(text: str) -> List[float]:
    values = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            value = float(part)
        except ValueError:
            continue
        if math.isfinite(value):
            values.append(value)
    if not values:
        raise ValidationError("transposeValues must contain at least one valid number")
    return values


@dataclass(frozen=True)
class ModificationPlan:
    velocity: Optional[Tuple[float, float]] = None
    velocity_range: Optional[float] = None
    probability: Optional[float] = None
    duration: Optional[Tuple[float, float]] = None
    transpose: Optional[Tuple[float, float]] = None
    transpose_values: Optional[Tuple[float, ...]] = None
    gain_db: Optional[Tuple[float, float]] = None

    @classmethod
    def from_params(cls, params: TransformParams, warnings: WarningLog) -> "ModificationPlan":
        transpose = None
        transpose_values = None
        if params.transpose_values is not None:
            transpose_values = tuple(parse_transpose_values(params.transpose_values))
            if params.transpose_min is not None or params.transpose_max is not None:
                warnings.warn("transposeValues ignores transposeMin/transposeMax",
                              key="transpose-conflict")
        elif params.transpose_min is not None:
            transpose = (params.transpose_min, params.transpose_max)
        return cls(
            velocity=_pair(params.velocity_min, params.velocity_max),
            velocity_range=params.velocity_range,
            probability=params.probability,
            duration=_pair(params.duration_min, params.duration_max),
            transpose=transpose,
            transpose_values=transpose_values,
            gain_db=_pair(params.gain_db_min, params.gain_db_max),
        )

    @property
    def has_transpose(self) -> bool:
        return self.transpose is not None or self.transpose_values is not None

    @property
    def has_midi_only(self) -> bool:
        return any(v is not None for v in (
            self.velocity, self.velocity_range, self.probability, self.duration,
        ))

    @property
    def has_audio_only(self) -> bool:
        return self.gain_db is not None

    @property
    def is_empty(self) -> bool:
        return not (self.has_midi_only or self.has_audio_only or self.has_transpose)


def _pair(low, high):
    if low is None or high is None:
        return None
    return (low, high)


def _draw_transpose(plan: ModificationPlan, rng: SeededRandom, whole: bool) -> float:
    if plan.transpose_values is not None:
        offset = rng.pick(plan.transpose_values)
    else:
        offset = rng.range(*plan.transpose)
    return float(round_half_up(offset)) if whole else offset


def modify_notes(notes: List[NoteInfo], plan: ModificationPlan, rng: SeededRandom) -> List[NoteInfo]:
    """Apply the plan to ``notes`` in place, in note-id order. Returns them sorted."""
    ordered = sorted(notes, key=lambda n: n.note_id)
    for note in ordered:
        if plan.velocity is not None:
            offset = round_half_up(rng.range(*plan.velocity))
            note.velocity = _clamp(note.velocity + offset, VELOCITY_MIN, VELOCITY_MAX)
        if plan.has_transpose:
            offset = int(_draw_transpose(plan, rng, whole=True))
            note.pitch = _clamp(note.pitch + offset, PITCH_MIN, PITCH_MAX)
        if plan.duration is not None:
            factor = rng.range(*plan.duration)
            note.duration = max(MIN_NOTE_DURATION, note.duration * factor)
        if plan.velocity_range is not None:
            note.velocity_deviation = _clamp(
                note.velocity_deviation + plan.velocity_range, DEVIATION_MIN, DEVIATION_MAX
            )
        if plan.probability is not None:
            note.probability = _clamp(note.probability + plan.probability, 0.0, 1.0)
    return ordered


def _modify_midi_clip(host: Host, clip: ClipInfo, plan: ModificationPlan,
                      rng: SeededRandom, warnings: WarningLog) -> None:
    if plan.has_audio_only:
        warnings.warn("audio parameters ignored for MIDI clips", key="audio-on-midi")
    if not (plan.has_midi_only or plan.has_transpose):
        return
    notes = host.get_notes(clip.clip_id)
    if not notes:
        logger.debug("Clip %s has no notes, nothing to modify", clip.clip_id)
        return
    modified = modify_notes(notes, plan, rng)
    host.apply_note_modifications(clip.clip_id, modified)
    logger.info("Modified %d note(s) in clip %s", len(modified), clip.clip_id)


def _interpolate(value: float, xs: Tuple[float, ...], ys: Tuple[float, ...]) -> float:
    index = _clamp(bisect_right(xs, value), 1, len(xs) - 1)
    x0, x1 = xs[index - 1], xs[index]
    y0, y1 = ys[index - 1], ys[index]
    return y0 + (value - x0) * (y1 - y0) / (x1 - x0)


def live_gain_to_db(gain: float) -> float:
    """Map Live's 0..1 clip gain onto dB; 0.4 is unity."""
    return _interpolate(_clamp(gain, GAIN_MIN, GAIN_MAX), _GAIN_POINTS, _GAIN_DBS)


def db_to_live_gain(db: float) -> float:
    return _interpolate(_clamp(db, GAIN_DB_MIN, GAIN_DB_MAX), _GAIN_DBS, _GAIN_POINTS)


def gain_with_db_offset(gain: float, db: float) -> float:
    return db_to_live_gain(live_gain_to_db(gain) + db)


def split_pitch(semitones: float) -> Tuple[int, int]:
    """Split a fractional transposition into Live's coarse/fine pair."""
    coarse = _clamp(round_half_up(semitones), PITCH_COARSE_MIN, PITCH_COARSE_MAX)
    fine = _clamp(round_half_up((semitones - coarse) * 100), PITCH_FINE_MIN, PITCH_FINE_MAX)
    return coarse, fine


def _modify_audio_clip(host: Host, clip: ClipInfo, plan: ModificationPlan,
                       rng: SeededRandom, warnings: WarningLog) -> None:
    if plan.has_midi_only:
        warnings.warn("MIDI parameters ignored for audio clips", key="midi-on-audio")
    if plan.gain_db is not None:
        db = rng.range(*plan.gain_db)
        gain = gain_with_db_offset(clip.gain if clip.gain is not None else UNITY_GAIN, db)
        host.set_clip_property(clip.clip_id, "gain", gain)
        logger.info("Clip %s gain %+.2f dB -> %.4f", clip.clip_id, db, gain)
    if plan.has_transpose:
        offset = _draw_transpose(plan, rng, whole=False)
        current = (clip.pitch_coarse or 0) + (clip.pitch_fine or 0) / 100.0
        coarse, fine = split_pitch(current + offset)
        host.set_clip_property(clip.clip_id, "pitch_coarse", coarse)
        host.set_clip_property(clip.clip_id, "pitch_fine", fine)
        logger.info("Clip %s pitch %+.2f st -> %d st %d ct", clip.clip_id, offset, coarse, fine)


def apply_modifications(host: Host, clip_ids: List[str], plan: ModificationPlan,
                        rng: SeededRandom, warnings: WarningLog) -> None:
    """Randomize notes or clip properties of every clip in ``clip_ids``."""
    if plan.is_empty:
        return
    for clip_id in clip_ids:
        clip = host.get_clip(clip_id)
        if clip.is_midi:
            _modify_midi_clip(host, clip, plan, rng, warnings)
        else:
            _modify_audio_clip(host, clip, plan, rng, warnings)
