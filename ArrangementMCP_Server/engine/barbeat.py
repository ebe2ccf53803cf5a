"""Bar|beat and bar:beat notation.

Positions use ``bar|beat`` and are 1-based (``1|1`` is the song or clip
start). Durations use ``bars:beats`` and are 0-based (``1:0`` is one bar).
Beat values may be integers, decimals (``2.5``), fractions (``4/3``) or
mixed numbers (``1+1/3``). Beats are counted in time-signature units and
converted to Live beats (quarter notes) with ``4 / denominator``.
"""

import math
import re
from typing import List

from ArrangementMCP_Server.engine.errors import FormatError

_BEAT_VALUE = r"\d+(?:\+\d+/\d+|\.\d+|/\d+)?|\.\d+"
_POSITION_RE = re.compile(rf"^(-?\d+)\|(-?(?:{_BEAT_VALUE}))$")
_DURATION_RE = re.compile(rf"^(\d+):({_BEAT_VALUE})$")
_BEATS_ONLY_RE = re.compile(rf"^({_BEAT_VALUE})$")

# to_text keeps this many decimals, so round trips hold within 1e-6
_TEXT_DECIMALS = 6


def _check_signature(numerator: int, denominator: int) -> None:
    if not isinstance(numerator, int) or numerator < 1:
        raise FormatError(f"time signature numerator must be a positive integer, got {numerator!r}")
    if denominator not in (1, 2, 4, 8, 16, 32):
        raise FormatError(f"time signature denominator must be a power of two, got {denominator!r}")


def parse_beat_value(text: str) -> float:
    """Parse an integer, decimal, fraction or mixed-number beat value."""
    text = text.strip()
    negative = text.startswith("-")
    body = text[1:] if negative else text
    try:
        if "+" in body:
            whole, frac = body.split("+", 1)
            num, den = frac.split("/", 1)
            value = int(whole) + _fraction(num, den, text)
        elif "/" in body:
            num, den = body.split("/", 1)
            value = _fraction(num, den, text)
        else:
            value = float(body)
    except ValueError:
        raise FormatError(f"Invalid beat value: '{text}'") from None
    return -value if negative else value


def _fraction(num: str, den: str, text: str) -> float:
    denominator = int(den)
    if denominator == 0:
        raise FormatError(f"Invalid beat value: '{text}' (division by zero)")
    return int(num) / denominator


def position_to_beats(text: str, numerator: int, denominator: int) -> float:
    """Convert ``bar|beat`` to beats from the start (``1|1`` -> 0)."""
    _check_signature(numerator, denominator)
    if not isinstance(text, str):
        raise FormatError(f"Position must be a string in bar|beat format, got {text!r}")
    match = _POSITION_RE.match(text.strip())
    if not match:
        raise FormatError(
            f"Invalid bar|beat position: '{text}'. Expected a format like '1|1' or '2|3.5'"
        )
    bar = int(match.group(1))
    beat = parse_beat_value(match.group(2))
    if bar < 1:
        raise FormatError(f"Bar number must be 1 or greater, got {bar} in '{text}'")
    if beat < 1:
        raise FormatError(f"Beat must be 1 or greater, got {match.group(2)} in '{text}'")
    musical_beats = (bar - 1) * numerator + (beat - 1)
    return musical_beats * 4.0 / denominator


def duration_to_beats(text: str, numerator: int, denominator: int) -> float:
    """Convert ``bars:beats`` (or a bare beat count) to a beat length."""
    _check_signature(numerator, denominator)
    if not isinstance(text, str):
        raise FormatError(f"Duration must be a string in bar:beat format, got {text!r}")
    stripped = text.strip()
    if "|" in stripped:
        raise FormatError(
            f"Invalid duration: '{text}'. Durations use ':' (bars:beats), not '|'"
        )
    match = _DURATION_RE.match(stripped)
    if match:
        bars = int(match.group(1))
        beats = parse_beat_value(match.group(2))
        return (bars * numerator + beats) * 4.0 / denominator
    match = _BEATS_ONLY_RE.match(stripped)
    if match:
        return parse_beat_value(match.group(1)) * 4.0 / denominator
    raise FormatError(
        f"Invalid duration: '{text}'. Expected bars:beats like '1:0' or a beat count like '2.5'"
    )


def to_beats(text: str, numerator: int, denominator: int) -> float:
    """Convert any supported notation to beats.

    ``bar|beat`` is read as a position, ``bars:beats`` and bare numbers as
    durations.
    """
    if isinstance(text, str) and "|" in text:
        return position_to_beats(text, numerator, denominator)
    return duration_to_beats(text, numerator, denominator)


def _format_number(value: float) -> str:
    rounded = round(value, _TEXT_DECIMALS)
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:.{_TEXT_DECIMALS}f}".rstrip("0").rstrip(".")


def _split_bars(beats: float, numerator: int, denominator: int):
    musical_beats = round(beats * denominator / 4.0, _TEXT_DECIMALS + 3)
    bars = math.floor(musical_beats / numerator)
    remainder = musical_beats - bars * numerator
    if remainder >= numerator - 10 ** -(_TEXT_DECIMALS + 1):
        # float noise just below the next bar line
        bars += 1
        remainder = 0.0
    return bars, remainder


def beats_to_position(beats: float, numerator: int, denominator: int) -> str:
    """Convert beats from the start to ``bar|beat``."""
    _check_signature(numerator, denominator)
    if beats < 0:
        raise FormatError(f"Cannot express negative position {beats} in bar|beat notation")
    bars, remainder = _split_bars(beats, numerator, denominator)
    return f"{bars + 1}|{_format_number(remainder + 1)}"


def beats_to_duration(beats: float, numerator: int, denominator: int) -> str:
    """Convert a beat length to ``bars:beats``."""
    _check_signature(numerator, denominator)
    if beats < 0:
        raise FormatError(f"Cannot express negative duration {beats} in bar:beat notation")
    bars, remainder = _split_bars(beats, numerator, denominator)
    return f"{bars}:{_format_number(remainder)}"


def to_text(beats: float, numerator: int, denominator: int) -> str:
    """Inverse of :func:`to_beats` for positions."""
    return beats_to_position(beats, numerator, denominator)


def parse_positions(text: str, numerator: int, denominator: int) -> List[float]:
    """Parse comma-separated ``bar|beat`` positions into sorted, unique beats."""
    if not isinstance(text, str) or not text.strip():
        raise FormatError(
            'Invalid split format: expected comma-separated bar|beat positions like "2|1, 3|1"'
        )
    points = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            points.append(position_to_beats(part, numerator, denominator))
        except FormatError as e:
            raise FormatError(
                f'Invalid split format: {e}. Expected comma-separated bar|beat positions like "2|1, 3|1"'
            ) from None
    unique = []
    for point in sorted(points):
        if not unique or abs(point - unique[-1]) > 1e-9:
            unique.append(point)
    return unique
