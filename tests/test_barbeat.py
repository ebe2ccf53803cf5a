from __future__ import annotations

import pytest

from ArrangementMCP_Server.engine import barbeat
from ArrangementMCP_Server.engine.errors import FormatError, ValidationError


def test_positions_are_one_based() -> None:
    assert barbeat.position_to_beats("1|1", 4, 4) == 0.0
    assert barbeat.position_to_beats("2|1", 4, 4) == 4.0
    assert barbeat.position_to_beats("3|2.5", 4, 4) == 9.5


def test_durations_are_zero_based() -> None:
    assert barbeat.duration_to_beats("1:0", 4, 4) == 4.0
    assert barbeat.duration_to_beats("0:1", 4, 4) == 1.0
    assert barbeat.duration_to_beats("4:0.0", 4, 4) == 16.0
    assert barbeat.duration_to_beats("2.5", 4, 4) == 2.5


def test_fractions_and_mixed_numbers() -> None:
    assert barbeat.duration_to_beats("0:1/2", 4, 4) == pytest.approx(0.5)
    assert barbeat.position_to_beats("1|1+1/3", 4, 4) == pytest.approx(1 / 3)
    assert barbeat.parse_beat_value("4/3") == pytest.approx(4 / 3)


def test_denominator_scales_to_quarter_notes() -> None:
    # one bar of 6/8 is six eighths, i.e. three quarter-note beats
    assert barbeat.duration_to_beats("1:0", 6, 8) == 3.0
    assert barbeat.position_to_beats("2|1", 6, 8) == 3.0
    assert barbeat.position_to_beats("2|1", 3, 4) == 3.0
    assert barbeat.duration_to_beats("1:0", 2, 2) == 4.0


@pytest.mark.parametrize("text", ["1:0", "abc", "0|1", "1|0", "1|", "|1", ""])
def test_invalid_positions(text: str) -> None:
    with pytest.raises(FormatError):
        barbeat.position_to_beats(text, 4, 4)


@pytest.mark.parametrize("text", ["1|1", "x:1", "1:", "-1:0", "1:1/0"])
def test_invalid_durations(text: str) -> None:
    with pytest.raises(FormatError):
        barbeat.duration_to_beats(text, 4, 4)


def test_format_error_is_a_validation_error() -> None:
    with pytest.raises(ValidationError):
        barbeat.duration_to_beats("nonsense", 4, 4)
    with pytest.raises(ValueError):
        barbeat.duration_to_beats("nonsense", 4, 4)


def test_bad_time_signature() -> None:
    with pytest.raises(FormatError):
        barbeat.position_to_beats("1|1", 4, 3)
    with pytest.raises(FormatError):
        barbeat.position_to_beats("1|1", 0, 4)


def test_to_beats_dispatches_on_separator() -> None:
    assert barbeat.to_beats("2|1", 4, 4) == 4.0
    assert barbeat.to_beats("2:0", 4, 4) == 8.0


def test_to_text_round_trips() -> None:
    for beats in (0.0, 1.0, 4.0, 9.5, 13.25, 1 / 3, 17 + 2 / 3):
        text = barbeat.to_text(beats, 4, 4)
        assert barbeat.to_beats(text, 4, 4) == pytest.approx(beats, abs=1e-6)
    assert barbeat.to_text(9.5, 4, 4) == "3|2.5"
    assert barbeat.to_text(3.0, 6, 8) == "2|1"


def test_beats_to_duration() -> None:
    assert barbeat.beats_to_duration(16.0, 4, 4) == "4:0"
    assert barbeat.beats_to_duration(5.5, 4, 4) == "1:1.5"
    assert barbeat.beats_to_duration(3.9999999999, 4, 4) == "1:0"


def test_parse_positions_sorts_and_dedupes() -> None:
    assert barbeat.parse_positions("3|3, 2|1, 2|1", 4, 4) == [4.0, 10.0]


def test_parse_positions_rejects_bad_entries() -> None:
    with pytest.raises(FormatError, match="Invalid split format"):
        barbeat.parse_positions("2|1, nope", 4, 4)
    with pytest.raises(FormatError):
        barbeat.parse_positions("   ", 4, 4)
