from __future__ import annotations

from ArrangementMCP_Remote_Script import dispatch
from ArrangementMCP_Remote_Script.handlers._helpers import ClipRegistry

from tests.fake_live import FakeNote, FakeSong


class RecordingControl:
    def __init__(self) -> None:
        self.messages = []

    def log_message(self, message: str) -> None:
        self.messages.append(message)


def _run(song, registry, command_type, ctrl=None, **params):
    return dispatch.process_command(song, registry, {"type": command_type, "params": params}, ctrl)


def test_song_and_track_info() -> None:
    song = FakeSong(3, 4, tempo=96.0)
    track = song.add_track("Bass")
    track.add_clip(4.0, 4.0)
    track.add_clip(0.0, 4.0)
    registry = ClipRegistry()

    info = _run(song, registry, "get_song_info")["result"]
    assert info == {"signature_numerator": 3, "signature_denominator": 4,
                    "tempo": 96.0, "track_count": 1}

    track_info = _run(song, registry, "get_track_info", track_index=0)["result"]
    assert track_info["kind"] == "midi"
    assert track_info["name"] == "Bass"
    assert len(track_info["arrangement_clip_ids"]) == 2


def test_registry_ids_are_stable() -> None:
    song = FakeSong()
    clip = song.add_track().add_clip(0.0, 4.0)
    registry = ClipRegistry()
    assert registry.id_for(clip) == "1"
    assert registry.id_for(clip) == "1"
    info = _run(song, registry, "get_clip_info", clip_id="1")["result"]
    assert info["clip_id"] == "1"
    assert info["warping"] is None


def test_missing_clip_is_not_found() -> None:
    song = FakeSong()
    song.add_track()
    ctrl = RecordingControl()
    response = _run(song, ClipRegistry(), "get_clip_info", ctrl, clip_id="42")
    assert response == {"status": "error", "message": "Clip 42 not found", "error_type": "not_found"}
    assert ctrl.messages


def test_deleted_clip_is_reported_gone() -> None:
    song = FakeSong()
    track = song.add_track()
    clip = track.add_clip(0.0, 4.0)
    registry = ClipRegistry()
    clip_id = registry.id_for(clip)
    track.delete_clip(clip)
    response = _run(song, registry, "get_clip_info", clip_id=clip_id)
    assert response["error_type"] == "not_found"
    assert "no longer exists" in response["message"]


def test_overwritten_clips_leave_the_registry() -> None:
    song = FakeSong()
    track = song.add_track()
    first = track.add_clip(0.0, 4.0)
    second = track.add_clip(4.0, 4.0)
    registry = ClipRegistry()
    first_id = registry.id_for(first)
    second_id = registry.id_for(second)

    response = _run(song, registry, "duplicate_clip_to_arrangement", clip_id=first_id, time=4.0)
    assert response["status"] == "success"
    new_id = response["result"]["clip_id"]
    assert set(registry._clips) == {first_id, new_id}
    assert second_id not in registry._clips


def test_prune_drops_clips_removed_outside_commands() -> None:
    song = FakeSong()
    track = song.add_track()
    kept = track.add_clip(0.0, 4.0)
    removed = track.add_clip(8.0, 4.0)
    session = track.add_session_clip(0, 4.0)
    registry = ClipRegistry()
    ids = [registry.id_for(clip) for clip in (kept, removed, session)]
    track.delete_clip(removed)

    response = _run(song, registry, "get_clip_info", clip_id=ids[1])
    assert response["error_type"] == "not_found"
    assert set(registry._clips) == {ids[0], ids[2]}
    assert registry.prune(song) == 0


def test_rejected_marker_is_invalid() -> None:
    song = FakeSong()
    clip = song.add_track().add_clip(0.0, 4.0)
    registry = ClipRegistry()
    response = _run(song, registry, "set_clip_property",
                    clip_id=registry.id_for(clip), name="start_marker", value=8.0)
    assert response["status"] == "error"
    assert response["error_type"] == "invalid"
    assert response["message"].startswith("Cannot set start_marker")


def test_unsupported_property_and_audio_only_property() -> None:
    song = FakeSong()
    clip = song.add_track().add_clip(0.0, 4.0)
    registry = ClipRegistry()
    clip_id = registry.id_for(clip)
    assert _run(song, registry, "set_clip_property", clip_id=clip_id,
                name="color", value=3)["error_type"] == "invalid"
    response = _run(song, registry, "set_clip_property", clip_id=clip_id, name="gain", value=0.5)
    assert response["message"] == "gain can only be set on audio clips"


def test_missing_parameter_and_unknown_command() -> None:
    song = FakeSong()
    registry = ClipRegistry()
    response = _run(song, registry, "delete_clip")
    assert response["error_type"] == "invalid"
    assert response["message"] == "Missing required parameter: 'clip_id'"
    response = _run(song, registry, "explode")
    assert response["message"] == "Unknown command: explode"
    assert not dispatch.is_known_command("explode")


def test_create_blank_clip_checks_track_kind() -> None:
    song = FakeSong()
    song.add_track()
    response = _run(song, ClipRegistry(), "create_blank_clip",
                    track_index=0, kind="audio", start=0.0, length=4.0)
    assert response["error_type"] == "invalid"


def test_create_blank_audio_clip_matches_length_at_tempo() -> None:
    song = FakeSong(tempo=90.0)
    track = song.add_track("Audio", midi=False)
    registry = ClipRegistry()
    result = _run(song, registry, "create_blank_clip",
                  track_index=0, kind="audio", start=10.0, length=3.0)["result"]
    assert result["start_time"] == 10.0
    assert abs(result["end_time"] - 13.0) < 1e-3
    assert track.created[0][0] == "audio"


def test_duplicate_and_delete_session_clip() -> None:
    song = FakeSong()
    track = song.add_track()
    session_clip = track.add_session_clip(2, 6.0)
    registry = ClipRegistry()
    clip_id = registry.id_for(session_clip)

    info = _run(song, registry, "get_clip_info", clip_id=clip_id)["result"]
    assert info["is_arrangement_clip"] is False
    assert (info["start_time"], info["end_time"]) == (0.0, 6.0)

    copy = _run(song, registry, "duplicate_clip_to_arrangement", clip_id=clip_id, time=8.0)["result"]
    assert copy["is_arrangement_clip"] is True
    assert (copy["start_time"], copy["end_time"]) == (8.0, 14.0)

    assert _run(song, registry, "delete_clip", clip_id=clip_id)["result"]["deleted"] is True
    assert not track.clip_slots[2].has_clip


def test_notes_round_trip_by_id() -> None:
    song = FakeSong()
    clip = song.add_track().add_clip(0.0, 4.0, notes=[
        FakeNote(7, 60, 0.0, 1.0, velocity=90), FakeNote(8, 64, 1.0, 1.0, velocity=90),
    ])
    registry = ClipRegistry()
    clip_id = registry.id_for(clip)

    notes = _run(song, registry, "get_notes", clip_id=clip_id)["result"]["notes"]
    assert [n["note_id"] for n in notes] == [7, 8]

    result = _run(song, registry, "apply_note_modifications", clip_id=clip_id,
                  notes=[{"note_id": 8, "velocity": 30, "pitch": 65}])["result"]
    assert result["modified"] == 1
    assert [(n.pitch, n.velocity) for n in clip.notes] == [(60, 90), (65, 30)]
