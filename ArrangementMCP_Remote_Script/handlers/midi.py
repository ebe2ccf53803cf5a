"""MIDI notes: read and modify notes in place, addressed by note id."""

_NOTE_FIELDS = ("pitch", "start_time", "duration", "velocity",
                "velocity_deviation", "probability", "mute")


def _get_midi_clip(song, registry, clip_id):
    """Get a MIDI clip by id with validation."""
    _, _, clip, _ = registry.locate(song, clip_id)
    if not getattr(clip, "is_midi_clip", False):
        raise ValueError("Clip {0} is not a MIDI clip".format(clip_id))
    return clip


def _note_range(clip):
    """(from_time, time_span) covering every note the clip can hold."""
    from_time = min(0.0, clip.start_marker, clip.loop_start)
    to_time = max(clip.end_marker, clip.loop_end, clip.length)
    return from_time, to_time - from_time + 1


def _raw_notes(clip):
    from_time, time_span = _note_range(clip)
    return clip.get_notes_extended(0, 128, from_time, time_span)


def get_notes(song, registry, clip_id, ctrl=None):
    """Get all notes of a clip with their ids and extended properties."""
    try:
        clip = _get_midi_clip(song, registry, clip_id)
        notes = []
        for note in _raw_notes(clip):
            notes.append({
                "note_id": note.note_id,
                "pitch": note.pitch,
                "start_time": note.start_time,
                "duration": note.duration,
                "velocity": note.velocity,
                "velocity_deviation": note.velocity_deviation,
                "probability": note.probability,
                "mute": note.mute,
            })
        return {"clip_id": str(clip_id), "note_count": len(notes), "notes": notes}
    except Exception as e:
        if ctrl:
            ctrl.log_message("Error getting notes: " + str(e))
        raise


def apply_note_modifications(song, registry, clip_id, notes, ctrl=None):
    """Write changed note properties back in a single batch.

    Notes are matched by ``note_id``; notes not listed are left as they are.
    """
    try:
        clip = _get_midi_clip(song, registry, clip_id)
        by_id = {}
        for note in notes:
            by_id[int(note["note_id"])] = note

        raw_notes = _raw_notes(clip)
        modified = 0
        for note in raw_notes:
            changes = by_id.get(note.note_id)
            if changes is None:
                continue
            for field in _NOTE_FIELDS:
                if field in changes:
                    setattr(note, field, changes[field])
            modified += 1
        if modified:
            clip.apply_note_modifications(raw_notes)
        return {"clip_id": str(clip_id), "modified": modified}
    except Exception as e:
        if ctrl:
            ctrl.log_message("Error applying note modifications: " + str(e))
        raise
