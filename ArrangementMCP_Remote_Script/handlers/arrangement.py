"""Arrangement: list, duplicate, create and delete arrangement clips."""

import os
import struct
import tempfile
import wave

from ._helpers import clip_at, clip_info, get_track, track_kind

SILENCE_SAMPLE_RATE = 44100


def get_arrangement_clips(song, registry, track_index, ctrl=None):
    """Get all clips in arrangement view for a track."""
    try:
        track = get_track(song, track_index)
        if not hasattr(track, "arrangement_clips"):
            raise ValueError(
                "Track does not have arrangement clips "
                "(may be a group track or return track)"
            )
        clips = [clip_info(registry, track_index, clip) for clip in track.arrangement_clips]
        clips.sort(key=lambda c: c["start_time"])
        return {
            "track_index": track_index,
            "track_name": track.name,
            "clip_count": len(clips),
            "clips": clips,
        }
    except Exception as e:
        if ctrl:
            ctrl.log_message("Error getting arrangement clips: " + str(e))
        raise


def duplicate_clip_to_arrangement(song, registry, clip_id, time, ctrl=None):
    """Copy a clip to a position on its own track's arrangement."""
    try:
        track_index, track, clip, _ = registry.locate(song, clip_id)
        if not hasattr(track, "duplicate_clip_to_arrangement"):
            raise ValueError("duplicate_clip_to_arrangement requires Live 11 or later")

        time = max(0.0, float(time))
        new_clip = track.duplicate_clip_to_arrangement(clip, time)
        if new_clip is None:
            new_clip = clip_at(track, time, exclude=(clip,))
        if new_clip is None:
            raise RuntimeError("Duplicated clip not found at {0}".format(time))
        return clip_info(registry, track_index, new_clip)
    except Exception as e:
        if ctrl:
            ctrl.log_message("Error duplicating clip to arrangement: " + str(e))
        raise


def _silence_file(seconds):
    """Path to a mono 16-bit WAV of silence lasting ``seconds``."""
    frames = max(1, int(round(seconds * SILENCE_SAMPLE_RATE)))
    folder = os.path.join(tempfile.gettempdir(), "ArrangementMCP")
    if not os.path.isdir(folder):
        os.makedirs(folder)
    path = os.path.join(folder, "silence_{0}.wav".format(frames))
    if not os.path.exists(path):
        writer = wave.open(path, "wb")
        try:
            writer.setnchannels(1)
            writer.setsampwidth(2)
            writer.setframerate(SILENCE_SAMPLE_RATE)
            writer.writeframes(struct.pack("<h", 0) * frames)
        finally:
            writer.close()
    return path


def create_blank_clip(song, registry, track_index, kind, start, length, ctrl=None):
    """Create an empty arrangement clip, overwriting whatever lies in its range.

    Audio tracks cannot hold an empty clip, so a silent file of the
    requested length (at the current tempo) is placed instead.
    """
    try:
        track = get_track(song, track_index)
        start = float(start)
        length = float(length)
        if length <= 0:
            raise ValueError("length must be greater than 0, got {0}".format(length))
        if kind != track_kind(track):
            raise ValueError("Cannot create a {0} clip on a {1} track".format(kind, track_kind(track)))

        if kind == "midi":
            new_clip = track.create_midi_clip(start, length)
        else:
            seconds = length * 60.0 / song.tempo
            new_clip = track.create_audio_clip(_silence_file(seconds), start)
        if new_clip is None:
            new_clip = clip_at(track, start)
        if new_clip is None:
            raise RuntimeError("Created clip not found at {0}".format(start))
        return clip_info(registry, track_index, new_clip)
    except Exception as e:
        if ctrl:
            ctrl.log_message("Error creating blank clip: " + str(e))
        raise


def delete_clip(song, registry, clip_id, ctrl=None):
    """Delete an arrangement or session clip."""
    try:
        track_index, track, clip, is_arrangement = registry.locate(song, clip_id)
        if is_arrangement:
            track.delete_clip(clip)
        else:
            for slot in track.clip_slots:
                if slot.has_clip and slot.clip == clip:
                    slot.delete_clip()
                    break
        registry.forget(clip_id)
        return {"deleted": True, "clip_id": str(clip_id), "track_index": track_index}
    except Exception as e:
        if ctrl:
            ctrl.log_message("Error deleting clip: " + str(e))
        raise
