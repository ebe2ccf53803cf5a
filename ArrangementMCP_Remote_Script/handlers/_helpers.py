"""Shared lookups used by all handler modules.

Clips are addressed by string ids handed out by :class:`ClipRegistry`.
The registry keeps the Live clip object only as an identity to compare
against; every lookup walks the song again, so a clip deleted or replaced
by Live is reported as missing instead of being used through a dead handle.
"""


class ClipNotFoundError(LookupError):
    """The id does not refer to a clip that currently exists."""


def get_track(song, track_index):
    """Get track by index with bounds validation.

    Raises:
        IndexError: If track_index is out of range.
    """
    if track_index < 0 or track_index >= len(song.tracks):
        raise IndexError("Track index out of range")
    return song.tracks[track_index]


def track_kind(track):
    return "midi" if getattr(track, "has_midi_input", False) else "audio"


def clip_kind(clip):
    return "midi" if getattr(clip, "is_midi_clip", False) else "audio"


class ClipRegistry(object):
    """Stable string ids for Live clips."""

    def __init__(self):
        self._clips = {}
        self._next_id = 1

    def id_for(self, clip):
        for clip_id, known in self._clips.items():
            if known == clip:
                return clip_id
        clip_id = str(self._next_id)
        self._next_id += 1
        self._clips[clip_id] = clip
        return clip_id

    def forget(self, clip_id):
        self._clips.pop(str(clip_id), None)

    def prune(self, song):
        """Drop ids whose clips are no longer in the song.

        Live overwrites clips that a placement overlaps, so entries go stale
        without a delete_clip command.
        """
        live = []
        for track in song.tracks:
            live.extend(getattr(track, "arrangement_clips", ()))
            live.extend(slot.clip for slot in track.clip_slots if slot.has_clip)
        stale = [clip_id for clip_id, known in self._clips.items()
                 if not any(known == clip for clip in live)]
        for clip_id in stale:
            del self._clips[clip_id]
        return len(stale)

    def locate(self, song, clip_id):
        """Find a registered clip in the song.

        Returns:
            (track_index, track, clip, is_arrangement_clip) tuple.

        Raises:
            ClipNotFoundError: If the id is unknown or the clip is gone.
        """
        clip_id = str(clip_id)
        known = self._clips.get(clip_id)
        if known is None:
            raise ClipNotFoundError("Clip {0} not found".format(clip_id))
        for track_index, track in enumerate(song.tracks):
            for clip in getattr(track, "arrangement_clips", ()):
                if clip == known:
                    return track_index, track, clip, True
            for slot in track.clip_slots:
                if slot.has_clip and slot.clip == known:
                    return track_index, track, slot.clip, False
        self.prune(song)
        raise ClipNotFoundError("Clip {0} no longer exists".format(clip_id))


def clip_at(track, time, exclude=()):
    """The arrangement clip on ``track`` starting at ``time``, if any."""
    for clip in track.arrangement_clips:
        if abs(clip.start_time - time) < 1e-6 and not any(clip == other for other in exclude):
            return clip
    return None


def clip_info(registry, track_index, clip, is_arrangement_clip=True):
    """Snapshot of the clip properties the transform engine works with."""
    is_audio = clip_kind(clip) == "audio"
    if is_arrangement_clip:
        start_time, end_time = clip.start_time, clip.end_time
    else:
        start_time, end_time = 0.0, clip.length
    return {
        "clip_id": registry.id_for(clip),
        "track_index": track_index,
        "kind": clip_kind(clip),
        "name": clip.name,
        "is_arrangement_clip": is_arrangement_clip,
        "start_time": start_time,
        "end_time": end_time,
        "looping": bool(clip.looping),
        "loop_start": clip.loop_start,
        "loop_end": clip.loop_end,
        "start_marker": clip.start_marker,
        "end_marker": clip.end_marker,
        "warping": bool(clip.warping) if is_audio else None,
        "gain": clip.gain if is_audio else None,
        "pitch_coarse": clip.pitch_coarse if is_audio else None,
        "pitch_fine": clip.pitch_fine if is_audio else None,
    }
