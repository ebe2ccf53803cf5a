"""Session: song-level settings and track lookup."""

from ._helpers import get_track, track_kind


def get_song_info(song, ctrl=None):
    """Get time signature, tempo and track count."""
    try:
        return {
            "signature_numerator": song.signature_numerator,
            "signature_denominator": song.signature_denominator,
            "tempo": song.tempo,
            "track_count": len(song.tracks),
        }
    except Exception as e:
        if ctrl:
            ctrl.log_message("Error getting song info: " + str(e))
        raise


def get_track_info(song, registry, track_index, ctrl=None):
    """Get a track's name, kind and arrangement clip ids."""
    try:
        track = get_track(song, track_index)
        clips = sorted(getattr(track, "arrangement_clips", ()), key=lambda c: c.start_time)
        return {
            "track_index": track_index,
            "name": track.name,
            "kind": track_kind(track),
            "arrangement_clip_ids": [registry.id_for(clip) for clip in clips],
        }
    except Exception as e:
        if ctrl:
            ctrl.log_message("Error getting track info: " + str(e))
        raise
