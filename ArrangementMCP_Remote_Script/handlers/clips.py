"""Clip properties: read a snapshot, set one property at a time."""

from ._helpers import clip_info, clip_kind

# name -> (converter, audio_only)
_SETTABLE_PROPERTIES = {
    "name": (str, False),
    "looping": (bool, False),
    "loop_start": (float, False),
    "loop_end": (float, False),
    "start_marker": (float, False),
    "end_marker": (float, False),
    "warping": (bool, True),
    "gain": (float, True),
    "pitch_coarse": (int, True),
    "pitch_fine": (float, True),
}


def get_clip_info(song, registry, clip_id, ctrl=None):
    """Get the properties of a clip by id."""
    try:
        track_index, _, clip, is_arrangement = registry.locate(song, clip_id)
        return clip_info(registry, track_index, clip, is_arrangement)
    except Exception as e:
        if ctrl:
            ctrl.log_message("Error getting clip info: " + str(e))
        raise


def set_clip_property(song, registry, clip_id, name, value, ctrl=None):
    """Set a single whitelisted clip property."""
    try:
        if name not in _SETTABLE_PROPERTIES:
            raise ValueError("Unsupported clip property: {0}".format(name))
        convert, audio_only = _SETTABLE_PROPERTIES[name]
        track_index, _, clip, is_arrangement = registry.locate(song, clip_id)
        if audio_only and clip_kind(clip) != "audio":
            raise ValueError("{0} can only be set on audio clips".format(name))
        try:
            setattr(clip, name, convert(value))
        except RuntimeError as exc:
            # Live reports rejected values (e.g. start marker past end marker) this way
            raise ValueError("Cannot set {0} to {1}: {2}".format(name, value, exc))
        return clip_info(registry, track_index, clip, is_arrangement)
    except Exception as e:
        if ctrl:
            ctrl.log_message("Error setting clip property: " + str(e))
        raise
