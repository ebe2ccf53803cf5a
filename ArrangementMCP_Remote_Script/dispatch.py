"""Command dispatch tables and error mapping.

Each value is a lambda(song, registry, p, ctrl) that extracts parameters
from *p* and calls the matching handler. Kept free of _Framework imports
so it can run outside Live.
"""

import queue
import traceback

from . import handlers

_MODIFYING_HANDLERS = {
    "duplicate_clip_to_arrangement": lambda song, reg, p, ctrl: handlers.arrangement.duplicate_clip_to_arrangement(
        song, reg, p["clip_id"], p.get("time", 0.0), ctrl),
    "create_blank_clip": lambda song, reg, p, ctrl: handlers.arrangement.create_blank_clip(
        song, reg, p["track_index"], p.get("kind", "midi"), p["start"], p["length"], ctrl),
    "delete_clip": lambda song, reg, p, ctrl: handlers.arrangement.delete_clip(
        song, reg, p["clip_id"], ctrl),
    "set_clip_property": lambda song, reg, p, ctrl: handlers.clips.set_clip_property(
        song, reg, p["clip_id"], p["name"], p["value"], ctrl),
    "apply_note_modifications": lambda song, reg, p, ctrl: handlers.midi.apply_note_modifications(
        song, reg, p["clip_id"], p.get("notes", []), ctrl),
}

_READONLY_HANDLERS = {
    "get_song_info": lambda song, reg, p, ctrl: handlers.session.get_song_info(song, ctrl),
    "get_track_info": lambda song, reg, p, ctrl: handlers.session.get_track_info(
        song, reg, p["track_index"], ctrl),
    "get_arrangement_clips": lambda song, reg, p, ctrl: handlers.arrangement.get_arrangement_clips(
        song, reg, p["track_index"], ctrl),
    "get_clip_info": lambda song, reg, p, ctrl: handlers.clips.get_clip_info(
        song, reg, p["clip_id"], ctrl),
    "get_notes": lambda song, reg, p, ctrl: handlers.midi.get_notes(
        song, reg, p["clip_id"], ctrl),
}


def is_known_command(command_type):
    return command_type in _MODIFYING_HANDLERS or command_type in _READONLY_HANDLERS


def safe_error_message(e):
    """Return a client-safe error message.

    ValueError/IndexError/LookupError messages are kept (user-input validation).
    KeyError -> "Missing required parameter: <key>"
    TypeError -> "Invalid parameter type"
    Everything else gets a generic message; details stay in the log.
    """
    if isinstance(e, KeyError):
        return "Missing required parameter: {0}".format(e)
    if isinstance(e, (ValueError, LookupError)):
        return str(e)
    if isinstance(e, TypeError):
        return "Invalid parameter type"
    if isinstance(e, queue.Empty):
        return "Operation timed out"
    return "Internal error - check Ableton log for details"


def error_type(e):
    if isinstance(e, KeyError):
        return "invalid"
    if isinstance(e, LookupError):
        return "not_found"
    if isinstance(e, (ValueError, TypeError)):
        return "invalid"
    return "internal"


def error_response(e):
    return {"status": "error", "message": safe_error_message(e), "error_type": error_type(e)}


def process_command(song, registry, command, ctrl=None):
    """Run one command synchronously and return the response dict."""
    command_type = command.get("type", "")
    params = command.get("params", {}) or {}
    handler = _MODIFYING_HANDLERS.get(command_type) or _READONLY_HANDLERS.get(command_type)
    if handler is None:
        return {"status": "error", "message": "Unknown command: " + command_type,
                "error_type": "invalid"}
    try:
        result = handler(song, registry, params, ctrl)
    except Exception as e:
        if ctrl:
            ctrl.log_message("Error processing {0}: {1}".format(command_type, e))
            ctrl.log_message(traceback.format_exc())
        return error_response(e)
    if command_type in _MODIFYING_HANDLERS:
        registry.prune(song)
    return {"status": "success", "result": result}
