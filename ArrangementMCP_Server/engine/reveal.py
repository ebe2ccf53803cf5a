"""Marker tricks for showing a chosen window of a clip's content.

Live has no "split clip" call, so a segment is made from a full copy whose
markers are moved to the wanted window. Non-looping clips do not accept
arbitrary marker edits, so looping is switched on while the markers are
moved and switched back afterwards. Unwarped audio is warped for the
duration of the edit because its markers are not in beats otherwise.

When Live shows more content than asked for (unwarped audio ends where
the sample says, not where the markers say) a blank "shortener" clip is
laid over the excess and deleted again, which truncates the copy.
"""

import logging

from ArrangementMCP_Server.engine.errors import TransformError
from ArrangementMCP_Server.engine.holding import HoldingSlot
from ArrangementMCP_Server.engine.host import ClipInfo, Host

logger = logging.getLogger("ArrangementMCP.reveal")

EPSILON = 0.001


def content_position(clip: ClipInfo, offset: float) -> float:
    """Content position heard ``offset`` beats after the clip starts playing."""
    position = clip.start_marker + offset
    if clip.looping:
        loop_length = clip.loop_end - clip.loop_start
        if loop_length > 0 and position >= clip.loop_end - EPSILON:
            position = clip.loop_start + (position - clip.loop_end) % loop_length
    return position


def _set_pair(host: Host, clip_id: str, start_name: str, end_name: str,
              current_end: float, start: float, end: float) -> None:
    # Live rejects start >= end at every step, so the order depends on
    # which side of the current end the new window lies.
    if start >= current_end:
        host.set_clip_property(clip_id, end_name, end)
        host.set_clip_property(clip_id, start_name, start)
    else:
        host.set_clip_property(clip_id, start_name, start)
        host.set_clip_property(clip_id, end_name, end)


def _rotate_loop(host: Host, clip: ClipInfo, start: float) -> None:
    if abs(clip.start_marker - start) < EPSILON:
        return
    if start >= clip.end_marker - EPSILON:
        host.set_clip_property(clip.clip_id, "end_marker", clip.loop_end)
    host.set_clip_property(clip.clip_id, "start_marker", start)


def _reveal_unlooped(host: Host, clip: ClipInfo, start: float, end: float) -> None:
    clip_id = clip.clip_id
    unwarped = clip.is_unwarped_audio
    if unwarped:
        host.set_clip_property(clip_id, "warping", True)
    host.set_clip_property(clip_id, "looping", True)
    looped = host.get_clip(clip_id)
    _set_pair(host, clip_id, "loop_start", "loop_end", looped.loop_end, start, end)
    looped = host.get_clip(clip_id)
    _set_pair(host, clip_id, "start_marker", "end_marker", looped.end_marker, start, end)
    host.set_clip_property(clip_id, "looping", False)
    if unwarped:
        host.set_clip_property(clip_id, "warping", False)


def reveal_window(host: Host, clip_id: str, start: float, length: float) -> ClipInfo:
    """Make ``clip_id`` play content from ``start`` for ``length`` beats.

    Looping clips keep their arrangement length and only have the start
    marker rotated; the caller trims them. Non-looping clips get both
    markers set, which also resizes them on the timeline.
    """
    clip = host.get_clip(clip_id)
    if clip.looping:
        _rotate_loop(host, clip, start)
    else:
        _reveal_unlooped(host, clip, start, start + length)
    return host.get_clip(clip_id)


def trim_overflow(host: Host, clip_id: str, boundary: float, slot: HoldingSlot) -> ClipInfo:
    """Cut ``clip_id`` back to ``boundary`` with a shortener clip if it runs past it.

    Shorteners are only ever placed inside the holding slot, never on the
    musical part of the timeline where they could clip a neighbour.
    """
    clip = host.get_clip(clip_id)
    if clip.end_time <= boundary + EPSILON:
        return clip
    if not slot.contains(boundary):
        raise TransformError(
            f"Refusing to place a shortener at {boundary}: outside holding slot "
            f"[{slot.start}, {slot.end})"
        )
    overflow = clip.end_time - boundary
    logger.debug("Clip %s runs %.3f beats past %s, shortening", clip_id, overflow, boundary)
    shortener_id = host.create_blank_clip(clip.track_index, clip.kind, boundary, overflow)
    host.delete_clip(shortener_id)
    return host.get_clip(clip_id)
