"""Cut one arrangement clip into consecutive segments.

Shared by the slice and split engines. The only relocation primitive used
is duplicate-to-position: the source is parked in the holding area, the
original is deleted so its region is empty, and each segment is prepared
on a scratch copy in holding space before being duplicated into place.
"""

import logging
from typing import List, Sequence

from ArrangementMCP_Server.engine.holding import HoldingArea
from ArrangementMCP_Server.engine.host import Host
from ArrangementMCP_Server.engine.reveal import (
    EPSILON,
    content_position,
    reveal_window,
    trim_overflow,
)

logger = logging.getLogger("ArrangementMCP.cutting")


def clips_starting_in(host: Host, track_index: int, start: float, end: float) -> List[str]:
    """Ids of arrangement clips on a track whose start lies in [start, end)."""
    clips = sorted(host.list_arrangement_clips(track_index), key=lambda c: c.start_time)
    return [
        c.clip_id for c in clips
        if start - EPSILON <= c.start_time < end - EPSILON
    ]


def cut_clip(host: Host, clip_id: str, boundaries: Sequence[float], holding: HoldingArea) -> List[str]:
    """Replace ``clip_id`` by one clip per ``[boundaries[i], boundaries[i+1])``.

    Boundaries are clip-relative beats starting at 0 and ending at the
    clip's length. Returns the ids now covering the clip's old region,
    in timeline order.
    """
    source = host.get_clip(clip_id)
    track_index = source.track_index
    origin = source.start_time
    slot = holding.reserve(track_index, source.length)

    held_id = host.duplicate_clip_to_arrangement(clip_id, slot.source_start)
    held = host.get_clip(held_id)
    host.delete_clip(clip_id)

    segments = list(zip(boundaries[:-1], boundaries[1:]))
    for offset, segment_end in segments:
        length = segment_end - offset
        work_id = host.duplicate_clip_to_arrangement(held_id, slot.work_start)
        reveal_window(host, work_id, content_position(held, offset), length)
        trim_overflow(host, work_id, slot.work_start + length, slot)
        host.duplicate_clip_to_arrangement(work_id, origin + offset)
        host.delete_clip(work_id)

    host.delete_clip(held_id)
    fresh = clips_starting_in(host, track_index, origin, origin + source.length)
    logger.info("Cut clip %s on track %d into %d clip(s)", clip_id, track_index, len(fresh))
    return fresh
