import logging
import math
from typing import List, Tuple

from ArrangementMCP_Server.engine import barbeat
from ArrangementMCP_Server.engine.errors import NotFoundError, ValidationError
from ArrangementMCP_Server.engine.host import Host
from ArrangementMCP_Server.engine.notices import WarningLog
from ArrangementMCP_Server.engine.params import TransformParams

logger = logging.getLogger("ArrangementMCP.locator")


def parse_clip_ids(text: str) -> List[str]:
    """Split a comma-separated id list, dropping blanks and repeats."""
    ids = []
    for part in text.split(","):
        part = part.strip()
        if part and part not in ids:
            ids.append(part)
    return ids


def arrangement_window(params: TransformParams, numerator: int, denominator: int) -> Tuple[float, float]:
    """Return the [start, end) beat window for a range query."""
    start = 0.0
    if params.arrangement_start is not None:
        start = barbeat.position_to_beats(params.arrangement_start, numerator, denominator)
    if params.arrangement_length is None:
        return start, math.inf
    length = barbeat.duration_to_beats(params.arrangement_length, numerator, denominator)
    if length <= 0:
        raise ValidationError("arrangementLength must be greater than 0")
    return start, start + length


def locate_by_ids(host: Host, clip_ids: List[str], warnings: WarningLog) -> List[str]:
    found = []
    for clip_id in clip_ids:
        try:
            found.append(host.get_clip(clip_id).clip_id)
        except NotFoundError:
            warnings.warn(f"Clip {clip_id} not found, skipping")
    return found


def locate_by_range(host: Host, track_index: int, window: Tuple[float, float]) -> List[str]:
    start, end = window
    host.resolve_track(track_index)
    clips = sorted(host.list_arrangement_clips(track_index), key=lambda c: c.start_time)
    return [c.clip_id for c in clips if start <= c.start_time < end]


def locate_clips(host: Host, params: TransformParams, numerator: int, denominator: int,
                 warnings: WarningLog) -> List[str]:
    """Resolve the clips a transform call targets.

    An explicit id list wins over an arrangement range. Unknown ids are
    dropped with a warning; a missing track raises NotFoundError.
    """
    if params.clip_ids is not None and params.clip_ids.strip():
        found = locate_by_ids(host, parse_clip_ids(params.clip_ids), warnings)
        logger.info("Resolved %d clip(s) from id list", len(found))
        return found

    window = arrangement_window(params, numerator, denominator)
    found = locate_by_range(host, params.arrangement_track_index, window)
    if not found:
        warnings.warn(
            f"No clips found on track {params.arrangement_track_index} in the requested range"
        )
    logger.info("Resolved %d clip(s) on track %s", len(found), params.arrangement_track_index)
    return found
