import logging
import math
from typing import List, Optional

from ArrangementMCP_Server.engine.cutting import cut_clip
from ArrangementMCP_Server.engine.errors import LimitExceededError, ValidationError
from ArrangementMCP_Server.engine.holding import HoldingArea
from ArrangementMCP_Server.engine.host import Host
from ArrangementMCP_Server.engine.notices import WarningLog
from ArrangementMCP_Server.engine.reveal import EPSILON

logger = logging.getLogger("ArrangementMCP.slicing")

MAX_SLICES = 64


def slice_count(length: float, slice_beats: float) -> int:
    return max(1, math.ceil((length - EPSILON) / slice_beats))


def slice_boundaries(length: float, slice_beats: float) -> List[float]:
    """Clip-relative cut positions for fixed-size slices, including 0 and ``length``."""
    count = slice_count(length, slice_beats)
    return [i * slice_beats for i in range(count)] + [length]


def slice_clips(host: Host, clip_ids: List[str], slice_beats: float, holding: HoldingArea,
                warnings: WarningLog, max_slices: int = MAX_SLICES,
                slice_text: Optional[str] = None) -> List[str]:
    """Cut every arrangement clip in ``clip_ids`` into ``slice_beats``-long pieces.

    Clips not longer than one slice, and session clips, keep their ids.
    The running total of slices is checked before each clip is cut, so a
    LimitExceededError leaves earlier clips already sliced.
    """
    if slice_beats <= 0:
        raise ValidationError("slice must be greater than 0")
    label = slice_text or f"{slice_beats:g} beats"

    result: List[str] = []
    total = 0
    for clip_id in clip_ids:
        clip = host.get_clip(clip_id)
        if not clip.is_arrangement_clip:
            warnings.warn("slice requires arrangement clips, session clips were left unchanged",
                          key="slice-session-clip")
            result.append(clip_id)
            continue
        if clip.length <= slice_beats + EPSILON:
            logger.debug("Clip %s (%.3f beats) fits in one slice, skipping", clip_id, clip.length)
            result.append(clip_id)
            continue

        count = slice_count(clip.length, slice_beats)
        if total + count > max_slices:
            raise LimitExceededError(
                f"Slicing at {label} would create {total + count} slices "
                f"({count} for a {clip.length:g}-beat clip). Maximum {max_slices} slices total. "
                f"Use a longer slice duration.",
                count=total + count, limit=max_slices,
            )
        total += count
        result.extend(cut_clip(host, clip_id, slice_boundaries(clip.length, slice_beats), holding))

    logger.info("Sliced into %d clip(s) total", total)
    return result
