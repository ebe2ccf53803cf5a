import logging
from typing import List

from ArrangementMCP_Server.engine import barbeat
from ArrangementMCP_Server.engine.cutting import cut_clip
from ArrangementMCP_Server.engine.errors import ValidationError
from ArrangementMCP_Server.engine.holding import HoldingArea
from ArrangementMCP_Server.engine.host import Host
from ArrangementMCP_Server.engine.notices import WarningLog
from ArrangementMCP_Server.engine.reveal import EPSILON

logger = logging.getLogger("ArrangementMCP.splitting")

MAX_SPLIT_POINTS = 32


def parse_split_points(text: str, numerator: int, denominator: int) -> List[float]:
    """Parse clip-relative ``bar|beat`` split positions (``1|1`` is the clip start)."""
    points = barbeat.parse_positions(text, numerator, denominator)
    if len(points) > MAX_SPLIT_POINTS:
        raise ValidationError(
            f"Too many split points ({len(points)}). Maximum {MAX_SPLIT_POINTS} per call."
        )
    return points


def split_clips(host: Host, clip_ids: List[str], points: List[float], holding: HoldingArea,
                warnings: WarningLog) -> List[str]:
    """Cut each arrangement clip at the given clip-relative beat positions.

    Points at or outside a clip's edges are ignored for that clip; a clip
    with no point inside it keeps its id.
    """
    result: List[str] = []
    for clip_id in clip_ids:
        clip = host.get_clip(clip_id)
        if not clip.is_arrangement_clip:
            warnings.warn("split requires arrangement clips, session clips were left unchanged",
                          key="split-session-clip")
            result.append(clip_id)
            continue
        inside = [p for p in points if EPSILON < p < clip.length - EPSILON]
        if not inside:
            warnings.warn("No valid split points (all at or beyond clip boundaries)",
                          key="split-no-points")
            result.append(clip_id)
            continue
        logger.debug("Splitting clip %s at %s", clip_id, inside)
        result.extend(cut_clip(host, clip_id, [0.0] + inside + [clip.length], holding))
    return result
