"""Holding Area: scratch timeline space for staging clip copies.

Each clip processed in one call gets its own slot, laid out after the
previous one, so copies of different clips never land on each other.
A slot holds the untouched source copy followed by a work position where
segments are prepared::

    |<- margin ->| source copy |<- margin ->| work copy |<- margin ->|
    start        source_start               work_start              end
"""

import logging
from dataclasses import dataclass
from typing import Dict

from ArrangementMCP_Server.engine.host import Host

logger = logging.getLogger("ArrangementMCP.holding")

DEFAULT_HOLDING_AREA_START = 40000.0
HOLDING_MARGIN = 4.0


@dataclass(frozen=True)
class HoldingSlot:
    track_index: int
    start: float
    source_start: float
    work_start: float
    end: float

    def contains(self, position: float) -> bool:
        return self.start <= position < self.end


class HoldingArea:
    """Hands out non-overlapping holding slots, per track."""

    def __init__(self, host: Host, start: float = DEFAULT_HOLDING_AREA_START):
        self.host = host
        self.start = float(start)
        self._cursors: Dict[int, float] = {}

    def _cursor(self, track_index: int) -> float:
        if track_index not in self._cursors:
            clips = self.host.list_arrangement_clips(track_index)
            last_end = max((c.end_time for c in clips), default=0.0)
            self._cursors[track_index] = max(self.start, last_end + HOLDING_MARGIN)
        return self._cursors[track_index]

    def reserve(self, track_index: int, length: float) -> HoldingSlot:
        start = self._cursor(track_index)
        source_start = start + HOLDING_MARGIN
        work_start = source_start + length + HOLDING_MARGIN
        # room for content revealed past the requested window
        end = work_start + 2 * length + HOLDING_MARGIN
        self._cursors[track_index] = end
        logger.debug("Reserved holding slot [%s, %s) on track %d", start, end, track_index)
        return HoldingSlot(track_index, start, source_start, work_start, end)
