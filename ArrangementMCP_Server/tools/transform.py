"""Arrangement clip transform tools."""

import json
import logging
import threading
from typing import Optional

from mcp.server.fastmcp import Context

from ArrangementMCP_Server.config import get_settings
from ArrangementMCP_Server.connections.live_host import get_live_host
from ArrangementMCP_Server.engine import barbeat
from ArrangementMCP_Server.engine.orchestrator import TransformContext, transform_clips as run_transform
from ArrangementMCP_Server.tools._base import _tool_handler
from ArrangementMCP_Server.validation import _validate_index

logger = logging.getLogger("ArrangementMCP")

# one transform at a time; they share the holding area
_transform_lock = threading.Lock()


def register_tools(mcp):

    @mcp.tool()
    @_tool_handler("getting arrangement clips")
    def get_arrangement_clips(ctx: Context, track_index: int) -> str:
        """List the arrangement clips on a track with their ids and positions.

        Use the returned clip ids with transform_clips.

        Parameters:
        - track_index: The index of the track
        """
        _validate_index(track_index, "track_index")
        host = get_live_host()
        track = host.resolve_track(track_index)
        numerator, denominator = host.get_time_signature()
        clips = []
        for clip in sorted(host.list_arrangement_clips(track_index), key=lambda c: c.start_time):
            clips.append({
                "clip_id": clip.clip_id,
                "name": clip.name,
                "kind": clip.kind,
                "start_time": clip.start_time,
                "end_time": clip.end_time,
                "position": barbeat.beats_to_position(clip.start_time, numerator, denominator),
                "length": barbeat.beats_to_duration(clip.length, numerator, denominator),
                "looping": clip.looping,
            })
        return json.dumps({
            "track_index": track_index,
            "track_name": track.name,
            "time_signature": f"{numerator}/{denominator}",
            "clip_count": len(clips),
            "clips": clips,
        })

    @mcp.tool()
    @_tool_handler("transforming clips")
    def transform_clips(
        ctx: Context,
        clip_ids: Optional[str] = None,
        arrangement_track_index: Optional[int] = None,
        arrangement_start: Optional[str] = None,
        arrangement_length: Optional[str] = None,
        velocity_min: Optional[float] = None,
        velocity_max: Optional[float] = None,
        velocity_range: Optional[float] = None,
        probability: Optional[float] = None,
        gain_db_min: Optional[float] = None,
        gain_db_max: Optional[float] = None,
        transpose_min: Optional[float] = None,
        transpose_max: Optional[float] = None,
        transpose_values: Optional[str] = None,
        duration_min: Optional[float] = None,
        duration_max: Optional[float] = None,
        slice: Optional[str] = None,
        split: Optional[str] = None,
        shuffle_order: bool = False,
        seed: Optional[int] = None,
    ) -> str:
        """Randomize, slice, split and/or shuffle clips in one call.

        Stages run in this order: modifications, slice, split, shuffle.
        Returns the resulting clip ids, the seed used (pass it back to
        reproduce the result) and any warnings.

        Parameters:
        - clip_ids: Comma-separated clip ids. Takes priority over the range options
        - arrangement_track_index: Track to select arrangement clips from
        - arrangement_start: Range start in bar|beat, e.g. "1|1" (default: song start)
        - arrangement_length: Range length in bar:beat, e.g. "4:0" (default: to the end)
        - velocity_min / velocity_max: Random velocity offset range added to each note
        - velocity_range: Added to each note's velocity deviation
        - probability: Added to each note's probability (-1.0 to 1.0)
        - gain_db_min / gain_db_max: Random gain change in dB for audio clips
        - transpose_min / transpose_max: Random transposition range in semitones
        - transpose_values: Comma-separated semitone choices, e.g. "-12,0,7,12" (overrides the range)
        - duration_min / duration_max: Random note length multiplier range
        - slice: Cut clips into pieces of this bar:beat length, e.g. "0:1" for one beat
        - split: Comma-separated clip-relative bar|beat cut points, e.g. "2|1, 3|3"
        - shuffle_order: Randomly reorder the resulting arrangement clips
        - seed: Random seed for reproducible results
        """
        params = {
            "clip_ids": clip_ids,
            "arrangement_track_index": arrangement_track_index,
            "arrangement_start": arrangement_start,
            "arrangement_length": arrangement_length,
            "velocity_min": velocity_min,
            "velocity_max": velocity_max,
            "velocity_range": velocity_range,
            "probability": probability,
            "gain_db_min": gain_db_min,
            "gain_db_max": gain_db_max,
            "transpose_min": transpose_min,
            "transpose_max": transpose_max,
            "transpose_values": transpose_values,
            "duration_min": duration_min,
            "duration_max": duration_max,
            "slice": slice,
            "split": split,
            "shuffle_order": shuffle_order,
            "seed": seed,
        }
        settings = get_settings()
        context = TransformContext(
            holding_area_start=settings.holding_area_start,
            max_slices=settings.max_slices,
        )
        with _transform_lock:
            result = run_transform(params, get_live_host(), context)
        logger.info("transform_clips returned %d clip(s), seed %d",
                    len(result.clip_ids), result.seed)
        return json.dumps(result.to_dict())
