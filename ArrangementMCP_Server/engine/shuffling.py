"""Seeded reordering of arrangement clips.

Clips on one track are permuted and laid back into the time they already
cover, so the union of covered time is the same before and after. When
every selected clip has the same length they trade start positions across
the whole selection, gaps included. Otherwise each gapless run is shuffled
on its own and repacked back to back from the run's start.
"""

import logging
from typing import Dict, List, Tuple

from ArrangementMCP_Server.engine.cutting import clips_starting_in
from ArrangementMCP_Server.engine.holding import HoldingArea
from ArrangementMCP_Server.engine.host import ClipInfo, Host
from ArrangementMCP_Server.engine.notices import WarningLog
from ArrangementMCP_Server.engine.reveal import EPSILON
from ArrangementMCP_Server.engine.seeded import SeededRandom

logger = logging.getLogger("ArrangementMCP.shuffling")


def gapless_runs(ordered: List[ClipInfo]) -> List[List[ClipInfo]]:
    """Split clips sorted by start time into runs with no gap between neighbours."""
    runs: List[List[ClipInfo]] = []
    for clip in ordered:
        if runs and clip.start_time <= runs[-1][-1].end_time + EPSILON:
            runs[-1].append(clip)
        else:
            runs.append([clip])
    return runs


def _same_length(clips: List[ClipInfo]) -> bool:
    first = clips[0].length
    return all(abs(c.length - first) <= EPSILON for c in clips)


def shuffle_placements(ordered: List[ClipInfo], rng: SeededRandom) -> List[Tuple[ClipInfo, float]]:
    """Pair each clip with its new start position.

    ``ordered`` must be sorted by start time. Draws ``len(ordered) - 1``
    values for equal-length clips, otherwise ``len(run) - 1`` per run in
    timeline order.
    """
    if _same_length(ordered):
        starts = [c.start_time for c in ordered]
        return list(zip(rng.shuffle(ordered), starts))

    placements: List[Tuple[ClipInfo, float]] = []
    for run in gapless_runs(ordered):
        position = run[0].start_time
        for clip in rng.shuffle(run):
            placements.append((clip, position))
            position += clip.length
    return placements


def _shuffle_track(host: Host, track_index: int, group: List[ClipInfo], rng: SeededRandom,
                   holding: HoldingArea, warnings: WarningLog) -> List[str]:
    ordered = sorted(group, key=lambda c: c.start_time)
    region_start = ordered[0].start_time
    region_end = max(c.end_time for c in ordered)
    selected = {c.clip_id for c in ordered}
    for other in host.list_arrangement_clips(track_index):
        if (other.clip_id not in selected and other.start_time < region_end - EPSILON
                and other.end_time > region_start + EPSILON):
            warnings.warn(
                f"shuffleOrder skipped on track {track_index}: clip {other.clip_id} "
                f"lies between the selected clips"
            )
            return [c.clip_id for c in ordered]

    placements = shuffle_placements(ordered, rng)

    held = []
    for clip, position in placements:
        slot = holding.reserve(track_index, clip.length)
        held_id = host.duplicate_clip_to_arrangement(clip.clip_id, slot.source_start)
        host.get_clip(held_id)
        host.delete_clip(clip.clip_id)
        held.append((held_id, position))

    for held_id, position in held:
        host.duplicate_clip_to_arrangement(held_id, position)
        host.delete_clip(held_id)

    logger.info("Shuffled %d clip(s) on track %d", len(ordered), track_index)
    return clips_starting_in(host, track_index, region_start, region_end)


def shuffle_clips(host: Host, clip_ids: List[str], rng: SeededRandom, holding: HoldingArea,
                  warnings: WarningLog) -> List[str]:
    """Shuffle the arrangement clips in ``clip_ids`` track by track.

    Returns the working set with each shuffled track's ids replaced by the
    fresh ids in timeline order, at the position of that track's first clip.
    """
    clips = [host.get_clip(clip_id) for clip_id in clip_ids]
    groups: Dict[int, List[ClipInfo]] = {}
    for clip in clips:
        if clip.is_arrangement_clip:
            groups.setdefault(clip.track_index, []).append(clip)
        else:
            warnings.warn("shuffleOrder requires arrangement clips, session clips were left unchanged",
                          key="shuffle-session-clip")
    if not groups:
        return list(clip_ids)

    replaced: Dict[int, List[str]] = {}
    for track_index, group in groups.items():
        if len(group) < 2:
            continue
        replaced[track_index] = _shuffle_track(host, track_index, group, rng, holding, warnings)

    result: List[str] = []
    emitted = set()
    for clip in clips:
        track_index = clip.track_index
        if not clip.is_arrangement_clip or track_index not in replaced:
            result.append(clip.clip_id)
        elif track_index not in emitted:
            emitted.add(track_index)
            result.extend(replaced[track_index])
    return result
