"""Top-level entry point: locate clips, then modify, slice, split and shuffle.

Stages run in that fixed order and each one is optional. Every parameter is
parsed before the first host mutation, so bad input never leaves a
half-transformed arrangement behind.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ArrangementMCP_Server.engine import barbeat
from ArrangementMCP_Server.engine.errors import NotFoundError, ValidationError
from ArrangementMCP_Server.engine.holding import DEFAULT_HOLDING_AREA_START, HoldingArea
from ArrangementMCP_Server.engine.host import Host
from ArrangementMCP_Server.engine.locator import locate_clips
from ArrangementMCP_Server.engine.modifications import ModificationPlan, apply_modifications
from ArrangementMCP_Server.engine.notices import WarningLog
from ArrangementMCP_Server.engine.params import TransformParams, parse_params
from ArrangementMCP_Server.engine.seeded import SeededRandom, seed_from_clock
from ArrangementMCP_Server.engine.shuffling import shuffle_clips
from ArrangementMCP_Server.engine.slicing import MAX_SLICES, slice_clips
from ArrangementMCP_Server.engine.splitting import parse_split_points, split_clips

logger = logging.getLogger("ArrangementMCP.orchestrator")


@dataclass(frozen=True)
class TransformContext:
    """Per-call settings that are not caller parameters."""

    holding_area_start: float = DEFAULT_HOLDING_AREA_START
    max_slices: int = MAX_SLICES


class TransformResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    clip_ids: List[str]
    seed: int
    warnings: List[str] = []

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)


def _refresh(host: Host, clip_ids: List[str], warnings: WarningLog) -> List[str]:
    fresh = []
    for clip_id in clip_ids:
        try:
            fresh.append(host.get_clip(clip_id).clip_id)
        except NotFoundError:
            warnings.warn(f"Clip {clip_id} disappeared during the transform")
    return fresh


def transform_clips(params: Union[TransformParams, Mapping[str, Any]], host: Host,
                    context: Optional[TransformContext] = None) -> TransformResult:
    """Run a full transform and report the resulting clip ids and the seed used.

    Raises ValidationError for bad parameters, NotFoundError for a missing
    target track and LimitExceededError when slicing would pass the cap.
    Non-fatal conditions end up in ``TransformResult.warnings``.
    """
    params = parse_params(params)
    context = context or TransformContext()
    warnings = WarningLog()
    seed = params.seed if params.seed is not None else seed_from_clock()

    plan = ModificationPlan.from_params(params, warnings)
    numerator, denominator = host.get_time_signature()
    slice_beats = None
    if params.slice is not None:
        slice_beats = barbeat.duration_to_beats(params.slice, numerator, denominator)
        if slice_beats <= 0:
            raise ValidationError("slice must be greater than 0")
    split_points = None
    if params.split is not None:
        split_points = parse_split_points(params.split, numerator, denominator)

    clip_ids = locate_clips(host, params, numerator, denominator, warnings)
    if not clip_ids:
        warnings.warn("no valid clips found")
        return TransformResult(clip_ids=[], seed=seed, warnings=warnings.messages)

    logger.info("Transforming %d clip(s) with seed %d", len(clip_ids), seed)
    rng = SeededRandom(seed)
    holding = HoldingArea(host, context.holding_area_start)

    if not plan.is_empty:
        apply_modifications(host, clip_ids, plan, rng, warnings)
        clip_ids = _refresh(host, clip_ids, warnings)
    if slice_beats is not None:
        clip_ids = slice_clips(host, clip_ids, slice_beats, holding, warnings,
                               max_slices=context.max_slices, slice_text=params.slice)
    if split_points is not None:
        clip_ids = split_clips(host, clip_ids, split_points, holding, warnings)
    if params.shuffle_order:
        clip_ids = shuffle_clips(host, clip_ids, rng, holding, warnings)

    return TransformResult(clip_ids=clip_ids, seed=seed, warnings=warnings.messages)
