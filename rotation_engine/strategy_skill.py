# rotation_engine/strategy_skill.py
from __future__ import annotations
from typing import Sequence, Set

import numpy as np

from .constants import FALLBACK_EMPTY, FALLBACK_MODES, FALLBACK_SHORT
from .eligibility import eligible_for_target, skill_match_ratio
from .errors import ConfigError
from .models import AssignmentRecord, CandidateAssignment, Participant, StrategyConfig, Target
from .strategy_balanced import RotationScorer, constrained_order, validate_rotation_config
from .strategy_random import fill_randomly


def skill_based(
    participants: Sequence[Participant],
    targets: Sequence[Target],
    history: Sequence[AssignmentRecord],
    config: StrategyConfig,
    rng: np.random.Generator,
) -> CandidateAssignment:
    """
    Fill each target with the best skill matches that clear `skill_threshold`.
    Targets without required skills accept everyone. Ties fall back to the
    rotation/balance score. Seats nobody qualifies for are filled at random
    according to `skill_fallback`; a target is never silently dropped.
    """
    scorer = RotationScorer(participants, history, config, rng)
    pools = {t.id: eligible_for_target(participants, t) for t in targets}
    out: CandidateAssignment = {t.id: [] for t in targets}
    used: Set[str] = set()

    for target in constrained_order(targets, pools, rng):
        free = [p for p in pools[target.id] if config.allow_multi_assignment or p.id not in used]
        if target.required_skills:
            qualified = [p for p in free if skill_match_ratio(p, target) >= config.skill_threshold]
        else:
            qualified = free
        ranked = scorer.ranked(qualified, target)
        ranked.sort(key=lambda p: -skill_match_ratio(p, target))  # stable: keeps score order within a ratio
        picks = [p.id for p in ranked[:target.capacity]]
        used.update(picks)

        short = target.capacity - len(picks)
        if short > 0 and (config.skill_fallback == FALLBACK_SHORT
                          or (config.skill_fallback == FALLBACK_EMPTY and not qualified)):
            picks += fill_randomly(target, participants, used, config, rng, short, exclude=picks)
        out[target.id] = picks
    return out


def validate_skill_config(config: StrategyConfig) -> None:
    validate_rotation_config(config)
    if not (0.0 <= config.skill_threshold <= 1.0):
        raise ConfigError("skill_threshold", f"must be between 0.0 and 1.0 (got {config.skill_threshold})")
    if config.skill_fallback not in FALLBACK_MODES:
        raise ConfigError("skill_fallback", f"must be one of {', '.join(FALLBACK_MODES)}")
