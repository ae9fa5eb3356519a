# rotation_engine/strategy_random.py
from __future__ import annotations
from typing import Collection, List, Sequence, Set

import numpy as np

from .eligibility import eligible_for_target
from .models import AssignmentRecord, CandidateAssignment, Participant, StrategyConfig, Target


def fill_randomly(
    target: Target,
    participants: Sequence[Participant],
    used: Set[str],
    config: StrategyConfig,
    rng: np.random.Generator,
    seats: int,
    exclude: Collection[str] = (),
) -> List[str]:
    """Shuffle the free, group-eligible pool and take the first `seats` ids. Marks picks as used."""
    if seats <= 0:
        return []
    pool = [
        p for p in eligible_for_target(participants, target)
        if p.id not in exclude and (config.allow_multi_assignment or p.id not in used)
    ]
    order = rng.permutation(len(pool))
    picks = [pool[int(i)].id for i in order[:seats]]
    used.update(picks)
    return picks


def random_assignment(
    participants: Sequence[Participant],
    targets: Sequence[Target],
    history: Sequence[AssignmentRecord],
    config: StrategyConfig,
    rng: np.random.Generator,
) -> CandidateAssignment:
    """
    Simplest strategy: per target, shuffle the eligible participants and take
    `capacity` of them. History is ignored. Targets that cannot be filled come
    back short and are left for the capacity check to reject.
    """
    used: Set[str] = set()
    return {t.id: fill_randomly(t, participants, used, config, rng, t.capacity) for t in targets}


def validate_random_config(config: StrategyConfig) -> None:
    """Random assignment has no settings of its own."""
