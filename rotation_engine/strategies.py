# FILE: rotation_engine/strategies.py
"""
Closed strategy registry: name -> Strategy(execute, validate_config).

Every execute function has the signature
    (participants, targets, history, config, rng) -> CandidateAssignment
and must never place a participant on a target that excludes their group.
"""
from __future__ import annotations
from typing import Callable, Dict, NamedTuple, Sequence

import numpy as np

from .constants import BALANCED_ROTATION, RANDOM_ASSIGNMENT, SKILL_BASED
from .models import AssignmentRecord, CandidateAssignment, Participant, StrategyConfig, Target
from .strategy_balanced import balanced_rotation, validate_rotation_config
from .strategy_random import random_assignment, validate_random_config
from .strategy_skill import skill_based, validate_skill_config

ExecuteFn = Callable[
    [Sequence[Participant], Sequence[Target], Sequence[AssignmentRecord], StrategyConfig, np.random.Generator],
    CandidateAssignment,
]


class Strategy(NamedTuple):
    name: str
    description: str
    execute: ExecuteFn
    validate_config: Callable[[StrategyConfig], None]


STRATEGIES: Dict[str, Strategy] = {
    s.name: s
    for s in (
        Strategy(
            BALANCED_ROTATION,
            "Rotates participants away from recently worked targets and evens out workload",
            balanced_rotation,
            validate_rotation_config,
        ),
        Strategy(
            RANDOM_ASSIGNMENT,
            "Randomly assigns eligible participants to targets",
            random_assignment,
            validate_random_config,
        ),
        Strategy(
            SKILL_BASED,
            "Assigns participants whose skills match each target, rotation score breaks ties",
            skill_based,
            validate_skill_config,
        ),
    )
}
