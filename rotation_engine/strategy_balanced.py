# rotation_engine/strategy_balanced.py
from __future__ import annotations
from typing import Dict, List, Sequence, Set

import numpy as np

from .eligibility import eligible_for_target
from .errors import ConfigError
from .fairness import history_runs, load_scores, recency_score, summarize_history
from .models import AssignmentRecord, CandidateAssignment, Participant, StrategyConfig, Target


class RotationScorer:
    """
    rotation_weight * recency + balance_weight * load for (participant, target) pairs,
    plus a small random jitter so equal scores do not always resolve the same way.
    """

    def __init__(self, participants: Sequence[Participant], history: Sequence[AssignmentRecord],
                 config: StrategyConfig, rng: np.random.Generator):
        self.config = config
        self.rng = rng
        self.summaries = summarize_history(history, config.history_window)
        self.n_runs = len(history_runs(history, config.history_window))
        self.loads = load_scores(self.summaries, [p.id for p in participants])
        # shuffled tie-break rank per participant
        self.rank = {p.id: int(r) for p, r in zip(participants, rng.permutation(len(participants)))}

    def score(self, pid: str, target_id: str) -> float:
        rec = recency_score(self.summaries.get(pid), target_id, self.n_runs)
        load = self.loads.get(pid, 1.0)
        base = self.config.rotation_weight * rec + self.config.balance_weight * load
        if self.config.jitter > 0:
            base += float(self.rng.uniform(0, self.config.jitter))
        return base

    def ranked(self, pool: Sequence[Participant], target: Target) -> List[Participant]:
        scored = [(self.score(p.id, target.id), p) for p in pool]
        scored.sort(key=lambda sp: (-sp[0], self.rank.get(sp[1].id, 0)))
        return [p for _, p in scored]


def constrained_order(targets: Sequence[Target], pools: Dict[str, List[Participant]],
                      rng: np.random.Generator) -> List[Target]:
    """Targets with the least slack (eligible - capacity) first; ties shuffled."""
    tie = rng.permutation(len(targets))
    idx = sorted(range(len(targets)),
                 key=lambda i: (len(pools[targets[i].id]) - targets[i].capacity, int(tie[i])))
    return [targets[i] for i in idx]


def balanced_rotation(
    participants: Sequence[Participant],
    targets: Sequence[Target],
    history: Sequence[AssignmentRecord],
    config: StrategyConfig,
    rng: np.random.Generator,
) -> CandidateAssignment:
    """
    Prefer participants who have not worked a target recently and who carry the
    lightest load across the history window. Each target takes its top scorers
    among the participants still free in this run.
    """
    scorer = RotationScorer(participants, history, config, rng)
    pools = {t.id: eligible_for_target(participants, t) for t in targets}
    out: CandidateAssignment = {t.id: [] for t in targets}
    used: Set[str] = set()

    for target in constrained_order(targets, pools, rng):
        free = [p for p in pools[target.id] if config.allow_multi_assignment or p.id not in used]
        picks = [p.id for p in scorer.ranked(free, target)[:target.capacity]]
        out[target.id] = picks
        used.update(picks)
    return out


def _check_unit(config: StrategyConfig, field: str) -> None:
    value = getattr(config, field)
    if not (0.0 <= value <= 1.0):
        raise ConfigError(field, f"must be between 0.0 and 1.0 (got {value})")


def validate_rotation_config(config: StrategyConfig) -> None:
    _check_unit(config, "rotation_weight")
    _check_unit(config, "balance_weight")
    if config.jitter < 0:
        raise ConfigError("jitter", f"must not be negative (got {config.jitter})")
