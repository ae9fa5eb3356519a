# FILE: rotation_engine/engine.py
"""
Rule engine: strategy -> validators, retried with seeded randomness.

- One numpy Generator per attempt, seeded from (seed, attempt): reruns with the
  same seed reproduce the same Assignment, attempts within a run differ.
- Every registered validator runs on every attempt so a failed run can explain
  itself.
- The attempt budget is final. Exhaustion raises NoValidAssignmentError and the
  caller decides whether to try again.
"""
from __future__ import annotations
import logging
from collections import Counter
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np

from .constants import CAPACITY_CHECK, SEVERITIES
from .errors import ConfigError, InputError, NoValidAssignmentError
from .models import (
    Assignment, AssignmentRecord, CandidateAssignment, Participant, StrategyConfig, Target, ValidationVerdict,
)
from .strategies import STRATEGIES, Strategy
from .validators import VALIDATORS, Validator

logger = logging.getLogger(__name__)

SEED_BITS = 63


def attempt_rng(seed: int, attempt: int) -> np.random.Generator:
    return np.random.default_rng(np.random.SeedSequence([seed, attempt]))


def fresh_seed() -> int:
    """Run-level seed drawn from OS entropy; recorded on the Assignment so the run can be replayed."""
    return int(np.random.SeedSequence().entropy % (1 << SEED_BITS))


def validate_common_config(config: StrategyConfig) -> None:
    if config.max_attempts < 1:
        raise ConfigError("max_attempts", f"must be at least 1 (got {config.max_attempts})")
    if config.seed is not None and config.seed < 0:
        raise ConfigError("seed", f"must not be negative (got {config.seed})")
    if config.history_window is not None and config.history_window < 1:
        raise ConfigError("history_window", f"must be at least 1 run (got {config.history_window})")
    if not (0.0 <= config.required_match <= 1.0):
        raise ConfigError("required_match", f"must be between 0.0 and 1.0 (got {config.required_match})")
    for field in ("availability_severity", "skill_match_severity"):
        if getattr(config, field) not in SEVERITIES:
            raise ConfigError(field, f"must be one of {', '.join(SEVERITIES)}")


def _unique_ids(items: Iterable, kind: str) -> None:
    seen = set()
    for item in items:
        if item.id in seen:
            raise InputError(f"Duplicate {kind} id: {item.id}", field=f"{kind}s")
        seen.add(item.id)


class RuleEngine:
    """Holds the strategy and validator tables. Has no other state; safe to share between calls."""

    def __init__(
        self,
        strategies: Optional[Mapping[str, Strategy]] = None,
        validators: Optional[Mapping[str, Validator]] = None,
    ):
        self.strategies: Dict[str, Strategy] = dict(STRATEGIES if strategies is None else strategies)
        self.validators: Dict[str, Validator] = dict(VALIDATORS if validators is None else validators)

    def register_strategy(self, strategy: Strategy) -> None:
        self.strategies[strategy.name] = strategy

    def register_validator(self, validator: Validator) -> None:
        self.validators[validator.name] = validator

    def list_strategies(self) -> List[str]:
        return sorted(self.strategies)

    def list_validators(self) -> List[str]:
        return sorted(self.validators)

    def _selected_validators(self, config: StrategyConfig) -> List[Validator]:
        """All registered validators, or the configured subset. capacity_check is never dropped."""
        names = self.list_validators() if config.validators is None else list(config.validators)
        if CAPACITY_CHECK in self.validators and CAPACITY_CHECK not in names:
            names.insert(0, CAPACITY_CHECK)
        unknown = [n for n in names if n not in self.validators]
        if unknown:
            raise InputError(f"Validation rule(s) not found: {', '.join(unknown)}", field="validators")
        return [self.validators[n] for n in names]

    def run_validators(
        self,
        validators: Sequence[Validator],
        candidate: CandidateAssignment,
        participants: Sequence[Participant],
        targets: Sequence[Target],
        config: StrategyConfig,
    ) -> List[ValidationVerdict]:
        return [v.validate(candidate, participants, targets, config) for v in validators]

    def generate(
        self,
        strategy_name: str,
        participants: Sequence[Participant],
        targets: Sequence[Target],
        history: Sequence[AssignmentRecord] = (),
        config: Optional[StrategyConfig] = None,
    ) -> Assignment:
        strategy = self.strategies.get(strategy_name)
        if strategy is None:
            raise InputError(f"Strategy '{strategy_name}' not found", field="strategy")

        config = config or StrategyConfig()
        validate_common_config(config)
        validators = self._selected_validators(config)

        people = tuple(p for p in participants if p.active)
        slots = tuple(t for t in targets if t.active)
        if not people:
            raise InputError("No active participants to assign", field="participants")
        if not slots:
            raise InputError("No active targets to fill", field="targets")
        _unique_ids(people, "participant")
        _unique_ids(slots, "target")

        strategy.validate_config(config)

        snapshot = tuple(history)
        seed = config.seed if config.seed is not None else fresh_seed()
        failures: Counter = Counter()
        verdicts: List[ValidationVerdict] = []

        for attempt in range(1, config.max_attempts + 1):
            rng = attempt_rng(seed, attempt)
            candidate = strategy.execute(people, slots, snapshot, config, rng)
            verdicts = self.run_validators(validators, candidate, people, slots, config)
            blocking = [v for v in verdicts if v.blocking]
            if not blocking:
                logger.info(
                    "%s assignment accepted on attempt %d/%d (seed=%d)",
                    strategy.name, attempt, config.max_attempts, seed,
                )
                return Assignment(
                    mapping={tid: list(pids) for tid, pids in candidate.items()},
                    strategy=strategy.name,
                    attempts=attempt,
                    seed=seed,
                    warnings=[v for v in verdicts if not v.passed],
                )
            failures.update(v.validator for v in verdicts if not v.passed)
            logger.debug(
                "Attempt %d discarded: %s", attempt,
                "; ".join(f"{v.validator}: {v.message}" for v in blocking),
            )

        logger.warning(
            "No valid %s assignment after %d attempts (seed=%d); rejections: %s",
            strategy.name, config.max_attempts, seed, dict(failures),
        )
        raise NoValidAssignmentError(config.max_attempts, verdicts, failures)


def default_engine() -> RuleEngine:
    return RuleEngine()


def generate(
    strategy_name: str,
    participants: Sequence[Participant],
    targets: Sequence[Target],
    history: Sequence[AssignmentRecord] = (),
    config: Optional[StrategyConfig] = None,
    engine: Optional[RuleEngine] = None,
) -> Assignment:
    """Run one generation with `engine`, or with a fresh default registry."""
    return (engine or default_engine()).generate(strategy_name, participants, targets, history, config)
