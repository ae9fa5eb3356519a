# FILE: rotation_engine/errors.py
from __future__ import annotations
from typing import Dict, List, Optional


class EngineError(Exception):
    """Base class for every failure raised by the generation engine."""

    kind = "engine_error"


class ConfigError(EngineError, ValueError):
    """Raised when a StrategyConfig field is malformed. Detected once, before any attempt."""

    kind = "config_error"

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


class InputError(EngineError, ValueError):
    """Raised for empty participant/target sets or unknown strategy/validator names."""

    kind = "input_error"

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class NoValidAssignmentError(EngineError):
    """
    Raised when the attempt budget is exhausted without an acceptable candidate.

    This is an operational outcome (not enough eligible people for the
    constraints), not a bug. Carries the last attempt's verdicts and a tally of
    how often each validator rejected a candidate across all attempts.
    """

    kind = "no_valid_assignment"

    def __init__(self, attempts: int, verdicts: List, failure_counts: Dict[str, int]):
        self.attempts = attempts
        self.verdicts = list(verdicts)
        self.failure_counts = dict(failure_counts)
        reasons = "; ".join(
            f"{v.validator}: {v.message}" for v in self.verdicts if not v.passed
        ) or "no verdicts"
        super().__init__(
            f"Could not find a valid assignment after {attempts} attempts. Last failures: {reasons}"
        )
