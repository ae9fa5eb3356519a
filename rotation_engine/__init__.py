# FILE: rotation_engine/__init__.py
"""
rotation_engine package: domain models, eligibility, fairness history, strategies,
validators, the retrying rule engine, IO and the scheduling surface.
"""
from .engine import RuleEngine, default_engine, generate
from .errors import ConfigError, EngineError, InputError, NoValidAssignmentError
from .models import (
    Assignment, AssignmentRecord, AssignmentRequest, GenerationResult, Participant,
    StrategyConfig, Target, ValidationVerdict,
)

__all__ = [
    "RuleEngine",
    "default_engine",
    "generate",
    "EngineError",
    "ConfigError",
    "InputError",
    "NoValidAssignmentError",
    "Assignment",
    "AssignmentRecord",
    "AssignmentRequest",
    "GenerationResult",
    "Participant",
    "StrategyConfig",
    "Target",
    "ValidationVerdict",
]
