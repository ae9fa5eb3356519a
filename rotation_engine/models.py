# rotation_engine/models.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import BALANCED_ROTATION, ERROR, FALLBACK_EMPTY, WARNING
from .errors import ConfigError

# target id -> ordered participant ids; lives for a single attempt only
CandidateAssignment = Dict[str, List[str]]


class Participant(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    groups: FrozenSet[str] = frozenset()
    skills: FrozenSet[str] = frozenset()
    available_slots: Optional[FrozenSet[str]] = None  # None = every slot
    unavailable_slots: FrozenSet[str] = frozenset()
    active: bool = True

    @property
    def display_name(self) -> str:
        return self.name or self.id

    def is_available(self, slot: Optional[str]) -> bool:
        if slot is None:
            return True
        if slot in self.unavailable_slots:
            return False
        return self.available_slots is None or slot in self.available_slots


class Target(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str = ""
    capacity: int = 1
    required_skills: FrozenSet[str] = frozenset()
    excluded_groups: FrozenSet[str] = frozenset()
    allowed_groups: Optional[FrozenSet[str]] = None  # None = any group not excluded
    slot: Optional[str] = None
    active: bool = True

    @field_validator("capacity")
    @classmethod
    def _capacity_positive(cls, v):
        if v < 1:
            raise ValueError("capacity must be at least 1")
        return v

    @property
    def display_name(self) -> str:
        return self.label or self.id


class AssignmentRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    participant_id: str
    target_id: str
    assigned_at: datetime

    @field_validator("assigned_at")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        # naive timestamps are taken as UTC
        return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v


class ParticipantHistory(BaseModel):
    """Read-side summary of one participant's records inside the history window."""

    last_target: Optional[str] = None
    last_assigned_at: Optional[datetime] = None
    total: int = 0
    # target id -> run index of the most recent assignment there (0 = latest run)
    last_run_by_target: Dict[str, int] = Field(default_factory=dict)


class StrategyConfig(BaseModel):
    max_attempts: int = 50
    seed: Optional[int] = None
    rotation_weight: float = 0.7
    balance_weight: float = 0.3
    skill_threshold: float = 0.5
    jitter: float = 0.01
    allow_multi_assignment: bool = False
    history_window: Optional[int] = None
    strict_capacity: bool = False
    availability_severity: str = WARNING
    skill_match_severity: str = WARNING
    required_match: float = 1.0
    skill_fallback: str = FALLBACK_EMPTY
    validators: Optional[List[str]] = None
    params: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "StrategyConfig":
        """
        Build a config from a plain mapping (YAML, request body).
        Unknown keys are kept in `params`; type errors become ConfigError naming the field.
        """
        data = dict(data or {})
        known = {k: data.pop(k) for k in list(data) if k in cls.model_fields}
        params = dict(known.pop("params", None) or {})
        params.update(data)
        try:
            return cls(params=params, **known)
        except ValidationError as exc:
            err = exc.errors()[0]
            field = ".".join(str(p) for p in err.get("loc", ())) or "config"
            raise ConfigError(field, err.get("msg", "invalid value")) from exc


class ValidationVerdict(BaseModel):
    validator: str
    severity: str = ERROR
    passed: bool = True
    message: str = ""
    targets: List[str] = Field(default_factory=list)
    participants: List[str] = Field(default_factory=list)
    details: Dict[str, List[str]] = Field(default_factory=dict)

    @property
    def blocking(self) -> bool:
        return not self.passed and self.severity == ERROR


class Assignment(BaseModel):
    """Accepted result of one generate() call."""

    model_config = ConfigDict(frozen=True)

    mapping: Dict[str, List[str]]
    strategy: str
    attempts: int
    seed: int
    warnings: List[ValidationVerdict] = Field(default_factory=list)

    def participants_for(self, target_id: str) -> List[str]:
        return list(self.mapping.get(target_id, []))

    def records(self, assigned_at: Optional[datetime] = None) -> List[AssignmentRecord]:
        """History rows for this assignment, stamped `assigned_at` (now, UTC, when omitted)."""
        when = assigned_at or datetime.now(timezone.utc)
        return [
            AssignmentRecord(participant_id=pid, target_id=tid, assigned_at=when)
            for tid, pids in self.mapping.items()
            for pid in pids
        ]


class AssignmentRequest(BaseModel):
    strategy: str = BALANCED_ROTATION
    participant_ids: Optional[List[str]] = None
    target_ids: Optional[List[str]] = None
    config: StrategyConfig = Field(default_factory=StrategyConfig)
    force: bool = False


class GenerationResult(BaseModel):
    assignment: Optional[Assignment] = None
    skipped: bool = False
    error: Optional[str] = None
    error_kind: Optional[str] = None
    field: Optional[str] = None
    attempts: Optional[int] = None
    verdicts: List[ValidationVerdict] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None
