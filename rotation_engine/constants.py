# FILE: rotation_engine/constants.py
from __future__ import annotations
from typing import Dict, List

# ---------------------
# Registry names
# ---------------------
RANDOM_ASSIGNMENT = "random_assignment"
BALANCED_ROTATION = "balanced_rotation"
SKILL_BASED = "skill_based"

STRATEGY_NAMES: List[str] = [BALANCED_ROTATION, RANDOM_ASSIGNMENT, SKILL_BASED]

CAPACITY_CHECK = "capacity_check"
AVAILABILITY_CHECK = "availability_check"
SKILL_MATCHING = "skill_matching"

VALIDATOR_NAMES: List[str] = [CAPACITY_CHECK, AVAILABILITY_CHECK, SKILL_MATCHING]

# ---------------------
# Severities
# ---------------------
ERROR = "error"
WARNING = "warning"
SEVERITIES = (ERROR, WARNING)

# ---------------------
# Skill fallback modes
# ---------------------
FALLBACK_EMPTY = "empty"   # fall back only when nobody clears the threshold
FALLBACK_SHORT = "short"   # also top up targets left short of capacity
FALLBACK_NEVER = "never"
FALLBACK_MODES = (FALLBACK_EMPTY, FALLBACK_SHORT, FALLBACK_NEVER)

# ---------------------
# Cadence
# ---------------------
DEFAULT_INTERVAL_DAYS = 14
MAX_INTERVAL_DAYS = 365

# ---------------------
# CSV headers / aliases
# ---------------------
PARTICIPANT_COLUMNS = ["id", "name", "groups", "skills", "available_slots", "unavailable_slots", "active"]
TARGET_COLUMNS = ["id", "label", "capacity", "required_skills", "excluded_groups", "allowed_groups", "slot", "active"]
HISTORY_COLUMNS = ["participant_id", "target_id", "assigned_at"]

HEADER_ALIASES: Dict[str, set] = {
    # canonical -> set of aliases
    "id": {"id", "participant_id", "person_id", "target_id"},
    "name": {"name", "full name", "person"},
    "groups": {"groups", "group", "category"},
    "skills": {"skills", "skill"},
    "label": {"label", "task", "area", "target"},
    "capacity": {"capacity", "required_count", "required_capacity", "count"},
    "assigned_at": {"assigned_at", "timestamp", "date"},
}

LIST_SEPARATOR = ";"


def split_list(value) -> List[str]:
    """Split a ';'-separated cell into trimmed, non-empty tokens."""
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return [str(v).strip() for v in value if str(v).strip()]
    s = str(value).strip()
    if not s or s.lower() == "nan":
        return []
    return [tok.strip() for tok in s.split(LIST_SEPARATOR) if tok.strip()]
