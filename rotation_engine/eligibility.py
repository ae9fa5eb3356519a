# FILE: rotation_engine/eligibility.py
"""
Hard eligibility rules shared by every strategy.

Group rules are checked before any scoring happens, so no strategy can trade
them away for fairness.
"""
from __future__ import annotations
from typing import Iterable, List, Set

from .models import Participant, Target


def is_group_eligible(participant: Participant, target: Target) -> bool:
    if participant.groups & target.excluded_groups:
        return False
    if target.allowed_groups is not None:
        return bool(participant.groups & target.allowed_groups)
    return True


def eligible_for_target(participants: Iterable[Participant], target: Target) -> List[Participant]:
    return [p for p in participants if is_group_eligible(p, target)]


def skill_match_ratio(participant: Participant, target: Target) -> float:
    """|skills ∩ required| / max(1, |required|); 1.0 when nothing is required."""
    if not target.required_skills:
        return 1.0
    hits = len(participant.skills & target.required_skills)
    return hits / max(1, len(target.required_skills))


def missing_skills(assigned: Iterable[Participant], target: Target) -> Set[str]:
    covered: Set[str] = set()
    for p in assigned:
        covered |= p.skills
    return set(target.required_skills) - covered
