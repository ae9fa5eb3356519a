# FILE: rotation_engine/validators.py
"""
Stateless checks run against every candidate.

Each validator returns exactly one ValidationVerdict. Only error-severity
failures block acceptance; warnings travel with the accepted Assignment.
"""
from __future__ import annotations
from collections import Counter
from typing import Callable, Dict, List, NamedTuple, Sequence

from .constants import AVAILABILITY_CHECK, CAPACITY_CHECK, ERROR, SKILL_MATCHING
from .eligibility import missing_skills
from .models import CandidateAssignment, Participant, StrategyConfig, Target, ValidationVerdict


def capacity_check(
    candidate: CandidateAssignment,
    participants: Sequence[Participant],
    targets: Sequence[Target],
    config: StrategyConfig,
) -> ValidationVerdict:
    problems: List[str] = []
    bad_targets: List[str] = []
    bad_people: List[str] = []

    for target in targets:
        pids = candidate.get(target.id, [])
        distinct = set(pids)
        if len(distinct) != len(pids):
            dupes = sorted(pid for pid, n in Counter(pids).items() if n > 1)
            problems.append(f"Target '{target.display_name}' lists {', '.join(dupes)} more than once")
            bad_targets.append(target.id)
            bad_people.extend(dupes)
        if len(distinct) < target.capacity:
            problems.append(f"Target '{target.display_name}' has {len(distinct)} assignments but needs {target.capacity}")
            bad_targets.append(target.id)
        elif config.strict_capacity and len(pids) > target.capacity:
            problems.append(f"Target '{target.display_name}' has {len(pids)} assignments but only needs {target.capacity}")
            bad_targets.append(target.id)

    if not config.allow_multi_assignment:
        per_person = Counter(pid for pids in candidate.values() for pid in set(pids))
        multi = sorted(pid for pid, n in per_person.items() if n > 1)
        if multi:
            problems.append(f"Assigned to more than one target: {', '.join(multi)}")
            bad_people.extend(multi)

    return ValidationVerdict(
        validator=CAPACITY_CHECK,
        severity=ERROR,
        passed=not problems,
        message="; ".join(problems) if problems else "All targets have appropriate capacity",
        targets=sorted(set(bad_targets)),
        participants=sorted(set(bad_people)),
    )


def availability_check(
    candidate: CandidateAssignment,
    participants: Sequence[Participant],
    targets: Sequence[Target],
    config: StrategyConfig,
) -> ValidationVerdict:
    by_id = {p.id: p for p in participants}
    names: List[str] = []
    bad_targets: List[str] = []
    bad_people: List[str] = []
    for target in targets:
        if target.slot is None:
            continue
        for pid in candidate.get(target.id, []):
            p = by_id.get(pid)
            if p is not None and not p.is_available(target.slot):
                names.append(f"{p.display_name} ({target.slot})")
                bad_targets.append(target.id)
                bad_people.append(pid)

    return ValidationVerdict(
        validator=AVAILABILITY_CHECK,
        severity=config.availability_severity,
        passed=not names,
        message=("Unavailable participants assigned: " + ", ".join(names)) if names
        else "All assigned participants are available",
        targets=sorted(set(bad_targets)),
        participants=sorted(set(bad_people)),
    )


def skill_matching(
    candidate: CandidateAssignment,
    participants: Sequence[Participant],
    targets: Sequence[Target],
    config: StrategyConfig,
) -> ValidationVerdict:
    by_id = {p.id: p for p in participants}
    issues: List[str] = []
    details: Dict[str, List[str]] = {}
    for target in targets:
        if not target.required_skills:
            continue
        assigned = [by_id[pid] for pid in candidate.get(target.id, []) if pid in by_id]
        missing = missing_skills(assigned, target)
        coverage = 1.0 - len(missing) / len(target.required_skills)
        if coverage < config.required_match:
            details[target.id] = sorted(missing)
            issues.append(
                f"Target '{target.display_name}' covers {coverage:.0%} of required skills, missing: {', '.join(sorted(missing))}"
            )

    return ValidationVerdict(
        validator=SKILL_MATCHING,
        severity=config.skill_match_severity,
        passed=not issues,
        message="; ".join(issues) if issues else "All assignments have adequate skill matching",
        targets=sorted(details),
        details=details,
    )


ValidateFn = Callable[[CandidateAssignment, Sequence[Participant], Sequence[Target], StrategyConfig], ValidationVerdict]


class Validator(NamedTuple):
    name: str
    validate: ValidateFn


VALIDATORS: Dict[str, Validator] = {
    v.name: v
    for v in (
        Validator(CAPACITY_CHECK, capacity_check),
        Validator(AVAILABILITY_CHECK, availability_check),
        Validator(SKILL_MATCHING, skill_matching),
    )
}
