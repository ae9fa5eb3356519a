"""
Internal helpers for tests (not imported by the engine).
"""
from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from .models import AssignmentRecord, Participant, Target

EPOCH = datetime(2025, 1, 6, tzinfo=timezone.utc)


def quick_participant(pid: str, groups: Iterable[str] = (), skills: Iterable[str] = (),
                      name: Optional[str] = None, **kw) -> Participant:
    return Participant(id=pid, name=name or pid.capitalize(), groups=frozenset(groups),
                       skills=frozenset(skills), **kw)


def quick_target(tid: str, capacity: int = 1, excludes: Iterable[str] = (),
                 skills: Iterable[str] = (), **kw) -> Target:
    kw.setdefault("label", tid.replace("_", " ").title())
    return Target(id=tid, capacity=capacity, excluded_groups=frozenset(excludes),
                  required_skills=frozenset(skills), **kw)


def run_at(n: int) -> datetime:
    """Timestamp of the n-th run, 14 days apart."""
    return EPOCH + timedelta(days=14 * n)


def quick_history(runs: List[dict]) -> List[AssignmentRecord]:
    """runs[i] = {target_id: [participant ids]} for run i (oldest first)."""
    out = []
    for i, run in enumerate(runs):
        for tid, pids in run.items():
            out.extend(AssignmentRecord(participant_id=pid, target_id=tid, assigned_at=run_at(i)) for pid in pids)
    return out
