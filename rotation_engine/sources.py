# FILE: rotation_engine/sources.py
"""
Boundary collaborators around the engine.

Sources hand the engine fresh snapshots on every call (nothing is cached), and
sinks are the only place history is ever written.
"""
from __future__ import annotations
import logging
import os
from typing import Dict, List, Optional, Sequence, Union

from .fairness import history_runs
from .io import history_to_dataframe, load_history_csv, load_participants_csv, load_targets_csv
from .models import Assignment, AssignmentRecord, Participant, Target

logger = logging.getLogger(__name__)


def window_history(history: Sequence[AssignmentRecord], window_size: Optional[int]) -> List[AssignmentRecord]:
    """Records belonging to the last `window_size` runs (all records when None)."""
    if window_size is None:
        return list(history)
    keep = set(history_runs(history, window_size))
    return [r for r in history if r.assigned_at in keep]


def trim_per_participant(history: Sequence[AssignmentRecord], limit: Optional[int]) -> List[AssignmentRecord]:
    """Keep only each participant's `limit` most recent records."""
    if limit is None:
        return list(history)
    seen: Dict[str, int] = {}
    kept = []
    for rec in sorted(history, key=lambda r: r.assigned_at, reverse=True):
        n = seen.get(rec.participant_id, 0)
        if n < limit:
            kept.append(rec)
            seen[rec.participant_id] = n + 1
    return sorted(kept, key=lambda r: r.assigned_at)


class MemorySource:
    def __init__(self, participants: Sequence[Participant], targets: Sequence[Target],
                 history: Sequence[AssignmentRecord] = ()):
        self.participants = list(participants)
        self.targets = list(targets)
        self.history = list(history)

    def list_active_participants(self) -> List[Participant]:
        return [p for p in self.participants if p.active]

    def list_active_targets(self) -> List[Target]:
        return [t for t in self.targets if t.active]

    def list_history(self, window_size: Optional[int] = None) -> List[AssignmentRecord]:
        return window_history(self.history, window_size)


class CsvSource:
    """Reads participants/targets/history from disk on every call."""

    def __init__(self, participants_csv: str, targets: Union[str, Sequence[Target]],
                 history_csv: Optional[str] = None):
        self.participants_csv = participants_csv
        self.targets = targets
        self.history_csv = history_csv

    def list_active_participants(self) -> List[Participant]:
        return [p for p in load_participants_csv(self.participants_csv) if p.active]

    def list_active_targets(self) -> List[Target]:
        targets = load_targets_csv(self.targets) if isinstance(self.targets, str) else list(self.targets)
        return [t for t in targets if t.active]

    def list_history(self, window_size: Optional[int] = None) -> List[AssignmentRecord]:
        if not self.history_csv or not os.path.exists(self.history_csv):
            return []
        return window_history(load_history_csv(self.history_csv), window_size)


class MemorySink:
    def __init__(self, history: Optional[List[AssignmentRecord]] = None, max_per_participant: Optional[int] = None):
        self.history: List[AssignmentRecord] = history if history is not None else []
        self.saved: List[Assignment] = []
        self.max_per_participant = max_per_participant

    def save(self, assignment: Assignment) -> List[AssignmentRecord]:
        records = assignment.records()
        self.saved.append(assignment)
        self.history[:] = trim_per_participant(self.history + records, self.max_per_participant)
        return records


class CsvHistorySink:
    """Appends accepted assignments to a history CSV."""

    def __init__(self, history_csv: str, max_per_participant: Optional[int] = None):
        self.history_csv = history_csv
        self.max_per_participant = max_per_participant

    def save(self, assignment: Assignment) -> List[AssignmentRecord]:
        existing = load_history_csv(self.history_csv) if os.path.exists(self.history_csv) else []
        records = assignment.records()
        merged = trim_per_participant(existing + records, self.max_per_participant)
        folder = os.path.dirname(self.history_csv)
        if folder:
            os.makedirs(folder, exist_ok=True)
        history_to_dataframe(merged).to_csv(self.history_csv, index=False)
        logger.info("Saved %d assignment records to %s", len(records), self.history_csv)
        return records
