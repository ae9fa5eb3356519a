# FILE: rotation_engine/fairness.py
from __future__ import annotations
from typing import Dict, Iterable, List, Mapping, Optional, Sequence
from datetime import datetime

import numpy as np

from .models import AssignmentRecord, ParticipantHistory


def history_runs(history: Iterable[AssignmentRecord], window: Optional[int] = None) -> List[datetime]:
    """Distinct run timestamps, newest first, cut to the last `window` runs."""
    runs = sorted({r.assigned_at for r in history}, reverse=True)
    if window is not None:
        runs = runs[:window]
    return runs


def summarize_history(
    history: Sequence[AssignmentRecord],
    window: Optional[int] = None,
) -> Dict[str, ParticipantHistory]:
    """
    Per participant: last target, last assignment time, total assignments in the
    window and, per target, how many runs ago they last worked it.
    Recomputed from the supplied records on every call.
    """
    runs = history_runs(history, window)
    run_index = {ts: i for i, ts in enumerate(runs)}
    out: Dict[str, ParticipantHistory] = {}
    for rec in sorted(history, key=lambda r: r.assigned_at, reverse=True):
        idx = run_index.get(rec.assigned_at)
        if idx is None:
            continue  # outside the window
        h = out.setdefault(rec.participant_id, ParticipantHistory())
        if h.last_assigned_at is None:
            h.last_target = rec.target_id
            h.last_assigned_at = rec.assigned_at
        h.total += 1
        if rec.target_id not in h.last_run_by_target:
            h.last_run_by_target[rec.target_id] = idx
    return out


def recency_score(summary: Optional[ParticipantHistory], target_id: str, n_runs: int) -> float:
    """1.0 when the participant never worked this target in the window, 0.0 when they did last run."""
    if summary is None or n_runs <= 0:
        return 1.0
    idx = summary.last_run_by_target.get(target_id)
    if idx is None:
        return 1.0
    return idx / n_runs


def load_scores(summaries: Mapping[str, ParticipantHistory], participant_ids: Iterable[str]) -> Dict[str, float]:
    """
    Favor underused participants: (max - count) / max over the given ids.
    Everyone scores 1.0 when nobody has any assignments yet.
    """
    totals = {pid: (summaries[pid].total if pid in summaries else 0) for pid in participant_ids}
    if not totals:
        return {}
    mx = max(totals.values())
    if mx <= 0:
        return {pid: 1.0 for pid in totals}
    return {pid: (mx - cnt) / mx for pid, cnt in totals.items()}


def check_evenness(counts: List[int]) -> bool:
    return not counts or (max(counts) - min(counts) <= 1)


def assignment_counts(mapping: Mapping[str, Sequence[str]], participant_ids: Iterable[str]) -> Dict[str, int]:
    counts = {pid: 0 for pid in participant_ids}
    for pids in mapping.values():
        for pid in pids:
            counts[pid] = counts.get(pid, 0) + 1
    return counts


def distribution_stats(mapping: Mapping[str, Sequence[str]], participant_ids: Iterable[str]) -> Dict[str, float]:
    """Mean / variance / std-dev of assignments per participant (population statistics)."""
    counts = assignment_counts(mapping, participant_ids)
    if not counts:
        return {}
    arr = np.array(list(counts.values()), dtype=float)
    return {
        "mean_assignments": float(arr.mean()),
        "variance": float(arr.var()),
        "std_deviation": float(arr.std()),
        "total_assignments": float(arr.sum()),
        "even": check_evenness([int(c) for c in arr]),
    }
