# rotation_engine/scheduler.py
from __future__ import annotations
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from .engine import RuleEngine, default_engine
from .errors import EngineError, NoValidAssignmentError
from .models import (
    Assignment, AssignmentRecord, AssignmentRequest, GenerationResult, Participant, Target,
)

logger = logging.getLogger(__name__)


def should_run(history: Sequence[AssignmentRecord], interval_days: int, now: Optional[datetime] = None) -> bool:
    """True on the first run or once `interval_days` have passed since the latest recorded run."""
    if not history:
        return True
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    last = max(r.assigned_at for r in history)
    elapsed = now - last
    logger.debug("Days since last run: %d (interval: %d)", elapsed.days, interval_days)
    return elapsed >= timedelta(days=interval_days)


def _filter(items, ids: Optional[Sequence[str]]):
    if ids is None:
        return list(items)
    wanted = set(ids)
    return [i for i in items if i.id in wanted]


def run_assignment(
    source,
    sink,
    request: AssignmentRequest,
    engine: Optional[RuleEngine] = None,
    interval_days: Optional[int] = None,
    now: Optional[datetime] = None,
) -> GenerationResult:
    """
    Fetch fresh snapshots, generate, and hand the accepted Assignment to the sink.

    Engine errors come back as a structured GenerationResult instead of raising.
    When `interval_days` is given and the cadence has not elapsed, the run is
    skipped unless `request.force` is set.
    """
    engine = engine or default_engine()
    config = request.config

    if interval_days is not None and not request.force:
        if not should_run(source.list_history(None), interval_days, now):
            logger.info("It has NOT been %d days since the last run. Skipping.", interval_days)
            return GenerationResult(skipped=True)

    participants = _filter(source.list_active_participants(), request.participant_ids)
    targets = _filter(source.list_active_targets(), request.target_ids)
    history = source.list_history(config.history_window)

    try:
        assignment = engine.generate(request.strategy, participants, targets, history, config)
    except NoValidAssignmentError as exc:
        return GenerationResult(
            error=str(exc), error_kind=exc.kind, attempts=exc.attempts, verdicts=exc.verdicts,
        )
    except EngineError as exc:
        return GenerationResult(error=str(exc), error_kind=exc.kind, field=getattr(exc, "field", None))

    if sink is not None:
        sink.save(assignment)
        logger.info("Assignment history has been saved.")
    return GenerationResult(assignment=assignment, attempts=assignment.attempts, verdicts=assignment.warnings)


def format_assignment(
    assignment: Assignment,
    participants: Sequence[Participant] = (),
    targets: Sequence[Target] = (),
) -> List[str]:
    """Printable summary: targets by label, names sorted within each target."""
    pid_to_name = {p.id: p.display_name for p in participants}
    tid_to_label = {t.id: t.display_name for t in targets}
    width = max([len(tid_to_label.get(tid, tid)) for tid in assignment.mapping] + [12])
    lines = ["Work Distribution Results", "=" * 30]
    for tid in sorted(assignment.mapping, key=lambda t: tid_to_label.get(t, t)):
        names = sorted(pid_to_name.get(pid, pid) for pid in assignment.mapping[tid])
        lines.append(f"{tid_to_label.get(tid, tid):<{width}} : {', '.join(names)}")
    for v in assignment.warnings:
        lines.append(f"warning [{v.validator}]: {v.message}")
    return lines
