# rotation_engine/io.py
from __future__ import annotations
import io
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from .constants import (
    HEADER_ALIASES, HISTORY_COLUMNS, PARTICIPANT_COLUMNS, TARGET_COLUMNS, split_list,
)
from .models import Assignment, AssignmentRecord, Participant, Target

TRUE_TOKENS = {"1", "true", "yes", "y", "t"}


def _header_map(cols: Iterable[str], canonical: Sequence[str]) -> Dict[str, str]:
    """
    Map provided columns -> canonical headers, case-insensitive, via HEADER_ALIASES.
    Unknown columns are left untouched.
    """
    canon = {c.lower(): c for c in canonical}
    out = {}
    for c in cols:
        lc = str(c).strip().lower()
        if lc in canon:
            out[c] = canon[lc]
            continue
        mapped = None
        for k, aliases in HEADER_ALIASES.items():
            if k in canonical and lc in aliases:
                mapped = k
                break
        out[c] = mapped if mapped else c
    return out


def _read(file_like) -> pd.DataFrame:
    if isinstance(file_like, (bytes, bytearray)):
        return pd.read_csv(io.BytesIO(file_like), dtype=str, keep_default_na=False)
    return pd.read_csv(file_like, dtype=str, keep_default_na=False)


def _require(df: pd.DataFrame, required: Sequence[str]) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def _as_bool(value, default: bool = True) -> bool:
    s = str(value).strip().lower()
    if not s:
        return default
    return s in TRUE_TOKENS


def _optional_set(value) -> Optional[frozenset]:
    tokens = split_list(value)
    return frozenset(tokens) if tokens else None


def load_participants_csv(file_like) -> List[Participant]:
    df = _read(file_like)
    df = df.rename(columns=_header_map(df.columns, PARTICIPANT_COLUMNS))
    _require(df, ["id"])
    if df["id"].duplicated().any():
        dupes = df[df["id"].duplicated()]["id"].tolist()
        raise ValueError(f"Duplicate participant id detected: {', '.join(dupes)}")

    out = []
    for _, r in df.iterrows():
        out.append(Participant(
            id=str(r["id"]).strip(),
            name=str(r.get("name", "")).strip(),
            groups=frozenset(split_list(r.get("groups"))),
            skills=frozenset(split_list(r.get("skills"))),
            available_slots=_optional_set(r.get("available_slots")),
            unavailable_slots=frozenset(split_list(r.get("unavailable_slots"))),
            active=_as_bool(r.get("active", "")),
        ))
    return out


def load_targets_csv(file_like) -> List[Target]:
    df = _read(file_like)
    df = df.rename(columns=_header_map(df.columns, TARGET_COLUMNS))
    _require(df, ["id"])

    out = []
    for _, r in df.iterrows():
        capacity = str(r.get("capacity", "")).strip()
        slot = str(r.get("slot", "")).strip()
        out.append(Target(
            id=str(r["id"]).strip(),
            label=str(r.get("label", "")).strip(),
            capacity=int(capacity) if capacity else 1,
            required_skills=frozenset(split_list(r.get("required_skills"))),
            excluded_groups=frozenset(split_list(r.get("excluded_groups"))),
            allowed_groups=_optional_set(r.get("allowed_groups")),
            slot=slot or None,
            active=_as_bool(r.get("active", "")),
        ))
    return out


def load_history_csv(file_like) -> List[AssignmentRecord]:
    df = _read(file_like)
    _require(df, HISTORY_COLUMNS)
    if df.empty:
        return []
    stamps = pd.to_datetime(df["assigned_at"], utc=True, format="ISO8601")
    return [
        AssignmentRecord(participant_id=str(pid), target_id=str(tid), assigned_at=ts.to_pydatetime())
        for pid, tid, ts in zip(df["participant_id"], df["target_id"], stamps)
    ]


def history_to_dataframe(records: Iterable[AssignmentRecord]) -> pd.DataFrame:
    rows = [
        {"participant_id": r.participant_id, "target_id": r.target_id, "assigned_at": r.assigned_at.isoformat()}
        for r in records
    ]
    return pd.DataFrame(rows, columns=HISTORY_COLUMNS)


def assignment_to_dataframe(
    assignment: Assignment,
    participants: Sequence[Participant] = (),
    targets: Sequence[Target] = (),
) -> pd.DataFrame:
    pid_to_name = {p.id: p.display_name for p in participants}
    tid_to_label = {t.id: t.display_name for t in targets}
    rows = []
    for tid, pids in assignment.mapping.items():
        for pid in pids:
            rows.append({
                "target_id": tid,
                "target": tid_to_label.get(tid, tid),
                "participant_id": pid,
                "participant": pid_to_name.get(pid, pid),
            })
    df = pd.DataFrame(rows, columns=["target_id", "target", "participant_id", "participant"])
    return df.sort_values(["target", "participant"]).reset_index(drop=True)


def dataframe_to_csv_bytes(df: pd.DataFrame) -> bytes:
    buf = io.StringIO()
    df.to_csv(buf, index=False)
    return buf.getvalue().encode("utf-8")


def generate_template_csv_bytes(kind: str = "participants") -> bytes:
    columns = {
        "participants": PARTICIPANT_COLUMNS,
        "targets": TARGET_COLUMNS,
        "history": HISTORY_COLUMNS,
    }.get(kind)
    if columns is None:
        raise ValueError(f"Unknown template kind: {kind}")
    return dataframe_to_csv_bytes(pd.DataFrame(columns=columns))
