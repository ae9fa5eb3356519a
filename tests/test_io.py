# FILE: tests/test_io.py
import pytest

from rotation_engine.engine_test_helpers import quick_history, quick_participant, quick_target, run_at
from rotation_engine.io import (
    assignment_to_dataframe, dataframe_to_csv_bytes, generate_template_csv_bytes, history_to_dataframe,
    load_history_csv, load_participants_csv, load_targets_csv,
)
from rotation_engine.models import Assignment


def test_participants_csv_with_aliases_and_lists():
    csv = (
        b"Participant_ID,Full Name,Group,Skills,unavailable_slots,active\n"
        b"p1,Alice,A,first_aid; driving,mon,yes\n"
        b"p2,Bob,B;night,,,0\n"
        b"p3,,,,,\n"
    )
    people = load_participants_csv(csv)
    assert [p.id for p in people] == ["p1", "p2", "p3"]
    alice, bob, third = people
    assert alice.name == "Alice"
    assert alice.skills == {"first_aid", "driving"}
    assert alice.unavailable_slots == {"mon"}
    assert alice.available_slots is None
    assert bob.groups == {"B", "night"}
    assert not bob.active
    assert third.active
    assert third.display_name == "p3"


def test_participants_csv_rejects_duplicates_and_missing_id():
    with pytest.raises(ValueError, match="Duplicate"):
        load_participants_csv(b"id,name\np1,A\np1,B\n")
    with pytest.raises(ValueError, match="Missing required columns"):
        load_participants_csv(b"name,groups\nAlice,A\n")


def test_targets_csv():
    csv = (
        b"id,task,required_count,excluded_groups,allowed_groups,slot\n"
        b"toilet_a,Toilet A,1,B,,\n"
        b"kitchen,Kitchen,,,staff;crew,mon\n"
    )
    toilet, kitchen = load_targets_csv(csv)
    assert toilet.label == "Toilet A"
    assert toilet.excluded_groups == {"B"}
    assert toilet.allowed_groups is None
    assert toilet.slot is None
    assert kitchen.capacity == 1
    assert kitchen.allowed_groups == {"staff", "crew"}
    assert kitchen.slot == "mon"


def test_history_csv_written_and_read_back(tmp_path):
    records = quick_history([{"kitchen": ["alice"]}, {"hallway": ["bob", "carol"]}])
    path = tmp_path / "history.csv"
    history_to_dataframe(records).to_csv(path, index=False)
    loaded = load_history_csv(str(path))
    assert [(r.participant_id, r.target_id) for r in loaded] == [
        ("alice", "kitchen"), ("bob", "hallway"), ("carol", "hallway"),
    ]
    assert loaded[1].assigned_at == run_at(1)


def test_empty_history_csv():
    assert load_history_csv(b"participant_id,target_id,assigned_at\n") == []


def test_assignment_dataframe_uses_names_and_sorts():
    a = Assignment(mapping={"kitchen": ["p2", "p1"], "hall": ["p3"]}, strategy="random_assignment",
                   attempts=1, seed=0)
    people = [quick_participant("p1", name="Zoe"), quick_participant("p2", name="Adam")]
    df = assignment_to_dataframe(a, people, [quick_target("kitchen")])
    assert list(df["target"]) == ["Kitchen", "Kitchen", "hall"]
    assert list(df["participant"]) == ["Adam", "Zoe", "p3"]
    assert dataframe_to_csv_bytes(df).startswith(b"target_id,target,participant_id,participant\n")


def test_templates():
    assert generate_template_csv_bytes("history") == b"participant_id,target_id,assigned_at\n"
    assert generate_template_csv_bytes().startswith(b"id,name,groups")
    with pytest.raises(ValueError):
        generate_template_csv_bytes("rota")
