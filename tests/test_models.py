# FILE: tests/test_models.py
from datetime import datetime

import pytest
from pydantic import ValidationError

from rotation_engine.engine_test_helpers import quick_participant, run_at
from rotation_engine.errors import ConfigError
from rotation_engine.models import Assignment, AssignmentRecord, StrategyConfig, Target


def test_target_capacity_must_be_positive():
    with pytest.raises(ValidationError):
        Target(id="t", capacity=0)
    assert Target(id="t").capacity == 1


def test_availability_predicate():
    anyone = quick_participant("a")
    assert anyone.is_available(None)
    assert anyone.is_available("mon")

    blocked = quick_participant("b", unavailable_slots=frozenset({"mon"}))
    assert not blocked.is_available("mon")
    assert blocked.is_available("tue")

    weekdays_only = quick_participant("c", available_slots=frozenset({"mon", "tue"}))
    assert weekdays_only.is_available("tue")
    assert not weekdays_only.is_available("sat")


def test_config_from_mapping_keeps_unknown_keys_in_params():
    cfg = StrategyConfig.from_mapping({"seed": 3, "rotation_weight": 0.8, "note": "spring"})
    assert cfg.seed == 3
    assert cfg.rotation_weight == 0.8
    assert cfg.params == {"note": "spring"}
    assert cfg.max_attempts == 50


def test_config_from_mapping_names_bad_field():
    with pytest.raises(ConfigError) as exc:
        StrategyConfig.from_mapping({"max_attempts": "lots"})
    assert exc.value.field == "max_attempts"


def test_assignment_records_share_one_timestamp():
    a = Assignment(mapping={"kitchen": ["a", "b"], "hall": ["c"]}, strategy="random_assignment",
                   attempts=1, seed=0)
    recs = a.records(assigned_at=run_at(3))
    assert {(r.participant_id, r.target_id) for r in recs} == {("a", "kitchen"), ("b", "kitchen"), ("c", "hall")}
    assert {r.assigned_at for r in recs} == {run_at(3)}
    assert a.participants_for("kitchen") == ["a", "b"]
    assert a.participants_for("missing") == []


def test_naive_record_timestamp_is_taken_as_utc():
    rec = AssignmentRecord(participant_id="a", target_id="k", assigned_at=datetime(2025, 1, 6))
    assert rec.assigned_at == run_at(0)
    assert rec.assigned_at.tzinfo is not None
