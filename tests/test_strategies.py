# FILE: tests/test_strategies.py
import numpy as np
import pytest

from rotation_engine.constants import FALLBACK_NEVER, FALLBACK_SHORT
from rotation_engine.engine_test_helpers import quick_history, quick_participant, quick_target
from rotation_engine.errors import ConfigError
from rotation_engine.models import StrategyConfig
from rotation_engine.strategies import STRATEGIES
from rotation_engine.strategy_balanced import balanced_rotation, validate_rotation_config
from rotation_engine.strategy_random import random_assignment
from rotation_engine.strategy_skill import skill_based, validate_skill_config


def _people(n=6):
    names = ["alice", "bob", "carol", "dave", "erin", "frank", "gina", "hank"]
    return [quick_participant(name) for name in names[:n]]


def test_registry_is_closed_set():
    assert sorted(STRATEGIES) == ["balanced_rotation", "random_assignment", "skill_based"]


def test_random_respects_group_and_capacity():
    people = [quick_participant("alice", ["A"]), quick_participant("bob", ["B"]),
              quick_participant("carol", ["A"])]
    targets = [quick_target("toilet_a", excludes=["B"]), quick_target("hall", capacity=2)]
    for seed in range(50):
        out = random_assignment(people, targets, [], StrategyConfig(), np.random.default_rng(seed))
        assert "bob" not in out["toilet_a"]
        assert len(out["toilet_a"]) == 1
        assert len(out["hall"]) == 2
        assert len(set(out["toilet_a"] + out["hall"])) == 3


def test_random_returns_short_candidate_instead_of_raising():
    people = _people(2)
    targets = [quick_target("kitchen", capacity=3)]
    out = random_assignment(people, targets, [], StrategyConfig(), np.random.default_rng(0))
    assert sorted(out["kitchen"]) == ["alice", "bob"]


def test_random_multi_assignment_allowed():
    people = _people(1)
    targets = [quick_target("a"), quick_target("b")]
    cfg = StrategyConfig(allow_multi_assignment=True)
    out = random_assignment(people, targets, [], cfg, np.random.default_rng(0))
    assert out == {"a": ["alice"], "b": ["alice"]}


def test_balanced_rotation_avoids_recent_kitchen():
    people = _people(6)
    history = quick_history([
        {"kitchen": ["alice", "bob"], "hallway": ["carol"]},
        {"kitchen": ["alice", "dave"], "hallway": ["erin"]},
    ])
    targets = [quick_target("kitchen", capacity=2), quick_target("hallway")]
    cfg = StrategyConfig(rotation_weight=0.8, balance_weight=0.2)
    for seed in range(30):
        out = balanced_rotation(people, targets, history, cfg, np.random.default_rng(seed))
        assert "alice" not in out["kitchen"]
        # frank has no history at all and should always land a seat
        assert "frank" in out["kitchen"] + out["hallway"]


def test_balanced_rotation_prefers_light_load():
    people = _people(3)
    history = quick_history([{"x": ["alice", "bob"]}, {"y": ["alice"]}])
    targets = [quick_target("z")]
    cfg = StrategyConfig(rotation_weight=0.0, balance_weight=1.0)
    out = balanced_rotation(people, targets, history, cfg, np.random.default_rng(1))
    assert out["z"] == ["carol"]


def test_balanced_rotation_fills_constrained_target_first():
    people = [quick_participant("alice", ["A"]), quick_participant("bob", ["B"])]
    targets = [quick_target("open"), quick_target("a_only", allowed_groups=frozenset({"A"}))]
    for seed in range(20):
        out = balanced_rotation(people, targets, [], StrategyConfig(), np.random.default_rng(seed))
        assert out == {"open": ["bob"], "a_only": ["alice"]}


def test_skill_based_picks_the_only_leader():
    people = _people(5)[:4] + [quick_participant("erin", skills=["leadership"])]
    targets = [quick_target("lead", skills=["leadership"])]
    cfg = StrategyConfig(skill_threshold=0.5)
    hits = sum(
        skill_based(people, targets, [], cfg, np.random.default_rng(seed))["lead"] == ["erin"]
        for seed in range(100)
    )
    assert hits >= 95


def test_skill_based_ranks_by_match_ratio():
    people = [quick_participant("half", skills=["a"]), quick_participant("full", skills=["a", "b"])]
    targets = [quick_target("t", skills=["a", "b"])]
    out = skill_based(people, targets, [], StrategyConfig(), np.random.default_rng(0))
    assert out["t"] == ["full"]


def test_skill_based_falls_back_when_nobody_qualifies():
    people = _people(3)
    targets = [quick_target("forklift", skills=["forklift"])]
    out = skill_based(people, targets, [], StrategyConfig(), np.random.default_rng(0))
    assert len(out["forklift"]) == 1

    never = StrategyConfig(skill_fallback=FALLBACK_NEVER)
    out = skill_based(people, targets, [], never, np.random.default_rng(0))
    assert out["forklift"] == []


def test_skill_based_short_fallback_tops_up():
    people = _people(3) + [quick_participant("medic", skills=["first_aid"])]
    targets = [quick_target("aid", capacity=2, skills=["first_aid"])]

    out = skill_based(people, targets, [], StrategyConfig(), np.random.default_rng(0))
    assert out["aid"] == ["medic"]

    short = StrategyConfig(skill_fallback=FALLBACK_SHORT)
    out = skill_based(people, targets, [], short, np.random.default_rng(0))
    assert out["aid"][0] == "medic"
    assert len(set(out["aid"])) == 2


def test_skill_based_zero_required_skills_accepts_everyone():
    people = _people(2)
    out = skill_based(people, [quick_target("any", capacity=2)], [], StrategyConfig(), np.random.default_rng(0))
    assert sorted(out["any"]) == ["alice", "bob"]


@pytest.mark.parametrize("field,value", [
    ("rotation_weight", -0.1),
    ("balance_weight", 1.5),
    ("jitter", -1.0),
])
def test_rotation_config_errors(field, value):
    with pytest.raises(ConfigError) as exc:
        validate_rotation_config(StrategyConfig(**{field: value}))
    assert exc.value.field == field


def test_skill_config_errors():
    with pytest.raises(ConfigError) as exc:
        validate_skill_config(StrategyConfig(skill_threshold=1.5))
    assert exc.value.field == "skill_threshold"
    with pytest.raises(ConfigError) as exc:
        validate_skill_config(StrategyConfig(skill_fallback="sometimes"))
    assert exc.value.field == "skill_fallback"
