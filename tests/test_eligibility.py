# FILE: tests/test_eligibility.py
from rotation_engine.eligibility import is_group_eligible, missing_skills, skill_match_ratio
from rotation_engine.engine_test_helpers import quick_participant, quick_target


def test_group_exclusion():
    toilet_a = quick_target("toilet_a", excludes=["B"])
    assert is_group_eligible(quick_participant("alice", ["A"]), toilet_a)
    assert not is_group_eligible(quick_participant("bob", ["B"]), toilet_a)
    assert not is_group_eligible(quick_participant("both", ["A", "B"]), toilet_a)


def test_allowed_groups():
    t = quick_target("lab", allowed_groups=frozenset({"staff"}))
    assert is_group_eligible(quick_participant("s", ["staff"]), t)
    assert not is_group_eligible(quick_participant("v", ["visitor"]), t)
    assert not is_group_eligible(quick_participant("n"), t)


def test_skill_ratio_and_missing():
    t = quick_target("stage", skills=["lights", "sound"])
    p = quick_participant("p", skills=["sound", "juggling"])
    assert skill_match_ratio(p, t) == 0.5
    assert skill_match_ratio(p, quick_target("any")) == 1.0
    assert missing_skills([p], t) == {"lights"}
