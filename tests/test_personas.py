"""Tests for council/personas.py."""

import pytest

from council.personas import PERSONAS, clerk_persona, debating_personas, get_persona


def test_roster_has_five_distinct_personas():
    assert len(PERSONAS) == 5
    assert len({p.id for p in PERSONAS}) == 5
    assert len({p.role_tag for p in PERSONAS}) == 5


def test_debate_order():
    assert [p.id for p in debating_personas()] == [
        "alpha-hunter",
        "risk-sentinel",
        "macro-oracle",
        "devils-advocate",
    ]


def test_clerk_is_not_a_debater():
    clerk = clerk_persona()
    assert clerk.role_tag == "clerk"
    assert clerk not in debating_personas()


def test_risk_persona_carries_veto_instruction():
    assert "VETO" in get_persona("risk-sentinel").directive_template


def test_get_persona_unknown_raises():
    with pytest.raises(KeyError):
        get_persona("moon-boy")


def test_personas_are_immutable():
    with pytest.raises(AttributeError):
        PERSONAS[0].display_name = "Renamed"  # type: ignore[misc]
