"""Tests for the IC decision: hard gates, rubric, conditions and narrative"""
from dataclasses import replace

import pytest

from feasibility.assumptions import FeasibilityInputs
from feasibility.completeness import compute_completeness
from feasibility.decision import compute_ic_decision, conversion_ease_bucket
from feasibility.presets import DEFAULT_THRESHOLDS

from conftest import make_deal, make_pipeline


def decide(deal=None, inputs=None, contract_type="franchise", contact_count=1,
           has_inputs=True, thresholds=None):
    deal = deal or make_deal()
    inputs = inputs or FeasibilityInputs()
    outputs, brand, owner = make_pipeline(inputs, contract_type)
    completeness = compute_completeness(deal, has_inputs, contact_count)
    return compute_ic_decision(deal, inputs, outputs, brand, owner, completeness, thresholds)


def test_baseline_go():
    """Documented 150-key premium new build clears every gate and scores GO"""
    result = decide()
    assert not result.hard_gate_failed
    assert result.sub_scores == {
        "location": 20,
        "demand": 24,
        "conversion": 12,
        "owner": 15,
        "execution": 12,
    }, f"Unexpected sub-scores {result.sub_scores}"
    assert result.ic_score == 83
    assert result.decision == "go"
    assert result.confidence == "high"
    assert result.data_completeness == 92


def test_score_is_sum_of_sub_scores():
    for deal in (make_deal(), make_deal(location_score=7, risk_score=18, opening_type="conversion")):
        result = decide(deal=deal)
        assert result.ic_score == sum(result.sub_scores.values())


def test_sub_score_caps():
    """Out-of-range external scores are clamped to their bands"""
    high = decide(deal=make_deal(location_score=40, risk_score=-10))
    assert high.location_score == 25
    assert high.execution_score == 15
    low = decide(deal=make_deal(location_score=-5, risk_score=40))
    assert low.location_score == 0
    assert low.execution_score == 0


def test_conversion_credits_existing_structure():
    """Conversions score 6 points more than a new build on the same inputs"""
    new_build = decide(deal=make_deal(opening_type="new_build"),
                       inputs=FeasibilityInputs(opening_type="new_build"))
    conversion = decide(deal=make_deal(opening_type="conversion"),
                        inputs=FeasibilityInputs(opening_type="conversion"))
    assert conversion.conversion_score - new_build.conversion_score == 6


def test_hard_gate_forces_no_go():
    """A failed gate is NO-GO even when the rubric says GO"""
    result = decide(deal=make_deal(rooms_max=80, rooms_min=60), inputs=FeasibilityInputs(rooms=80))
    rooms_gate = result.hard_gates[1]
    assert not rooms_gate.passed
    assert "80 rooms below 120" in rooms_gate.reason
    assert result.ic_score >= DEFAULT_THRESHOLDS.go_at, "Rubric alone would say GO"
    assert result.decision == "no_go"
    assert any(f.startswith("Hard gate failed: Min Rooms") for f in result.red_flags)


def test_hard_gate_order():
    result = decide()
    names = [g.name for g in result.hard_gates]
    assert names[0].startswith("Data Completeness")
    assert names[1].startswith("Min Rooms")
    assert names[2].startswith("ADR")
    assert names[3].startswith("CAPEX/Key")
    assert all(g.reason is None for g in result.hard_gates)


def test_incomplete_data_fails_gate():
    """Below 50% completeness the deal cannot go to committee"""
    result = decide(has_inputs=False, contact_count=0, deal=make_deal(address="", lat=None, lon=None))
    assert result.data_completeness < 50
    assert result.hard_gate_failed
    assert result.decision == "no_go"
    assert any("insufficient for IC review" in f for f in result.red_flags)


def test_capex_and_adr_gates():
    inputs = FeasibilityInputs(adr=1000, capex_per_key=5_000_000)
    result = decide(inputs=inputs)
    gates = {g.name.split()[0]: g for g in result.hard_gates}
    assert not gates["ADR"].passed
    assert not gates["CAPEX/Key"].passed


def test_go_with_conditions_band():
    """Between the no-go and go thresholds the deal proceeds with conditions"""
    result = decide(deal=make_deal(location_score=8, risk_score=15))
    assert DEFAULT_THRESHOLDS.no_go_below <= result.ic_score < DEFAULT_THRESHOLDS.go_at
    assert result.decision == "go_with_conditions"


def test_thresholds_are_injectable():
    strict = replace(DEFAULT_THRESHOLDS, go_at=90)
    assert decide(thresholds=strict).decision == "go_with_conditions"


def test_conditions_order():
    """Capex, ADR, yield and fee conditions appear in a fixed order"""
    inputs = FeasibilityInputs(adr=1700, capex_per_key=3_500_000)
    result = decide(inputs=inputs)
    assert result.conditions[0].startswith("CAPEX/key")
    assert result.conditions[1].startswith("ADR")
    assert result.conditions[2].startswith("Improve YoC")


def test_dscr_condition_only_with_debt():
    inputs = FeasibilityInputs(debt_enabled=True, ltv=0.80, interest_rate=0.14)
    levered = decide(inputs=inputs)
    assert any(c.startswith("DSCR") for c in levered.conditions)
    assert not any(c.startswith("DSCR") for c in decide().conditions)


def test_economy_new_build_condition():
    deal = make_deal(segment="economy", rooms_min=80, rooms_max=100)
    inputs = FeasibilityInputs(segment="economy", rooms=100, adr=900, capex_per_key=600_000,
                               ffe_per_key=90_000)
    result = decide(deal=deal, inputs=inputs)
    assert result.conditions[-1].startswith("Consider conversion vs new build")


def test_infinite_payback_flag():
    result = decide(inputs=FeasibilityInputs(occupancy=0.0))
    assert "Simple payback not reached - average NOI is not positive." in result.red_flags


def test_narrative_is_four_paragraphs():
    result = decide()
    paragraphs = result.narrative.split("\n\n")
    assert len(paragraphs) == 4
    assert "IC Score is 83/100" in paragraphs[0]
    assert "GO recommendation with high confidence" in paragraphs[0]
    assert "No critical red flags" in paragraphs[3]
    assert ".." not in result.narrative


def test_narrative_lists_top_two_items():
    result = decide(inputs=FeasibilityInputs(adr=1700, capex_per_key=3_500_000))
    outlook = result.narrative.split("\n\n")[3]
    assert result.conditions[0].rstrip(".") in outlook
    assert result.conditions[1].rstrip(".") in outlook
    assert result.conditions[2].rstrip(".") not in outlook


def test_deterministic():
    assert decide() == decide()


@pytest.mark.parametrize("score,bucket", [(20, "high"), (16, "high"), (12, "moderate"), (9, "low")])
def test_conversion_ease_bucket(score, bucket):
    assert conversion_ease_bucket(score) == bucket


def test_narrative_without_opening_type():
    """A deal with no opening type still reads cleanly"""
    deal = make_deal(opening_type="")
    result = decide(deal=deal, inputs=FeasibilityInputs(opening_type=""))
    assert "as a Premium hotel project in Merida" in result.narrative
    assert "  " not in result.narrative
