"""Tests for plain-dict conversion of engine records"""
import json
import math

import pytest

from feasibility.assumptions import FeasibilityInputs
from feasibility.projection import compute_feasibility
from feasibility.serialization import inputs_from_dict, outputs_from_dict, snake_case, to_dict


def test_outputs_survive_json(baseline_outputs):
    """Outputs stored as a JSON blob come back equal"""
    blob = json.dumps(to_dict(baseline_outputs))
    assert outputs_from_dict(json.loads(blob)) == baseline_outputs


def test_to_dict_lists_sequences(baseline_outputs):
    data = to_dict(baseline_outputs)
    assert isinstance(data["years"], list)
    assert data["years"][2]["noi"] == 51_750_631


def test_to_dict_rejects_plain_objects():
    with pytest.raises(TypeError):
        to_dict({"rooms": 10})


@pytest.mark.parametrize("key,expected", [
    ("capexPerKey", "capex_per_key"),
    ("fnbRevenuePct", "fnb_revenue_pct"),
    ("adr", "adr"),
    ("ramp_up_years", "ramp_up_years"),
])
def test_snake_case(key, expected):
    assert snake_case(key) == expected


def test_inputs_from_camel_case():
    """Stored camelCase rows map onto inputs; unknown keys and nulls are dropped"""
    inputs = inputs_from_dict({
        "rooms": 120,
        "capexPerKey": 2_000_000,
        "gopMargin": 0.35,
        "fxRate": None,
        "dealId": "abc-123",
    })
    assert inputs.rooms == 120
    assert inputs.capex_per_key == 2_000_000
    assert inputs.gop_margin == 0.35
    assert inputs.fx_rate == FeasibilityInputs().fx_rate


def test_inputs_round_trip():
    inputs = FeasibilityInputs(rooms=90, segment="economy", debt_enabled=True)
    assert inputs_from_dict(to_dict(inputs)) == inputs


def test_unreached_payback_is_strict_json():
    """A zero-NOI deal stores its infinite payback as null and reads it back"""
    outputs = compute_feasibility(FeasibilityInputs(occupancy=0.0))
    blob = json.dumps(to_dict(outputs), allow_nan=False)
    data = json.loads(blob)
    assert data["simple_payback"] is None
    assert data["sensitivities"]["capex_up_15"]["simple_payback"] is None

    restored = outputs_from_dict(data)
    assert math.isinf(restored.simple_payback)
    assert math.isinf(restored.sensitivities.capex_up_15.simple_payback)
    assert restored == outputs
