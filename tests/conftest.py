"""Shared builders for the engine tests."""
import pytest

from feasibility.assumptions import DealRecord, FeasibilityInputs
from feasibility.completeness import compute_completeness
from feasibility.economics import compute_brand_economics, compute_owner_economics
from feasibility.projection import compute_feasibility


def make_deal(**overrides) -> DealRecord:
    """A fully documented 150-key premium deal, past the lead stage."""
    values = dict(
        name="Hotel Centro Historico",
        city="Merida",
        state="Yucatan",
        address="Calle 60 #500",
        lat=20.9674,
        lon=-89.5926,
        segment="premium",
        opening_type="new_build",
        stage="qualified",
        rooms_min=120,
        rooms_max=150,
        score_total=75,
        location_score=20,
        risk_score=5,
    )
    values.update(overrides)
    return DealRecord(**values)


def make_pipeline(inputs: FeasibilityInputs, contract_type: str = "franchise"):
    """Outputs, brand and owner economics for a set of inputs."""
    outputs = compute_feasibility(inputs)
    brand = compute_brand_economics(inputs, outputs, contract_type)
    owner = compute_owner_economics(inputs, outputs)
    return outputs, brand, owner


@pytest.fixture
def baseline_inputs():
    return FeasibilityInputs()


@pytest.fixture
def baseline_outputs(baseline_inputs):
    return compute_feasibility(baseline_inputs)


@pytest.fixture
def full_deal():
    return make_deal()


@pytest.fixture
def full_completeness(full_deal):
    return compute_completeness(full_deal, has_feasibility_inputs=True, contact_count=1)
