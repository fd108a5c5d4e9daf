"""Tests for single-deal and batch evaluation"""
import logging

import config
from feasibility.assumptions import FeasibilityInputs
from feasibility.presets import DEFAULT_CONFIG
from pipeline.runner import (
    DealRequest, engine_config_from_settings, evaluate_deal, evaluate_deals, evaluations_to_frame,
)

from conftest import make_deal


def test_evaluate_deal_with_inputs():
    result = evaluate_deal(make_deal(), FeasibilityInputs(), contact_count=1)
    assert result.ok
    assert not result.inputs_from_presets
    assert result.warnings == ()
    assert result.decision.decision == "go"
    assert result.decision.ic_score == 83
    assert result.completeness.score == 92


def test_evaluate_deal_drafts_inputs():
    """Without underwriting inputs the deal is evaluated on preset drafts"""
    result = evaluate_deal(make_deal(), contact_count=1)
    assert result.inputs_from_presets
    assert result.inputs.segment == "premium"
    assert result.completeness.breakdown["feasibility"].earned == 0, \
        "Drafted inputs should not count as underwriting work"
    assert result.decision.data_completeness == 62


def test_evaluate_deals_keeps_order_and_isolates_failures(caplog):
    requests = [
        DealRequest(make_deal(name="A"), FeasibilityInputs(), contact_count=1),
        DealRequest(make_deal(name="B"), FeasibilityInputs(), contract_type="lease"),
        DealRequest(make_deal(name="C"), FeasibilityInputs(), contract_type="management"),
    ]
    with caplog.at_level(logging.WARNING):
        results = evaluate_deals(requests, max_workers=2, config=DEFAULT_CONFIG)

    assert [r.deal.name for r in results] == ["A", "B", "C"], "Results should keep request order"
    assert results[0].ok and results[2].ok
    assert not results[1].ok
    assert "lease" in results[1].error
    assert results[2].brand.contract_type == "management"
    assert "1 of 3 deal evaluation(s) failed" in caplog.text


def test_evaluate_deals_empty():
    assert evaluate_deals([], config=DEFAULT_CONFIG) == []


def test_evaluations_to_frame():
    results = evaluate_deals([
        DealRequest(make_deal(name="A"), FeasibilityInputs()),
        DealRequest(make_deal(name="B"), FeasibilityInputs(), contract_type="lease"),
    ], max_workers=1, config=DEFAULT_CONFIG)
    frame = evaluations_to_frame(results)
    assert list(frame["deal"]) == ["A", "B"]
    assert frame.loc[0, "decision"] == "go"
    assert frame.loc[0, "yield_on_cost"] == 0.106
    assert frame.loc[1, "error"] is not None


def test_engine_config_from_settings(monkeypatch):
    monkeypatch.setattr(config, "IC_GO_SCORE", 90)
    monkeypatch.setattr(config, "IC_MIN_NET_FEES_USD", 500_000.0)
    monkeypatch.setattr(config, "LOCAL_CURRENCY", "USD")
    cfg = engine_config_from_settings()
    assert cfg.thresholds.go_at == 90
    assert cfg.thresholds.min_net_fees_usd == 500_000.0
    assert cfg.currency == "USD"
    assert cfg.presets is DEFAULT_CONFIG.presets


def test_single_and_batch_share_settings(monkeypatch):
    """One deal on its own and in a batch gets the same decision under env overrides"""
    monkeypatch.setattr(config, "IC_GO_SCORE", 90)
    request = DealRequest(make_deal(), FeasibilityInputs(), contact_count=1)

    single = evaluate_deal(request.deal, request.inputs, contact_count=1)
    batch = evaluate_deals([request], max_workers=1)[0]

    assert single.decision.decision == "go_with_conditions", "Score 83 is below the raised GO cutoff"
    assert single.decision == batch.decision


def test_drafted_inputs_use_configured_fx(monkeypatch):
    monkeypatch.setattr(config, "DEFAULT_FX_RATE", 20.0)
    result = evaluate_deal(make_deal(), contact_count=1)
    assert result.inputs.fx_rate == 20.0
