"""Run the full evaluation pipeline for one deal or a batch of deals."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace

import pandas as pd

import config as settings
from feasibility.assumptions import DealRecord, FeasibilityInputs
from feasibility.completeness import CompletenessScore, compute_completeness
from feasibility.decision import ICDecision, compute_ic_decision
from feasibility.economics import (
    BrandEconomics, OwnerEconomics, compute_brand_economics, compute_owner_economics,
)
from feasibility.presets import DEFAULT_CONFIG, EngineConfig, PresetWarning, preset_warnings
from feasibility.projection import FeasibilityOutputs, compute_feasibility
from pipeline.deal_mapping import build_inputs

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None):
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def engine_config_from_settings() -> EngineConfig:
    """EngineConfig with currency and IC cutoffs taken from the environment."""
    thresholds = replace(
        DEFAULT_CONFIG.thresholds,
        min_net_fees_usd=settings.IC_MIN_NET_FEES_USD,
        go_at=settings.IC_GO_SCORE,
        no_go_below=settings.IC_NO_GO_SCORE,
    )
    return replace(DEFAULT_CONFIG, thresholds=thresholds, currency=settings.LOCAL_CURRENCY)


@dataclass(frozen=True)
class DealRequest:
    deal: DealRecord
    inputs: FeasibilityInputs | None = None   # None: draft from segment presets
    contract_type: str = "franchise"
    contact_count: int = 0


@dataclass(frozen=True)
class DealEvaluation:
    deal: DealRecord
    inputs: FeasibilityInputs | None = None
    inputs_from_presets: bool = False
    warnings: tuple[PresetWarning, ...] = field(default_factory=tuple)
    outputs: FeasibilityOutputs | None = None
    brand: BrandEconomics | None = None
    owner: OwnerEconomics | None = None
    completeness: CompletenessScore | None = None
    decision: ICDecision | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def evaluate_deal(deal: DealRecord, inputs: FeasibilityInputs | None = None,
                  contract_type: str = "franchise", contact_count: int = 0,
                  config: EngineConfig | None = None) -> DealEvaluation:
    """Projection, economics, completeness and IC decision for one deal.

    Exceptions propagate; `evaluate_deals` is the entry point that records
    them per deal.
    """
    cfg = config or engine_config_from_settings()
    label = deal.name or "deal"

    from_presets = inputs is None
    if from_presets:
        logger.info(f"[{label}] No underwriting inputs, drafting from {cfg.normalize_segment(deal.segment)} presets")
        inputs = build_inputs(deal, cfg)

    warnings = tuple(preset_warnings(inputs, cfg))

    logger.info(f"[{label}] Running {inputs.rooms}-key projection...")
    outputs = compute_feasibility(inputs)

    logger.info(f"[{label}] Computing {contract_type} economics...")
    brand = compute_brand_economics(inputs, outputs, contract_type)
    owner = compute_owner_economics(inputs, outputs, config=cfg)

    # Preset-drafted inputs do not count as underwriting work
    completeness = compute_completeness(deal, not from_presets, contact_count)

    decision = compute_ic_decision(deal, inputs, outputs, brand, owner, completeness, config=cfg)
    logger.info(f"[{label}] IC {decision.decision} ({decision.ic_score}/100, {decision.confidence} confidence)")

    return DealEvaluation(
        deal=deal,
        inputs=inputs,
        inputs_from_presets=from_presets,
        warnings=warnings,
        outputs=outputs,
        brand=brand,
        owner=owner,
        completeness=completeness,
        decision=decision,
    )


def _evaluate_request(request: DealRequest, cfg: EngineConfig) -> DealEvaluation:
    try:
        return evaluate_deal(request.deal, request.inputs, request.contract_type,
                             request.contact_count, cfg)
    except Exception as e:
        logger.exception(f"[{request.deal.name or 'deal'}] Evaluation failed: {e}")
        return DealEvaluation(deal=request.deal, inputs=request.inputs, error=str(e))


def evaluate_deals(requests: list[DealRequest], max_workers: int | None = None,
                   config: EngineConfig | None = None) -> list[DealEvaluation]:
    """Evaluate many deals on a thread pool. Results keep request order."""
    cfg = config or engine_config_from_settings()
    workers = max_workers or max(1, settings.IC_BATCH_WORKERS)
    requests = list(requests)
    if not requests:
        return []

    logger.info(f"Evaluating {len(requests)} deal(s) with {workers} worker(s)")
    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(lambda r: _evaluate_request(r, cfg), requests))

    failed = sum(1 for r in results if not r.ok)
    if failed:
        logger.warning(f"{failed} of {len(results)} deal evaluation(s) failed")
    return results


def evaluations_to_frame(results: list[DealEvaluation]) -> pd.DataFrame:
    """One row per deal with the headline numbers an IC pack lists."""
    rows = []
    for r in results:
        row = {
            "deal": r.deal.name,
            "segment": r.inputs.segment if r.inputs else r.deal.segment,
            "decision": None,
            "ic_score": None,
            "confidence": None,
            "net_fees_usd": None,
            "yield_on_cost": None,
            "simple_payback": None,
            "data_completeness": None,
            "error": r.error,
        }
        if r.ok:
            row.update(
                decision=r.decision.decision,
                ic_score=r.decision.ic_score,
                confidence=r.decision.confidence,
                net_fees_usd=r.brand.net_fees_usd,
                yield_on_cost=r.owner.yield_on_cost,
                simple_payback=r.outputs.simple_payback,
                data_completeness=r.completeness.score,
            )
        rows.append(row)
    return pd.DataFrame(rows)
