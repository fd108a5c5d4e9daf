"""Investment-committee recommendation: hard gates, weighted rubric, narrative.

The engine is a one-shot classifier. Hard gates are checked first and any
failure forces NO-GO; the 100-point rubric is computed regardless so the
committee still sees the scores. Five sub-scores are each rounded to whole
points and the IC score is their sum:

    location   0-25   external location sub-score, rescaled
    demand     0-25   occupancy (12) + ADR (8) + net fees (5)
    conversion 0-20   existing structure (8|2) + room fit (5) + capex (4|2) + ADR range (3)
    owner      0-15   yield on cost (10) + DSCR or unlevered bonus (5)
    execution  0-15   inverse of the external risk sub-score

Conditions and red flags are independent triggers kept in a fixed order so
the narrative (first two of each) is reproducible byte for byte.
"""

import logging
import math
from dataclasses import dataclass

from feasibility.assumptions import (
    EXISTING_STRUCTURE_OPENINGS, OPENING_TYPE_LABELS, DealRecord, FeasibilityInputs,
)
from feasibility.completeness import CompletenessScore
from feasibility.economics import BrandEconomics, OwnerEconomics
from feasibility.metrics import round_half_up
from feasibility.presets import DEFAULT_CONFIG, EngineConfig, ICThresholds, SegmentPreset
from feasibility.projection import FeasibilityOutputs, payback_label

logger = logging.getLogger(__name__)

DECISION_LABELS = {
    "go": "GO",
    "go_with_conditions": "GO WITH CONDITIONS",
    "no_go": "NO-GO",
}

MAX_LOCATION_RAW = 25
MAX_RISK_RAW = 25


@dataclass(frozen=True)
class HardGateResult:
    name: str
    passed: bool
    reason: str | None = None


@dataclass(frozen=True)
class ICDecision:
    decision: str
    ic_score: int
    confidence: str
    hard_gates: tuple[HardGateResult, ...]
    hard_gate_failed: bool
    location_score: int    # 0-25
    demand_score: int      # 0-25
    conversion_score: int  # 0-20
    owner_score: int       # 0-15
    execution_score: int   # 0-15
    conditions: tuple[str, ...]
    red_flags: tuple[str, ...]
    narrative: str
    data_completeness: int

    @property
    def sub_scores(self) -> dict[str, int]:
        return {
            "location": self.location_score,
            "demand": self.demand_score,
            "conversion": self.conversion_score,
            "owner": self.owner_score,
            "execution": self.execution_score,
        }


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


@dataclass(frozen=True)
class _DealContext:
    """Values every stage of the evaluation reads."""
    segment: str
    preset: SegmentPreset
    opening_type: str
    rooms: int
    currency: str

    @property
    def adr_floor(self) -> float:
        return self.preset.adr_low

    @property
    def capex_ceiling(self) -> float:
        return self.preset.capex_per_key_high


# --- Stage 1: hard gates ---

def _hard_gates(ctx: _DealContext, inputs: FeasibilityInputs,
                completeness: CompletenessScore, t: ICThresholds) -> tuple[HardGateResult, ...]:
    preset = ctx.preset
    min_adr = ctx.adr_floor * t.adr_floor_ratio
    max_capex = ctx.capex_ceiling * t.capex_ceiling_ratio
    gates = []

    passed = completeness.score >= t.min_completeness
    gates.append(HardGateResult(
        name=f"Data Completeness >= {t.min_completeness}",
        passed=passed,
        reason=None if passed else (
            f"Completeness {completeness.score}% - insufficient underwriting data. "
            f"Missing: {', '.join(completeness.missing[:3])}."
        ),
    ))

    passed = ctx.rooms >= preset.min_rooms
    gates.append(HardGateResult(
        name=f"Min Rooms ({preset.min_rooms}) for {preset.label}",
        passed=passed,
        reason=None if passed else (
            f"{ctx.rooms} rooms below {preset.min_rooms} minimum for {preset.label} segment. "
            f"Consider boutique flag or segment repositioning."
        ),
    ))

    passed = inputs.adr >= min_adr
    gates.append(HardGateResult(
        name=f"ADR >= {t.adr_floor_ratio:.0%} of {preset.label} floor",
        passed=passed,
        reason=None if passed else (
            f"ADR {inputs.adr:,.0f} {ctx.currency} below {min_adr:,.0f} {ctx.currency} "
            f"({t.adr_floor_ratio:.0%} of the {preset.label} floor of {ctx.adr_floor:,.0f} {ctx.currency})."
        ),
    ))

    passed = inputs.capex_per_key <= max_capex
    gates.append(HardGateResult(
        name=f"CAPEX/Key <= {t.capex_ceiling_ratio:.0%} of {preset.label} ceiling",
        passed=passed,
        reason=None if passed else (
            f"CAPEX/key {inputs.capex_per_key:,.0f} {ctx.currency} above {max_capex:,.0f} {ctx.currency} "
            f"({t.capex_ceiling_ratio:.0%} of the {preset.label} ceiling of {ctx.capex_ceiling:,.0f} {ctx.currency})."
        ),
    ))
    return tuple(gates)


# --- Stage 2: weighted rubric ---

def _location_score(deal: DealRecord) -> int:
    raw = _clamp(deal.location_score or 0, 0, MAX_LOCATION_RAW)
    return round_half_up(raw / MAX_LOCATION_RAW * 25)


def _demand_score(ctx: _DealContext, inputs: FeasibilityInputs, brand: BrandEconomics,
                  t: ICThresholds) -> int:
    preset = ctx.preset
    occ_ratio = inputs.occupancy / preset.occ_mid if preset.occ_mid > 0 else 0.0
    adr_ratio = inputs.adr / preset.adr_mid if preset.adr_mid > 0 else 0.0
    score = 12 * _clamp(occ_ratio, 0.0, 1.0) + 8 * _clamp(adr_ratio, 0.0, 1.0)

    if t.min_net_fees_usd <= 0 or brand.net_fees_usd >= t.min_net_fees_usd:
        score += 5
    else:
        score += 5 * max(brand.net_fees_usd, 0) / t.min_net_fees_usd
    return min(25, round_half_up(score))


def _conversion_score(ctx: _DealContext, inputs: FeasibilityInputs) -> int:
    preset = ctx.preset
    score = 8 if ctx.opening_type in EXISTING_STRUCTURE_OPENINGS else 2
    if preset.min_rooms <= ctx.rooms <= 4 * preset.min_rooms:
        score += 5
    if inputs.capex_per_key <= ctx.capex_ceiling * 0.8:
        score += 4
    elif inputs.capex_per_key <= ctx.capex_ceiling:
        score += 2
    if preset.adr_low <= inputs.adr <= preset.adr_high:
        score += 3
    return min(20, score)


def _owner_score(ctx: _DealContext, owner: OwnerEconomics, t: ICThresholds) -> int:
    min_yoc = ctx.preset.min_yoc
    yoc_ratio = owner.yield_on_cost / min_yoc if min_yoc > 0 else 0.0
    score = 10 * _clamp(yoc_ratio, 0.0, 1.5) / 1.5

    if not owner.debt_enabled or t.min_dscr <= 0 or owner.dscr >= t.min_dscr:
        score += 5
    else:
        score += 5 * max(owner.dscr, 0) / t.min_dscr
    return min(15, round_half_up(score))


def _execution_score(deal: DealRecord) -> int:
    risk = _clamp(deal.risk_score or 0, 0, MAX_RISK_RAW)
    return round_half_up((MAX_RISK_RAW - risk) / MAX_RISK_RAW * 15)


def _classify(ic_score: int, hard_gate_failed: bool, t: ICThresholds) -> str:
    if hard_gate_failed or ic_score < t.no_go_below:
        return "no_go"
    if ic_score >= t.go_at:
        return "go"
    return "go_with_conditions"


# --- Remediation and warnings ---

def _conditions(ctx: _DealContext, inputs: FeasibilityInputs, brand: BrandEconomics,
                owner: OwnerEconomics, completeness: CompletenessScore,
                t: ICThresholds) -> tuple[str, ...]:
    preset = ctx.preset
    cur = ctx.currency
    conditions = []

    if inputs.capex_per_key > ctx.capex_ceiling:
        conditions.append(
            f"CAPEX/key {inputs.capex_per_key:,.0f} {cur} exceeds {preset.label} typical high. "
            f"Reduce to <= {ctx.capex_ceiling:,.0f} {cur} or renegotiate construction scope."
        )
    if inputs.adr < ctx.adr_floor:
        conditions.append(
            f"ADR {inputs.adr:,.0f} {cur} below {preset.label} low bound ({ctx.adr_floor:,.0f} {cur}). "
            f"Secure brand positioning premium or validate comp set support."
        )
    if owner.yield_on_cost < preset.min_yoc:
        conditions.append(
            f"Improve YoC to >= {preset.min_yoc * 100:.0f}% (currently {owner.yield_on_cost * 100:.1f}%). "
            f"Reduce CAPEX/key, increase ADR, or renegotiate scope."
        )
    if brand.net_fees_usd < t.min_net_fees_usd:
        conditions.append(
            f"Increase {brand.contract_type} net fees to >= ${t.min_net_fees_usd:,.0f} USD "
            f"(currently ${brand.net_fees_usd:,} USD). Explore larger room count or ADR upside."
        )
    if owner.debt_enabled and owner.dscr < t.min_dscr:
        conditions.append(
            f"DSCR {owner.dscr:.2f}x below minimum {t.min_dscr:.2f}x. "
            f"Reduce leverage (LTV), improve NOI, or secure debt reserve."
        )
    if completeness.score < t.target_completeness:
        conditions.append(
            f"Complete underwriting data (currently {completeness.score}%). "
            f"Add: {', '.join(completeness.missing[:3])}."
        )
    if ctx.opening_type == "new_build" and ctx.segment == "economy":
        conditions.append(
            "Consider conversion vs new build - stronger CAPEX efficiency for Economy segment."
        )
    return tuple(conditions)


def _red_flags(ctx: _DealContext, inputs: FeasibilityInputs, outputs: FeasibilityOutputs,
               owner: OwnerEconomics, completeness: CompletenessScore,
               hard_gates: tuple[HardGateResult, ...], t: ICThresholds) -> tuple[str, ...]:
    preset = ctx.preset
    flags = []

    if inputs.gop_margin < preset.gop_low * t.critical_gop_ratio:
        flags.append(
            f"GOP margin {inputs.gop_margin * 100:.0f}% critically below {preset.label} standard "
            f"- operational viability at risk."
        )
    if completeness.score < t.min_completeness:
        flags.append(
            f"Data completeness {completeness.score}% - insufficient for IC review. "
            f"Underwriting is speculative."
        )
    if ctx.rooms < preset.min_rooms:
        flags.append(f"{ctx.rooms} rooms below {preset.label} minimum ({preset.min_rooms} keys).")
    if outputs.simple_payback > t.max_payback_years:
        if math.isinf(outputs.simple_payback):
            flags.append("Simple payback not reached - average NOI is not positive.")
        else:
            flags.append(
                f"Simple payback {outputs.simple_payback} yrs exceeds {t.max_payback_years:g}-yr threshold."
            )
    if owner.yield_on_cost < preset.min_yoc * t.low_yield_ratio:
        flags.append(
            f"YoC {owner.yield_on_cost * 100:.1f}% significantly below {preset.label} threshold "
            f"({preset.min_yoc * 100:.0f}%)."
        )
    for gate in hard_gates:
        if not gate.passed:
            flags.append(f"Hard gate failed: {gate.name} - {gate.reason}")
    return tuple(flags)


def _confidence(outputs: FeasibilityOutputs, completeness: CompletenessScore) -> str:
    """Completeness plus how hard year-5 NOI moves under the occupancy -10% case."""
    base = outputs.years[min(4, len(outputs.years) - 1)].noi
    downside_years = outputs.sensitivities.occ_down_10
    downside = downside_years[min(4, len(downside_years) - 1)].noi
    volatility = abs(base - downside) / max(1, base)

    if completeness.score >= 80 and volatility < 0.20:
        return "high"
    if completeness.score >= 60 and volatility < 0.35:
        return "medium"
    return "low"


def conversion_ease_bucket(conversion_score: int) -> str:
    if conversion_score >= 16:
        return "high"
    if conversion_score >= 10:
        return "moderate"
    return "low"


def _join_top(items: tuple[str, ...], count: int = 2) -> str:
    return "; ".join(item.rstrip(".") for item in items[:count])


def _narrative(ctx: _DealContext, deal: DealRecord, outputs: FeasibilityOutputs,
               brand: BrandEconomics, owner: OwnerEconomics, decision: str, ic_score: int,
               confidence: str, conversion_score: int, conditions: tuple[str, ...],
               red_flags: tuple[str, ...], t: ICThresholds) -> str:
    preset = ctx.preset
    name = deal.name or "this opportunity"
    city = deal.city or "the target market"
    opening = OPENING_TYPE_LABELS.get(ctx.opening_type, ctx.opening_type.replace("_", " ")).lower()
    project = " ".join(part for part in (preset.label, opening, "hotel project") if part)
    capex = f"{ctx.currency} {outputs.total_capex:,.0f}" if outputs.total_capex > 0 else "TBD"

    summary = (
        f"The Investment Committee has evaluated {name} as a {project} "
        f"in {city}. The overall IC Score is {ic_score}/100, leading to a {DECISION_LABELS[decision]} "
        f"recommendation with {confidence} confidence."
    )

    brand_view = (
        f"From a brand economics perspective, stabilized net fees are estimated at "
        f"${brand.net_fees_usd:,} USD annually under the {brand.contract_type} contract structure. "
    )
    if brand.net_fees_usd >= t.min_net_fees_usd:
        brand_view += "This meets the minimum threshold, demonstrating viable brand economics."
    else:
        brand_view += "This falls below the minimum threshold, requiring corrective action."

    owner_view = (
        f"Owner economics indicate a yield on cost of {owner.yield_on_cost * 100:.1f}% on total "
        f"invested capital of {capex}, with a simple payback of {payback_label(outputs.simple_payback)}. "
    )
    if owner.yield_on_cost >= preset.min_yoc:
        owner_view += "YoC meets the owner threshold, supporting a compelling investment case. "
    else:
        owner_view += "YoC is below the owner minimum and the deal requires restructuring. "
    owner_view += f"Conversion ease is {conversion_ease_bucket(conversion_score)} ({conversion_score}/20)."

    if red_flags:
        outlook = f"Key concerns include: {_join_top(red_flags)}. "
    else:
        outlook = "No critical red flags were identified. "
    if conditions:
        outlook += f"To advance to LOI, the team must resolve the following: {_join_top(conditions)}."
    else:
        outlook += "The deal is recommended for immediate advancement to LOI preparation."

    return "\n\n".join([summary, brand_view, owner_view, outlook])


def compute_ic_decision(deal: DealRecord, inputs: FeasibilityInputs, outputs: FeasibilityOutputs,
                        brand: BrandEconomics, owner: OwnerEconomics,
                        completeness: CompletenessScore, thresholds: ICThresholds | None = None,
                        config: EngineConfig = DEFAULT_CONFIG) -> ICDecision:
    """Classify a deal as go / go_with_conditions / no_go and explain why."""
    t = thresholds or config.thresholds
    segment = config.normalize_segment(inputs.segment or deal.segment)
    ctx = _DealContext(
        segment=segment,
        preset=config.presets[segment],
        opening_type=inputs.opening_type or deal.opening_type,
        rooms=deal.rooms_max or inputs.rooms,
        currency=config.currency,
    )

    hard_gates = _hard_gates(ctx, inputs, completeness, t)
    hard_gate_failed = any(not g.passed for g in hard_gates)

    location = _location_score(deal)
    demand = _demand_score(ctx, inputs, brand, t)
    conversion = _conversion_score(ctx, inputs)
    owner_pts = _owner_score(ctx, owner, t)
    execution = _execution_score(deal)
    ic_score = location + demand + conversion + owner_pts + execution

    decision = _classify(ic_score, hard_gate_failed, t)
    conditions = _conditions(ctx, inputs, brand, owner, completeness, t)
    red_flags = _red_flags(ctx, inputs, outputs, owner, completeness, hard_gates, t)
    confidence = _confidence(outputs, completeness)
    narrative = _narrative(ctx, deal, outputs, brand, owner, decision, ic_score, confidence,
                           conversion, conditions, red_flags, t)

    logger.debug(
        f"[{deal.name or 'deal'}] IC score {ic_score} "
        f"(loc {location}, demand {demand}, conv {conversion}, owner {owner_pts}, exec {execution}) "
        f"-> {decision}"
    )

    return ICDecision(
        decision=decision,
        ic_score=ic_score,
        confidence=confidence,
        hard_gates=hard_gates,
        hard_gate_failed=hard_gate_failed,
        location_score=location,
        demand_score=demand,
        conversion_score=conversion,
        owner_score=owner_pts,
        execution_score=execution,
        conditions=conditions,
        red_flags=red_flags,
        narrative=narrative,
        data_completeness=completeness.score,
    )
