"""Map stored deal rows onto engine records and auto-fill inputs from presets."""

import logging

import config as settings
from feasibility.assumptions import DealRecord, FeasibilityInputs
from feasibility.metrics import round_half_up, round_to
from feasibility.presets import DEFAULT_CONFIG, EngineConfig

logger = logging.getLogger(__name__)

DEFAULT_ROOMS_MIN = 100
DEFAULT_ROOMS_MAX = 200
DEFAULT_SCORE_TOTAL = 60


def _f(val, default=0.0):
    """Parse float from a stored column."""
    try:
        return float(val) if val not in (None, "") else default
    except (ValueError, TypeError):
        return default


def _i(val, default=None):
    """Parse int from a stored column."""
    try:
        return int(val) if val not in (None, "") else default
    except (ValueError, TypeError):
        return default


def deal_from_row(row: dict) -> DealRecord:
    """Narrow a `deals` row (as returned by the store) to what the engine reads."""
    breakdown = row.get("score_breakdown") or {}
    if not isinstance(breakdown, dict):
        logger.warning(f"[{row.get('name', '?')}] score_breakdown is not a mapping, ignoring it")
        breakdown = {}

    return DealRecord(
        name=row.get("name") or "",
        city=row.get("city") or "",
        state=row.get("state") or "",
        address=row.get("address") or "",
        lat=_f(row.get("lat"), None),
        lon=_f(row.get("lon"), None),
        segment=row.get("segment") or "",
        opening_type=row.get("opening_type") or "",
        stage=row.get("stage") or "lead",
        rooms_min=_i(row.get("rooms_min")),
        rooms_max=_i(row.get("rooms_max")),
        score_total=_f(row.get("score_total")),
        location_score=_f(breakdown.get("location")),
        risk_score=_f(breakdown.get("risk")),
    )


def build_inputs(deal: DealRecord, config: EngineConfig = DEFAULT_CONFIG,
                 fx_rate: float | None = None) -> FeasibilityInputs:
    """Draft feasibility inputs for a deal nobody has underwritten yet.

    Rooms sit at the middle of the deal's room range; ADR and occupancy are
    placed inside the segment's range by the qualification score, so a
    100-point deal gets the top of the range.
    """
    if fx_rate is None:
        fx_rate = settings.DEFAULT_FX_RATE
    segment = config.normalize_segment(deal.segment)
    preset = config.presets[segment]

    rooms_min = deal.rooms_min or DEFAULT_ROOMS_MIN
    rooms_max = deal.rooms_max or DEFAULT_ROOMS_MAX
    score_norm = (deal.score_total or DEFAULT_SCORE_TOTAL) / 100
    opening_type = deal.opening_type or "conversion"

    occupancy = preset.occ_low + score_norm * (preset.occ_high - preset.occ_low)
    inputs = FeasibilityInputs(
        rooms=round_half_up((rooms_min + rooms_max) / 2),
        segment=segment,
        opening_type=opening_type,
        adr=round_half_up(preset.adr_low + score_norm * (preset.adr_high - preset.adr_low)),
        occupancy=round_to(occupancy, 2),
        fnb_revenue_pct=preset.fnb_capture,
        other_revenue_pct=preset.other_rev_pct,
        ramp_up_years=1 if opening_type == "conversion" else 2,
        capex_per_key=preset.capex_per_key_typical,
        ffe_per_key=preset.ffe_per_key_typical,
        base_fee=preset.base_fee_typical,
        incentive_fee=preset.incentive_fee_typical,
        royalty_pct=preset.royalty_pct,
        marketing_pct=preset.marketing_pct,
        distribution_pct=preset.distribution_pct,
        gop_margin=preset.gop_mid,
        fx_rate=fx_rate,
    )
    logger.debug(f"[{deal.name or 'deal'}] drafted {segment} inputs: {inputs.rooms} rooms @ {inputs.adr}")
    return inputs
