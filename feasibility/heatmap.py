"""Occupancy x ADR sensitivity grid over the stabilized year."""

from dataclasses import dataclass, replace

import pandas as pd

from feasibility.assumptions import FeasibilityInputs
from feasibility.economics import compute_brand_economics
from feasibility.metrics import calc_yield_on_cost, round_half_up, round_to
from feasibility.presets import DEFAULT_CONFIG, EngineConfig, SegmentPreset
from feasibility.projection import compute_feasibility

HEATMAP_OCCUPANCIES = (0.50, 0.55, 0.60, 0.65, 0.70, 0.75, 0.80)
HEATMAP_ADR_MULTIPLIERS = (0.70, 0.80, 0.90, 1.00, 1.10, 1.20)
HEATMAP_MODES = ("net_fees", "yoc")


@dataclass(frozen=True)
class HeatmapCell:
    occupancy: float
    adr: int
    value: float   # net fees in USD, or yield on cost in %
    tier: str      # strong | good | marginal | weak


def heatmap_adrs(base_adr: float) -> tuple[int, ...]:
    """ADR columns, each rounded to the nearest 100."""
    return tuple(round_half_up(base_adr * m / 100) * 100 for m in HEATMAP_ADR_MULTIPLIERS)


def net_fees_tier(net_fees_usd: float, preset: SegmentPreset) -> str:
    strong, good, marginal = preset.net_fee_tiers_usd
    if net_fees_usd >= strong:
        return "strong"
    if net_fees_usd >= good:
        return "good"
    if net_fees_usd >= marginal:
        return "marginal"
    return "weak"


def yoc_tier(yield_on_cost: float, preset: SegmentPreset) -> str:
    if yield_on_cost >= preset.min_yoc * 1.3:
        return "strong"
    if yield_on_cost >= preset.min_yoc:
        return "good"
    if yield_on_cost >= preset.min_yoc * 0.8:
        return "marginal"
    return "weak"


def compute_heatmap(inputs: FeasibilityInputs, mode: str = "yoc", fx_rate: float | None = None,
                    contract_type: str = "franchise",
                    config: EngineConfig = DEFAULT_CONFIG) -> tuple[tuple[HeatmapCell, ...], ...]:
    """Re-run the projection for every (occupancy, ADR) pair; one row per occupancy."""
    if mode not in HEATMAP_MODES:
        raise ValueError(f"Unknown heatmap mode: {mode!r}")

    preset = config.preset_for(inputs.segment)
    fx = inputs.fx_rate if fx_rate is None else fx_rate
    adrs = heatmap_adrs(inputs.adr)

    rows = []
    for occ in HEATMAP_OCCUPANCIES:
        row = []
        for adr in adrs:
            cell_inputs = replace(inputs, adr=adr, occupancy=occ, fx_rate=fx)
            out = compute_feasibility(cell_inputs)
            if mode == "net_fees":
                brand = compute_brand_economics(cell_inputs, out, contract_type)
                value = brand.net_fees_usd
                tier = net_fees_tier(value, preset)
            else:
                yoc = calc_yield_on_cost(out.stabilized_year.noi, out.total_capex)
                value = round_to(yoc * 100, 1)
                tier = yoc_tier(yoc, preset)
            row.append(HeatmapCell(occupancy=occ, adr=adr, value=value, tier=tier))
        rows.append(tuple(row))
    return tuple(rows)


def heatmap_to_frame(grid, field: str = "tier") -> pd.DataFrame:
    """Pivot a heatmap grid into occupancy rows x ADR columns."""
    records = [
        {"occupancy": cell.occupancy, "adr": cell.adr, field: getattr(cell, field)}
        for row in grid for cell in row
    ]
    frame = pd.DataFrame.from_records(records)
    return frame.pivot(index="occupancy", columns="adr", values=field)
