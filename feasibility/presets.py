"""Segment presets, IC thresholds and the engine configuration object."""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SegmentPreset:
    """Plausible market ranges for one hotel segment."""
    label: str
    adr_low: float
    adr_high: float
    occ_low: float
    occ_high: float
    gop_low: float
    gop_high: float
    fnb_capture: float
    other_rev_pct: float
    capex_per_key_low: float
    capex_per_key_high: float
    capex_per_key_typical: float
    ffe_per_key_low: float
    ffe_per_key_high: float
    ffe_per_key_typical: float
    base_fee_typical: float
    incentive_fee_typical: float
    royalty_pct: float
    marketing_pct: float
    distribution_pct: float
    min_yoc: float
    min_rooms: int
    # strong / good / marginal cutoffs for stabilized net fees in USD
    net_fee_tiers_usd: tuple[float, float, float] = (600_000, 400_000, 250_000)

    @property
    def adr_mid(self) -> float:
        return (self.adr_low + self.adr_high) / 2

    @property
    def occ_mid(self) -> float:
        return (self.occ_low + self.occ_high) / 2

    @property
    def gop_mid(self) -> float:
        return (self.gop_low + self.gop_high) / 2


SEGMENT_PRESETS: Mapping[str, SegmentPreset] = MappingProxyType({
    "economy": SegmentPreset(
        label="Economy",
        adr_low=500, adr_high=1200,
        occ_low=0.68, occ_high=0.84,
        gop_low=0.34, gop_high=0.46,
        fnb_capture=0.03, other_rev_pct=0.02,
        capex_per_key_low=450_000, capex_per_key_high=900_000, capex_per_key_typical=600_000,
        ffe_per_key_low=70_000, ffe_per_key_high=130_000, ffe_per_key_typical=90_000,
        base_fee_typical=0.005, incentive_fee_typical=0.05,
        royalty_pct=0.050, marketing_pct=0.020, distribution_pct=0.015,
        min_yoc=0.08, min_rooms=50,
        net_fee_tiers_usd=(200_000, 120_000, 80_000),
    ),
    "midscale": SegmentPreset(
        label="Midscale",
        adr_low=900, adr_high=2200,
        occ_low=0.65, occ_high=0.82,
        gop_low=0.28, gop_high=0.38,
        fnb_capture=0.10, other_rev_pct=0.03,
        capex_per_key_low=700_000, capex_per_key_high=2_000_000, capex_per_key_typical=1_200_000,
        ffe_per_key_low=150_000, ffe_per_key_high=350_000, ffe_per_key_typical=220_000,
        base_fee_typical=0.005, incentive_fee_typical=0.05,
        royalty_pct=0.045, marketing_pct=0.018, distribution_pct=0.012,
        min_yoc=0.08, min_rooms=80,
        net_fee_tiers_usd=(350_000, 200_000, 120_000),
    ),
    "premium": SegmentPreset(
        label="Premium",
        adr_low=1800, adr_high=4500,
        occ_low=0.62, occ_high=0.80,
        gop_low=0.30, gop_high=0.42,
        fnb_capture=0.18, other_rev_pct=0.05,
        capex_per_key_low=1_500_000, capex_per_key_high=3_200_000, capex_per_key_typical=2_200_000,
        ffe_per_key_low=350_000, ffe_per_key_high=800_000, ffe_per_key_typical=420_000,
        base_fee_typical=0.025, incentive_fee_typical=0.08,
        royalty_pct=0.040, marketing_pct=0.015, distribution_pct=0.010,
        min_yoc=0.07, min_rooms=120,
        net_fee_tiers_usd=(600_000, 400_000, 250_000),
    ),
})

SEGMENT_ALIASES: Mapping[str, str] = MappingProxyType({
    "luxury": "premium",
    "luxury_lifestyle": "premium",
    "upper_upscale": "premium",
    "upscale": "premium",
    "budget": "economy",
})

DEFAULT_SEGMENT = "midscale"


@dataclass(frozen=True)
class ICThresholds:
    """Investment-committee cutoffs. Pass a modified copy to change the rubric."""
    min_net_fees_usd: float = 120_000
    min_dscr: float = 1.30
    max_payback_years: float = 12
    min_completeness: int = 50       # hard gate + red flag
    target_completeness: int = 70    # condition
    go_at: int = 72
    no_go_below: int = 55
    adr_floor_ratio: float = 0.70
    capex_ceiling_ratio: float = 1.50
    low_yield_ratio: float = 0.70
    critical_gop_ratio: float = 0.80


DEFAULT_THRESHOLDS = ICThresholds()


@dataclass(frozen=True)
class EngineConfig:
    """Read-only reference data injected into the engine."""
    presets: Mapping[str, SegmentPreset] = field(default_factory=lambda: SEGMENT_PRESETS)
    thresholds: ICThresholds = DEFAULT_THRESHOLDS
    aliases: Mapping[str, str] = field(default_factory=lambda: SEGMENT_ALIASES)
    default_segment: str = DEFAULT_SEGMENT
    currency: str = "MXN"

    def normalize_segment(self, segment: str | None) -> str:
        """Map any segment name onto one of the configured presets."""
        key = (segment or "").strip().lower()
        if key in self.presets:
            return key
        key = self.aliases.get(key, "")
        if key in self.presets:
            return key
        return self.default_segment

    def preset_for(self, segment: str | None) -> SegmentPreset:
        return self.presets[self.normalize_segment(segment)]


DEFAULT_CONFIG = EngineConfig()


@dataclass(frozen=True)
class PresetWarning:
    field: str
    message: str
    level: str  # "amber" | "red"


def preset_warnings(inputs, config: EngineConfig = DEFAULT_CONFIG) -> list[PresetWarning]:
    """Flag assumptions that fall outside the segment's plausible ranges."""
    preset = config.preset_for(inputs.segment)
    cur = config.currency
    warnings = []

    if inputs.adr < preset.adr_low:
        level = "red" if inputs.adr < preset.adr_low * 0.8 else "amber"
        warnings.append(PresetWarning(
            "ADR",
            f"ADR {inputs.adr:,.0f} {cur} below {preset.label} low bound ({preset.adr_low:,.0f} {cur}). "
            f"Risk of brand dilution / revenue shortfall.",
            level,
        ))
    if inputs.adr > preset.adr_high * 1.3:
        warnings.append(PresetWarning(
            "ADR", f"ADR seems exceptionally high for {preset.label}. Validate with market data.", "amber",
        ))
    if inputs.occupancy < preset.occ_low:
        warnings.append(PresetWarning(
            "Occupancy",
            f"Occupancy {inputs.occupancy * 100:.0f}% below typical {preset.label} range "
            f"({preset.occ_low * 100:.0f}%-{preset.occ_high * 100:.0f}%).",
            "amber",
        ))
    if inputs.gop_margin < preset.gop_low:
        level = "red" if inputs.gop_margin < preset.gop_low * 0.8 else "amber"
        warnings.append(PresetWarning(
            "GOP Margin",
            f"GOP {inputs.gop_margin * 100:.0f}% below {preset.label} typical "
            f"({preset.gop_low * 100:.0f}%-{preset.gop_high * 100:.0f}%). Check cost structure.",
            level,
        ))
    if inputs.capex_per_key < preset.capex_per_key_low * 0.7:
        warnings.append(PresetWarning(
            "CAPEX/Key",
            f"CAPEX/key very low for {preset.label}. May indicate under-specification or conversion.",
            "amber",
        ))
    if inputs.capex_per_key > preset.capex_per_key_high * 1.2:
        warnings.append(PresetWarning(
            "CAPEX/Key",
            f"CAPEX/key above {preset.label} typical high "
            f"({preset.capex_per_key_high / 1_000_000:.1f}M {cur}). Verify scope.",
            "red",
        ))

    for w in warnings:
        logger.warning(f"{w.field}: {w.message}")
    return warnings
