"""5-year hotel P&L projection with canned downside sensitivities."""

import math
from dataclasses import dataclass

from feasibility.assumptions import FeasibilityInputs
from feasibility.metrics import calc_simple_payback, round_currency, round_to

PROJECTION_YEARS = 5
OCCUPANCY_CEILING = 0.95
STABILIZED_YEAR_INDEX = 2  # year 3


@dataclass(frozen=True)
class FeasibilityYear:
    year: int
    occupancy: float
    rooms_revenue: int
    total_revenue: int
    gop: int
    fees: int
    noi: int


@dataclass(frozen=True)
class CapexShock:
    total_capex: int
    simple_payback: float


@dataclass(frozen=True)
class Sensitivities:
    occ_down_10: tuple[FeasibilityYear, ...]
    adr_down_10: tuple[FeasibilityYear, ...]
    capex_up_15: CapexShock
    fx_shock: tuple[FeasibilityYear, ...]
    fx_shock_rate: float
    severe: tuple[FeasibilityYear, ...]  # ADR -10% and occupancy -15%


@dataclass(frozen=True)
class FeasibilityOutputs:
    years: tuple[FeasibilityYear, ...]
    total_capex: float
    simple_payback: float
    sensitivities: Sensitivities

    @property
    def stabilized_year(self) -> FeasibilityYear:
        return stabilized_year(self.years)

    @property
    def annual_nois(self) -> list[int]:
        return [y.noi for y in self.years]


def stabilized_year(years) -> FeasibilityYear:
    """Year 3 once ramp-up is over, or the last year of a shorter series."""
    if len(years) > STABILIZED_YEAR_INDEX:
        return years[STABILIZED_YEAR_INDEX]
    return years[-1]


def compute_years(inputs: FeasibilityInputs, adr_override: float | None = None,
                  occ_override: float | None = None,
                  fx_override: float | None = None) -> tuple[FeasibilityYear, ...]:
    """Project rooms revenue through NOI for years 1-5.

    Everything is in local currency, so `fx_override` leaves the series
    unchanged. Monetary values are rounded half-up as they are produced.
    """
    adr = inputs.adr if adr_override is None else adr_override
    base_occ = inputs.occupancy if occ_override is None else occ_override

    years = []
    for yr in range(1, PROJECTION_YEARS + 1):
        if yr <= inputs.ramp_up_years:
            ramp_factor = 0.6 + 0.4 * yr / inputs.ramp_up_years
        else:
            ramp_factor = 1.0
        occ = min(base_occ * ramp_factor, OCCUPANCY_CEILING)

        room_nights = inputs.rooms * 365 * occ
        rooms_revenue = room_nights * adr
        total_revenue = rooms_revenue * inputs.ancillary_multiplier
        gop = total_revenue * inputs.gop_margin
        fees = total_revenue * inputs.base_fee + gop * inputs.incentive_fee
        noi = gop - fees

        years.append(FeasibilityYear(
            year=yr,
            occupancy=occ,
            rooms_revenue=round_currency(rooms_revenue),
            total_revenue=round_currency(total_revenue),
            gop=round_currency(gop),
            fees=round_currency(fees),
            noi=round_currency(noi),
        ))
    return tuple(years)


def compute_feasibility(inputs: FeasibilityInputs) -> FeasibilityOutputs:
    """Headline projection, capex and payback plus the sensitivity bundle."""
    years = compute_years(inputs)
    annual_nois = [y.noi for y in years]
    total_capex = inputs.rooms * (inputs.capex_per_key + inputs.ffe_per_key)
    simple_payback = calc_simple_payback(total_capex, annual_nois)

    # --- Sensitivities ---
    shocked_capex = total_capex * 1.15
    fx_shock_rate = inputs.fx_rate * 1.15
    sensitivities = Sensitivities(
        occ_down_10=compute_years(inputs, occ_override=inputs.occupancy * 0.9),
        adr_down_10=compute_years(inputs, adr_override=inputs.adr * 0.9),
        capex_up_15=CapexShock(
            total_capex=round_currency(shocked_capex),
            simple_payback=round_to(calc_simple_payback(shocked_capex, annual_nois), 1),
        ),
        fx_shock=compute_years(inputs, fx_override=fx_shock_rate),
        fx_shock_rate=fx_shock_rate,
        severe=compute_years(inputs, adr_override=inputs.adr * 0.90,
                             occ_override=inputs.occupancy * 0.85),
    )

    return FeasibilityOutputs(
        years=years,
        total_capex=total_capex,
        simple_payback=round_to(simple_payback, 1),
        sensitivities=sensitivities,
    )


def payback_label(simple_payback: float) -> str:
    if math.isinf(simple_payback):
        return "not reached"
    return f"{simple_payback} years"
