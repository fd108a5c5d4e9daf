"""Two-sided deal economics: fee income to the brand, returns to the owner."""

import logging
from dataclasses import dataclass

from feasibility.assumptions import CONTRACT_TYPES, FeasibilityInputs
from feasibility.metrics import (
    calc_dscr, calc_yield_on_cost, newton_irr, round_currency, round_to,
)
from feasibility.presets import DEFAULT_CONFIG, EngineConfig
from feasibility.projection import FeasibilityOutputs

logger = logging.getLogger(__name__)

SUPPORT_COST_RATIOS = {
    "management": 0.18,
    "franchise": 0.06,
}
DEBT_SERVICE_LOAD = 1.15  # amortization on top of interest
MAX_BREAK_EVEN_OCCUPANCY = 0.99


@dataclass(frozen=True)
class BrandEconomics:
    contract_type: str
    # Management
    base_fee_annual: int
    incentive_fee_annual: int
    # Franchise
    royalty_annual: int
    marketing_fee_annual: int
    distribution_fee_annual: int
    total_gross_fees: int
    support_cost_ratio: float
    support_costs_estimate: int
    net_fees: int
    net_fees_usd: int
    # Key money
    key_money: float
    key_money_roi: float        # % per year
    key_money_payback: float    # years


@dataclass(frozen=True)
class OwnerEconomics:
    stabilized_noi: int
    yield_on_cost: float
    min_yield_on_cost: float
    # Debt
    debt_enabled: bool
    ltv: float
    interest_rate: float
    debt_amount: int
    annual_debt_service: int
    dscr: float
    # Exit
    cap_rate: float
    exit_value: int
    # Returns
    unleveraged_irr: float
    leveraged_irr: float
    # Break-even vs segment minimum yield
    break_even_occupancy: float
    break_even_adr: int


def compute_brand_economics(inputs: FeasibilityInputs, outputs: FeasibilityOutputs,
                            contract_type: str = "franchise",
                            key_money: float | None = None) -> BrandEconomics:
    """Stabilized-year fee income to the brand, net of support costs."""
    if contract_type not in CONTRACT_TYPES:
        raise ValueError(f"Unknown contract type: {contract_type!r}")
    if key_money is None:
        key_money = inputs.key_money

    stab = outputs.stabilized_year
    base_fee = incentive_fee = royalty = marketing = distribution = 0.0

    if contract_type == "management":
        base_fee = stab.total_revenue * inputs.base_fee
        incentive_fee = stab.gop * inputs.incentive_fee
    else:
        # Franchise fees are charged on rooms revenue only
        royalty = stab.rooms_revenue * inputs.royalty_pct
        marketing = stab.rooms_revenue * inputs.marketing_pct
        distribution = stab.rooms_revenue * inputs.distribution_pct

    total_gross = base_fee + incentive_fee + royalty + marketing + distribution
    support_ratio = SUPPORT_COST_RATIOS[contract_type]
    support_costs = total_gross * support_ratio
    net_fees = total_gross - support_costs
    net_fees_usd = net_fees / inputs.fx_rate if inputs.fx_rate > 0 else 0.0

    key_money_roi = net_fees / key_money * 100 if key_money > 0 else 0.0
    key_money_payback = key_money / net_fees if key_money > 0 and net_fees > 0 else 0.0

    return BrandEconomics(
        contract_type=contract_type,
        base_fee_annual=round_currency(base_fee),
        incentive_fee_annual=round_currency(incentive_fee),
        royalty_annual=round_currency(royalty),
        marketing_fee_annual=round_currency(marketing),
        distribution_fee_annual=round_currency(distribution),
        total_gross_fees=round_currency(total_gross),
        support_cost_ratio=support_ratio,
        support_costs_estimate=round_currency(support_costs),
        net_fees=round_currency(net_fees),
        net_fees_usd=round_currency(net_fees_usd),
        key_money=key_money,
        key_money_roi=round_to(key_money_roi, 1),
        key_money_payback=round_to(key_money_payback, 1),
    )


def _break_even(inputs: FeasibilityInputs, min_noi: float) -> tuple[float, float]:
    """Occupancy and ADR that deliver `min_noi`, holding the other at its input value."""
    # NOI = total revenue * (gop margin - base fee - incentive fee * gop margin)
    net_margin = inputs.gop_margin - (inputs.base_fee + inputs.incentive_fee * inputs.gop_margin)
    if net_margin <= 0 or inputs.rooms <= 0:
        return 0.0, 0.0

    annual_keys = inputs.rooms * 365
    rev_per_room_night = inputs.adr * inputs.ancillary_multiplier
    occ = min_noi / (annual_keys * rev_per_room_night * net_margin) if rev_per_room_night > 0 else 0.0

    adr = 0.0
    if inputs.occupancy > 0:
        adr = min_noi / (annual_keys * inputs.occupancy * inputs.ancillary_multiplier * net_margin)

    return min(max(occ, 0.0), MAX_BREAK_EVEN_OCCUPANCY), max(adr, 0.0)


def compute_owner_economics(inputs: FeasibilityInputs, outputs: FeasibilityOutputs,
                            debt_enabled: bool | None = None, ltv: float | None = None,
                            interest_rate: float | None = None, cap_rate: float | None = None,
                            config: EngineConfig = DEFAULT_CONFIG) -> OwnerEconomics:
    """Yield, coverage, exit value and IRRs from the owner's side of the table."""
    debt_enabled = inputs.debt_enabled if debt_enabled is None else debt_enabled
    ltv = inputs.ltv if ltv is None else ltv
    interest_rate = inputs.interest_rate if interest_rate is None else interest_rate
    cap_rate = inputs.cap_rate if cap_rate is None else cap_rate

    stabilized_noi = outputs.stabilized_year.noi
    total_capex = outputs.total_capex
    yield_on_cost = calc_yield_on_cost(stabilized_noi, total_capex)

    # --- Debt ---
    debt_amount = total_capex * ltv
    annual_ds = debt_amount * interest_rate * DEBT_SERVICE_LOAD if debt_enabled else 0.0
    dscr = calc_dscr(stabilized_noi, annual_ds)

    # --- Exit ---
    exit_value = stabilized_noi / cap_rate if cap_rate > 0 else 0.0

    # --- Returns ---
    annual_nois = outputs.annual_nois
    unlevered = newton_irr(total_capex, annual_nois, exit_value)
    if debt_enabled:
        equity = total_capex * (1 - ltv)
        levered_cfs = [noi - annual_ds for noi in annual_nois]
        levered = newton_irr(equity, levered_cfs, exit_value - debt_amount)
    else:
        levered = unlevered
    if not (unlevered.converged and levered.converged):
        logger.debug(
            f"IRR best effort: unlevered={unlevered.rate:.4f} ({unlevered.iterations} steps), "
            f"levered={levered.rate:.4f} ({levered.iterations} steps)"
        )

    # --- Break-even vs segment minimum yield ---
    min_yoc = config.preset_for(inputs.segment).min_yoc
    be_occ, be_adr = _break_even(inputs, total_capex * min_yoc)

    return OwnerEconomics(
        stabilized_noi=stabilized_noi,
        yield_on_cost=round_to(yield_on_cost, 3),
        min_yield_on_cost=min_yoc,
        debt_enabled=debt_enabled,
        ltv=ltv,
        interest_rate=interest_rate,
        debt_amount=round_currency(debt_amount),
        annual_debt_service=round_currency(annual_ds),
        dscr=round_to(dscr, 2),
        cap_rate=cap_rate,
        exit_value=round_currency(exit_value),
        unleveraged_irr=round_to(unlevered.rate, 4),
        leveraged_irr=round_to(levered.rate, 4),
        break_even_occupancy=be_occ,
        break_even_adr=round_currency(be_adr),
    )
