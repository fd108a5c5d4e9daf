"""Shared return metrics: rounding, coverage/yield ratios and the IRR solver."""

import logging
import math
from typing import NamedTuple

import numpy as np
import numpy_financial as npf

logger = logging.getLogger(__name__)

IRR_START_RATE = 0.10
IRR_MAX_ITERATIONS = 50
IRR_MIN_RATE = -0.99
IRR_MAX_RATE = 5.0


def round_half_up(value: float) -> int | float:
    """Round half-up to an int, matching JavaScript's Math.round.

    Non-finite values pass through unchanged.
    """
    if not math.isfinite(value):
        return value
    return int(math.floor(value + 0.5))


def round_currency(value: float) -> int | float:
    """Whole currency units."""
    return round_half_up(value)


def round_to(value: float, ndigits: int) -> float:
    """Round half-up to `ndigits` decimals (non-finite values pass through)."""
    if not math.isfinite(value):
        return value
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def calc_dscr(noi: float, annual_debt_service: float) -> float:
    """Net Operating Income / Annual Debt Service."""
    if annual_debt_service <= 0:
        return 0.0
    return noi / annual_debt_service


def calc_yield_on_cost(noi: float, total_cost: float) -> float:
    """Stabilized NOI / Total Project Cost."""
    if total_cost <= 0:
        return 0.0
    return noi / total_cost


def calc_simple_payback(total_capex: float, annual_nois: list[float]) -> float:
    """Total capex / average NOI, infinite when the average NOI is not positive."""
    if not annual_nois:
        return math.inf
    avg_noi = sum(annual_nois) / len(annual_nois)
    if avg_noi <= 0:
        return math.inf
    return total_capex / avg_noi


class IrrSolution(NamedTuple):
    rate: float
    iterations: int
    converged: bool


def _npv_and_slope(rate: float, values: np.ndarray, periods: np.ndarray) -> tuple[float, float]:
    npv = float(npf.npv(rate, values))
    slope = float(np.sum(-periods * values / (1 + rate) ** (periods + 1)))
    return npv, slope


def newton_irr(investment: float, cash_flows: list[float], exit_value: float = 0.0,
               start_rate: float = IRR_START_RATE,
               max_iterations: int = IRR_MAX_ITERATIONS) -> IrrSolution:
    """Solve the IRR of an up-front investment, annual cash flows and a terminal exit.

    Newton-Raphson from `start_rate`. Stops once |NPV| < 1 or the slope
    flattens below 1e-4; the rate is clamped to [-0.99, 5.0] after every
    step. When the budget runs out the last clamped rate is returned with
    ``converged=False``.
    """
    if investment <= 0 or not cash_flows:
        return IrrSolution(0.0, 0, False)

    values = np.array([-investment] + list(cash_flows), dtype=float)
    values[-1] += exit_value
    periods = np.arange(len(values), dtype=float)

    rate = start_rate
    for iteration in range(max_iterations):
        npv, slope = _npv_and_slope(rate, values, periods)
        if abs(npv) < 1:
            return IrrSolution(rate, iteration, True)
        if abs(slope) < 0.0001:
            logger.debug(f"IRR slope flattened at r={rate:.4f} after {iteration} steps")
            return IrrSolution(rate, iteration, False)
        rate = rate - npv / slope
        rate = min(max(rate, IRR_MIN_RATE), IRR_MAX_RATE)

    logger.debug(f"IRR did not converge in {max_iterations} steps, returning r={rate:.4f}")
    return IrrSolution(rate, max_iterations, False)


def calc_irr(investment: float, cash_flows: list[float], exit_value: float = 0.0) -> float:
    """Best-effort IRR as a fraction (0.12 == 12%)."""
    return newton_irr(investment, cash_flows, exit_value).rate
