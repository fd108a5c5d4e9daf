"""Plain-dict conversion so results can be stored as JSON blobs and re-hydrated."""

import logging
import math
import re
from dataclasses import asdict, fields, is_dataclass

from feasibility.assumptions import FeasibilityInputs
from feasibility.projection import CapexShock, FeasibilityOutputs, FeasibilityYear, Sensitivities

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def _plain(value):
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def to_dict(record) -> dict:
    """Any engine record as nested dicts/lists of plain values.

    Non-finite floats (an unreached payback) become None so the result is
    strict JSON.
    """
    if not is_dataclass(record):
        raise TypeError(f"Expected an engine record, got {type(record).__name__}")
    return _plain(asdict(record))


def snake_case(key: str) -> str:
    """'capexPerKey' -> 'capex_per_key'; snake_case keys pass through."""
    return _CAMEL_BOUNDARY.sub(r"_\1", key).lower()


def inputs_from_dict(data: dict) -> FeasibilityInputs:
    """Build inputs from snake_case or camelCase keys; unknown keys are ignored."""
    known = {f.name for f in fields(FeasibilityInputs)}
    kwargs = {}
    for key, value in data.items():
        name = snake_case(key)
        if name not in known:
            logger.debug(f"Ignoring unknown feasibility input {key!r}")
            continue
        if value is None:
            continue
        kwargs[name] = value
    return FeasibilityInputs(**kwargs)


def _payback(value) -> float:
    return math.inf if value is None else value


def _years(rows) -> tuple[FeasibilityYear, ...]:
    return tuple(FeasibilityYear(**row) for row in rows)


def outputs_from_dict(data: dict) -> FeasibilityOutputs:
    sens = data["sensitivities"]
    return FeasibilityOutputs(
        years=_years(data["years"]),
        total_capex=data["total_capex"],
        simple_payback=_payback(data["simple_payback"]),
        sensitivities=Sensitivities(
            occ_down_10=_years(sens["occ_down_10"]),
            adr_down_10=_years(sens["adr_down_10"]),
            capex_up_15=CapexShock(
                total_capex=sens["capex_up_15"]["total_capex"],
                simple_payback=_payback(sens["capex_up_15"]["simple_payback"]),
            ),
            fx_shock=_years(sens["fx_shock"]),
            fx_shock_rate=sens["fx_shock_rate"],
            severe=_years(sens["severe"]),
        ),
    )
