"""Weighted data-readiness checklist for a deal (0-100)."""

from dataclasses import dataclass

from feasibility.assumptions import DealRecord


@dataclass(frozen=True)
class CompletenessCheck:
    weight: int
    earned: int
    label: str


@dataclass(frozen=True)
class CompletenessScore:
    score: int
    breakdown: dict[str, CompletenessCheck]
    missing: tuple[str, ...]


def _checks(deal: DealRecord, has_feasibility_inputs: bool, contact_count: int):
    return (
        ("location", 10, "Location (city/state)", deal.has_location),
        ("coordinates", 5, "GPS coordinates", deal.has_coordinates),
        ("segment", 8, "Segment", bool(deal.segment)),
        ("rooms", 8, "Rooms range", deal.has_room_range),
        ("opening_type", 5, "Opening type", bool(deal.opening_type)),
        ("stage", 5, "Stage defined", bool(deal.stage) and deal.stage != "lead"),
        ("address", 5, "Address", bool(deal.address)),
        ("score", 8, "Qualification score", (deal.score_total or 0) > 0),
        ("feasibility", 30, "Feasibility inputs", has_feasibility_inputs),
        ("contact", 8, "Contact information", contact_count > 0),
        # TODO: wire to the deal's open task list once the engine receives it
        ("tasks", 8, "Next steps / tasks", False),
    )


def compute_completeness(deal: DealRecord, has_feasibility_inputs: bool,
                         contact_count: int = 0) -> CompletenessScore:
    """Score how much of the underwriting record is filled in."""
    breakdown = {}
    missing = []
    total = 0

    for key, weight, label, passed in _checks(deal, has_feasibility_inputs, contact_count):
        earned = weight if passed else 0
        breakdown[key] = CompletenessCheck(weight=weight, earned=earned, label=label)
        total += earned
        if not passed:
            missing.append(label)

    return CompletenessScore(score=min(100, total), breakdown=breakdown, missing=tuple(missing))
