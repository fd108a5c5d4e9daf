from dataclasses import dataclass


CONTRACT_TYPES = ("franchise", "management")
OPENING_TYPES = ("conversion", "new_build", "franchise_takeover", "rebranding")
EXISTING_STRUCTURE_OPENINGS = ("conversion", "rebranding", "franchise_takeover")

OPENING_TYPE_LABELS = {
    "conversion": "Conversion",
    "new_build": "New Build",
    "franchise_takeover": "Franchise Takeover",
    "rebranding": "Rebranding Opportunity",
}


@dataclass(frozen=True)
class FeasibilityInputs:
    """Commercial assumptions for one prospective hotel. Fixed for a run."""
    rooms: int = 150
    segment: str = "premium"
    opening_type: str = "new_build"
    adr: float = 3500.0               # local currency per occupied room-night
    occupancy: float = 0.65           # 0-1, stabilized
    fnb_revenue_pct: float = 0.25     # of rooms revenue
    other_revenue_pct: float = 0.05   # of rooms revenue
    ramp_up_years: int = 2
    capex_per_key: float = 2_800_000.0
    ffe_per_key: float = 450_000.0
    # Management contract
    base_fee: float = 0.03            # of total revenue
    incentive_fee: float = 0.08       # of GOP
    # Franchise contract (of rooms revenue)
    royalty_pct: float = 0.040
    marketing_pct: float = 0.015
    distribution_pct: float = 0.010
    gop_margin: float = 0.38
    fx_rate: float = 17.5             # local currency per USD
    # Optional, disabled by default
    key_money: float = 0.0
    debt_enabled: bool = False
    ltv: float = 0.55
    interest_rate: float = 0.09
    cap_rate: float = 0.08

    @property
    def franchise_fee_pct(self) -> float:
        return self.royalty_pct + self.marketing_pct + self.distribution_pct

    @property
    def ancillary_multiplier(self) -> float:
        return 1 + self.fnb_revenue_pct + self.other_revenue_pct


DEFAULT_INPUTS = FeasibilityInputs()


@dataclass(frozen=True)
class DealRecord:
    """The slice of a pipeline deal the engine looks at."""
    name: str = ""
    city: str = ""
    state: str = ""
    address: str = ""
    lat: float | None = None
    lon: float | None = None
    segment: str = ""
    opening_type: str = ""
    stage: str = "lead"
    rooms_min: int | None = None
    rooms_max: int | None = None
    score_total: float = 0.0
    location_score: float = 0.0   # 0-25 qualification sub-score
    risk_score: float = 0.0       # 0-25, higher is riskier

    @property
    def has_location(self) -> bool:
        return bool(self.city and self.state)

    @property
    def has_coordinates(self) -> bool:
        return bool(self.lat and self.lon)

    @property
    def has_room_range(self) -> bool:
        return bool(self.rooms_min and self.rooms_max)
