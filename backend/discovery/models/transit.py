"""Transit models - airport metadata and layover feasibility results."""

from datetime import datetime, time

from pydantic import BaseModel, Field

from backend.discovery.models.common import Geo, TransitMode


class OperatingHours(BaseModel):
    """Daily operating window in airport-local time (may wrap past midnight)."""

    start: time
    end: time

    def covers_hour(self, hour: int) -> bool:
        """Check whether the service runs during the given local hour."""
        start_hour = self.start.hour
        end_hour = self.end.hour
        if start_hour <= end_hour:
            return start_hour <= hour <= end_hour
        # Wraps past midnight, e.g. 05:00-00:30
        return hour >= start_hour or hour <= end_hour


class TransitOption(BaseModel):
    """One way of getting from the airport to the city."""

    mode: TransitMode
    duration_minutes: int = Field(..., gt=0, description="One-way duration")
    cost: float = Field(default=0.0, ge=0)
    frequency_minutes: int = Field(default=0, ge=0, description="0 = on demand")
    operating_hours: OperatingHours
    accessible: bool = True
    luggage_friendly: bool = True
    direct_route: bool = True

    @property
    def round_trip_minutes(self) -> int:
        """Duration there and back."""
        return self.duration_minutes * 2


class AirportActivity(BaseModel):
    """Something to do without leaving the airport."""

    name: str
    location: str
    duration_minutes: int = Field(..., gt=0)
    cost: float = Field(default=0.0, ge=0)
    rating: float | None = Field(default=None, ge=0, le=5)


class AirportTransitInfo(BaseModel):
    """Airport processing times and city transit options."""

    code: str
    name: str
    timezone: str | None = None
    city_center: Geo | None = None
    distance_to_city_km: float | None = None
    customs_minutes: int = Field(..., ge=0)
    security_minutes: int = Field(..., ge=0)
    walking_minutes: int = Field(..., ge=0, description="One way, gate to exit")
    has_express_transit: bool = False
    transit_options: list[TransitOption] = Field(default_factory=list)
    airport_activities: list[AirportActivity] = Field(default_factory=list)
    is_default_profile: bool = False


class LayoverTimeBreakdown(BaseModel):
    """Minute-by-minute budget of a layover.

    `available_in_city` is raw and may be negative when the layover is infeasible.
    """

    total_layover: int
    buffer: int
    customs_and_immigration: int
    security_recheck: int
    walk_to_from_gates: int
    transit_to_city: int
    transit_from_city: int
    baggage: int
    available_in_city: int
    is_viable: bool

    @property
    def total_overhead(self) -> int:
        """Everything that is not time in the city."""
        return self.total_layover - self.available_in_city


class TransitAnalysis(BaseModel):
    """Can the traveler leave the airport, and for how long."""

    airport_code: str
    can_leave_airport: bool
    minimum_layover_required_minutes: int
    available_time_in_city_minutes: int = Field(..., ge=0)
    transit_options: list[TransitOption] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    confidence: float = Field(..., ge=0, le=1)
    breakdown: LayoverTimeBreakdown | None = None
    used_default_profile: bool = False

    @property
    def fastest_option(self) -> TransitOption | None:
        """First (fastest) viable transit option, if any."""
        return self.transit_options[0] if self.transit_options else None


class ExperienceFit(BaseModel):
    """Whether a specific experience fits into the layover."""

    can_reach: bool
    travel_minutes: int
    total_time_required: int
    reasoning: str
    suitability_score: float = Field(..., ge=0, le=1)
    minimum_layover_required: int
    ideal: bool
    reasons: list[str] = Field(default_factory=list)


class TransitQuery(BaseModel):
    """Inputs that determine a transit analysis; used as its cache key."""

    airport_code: str
    layover_minutes: int
    arrival_time: datetime
    has_checked_baggage: bool = False
