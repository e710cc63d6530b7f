"""User profile models - traveler preferences, history and demographics."""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from backend.discovery.models.common import (
    ActivityType,
    LoyaltyTier,
    PhysicalDemand,
    RiskTolerance,
    TravelExperience,
)


class BudgetRange(BaseModel):
    """Per-experience spend the traveler is comfortable with."""

    model_config = ConfigDict(frozen=True)

    min: float = Field(default=0.0, ge=0)
    max: float = Field(default=200.0, ge=0)

    @model_validator(mode="after")
    def validate_order(self) -> "BudgetRange":
        """Ensure min <= max."""
        if self.min > self.max:
            raise ValueError(f"budget min ({self.min}) must be <= max ({self.max})")
        return self

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2

    def contains(self, price: float) -> bool:
        return self.min <= price <= self.max


class UserPreferences(BaseModel):
    """What the traveler likes."""

    model_config = ConfigDict(frozen=True)

    activity_types: list[str] = Field(
        default_factory=list, description="Category affinities, e.g. ['cultural', 'food']"
    )
    budget_range: BudgetRange = Field(default_factory=BudgetRange)
    physical_capability: PhysicalDemand = PhysicalDemand.moderate
    risk_tolerance: RiskTolerance = RiskTolerance.moderate
    cultural_interest: float = Field(default=0.5, ge=0, le=1)
    group_size: int = Field(default=1, ge=1)
    preferred_months: list[int] = Field(
        default_factory=list, description="Months (1-12) the traveler prefers to travel"
    )

    @field_validator("activity_types")
    @classmethod
    def normalize_activity_types(cls, v: list[str]) -> list[str]:
        """Affinities are matched case-insensitively."""
        return [a.strip().lower() for a in v]

    @field_validator("preferred_months")
    @classmethod
    def validate_months(cls, v: list[int]) -> list[int]:
        """Months must be 1-12."""
        for month in v:
            if not 1 <= month <= 12:
                raise ValueError(f"Invalid month: {month}")
        return v


class PastBooking(BaseModel):
    """One historical booking and how much the traveler liked it."""

    model_config = ConfigDict(frozen=True)

    experience_id: str
    category: str
    activity_type: ActivityType | None = None
    satisfaction: float = Field(..., ge=0, le=1)

    @field_validator("category")
    @classmethod
    def normalize_category(cls, v: str) -> str:
        return v.strip().lower()


class BookingHistory(BaseModel):
    model_config = ConfigDict(frozen=True)

    bookings: list[PastBooking] = Field(default_factory=list)

    def average_satisfaction(self, category: str) -> float | None:
        """Mean satisfaction over past bookings in a category, or None."""
        scores = [b.satisfaction for b in self.bookings if b.category == category.lower()]
        if not scores:
            return None
        return sum(scores) / len(scores)


class Demographics(BaseModel):
    """Loyalty tier is a free string so unknown tiers reach the commission fallback."""

    model_config = ConfigDict(frozen=True)

    loyalty_tier: str = LoyaltyTier.bronze.value
    travel_experience: TravelExperience = TravelExperience.experienced

    @field_validator("loyalty_tier")
    @classmethod
    def normalize_tier(cls, v: str) -> str:
        return v.strip().lower()


class UserProfile(BaseModel):
    """Traveler profile supplied by the identity collaborator. Read-only."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    history: BookingHistory = Field(default_factory=BookingHistory)
    demographics: Demographics = Field(default_factory=Demographics)
