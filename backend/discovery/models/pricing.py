"""Pricing models - strategy configuration, pricing context and commission results."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from backend.discovery.models.common import ActivityType, LoyaltyTier, WeatherCategory


def _as_utc(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=UTC)


class StrategyConditions(BaseModel):
    """Optional bounds a context must satisfy. An unset field means no constraint."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    min_layover_minutes: int | None = Field(default=None, ge=0)
    max_layover_minutes: int | None = Field(default=None, ge=0)
    weather_categories: list[WeatherCategory] | None = None
    user_tiers: list[str] | None = None
    destinations: list[str] | None = None
    experience_types: list[ActivityType] | None = None

    @field_validator("user_tiers")
    @classmethod
    def normalize_tiers(cls, v: list[str] | None) -> list[str] | None:
        return [t.strip().lower() for t in v] if v is not None else None

    @field_validator("destinations")
    @classmethod
    def normalize_destinations(cls, v: list[str] | None) -> list[str] | None:
        return [d.strip().upper() for d in v] if v is not None else None

    @model_validator(mode="after")
    def validate_layover_bounds(self) -> "StrategyConditions":
        """Ensure min_layover_minutes <= max_layover_minutes."""
        if (
            self.min_layover_minutes is not None
            and self.max_layover_minutes is not None
            and self.min_layover_minutes > self.max_layover_minutes
        ):
            raise ValueError("min_layover_minutes must be <= max_layover_minutes")
        return self


class StrategyAdjustments(BaseModel):
    """What a matching strategy does to price and commission."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    price_multiplier: float = Field(default=1.0, gt=0)
    commission_rate_delta: float = Field(default=0.0, ge=-1, le=1)
    min_price: float | None = Field(default=None, ge=0)
    max_price: float | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def validate_price_bounds(self) -> "StrategyAdjustments":
        """Ensure min_price <= max_price."""
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValueError(
                f"min_price ({self.min_price}) must be <= max_price ({self.max_price})"
            )
        return self


class PricingStrategy(BaseModel):
    """A named, prioritized conditional pricing rule. Configuration data, not code."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    enabled: bool = True
    priority: int = 0
    conditions: StrategyConditions = Field(default_factory=StrategyConditions)
    adjustments: StrategyAdjustments = Field(default_factory=StrategyAdjustments)
    valid_from: datetime | None = None
    valid_until: datetime | None = None

    @model_validator(mode="after")
    def validate_window(self) -> "PricingStrategy":
        """Ensure valid_until is after valid_from."""
        if (
            self.valid_from is not None
            and self.valid_until is not None
            and _as_utc(self.valid_until) <= _as_utc(self.valid_from)
        ):
            raise ValueError("valid_until must be after valid_from")
        return self

    def is_active_at(self, at: datetime) -> bool:
        """Enabled and inside the validity window. Naive datetimes are read as UTC."""
        if not self.enabled:
            return False
        at = _as_utc(at)
        if self.valid_from is not None and at < _as_utc(self.valid_from):
            return False
        if self.valid_until is not None and at > _as_utc(self.valid_until):
            return False
        return True


class PricingContext(BaseModel):
    """Everything a strategy condition may look at."""

    model_config = ConfigDict(frozen=True)

    layover_minutes: int = Field(..., ge=0)
    weather_category: WeatherCategory
    user_tier: str
    destination_code: str
    experience_type: ActivityType
    evaluated_at: datetime


class PricingResult(BaseModel):
    """Outcome of folding matching strategies over a base price."""

    base_price: float = Field(..., ge=0)
    final_price: float = Field(..., ge=0)
    applied_strategy_ids: list[str] = Field(default_factory=list)
    commission_adjustment: float = 0.0


class CommissionTierTable(BaseModel):
    """Loyalty tier -> base commission rate."""

    model_config = ConfigDict(frozen=True)

    rates: dict[str, float] = Field(
        default_factory=lambda: {
            LoyaltyTier.bronze.value: 0.15,
            LoyaltyTier.silver.value: 0.17,
            LoyaltyTier.gold.value: 0.19,
            LoyaltyTier.platinum.value: 0.21,
            LoyaltyTier.enterprise.value: 0.23,
        }
    )

    @field_validator("rates")
    @classmethod
    def validate_rates(cls, v: dict[str, float]) -> dict[str, float]:
        """Tier names are lower-cased; rates must be fractions."""
        if not v:
            raise ValueError("tier table must contain at least one tier")
        normalized: dict[str, float] = {}
        for tier, rate in v.items():
            if not 0 <= rate <= 1:
                raise ValueError(f"rate for tier {tier!r} must be in [0, 1], got {rate}")
            normalized[tier.strip().lower()] = rate
        return normalized

    def rate_for(self, tier: str) -> float | None:
        return self.rates.get(tier.strip().lower())

    @property
    def lowest_rate(self) -> float:
        return min(self.rates.values())


class CommissionBreakdown(BaseModel):
    """Commission split for one priced experience."""

    commission_rate: float = Field(..., ge=0.10, le=0.30)
    commission_amount: float = Field(..., ge=0)
    partner_payout: float = Field(..., ge=0)
    platform_revenue: float = Field(..., ge=0)
    tier: str
    fallback: bool = False


class PriceQuote(BaseModel):
    """Final price and commission for one candidate."""

    pricing: PricingResult
    commission: CommissionBreakdown

    @property
    def fallback(self) -> bool:
        return self.commission.fallback or self.pricing.applied_strategy_ids == ["fallback"]
