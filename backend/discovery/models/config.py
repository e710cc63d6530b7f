"""Engine configuration models - plain data handed to every pipeline call."""

from pydantic import BaseModel, Field, field_validator, model_validator

from backend.discovery.models.recommendation import FACTOR_NAMES, DiversityLimits, ScoringWeights
from backend.discovery.models.transit import AirportTransitInfo


class WeatherScoringConfig(BaseModel):
    """Weights and thresholds for weather compatibility."""

    temperature_weight: float = Field(default=0.3, ge=0, le=1)
    precipitation_weight: float = Field(default=0.4, ge=0, le=1)
    wind_weight: float = Field(default=0.2, ge=0, le=1)
    visibility_weight: float = Field(default=0.1, ge=0, le=1)
    optimal_temp_min_c: float = 15.0
    optimal_temp_max_c: float = 28.0
    precipitation_threshold_mm_h: float = Field(default=2.0, ge=0)
    wind_threshold_kmh: float = Field(default=25.0, ge=0)
    indoor_bonus: float = Field(default=1.3, ge=1.0, le=1.5)

    @model_validator(mode="after")
    def validate_temperature_range(self) -> "WeatherScoringConfig":
        """Ensure the optimal range is ordered."""
        if self.optimal_temp_min_c > self.optimal_temp_max_c:
            raise ValueError("optimal_temp_min_c must be <= optimal_temp_max_c")
        return self


class ExperienceScoringConfig(BaseModel):
    """Blend of user-experience and revenue signals for the revenue factor."""

    weather_match_weight: float = Field(default=0.25, ge=0, le=1)
    layover_suitability_weight: float = Field(default=0.25, ge=0, le=1)
    rating_weight: float = Field(default=0.1, ge=0, le=1)
    revenue_normalizer: float = Field(default=50.0, gt=0, description="Expected revenue for 1.0")
    user_experience_share: float = Field(default=0.7, ge=0, le=1)
    revenue_share: float = Field(default=0.3, ge=0, le=1)


class TransitConfig(BaseModel):
    """Fixed time allowances in minutes."""

    buffer_minutes: int = Field(default=30, ge=0)
    minimum_city_minutes: int = Field(default=60, ge=0)
    baggage_minutes: int = Field(default=30, ge=0)
    express_threshold_minutes: int = Field(default=30, gt=0)
    default_transit_minutes: int = Field(default=30, gt=0)
    experience_buffer_minutes: int = Field(default=30, ge=0)


class EngineConfig(BaseModel):
    """Everything the core reads. Passed explicitly; never read from a global."""

    weather: WeatherScoringConfig = Field(default_factory=WeatherScoringConfig)
    experience: ExperienceScoringConfig = Field(default_factory=ExperienceScoringConfig)
    transit: TransitConfig = Field(default_factory=TransitConfig)
    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    weight_overrides: dict[str, float] = Field(default_factory=dict)
    diversity: DiversityLimits = Field(default_factory=DiversityLimits)
    max_results: int = Field(default=10, ge=1)
    base_markup: float = Field(default=1.15, gt=0)
    fanout_cap: int = Field(default=8, ge=1)
    request_timeout_ms: int = Field(default=5000, gt=0)
    airports: dict[str, AirportTransitInfo] = Field(default_factory=dict)

    @field_validator("weight_overrides")
    @classmethod
    def validate_overrides(cls, v: dict[str, float]) -> dict[str, float]:
        """Overrides must name known factors and be non-negative."""
        for name, value in v.items():
            if name not in FACTOR_NAMES:
                raise ValueError(f"Unknown scoring factor: {name}")
            if value < 0:
                raise ValueError(f"Weight for {name} must be >= 0")
        return v

    @field_validator("airports")
    @classmethod
    def normalize_airport_keys(
        cls, v: dict[str, AirportTransitInfo]
    ) -> dict[str, AirportTransitInfo]:
        return {code.upper(): info for code, info in v.items()}
