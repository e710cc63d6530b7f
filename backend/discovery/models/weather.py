"""Weather models - snapshot of destination conditions and per-experience match."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from backend.discovery.models.common import WeatherCategory

# Conditions reported by providers that rule out outdoor activity regardless of readings
SEVERE_CONDITIONS = frozenset({"thunderstorm", "snow", "heavy rain"})


class WeatherSnapshot(BaseModel):
    """Current weather at the destination.

    Read-only input to the pipeline. `is_good_for_outdoor` is derived from the
    readings when the provider does not supply it.
    """

    model_config = ConfigDict(frozen=True)

    temperature_c: float
    precipitation_mm_h: float = Field(default=0.0, ge=0)
    wind_speed_kmh: float = Field(default=0.0, ge=0)
    visibility_km: float = Field(default=10.0, ge=0)
    condition: str | None = None
    is_good_for_outdoor: bool | None = None
    observed_at: datetime | None = None
    is_fallback: bool = False

    @model_validator(mode="after")
    def derive_outdoor_verdict(self) -> "WeatherSnapshot":
        """Fill in the outdoor verdict from readings when not provided."""
        if self.is_good_for_outdoor is None:
            severe = (self.condition or "").lower() in SEVERE_CONDITIONS
            verdict = (
                10 <= self.temperature_c <= 30
                and self.precipitation_mm_h < 2
                and self.wind_speed_kmh < 20
                and not severe
            )
            object.__setattr__(self, "is_good_for_outdoor", verdict)
        return self

    @property
    def favorable(self) -> bool:
        """Outdoor verdict as a plain bool."""
        return bool(self.is_good_for_outdoor)

    @property
    def category(self) -> WeatherCategory:
        """Coarse good/fair/poor bucket."""
        if self.favorable:
            return WeatherCategory.good
        if self.precipitation_mm_h > 5:
            return WeatherCategory.poor
        return WeatherCategory.fair

    @classmethod
    def fallback(cls) -> "WeatherSnapshot":
        """Conservative stand-in used when no weather data is available.

        Leans unfavorable so weather-dependent outdoor experiences are not
        oversold on missing data.
        """
        return cls(
            temperature_c=18.0,
            precipitation_mm_h=0.5,
            wind_speed_kmh=15.0,
            visibility_km=8.0,
            condition="unknown",
            is_good_for_outdoor=False,
            is_fallback=True,
        )


class WeatherMatch(BaseModel):
    """Weather compatibility of one experience."""

    score: float = Field(..., ge=0, le=1)
    recommendation: str
    warnings: list[str] = Field(default_factory=list)
