"""Layover context models - the immutable description of one layover."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class CityInfo(BaseModel):
    """Destination city reachable from the layover airport."""

    model_config = ConfigDict(frozen=True)

    name: str
    country_code: str
    timezone: str = Field(..., description="IANA timezone, e.g., 'Asia/Dubai'")
    safety_rating: float = Field(..., ge=0, le=5, description="0 (unsafe) to 5 (very safe)")


class LayoverContext(BaseModel):
    """One layover: arrival/departure, airport and destination city.

    Created once per discovery request and never mutated.
    """

    model_config = ConfigDict(frozen=True)

    arrival_time: datetime
    departure_time: datetime
    airport_code: Annotated[str, Field(min_length=3, max_length=4)]
    city: CityInfo
    duration_minutes: int | None = Field(default=None, gt=0)
    is_international: bool = True
    airline: str | None = None
    flight_number: str | None = None

    @field_validator("airport_code")
    @classmethod
    def normalize_airport_code(cls, v: str) -> str:
        """Airport codes are stored upper-case."""
        return v.strip().upper()

    @model_validator(mode="after")
    def validate_times(self) -> "LayoverContext":
        """Ensure departure is after arrival and the duration agrees with it."""
        if self.departure_time <= self.arrival_time:
            raise ValueError("departure_time must be after arrival_time")

        span_minutes = int((self.departure_time - self.arrival_time).total_seconds() // 60)
        if span_minutes < 1:
            raise ValueError("layover must be at least one minute long")
        if self.duration_minutes is None:
            object.__setattr__(self, "duration_minutes", span_minutes)
        elif abs(self.duration_minutes - span_minutes) > 1:
            raise ValueError(
                f"duration_minutes={self.duration_minutes} disagrees with "
                f"arrival/departure span of {span_minutes} minutes"
            )
        return self

    @property
    def layover_minutes(self) -> int:
        """Total layover duration in minutes."""
        assert self.duration_minutes is not None
        return self.duration_minutes
