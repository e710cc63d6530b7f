"""Experience models - catalog offers supplied by the activity collaborator."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from backend.discovery.models.common import ActivityType, PhysicalDemand, WeatherDependency

# Used wherever an experience does not state its duration
DEFAULT_DURATION_MINUTES = 120


class Category(BaseModel):
    """Catalog category; the first one listed is the primary category."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class Duration(BaseModel):
    """Fixed or variable experience duration in minutes."""

    model_config = ConfigDict(frozen=True)

    fixed_minutes: int | None = Field(default=None, gt=0)
    variable_from_minutes: int | None = Field(default=None, gt=0)
    variable_to_minutes: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def validate_range(self) -> "Duration":
        """Ensure a variable range is ordered."""
        if (
            self.variable_from_minutes is not None
            and self.variable_to_minutes is not None
            and self.variable_to_minutes < self.variable_from_minutes
        ):
            raise ValueError("variable_to_minutes must be >= variable_from_minutes")
        return self

    @property
    def minutes(self) -> int | None:
        """Best single estimate: fixed, else the lower variable bound."""
        if self.fixed_minutes is not None:
            return self.fixed_minutes
        return self.variable_from_minutes

    @property
    def minutes_or_default(self) -> int:
        """Estimate with the catalog-wide default applied."""
        return self.minutes or DEFAULT_DURATION_MINUTES


class Rating(BaseModel):
    """Aggregate review rating."""

    model_config = ConfigDict(frozen=True)

    average: float = Field(..., ge=0, le=5)
    count: int = Field(..., ge=0)


class ExperienceCandidate(BaseModel):
    """An activity offer that may be recommended during a layover."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    categories: list[Category] = Field(default_factory=list)
    duration: Duration = Field(default_factory=Duration)
    base_price: float = Field(..., ge=0)
    currency: str = "USD"
    activity_type: ActivityType
    weather_dependency: WeatherDependency = WeatherDependency.none
    physical_demand: PhysicalDemand = PhysicalDemand.low
    rating: Rating | None = None
    airport_based: bool = Field(
        default=False, description="Takes place inside the airport; no transit needed"
    )

    @property
    def primary_category(self) -> str:
        """Name of the first category, or 'general'."""
        return self.categories[0].name if self.categories else "general"

    @property
    def category_names(self) -> list[str]:
        """Lower-cased category names."""
        return [c.name.lower() for c in self.categories]
