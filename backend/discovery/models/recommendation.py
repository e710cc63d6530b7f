"""Recommendation models - scoring factors, ranked output and the discovery envelope."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from backend.discovery.models.common import PriceBucket
from backend.discovery.models.experience import ExperienceCandidate
from backend.discovery.models.issues import PipelineIssue
from backend.discovery.models.layover import LayoverContext
from backend.discovery.models.pricing import (
    CommissionTierTable,
    PriceQuote,
    PricingStrategy,
)
from backend.discovery.models.profile import UserProfile
from backend.discovery.models.transit import AirportActivity, ExperienceFit, TransitAnalysis
from backend.discovery.models.weather import WeatherMatch, WeatherSnapshot

FACTOR_NAMES = (
    "weather_compatibility",
    "personalized_preference",
    "time_optimization",
    "cost_efficiency",
    "safety_assurance",
    "cultural_alignment",
    "physical_demand_match",
    "seasonal_relevance",
    "social_proof",
    "booking_probability",
    "revenue_optimization",
)


class ScoringFactors(BaseModel):
    """Eleven independent [0,1] signals for one candidate."""

    weather_compatibility: float = Field(..., ge=0, le=1)
    personalized_preference: float = Field(..., ge=0, le=1)
    time_optimization: float = Field(..., ge=0, le=1)
    cost_efficiency: float = Field(..., ge=0, le=1)
    safety_assurance: float = Field(..., ge=0, le=1)
    cultural_alignment: float = Field(..., ge=0, le=1)
    physical_demand_match: float = Field(..., ge=0, le=1)
    seasonal_relevance: float = Field(..., ge=0, le=1)
    social_proof: float = Field(..., ge=0, le=1)
    booking_probability: float = Field(..., ge=0, le=1)
    revenue_optimization: float = Field(..., ge=0, le=1)


class ScoringWeights(BaseModel):
    """Per-factor weights. Need not sum to 1; the combined score is clamped."""

    weather_compatibility: float = Field(default=0.15, ge=0)
    personalized_preference: float = Field(default=0.20, ge=0)
    time_optimization: float = Field(default=0.15, ge=0)
    cost_efficiency: float = Field(default=0.10, ge=0)
    safety_assurance: float = Field(default=0.10, ge=0)
    cultural_alignment: float = Field(default=0.05, ge=0)
    physical_demand_match: float = Field(default=0.05, ge=0)
    seasonal_relevance: float = Field(default=0.05, ge=0)
    social_proof: float = Field(default=0.05, ge=0)
    booking_probability: float = Field(default=0.05, ge=0)
    revenue_optimization: float = Field(default=0.05, ge=0)


class DiversityLimits(BaseModel):
    max_per_category: int = Field(default=3, ge=1)
    max_per_price_bucket: int = Field(default=4, ge=1)


class CandidateEvaluation(BaseModel):
    """Everything computed for one candidate before ranking."""

    candidate: ExperienceCandidate
    factors: ScoringFactors
    weather: WeatherMatch
    fit: ExperienceFit
    quote: PriceQuote
    explanations: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)
    tips: list[str] = Field(default_factory=list)


class RankedRecommendation(BaseModel):
    """One ranked experience with its price, commission and explanations."""

    rank: int = Field(..., ge=1)
    experience: ExperienceCandidate
    factors: ScoringFactors
    score: float = Field(..., ge=0, le=1)
    original_price: float = Field(..., ge=0)
    dynamic_price: float = Field(..., ge=0)
    currency: str
    commission_rate: float = Field(..., ge=0.10, le=0.30)
    commission_amount: float = Field(..., ge=0)
    applied_strategy_ids: list[str] = Field(default_factory=list)
    price_bucket: PriceBucket
    explanations: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)
    tips: list[str] = Field(default_factory=list)
    weather_warnings: list[str] = Field(default_factory=list)


class PriceRange(BaseModel):
    min: float = Field(..., ge=0)
    max: float = Field(..., ge=0)
    currency: str


class DiscoverySummary(BaseModel):
    """Aggregate statistics for the dashboard collaborator."""

    total_candidates: int = Field(..., ge=0)
    total_options: int = Field(..., ge=0)
    average_score: float = Field(..., ge=0, le=1)
    best_score: float = Field(..., ge=0, le=1)
    category_distribution: dict[str, int] = Field(default_factory=dict)
    price_range: PriceRange | None = None
    time_utilization_pct: float = Field(..., ge=0)


class DiscoveryInsights(BaseModel):
    """Layover-level advice shown next to the recommendation list."""

    layover_quality: Literal["excellent", "good", "fair", "limited"]
    optimization_suggestions: list[str] = Field(default_factory=list)
    weather_impact: str
    budget_recommendations: list[str] = Field(default_factory=list)


class DiscoveryPreferences(BaseModel):
    """Per-request knobs supplied alongside the profile."""

    max_budget: float | None = Field(default=None, ge=0)
    preferred_categories: list[str] = Field(default_factory=list)
    max_results: int | None = Field(default=None, ge=1)
    has_checked_baggage: bool = False


class DiscoveryRequest(BaseModel):
    """Single-call input to the discovery pipeline."""

    request_id: str
    layover: LayoverContext
    weather: WeatherSnapshot | None = None
    profile: UserProfile
    candidates: list[ExperienceCandidate] = Field(default_factory=list)
    strategies: list[PricingStrategy] = Field(default_factory=list)
    tier_table: CommissionTierTable = Field(default_factory=CommissionTierTable)
    preferences: DiscoveryPreferences = Field(default_factory=DiscoveryPreferences)
    evaluated_at: datetime | None = Field(
        default=None, description="Clock for strategy validity; defaults to arrival_time"
    )
    config_issues: list[PipelineIssue] = Field(
        default_factory=list, description="Pricing entries skipped while parsing the request"
    )


class DiscoveryResult(BaseModel):
    """Ranked recommendations plus everything a caller needs to explain them."""

    request_id: str
    recommendations: list[RankedRecommendation] = Field(default_factory=list)
    transit: TransitAnalysis
    weather: WeatherSnapshot
    weather_advice: list[str] = Field(default_factory=list)
    summary: DiscoverySummary
    insights: DiscoveryInsights
    airport_activities: list[AirportActivity] = Field(default_factory=list)
    issues: list[PipelineIssue] = Field(default_factory=list)
