"""Models package - re-exports for convenience."""

from backend.discovery.models.common import (
    ActivityType,
    Geo,
    LoyaltyTier,
    PhysicalDemand,
    PriceBucket,
    RiskTolerance,
    TransitMode,
    TravelExperience,
    WeatherCategory,
    WeatherDependency,
)
from backend.discovery.models.config import (
    EngineConfig,
    ExperienceScoringConfig,
    TransitConfig,
    WeatherScoringConfig,
)
from backend.discovery.models.experience import Category, Duration, ExperienceCandidate, Rating
from backend.discovery.models.issues import IssueKind, PipelineIssue
from backend.discovery.models.layover import CityInfo, LayoverContext
from backend.discovery.models.pricing import (
    CommissionBreakdown,
    CommissionTierTable,
    PriceQuote,
    PricingContext,
    PricingResult,
    PricingStrategy,
    StrategyAdjustments,
    StrategyConditions,
)
from backend.discovery.models.profile import (
    BookingHistory,
    BudgetRange,
    Demographics,
    PastBooking,
    UserPreferences,
    UserProfile,
)
from backend.discovery.models.recommendation import (
    CandidateEvaluation,
    DiscoveryInsights,
    DiscoveryPreferences,
    DiscoveryRequest,
    DiscoveryResult,
    DiscoverySummary,
    DiversityLimits,
    PriceRange,
    RankedRecommendation,
    ScoringFactors,
    ScoringWeights,
)
from backend.discovery.models.transit import (
    AirportActivity,
    AirportTransitInfo,
    ExperienceFit,
    LayoverTimeBreakdown,
    OperatingHours,
    TransitAnalysis,
    TransitOption,
    TransitQuery,
)
from backend.discovery.models.weather import WeatherMatch, WeatherSnapshot

__all__ = [
    # Common
    "Geo",
    "ActivityType",
    "WeatherDependency",
    "PhysicalDemand",
    "LoyaltyTier",
    "RiskTolerance",
    "TravelExperience",
    "TransitMode",
    "WeatherCategory",
    "PriceBucket",
    # Layover
    "CityInfo",
    "LayoverContext",
    # Weather
    "WeatherSnapshot",
    "WeatherMatch",
    # Transit
    "OperatingHours",
    "TransitOption",
    "TransitQuery",
    "AirportActivity",
    "AirportTransitInfo",
    "LayoverTimeBreakdown",
    "TransitAnalysis",
    "ExperienceFit",
    # Experience
    "Category",
    "Duration",
    "Rating",
    "ExperienceCandidate",
    # Profile
    "BudgetRange",
    "UserPreferences",
    "PastBooking",
    "BookingHistory",
    "Demographics",
    "UserProfile",
    # Pricing
    "StrategyConditions",
    "StrategyAdjustments",
    "PricingStrategy",
    "PricingContext",
    "PricingResult",
    "CommissionTierTable",
    "CommissionBreakdown",
    "PriceQuote",
    # Recommendation
    "ScoringFactors",
    "ScoringWeights",
    "DiversityLimits",
    "CandidateEvaluation",
    "RankedRecommendation",
    "PriceRange",
    "DiscoverySummary",
    "DiscoveryInsights",
    "DiscoveryPreferences",
    "DiscoveryRequest",
    "DiscoveryResult",
    # Issues
    "IssueKind",
    "PipelineIssue",
    # Config
    "WeatherScoringConfig",
    "ExperienceScoringConfig",
    "TransitConfig",
    "EngineConfig",
]
