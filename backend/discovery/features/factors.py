"""Scoring factor extraction - eleven independent [0, 1] signals per candidate.

All factors are deterministic, engineered features; nothing here is learned.
"""

from datetime import datetime

from backend.discovery.models.common import (
    ActivityType,
    PhysicalDemand,
    RiskTolerance,
    clamp,
)
from backend.discovery.models.config import ExperienceScoringConfig
from backend.discovery.models.experience import ExperienceCandidate
from backend.discovery.models.layover import LayoverContext
from backend.discovery.models.pricing import PriceQuote
from backend.discovery.models.profile import BudgetRange, UserProfile
from backend.discovery.models.recommendation import ScoringFactors
from backend.discovery.models.transit import ExperienceFit
from backend.discovery.models.weather import WeatherMatch, WeatherSnapshot

CULTURAL_CATEGORIES = frozenset({"cultural", "historical", "museum", "heritage"})

# Months (1-12) generally pleasant for outdoor activities
OUTDOOR_SEASON_MONTHS = frozenset(range(3, 11))

_DEMAND_LEVEL = {PhysicalDemand.low: 1, PhysicalDemand.moderate: 2, PhysicalDemand.high: 3}


def weather_compatibility(
    weather_score: float, weather: WeatherSnapshot, risk_tolerance: RiskTolerance
) -> float:
    """Weather score adjusted for how much bad weather bothers this traveler."""
    compatibility = weather_score
    if not weather.favorable:
        if risk_tolerance == RiskTolerance.adventurous:
            compatibility *= 0.9
        elif risk_tolerance == RiskTolerance.conservative:
            compatibility *= 0.7
    return clamp(compatibility)


def personalized_preference(
    candidate: ExperienceCandidate, profile: UserProfile, final_price: float
) -> float:
    """Category affinity, past satisfaction in the same category and budget fit."""
    score = 0.5
    category = candidate.primary_category.lower()

    if category in profile.preferences.activity_types:
        score += 0.3

    satisfaction = profile.history.average_satisfaction(category)
    if satisfaction is not None:
        score += satisfaction * 0.2

    if profile.preferences.budget_range.contains(final_price):
        score += 0.2

    return clamp(score)


def cost_efficiency(final_price: float, budget: BudgetRange) -> float:
    """Price relative to the midpoint of the traveler's budget."""
    midpoint = budget.midpoint
    if midpoint <= 0:
        return 1.0 if final_price <= 0 else 0.4

    ratio = final_price / midpoint
    if ratio <= 0.8:
        return 1.0
    if ratio <= 1.0:
        return 0.8
    if ratio <= 1.2:
        return 0.6
    return 0.4


def safety_assurance(
    candidate: ExperienceCandidate, layover: LayoverContext, profile: UserProfile
) -> float:
    """City safety rating, discounted for demanding activities with cautious travelers."""
    score = layover.city.safety_rating / 5
    if (
        candidate.physical_demand == PhysicalDemand.high
        and profile.preferences.risk_tolerance == RiskTolerance.conservative
    ):
        score *= 0.8
    return clamp(score)


def cultural_alignment(candidate: ExperienceCandidate, profile: UserProfile) -> float:
    if any(name in CULTURAL_CATEGORIES for name in candidate.category_names):
        return profile.preferences.cultural_interest
    return 0.5


def physical_demand_match(candidate: ExperienceCandidate, profile: UserProfile) -> float:
    """1.0 at or below capability, 0.7 one level above, 0.4 beyond."""
    demand = _DEMAND_LEVEL[candidate.physical_demand]
    capability = _DEMAND_LEVEL[profile.preferences.physical_capability]
    if demand <= capability:
        return 1.0
    if demand == capability + 1:
        return 0.7
    return 0.4


def seasonal_relevance(
    candidate: ExperienceCandidate, arrival_time: datetime, profile: UserProfile
) -> float:
    month = arrival_time.month
    if month in profile.preferences.preferred_months:
        return 1.0
    if candidate.activity_type == ActivityType.outdoor:
        return 0.8 if month in OUTDOOR_SEASON_MONTHS else 0.6
    return 0.7


def social_proof(candidate: ExperienceCandidate) -> float:
    """Rating quality (70%) and review volume capped at 1000 (30%)."""
    if candidate.rating is None:
        return 0.5
    rating_score = candidate.rating.average / 5
    volume_score = min(candidate.rating.count, 1000) / 1000
    return clamp(rating_score * 0.7 + volume_score * 0.3)


def booking_probability(
    candidate: ExperienceCandidate,
    weather: WeatherSnapshot,
    layover_minutes: int,
    final_price: float,
    original_price: float,
) -> float:
    """Heuristic booking likelihood in [0.1, 0.9].

    Starts at 0.5 and moves with weather fit, price ratio against the
    original price, how much of the layover the experience uses, and rating.
    """
    probability = 0.5

    if weather.favorable and candidate.activity_type == ActivityType.outdoor:
        probability += 0.2
    elif not weather.favorable and candidate.activity_type == ActivityType.indoor:
        probability += 0.15

    price_ratio = final_price / original_price if original_price > 0 else 1.0
    if price_ratio < 1.1:
        probability += 0.1
    elif price_ratio > 1.3:
        probability -= 0.15

    fit_ratio = candidate.duration.minutes_or_default / layover_minutes
    if 0.3 <= fit_ratio <= 0.6:
        probability += 0.15
    elif fit_ratio > 0.8:
        probability -= 0.2

    if candidate.rating is not None and candidate.rating.average >= 4.0:
        probability += 0.1

    return clamp(probability, 0.1, 0.9)


def revenue_optimization(
    candidate: ExperienceCandidate,
    weather_score: float,
    layover_suitability: float,
    commission_amount: float,
    probability: float,
    config: ExperienceScoringConfig,
) -> float:
    """Blend of expected platform revenue and user-experience quality."""
    expected_revenue = commission_amount * probability
    revenue_score = min(1.0, expected_revenue / config.revenue_normalizer)

    rating = candidate.rating.average if candidate.rating is not None else 3.0
    user_experience_score = (
        weather_score * config.weather_match_weight
        + (rating / 5) * config.rating_weight
        + layover_suitability * config.layover_suitability_weight
    )

    return clamp(
        user_experience_score * config.user_experience_share
        + revenue_score * config.revenue_share
    )


def compute_factors(
    candidate: ExperienceCandidate,
    profile: UserProfile,
    layover: LayoverContext,
    weather: WeatherSnapshot,
    weather_match: WeatherMatch,
    fit: ExperienceFit,
    quote: PriceQuote,
    config: ExperienceScoringConfig | None = None,
) -> ScoringFactors:
    """Compute all eleven scoring factors for one candidate."""
    config = config or ExperienceScoringConfig()
    final_price = quote.pricing.final_price
    probability = booking_probability(
        candidate, weather, layover.layover_minutes, final_price, candidate.base_price
    )

    return ScoringFactors(
        weather_compatibility=weather_compatibility(
            weather_match.score, weather, profile.preferences.risk_tolerance
        ),
        personalized_preference=personalized_preference(candidate, profile, final_price),
        time_optimization=fit.suitability_score,
        cost_efficiency=cost_efficiency(final_price, profile.preferences.budget_range),
        safety_assurance=safety_assurance(candidate, layover, profile),
        cultural_alignment=cultural_alignment(candidate, profile),
        physical_demand_match=physical_demand_match(candidate, profile),
        seasonal_relevance=seasonal_relevance(candidate, layover.arrival_time, profile),
        social_proof=social_proof(candidate),
        booking_probability=probability,
        revenue_optimization=revenue_optimization(
            candidate,
            weather_match.score,
            fit.suitability_score,
            quote.commission.commission_amount,
            probability,
            config,
        ),
    )
