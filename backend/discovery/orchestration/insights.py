"""Human-readable explanations and aggregate summaries for discovery results."""

from backend.discovery.models.common import ActivityType
from backend.discovery.models.experience import ExperienceCandidate
from backend.discovery.models.layover import LayoverContext
from backend.discovery.models.pricing import PriceQuote
from backend.discovery.models.recommendation import (
    DiscoveryInsights,
    DiscoverySummary,
    PriceRange,
    RankedRecommendation,
    ScoringFactors,
)
from backend.discovery.models.transit import ExperienceFit, TransitAnalysis
from backend.discovery.models.weather import WeatherSnapshot


def personalization_insights(
    candidate: ExperienceCandidate,
    factors: ScoringFactors,
    fit: ExperienceFit,
    weather: WeatherSnapshot,
    quote: PriceQuote,
    layover_minutes: int,
) -> tuple[list[str], list[str], list[str]]:
    """Explain a candidate: why it is recommended, concerns, and tips.

    Returns:
        Tuple of (explanations, concerns, tips)
    """
    why: list[str] = []
    concerns: list[str] = []
    tips: list[str] = []

    # Why recommended
    if factors.personalized_preference > 0.8:
        why.append("Matches your previous activity preferences perfectly")
    if factors.weather_compatibility > 0.8:
        why.append("Perfect weather conditions for this activity")
    if factors.time_optimization > 0.8:
        why.append("Optimal timing for your layover duration")
    if factors.cost_efficiency > 0.8:
        why.append("Excellent value within your typical budget range")
    if candidate.airport_based:
        why.append("Located inside the airport - no transit needed")

    # Concerns
    if factors.weather_compatibility < 0.5:
        concerns.append("Weather conditions may affect the experience")
    if factors.time_optimization < 0.6:
        concerns.append("Might be tight on time - consider booking early slots")
    if factors.physical_demand_match < 0.6:
        concerns.append("Physical demands may be higher than your usual preferences")
    if factors.safety_assurance < 0.7:
        concerns.append("Consider additional safety precautions for this activity")
    if not fit.can_reach:
        concerns.append(fit.reasoning)

    # Tips
    if fit.suitability_score < 0.7:
        tips.append("Book the earliest available time slot for maximum flexibility")
    if factors.cost_efficiency < 0.6:
        tips.append("Look for group discounts or package deals")
    if factors.weather_compatibility < 0.7:
        tips.append("Have a backup indoor activity ready")
    if not weather.favorable and candidate.activity_type == ActivityType.outdoor:
        tips.append(_bad_weather_alternative(candidate))
    if candidate.duration.minutes_or_default > layover_minutes * 0.5:
        tips.append("Consider a shorter version or key highlights only")
    if quote.pricing.final_price > candidate.base_price * 1.2:
        tips.append("Free walking tours offer a budget-friendly alternative")

    return why, concerns, tips


def _bad_weather_alternative(candidate: ExperienceCandidate) -> str:
    names = candidate.category_names
    if any("museum" in name for name in names):
        return "Consider museum or gallery instead"
    if any("food" in name for name in names):
        return "Perfect weather for indoor dining experience"
    return "Look for covered or indoor alternatives"


def layover_insights(
    layover: LayoverContext,
    recommendations: list[RankedRecommendation],
    weather: WeatherSnapshot,
    transit: TransitAnalysis,
) -> DiscoveryInsights:
    """Assess the layover as a whole and suggest how to use it."""
    duration = layover.layover_minutes
    suggestions: list[str] = []
    budget: list[str] = []

    quality = "limited"
    if duration >= 480 and transit.can_leave_airport:
        quality = "excellent"
    elif duration >= 240 and transit.can_leave_airport:
        quality = "good"
    elif duration >= 180:
        quality = "fair"

    if duration < 240:
        suggestions.append("Focus on experiences close to the airport or within the airport")
    if not weather.favorable:
        suggestions.append("Prioritize indoor activities due to weather conditions")
    fastest = transit.fastest_option
    if fastest is not None and fastest.duration_minutes > 60:
        suggestions.append("Consider airport hotel for rest instead of city exploration")

    if recommendations:
        avg_price = sum(r.dynamic_price for r in recommendations) / len(recommendations)
        if avg_price > 100:
            budget.append("Look for free walking tours or self-guided options")
        budget.append(f"Budget ${round(avg_price)} for quality experiences")

    weather_impact = (
        "Perfect weather enhances outdoor experience options"
        if weather.favorable
        else "Weather limitations favor indoor cultural and dining experiences"
    )

    return DiscoveryInsights(
        layover_quality=quality,
        optimization_suggestions=suggestions,
        weather_impact=weather_impact,
        budget_recommendations=budget,
    )


def summarize(
    recommendations: list[RankedRecommendation],
    total_candidates: int,
    layover_minutes: int,
) -> DiscoverySummary:
    """Aggregate statistics over the final recommendation list."""
    if not recommendations:
        return DiscoverySummary(
            total_candidates=total_candidates,
            total_options=0,
            average_score=0.0,
            best_score=0.0,
            category_distribution={},
            price_range=None,
            time_utilization_pct=0.0,
        )

    count = len(recommendations)
    scores = [r.score for r in recommendations]
    prices = [r.dynamic_price for r in recommendations]

    distribution: dict[str, int] = {}
    for rec in recommendations:
        category = rec.experience.primary_category
        distribution[category] = distribution.get(category, 0) + 1

    avg_duration = sum(r.experience.duration.minutes_or_default for r in recommendations) / count

    return DiscoverySummary(
        total_candidates=total_candidates,
        total_options=count,
        average_score=min(1.0, sum(scores) / count),
        best_score=max(scores),
        category_distribution=distribution,
        price_range=PriceRange(
            min=min(prices), max=max(prices), currency=recommendations[0].currency
        ),
        time_utilization_pct=round(avg_duration / layover_minutes * 100, 2),
    )
