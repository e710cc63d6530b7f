"""Unit tests for explanations, layover insights and summaries."""

from datetime import UTC, datetime

import pytest

from backend.discovery.models import (
    ActivityType,
    CommissionTierTable,
    ExperienceFit,
    PriceBucket,
    RankedRecommendation,
    ScoringFactors,
)
from backend.discovery.models.recommendation import FACTOR_NAMES
from backend.discovery.orchestration.insights import (
    layover_insights,
    personalization_insights,
    summarize,
)
from backend.discovery.pricing.commission import fallback_quote
from backend.discovery.transit.analyzer import analyze_layover

ARRIVAL = datetime(2026, 3, 10, 8, 0, tzinfo=UTC)


def uniform_factors(value: float) -> ScoringFactors:
    return ScoringFactors(**{name: value for name in FACTOR_NAMES})


def make_fit(can_reach: bool = True, suitability: float = 1.0) -> ExperienceFit:
    return ExperienceFit(
        can_reach=can_reach,
        travel_minutes=20,
        total_time_required=140,
        reasoning="Reachable" if can_reach else "Requires 140 minutes but only 90 available",
        suitability_score=suitability,
        minimum_layover_required=200,
        ideal=can_reach,
    )


@pytest.fixture
def make_recommendation(make_candidate):
    def _make(
        id: str, score: float, price: float, category: str = "Cultural", minutes: int = 90
    ) -> RankedRecommendation:
        return RankedRecommendation(
            rank=1,
            experience=make_candidate(id=id, category=category, minutes=minutes),
            factors=uniform_factors(score),
            score=score,
            original_price=price,
            dynamic_price=price,
            currency="USD",
            commission_rate=0.15,
            commission_amount=round(price * 0.15, 2),
            price_bucket=PriceBucket.moderate,
        )

    return _make


class TestSummarize:
    """Test aggregate statistics."""

    def test_empty(self) -> None:
        summary = summarize([], total_candidates=4, layover_minutes=300)

        assert summary.total_candidates == 4
        assert summary.total_options == 0
        assert summary.average_score == 0.0
        assert summary.best_score == 0.0
        assert summary.price_range is None
        assert summary.time_utilization_pct == 0.0

    def test_statistics(self, make_recommendation) -> None:
        recommendations = [
            make_recommendation("a", 0.8, 40.0, category="Cultural", minutes=90),
            make_recommendation("b", 0.6, 70.0, category="Food", minutes=120),
        ]

        summary = summarize(recommendations, total_candidates=5, layover_minutes=300)

        assert summary.total_options == 2
        assert summary.average_score == pytest.approx(0.7)
        assert summary.best_score == 0.8
        assert summary.category_distribution == {"Cultural": 1, "Food": 1}
        assert summary.price_range is not None
        assert (summary.price_range.min, summary.price_range.max) == (40.0, 70.0)
        assert summary.time_utilization_pct == 35.0


class TestLayoverInsights:
    """Test layover-level advice."""

    @pytest.mark.parametrize(
        ("minutes", "quality"),
        [(480, "excellent"), (300, "good"), (200, "fair"), (90, "limited")],
    )
    def test_quality_bands(self, make_layover, make_airport, good_weather, minutes, quality) -> None:
        layover = make_layover(minutes=minutes)
        transit = analyze_layover("TST", minutes, ARRIVAL, airports={"TST": make_airport()})

        insights = layover_insights(layover, [], good_weather, transit)

        assert insights.layover_quality == quality

    def test_short_layover_and_bad_weather_advice(
        self, make_layover, make_airport, bad_weather
    ) -> None:
        layover = make_layover(minutes=150)
        transit = analyze_layover("TST", 150, ARRIVAL, airports={"TST": make_airport()})

        insights = layover_insights(layover, [], bad_weather, transit)

        assert insights.optimization_suggestions == [
            "Focus on experiences close to the airport or within the airport",
            "Prioritize indoor activities due to weather conditions",
        ]
        assert insights.weather_impact == (
            "Weather limitations favor indoor cultural and dining experiences"
        )
        assert insights.budget_recommendations == []

    def test_budget_advice_from_prices(
        self, make_layover, make_airport, good_weather, make_recommendation
    ) -> None:
        layover = make_layover(minutes=480)
        transit = analyze_layover("TST", 480, ARRIVAL, airports={"TST": make_airport()})
        recommendations = [
            make_recommendation("a", 0.8, 120.0),
            make_recommendation("b", 0.7, 140.0, category="Food"),
        ]

        insights = layover_insights(layover, recommendations, good_weather, transit)

        assert insights.budget_recommendations == [
            "Look for free walking tours or self-guided options",
            "Budget $130 for quality experiences",
        ]


class TestPersonalizationInsights:
    """Test per-candidate explanations."""

    def test_strong_candidate_explained(self, make_candidate, good_weather) -> None:
        candidate = make_candidate(airport_based=True)
        quote = fallback_quote(candidate.base_price, "silver", CommissionTierTable(), 1.0)

        why, concerns, tips = personalization_insights(
            candidate, uniform_factors(0.9), make_fit(), good_weather, quote, 480
        )

        assert "Matches your previous activity preferences perfectly" in why
        assert "Located inside the airport - no transit needed" in why
        assert concerns == []
        assert tips == []

    def test_weak_candidate_raises_concerns(self, make_candidate, bad_weather) -> None:
        candidate = make_candidate(category="Museum", activity_type=ActivityType.outdoor)
        quote = fallback_quote(candidate.base_price, "silver", CommissionTierTable(), 1.0)
        fit = make_fit(can_reach=False, suitability=0.0)

        why, concerns, tips = personalization_insights(
            candidate, uniform_factors(0.3), fit, bad_weather, quote, 480
        )

        assert why == []
        assert "Weather conditions may affect the experience" in concerns
        assert fit.reasoning in concerns
        assert "Have a backup indoor activity ready" in tips
        assert "Consider museum or gallery instead" in tips

    def test_long_experience_and_markup_tips(self, make_candidate, good_weather) -> None:
        candidate = make_candidate(minutes=200)
        quote = fallback_quote(candidate.base_price, "silver", CommissionTierTable(), 1.3)

        _, _, tips = personalization_insights(
            candidate, uniform_factors(0.9), make_fit(), good_weather, quote, 300
        )

        assert "Consider a shorter version or key highlights only" in tips
        assert "Free walking tours offer a budget-friendly alternative" in tips
