"""Unit tests for ranking, personalization and diversity."""

import pytest

from backend.discovery.models import (
    CandidateEvaluation,
    CommissionBreakdown,
    Demographics,
    DiversityLimits,
    ExperienceFit,
    PriceBucket,
    PriceQuote,
    PricingResult,
    RiskTolerance,
    ScoringFactors,
    ScoringWeights,
    TravelExperience,
    UserPreferences,
    UserProfile,
    WeatherMatch,
)
from backend.discovery.models.recommendation import FACTOR_NAMES
from backend.discovery.orchestration.ranker import (
    combine_score,
    diversify,
    personalized_weights,
    price_bucket,
    rank_candidates,
)


def uniform_factors(value: float) -> ScoringFactors:
    return ScoringFactors(**{name: value for name in FACTOR_NAMES})


@pytest.fixture
def make_evaluation(make_candidate):
    """Factory for evaluations whose factors all share one value."""

    def _make(
        id: str, score: float, category: str = "Cultural", final_price: float = 50.0
    ) -> CandidateEvaluation:
        return CandidateEvaluation(
            candidate=make_candidate(id=id, category=category, base_price=final_price),
            factors=uniform_factors(score),
            weather=WeatherMatch(score=1.0, recommendation="Good weather conditions"),
            fit=ExperienceFit(
                can_reach=True,
                travel_minutes=20,
                total_time_required=140,
                reasoning="Reachable",
                suitability_score=1.0,
                minimum_layover_required=200,
                ideal=True,
            ),
            quote=PriceQuote(
                pricing=PricingResult(base_price=final_price, final_price=final_price),
                commission=CommissionBreakdown(
                    commission_rate=0.15,
                    commission_amount=round(final_price * 0.15, 2),
                    partner_payout=round(final_price * 0.85, 2),
                    platform_revenue=round(final_price * 0.15, 2),
                    tier="silver",
                ),
            ),
        )

    return _make


class TestWeights:
    """Test personalized weight adjustment."""

    def test_default_profile_keeps_base_weights(self, make_profile) -> None:
        assert personalized_weights(make_profile()) == ScoringWeights()

    def test_conservative_traveler(self, make_profile) -> None:
        weights = personalized_weights(make_profile(risk_tolerance=RiskTolerance.conservative))

        assert weights.safety_assurance == pytest.approx(0.15)
        assert weights.weather_compatibility == pytest.approx(0.18)

    def test_culture_lover(self, make_profile) -> None:
        weights = personalized_weights(make_profile(cultural_interest=0.8))

        assert weights.cultural_alignment == pytest.approx(0.10)

    def test_novice_traveler(self) -> None:
        profile = UserProfile(
            user_id="novice",
            preferences=UserPreferences(),
            demographics=Demographics(travel_experience=TravelExperience.novice),
        )

        weights = personalized_weights(profile)

        assert weights.safety_assurance == pytest.approx(0.13)
        assert weights.social_proof == pytest.approx(0.07)

    def test_overrides_replace_before_adjustment(self, make_profile) -> None:
        profile = make_profile(risk_tolerance=RiskTolerance.conservative)

        weights = personalized_weights(profile, overrides={"safety_assurance": 0.5})

        assert weights.safety_assurance == pytest.approx(0.55)

    def test_combined_score_clamped(self) -> None:
        heavy = ScoringWeights(**{name: 1.0 for name in FACTOR_NAMES})

        assert combine_score(uniform_factors(1.0), ScoringWeights()) == pytest.approx(1.0)
        assert combine_score(uniform_factors(0.5), heavy) == 1.0
        assert combine_score(uniform_factors(0.0), heavy) == 0.0


class TestPriceBucket:
    """Test price bucketing."""

    @pytest.mark.parametrize(
        ("price", "bucket"),
        [
            (0.0, PriceBucket.budget),
            (24.99, PriceBucket.budget),
            (25.0, PriceBucket.moderate),
            (74.99, PriceBucket.moderate),
            (75.0, PriceBucket.premium),
            (149.99, PriceBucket.premium),
            (150.0, PriceBucket.luxury),
        ],
    )
    def test_bucket_boundaries(self, price: float, bucket: PriceBucket) -> None:
        assert price_bucket(price) == bucket


class TestDiversify:
    """Test the generic diversity filter."""

    def test_category_cap(self) -> None:
        items = [("food", 10.0)] * 5 + [("art", 10.0)]

        kept = diversify(
            items,
            category_of=lambda i: i[0],
            price_of=lambda i: i[1] * 10,
            limits=DiversityLimits(max_per_category=2, max_per_price_bucket=10),
            max_results=10,
        )

        assert kept == [("food", 10.0), ("food", 10.0), ("art", 10.0)]

    def test_stops_at_max_results(self) -> None:
        items = [(f"cat-{i}", float(i * 40)) for i in range(8)]

        kept = diversify(
            items, lambda i: i[0], lambda i: i[1], DiversityLimits(), max_results=3
        )

        assert kept == items[:3]


class TestRankCandidates:
    """Test the full ranking step."""

    def test_sorted_by_score_then_id(self, make_evaluation) -> None:
        evaluations = [
            make_evaluation("a", 0.5, category="Food"),
            make_evaluation("c", 0.9, category="Art"),
            make_evaluation("b", 0.9, category="Music"),
        ]

        ranked = rank_candidates(evaluations, ScoringWeights())

        assert [r.experience.id for r in ranked] == ["b", "c", "a"]
        assert [r.rank for r in ranked] == [1, 2, 3]
        assert ranked[0].score >= ranked[1].score >= ranked[2].score

    def test_at_most_three_per_category(self, make_evaluation) -> None:
        evaluations = [make_evaluation(f"c{i}", 0.9 - i * 0.05) for i in range(5)]
        evaluations.append(make_evaluation("food", 0.1, category="Food"))

        ranked = rank_candidates(evaluations, ScoringWeights())

        assert [r.experience.id for r in ranked] == ["c0", "c1", "c2", "food"]

    def test_at_most_four_per_price_bucket(self, make_evaluation) -> None:
        evaluations = [
            make_evaluation(f"e{i}", 0.9 - i * 0.05, category=f"Cat{i}", final_price=50.0)
            for i in range(6)
        ]
        evaluations.append(make_evaluation("cheap", 0.1, category="Other", final_price=10.0))

        ranked = rank_candidates(evaluations, ScoringWeights())

        assert [r.experience.id for r in ranked] == ["e0", "e1", "e2", "e3", "cheap"]

    def test_max_results(self, make_evaluation) -> None:
        evaluations = [
            make_evaluation(f"e{i}", 0.5, category=f"Cat{i}", final_price=20.0 + i * 40)
            for i in range(6)
        ]

        ranked = rank_candidates(evaluations, ScoringWeights(), max_results=2)

        assert len(ranked) == 2

    def test_ranking_is_idempotent_and_order_independent(self, make_evaluation) -> None:
        evaluations = [
            make_evaluation(f"e{i}", (i % 3) / 3, category=f"Cat{i % 2}", final_price=30.0 * i)
            for i in range(7)
        ]

        first = rank_candidates(evaluations, ScoringWeights())
        second = rank_candidates(evaluations, ScoringWeights())
        reversed_input = rank_candidates(list(reversed(evaluations)), ScoringWeights())

        assert first == second == reversed_input

    def test_recommendation_carries_price_and_commission(self, make_evaluation) -> None:
        evaluation = make_evaluation("e1", 0.8, final_price=57.499)

        ranked = rank_candidates([evaluation], ScoringWeights())

        rec = ranked[0]
        assert rec.dynamic_price == 57.5
        assert rec.original_price == 57.499
        assert rec.commission_rate == 0.15
        assert rec.price_bucket == PriceBucket.moderate
        assert rec.currency == "USD"

    def test_empty_input(self) -> None:
        assert rank_candidates([], ScoringWeights()) == []
