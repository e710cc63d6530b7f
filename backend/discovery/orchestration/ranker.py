"""Recommendation ranker - personalized weighted scoring, diversity and truncation."""

from collections.abc import Callable, Sequence
from typing import TypeVar

from backend.discovery.models.common import PriceBucket, RiskTolerance, TravelExperience, clamp
from backend.discovery.models.profile import UserProfile
from backend.discovery.models.recommendation import (
    FACTOR_NAMES,
    CandidateEvaluation,
    DiversityLimits,
    RankedRecommendation,
    ScoringFactors,
    ScoringWeights,
)
from backend.discovery.pricing.commission import round2

T = TypeVar("T")


def personalized_weights(
    profile: UserProfile,
    base: ScoringWeights | None = None,
    overrides: dict[str, float] | None = None,
) -> ScoringWeights:
    """Adjust the base weight table for this traveler.

    Overrides replace base entries first; profile adjustments are added on top.
    """
    weights = (base or ScoringWeights()).model_dump()
    weights.update(overrides or {})

    prefs = profile.preferences
    if prefs.risk_tolerance == RiskTolerance.conservative:
        weights["safety_assurance"] += 0.05
        weights["weather_compatibility"] += 0.03

    if prefs.cultural_interest > 0.7:
        weights["cultural_alignment"] += 0.05

    if profile.demographics.travel_experience == TravelExperience.novice:
        weights["safety_assurance"] += 0.03
        weights["social_proof"] += 0.02

    return ScoringWeights(**weights)


def combine_score(factors: ScoringFactors, weights: ScoringWeights) -> float:
    """Weighted sum of all factors, clamped to [0, 1]."""
    total = sum(getattr(factors, name) * getattr(weights, name) for name in FACTOR_NAMES)
    return clamp(total)


def price_bucket(price: float) -> PriceBucket:
    """Bucket a price: <25 budget, <75 moderate, <150 premium, else luxury."""
    if price < 25:
        return PriceBucket.budget
    if price < 75:
        return PriceBucket.moderate
    if price < 150:
        return PriceBucket.premium
    return PriceBucket.luxury


def diversify(
    items: Sequence[T],
    category_of: Callable[[T], str],
    price_of: Callable[[T], float],
    limits: DiversityLimits,
    max_results: int,
) -> list[T]:
    """Keep items in order, skipping any whose category or price bucket is full.

    Stops once max_results items are kept.
    """
    kept: list[T] = []
    category_count: dict[str, int] = {}
    bucket_count: dict[PriceBucket, int] = {}

    for item in items:
        if len(kept) >= max_results:
            break

        category = category_of(item)
        bucket = price_bucket(price_of(item))
        if category_count.get(category, 0) >= limits.max_per_category:
            continue
        if bucket_count.get(bucket, 0) >= limits.max_per_price_bucket:
            continue

        kept.append(item)
        category_count[category] = category_count.get(category, 0) + 1
        bucket_count[bucket] = bucket_count.get(bucket, 0) + 1

    return kept


def rank_candidates(
    evaluations: Sequence[CandidateEvaluation],
    weights: ScoringWeights,
    max_results: int = 10,
    limits: DiversityLimits | None = None,
) -> list[RankedRecommendation]:
    """Score, sort and diversify evaluated candidates.

    Ties on score break by experience id, so re-ranking the same input
    always yields the same order.

    Args:
        evaluations: Candidates with their factors, pricing and explanations
        weights: Personalized factor weights
        max_results: Upper bound on returned recommendations
        limits: Per-category and per-price-bucket caps

    Returns:
        Ranked recommendations, best first, ranks starting at 1
    """
    limits = limits or DiversityLimits()

    scored = [(combine_score(e.factors, weights), e) for e in evaluations]
    scored.sort(key=lambda pair: (-pair[0], pair[1].candidate.id))

    selected = diversify(
        scored,
        category_of=lambda pair: pair[1].candidate.primary_category,
        price_of=lambda pair: pair[1].quote.pricing.final_price,
        limits=limits,
        max_results=max_results,
    )

    return [
        to_recommendation(evaluation, score, rank)
        for rank, (score, evaluation) in enumerate(selected, start=1)
    ]


def to_recommendation(
    evaluation: CandidateEvaluation, score: float, rank: int
) -> RankedRecommendation:
    candidate = evaluation.candidate
    pricing = evaluation.quote.pricing
    commission = evaluation.quote.commission
    return RankedRecommendation(
        rank=rank,
        experience=candidate,
        factors=evaluation.factors,
        score=score,
        original_price=candidate.base_price,
        dynamic_price=round2(pricing.final_price),
        currency=candidate.currency,
        commission_rate=commission.commission_rate,
        commission_amount=commission.commission_amount,
        applied_strategy_ids=list(pricing.applied_strategy_ids),
        price_bucket=price_bucket(pricing.final_price),
        explanations=list(evaluation.explanations),
        concerns=list(evaluation.concerns),
        tips=list(evaluation.tips),
        weather_warnings=list(evaluation.weather.warnings),
    )
