"""Discovery orchestrator - layover context in, ranked priced recommendations out.

Stages run strictly forward:
1. Resolve weather (fallback snapshot when missing)
2. Transit feasibility (cached by the caller-owned cache)
3. Per-candidate scoring, pricing and commission (bounded fan-out)
4. Preference filters, ranking and diversity
5. Summary and insights

Only a malformed request or cancellation raises. Every other problem is
recorded as a PipelineIssue on the result.
"""

import logging
from collections.abc import Mapping
from datetime import datetime
from functools import partial
from typing import Any

from pydantic import ValidationError

from backend.discovery.adapters.strategies import parse_strategies, parse_tier_table
from backend.discovery.adapters.weather import weather_advice
from backend.discovery.features.factors import compute_factors
from backend.discovery.models.config import EngineConfig
from backend.discovery.models.experience import ExperienceCandidate
from backend.discovery.models.issues import IssueKind, PipelineIssue
from backend.discovery.models.layover import LayoverContext
from backend.discovery.models.pricing import CommissionTierTable, PricingStrategy
from backend.discovery.models.profile import UserProfile
from backend.discovery.models.recommendation import (
    CandidateEvaluation,
    DiscoveryRequest,
    DiscoveryResult,
)
from backend.discovery.models.transit import TransitAnalysis, TransitQuery
from backend.discovery.models.weather import WeatherSnapshot
from backend.discovery.orchestration.insights import (
    layover_insights,
    personalization_insights,
    summarize,
)
from backend.discovery.orchestration.ranker import personalized_weights, rank_candidates
from backend.discovery.orchestration.state import DiscoveryState
from backend.discovery.pricing.commission import price_candidate, round2
from backend.discovery.pricing.strategies import build_pricing_context
from backend.discovery.tools.cache import TTLCache, make_key
from backend.discovery.tools.fanout import (
    CancelToken,
    DiscoveryCancelledError,
    DiscoveryError,
    FanoutConfig,
    FanoutContext,
    FanoutLogger,
    run_fanout,
)
from backend.discovery.transit.analyzer import analyze_layover, assess_experience_fit
from backend.discovery.utils.metrics import DiscoveryMetrics
from backend.discovery.weather.scorer import score_weather

logger = logging.getLogger(__name__)

TRANSIT_CACHE_NAMESPACE = "transit.analysis"


def parse_request(payload: Mapping[str, Any]) -> DiscoveryRequest:
    """Validate a raw request payload.

    Inline strategies and tier rates are validated entry by entry: invalid
    ones are skipped and recorded on `config_issues`, the rest price normally.

    Raises:
        DiscoveryError: The payload is malformed (e.g., departure not after arrival)
    """
    data = dict(payload)
    config_issues: list[PipelineIssue] = []

    if "strategies" in data:
        entries = data["strategies"] or []
        if not isinstance(entries, list):
            raise DiscoveryError("Malformed discovery request: strategies must be a list")
        data["strategies"], strategy_issues = parse_strategies(entries)
        config_issues.extend(strategy_issues)

    if "tier_table" in data and not isinstance(data["tier_table"], CommissionTierTable):
        rates = data["tier_table"]
        if isinstance(rates, Mapping) and "rates" in rates:
            rates = rates["rates"]
        data["tier_table"], tier_issues = parse_tier_table(rates)
        config_issues.extend(tier_issues)

    try:
        request = DiscoveryRequest.model_validate(data)
    except ValidationError as e:
        raise DiscoveryError(f"Malformed discovery request: {e.error_count()} error(s)") from e

    if config_issues:
        request = request.model_copy(
            update={"config_issues": request.config_issues + config_issues}
        )
    return request


async def discover_experiences(
    request: DiscoveryRequest,
    config: EngineConfig,
    cancel_token: CancelToken | None = None,
    metrics: DiscoveryMetrics | None = None,
    item_logger: FanoutLogger | None = None,
    transit_cache: TTLCache | None = None,
    transit_ttl_seconds: int = 3600,
) -> DiscoveryResult:
    """Run the full discovery pipeline for one layover.

    Args:
        request: Layover, weather, traveler, candidates and pricing configuration
        config: Engine configuration (passed per call so it can be hot-reloaded)
        cancel_token: Cancellation token (optional, defaults to not cancelled)
        metrics: Metrics recorder (optional, defaults to no-op)
        item_logger: Per-candidate structured logger (optional, defaults to no-op)
        transit_cache: Caller-owned cache for transit analyses
        transit_ttl_seconds: TTL for cached transit analyses

    Returns:
        DiscoveryResult with recommendations, summary, insights and issues

    Raises:
        DiscoveryCancelledError: The caller cancelled; no partial result is returned
    """
    cancel_token = cancel_token or CancelToken()
    metrics = metrics or DiscoveryMetrics()
    state = DiscoveryState(request=request, issues=list(request.config_issues))

    try:
        cancel_token.throw_if_cancelled()
        state = resolve_weather(state)
        state = analyze_transit(state, config, transit_cache, transit_ttl_seconds)
        state = select_candidates(state, config)
        state = check_pricing_config(state)
        state = await score_candidates(state, config, cancel_token, metrics, item_logger)
        cancel_token.throw_if_cancelled()
        state = rank(state, config)
    except DiscoveryCancelledError:
        metrics.inc_request("cancelled")
        logger.info(
            f"Discovery {request.request_id} cancelled",
            extra={"structured": {"request_id": request.request_id}},
        )
        raise
    except Exception:
        metrics.inc_request("failed")
        logger.exception(
            f"Discovery {request.request_id} failed",
            extra={"structured": {"request_id": request.request_id}},
        )
        raise

    logger.info(
        f"Discovery {request.request_id} ranked {len(state.recommendations)} "
        f"of {len(request.candidates)} candidates",
        extra={
            "structured": {
                "request_id": request.request_id,
                "recommendations": len(state.recommendations),
                "issues": [issue.code for issue in state.issues],
            }
        },
    )
    metrics.inc_request("succeeded")
    return respond(state)


def resolve_weather(state: DiscoveryState) -> DiscoveryState:
    """Use the supplied snapshot, or the conservative fallback when missing."""
    weather = state.request.weather
    if weather is None:
        weather = WeatherSnapshot.fallback()
        logger.warning(
            "No weather snapshot supplied; using fallback",
            extra={"structured": {"request_id": state.request.request_id}},
        )

    if weather.is_fallback:
        state.issues.append(
            PipelineIssue(
                kind=IssueKind.DATA_UNAVAILABLE,
                code="WEATHER_FALLBACK",
                message="Weather data unavailable; scored against conservative defaults.",
            )
        )

    state.weather = weather
    return state


def analyze_transit(
    state: DiscoveryState,
    config: EngineConfig,
    cache: TTLCache | None,
    ttl_seconds: int,
) -> DiscoveryState:
    """Compute (or reuse) the transit analysis for this layover."""
    layover = state.request.layover
    query = TransitQuery(
        airport_code=layover.airport_code,
        layover_minutes=layover.layover_minutes,
        arrival_time=layover.arrival_time,
        has_checked_baggage=state.request.preferences.has_checked_baggage,
    )

    analysis: TransitAnalysis | None = None
    cache_key = make_key(TRANSIT_CACHE_NAMESPACE, query)
    if cache is not None:
        analysis = cache.get(cache_key)

    if analysis is None:
        analysis = analyze_layover(
            query.airport_code,
            query.layover_minutes,
            query.arrival_time,
            has_checked_baggage=query.has_checked_baggage,
            airports=config.airports,
            config=config.transit,
        )
        if cache is not None:
            cache.set(cache_key, analysis, ttl_seconds)

    if analysis.used_default_profile:
        state.issues.append(
            PipelineIssue(
                kind=IssueKind.DATA_UNAVAILABLE,
                code="AIRPORT_DEFAULT_PROFILE",
                message=(
                    f"No transit data for {analysis.airport_code}; "
                    "feasibility uses a conservative default profile."
                ),
                details={"airport_code": analysis.airport_code},
            )
        )

    airport = config.airports.get(layover.airport_code)
    state.airport_activities = list(airport.airport_activities) if airport else []
    state.transit = analysis
    return state


def select_candidates(state: DiscoveryState, config: EngineConfig) -> DiscoveryState:
    """Drop off-airport candidates when the traveler cannot leave the airport."""
    assert state.transit is not None
    if state.transit.can_leave_airport:
        return state

    excluded = [c.id for c in state.request.candidates if not c.airport_based]
    transit = state.transit
    state.issues.append(
        PipelineIssue(
            kind=IssueKind.INFEASIBLE_LAYOVER,
            code="CANNOT_LEAVE_AIRPORT",
            message=(
                f"Only {transit.available_time_in_city_minutes} minutes would remain in the "
                f"city, below the {config.transit.minimum_city_minutes}-minute minimum; "
                "only airport experiences are ranked."
            ),
            candidate_ids=excluded,
            details={
                "available_time_in_city_minutes": transit.available_time_in_city_minutes,
                "minimum_layover_required_minutes": transit.minimum_layover_required_minutes,
                "layover_minutes": state.layover_minutes,
            },
        )
    )
    return state


def check_pricing_config(state: DiscoveryState) -> DiscoveryState:
    """Record an unknown loyalty tier once per request (pricing falls back per candidate)."""
    tier = state.request.profile.demographics.loyalty_tier
    if state.request.tier_table.rate_for(tier) is None:
        state.issues.append(
            PipelineIssue(
                kind=IssueKind.CONFIGURATION_INVALID,
                code="UNKNOWN_TIER",
                message=f"Loyalty tier {tier!r} is not in the tier table; using baseline pricing.",
                details={"tier": tier, "known_tiers": sorted(state.request.tier_table.rates)},
            )
        )
    return state


def evaluate_candidate(
    candidate: ExperienceCandidate,
    *,
    layover: LayoverContext,
    weather: WeatherSnapshot,
    transit: TransitAnalysis,
    profile: UserProfile,
    strategies: list[PricingStrategy],
    tier_table: CommissionTierTable,
    config: EngineConfig,
    metrics: DiscoveryMetrics,
    evaluated_at: datetime | None = None,
) -> CandidateEvaluation:
    """Score, price and explain one candidate. Pure apart from metrics."""
    layover_minutes = layover.layover_minutes
    weather_match = score_weather(candidate, weather, config.weather)
    fit = assess_experience_fit(
        candidate.duration.minutes_or_default,
        transit,
        layover_minutes,
        physical_demand=candidate.physical_demand,
        airport_based=candidate.airport_based,
        config=config.transit,
    )

    tier = profile.demographics.loyalty_tier
    context = build_pricing_context(
        layover, weather, tier, candidate.activity_type, evaluated_at=evaluated_at
    )
    quote = price_candidate(
        candidate.base_price,
        context,
        strategies,
        tier_table,
        base_markup=config.base_markup,
        metrics=metrics,
    )

    factors = compute_factors(
        candidate, profile, layover, weather, weather_match, fit, quote, config.experience
    )
    why, concerns, tips = personalization_insights(
        candidate, factors, fit, weather, quote, layover_minutes
    )

    return CandidateEvaluation(
        candidate=candidate,
        factors=factors,
        weather=weather_match,
        fit=fit,
        quote=quote,
        explanations=why,
        concerns=concerns,
        tips=tips,
    )


async def score_candidates(
    state: DiscoveryState,
    config: EngineConfig,
    cancel_token: CancelToken,
    metrics: DiscoveryMetrics,
    item_logger: FanoutLogger | None,
) -> DiscoveryState:
    """Evaluate candidates concurrently; failed or late ones are dropped."""
    assert state.weather is not None and state.transit is not None
    request = state.request

    candidates = request.candidates
    if not state.transit.can_leave_airport:
        candidates = [c for c in candidates if c.airport_based]

    evaluate = partial(
        evaluate_candidate,
        layover=request.layover,
        weather=state.weather,
        transit=state.transit,
        profile=request.profile,
        strategies=request.strategies,
        tier_table=request.tier_table,
        config=config,
        metrics=metrics,
        evaluated_at=request.evaluated_at,
    )

    outcome = await run_fanout(
        FanoutContext(request_id=request.request_id),
        candidates,
        evaluate,
        key_fn=lambda c: c.id,
        config=FanoutConfig(fanout_cap=config.fanout_cap, timeout_ms=config.request_timeout_ms),
        cancel_token=cancel_token,
        metrics=metrics,
        logger=item_logger,
    )

    for failure in outcome.failures:
        code = "CANDIDATE_TIMEOUT" if failure.reason == "timeout" else "CANDIDATE_FAILED"
        state.issues.append(
            PipelineIssue(
                kind=IssueKind.CANDIDATE_DROPPED,
                code=code,
                message=f"Candidate {failure.key} dropped: {failure.reason}.",
                candidate_ids=[failure.key],
                details={"reason": failure.reason, "error": str(failure.error)},
            )
        )

    state.evaluations = outcome.results
    return state


def rank(state: DiscoveryState, config: EngineConfig) -> DiscoveryState:
    """Apply the request's budget and category filters, then rank and diversify.

    max_results and the diversity caps count only candidates that pass the
    filters.
    """
    request = state.request
    prefs = request.preferences
    weights = personalized_weights(request.profile, config.weights, config.weight_overrides)

    state.recommendations = rank_candidates(
        _apply_preferences(state.evaluations, prefs.max_budget, prefs.preferred_categories),
        weights,
        max_results=prefs.max_results or config.max_results,
        limits=config.diversity,
    )
    return state


def _apply_preferences(
    evaluations: list[CandidateEvaluation],
    max_budget: float | None,
    preferred_categories: list[str],
) -> list[CandidateEvaluation]:
    kept = evaluations
    if max_budget is not None:
        kept = [e for e in kept if round2(e.quote.pricing.final_price) <= max_budget]

    if preferred_categories:
        wanted = {c.strip().lower() for c in preferred_categories}
        kept = [e for e in kept if wanted.intersection(e.candidate.category_names)]

    return kept


def respond(state: DiscoveryState) -> DiscoveryResult:
    """Assemble the result envelope."""
    assert state.weather is not None and state.transit is not None
    request = state.request

    return DiscoveryResult(
        request_id=request.request_id,
        recommendations=state.recommendations,
        transit=state.transit,
        weather=state.weather,
        weather_advice=weather_advice(state.weather, state.layover_minutes),
        summary=summarize(
            state.recommendations, len(request.candidates), state.layover_minutes
        ),
        insights=layover_insights(
            request.layover, state.recommendations, state.weather, state.transit
        ),
        airport_activities=state.airport_activities,
        issues=state.issues,
    )
