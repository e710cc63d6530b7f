"""Pricing strategy engine - data-driven conditions folded over a base price.

Strategies are plain configuration. Each condition field maps to one
predicate in CONDITION_CHECKS, so adding a strategy never needs code.
Matching strategies apply cumulatively in descending priority, and a
strategy's min/max price clamp applies immediately after that strategy,
so a later strategy can move the price outside an earlier bound.
"""

from collections.abc import Callable, Sequence
from datetime import datetime

from backend.discovery.models.common import ActivityType
from backend.discovery.models.layover import LayoverContext
from backend.discovery.models.pricing import (
    PricingContext,
    PricingResult,
    PricingStrategy,
    StrategyConditions,
)
from backend.discovery.models.weather import WeatherSnapshot

ConditionCheck = Callable[[StrategyConditions, PricingContext], bool]


def _within_min_layover(c: StrategyConditions, ctx: PricingContext) -> bool:
    return c.min_layover_minutes is None or ctx.layover_minutes >= c.min_layover_minutes


def _within_max_layover(c: StrategyConditions, ctx: PricingContext) -> bool:
    return c.max_layover_minutes is None or ctx.layover_minutes <= c.max_layover_minutes


def _allows_weather(c: StrategyConditions, ctx: PricingContext) -> bool:
    return not c.weather_categories or ctx.weather_category in c.weather_categories


def _allows_tier(c: StrategyConditions, ctx: PricingContext) -> bool:
    return not c.user_tiers or ctx.user_tier.lower() in c.user_tiers


def _allows_destination(c: StrategyConditions, ctx: PricingContext) -> bool:
    return not c.destinations or ctx.destination_code.upper() in c.destinations


def _allows_experience_type(c: StrategyConditions, ctx: PricingContext) -> bool:
    return not c.experience_types or ctx.experience_type in c.experience_types


# Condition field -> predicate. An unset (or empty) field places no constraint.
CONDITION_CHECKS: dict[str, ConditionCheck] = {
    "min_layover_minutes": _within_min_layover,
    "max_layover_minutes": _within_max_layover,
    "weather_categories": _allows_weather,
    "user_tiers": _allows_tier,
    "destinations": _allows_destination,
    "experience_types": _allows_experience_type,
}


def build_pricing_context(
    layover: LayoverContext,
    weather: WeatherSnapshot,
    user_tier: str,
    experience_type: ActivityType,
    evaluated_at: datetime | None = None,
) -> PricingContext:
    """Assemble the facts strategy conditions are evaluated against."""
    return PricingContext(
        layover_minutes=layover.layover_minutes,
        weather_category=weather.category,
        user_tier=user_tier,
        destination_code=layover.airport_code,
        experience_type=experience_type,
        evaluated_at=evaluated_at or layover.arrival_time,
    )


def failed_conditions(conditions: StrategyConditions, context: PricingContext) -> list[str]:
    """Names of the conditions the context does not satisfy."""
    return [name for name, check in CONDITION_CHECKS.items() if not check(conditions, context)]


def select_strategies(
    strategies: Sequence[PricingStrategy], context: PricingContext
) -> list[PricingStrategy]:
    """Active, matching strategies in application order (priority desc, then id)."""
    matching = [
        s
        for s in strategies
        if s.is_active_at(context.evaluated_at) and not failed_conditions(s.conditions, context)
    ]
    return sorted(matching, key=lambda s: (-s.priority, s.id))


def apply_pricing_strategies(
    base_price: float,
    context: PricingContext,
    strategies: Sequence[PricingStrategy],
    base_markup: float = 1.15,
) -> PricingResult:
    """Fold matching strategies over the marked-up base price.

    With no matching strategy the final price is exactly base_price * base_markup.

    Args:
        base_price: Catalog price before markup
        context: Facts the conditions are checked against
        strategies: Candidate strategy set (any order)
        base_markup: Multiplier applied before any strategy

    Returns:
        PricingResult with the final price, applied ids in order and the
        summed commission-rate adjustment
    """
    price = base_price * base_markup
    commission_adjustment = 0.0
    applied: list[str] = []

    for strategy in select_strategies(strategies, context):
        adjustments = strategy.adjustments
        price *= adjustments.price_multiplier
        commission_adjustment += adjustments.commission_rate_delta

        # Clamp is local to the strategy that declares it
        if adjustments.min_price is not None:
            price = max(price, adjustments.min_price)
        if adjustments.max_price is not None:
            price = min(price, adjustments.max_price)

        applied.append(strategy.id)

    return PricingResult(
        base_price=base_price,
        final_price=max(0.0, price),
        applied_strategy_ids=applied,
        commission_adjustment=commission_adjustment,
    )
