"""Commission calculation and the composite price quote for one candidate."""

import logging
from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from backend.discovery.models.common import clamp
from backend.discovery.models.pricing import (
    CommissionBreakdown,
    CommissionTierTable,
    PriceQuote,
    PricingContext,
    PricingResult,
    PricingStrategy,
)
from backend.discovery.pricing.strategies import apply_pricing_strategies
from backend.discovery.utils.metrics import DiscoveryMetrics

logger = logging.getLogger(__name__)

# Commission rate is always clamped into this range
RATE_FLOOR = 0.10
RATE_CEILING = 0.30

FALLBACK_STRATEGY_ID = "fallback"


def round2(value: float) -> float:
    """Round money half-up to 2 decimal places."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _round_rate(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP))


def calculate_commission(
    final_price: float,
    user_tier: str,
    commission_adjustment: float,
    tier_table: CommissionTierTable,
) -> CommissionBreakdown:
    """Split a final price into commission and partner payout.

    Never raises for unknown tiers: the lowest tier rate is used without
    any strategy adjustment, and the breakdown is flagged as a fallback.

    Args:
        final_price: Price after strategies
        user_tier: Traveler loyalty tier
        commission_adjustment: Summed strategy commission deltas
        tier_table: Tier -> base rate

    Returns:
        CommissionBreakdown with rate in [0.10, 0.30]
    """
    base_rate = tier_table.rate_for(user_tier)
    fallback = base_rate is None
    if base_rate is None:
        logger.warning(
            f"Unknown loyalty tier {user_tier!r}; using lowest tier rate",
            extra={"structured": {"tier": user_tier, "rate": tier_table.lowest_rate}},
        )
        raw_rate = tier_table.lowest_rate
    else:
        raw_rate = base_rate + commission_adjustment

    return _breakdown(final_price, raw_rate, user_tier, fallback)


def price_candidate(
    base_price: float,
    context: PricingContext,
    strategies: Sequence[PricingStrategy],
    tier_table: CommissionTierTable,
    base_markup: float = 1.15,
    metrics: DiscoveryMetrics | None = None,
) -> PriceQuote:
    """Price one candidate and compute its commission.

    Falls back to baseline pricing (base markup only, strategy id
    "fallback") at the lowest tier rate when the tier is unknown or the
    strategy chain cannot be evaluated.
    """
    metrics = metrics or DiscoveryMetrics()

    try:
        pricing = apply_pricing_strategies(base_price, context, strategies, base_markup)
    except (ValueError, ArithmeticError) as e:
        logger.warning(
            "Pricing strategies failed; using baseline pricing",
            extra={"structured": {"error": str(e), "tier": context.user_tier}},
        )
        metrics.inc_commission_fallback("pricing_error")
        return fallback_quote(base_price, context.user_tier, tier_table, base_markup)

    if tier_table.rate_for(context.user_tier) is None:
        metrics.inc_commission_fallback("unknown_tier")
        return fallback_quote(base_price, context.user_tier, tier_table, base_markup)

    for strategy_id in pricing.applied_strategy_ids:
        metrics.inc_strategy_applied(strategy_id)

    commission = calculate_commission(
        pricing.final_price, context.user_tier, pricing.commission_adjustment, tier_table
    )
    return PriceQuote(pricing=pricing, commission=commission)


def fallback_quote(
    base_price: float,
    user_tier: str,
    tier_table: CommissionTierTable,
    base_markup: float = 1.15,
) -> PriceQuote:
    """Baseline quote: base markup only, lowest tier rate."""
    final_price = max(0.0, base_price) * base_markup
    pricing = PricingResult(
        base_price=max(0.0, base_price),
        final_price=final_price,
        applied_strategy_ids=[FALLBACK_STRATEGY_ID],
        commission_adjustment=0.0,
    )
    commission = _breakdown(final_price, tier_table.lowest_rate, user_tier, fallback=True)
    return PriceQuote(pricing=pricing, commission=commission)


def _breakdown(
    final_price: float, raw_rate: float, tier: str, fallback: bool
) -> CommissionBreakdown:
    rate = clamp(_round_rate(raw_rate), RATE_FLOOR, RATE_CEILING)
    amount = round2(final_price * rate)
    payout = round2(final_price - amount)
    return CommissionBreakdown(
        commission_rate=rate,
        commission_amount=amount,
        partner_payout=max(0.0, payout),
        platform_revenue=amount,
        tier=tier,
        fallback=fallback,
    )
