"""Unit tests for commission calculation and price quotes."""

from datetime import UTC, datetime

import pytest
from prometheus_client import REGISTRY
from pydantic import ValidationError

from backend.discovery.models import (
    ActivityType,
    CommissionTierTable,
    PricingContext,
    PricingStrategy,
    StrategyAdjustments,
    WeatherCategory,
)
from backend.discovery.pricing.commission import (
    FALLBACK_STRATEGY_ID,
    calculate_commission,
    price_candidate,
    round2,
)
from backend.discovery.utils.metrics import DiscoveryMetrics, PrometheusDiscoveryMetrics


def make_context(tier: str = "silver") -> PricingContext:
    return PricingContext(
        layover_minutes=300,
        weather_category=WeatherCategory.good,
        user_tier=tier,
        destination_code="DXB",
        experience_type=ActivityType.outdoor,
        evaluated_at=datetime(2026, 3, 10, 12, 0, tzinfo=UTC),
    )


def surge(multiplier: float = 1.25, delta: float = 0.02, id: str = "surge") -> PricingStrategy:
    return PricingStrategy(
        id=id,
        name="Surge",
        priority=10,
        adjustments=StrategyAdjustments(price_multiplier=multiplier, commission_rate_delta=delta),
    )


class RecordingMetrics(DiscoveryMetrics):
    """Metrics double that records calls."""

    def __init__(self) -> None:
        self.strategies: list[str] = []
        self.fallbacks: list[str] = []

    def inc_strategy_applied(self, strategy_id: str) -> None:
        self.strategies.append(strategy_id)

    def inc_commission_fallback(self, reason: str) -> None:
        self.fallbacks.append(reason)


class TestRounding:
    """Test money rounding."""

    def test_round_half_up(self) -> None:
        """Binary floats like 2.675 still round up."""
        assert round2(2.675) == 2.68
        assert round2(0.125) == 0.13
        assert round2(1.004) == 1.0


class TestCalculateCommission:
    """Test the commission split."""

    def test_tier_rate_plus_adjustment(self) -> None:
        breakdown = calculate_commission(125.0, "silver", 0.02, CommissionTierTable())

        assert breakdown.commission_rate == 0.19
        assert breakdown.commission_amount == 23.75
        assert breakdown.partner_payout == 101.25
        assert breakdown.platform_revenue == 23.75
        assert breakdown.fallback is False

    def test_rate_clamped_to_ceiling(self) -> None:
        table = CommissionTierTable(rates={"vip": 0.29})

        breakdown = calculate_commission(100.0, "vip", 0.05, table)

        assert breakdown.commission_rate == 0.30
        assert breakdown.commission_amount == 30.0

    def test_rate_clamped_to_floor(self) -> None:
        table = CommissionTierTable(rates={"basic": 0.11})

        breakdown = calculate_commission(100.0, "basic", -0.05, table)

        assert breakdown.commission_rate == 0.10

    def test_unknown_tier_uses_lowest_rate_without_adjustment(self) -> None:
        breakdown = calculate_commission(100.0, "diamond", 0.05, CommissionTierTable())

        assert breakdown.commission_rate == 0.15
        assert breakdown.commission_amount == 15.0
        assert breakdown.fallback is True

    def test_tier_lookup_is_case_insensitive(self) -> None:
        breakdown = calculate_commission(100.0, "  GOLD ", 0.0, CommissionTierTable())

        assert breakdown.commission_rate == 0.19
        assert breakdown.fallback is False

    def test_amount_and_payout_add_up(self) -> None:
        breakdown = calculate_commission(87.37, "platinum", 0.0, CommissionTierTable())

        assert breakdown.commission_amount + breakdown.partner_payout == pytest.approx(87.37)


class TestTierTable:
    """Test tier table validation."""

    def test_defaults(self) -> None:
        table = CommissionTierTable()
        assert table.rate_for("bronze") == 0.15
        assert table.rate_for("enterprise") == 0.23
        assert table.lowest_rate == 0.15

    def test_tiers_normalized(self) -> None:
        table = CommissionTierTable(rates={"Gold": 0.2})
        assert table.rates == {"gold": 0.2}

    def test_empty_table_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CommissionTierTable(rates={})

    def test_rate_outside_unit_interval_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CommissionTierTable(rates={"gold": 1.5})


class TestPriceCandidate:
    """Test the composite quote."""

    def test_single_strategy_quote(self) -> None:
        """$100, x1.25 and +0.02 on a 0.17 tier -> $125.00 at 0.19, $23.75 commission."""
        quote = price_candidate(
            100.0, make_context("silver"), [surge()], CommissionTierTable(), base_markup=1.0
        )

        assert quote.pricing.final_price == 125.0
        assert quote.commission.commission_rate == 0.19
        assert quote.commission.commission_amount == 23.75
        assert quote.fallback is False

    def test_unknown_tier_falls_back_to_baseline_pricing(self) -> None:
        metrics = RecordingMetrics()

        quote = price_candidate(
            100.0,
            make_context("diamond"),
            [surge()],
            CommissionTierTable(),
            base_markup=1.15,
            metrics=metrics,
        )

        assert quote.pricing.applied_strategy_ids == [FALLBACK_STRATEGY_ID]
        assert quote.pricing.final_price == 100.0 * 1.15
        assert quote.commission.commission_rate == 0.15
        assert quote.fallback is True
        assert metrics.fallbacks == ["unknown_tier"]
        assert metrics.strategies == []

    def test_applied_strategies_recorded(self) -> None:
        metrics = RecordingMetrics()
        strategies = [surge(id="first"), surge(multiplier=1.0, delta=0.0, id="second")]

        price_candidate(
            100.0, make_context(), strategies, CommissionTierTable(), metrics=metrics
        )

        assert metrics.strategies == ["first", "second"]

    def test_prometheus_counters(self) -> None:
        before = (
            REGISTRY.get_sample_value(
                "discovery_strategy_applications_total", {"strategy_id": "prom-surge"}
            )
            or 0.0
        )

        price_candidate(
            50.0,
            make_context(),
            [surge(id="prom-surge")],
            CommissionTierTable(),
            metrics=PrometheusDiscoveryMetrics(),
        )

        after = REGISTRY.get_sample_value(
            "discovery_strategy_applications_total", {"strategy_id": "prom-surge"}
        )
        assert after == before + 1
