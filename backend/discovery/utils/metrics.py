"""Prometheus metrics for the discovery pipeline."""

from prometheus_client import Counter, Histogram

from backend.discovery.tools.fanout import FanoutMetrics

# Candidate scoring metrics
candidate_latency_ms = Histogram(
    "discovery_candidate_latency_ms",
    "Per-candidate scoring latency in milliseconds",
    ["stage", "outcome"],
    buckets=[1, 5, 10, 25, 50, 100, 250, 500, 1000, 5000],
)

candidate_failures_total = Counter(
    "discovery_candidate_failures_total",
    "Candidates dropped from a discovery request",
    ["stage", "reason"],
)

# Pricing metrics
strategy_applications_total = Counter(
    "discovery_strategy_applications_total",
    "Pricing strategy applications",
    ["strategy_id"],
)

commission_fallbacks_total = Counter(
    "discovery_commission_fallbacks_total",
    "Commission calculations that fell back to the lowest tier rate",
    ["reason"],
)

# Request metrics
discovery_requests_total = Counter(
    "discovery_requests_total",
    "Discovery requests by outcome",
    ["outcome"],
)


class DiscoveryMetrics(FanoutMetrics):
    """Interface for discovery metrics (no-op)."""

    def record_latency(self, stage: str, outcome: str, latency_ms: float) -> None:
        pass

    def inc_failure(self, stage: str, reason: str) -> None:
        pass

    def inc_strategy_applied(self, strategy_id: str) -> None:
        pass

    def inc_commission_fallback(self, reason: str) -> None:
        pass

    def inc_request(self, outcome: str) -> None:
        pass


class PrometheusDiscoveryMetrics(DiscoveryMetrics):
    """Prometheus-based discovery metrics implementation."""

    def record_latency(self, stage: str, outcome: str, latency_ms: float) -> None:
        """Record candidate scoring latency."""
        candidate_latency_ms.labels(stage=stage, outcome=outcome).observe(latency_ms)

    def inc_failure(self, stage: str, reason: str) -> None:
        """Increment candidate failure counter."""
        candidate_failures_total.labels(stage=stage, reason=reason).inc()

    def inc_strategy_applied(self, strategy_id: str) -> None:
        """Increment strategy application counter."""
        strategy_applications_total.labels(strategy_id=strategy_id).inc()

    def inc_commission_fallback(self, reason: str) -> None:
        """Increment commission fallback counter."""
        commission_fallbacks_total.labels(reason=reason).inc()

    def inc_request(self, outcome: str) -> None:
        """Increment request counter."""
        discovery_requests_total.labels(outcome=outcome).inc()
