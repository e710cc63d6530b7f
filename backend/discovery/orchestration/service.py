"""Settings-driven entry point: wires adapters, caches and metrics around the pipeline."""

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from backend.discovery.adapters.strategies import load_pricing_config
from backend.discovery.adapters.weather import fetch_current_weather
from backend.discovery.config import Settings, build_engine_config, get_settings
from backend.discovery.models.config import EngineConfig
from backend.discovery.models.recommendation import DiscoveryRequest, DiscoveryResult
from backend.discovery.models.weather import WeatherSnapshot
from backend.discovery.orchestration.discovery import discover_experiences, parse_request
from backend.discovery.tools.cache import InMemoryTTLCache, TTLCache
from backend.discovery.tools.fanout import CancelToken
from backend.discovery.utils.logging import StructuredDiscoveryLogger
from backend.discovery.utils.metrics import DiscoveryMetrics, PrometheusDiscoveryMetrics

logger = logging.getLogger(__name__)


async def run_discovery(
    payload: Mapping[str, Any],
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
    cache: TTLCache | None = None,
    cancel_token: CancelToken | None = None,
    metrics: DiscoveryMetrics | None = None,
) -> DiscoveryResult:
    """Validate a raw payload and run discovery with settings-backed collaborators.

    Payloads without `strategies`/`tier_table` get the configured pricing set.
    Payloads without `weather` get current conditions for the airport's city
    when its coordinates are known.

    Args:
        payload: Raw request data (see DiscoveryRequest)
        settings: Settings instance (defaults to get_settings())
        http_client: Optional HTTP client for the weather adapter (injected for testing)
        cache: Caller-owned cache shared by weather and transit lookups
        cancel_token: Cancellation token
        metrics: Metrics recorder (defaults to Prometheus)

    Raises:
        DiscoveryError: The payload is malformed
        DiscoveryCancelledError: The caller cancelled
    """
    settings = settings or get_settings()
    config = build_engine_config(settings)
    cache = cache if cache is not None else InMemoryTTLCache()
    metrics = metrics or PrometheusDiscoveryMetrics()

    request = parse_request(payload)

    update: dict[str, Any] = {}
    if "strategies" not in payload or "tier_table" not in payload:
        pricing = load_pricing_config(settings.strategies_path)
        update["config_issues"] = pricing.issues + request.config_issues
        if "strategies" not in payload:
            update["strategies"] = pricing.strategies
        if "tier_table" not in payload:
            update["tier_table"] = pricing.tier_table
    if request.weather is None:
        weather = await _current_weather(request, config, settings, http_client, cache)
        if weather is not None:
            update["weather"] = weather
    if update:
        request = request.model_copy(update=update)

    return await discover_experiences(
        request,
        config,
        cancel_token=cancel_token,
        metrics=metrics,
        item_logger=StructuredDiscoveryLogger(),
        transit_cache=cache,
        transit_ttl_seconds=settings.transit_ttl_minutes * 60,
    )


async def _current_weather(
    request: DiscoveryRequest,
    config: EngineConfig,
    settings: Settings,
    http_client: httpx.AsyncClient | None,
    cache: TTLCache,
) -> WeatherSnapshot | None:
    airport = config.airports.get(request.layover.airport_code)
    if airport is None or airport.city_center is None:
        logger.info(
            f"No coordinates for {request.layover.airport_code}; skipping weather lookup",
            extra={"structured": {"request_id": request.request_id}},
        )
        return None

    return await fetch_current_weather(
        airport.city_center,
        base_url=settings.open_meteo_base_url,
        client=http_client,
        cache=cache,
        ttl_seconds=settings.weather_ttl_minutes * 60,
        timeout_sec=settings.weather_timeout_sec,
    )
