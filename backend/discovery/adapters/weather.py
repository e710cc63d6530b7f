"""Weather adapter using Open-Meteo API (keyless, free tier)."""

import logging
from datetime import datetime

import httpx

from backend.discovery.models.common import Geo
from backend.discovery.models.weather import WeatherSnapshot
from backend.discovery.tools.cache import TTLCache, make_key

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "weather.open_meteo"

# WMO weather interpretation codes that rule out outdoor activity
# Docs: https://open-meteo.com/en/docs#weathervariables
_SEVERE_CODES = {
    65: "heavy rain",
    67: "heavy rain",
    82: "heavy rain",
    71: "snow",
    73: "snow",
    75: "snow",
    77: "snow",
    85: "snow",
    86: "snow",
    95: "thunderstorm",
    96: "thunderstorm",
    99: "thunderstorm",
}


def condition_for_code(code: int | None) -> str | None:
    """Map a WMO weather code to a coarse condition label."""
    if code is None:
        return None
    if code in _SEVERE_CODES:
        return _SEVERE_CODES[code]
    if code == 0:
        return "clear"
    if code <= 3:
        return "cloudy"
    if code in (45, 48):
        return "fog"
    if 51 <= code <= 82:
        return "rain"
    return None


async def fetch_current_weather(
    location: Geo,
    base_url: str = "https://api.open-meteo.com/v1/forecast",
    client: httpx.AsyncClient | None = None,
    cache: TTLCache | None = None,
    ttl_seconds: int = 1800,
    timeout_sec: float = 4.0,
) -> WeatherSnapshot:
    """Fetch current conditions from Open-Meteo.

    Never raises for provider problems: network errors, HTTP errors and
    malformed payloads all return `WeatherSnapshot.fallback()`.

    Args:
        location: Geographic coordinates of the destination
        base_url: Open-Meteo API base URL
        client: Optional httpx client (for testing with mocks)
        cache: Optional caller-owned TTL cache
        ttl_seconds: Cache TTL for fresh snapshots
        timeout_sec: Timeout for a client created here

    Returns:
        WeatherSnapshot (is_fallback=True when data was unavailable)
    """
    cache_key = make_key(CACHE_NAMESPACE, location)
    if cache is not None:
        cached = cache.get(cache_key)
        if cached is not None:
            return cached

    params: dict[str, str | float] = {
        "latitude": location.lat,
        "longitude": location.lon,
        "current": "temperature_2m,precipitation,wind_speed_10m,visibility,weather_code",
        "wind_speed_unit": "kmh",
        "timezone": "UTC",
    }

    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=timeout_sec)
        close_client = True

    try:
        response = await client.get(base_url, params=params)
        response.raise_for_status()
        snapshot = parse_current(response.json())
    except httpx.HTTPError as e:
        logger.warning(
            "Weather fetch failed; using fallback",
            extra={"structured": {"lat": location.lat, "lon": location.lon, "error": str(e)}},
        )
        return WeatherSnapshot.fallback()
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(
            "Malformed weather payload; using fallback",
            extra={"structured": {"lat": location.lat, "lon": location.lon, "error": str(e)}},
        )
        return WeatherSnapshot.fallback()
    finally:
        if close_client:
            await client.aclose()

    if cache is not None:
        cache.set(cache_key, snapshot, ttl_seconds)
    return snapshot


def parse_current(data: dict) -> WeatherSnapshot:
    """Build a snapshot from an Open-Meteo `current` response.

    Response structure: {current: {time, temperature_2m, precipitation, ...}}
    """
    current = data["current"]
    visibility_m = current.get("visibility")
    code = current.get("weather_code")
    observed = current.get("time")

    return WeatherSnapshot(
        temperature_c=float(current["temperature_2m"]),
        precipitation_mm_h=float(current.get("precipitation") or 0.0),
        wind_speed_kmh=float(current.get("wind_speed_10m") or 0.0),
        # Open-Meteo reports visibility in meters
        visibility_km=visibility_m / 1000 if visibility_m is not None else 10.0,
        condition=condition_for_code(code),
        observed_at=datetime.fromisoformat(observed) if observed else None,
    )


def weather_advice(weather: WeatherSnapshot, layover_minutes: int) -> list[str]:
    """General advice for the traveler, independent of any one experience."""
    advice: list[str] = []

    if weather.temperature_c < 5:
        advice.append("Dress warmly - cold weather expected")
        advice.append("Indoor activities recommended")
    elif weather.temperature_c > 30:
        advice.append("Stay hydrated - hot weather")
        advice.append("Air-conditioned venues recommended")
    elif 18 <= weather.temperature_c <= 25:
        advice.append("Perfect weather for outdoor exploration")

    if weather.precipitation_mm_h > 0:
        advice.append("Bring umbrella - rain expected")
        if weather.precipitation_mm_h > 5:
            advice.append("Indoor activities strongly recommended")

    if weather.wind_speed_kmh > 15:
        advice.append("Strong winds - secure belongings")

    if layover_minutes >= 240 and weather.favorable:
        advice.append("Great conditions for city tour")
    elif layover_minutes >= 120 and not weather.favorable:
        advice.append("Perfect for indoor shopping or dining")

    return advice
