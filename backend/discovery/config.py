"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from backend.discovery.adapters.airports import load_airports
from backend.discovery.models.config import EngineConfig, TransitConfig
from backend.discovery.models.recommendation import DiversityLimits
from backend.discovery.models.transit import AirportTransitInfo


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Timing allowances (minutes)
    transit_buffer_min: int = 30
    minimum_city_time_min: int = 60
    baggage_time_min: int = 30
    express_threshold_min: int = 30

    # Pricing
    base_markup: float = 1.15

    # Ranking
    max_results: int = 10
    max_per_category: int = 3
    max_per_price_bucket: int = 4

    # Candidate fan-out
    fanout_cap: int = 8

    # Timeouts (milliseconds)
    request_timeout_ms: int = 5000

    # Cache TTLs (minutes)
    weather_ttl_minutes: int = 30
    transit_ttl_minutes: int = 60

    # External APIs
    open_meteo_base_url: str = "https://api.open-meteo.com/v1/forecast"
    weather_timeout_sec: float = 4.0

    # Configuration data (None = packaged fixtures)
    airports_path: str | None = None
    strategies_path: str | None = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@lru_cache
def get_airport_directory(path: str | None = None) -> dict[str, AirportTransitInfo]:
    """Airport transit metadata, read from disk once per path."""
    return load_airports(path)


def build_engine_config(settings: Settings | None = None) -> EngineConfig:
    """Translate infrastructure settings into the plain-data engine config."""
    settings = settings or get_settings()
    return EngineConfig(
        transit=TransitConfig(
            buffer_minutes=settings.transit_buffer_min,
            minimum_city_minutes=settings.minimum_city_time_min,
            baggage_minutes=settings.baggage_time_min,
            express_threshold_minutes=settings.express_threshold_min,
        ),
        diversity=DiversityLimits(
            max_per_category=settings.max_per_category,
            max_per_price_bucket=settings.max_per_price_bucket,
        ),
        max_results=settings.max_results,
        base_markup=settings.base_markup,
        fanout_cap=settings.fanout_cap,
        request_timeout_ms=settings.request_timeout_ms,
        airports=get_airport_directory(settings.airports_path),
    )
