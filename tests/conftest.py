"""Shared pytest fixtures for all test suites."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from backend.discovery.models import (
    ActivityType,
    AirportTransitInfo,
    Category,
    CityInfo,
    Demographics,
    Duration,
    ExperienceCandidate,
    LayoverContext,
    OperatingHours,
    Rating,
    TransitMode,
    TransitOption,
    UserPreferences,
    UserProfile,
    WeatherSnapshot,
)

ARRIVAL = datetime(2026, 3, 10, 8, 0, tzinfo=UTC)


def _layover(minutes: int = 480, airport_code: str = "TST", **overrides: Any) -> LayoverContext:
    data: dict[str, Any] = {
        "arrival_time": ARRIVAL,
        "departure_time": ARRIVAL + timedelta(minutes=minutes),
        "airport_code": airport_code,
        "city": CityInfo(name="Testville", country_code="TV", timezone="UTC", safety_rating=4.0),
    }
    data.update(overrides)
    return LayoverContext(**data)


def _candidate(
    id: str = "exp-1",
    category: str = "Cultural",
    activity_type: ActivityType = ActivityType.indoor,
    base_price: float = 50.0,
    minutes: int = 90,
    **overrides: Any,
) -> ExperienceCandidate:
    data: dict[str, Any] = {
        "id": id,
        "title": f"Experience {id}",
        "categories": [Category(id=f"cat-{category.lower()}", name=category)],
        "duration": Duration(fixed_minutes=minutes),
        "base_price": base_price,
        "activity_type": activity_type,
        "rating": Rating(average=4.5, count=500),
    }
    data.update(overrides)
    return ExperienceCandidate(**data)


def _profile(tier: str = "silver", **preferences: Any) -> UserProfile:
    return UserProfile(
        user_id="user-1",
        preferences=UserPreferences(**preferences),
        demographics=Demographics(loyalty_tier=tier),
    )


def _airport(
    code: str = "TST",
    customs: int = 30,
    security: int = 40,
    walking: int = 15,
    transit_minutes: int = 25,
    **overrides: Any,
) -> AirportTransitInfo:
    data: dict[str, Any] = {
        "code": code,
        "name": f"{code} International",
        "timezone": "UTC",
        "customs_minutes": customs,
        "security_minutes": security,
        "walking_minutes": walking,
        "transit_options": [
            TransitOption(
                mode=TransitMode.train,
                duration_minutes=transit_minutes,
                cost=8.0,
                operating_hours=OperatingHours(start="00:00", end="23:59"),
            )
        ],
    }
    data.update(overrides)
    return AirportTransitInfo(**data)


@pytest.fixture
def make_layover() -> Callable[..., LayoverContext]:
    """Factory for layovers arriving 2026-03-10 08:00 UTC."""
    return _layover


@pytest.fixture
def make_candidate() -> Callable[..., ExperienceCandidate]:
    """Factory for experience candidates."""
    return _candidate


@pytest.fixture
def make_profile() -> Callable[..., UserProfile]:
    """Factory for traveler profiles."""
    return _profile


@pytest.fixture
def make_airport() -> Callable[..., AirportTransitInfo]:
    """Factory for airports (default overhead 180 minutes without baggage)."""
    return _airport


@pytest.fixture
def good_weather() -> WeatherSnapshot:
    return WeatherSnapshot(temperature_c=22.0, precipitation_mm_h=0.0, wind_speed_kmh=8.0)


@pytest.fixture
def bad_weather() -> WeatherSnapshot:
    return WeatherSnapshot(
        temperature_c=12.0,
        precipitation_mm_h=8.0,
        wind_speed_kmh=40.0,
        condition="thunderstorm",
        is_good_for_outdoor=False,
    )
