"""Fixture-based airport transit directory."""

import json
import logging
from datetime import time
from pathlib import Path

from backend.discovery.models.common import TransitMode
from backend.discovery.models.transit import AirportTransitInfo, OperatingHours, TransitOption

logger = logging.getLogger(__name__)

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


def load_airports(path: str | Path | None = None) -> dict[str, AirportTransitInfo]:
    """Load airport transit metadata from JSON.

    Args:
        path: JSON file to read; defaults to the packaged airports fixture

    Returns:
        Mapping of upper-case airport code to AirportTransitInfo
    """
    fixtures_path = Path(path) if path is not None else FIXTURES_DIR / "airports.json"
    with open(fixtures_path) as f:
        data = json.load(f)

    airports = {}
    for airport_data in data["airports"]:
        info = AirportTransitInfo.model_validate(airport_data)
        airports[info.code.upper()] = info

    return airports


def default_airport_profile(code: str) -> AirportTransitInfo:
    """Conservative profile for airports with no transit data.

    Taxi and bus only, with slow customs and security, so feasibility errs
    on the side of keeping the traveler at the airport.
    """
    return AirportTransitInfo(
        code=code.upper(),
        name=code.upper(),
        distance_to_city_km=25,
        customs_minutes=30,
        security_minutes=45,
        walking_minutes=15,
        has_express_transit=False,
        transit_options=[
            TransitOption(
                mode=TransitMode.taxi,
                duration_minutes=30,
                cost=50,
                frequency_minutes=0,
                operating_hours=OperatingHours(start=time(0, 0), end=time(23, 59)),
            ),
            TransitOption(
                mode=TransitMode.bus,
                duration_minutes=60,
                cost=10,
                frequency_minutes=30,
                operating_hours=OperatingHours(start=time(6, 0), end=time(22, 0)),
                accessible=False,
                direct_route=False,
            ),
        ],
        is_default_profile=True,
    )


def get_airport_info(code: str, airports: dict[str, AirportTransitInfo]) -> AirportTransitInfo:
    """Look up an airport, synthesizing the default profile when unknown."""
    info = airports.get(code.upper())
    if info is not None and info.transit_options:
        return info

    logger.warning(
        f"No transit data for airport {code}; using default profile",
        extra={"structured": {"airport_code": code, "known": info is not None}},
    )
    return default_airport_profile(code)
