"""Transit feasibility - can the traveler leave the airport, and for how long.

Analysis never raises: unknown airports use a pessimistic default profile
and an unparseable timezone falls back to the arrival timestamp's own hour.
"""

import logging
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from backend.discovery.adapters.airports import get_airport_info
from backend.discovery.models.common import PhysicalDemand, clamp
from backend.discovery.models.config import TransitConfig
from backend.discovery.models.transit import (
    AirportTransitInfo,
    ExperienceFit,
    LayoverTimeBreakdown,
    TransitAnalysis,
    TransitOption,
)

logger = logging.getLogger(__name__)


def calculate_time_breakdown(
    layover_minutes: int,
    airport: AirportTransitInfo,
    has_checked_baggage: bool,
    config: TransitConfig,
) -> LayoverTimeBreakdown:
    """Split a layover into fixed overhead and time left for the city."""
    fastest = _fastest_transit_minutes(airport, config)
    baggage = config.baggage_minutes if has_checked_baggage else 0
    walk = airport.walking_minutes * 2

    overhead = (
        config.buffer_minutes
        + airport.customs_minutes
        + airport.security_minutes
        + walk
        + fastest * 2
        + baggage
    )
    available = layover_minutes - overhead

    return LayoverTimeBreakdown(
        total_layover=layover_minutes,
        buffer=config.buffer_minutes,
        customs_and_immigration=airport.customs_minutes,
        security_recheck=airport.security_minutes,
        walk_to_from_gates=walk,
        transit_to_city=fastest,
        transit_from_city=fastest,
        baggage=baggage,
        available_in_city=available,
        is_viable=available >= config.minimum_city_minutes,
    )


def minimum_layover_required(airport: AirportTransitInfo, config: TransitConfig) -> int:
    """Shortest layover that still allows the minimum city time (no checked bags)."""
    return (
        config.buffer_minutes
        + airport.customs_minutes
        + airport.security_minutes
        + airport.walking_minutes * 2
        + _fastest_transit_minutes(airport, config) * 2
        + config.minimum_city_minutes
    )


def filter_transit_options(
    options: list[TransitOption],
    local_hour: int,
    available_minutes: int,
    config: TransitConfig,
) -> list[TransitOption]:
    """Options running at the arrival hour whose round trip leaves the minimum city time.

    Sorted fastest first.
    """
    viable = [
        option
        for option in options
        if option.operating_hours.covers_hour(local_hour)
        and option.round_trip_minutes + config.minimum_city_minutes <= available_minutes
    ]
    return sorted(viable, key=lambda o: (o.duration_minutes, o.mode.value))


def analyze_layover(
    airport_code: str,
    layover_minutes: int,
    arrival_time: datetime,
    has_checked_baggage: bool = False,
    airports: dict[str, AirportTransitInfo] | None = None,
    config: TransitConfig | None = None,
) -> TransitAnalysis:
    """Analyze whether a layover allows leaving the airport.

    Args:
        airport_code: IATA/ICAO code of the layover airport
        layover_minutes: Total layover duration
        arrival_time: Arrival timestamp; converted to airport-local time when aware
        has_checked_baggage: Adds baggage handling time to the overhead
        airports: Airport transit directory (unknown codes use the default profile)
        config: Time allowances

    Returns:
        TransitAnalysis with city time floored at 0
    """
    config = config or TransitConfig()
    airport = get_airport_info(airport_code, airports or {})
    layover_minutes = max(0, layover_minutes)

    breakdown = calculate_time_breakdown(layover_minutes, airport, has_checked_baggage, config)
    local_hour = _local_hour(arrival_time, airport)
    options = filter_transit_options(
        airport.transit_options, local_hour, breakdown.available_in_city, config
    )

    return TransitAnalysis(
        airport_code=airport.code,
        can_leave_airport=breakdown.is_viable,
        minimum_layover_required_minutes=minimum_layover_required(airport, config),
        available_time_in_city_minutes=max(0, breakdown.available_in_city),
        transit_options=options,
        recommendations=_recommendations(breakdown, options, airport, config),
        warnings=_warnings(breakdown, airport, has_checked_baggage, config),
        confidence=_confidence(airport, breakdown, config),
        breakdown=breakdown,
        used_default_profile=airport.is_default_profile,
    )


def assess_experience_fit(
    duration_minutes: int,
    analysis: TransitAnalysis,
    layover_minutes: int,
    physical_demand: PhysicalDemand = PhysicalDemand.low,
    airport_based: bool = False,
    config: TransitConfig | None = None,
) -> ExperienceFit:
    """Check whether one experience fits into the layover and how comfortably.

    Reachability compares experience time plus a round trip to the city time.
    Suitability compares the same total plus an hour of margin to the whole
    layover; it is 0 whenever the experience cannot be reached.
    """
    config = config or TransitConfig()

    if airport_based:
        travel = 0
        total = duration_minutes + config.experience_buffer_minutes
        can_reach = total <= layover_minutes
        reasoning = (
            f"Inside the airport; needs {total} of your {layover_minutes} layover minutes"
            if can_reach
            else f"Requires {total} minutes but the layover is only {layover_minutes}"
        )
    elif not analysis.can_leave_airport:
        return ExperienceFit(
            can_reach=False,
            travel_minutes=0,
            total_time_required=0,
            reasoning="Insufficient layover time to leave airport",
            suitability_score=0.0,
            minimum_layover_required=analysis.minimum_layover_required_minutes,
            ideal=False,
            reasons=["Insufficient time for this experience"],
        )
    else:
        fastest = analysis.fastest_option
        travel = fastest.duration_minutes if fastest else config.default_transit_minutes
        total = duration_minutes + travel * 2 + config.experience_buffer_minutes
        available = analysis.available_time_in_city_minutes
        can_reach = total <= available
        reasoning = (
            f"Reachable with {available - total} minutes to spare"
            if can_reach
            else f"Requires {total} minutes but only {available} available"
        )

    score, minimum, ideal, reasons = _layover_suitability(
        duration_minutes, total, layover_minutes, physical_demand, config
    )
    if not can_reach:
        score = 0.0
        reasons.insert(0, "Cannot be completed within the available time")

    return ExperienceFit(
        can_reach=can_reach,
        travel_minutes=travel,
        total_time_required=total,
        reasoning=reasoning,
        suitability_score=score,
        minimum_layover_required=minimum,
        ideal=ideal and can_reach,
        reasons=reasons,
    )


def _layover_suitability(
    duration_minutes: int,
    total_required: int,
    layover_minutes: int,
    physical_demand: PhysicalDemand,
    config: TransitConfig,
) -> tuple[float, int, bool, list[str]]:
    minimum = total_required + config.minimum_city_minutes
    ideal = layover_minutes >= minimum + 60
    reasons: list[str] = []

    score = 1.0
    if layover_minutes < minimum:
        score = 0.0
        reasons.append("Insufficient time for this experience")
    elif layover_minutes < minimum + 30:
        score *= 0.6
        reasons.append("Tight schedule - minimal buffer time")
    elif layover_minutes < minimum + 60:
        score *= 0.8
        reasons.append("Adequate time but limited flexibility")
    else:
        reasons.append("Comfortable time allocation")

    if duration_minutes > layover_minutes * 0.6:
        score *= 0.7
        reasons.append("Experience takes significant portion of layover")

    if physical_demand == PhysicalDemand.high and layover_minutes < 300:
        score *= 0.8
        reasons.append("High physical demand may be tiring for rushed schedule")

    return clamp(score), minimum, ideal, reasons


def _fastest_transit_minutes(airport: AirportTransitInfo, config: TransitConfig) -> int:
    if not airport.transit_options:
        return config.default_transit_minutes
    return min(o.duration_minutes for o in airport.transit_options)


def _local_hour(arrival_time: datetime, airport: AirportTransitInfo) -> int:
    if arrival_time.tzinfo is None or not airport.timezone:
        return arrival_time.hour
    try:
        return arrival_time.astimezone(ZoneInfo(airport.timezone)).hour
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(
            f"Unknown timezone {airport.timezone!r} for {airport.code}; using arrival hour",
            extra={"structured": {"airport_code": airport.code, "timezone": airport.timezone}},
        )
        return arrival_time.hour


def _confidence(
    airport: AirportTransitInfo, breakdown: LayoverTimeBreakdown, config: TransitConfig
) -> float:
    confidence = 0.5

    # Known transit data
    if airport.transit_options:
        confidence += 0.2

    if airport.has_express_transit:
        confidence += 0.1

    if breakdown.buffer >= 30:
        confidence += 0.1

    # Clear-cut verdict either way
    available = breakdown.available_in_city
    if available >= 2 * config.minimum_city_minutes or available <= 0:
        confidence += 0.1

    return clamp(round(confidence, 2))


def _recommendations(
    breakdown: LayoverTimeBreakdown,
    options: list[TransitOption],
    airport: AirportTransitInfo,
    config: TransitConfig,
) -> list[str]:
    recommendations: list[str] = []

    if breakdown.is_viable:
        available = breakdown.available_in_city
        if available >= 180:
            recommendations.append("Excellent layover duration for city exploration")
            recommendations.append("Enough time for major attractions")
        elif available >= 120:
            recommendations.append("Good time for quick city visit")
            recommendations.append("Perfect for a meal in the city")
        else:
            recommendations.append("Limited but viable for quick exploration")
            recommendations.append("Consider nearby attractions only")

        if any(o.duration_minutes <= config.express_threshold_minutes for o in options):
            recommendations.append("Express transit available to city center")

        if airport.has_express_transit:
            recommendations.append("Consider purchasing day pass for unlimited travel")
    else:
        if breakdown.total_layover >= 120:
            recommendations.append("Use airport lounges and amenities")
            recommendations.append("Explore duty-free shopping")
        recommendations.append("Stay in airport - insufficient time for city visit")

    return recommendations


def _warnings(
    breakdown: LayoverTimeBreakdown,
    airport: AirportTransitInfo,
    has_checked_baggage: bool,
    config: TransitConfig,
) -> list[str]:
    warnings: list[str] = []

    if 0 < breakdown.available_in_city < config.minimum_city_minutes:
        warnings.append("Very tight schedule - high risk of missing connection")

    if has_checked_baggage:
        warnings.append("Checked baggage adds complexity - consider carry-on only")

    if breakdown.buffer < 30:
        warnings.append("Limited buffer time - any delays could be problematic")

    if breakdown.customs_and_immigration > 45:
        warnings.append("Long immigration times expected - plan accordingly")

    if airport.is_default_profile:
        warnings.append(f"No transit data for {airport.code} - estimate is conservative")

    return warnings
