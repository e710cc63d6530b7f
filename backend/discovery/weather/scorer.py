"""Weather compatibility scoring for a single experience."""

from backend.discovery.models.common import ActivityType, WeatherDependency, clamp
from backend.discovery.models.config import WeatherScoringConfig
from backend.discovery.models.experience import ExperienceCandidate
from backend.discovery.models.weather import WeatherMatch, WeatherSnapshot

# Share of the outdoor penalty a mixed indoor/outdoor experience takes
MIXED_PENALTY_SHARE = 0.5

# Indoor experiences get this sub-score when precipitation is above threshold
INDOOR_PRECIPITATION_SUBSCORE = 1.2


def _blend(score: float, weight: float, subscore: float) -> float:
    return score * ((1 - weight) + weight * subscore)


def temperature_subscore(temperature_c: float, config: WeatherScoringConfig) -> float:
    """1.0 inside the optimal range, minus 0.1 per degree outside it, floored at 0."""
    if temperature_c < config.optimal_temp_min_c:
        return max(0.0, 1 - (config.optimal_temp_min_c - temperature_c) / 10)
    if temperature_c > config.optimal_temp_max_c:
        return max(0.0, 1 - (temperature_c - config.optimal_temp_max_c) / 10)
    return 1.0


def precipitation_subscore(
    precipitation_mm_h: float, activity_type: ActivityType, config: WeatherScoringConfig
) -> float | None:
    """Sub-score above the threshold, or None when precipitation does not matter."""
    if precipitation_mm_h <= config.precipitation_threshold_mm_h:
        return None
    impact = min(1.0, precipitation_mm_h / 10)
    if activity_type == ActivityType.indoor:
        return INDOOR_PRECIPITATION_SUBSCORE
    if activity_type == ActivityType.mixed:
        return 1 - impact * MIXED_PENALTY_SHARE
    return 1 - impact


def wind_subscore(
    wind_speed_kmh: float, activity_type: ActivityType, config: WeatherScoringConfig
) -> float | None:
    """Sub-score above the threshold, or None when wind does not matter."""
    if wind_speed_kmh <= config.wind_threshold_kmh:
        return None
    impact = min(1.0, wind_speed_kmh / 50)
    if activity_type == ActivityType.outdoor:
        return 1 - impact
    if activity_type == ActivityType.mixed:
        return 1 - impact * MIXED_PENALTY_SHARE
    return 1.0


def score_weather(
    candidate: ExperienceCandidate,
    weather: WeatherSnapshot,
    config: WeatherScoringConfig | None = None,
) -> WeatherMatch:
    """Score how well current weather suits an experience.

    Each reading is folded in as `score *= (1 - w) + w * subscore`. Weather
    dependency and the indoor bonus then apply when conditions are unfavorable
    for outdoor activity. Warnings are display-only and duplicate what the
    score already reflects.

    Args:
        candidate: Experience to score
        weather: Current destination weather
        config: Weights and thresholds (defaults when omitted)

    Returns:
        WeatherMatch with score in [0, 1], a recommendation and warnings
    """
    config = config or WeatherScoringConfig()
    activity = candidate.activity_type
    unfavorable = not weather.favorable
    warnings: list[str] = []
    recommendation = ""

    score = 1.0
    score = _blend(
        score, config.temperature_weight, temperature_subscore(weather.temperature_c, config)
    )

    precip = precipitation_subscore(weather.precipitation_mm_h, activity, config)
    if precip is not None:
        score = _blend(score, config.precipitation_weight, precip)

    wind = wind_subscore(weather.wind_speed_kmh, activity, config)
    if wind is not None:
        score = _blend(score, config.wind_weight, wind)

    visibility = min(1.0, weather.visibility_km / 10)
    score = _blend(score, config.visibility_weight, visibility)

    if unfavorable:
        if candidate.weather_dependency == WeatherDependency.high:
            score *= 0.2
            warnings.append("High weather dependency - current conditions not ideal")
        elif candidate.weather_dependency == WeatherDependency.medium:
            score *= 0.6
            warnings.append("Weather may affect experience quality")

        if activity == ActivityType.indoor:
            score *= config.indoor_bonus
            recommendation = "Perfect indoor option for current weather"

    if activity != ActivityType.indoor:
        warnings.extend(_outdoor_warnings(weather, config))

    if weather.is_fallback:
        warnings.append("Live weather unavailable - conditions are estimated")

    score = clamp(score)
    if not recommendation:
        recommendation = _recommendation_band(score)

    return WeatherMatch(score=score, recommendation=recommendation, warnings=warnings)


def _outdoor_warnings(weather: WeatherSnapshot, config: WeatherScoringConfig) -> list[str]:
    warnings = []
    if weather.precipitation_mm_h > config.precipitation_threshold_mm_h:
        warnings.append("Rain expected - outdoor activity may be cancelled")
    if weather.temperature_c < 5 or weather.temperature_c > 35:
        warnings.append("Extreme temperatures for outdoor activity")
    if weather.wind_speed_kmh > config.wind_threshold_kmh:
        warnings.append("Strong winds may affect outdoor experience")

    if weather.temperature_c > 30:
        warnings.append("Very hot - ensure hydration and sun protection")
    elif weather.temperature_c < 10:
        warnings.append("Cold weather - dress warmly")
    return warnings


def _recommendation_band(score: float) -> str:
    if score >= 0.8:
        return "Excellent weather match for this activity"
    if score >= 0.6:
        return "Good weather conditions"
    if score >= 0.4:
        return "Weather may impact experience - check conditions"
    return "Poor weather match - consider alternatives"
