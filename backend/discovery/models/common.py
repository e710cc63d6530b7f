"""Common types and enums shared across all models."""

from enum import Enum

from pydantic import BaseModel, Field


class Geo(BaseModel):
    """Geographic coordinates (WGS84)."""

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class ActivityType(str, Enum):
    """Where an experience takes place."""

    outdoor = "outdoor"
    indoor = "indoor"
    mixed = "mixed"


class WeatherDependency(str, Enum):
    """How strongly an experience depends on good weather."""

    none = "none"
    low = "low"
    medium = "medium"
    high = "high"


class PhysicalDemand(str, Enum):
    """Physical effort required by an experience (or offered by a traveler)."""

    low = "low"
    moderate = "moderate"
    high = "high"


class LoyaltyTier(str, Enum):
    """Traveler loyalty tier."""

    bronze = "bronze"
    silver = "silver"
    gold = "gold"
    platinum = "platinum"
    enterprise = "enterprise"


class RiskTolerance(str, Enum):
    """Traveler risk tolerance."""

    conservative = "conservative"
    moderate = "moderate"
    adventurous = "adventurous"


class TravelExperience(str, Enum):
    """Traveler experience level."""

    novice = "novice"
    experienced = "experienced"
    expert = "expert"


class TransitMode(str, Enum):
    """Airport to city transit mode."""

    train = "train"
    metro = "metro"
    bus = "bus"
    taxi = "taxi"
    walk = "walk"


class WeatherCategory(str, Enum):
    """Coarse weather bucket used by pricing strategy conditions."""

    good = "good"
    fair = "fair"
    poor = "poor"


class PriceBucket(str, Enum):
    """Price tier used by the diversity filter."""

    budget = "budget"
    moderate = "moderate"
    premium = "premium"
    luxury = "luxury"


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))
