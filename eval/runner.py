"""Eval runner - loads scenarios and evaluates them against the engine."""

import asyncio
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from backend.discovery.adapters.airports import load_airports
from backend.discovery.models import (
    ActivityType,
    AirportTransitInfo,
    CommissionTierTable,
    DiscoveryRequest,
    EngineConfig,
    ExperienceCandidate,
    PricingContext,
    PricingStrategy,
    WeatherCategory,
    WeatherSnapshot,
)
from backend.discovery.orchestration.discovery import discover_experiences
from backend.discovery.pricing.commission import price_candidate
from backend.discovery.transit.analyzer import analyze_layover
from backend.discovery.weather.scorer import score_weather

SCENARIOS_PATH = Path(__file__).parent / "scenarios.yaml"
EVAL_CLOCK = datetime(2026, 3, 10, 12, 0)


def load_scenarios(path: Path = SCENARIOS_PATH) -> dict[str, Any]:
    """Load scenarios from YAML."""
    with open(path) as f:
        result: dict[str, Any] = yaml.safe_load(f)
        return result


def run_transit(scenario: dict[str, Any]) -> Any:
    airport = AirportTransitInfo.model_validate(scenario["airport"])
    return analyze_layover(
        airport.code,
        scenario["layover_minutes"],
        arrival_time=EVAL_CLOCK,
        airports={airport.code: airport},
    )


def run_pricing(scenario: dict[str, Any]) -> Any:
    strategies = [PricingStrategy.model_validate(s) for s in scenario["strategies"]]
    context = PricingContext(
        layover_minutes=scenario["layover_minutes"],
        weather_category=WeatherCategory.good,
        user_tier=scenario["tier"],
        destination_code="TST",
        experience_type=ActivityType.outdoor,
        evaluated_at=EVAL_CLOCK,
    )
    return price_candidate(
        scenario["base_price"],
        context,
        strategies,
        CommissionTierTable(),
        base_markup=scenario.get("base_markup", 1.15),
    )


def run_weather(scenario: dict[str, Any]) -> Any:
    candidate = ExperienceCandidate.model_validate(scenario["candidate"])
    weather = WeatherSnapshot.model_validate(scenario["weather"])
    return score_weather(candidate, weather)


def run_discovery(scenario: dict[str, Any]) -> Any:
    request = DiscoveryRequest.model_validate(scenario["request"])
    config = EngineConfig(airports=load_airports())
    return asyncio.run(discover_experiences(request, config))


RUNNERS = {
    "transit": run_transit,
    "pricing": run_pricing,
    "weather": run_weather,
    "discovery": run_discovery,
}


def evaluate_predicates(result: Any, predicates: list[dict[str, str]]) -> tuple[int, int]:
    """Evaluate predicates; return (passed, total)."""
    passed = 0
    total = len(predicates)
    env = {"result": result, "len": len, "all": all, "any": any}

    for pred_data in predicates:
        predicate = pred_data["predicate"]
        description = pred_data.get("description", predicate)
        try:
            ok = eval(predicate, {"__builtins__": {}}, env)
            if ok:
                passed += 1
                print(f"  ✓ PASS: {description}")
            else:
                print(f"  ✗ FAIL: {description}")
        except Exception as e:
            print(f"  ✗ ERROR: {description} - {e}")

    return passed, total


def main() -> int:
    """Run eval scenarios."""
    scenarios_data = load_scenarios()
    scenarios = scenarios_data["scenarios"]

    total_passed = 0
    total_predicates = 0

    for scenario in scenarios:
        scenario_id = scenario["scenario_id"]
        description = scenario["description"]
        print(f"\n=== Scenario: {scenario_id} ===")
        print(f"Description: {description}")

        result = RUNNERS[scenario["kind"]](scenario)

        predicates = scenario["must_satisfy"]
        passed, total = evaluate_predicates(result, predicates)
        total_passed += passed
        total_predicates += total

        print(f"Result: {passed}/{total} predicates passed")

    print("\n=== Summary ===")
    print(f"Total: {total_passed}/{total_predicates} predicates passed")

    if total_passed < total_predicates:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
