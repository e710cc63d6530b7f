"""Pricing configuration loader - strategies and commission tiers from YAML.

Invalid entries are skipped and reported; the remaining configuration loads
normally so one bad strategy never takes pricing down.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from backend.discovery.models.issues import IssueKind, PipelineIssue
from backend.discovery.models.pricing import CommissionTierTable, PricingStrategy

logger = logging.getLogger(__name__)

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


@dataclass
class PricingConfig:
    """Validated pricing configuration plus what was skipped while loading it."""

    strategies: list[PricingStrategy] = field(default_factory=list)
    tier_table: CommissionTierTable = field(default_factory=CommissionTierTable)
    issues: list[PipelineIssue] = field(default_factory=list)


def load_pricing_config(path: str | Path | None = None) -> PricingConfig:
    """Load strategies and the tier table from a YAML file.

    Args:
        path: YAML file to read; defaults to the packaged strategy set

    Returns:
        PricingConfig with valid strategies, a tier table and load issues
    """
    config_path = Path(path) if path is not None else FIXTURES_DIR / "pricing_strategies.yaml"
    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    return parse_pricing_config(data)


def parse_pricing_config(data: dict[str, Any]) -> PricingConfig:
    """Validate already-parsed pricing configuration data."""
    strategies, strategy_issues = parse_strategies(data.get("strategies") or [])
    tier_table, tier_issues = parse_tier_table(data.get("commission_tiers"))
    return PricingConfig(
        strategies=strategies,
        tier_table=tier_table,
        issues=strategy_issues + tier_issues,
    )


def parse_strategies(entries: list[Any]) -> tuple[list[PricingStrategy], list[PipelineIssue]]:
    """Validate strategy entries one by one, skipping the invalid ones."""
    strategies: list[PricingStrategy] = []
    issues: list[PipelineIssue] = []
    seen_ids: set[str] = set()

    for index, entry in enumerate(entries):
        entry_id = entry.get("id") if isinstance(entry, dict) else None
        try:
            strategy = PricingStrategy.model_validate(entry)
        except ValidationError as e:
            issues.append(
                _invalid(
                    "INVALID_STRATEGY",
                    f"Strategy {entry_id or f'#{index}'} skipped: invalid configuration",
                    {"index": index, "strategy_id": entry_id, "errors": _error_summary(e)},
                )
            )
            continue

        if strategy.id in seen_ids:
            issues.append(
                _invalid(
                    "DUPLICATE_STRATEGY",
                    f"Strategy {strategy.id} skipped: duplicate id",
                    {"index": index, "strategy_id": strategy.id},
                )
            )
            continue

        seen_ids.add(strategy.id)
        strategies.append(strategy)

    return strategies, issues


def parse_tier_table(data: Any) -> tuple[CommissionTierTable, list[PipelineIssue]]:
    """Validate tier rates, dropping bad entries; empty input yields the default table."""
    if not data:
        return CommissionTierTable(), []

    if not isinstance(data, dict):
        return CommissionTierTable(), [
            _invalid(
                "INVALID_TIER_TABLE",
                "Commission tier table is not a mapping; using defaults",
                {"type": type(data).__name__},
            )
        ]

    rates: dict[str, float] = {}
    issues: list[PipelineIssue] = []
    for tier, rate in data.items():
        if isinstance(rate, bool) or not isinstance(rate, int | float) or not 0 <= rate <= 1:
            issues.append(
                _invalid(
                    "INVALID_TIER_RATE",
                    f"Commission tier {tier} skipped: rate must be a number in [0, 1]",
                    {"tier": str(tier), "rate": str(rate)},
                )
            )
            continue
        rates[str(tier)] = float(rate)

    if not rates:
        issues.append(
            _invalid(
                "EMPTY_TIER_TABLE",
                "No valid commission tiers; using defaults",
                {},
            )
        )
        return CommissionTierTable(), issues

    return CommissionTierTable(rates=rates), issues


def _invalid(code: str, message: str, details: dict[str, Any]) -> PipelineIssue:
    logger.warning(message, extra={"structured": {"code": code, **details}})
    return PipelineIssue(
        kind=IssueKind.CONFIGURATION_INVALID,
        code=code,
        message=message,
        details=details,
    )


def _error_summary(error: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
        for err in error.errors()
    ]
