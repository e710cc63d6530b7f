"""Structured logging for candidate scoring."""

import logging
from typing import Any

from backend.discovery.tools.fanout import FanoutContext, FanoutLogger

logger = logging.getLogger(__name__)


class StructuredDiscoveryLogger(FanoutLogger):
    """Structured logger for per-candidate outcomes."""

    def log_item(
        self,
        ctx: FanoutContext,
        item_key: str,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log candidate outcome with structured data."""
        log_data: dict[str, Any] = {
            "request_id": ctx.request_id,
            "stage": ctx.stage,
            "candidate_id": item_key,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Candidate {item_key}: {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
