"""Pipeline issue models - degradations recorded while producing recommendations."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

# JSON-serializable value types for issue details
JsonValue = str | int | float | bool | None | dict[str, Any] | list[Any]


class IssueKind(str, Enum):
    """Categories of non-fatal pipeline problems."""

    DATA_UNAVAILABLE = "data_unavailable"
    CONFIGURATION_INVALID = "configuration_invalid"
    INFEASIBLE_LAYOVER = "infeasible_layover"
    CANDIDATE_DROPPED = "candidate_dropped"


class PipelineIssue(BaseModel):
    """Something the pipeline degraded around instead of failing.

    Issues never abort a request; they travel on the result so callers and
    configuration owners can see what was skipped and why.
    """

    kind: IssueKind
    code: str  # Machine-usable short code, e.g., "WEATHER_FALLBACK"
    message: str  # Human-readable description (1-2 sentences)
    candidate_ids: list[str] = Field(default_factory=list)
    details: dict[str, JsonValue] = Field(default_factory=dict)
