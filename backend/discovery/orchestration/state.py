"""Per-request pipeline state for discovery."""

from dataclasses import dataclass, field
from datetime import datetime

from backend.discovery.models.issues import PipelineIssue
from backend.discovery.models.recommendation import (
    CandidateEvaluation,
    DiscoveryRequest,
    RankedRecommendation,
)
from backend.discovery.models.transit import AirportActivity, TransitAnalysis
from backend.discovery.models.weather import WeatherSnapshot


@dataclass
class DiscoveryState:
    """State threaded through the discovery stages.

    Each stage reads what earlier stages produced and adds its own output;
    nothing is shared across requests.
    """

    request: DiscoveryRequest
    started_at: datetime = field(default_factory=datetime.now)

    weather: WeatherSnapshot | None = None
    transit: TransitAnalysis | None = None
    airport_activities: list[AirportActivity] = field(default_factory=list)
    evaluations: list[CandidateEvaluation] = field(default_factory=list)
    recommendations: list[RankedRecommendation] = field(default_factory=list)
    issues: list[PipelineIssue] = field(default_factory=list)

    @property
    def layover_minutes(self) -> int:
        return self.request.layover.layover_minutes
