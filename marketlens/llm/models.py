"""Models for LLM gateway replies and analysis attempts."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from marketlens.analysis.models import StructuredAnalysis


class GatewayReply(BaseModel):
    """What a chat-completions call gave back.

    Exactly one of ``tool_arguments`` (raw JSON of the analysis function
    call) or ``content`` (free text) is normally set.
    """

    model: str
    tool_arguments: Optional[str] = None
    content: Optional[str] = None


class AttemptStatus(str, Enum):
    """Terminal state of a single model attempt."""

    SUCCESS = "success"
    DEGRADED = "degraded"
    FAILURE = "failure"


class AttemptResult(BaseModel):
    """Tagged result of asking one model for a structured judgment."""

    status: AttemptStatus
    model: str
    analysis: Optional[StructuredAnalysis] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, model: str, analysis: StructuredAnalysis) -> "AttemptResult":
        return cls(status=AttemptStatus.SUCCESS, model=model, analysis=analysis)

    @classmethod
    def degraded(
        cls, model: str, analysis: StructuredAnalysis, reason: str
    ) -> "AttemptResult":
        return cls(
            status=AttemptStatus.DEGRADED, model=model, analysis=analysis, reason=reason
        )

    @classmethod
    def failure(cls, model: str, reason: str) -> "AttemptResult":
        return cls(status=AttemptStatus.FAILURE, model=model, reason=reason)

    @property
    def succeeded(self) -> bool:
        return self.status is not AttemptStatus.FAILURE


class EvidenceScoringConfig(BaseModel):
    """Tunable constants for evidence-density scoring."""

    base_score: float = 50.0

    # Rewards
    points_per_data_point: float = 3.0
    max_data_point_bonus: float = 25.0
    points_per_assumption: float = 3.0
    max_assumption_bonus: float = 12.0
    points_per_risk: float = 2.0
    max_risk_bonus: float = 8.0

    # Overconfidence: top outcome above threshold with too few data points
    overconfidence_probability: float = 85.0
    overconfidence_min_data_points: int = 3
    overconfidence_penalty: float = 15.0

    # Extreme probability concentration
    extreme_probability: float = 90.0
    extreme_penalty: float = 10.0

    # Self-reported low confidence paired with a high probability
    low_confidence_probability: float = 70.0
    inconsistency_penalty: float = 8.0

    fallback_penalty: float = 5.0

    model_config = {"frozen": True}


DEFAULT_SCORING = EvidenceScoringConfig()
