"""Models for market analysis inputs, per-model judgments and consensus."""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from marketlens.pricing.models import CryptoTechnicalData

Sentiment = Literal["bullish", "bearish", "neutral"]
Confidence = Literal["high", "medium", "low"]


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )


class MarketOutcome(CamelModel):
    """One tradable outcome of a market, prices on the 0-1 scale."""

    label: str
    yes_price: float = Field(..., ge=0.0, le=1.0)
    no_price: float = Field(..., ge=0.0, le=1.0)
    market_id: str = ""

    @property
    def market_probability(self) -> float:
        """Market-implied probability on the 0-100 scale, clamped."""
        return max(0.0, min(100.0, self.yes_price * 100))


class StructuredOutcome(CamelModel):
    """A model's estimate for one outcome."""

    label: str
    probability: float
    reasoning: str = ""
    data_points: List[str] = Field(default_factory=list)


class StructuredAnalysis(CamelModel):
    """One model's raw structured judgment after validation."""

    outcomes: List[StructuredOutcome]
    top_pick: str
    sentiment: Sentiment = "neutral"
    confidence: Confidence = "medium"
    assumptions: List[str] = Field(default_factory=list)
    key_risks: List[str] = Field(default_factory=list)

    @property
    def data_point_count(self) -> int:
        """Total data points cited across all outcomes."""
        return sum(len(o.data_points) for o in self.outcomes)

    @property
    def max_probability(self) -> float:
        """Largest probability the model assigned to any outcome."""
        if not self.outcomes:
            return 0.0
        return max(o.probability for o in self.outcomes)


class OutcomeAnalysis(CamelModel):
    """A single outcome's analysis reconciled with market data."""

    outcome_label: str
    ai_probability: float
    market_probability: float
    edge: float
    reasoning: str = ""
    data_points: List[str] = Field(default_factory=list)


class ModelAnalysis(CamelModel):
    """One model's full contribution to a request."""

    model_config = ConfigDict(frozen=True)

    model: str
    model_provider: str
    analysis: str
    outcome_rankings: List[OutcomeAnalysis]
    top_pick: str
    top_pick_probability: float
    sentiment: Sentiment
    confidence: Confidence
    evidence_density: float = Field(..., ge=0.0, le=100.0)
    data_points_cited: int
    assumptions: List[str] = Field(default_factory=list)
    key_risks: List[str] = Field(default_factory=list)

    def ranking_for(self, label: str) -> Optional[OutcomeAnalysis]:
        """Find this model's ranking for an outcome label (case-insensitive)."""
        wanted = label.lower()
        for ranking in self.outcome_rankings:
            if ranking.outcome_label.lower() == wanted:
                return ranking
        return None


class ProbabilityRange(CamelModel):
    """Spread of model estimates for one outcome."""

    min: float = 0.0
    max: float = 0.0


class DisagreementMetrics(CamelModel):
    """How much the models disagree about the consensus top pick."""

    probability_range: ProbabilityRange = Field(default_factory=ProbabilityRange)
    standard_deviation: float = 0.0
    model_agreement: Confidence = "low"
    divergence_warning: Optional[str] = None


class Consensus(CamelModel):
    """Aggregated judgment across all successful models."""

    top_pick: str
    top_pick_probability: float
    outcome_rankings: List[OutcomeAnalysis]
    sentiment: Sentiment
    confidence: Confidence
    summary: str
    reasoning: str
    evidence_density: float
    disagreement: DisagreementMetrics


class ModelAccuracy(CamelModel):
    """Historical accuracy stats for one model, passed through unmodified."""

    accuracy: float = 0.0
    total_predictions: int = 0


class ResponseMetadata(CamelModel):
    """Request-level facts about how the response was produced."""

    models_used: int
    timestamp: str
    category: str
    is_multi_outcome: bool


class ConsolidatedResponse(CamelModel):
    """Top-level output of a market analysis request."""

    consensus: Consensus
    model_analyses: List[ModelAnalysis]
    crypto_data: Optional[CryptoTechnicalData] = None
    model_accuracy: Dict[str, ModelAccuracy] = Field(default_factory=dict)
    metadata: ResponseMetadata

    def to_response_dict(self) -> dict:
        """Serialise to the JSON shape returned to callers."""
        data = self.model_dump(by_alias=True, mode="json")
        if self.crypto_data is None:
            data.pop("cryptoData", None)
        return data
