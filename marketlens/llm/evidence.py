"""Evidence-density scoring of a model's structured judgment."""

from typing import Optional

from marketlens.analysis.models import StructuredAnalysis
from marketlens.llm.models import DEFAULT_SCORING, EvidenceScoringConfig
from marketlens.utils.helpers import clamp


def is_overconfident(
    top_probability: float,
    data_point_count: int,
    confidence: str,
    config: EvidenceScoringConfig = DEFAULT_SCORING,
) -> bool:
    """Whether a model claims a very likely outcome without supporting data."""
    return (
        top_probability > config.overconfidence_probability
        and data_point_count < config.overconfidence_min_data_points
        and confidence != "low"
    )


def calculate_evidence_density(
    structured: StructuredAnalysis,
    data_point_count: int,
    overconfident: bool,
    config: EvidenceScoringConfig = DEFAULT_SCORING,
    used_fallback: bool = False,
) -> float:
    """Score how well a judgment is supported, in place of raw confidence.

    Rewards cited data points, disclosed assumptions and identified risks;
    penalizes unsupported overconfidence, extreme probabilities and stated
    confidence that contradicts the probabilities given.

    Args:
        structured: Validated structured analysis
        data_point_count: Data points cited across all outcomes
        overconfident: Result of ``is_overconfident`` for the top outcome
        config: Scoring constants
        used_fallback: Whether a substitute model produced the judgment

    Returns:
        Score in [0, 100]
    """
    score = config.base_score

    score += min(data_point_count * config.points_per_data_point, config.max_data_point_bonus)
    score += min(
        len(structured.assumptions) * config.points_per_assumption,
        config.max_assumption_bonus,
    )
    score += min(len(structured.key_risks) * config.points_per_risk, config.max_risk_bonus)

    if overconfident:
        score -= config.overconfidence_penalty

    max_probability = structured.max_probability
    if max_probability > config.extreme_probability:
        score -= config.extreme_penalty

    if structured.confidence == "low" and max_probability > config.low_confidence_probability:
        score -= config.inconsistency_penalty

    score = clamp(score)

    if used_fallback:
        score = max(0.0, score - config.fallback_penalty)

    return score


def score_analysis(
    structured: StructuredAnalysis,
    top_probability: float,
    config: Optional[EvidenceScoringConfig] = None,
    used_fallback: bool = False,
) -> float:
    """Score a judgment given its reconciled top-outcome probability."""
    config = config or DEFAULT_SCORING
    data_point_count = structured.data_point_count
    overconfident = is_overconfident(
        top_probability, data_point_count, structured.confidence, config
    )
    return calculate_evidence_density(
        structured, data_point_count, overconfident, config, used_fallback
    )
