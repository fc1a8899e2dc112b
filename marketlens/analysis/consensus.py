"""Consensus calculation logic for combining per-model analyses."""

import logging
import math
from typing import Dict, List, Sequence

from marketlens.analysis.models import (
    Consensus,
    DisagreementMetrics,
    MarketOutcome,
    ModelAnalysis,
    OutcomeAnalysis,
    ProbabilityRange,
)
from marketlens.analysis.probability import rescale_to_hundred, sort_by_probability
from marketlens.utils.helpers import clamp, round1, round_half_up

logger = logging.getLogger(__name__)

# Agreement classification on the consensus top pick
HIGH_AGREEMENT_MAX_RANGE = 10.0
HIGH_AGREEMENT_MAX_STDDEV = 5.0
LOW_AGREEMENT_MIN_RANGE = 25.0
LOW_AGREEMENT_MIN_STDDEV = 12.0
DIVERGENCE_WARNING_RANGE = 20.0

# Consensus vs market gap worth mentioning in the summary
SUMMARY_EDGE_THRESHOLD = 5.0

MAX_CONSENSUS_DATA_POINTS = 5
MAX_REASONING_CHARS = 500


def trimmed_mean(values: Sequence[float]) -> float:
    """Average that ignores the single highest and lowest value.

    With two or fewer values this is the plain mean, so one outlier model can
    only be discarded once at least three models contributed.

    Args:
        values: Probability estimates

    Returns:
        Trimmed mean

    Raises:
        ValueError: If no values are given
    """
    if not values:
        raise ValueError("trimmed_mean requires at least one value")
    if len(values) <= 2:
        return sum(values) / len(values)
    trimmed = sorted(values)[1:-1]
    return sum(trimmed) / len(trimmed)


def classify_agreement(probability_range: float, standard_deviation: float) -> str:
    """Classify model agreement from the spread of their estimates."""
    if (
        probability_range <= HIGH_AGREEMENT_MAX_RANGE
        and standard_deviation <= HIGH_AGREEMENT_MAX_STDDEV
    ):
        return "high"
    if (
        probability_range >= LOW_AGREEMENT_MIN_RANGE
        or standard_deviation >= LOW_AGREEMENT_MIN_STDDEV
    ):
        return "low"
    return "medium"


def calculate_disagreement(
    analyses: List[ModelAnalysis], top_pick: str
) -> DisagreementMetrics:
    """Measure how far the models' estimates for one outcome spread.

    Args:
        analyses: Successful model analyses
        top_pick: Outcome to measure, normally the consensus top pick

    Returns:
        Range, population standard deviation, agreement and optional warning
    """
    probabilities = []
    for analysis in analyses:
        ranking = analysis.ranking_for(top_pick)
        if ranking is not None:
            probabilities.append(ranking.ai_probability)

    if not probabilities:
        return DisagreementMetrics(
            model_agreement="low",
            divergence_warning="No model data available",
        )

    low = min(probabilities)
    high = max(probabilities)
    spread = high - low

    mean = sum(probabilities) / len(probabilities)
    variance = sum((p - mean) ** 2 for p in probabilities) / len(probabilities)
    standard_deviation = math.sqrt(variance)

    divergence_warning = None
    if spread >= DIVERGENCE_WARNING_RANGE:
        divergence_warning = (
            f"Models diverge significantly ({low:.0f}%-{high:.0f}%). "
            "Treat consensus with caution."
        )

    return DisagreementMetrics(
        probability_range=ProbabilityRange(min=low, max=high),
        standard_deviation=round1(standard_deviation),
        model_agreement=classify_agreement(spread, standard_deviation),
        divergence_warning=divergence_warning,
    )


def resolve_top_pick(analyses: List[ModelAnalysis], default: str) -> str:
    """Pick the outcome with the largest evidence-weighted vote.

    Each model votes for its own top pick with weight equal to its evidence
    density, so a single well-evidenced model can outvote several weakly
    supported ones even when their probabilities are higher.

    Args:
        analyses: Successful model analyses
        default: Label used when no vote carries positive weight

    Returns:
        Consensus top pick label
    """
    votes: Dict[str, float] = {}
    for analysis in analyses:
        votes[analysis.top_pick] = votes.get(analysis.top_pick, 0.0) + analysis.evidence_density

    top_pick = default
    max_votes = 0.0
    for label, weight in votes.items():
        if weight > max_votes:
            max_votes = weight
            top_pick = label
    return top_pick


def aggregate_sentiment(analyses: List[ModelAnalysis]) -> str:
    """Evidence-weighted sentiment vote; ties resolve to neutral."""
    weights = {"bullish": 0.0, "bearish": 0.0, "neutral": 0.0}
    for analysis in analyses:
        weights[analysis.sentiment] += analysis.evidence_density

    bullish, bearish, neutral = weights["bullish"], weights["bearish"], weights["neutral"]
    if bullish > bearish and bullish > neutral:
        return "bullish"
    if bearish > bullish and bearish > neutral:
        return "bearish"
    return "neutral"


def build_consensus_summary(
    model_count: int,
    top_pick: str,
    outcome: OutcomeAnalysis,
    disagreement: DisagreementMetrics,
) -> str:
    """Write the natural-language consensus summary.

    The comparison with the market is qualitative; no spread is quoted.
    """
    summary = (
        f"Based on {model_count} AI models, **{top_pick}** has model-implied "
        f"probability of {round_half_up(outcome.ai_probability)}%."
    )

    if disagreement.divergence_warning:
        summary += f" ⚠️ {disagreement.divergence_warning}"
    elif disagreement.model_agreement == "high":
        summary += " Models show strong consensus."

    if abs(outcome.edge) > SUMMARY_EDGE_THRESHOLD:
        direction = "higher than" if outcome.edge > 0 else "lower than"
        summary += f" Model is {direction} market."

    return summary


def degraded_consensus(outcomes: List[MarketOutcome]) -> Consensus:
    """Consensus reported when no model produced a usable judgment.

    Market prices stand in for the estimate; nothing is fabricated.
    """
    rankings = [
        OutcomeAnalysis(
            outcome_label=o.label,
            ai_probability=o.market_probability,
            market_probability=o.market_probability,
            edge=0.0,
            reasoning="Unable to analyze",
            data_points=[],
        )
        for o in outcomes
    ]
    first = outcomes[0] if outcomes else None

    return Consensus(
        top_pick=first.label if first else "YES",
        top_pick_probability=first.market_probability if first else 50.0,
        outcome_rankings=rankings,
        sentiment="neutral",
        confidence="low",
        summary="Unable to generate analysis at this time.",
        reasoning="No model analyses available.",
        evidence_density=0,
        disagreement=DisagreementMetrics(
            model_agreement="low",
            divergence_warning="No models responded",
        ),
    )


def _consensus_rankings(
    analyses: List[ModelAnalysis], outcomes: List[MarketOutcome]
) -> List[OutcomeAnalysis]:
    rankings = []
    for outcome in outcomes:
        estimates = []
        reasoning = []
        data_points = []
        for analysis in analyses:
            ranking = analysis.ranking_for(outcome.label)
            if ranking is None:
                continue
            estimates.append(ranking.ai_probability)
            if ranking.reasoning:
                reasoning.append(ranking.reasoning)
            data_points.extend(ranking.data_points)

        market_probability = outcome.market_probability
        if estimates:
            ai_probability = clamp(round1(trimmed_mean(estimates)))
        else:
            logger.warning(
                f"No model estimates for {outcome.label}, using market: {market_probability}%"
            )
            ai_probability = market_probability

        rankings.append(
            OutcomeAnalysis(
                outcome_label=outcome.label,
                ai_probability=ai_probability,
                market_probability=market_probability,
                edge=round1(ai_probability - market_probability),
                reasoning=reasoning[0] if reasoning else f"Consensus for {outcome.label}",
                data_points=list(dict.fromkeys(data_points))[:MAX_CONSENSUS_DATA_POINTS],
            )
        )

    if len(outcomes) > 2:
        rescale_to_hundred(rankings, rounded=True)

    return sort_by_probability(rankings)


def calculate_consensus(
    analyses: List[ModelAnalysis], outcomes: List[MarketOutcome]
) -> Consensus:
    """Combine successful model analyses into a single consensus judgment.

    Per-outcome probabilities are trimmed means of the model estimates; the
    top pick is the evidence-weighted vote winner, which need not be the
    outcome with the highest consensus probability.

    Args:
        analyses: Successful model analyses (may be empty)
        outcomes: Normalized market outcomes

    Returns:
        Consensus with disagreement metrics
    """
    if not analyses:
        return degraded_consensus(outcomes)

    rankings = _consensus_rankings(analyses, outcomes)
    provisional = rankings[0]

    top_pick = resolve_top_pick(analyses, default=provisional.outcome_label)
    disagreement = calculate_disagreement(analyses, top_pick)
    sentiment = aggregate_sentiment(analyses)

    evidence_density = round_half_up(
        sum(a.evidence_density for a in analyses) / len(analyses)
    )

    consensus_outcome = next(
        (r for r in rankings if r.outcome_label == top_pick), provisional
    )

    summary = build_consensus_summary(len(analyses), top_pick, consensus_outcome, disagreement)

    return Consensus(
        top_pick=top_pick,
        top_pick_probability=round_half_up(consensus_outcome.ai_probability),
        outcome_rankings=rankings,
        sentiment=sentiment,
        # Confidence follows agreement rather than any model's self-report
        confidence=disagreement.model_agreement,
        summary=summary,
        reasoning=analyses[0].analysis[:MAX_REASONING_CHARS] + "...",
        evidence_density=evidence_density,
        disagreement=disagreement,
    )
