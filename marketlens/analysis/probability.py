"""Probability reconciliation shared by per-model and consensus rankings."""

import logging
from typing import List

from marketlens.analysis.models import OutcomeAnalysis
from marketlens.utils.helpers import round1

logger = logging.getLogger(__name__)

# Multi-outcome AI probabilities summing further than this from 100 are rescaled
RESCALE_TOLERANCE = 2.0


def rescale_to_hundred(
    rankings: List[OutcomeAnalysis],
    rounded: bool = False,
    tolerance: float = RESCALE_TOLERANCE,
) -> List[OutcomeAnalysis]:
    """Proportionally rescale AI probabilities so they sum to 100.

    Rankings are updated in place (edges recomputed) and returned. Nothing
    changes when the sum is zero or already within ``tolerance`` of 100.

    Args:
        rankings: Outcome rankings to rescale
        rounded: Round rescaled probabilities and edges to one decimal
        tolerance: Allowed deviation from 100 before rescaling

    Returns:
        The same rankings list
    """
    ai_sum = sum(r.ai_probability for r in rankings)
    if ai_sum <= 0 or abs(ai_sum - 100) <= tolerance:
        return rankings

    logger.info(f"Normalizing AI probabilities from {ai_sum:.1f}% to 100%")
    for ranking in rankings:
        ranking.ai_probability = ranking.ai_probability / ai_sum * 100
        ranking.edge = ranking.ai_probability - ranking.market_probability
        if rounded:
            ranking.ai_probability = round1(ranking.ai_probability)
            ranking.edge = round1(ranking.ai_probability - ranking.market_probability)
    return rankings


def sort_by_probability(rankings: List[OutcomeAnalysis]) -> List[OutcomeAnalysis]:
    """Sort rankings descending by AI probability (stable)."""
    return sorted(rankings, key=lambda r: r.ai_probability, reverse=True)
