"""Normalization of caller-supplied outcome prices onto the 0-1 scale."""

import logging
from typing import Any, Dict, List, Optional

from marketlens.analysis.models import MarketOutcome
from marketlens.utils.helpers import clamp, coerce_float

logger = logging.getLogger(__name__)

# Multi-outcome yes prices summing further than this from 1.0 are rescaled
PROBABILITY_SUM_TOLERANCE = 0.15


def normalize_price(price: Any, fallback: float) -> float:
    """Convert a price in either 0-1 or 0-100 format to 0-1.

    Args:
        price: Raw price; values above 1 are treated as percentages
        fallback: Value used when the price is missing or not numeric

    Returns:
        Price on the 0-1 scale (not yet clamped)
    """
    value = coerce_float(price)
    if value is None:
        return fallback
    if value > 1:
        return value / 100
    return value


def is_multi_outcome(outcomes: Optional[List[Dict[str, Any]]]) -> bool:
    """Whether the caller supplied a categorical (multi-outcome) market."""
    return isinstance(outcomes, list) and len(outcomes) > 1


def _binary_outcomes(
    yes_percentage: Any, no_percentage: Any, market_id: str
) -> List[MarketOutcome]:
    yes_pct = coerce_float(yes_percentage)
    no_pct = coerce_float(no_percentage)

    if yes_pct is None and no_pct is None:
        yes_pct, no_pct = 50.0, 50.0
    elif yes_pct is None:
        yes_pct = 100 - no_pct
    elif no_pct is None:
        no_pct = 100 - yes_pct

    yes_price = clamp(yes_pct / 100, 0.0, 1.0)
    no_price = clamp(no_pct / 100, 0.0, 1.0)

    return [
        MarketOutcome(label="YES", yes_price=yes_price, no_price=no_price, market_id=market_id),
        MarketOutcome(label="NO", yes_price=no_price, no_price=yes_price, market_id=market_id),
    ]


def _outcome_label(raw: Dict[str, Any], index: int) -> str:
    label = raw.get("label") or raw.get("outcomeLabel")
    if label is None:
        return f"Outcome {index + 1}"
    return str(label)


def normalize_market_outcomes(
    outcomes: Optional[List[Dict[str, Any]]],
    yes_percentage: Any,
    no_percentage: Any,
    market_id: str = "",
) -> List[MarketOutcome]:
    """Build canonical outcomes from a market analysis request.

    Binary markets (no outcomes or a single one) use the YES/NO percentages.
    Multi-outcome markets read per-outcome prices in either 0-1 or 0-100
    format and are proportionally rescaled when their yes prices sum far from 1.

    Args:
        outcomes: Raw outcome dicts from the caller, if any
        yes_percentage: Binary YES percentage (0-100)
        no_percentage: Binary NO percentage (0-100)
        market_id: Market ID applied to outcomes lacking their own

    Returns:
        Outcomes whose yes and no prices all lie within [0, 1]
    """
    if not is_multi_outcome(outcomes):
        return _binary_outcomes(yes_percentage, no_percentage, market_id)

    count = len(outcomes)
    yes_prices = []
    no_prices = []
    labels = []
    market_ids = []

    for index, raw in enumerate(outcomes):
        if not isinstance(raw, dict):
            raw = {}
        raw_yes = raw.get("yesPrice")
        if raw_yes is None:
            raw_yes = raw.get("impliedProbability")

        yes_price = normalize_price(raw_yes, 1 / count)
        no_price = normalize_price(raw.get("noPrice"), 1 - yes_price)

        yes_prices.append(yes_price)
        no_prices.append(no_price)
        labels.append(_outcome_label(raw, index))
        market_ids.append(str(raw.get("marketId") or market_id))

    prob_sum = sum(yes_prices)
    logger.info(f"Multi-outcome probability sum: {prob_sum * 100:.1f}%")

    if prob_sum > 0 and abs(prob_sum - 1) > PROBABILITY_SUM_TOLERANCE:
        logger.warning(f"Normalizing probabilities from {prob_sum * 100:.1f}% to 100%")
        yes_prices = [p / prob_sum for p in yes_prices]

    return [
        MarketOutcome(
            label=label,
            yes_price=clamp(yes, 0.0, 1.0),
            no_price=clamp(no, 0.0, 1.0),
            market_id=mid,
        )
        for label, yes, no, mid in zip(labels, yes_prices, no_prices, market_ids)
    ]
