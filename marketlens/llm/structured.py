"""Structured-output contract: tool schema, validation and lenient parsing."""

import json
import logging
import re
from typing import Any, Dict, List

from marketlens.analysis.models import StructuredAnalysis, StructuredOutcome
from marketlens.analysis.prompt_builder import ANALYSIS_TOOL_NAME
from marketlens.exceptions import AnalysisValidationError
from marketlens.utils.helpers import clamp

logger = logging.getLogger(__name__)

SENTIMENTS = ("bullish", "bearish", "neutral")
CONFIDENCE_LEVELS = ("high", "medium", "low")

# Warn when a multi-outcome answer's probabilities sum this far from 100
PROBABILITY_MASS_TOLERANCE = 15.0

BULLISH_PATTERN = re.compile(r"bullish|optimistic|likely|strong|favor", re.IGNORECASE)
BEARISH_PATTERN = re.compile(r"bearish|unlikely|weak|doubt|risk", re.IGNORECASE)
PERCENT_PATTERN = re.compile(r"(\d{1,3})%")

LENIENT_PARSE_ASSUMPTION = "Analysis parsed from unstructured response"


def build_analysis_tool_schema(outcome_labels: List[str]) -> Dict[str, Any]:
    """Build the function schema models must call to submit an analysis.

    Args:
        outcome_labels: Valid outcome labels, used as enums

    Returns:
        OpenAI-style tool definition
    """
    return {
        "type": "function",
        "function": {
            "name": ANALYSIS_TOOL_NAME,
            "description": "Submit your probability analysis for the prediction market outcomes",
            "parameters": {
                "type": "object",
                "properties": {
                    "outcomes": {
                        "type": "array",
                        "description": "Your probability assessment for each outcome",
                        "items": {
                            "type": "object",
                            "properties": {
                                "label": {
                                    "type": "string",
                                    "enum": outcome_labels,
                                    "description": "The outcome label (must match exactly)",
                                },
                                "probability": {
                                    "type": "number",
                                    "minimum": 0,
                                    "maximum": 100,
                                    "description": "Your probability estimate (0-100)",
                                },
                                "reasoning": {
                                    "type": "string",
                                    "description": "Brief reasoning for this probability (1-2 sentences)",
                                },
                                "dataPoints": {
                                    "type": "array",
                                    "items": {"type": "string"},
                                    "description": "Specific verifiable data points supporting this estimate",
                                },
                            },
                            "required": ["label", "probability", "reasoning", "dataPoints"],
                            "additionalProperties": False,
                        },
                    },
                    "topPick": {
                        "type": "string",
                        "enum": outcome_labels,
                        "description": "Your highest probability outcome",
                    },
                    "sentiment": {
                        "type": "string",
                        "enum": list(SENTIMENTS),
                        "description": "Your overall market sentiment",
                    },
                    "confidence": {
                        "type": "string",
                        "enum": list(CONFIDENCE_LEVELS),
                        "description": "Your confidence in this analysis",
                    },
                    "assumptions": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Key assumptions underlying your analysis (label any unverifiable claims)",
                    },
                    "keyRisks": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Factors that could invalidate this analysis",
                    },
                },
                "required": [
                    "outcomes",
                    "topPick",
                    "sentiment",
                    "confidence",
                    "assumptions",
                    "keyRisks",
                ],
                "additionalProperties": False,
            },
        },
    }


def parse_tool_arguments(raw_arguments: str) -> Dict[str, Any]:
    """Decode tool-call arguments.

    Raises:
        AnalysisValidationError: If the arguments are not a JSON object
    """
    try:
        parsed = json.loads(raw_arguments)
    except (TypeError, json.JSONDecodeError) as e:
        raise AnalysisValidationError(f"Parse error: {str(e)}") from e
    if not isinstance(parsed, dict):
        raise AnalysisValidationError("Tool arguments are not a JSON object")
    return parsed


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def _normalize_label(label: Any) -> str:
    if not isinstance(label, str):
        return ""
    return label.strip().lower()


def validate_structured_analysis(
    parsed: Dict[str, Any], valid_labels: List[str]
) -> StructuredAnalysis:
    """Validate a decoded tool call against the structured-output contract.

    Outcomes with unknown labels are dropped with a warning. A multi-outcome
    probability mass far from 100 is logged but accepted.

    Args:
        parsed: Decoded tool-call arguments
        valid_labels: Known outcome labels

    Returns:
        Validated structured analysis

    Raises:
        AnalysisValidationError: If outcomes are missing, the top pick is not a
            known label, or a known outcome's probability is outside [0, 100]
    """
    outcomes = parsed.get("outcomes")
    if not isinstance(outcomes, list):
        raise AnalysisValidationError("Missing outcomes array")

    top_pick = parsed.get("topPick")
    if not top_pick or not isinstance(top_pick, str):
        raise AnalysisValidationError("Missing topPick")

    # Normalized label -> canonical label as the market spells it
    canonical = {label.strip().lower(): label for label in valid_labels}
    if _normalize_label(top_pick) not in canonical:
        raise AnalysisValidationError(
            f'Invalid topPick "{top_pick}". Must be one of: {", ".join(valid_labels)}'
        )

    valid_outcomes = []
    for outcome in outcomes:
        if not isinstance(outcome, dict):
            logger.warning(f"Skipping malformed outcome entry: {outcome!r}")
            continue

        label = outcome.get("label")
        if _normalize_label(label) not in canonical:
            logger.warning(f"Skipping unknown outcome: {label}")
            continue

        probability = outcome.get("probability")
        if (
            isinstance(probability, bool)
            or not isinstance(probability, (int, float))
            or not 0 <= probability <= 100
        ):
            raise AnalysisValidationError(f"Invalid probability for {label}")

        reasoning = outcome.get("reasoning")
        valid_outcomes.append(
            StructuredOutcome(
                label=canonical[_normalize_label(label)],
                probability=float(probability),
                reasoning=reasoning if isinstance(reasoning, str) else "",
                data_points=_string_list(outcome.get("dataPoints")),
            )
        )

    prob_sum = sum(o.probability for o in valid_outcomes)
    if len(valid_outcomes) > 2 and abs(prob_sum - 100) > PROBABILITY_MASS_TOLERANCE:
        logger.warning(f"Probability sum is {prob_sum}%, expected ~100%")

    sentiment = parsed.get("sentiment")
    confidence = parsed.get("confidence")

    return StructuredAnalysis(
        outcomes=valid_outcomes,
        top_pick=canonical[_normalize_label(top_pick)],
        sentiment=sentiment if sentiment in SENTIMENTS else "neutral",
        confidence=confidence if confidence in CONFIDENCE_LEVELS else "medium",
        assumptions=_string_list(parsed.get("assumptions")),
        key_risks=_string_list(parsed.get("keyRisks")),
    )


def infer_sentiment(text: str) -> str:
    """Infer sentiment from keywords; bearish wording wins over bullish."""
    sentiment = "neutral"
    if BULLISH_PATTERN.search(text):
        sentiment = "bullish"
    if BEARISH_PATTERN.search(text):
        sentiment = "bearish"
    return sentiment


def parse_fallback_content(content: str, valid_labels: List[str]) -> StructuredAnalysis:
    """Recover a judgment from free text when a model skipped the tool call.

    For each label the first ``<label> ... NN%`` match supplies its
    probability; unmatched labels get an equal share of 50. Results from this
    path are always reported with low confidence.

    Args:
        content: Free-text model reply
        valid_labels: Known outcome labels

    Returns:
        Best-effort structured analysis
    """
    default_probability = 50 / len(valid_labels) if valid_labels else 0.0
    outcomes = []

    for label in valid_labels:
        pattern = re.compile(rf"{re.escape(label)}[:\s]*(\d{{1,3}})%", re.IGNORECASE)
        match = pattern.search(content)

        probability = default_probability
        if match:
            percent = PERCENT_PATTERN.search(match.group(0))
            if percent:
                probability = float(int(percent.group(1)))

        outcomes.append(
            StructuredOutcome(
                label=label,
                probability=clamp(probability),
                reasoning="Extracted from analysis",
                data_points=[],
            )
        )

    ranked = sorted(outcomes, key=lambda o: o.probability, reverse=True)
    if ranked:
        top_pick = ranked[0].label
    elif valid_labels:
        top_pick = valid_labels[0]
    else:
        top_pick = ""

    return StructuredAnalysis(
        outcomes=ranked,
        top_pick=top_pick,
        sentiment=infer_sentiment(content),
        confidence="low",
        assumptions=[LENIENT_PARSE_ASSUMPTION],
        key_risks=[],
    )
