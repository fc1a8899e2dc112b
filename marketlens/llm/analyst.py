"""Per-model structured analyst with fallback chain and evidence scoring."""

import logging
from typing import Dict, List, Optional

from marketlens.analysis.models import (
    MarketOutcome,
    ModelAnalysis,
    OutcomeAnalysis,
    StructuredAnalysis,
)
from marketlens.analysis.probability import rescale_to_hundred, sort_by_probability
from marketlens.config import ModelSpec
from marketlens.exceptions import AnalysisValidationError, GatewayError
from marketlens.llm.base import BaseLLMGateway
from marketlens.llm.evidence import score_analysis
from marketlens.llm.models import AttemptResult, EvidenceScoringConfig
from marketlens.llm.structured import (
    build_analysis_tool_schema,
    parse_fallback_content,
    parse_tool_arguments,
    validate_structured_analysis,
)
from marketlens.utils.helpers import clamp, labels_match

logger = logging.getLogger(__name__)

FALLBACK_SUFFIX = " (Fallback)"


def reconcile_outcomes(
    structured: StructuredAnalysis, outcomes: List[MarketOutcome]
) -> List[OutcomeAnalysis]:
    """Pair every market outcome with the model's estimate for it.

    Outcomes the model skipped fall back to the market's own probability.
    For more than two outcomes the AI probabilities are rescaled to sum to 100.

    Args:
        structured: Validated structured analysis
        outcomes: Normalized market outcomes

    Returns:
        Rankings sorted descending by AI probability
    """
    rankings = []
    for outcome in outcomes:
        estimate = next(
            (o for o in structured.outcomes if labels_match(o.label, outcome.label)),
            None,
        )
        market_probability = outcome.market_probability

        if estimate is None:
            logger.warning(
                f"No AI probability for {outcome.label}, using market: {market_probability}%"
            )
            ai_probability = market_probability
        else:
            ai_probability = estimate.probability
        ai_probability = clamp(ai_probability)

        rankings.append(
            OutcomeAnalysis(
                outcome_label=outcome.label,
                ai_probability=ai_probability,
                market_probability=market_probability,
                edge=ai_probability - market_probability,
                reasoning=(
                    estimate.reasoning
                    if estimate is not None
                    else f"Analysis for {outcome.label}"
                ),
                data_points=list(estimate.data_points) if estimate is not None else [],
            )
        )

    if len(outcomes) > 2:
        rescale_to_hundred(rankings)

    return sort_by_probability(rankings)


def build_analysis_text(
    structured: StructuredAnalysis, rankings: List[OutcomeAnalysis]
) -> str:
    """Render a readable markdown summary of one model's judgment."""
    lines = [
        f"**Highest Model-Implied Outcome:** {structured.top_pick}",
        "",
        "**Probability Rankings:**",
    ]

    for ranking in rankings[:6]:
        # Qualitative comparison rather than a precise spread
        delta = ranking.ai_probability - ranking.market_probability
        comparison = "aligns with market"
        if delta > 3:
            comparison = "model higher than market"
        elif delta < -3:
            comparison = "model lower than market"

        lines.append(
            f"• {ranking.outcome_label}: {ranking.ai_probability:.1f}% "
            f"(Market: {ranking.market_probability:.1f}%) - {comparison}"
        )
        if ranking.reasoning:
            lines.append(f"  → {ranking.reasoning}")

    if structured.assumptions:
        lines.append("")
        lines.append("**Key Assumptions:**")
        for assumption in structured.assumptions[:3]:
            lines.append(f"• {assumption}")

    if structured.key_risks:
        lines.append("")
        lines.append("**Risk Factors:**")
        for risk in structured.key_risks[:3]:
            lines.append(f"• {risk}")

    return "\n".join(lines)


class StructuredAnalyst:
    """Obtains one model's validated judgment for a market.

    Each configured model runs a short state machine: the primary model is
    asked first, then its ordered substitutes. An attempt ends in success
    (validated tool call), degraded (free text recovered by the lenient
    parser) or failure (gateway error or invalid output). The first attempt
    that does not fail ends the chain; if every attempt fails the model
    contributes nothing.
    """

    def __init__(
        self,
        gateway: BaseLLMGateway,
        fallback_models: Optional[Dict[str, List[str]]] = None,
        scoring: Optional[EvidenceScoringConfig] = None,
    ):
        """Initialize analyst.

        Args:
            gateway: LLM gateway to query
            fallback_models: Primary model ID -> ordered substitute model IDs
            scoring: Evidence-density scoring constants
        """
        self.gateway = gateway
        self.fallback_models = fallback_models or {}
        self.scoring = scoring

    def candidate_models(self, model_id: str) -> List[str]:
        """Primary model followed by its configured substitutes."""
        return [model_id] + list(self.fallback_models.get(model_id, []))

    async def attempt(
        self,
        model: str,
        system_prompt: str,
        prompt: str,
        outcome_labels: List[str],
    ) -> AttemptResult:
        """Run a single model attempt and classify its terminal state."""
        tool_schema = build_analysis_tool_schema(outcome_labels)

        try:
            reply = await self.gateway.request_analysis(
                model, system_prompt, prompt, tool_schema
            )
        except GatewayError as e:
            logger.error(f"{model} request failed: {e}")
            return AttemptResult.failure(model, str(e))

        if reply.tool_arguments is not None:
            try:
                parsed = parse_tool_arguments(reply.tool_arguments)
                structured = validate_structured_analysis(parsed, outcome_labels)
            except AnalysisValidationError as e:
                logger.error(f"{model}: Validation failed - {e}")
                return AttemptResult.failure(model, str(e))
            return AttemptResult.success(model, structured)

        if reply.content:
            logger.info(f"{model}: Attempting fallback parse from content")
            structured = parse_fallback_content(reply.content, outcome_labels)
            return AttemptResult.degraded(model, structured, "parsed from free text")

        return AttemptResult.failure(model, "empty reply")

    async def analyze(
        self,
        spec: ModelSpec,
        system_prompt: str,
        prompt: str,
        outcomes: List[MarketOutcome],
    ) -> Optional[ModelAnalysis]:
        """Get one model's judgment, walking the fallback chain as needed.

        Args:
            spec: Primary model to ask
            system_prompt: System prompt for the request
            prompt: Market analysis prompt
            outcomes: Normalized market outcomes

        Returns:
            The model's analysis, or None if every attempt failed
        """
        outcome_labels = [o.label for o in outcomes]

        for index, model in enumerate(self.candidate_models(spec.model_id)):
            if index > 0:
                logger.info(
                    f"Primary model {spec.model_id} failed, trying fallback: {model}"
                )

            result = await self.attempt(model, system_prompt, prompt, outcome_labels)
            if result.succeeded:
                return self.build_model_analysis(
                    spec, result.analysis, outcomes, used_fallback=index > 0
                )

        logger.error(f"All attempts failed for {spec.display_name}")
        return None

    def build_model_analysis(
        self,
        spec: ModelSpec,
        structured: StructuredAnalysis,
        outcomes: List[MarketOutcome],
        used_fallback: bool = False,
    ) -> ModelAnalysis:
        """Reconcile a structured judgment with the market and score it."""
        rankings = reconcile_outcomes(structured, outcomes)
        top_probability = rankings[0].ai_probability if rankings else 50.0

        evidence_density = score_analysis(
            structured, top_probability, self.scoring, used_fallback=used_fallback
        )

        display_name = spec.display_name
        if used_fallback:
            display_name = f"{display_name}{FALLBACK_SUFFIX}"

        return ModelAnalysis(
            model=display_name,
            model_provider=spec.provider,
            analysis=build_analysis_text(structured, rankings),
            outcome_rankings=rankings,
            top_pick=structured.top_pick,
            top_pick_probability=top_probability,
            sentiment=structured.sentiment,
            confidence=structured.confidence,
            evidence_density=evidence_density,
            data_points_cited=structured.data_point_count,
            assumptions=structured.assumptions,
            key_risks=structured.key_risks,
        )
