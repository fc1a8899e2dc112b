"""LLM manager for fanning a market out to multiple models."""

import asyncio
import logging
from typing import List, Optional

from marketlens.analysis.models import MarketOutcome, ModelAnalysis
from marketlens.config import ModelSpec, Settings, get_settings
from marketlens.llm.analyst import StructuredAnalyst
from marketlens.llm.base import BaseLLMGateway
from marketlens.llm.gateway import LLMGateway
from marketlens.llm.models import EvidenceScoringConfig

logger = logging.getLogger(__name__)


class LLMManager:
    """Manages the configured models for market analysis."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        gateway: Optional[BaseLLMGateway] = None,
        models: Optional[List[ModelSpec]] = None,
        scoring: Optional[EvidenceScoringConfig] = None,
    ):
        """Initialize LLM manager.

        Args:
            settings: Application settings. If None, uses config singleton.
            gateway: Gateway to query. If None, an OpenAI-compatible one is built.
            models: Models to ask. If None, uses configured analysis models.
            scoring: Evidence-density scoring constants
        """
        self.settings = settings or get_settings()
        self.gateway = gateway or LLMGateway(self.settings)
        self.models = list(models if models is not None else self.settings.analysis_models)
        self.analyst = StructuredAnalyst(
            self.gateway,
            fallback_models=self.settings.fallback_models,
            scoring=scoring,
        )

        if not self.models:
            raise ValueError("No analysis models configured")

    async def analyze_with_all_models(
        self,
        system_prompt: str,
        prompt: str,
        outcomes: List[MarketOutcome],
    ) -> List[Optional[ModelAnalysis]]:
        """Analyze a market with every configured model in parallel.

        Args:
            system_prompt: System prompt for the request
            prompt: Market analysis prompt
            outcomes: Normalized market outcomes

        Returns:
            One entry per configured model, in configuration order
            (None if the model and all its fallbacks failed)
        """
        results = await asyncio.gather(
            *(
                self._safe_analyze(spec, system_prompt, prompt, outcomes)
                for spec in self.models
            )
        )

        summary = ", ".join(
            f"{spec.model_id}: {'success' if result else 'failed'}"
            for spec, result in zip(self.models, results)
        )
        logger.info(f"Model results - {summary}")

        return list(results)

    async def _safe_analyze(
        self,
        spec: ModelSpec,
        system_prompt: str,
        prompt: str,
        outcomes: List[MarketOutcome],
    ) -> Optional[ModelAnalysis]:
        """Analyze with one model, turning unexpected errors into a failed result.

        Args:
            spec: Model to ask
            system_prompt: System prompt for the request
            prompt: Market analysis prompt
            outcomes: Normalized market outcomes

        Returns:
            Analysis or None if failed
        """
        try:
            return await self.analyst.analyze(spec, system_prompt, prompt, outcomes)
        except Exception as e:
            logger.exception(f"{spec.display_name} analysis failed: {e}")
            return None
