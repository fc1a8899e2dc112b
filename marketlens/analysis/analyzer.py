"""Main analysis orchestrator."""

import asyncio
import logging
import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from marketlens.analysis.category import detect_market_category, extract_crypto_symbol
from marketlens.analysis.consensus import calculate_consensus
from marketlens.analysis.models import (
    ConsolidatedResponse,
    ModelAccuracy,
    ModelAnalysis,
    ResponseMetadata,
)
from marketlens.analysis.normalizer import is_multi_outcome, normalize_market_outcomes
from marketlens.analysis.prompt_builder import build_analysis_prompt, build_system_prompt
from marketlens.config import Settings, get_settings
from marketlens.database.repositories import ModelAccuracyRepository, PredictionRepository
from marketlens.exceptions import NoModelAnalysesError
from marketlens.llm.manager import LLMManager
from marketlens.pricing.client import CryptoPriceClient, build_technical_data
from marketlens.pricing.models import CryptoTechnicalData

logger = logging.getLogger(__name__)


class Analyzer:
    """Main orchestrator for market analysis.

    One call runs the whole request-scoped pipeline: normalize the market,
    detect its category, enrich crypto markets with live prices, fan the
    prompt out to every configured model, combine the results into a
    consensus and record each model's prediction.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        llm_manager: Optional[LLMManager] = None,
        price_client: Optional[CryptoPriceClient] = None,
        prediction_repo: Optional[PredictionRepository] = None,
        accuracy_repo: Optional[ModelAccuracyRepository] = None,
    ):
        """Initialize analyzer.

        Args:
            settings: Application settings. If None, uses config singleton.
            llm_manager: Model fan-out manager
            price_client: Crypto market-data client
            prediction_repo: Sink for per-model predictions
            accuracy_repo: Source of historical model accuracy
        """
        self.settings = settings or get_settings()
        self.llm_manager = llm_manager or LLMManager(self.settings)
        self.price_client = price_client or CryptoPriceClient(self.settings)
        self.prediction_repo = prediction_repo or PredictionRepository()
        self.accuracy_repo = accuracy_repo or ModelAccuracyRepository()

    async def analyze(
        self,
        market_title: str,
        market_id: str = "",
        yes_percentage: Any = None,
        no_percentage: Any = None,
        volume: Optional[str] = None,
        outcomes: Optional[List[Dict[str, Any]]] = None,
    ) -> ConsolidatedResponse:
        """Analyze a market with every configured model.

        Args:
            market_title: Market question
            market_id: Market identifier used for persistence
            yes_percentage: Binary YES price (0-100)
            no_percentage: Binary NO price (0-100)
            volume: Trading volume as displayed to the user
            outcomes: Raw outcomes for multi-outcome markets

        Returns:
            Consolidated response with consensus and per-model analyses

        Raises:
            NoModelAnalysesError: If no model produced a usable analysis
        """
        multi_outcome = is_multi_outcome(outcomes)
        normalized = normalize_market_outcomes(
            outcomes, yes_percentage, no_percentage, market_id
        )
        labels = [o.label for o in normalized]

        category = detect_market_category(market_title)
        logger.info(
            f"Analyzing market: {market_title} ({category}, {len(normalized)} outcomes)"
        )

        crypto_data = None
        symbol = extract_crypto_symbol(market_title)
        if symbol:
            crypto_data = await self.fetch_crypto_data(symbol)

        system_prompt = build_system_prompt(labels, category)
        prompt = build_analysis_prompt(market_title, normalized, volume, crypto_data)

        model_accuracy = await asyncio.to_thread(self.fetch_model_accuracy)

        results = await self.llm_manager.analyze_with_all_models(
            system_prompt, prompt, normalized
        )
        analyses = [a for a in results if a is not None]

        if not analyses:
            logger.error(f"All models failed for market: {market_title}")
            raise NoModelAnalysesError("Failed to generate analysis. Please try again.")

        consensus = calculate_consensus(analyses, normalized)

        await asyncio.to_thread(
            self.save_predictions, market_id, market_title, analyses, multi_outcome
        )

        return ConsolidatedResponse(
            consensus=consensus,
            model_analyses=analyses,
            crypto_data=crypto_data,
            model_accuracy=model_accuracy,
            metadata=ResponseMetadata(
                models_used=len(analyses),
                timestamp=datetime.now(timezone.utc).isoformat(),
                category=category,
                is_multi_outcome=multi_outcome,
            ),
        )

    async def fetch_crypto_data(self, symbol: str) -> Optional[CryptoTechnicalData]:
        """Fetch ticker stats and candles concurrently.

        Returns:
            Combined price data, or None when ticker stats are unavailable
        """
        price_data, candles = await asyncio.gather(
            asyncio.to_thread(self.price_client.get_ticker, symbol),
            asyncio.to_thread(self.price_client.get_candles, symbol),
        )
        if price_data is None:
            logger.warning(f"No price data for {symbol}, continuing without enrichment")
            return None
        return build_technical_data(price_data, candles)

    def fetch_model_accuracy(self) -> Dict[str, ModelAccuracy]:
        """Read historical accuracy; an unavailable store yields no stats."""
        try:
            return self.accuracy_repo.get_all()
        except sqlite3.Error as e:
            logger.error(f"Error fetching model accuracy: {e}")
            return {}

    def save_predictions(
        self,
        market_id: str,
        market_title: str,
        analyses: List[ModelAnalysis],
        multi_outcome: bool,
    ) -> int:
        """Record one prediction row per model.

        Rows are independent; a failed insert is logged and the rest are
        still written.

        Returns:
            Number of rows written
        """
        saved = 0
        for analysis in analyses:
            top = analysis.outcome_rankings[0] if analysis.outcome_rankings else None
            try:
                self.prediction_repo.create(
                    market_id=market_id,
                    market_title=market_title,
                    outcome_label=top.outcome_label if multi_outcome and top else None,
                    model_name=analysis.model,
                    model_provider=analysis.model_provider,
                    predicted_sentiment=analysis.sentiment,
                    predicted_probability=top.ai_probability if top else None,
                    market_probability=top.market_probability if top else None,
                    confidence=analysis.confidence,
                    trust_score=analysis.evidence_density,
                    data_points_cited=analysis.data_points_cited,
                )
                saved += 1
            except sqlite3.Error as e:
                logger.error(f"Error saving prediction for {analysis.model}: {e}")

        logger.info(f"Saved {saved} model predictions for market {market_id}")
        return saved
