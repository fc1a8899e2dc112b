"""Data access layer for MarketLens database operations."""

from typing import Any, Dict, List, Optional

from marketlens.analysis.models import ModelAccuracy
from marketlens.database.db import get_db


class PredictionRepository:
    """Repository for per-model prediction records."""

    def __init__(self, db=None):
        """Initialize repository with database connection."""
        self.db = db or get_db()

    def create(
        self,
        market_id: str,
        market_title: str,
        model_name: str,
        model_provider: str,
        predicted_sentiment: str,
        confidence: str,
        trust_score: float,
        data_points_cited: int,
        outcome_label: Optional[str] = None,
        predicted_probability: Optional[float] = None,
        market_probability: Optional[float] = None,
    ) -> int:
        """Store one model's prediction for a market.

        Returns:
            ID of the created prediction
        """
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO ai_model_predictions (
                    market_id, market_title, outcome_label, model_name,
                    model_provider, predicted_sentiment, predicted_probability,
                    market_probability, confidence, trust_score, data_points_cited
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    market_id,
                    market_title,
                    outcome_label,
                    model_name,
                    model_provider,
                    predicted_sentiment,
                    predicted_probability,
                    market_probability,
                    confidence,
                    trust_score,
                    data_points_cited,
                ),
            )
            return cursor.lastrowid

    def get_by_market(self, market_id: str) -> List[Dict[str, Any]]:
        """Get all predictions recorded for a market, oldest first."""
        rows = self.db.fetch_all(
            """
            SELECT * FROM ai_model_predictions
            WHERE market_id = ?
            ORDER BY created_at ASC, id ASC
            """,
            (market_id,),
        )
        return [dict(row) for row in rows]

    def get_by_model(self, model_name: str, limit: int = 50) -> List[Dict[str, Any]]:
        """Get the most recent predictions made by a model."""
        rows = self.db.fetch_all(
            """
            SELECT * FROM ai_model_predictions
            WHERE model_name = ?
            ORDER BY created_at DESC, id DESC
            LIMIT ?
            """,
            (model_name, limit),
        )
        return [dict(row) for row in rows]


class ModelAccuracyRepository:
    """Repository for historical model accuracy statistics."""

    def __init__(self, db=None):
        """Initialize repository with database connection."""
        self.db = db or get_db()

    def get_all(self) -> Dict[str, ModelAccuracy]:
        """Get accuracy statistics keyed by model name."""
        rows = self.db.fetch_all(
            """
            SELECT model_name, accuracy_rate, total_predictions
            FROM ai_model_accuracy
            ORDER BY model_name
            """
        )
        return {
            row["model_name"]: ModelAccuracy(
                accuracy=row["accuracy_rate"],
                total_predictions=row["total_predictions"],
            )
            for row in rows
        }

    def get(self, model_name: str) -> Optional[Dict[str, Any]]:
        """Get the full accuracy record for a model."""
        row = self.db.fetch_one(
            "SELECT * FROM ai_model_accuracy WHERE model_name = ?", (model_name,)
        )

        if row is None:
            return None

        return dict(row)

    def upsert(
        self,
        model_name: str,
        model_provider: str,
        accuracy_rate: float,
        total_predictions: int,
        correct_predictions: int,
        avg_trust_score: float = 0.0,
        brier_score: Optional[float] = None,
    ) -> None:
        """Create or replace a model's accuracy statistics."""
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO ai_model_accuracy (
                    model_name, model_provider, accuracy_rate, total_predictions,
                    correct_predictions, avg_trust_score, brier_score
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(model_name) DO UPDATE SET
                    model_provider = excluded.model_provider,
                    accuracy_rate = excluded.accuracy_rate,
                    total_predictions = excluded.total_predictions,
                    correct_predictions = excluded.correct_predictions,
                    avg_trust_score = excluded.avg_trust_score,
                    brier_score = excluded.brier_score,
                    last_updated = CURRENT_TIMESTAMP
                """,
                (
                    model_name,
                    model_provider,
                    accuracy_rate,
                    total_predictions,
                    correct_predictions,
                    avg_trust_score,
                    brier_score,
                ),
            )
