"""Database schema definitions for MarketLens."""

# SQL schema for creating tables

CREATE_PREDICTIONS_TABLE = """
CREATE TABLE IF NOT EXISTS ai_model_predictions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    market_id TEXT NOT NULL,
    market_title TEXT NOT NULL,
    outcome_label TEXT,
    model_name TEXT NOT NULL,
    model_provider TEXT NOT NULL,
    predicted_sentiment TEXT NOT NULL,
    predicted_probability REAL,
    market_probability REAL,
    confidence TEXT NOT NULL,
    trust_score REAL NOT NULL DEFAULT 50,
    data_points_cited INTEGER NOT NULL DEFAULT 0,

    is_resolved INTEGER DEFAULT 0,
    actual_outcome_won INTEGER,
    brier_contribution REAL,
    resolved_at TIMESTAMP,

    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""

CREATE_PREDICTIONS_MARKET_INDEX = """
CREATE INDEX IF NOT EXISTS idx_predictions_market
ON ai_model_predictions(market_id);
"""

CREATE_PREDICTIONS_MODEL_INDEX = """
CREATE INDEX IF NOT EXISTS idx_predictions_model
ON ai_model_predictions(model_name);
"""

CREATE_MODEL_ACCURACY_TABLE = """
CREATE TABLE IF NOT EXISTS ai_model_accuracy (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    model_name TEXT NOT NULL UNIQUE,
    model_provider TEXT NOT NULL,
    accuracy_rate REAL NOT NULL DEFAULT 0,
    total_predictions INTEGER NOT NULL DEFAULT 0,
    correct_predictions INTEGER NOT NULL DEFAULT 0,
    avg_trust_score REAL NOT NULL DEFAULT 0,
    brier_score REAL,
    calibration_data TEXT,
    last_updated TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""

ALL_TABLES = [
    CREATE_PREDICTIONS_TABLE,
    CREATE_PREDICTIONS_MARKET_INDEX,
    CREATE_PREDICTIONS_MODEL_INDEX,
    CREATE_MODEL_ACCURACY_TABLE,
]
