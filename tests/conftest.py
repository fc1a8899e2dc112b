"""Shared fixtures for MarketLens tests."""

import pytest

from marketlens.analysis.models import MarketOutcome
from marketlens.config import ModelSpec, Settings
from marketlens.database.db import Database


@pytest.fixture
def settings():
    return Settings(
        llm_gateway_api_key="test-key",
        database_path=":memory:",
        log_file=None,
        analysis_models=[
            ModelSpec(model_id="test/alpha", display_name="Alpha", provider="Test"),
            ModelSpec(model_id="test/beta", display_name="Beta", provider="Test"),
            ModelSpec(model_id="test/gamma", display_name="Gamma", provider="Test"),
        ],
        fallback_models={"test/alpha": ["test/alpha-lite"]},
    )


@pytest.fixture
def db():
    database = Database(":memory:")
    database.initialize_schema()
    yield database
    database.close()


@pytest.fixture
def binary_outcomes():
    return [
        MarketOutcome(label="YES", yes_price=0.65, no_price=0.35),
        MarketOutcome(label="NO", yes_price=0.35, no_price=0.65),
    ]
