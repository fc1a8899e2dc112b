"""Tests for the command-line interface."""

import logging

import click
import pytest
from click.testing import CliRunner
from rich.console import Console

from marketlens.cli import _parse_outcomes, cli
from marketlens.database.repositories import ModelAccuracyRepository, PredictionRepository
from marketlens.pricing.client import CryptoPriceClient
from marketlens.pricing.models import CryptoTechnicalData


def test_no_outcomes_means_binary():
    assert _parse_outcomes(()) is None


def test_parses_label_price_pairs():
    assert _parse_outcomes(("Lakers=40", "New York Knicks=0.35")) == [
        {"label": "Lakers", "yesPrice": 40.0},
        {"label": "New York Knicks", "yesPrice": 0.35},
    ]


@pytest.mark.parametrize("value", ["Lakers", "=40", "Lakers=abc"])
def test_rejects_malformed_outcomes(value):
    with pytest.raises(click.BadParameter):
        _parse_outcomes((value,))


@pytest.fixture
def runner(settings, db, monkeypatch):
    monkeypatch.setattr("marketlens.config._settings", settings)
    monkeypatch.setattr("marketlens.database.db._db", db)
    monkeypatch.setattr("marketlens.cli.console", Console(width=200))
    yield CliRunner()
    logging.getLogger("marketlens").handlers.clear()


def _record(db, market_id, model_name, outcome_label=None):
    PredictionRepository(db).create(
        market_id=market_id,
        market_title="Who will win the NBA championship?",
        model_name=model_name,
        model_provider="Test",
        predicted_sentiment="neutral",
        confidence="medium",
        trust_score=61,
        data_points_cited=2,
        outcome_label=outcome_label,
        predicted_probability=50.0,
        market_probability=40.0,
    )


def test_predictions_for_market(runner, db):
    _record(db, "nba", "Alpha", "Lakers")
    _record(db, "nba", "Beta", "Celtics")
    _record(db, "fed", "Alpha")

    result = runner.invoke(cli, ["predictions", "nba"])

    assert result.exit_code == 0
    assert "Lakers" in result.output
    assert "Celtics" in result.output
    assert "fed" not in result.output


def test_predictions_for_model(runner, db):
    _record(db, "nba", "Alpha", "Lakers")
    _record(db, "fed", "Beta")

    result = runner.invoke(cli, ["predictions", "--model", "Beta"])

    assert result.exit_code == 0
    assert "fed" in result.output
    assert "Lakers" not in result.output


def test_predictions_requires_a_filter(runner):
    result = runner.invoke(cli, ["predictions"])

    assert result.exit_code == 2


def test_model_accuracy_record(runner, db):
    ModelAccuracyRepository(db).upsert("Alpha", "Test", 61.5, 40, 25, brier_score=0.21)

    listing = runner.invoke(cli, ["model-accuracy"])
    record = runner.invoke(cli, ["model-accuracy", "Alpha"])
    missing = runner.invoke(cli, ["model-accuracy", "Nobody"])

    assert "61.5%" in listing.output
    assert "brier_score" in record.output
    assert "0.21" in record.output
    assert "No accuracy data for Nobody" in missing.output


def test_price_shows_technical_summary(runner, monkeypatch):
    data = CryptoTechnicalData(
        symbol="SOLUSDT",
        current_price=150.25,
        price_change_percent_24h=-2.5,
        high_24h=155.0,
        low_24h=148.0,
        technical_summary="6h downtrend (-1.2%), trading near lower range",
    )
    monkeypatch.setattr(CryptoPriceClient, "get_technical_data", lambda self, symbol: data)

    result = runner.invoke(cli, ["price", "sol"])

    assert result.exit_code == 0
    assert "SOLUSDT" in result.output
    assert "$150.25" in result.output
    assert "6h downtrend" in result.output


def test_price_unavailable_exits_nonzero(runner, monkeypatch):
    monkeypatch.setattr(CryptoPriceClient, "get_technical_data", lambda self, symbol: None)

    result = runner.invoke(cli, ["price", "sol"])

    assert result.exit_code == 1
    assert "No price data for SOL" in result.output
