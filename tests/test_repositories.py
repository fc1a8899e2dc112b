"""Tests for the SQLite persistence layer."""

from marketlens.analysis.models import ModelAccuracy
from marketlens.database.repositories import ModelAccuracyRepository, PredictionRepository


def _create(repo, **overrides):
    fields = dict(
        market_id="m-1",
        market_title="Will BTC hit $100k?",
        model_name="Gemini Flash",
        model_provider="Google",
        predicted_sentiment="bullish",
        confidence="medium",
        trust_score=61,
        data_points_cited=2,
        predicted_probability=70.0,
        market_probability=65.0,
    )
    fields.update(overrides)
    return repo.create(**fields)


def test_prediction_round_trip(db):
    repo = PredictionRepository(db)

    prediction_id = _create(repo)

    rows = repo.get_by_market("m-1")
    assert len(rows) == 1
    row = rows[0]
    assert row["id"] == prediction_id
    assert row["model_name"] == "Gemini Flash"
    assert row["outcome_label"] is None
    assert row["predicted_probability"] == 70.0
    assert row["trust_score"] == 61
    assert row["is_resolved"] == 0


def test_predictions_are_appended(db):
    repo = PredictionRepository(db)
    _create(repo)
    _create(repo, model_name="Gemini Pro", outcome_label="YES")
    _create(repo, market_id="m-2")

    assert [r["model_name"] for r in repo.get_by_market("m-1")] == ["Gemini Flash", "Gemini Pro"]
    assert len(repo.get_by_model("Gemini Flash")) == 2


def test_accuracy_empty(db):
    assert ModelAccuracyRepository(db).get_all() == {}


def test_accuracy_upsert(db):
    repo = ModelAccuracyRepository(db)
    repo.upsert("Gemini Pro", "Google", 61.5, 40, 25, avg_trust_score=72)
    repo.upsert("Gemini Pro", "Google", 63.0, 41, 26, avg_trust_score=72, brier_score=0.21)
    repo.upsert("Gemini Flash", "Google", 55.0, 10, 5)

    stats = repo.get_all()

    assert stats == {
        "Gemini Flash": ModelAccuracy(accuracy=55.0, total_predictions=10),
        "Gemini Pro": ModelAccuracy(accuracy=63.0, total_predictions=41),
    }
    assert repo.get("Gemini Pro")["brier_score"] == 0.21
    assert repo.get("Unknown") is None
