"""Tests for the shared SQLite connection."""

import sqlite3
import threading

import pytest

from marketlens.database.db import Database
from marketlens.database.repositories import PredictionRepository


def test_file_database_is_created_on_first_use(tmp_path):
    path = tmp_path / "nested" / "marketlens.db"
    database = Database(str(path))

    assert not path.parent.exists()

    database.initialize_schema()
    database.close()

    assert path.exists()


def test_failed_transaction_rolls_back(db):
    with pytest.raises(sqlite3.IntegrityError):
        with db.transaction() as cursor:
            cursor.execute(
                "INSERT INTO ai_model_accuracy (model_name, model_provider) VALUES (?, ?)",
                ("Alpha", "Test"),
            )
            cursor.execute(
                "INSERT INTO ai_model_accuracy (model_name, model_provider) VALUES (?, ?)",
                ("Alpha", "Test"),
            )

    assert db.fetch_all("SELECT * FROM ai_model_accuracy") == []
    assert not db.conn.in_transaction


def test_writes_from_worker_threads(db):
    repo = PredictionRepository(db)

    def write(i):
        repo.create(
            market_id="m",
            market_title="Will BTC hit $100k?",
            model_name=f"Model {i}",
            model_provider="Test",
            predicted_sentiment="neutral",
            confidence="low",
            trust_score=50,
            data_points_cited=0,
        )

    threads = [threading.Thread(target=write, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(repo.get_by_market("m")) == 8
