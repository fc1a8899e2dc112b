"""Tests for market category and crypto symbol detection."""

import pytest

from marketlens.analysis.category import (
    CATEGORY_DATA_REQUIREMENTS,
    CATEGORY_GENERAL,
    category_data_requirements,
    detect_market_category,
    extract_crypto_symbol,
)


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Will BTC hit $100k?", "crypto"),
        ("Will Ethereum flip Bitcoin by 2027?", "crypto"),
        ("Who will win the 2028 presidential election?", "politics"),
        ("Will Brazil win the World Cup?", "sports"),
        ("Will Nvidia report record earnings?", "finance"),
        ("Will GPT-6 launch this year?", "technology"),
        ("Will it snow in Paris on Christmas?", "general"),
    ],
)
def test_detect_market_category(title, expected):
    assert detect_market_category(title) == expected


def test_first_matching_category_wins():
    # Mentions both crypto and politics; crypto is checked first
    assert detect_market_category("Will Trump launch a crypto reserve?") == "crypto"


def test_detection_is_deterministic():
    titles = ["Will BTC hit $100k?", "Will the Lakers make the playoffs?", "Random question"]
    for title in titles:
        assert detect_market_category(title) == detect_market_category(title)


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Will BTC close above $90k?", "BTC"),
        ("Will bitcoin reach a new high?", "BTC"),
        ("Ethereum above $5,000 in December?", "ETH"),
        ("Will Solana outperform?", "SOL"),
        ("Will DOGE hit $1?", "DOGE"),
        ("Who wins the Super Bowl?", None),
    ],
)
def test_extract_crypto_symbol(title, expected):
    assert extract_crypto_symbol(title) == expected


def test_unknown_category_uses_general_requirements():
    assert category_data_requirements("weather") == CATEGORY_DATA_REQUIREMENTS[CATEGORY_GENERAL]
    assert "Technical levels" in category_data_requirements("crypto")
