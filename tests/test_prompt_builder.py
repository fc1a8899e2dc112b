"""Tests for prompt construction."""

from datetime import date

from marketlens.analysis.models import MarketOutcome
from marketlens.analysis.prompt_builder import (
    ANALYSIS_TOOL_NAME,
    build_analysis_prompt,
    build_system_prompt,
)
from marketlens.pricing.models import CryptoTechnicalData

TODAY = date(2026, 3, 5)


def test_system_prompt_lists_outcomes_and_policy():
    prompt = build_system_prompt(["YES", "NO"], "politics", today=TODAY)

    assert "Today is March 5, 2026." in prompt
    assert "You may ONLY assign probabilities to these outcomes: YES, NO" in prompt
    assert "Published poll aggregates" in prompt
    assert ANALYSIS_TOOL_NAME in prompt


def test_analysis_prompt_includes_market_prices(binary_outcomes):
    prompt = build_analysis_prompt("Will BTC hit $100k?", binary_outcomes, "45230", today=TODAY)

    assert "**Today's Date: Thursday, March 5, 2026**" in prompt
    assert "**Market Question:** Will BTC hit $100k?" in prompt
    assert "**Available Outcomes:** YES, NO" in prompt
    assert "- YES: 65.0%" in prompt
    assert "- NO: 35.0%" in prompt
    assert "- Trading volume: $45230" in prompt
    assert "Live" not in prompt


def test_analysis_prompt_missing_volume():
    outcomes = [
        MarketOutcome(label="A", yes_price=0.5, no_price=0.5),
        MarketOutcome(label="B", yes_price=0.5, no_price=0.5),
    ]
    prompt = build_analysis_prompt("Question?", outcomes, None, today=TODAY)
    assert "- Trading volume: $N/A" in prompt


def test_analysis_prompt_with_crypto_block(binary_outcomes):
    crypto = CryptoTechnicalData(
        symbol="BTCUSDT",
        current_price=97123.456,
        price_change_percent_24h=2.5,
        high_24h=98000,
        low_24h=95000,
        technical_summary="6h uptrend (+1.20%). Price at 80% of range. Volume stable.",
    )
    prompt = build_analysis_prompt(
        "Will BTC hit $100k?", binary_outcomes, "1000", crypto_data=crypto, today=TODAY
    )

    assert "**Live BTCUSDT Data:**" in prompt
    assert "- Current Price: $97123.46" in prompt
    assert "- 24h Change: +2.50%" in prompt
    assert "- 24h Range: $95000.00 - $98000.00" in prompt
    assert "- Technical: 6h uptrend" in prompt
