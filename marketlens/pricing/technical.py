"""Technical summary of recent OHLC candles."""

from typing import List

from marketlens.pricing.models import OHLCCandle
from marketlens.utils.helpers import format_signed

# Recent volume above/below the window average by this fraction counts as a trend
VOLUME_TREND_THRESHOLD = 0.2
RECENT_CANDLE_COUNT = 3


def classify_volume_trend(candles: List[OHLCCandle]) -> str:
    """Compare the last few candles' volume with the window average.

    Returns:
        "increasing", "decreasing" or "stable"
    """
    avg_volume = sum(c.volume for c in candles) / len(candles)
    recent = candles[-RECENT_CANDLE_COUNT:]
    recent_volume = sum(c.volume for c in recent) / RECENT_CANDLE_COUNT

    if recent_volume > avg_volume * (1 + VOLUME_TREND_THRESHOLD):
        return "increasing"
    if recent_volume < avg_volume * (1 - VOLUME_TREND_THRESHOLD):
        return "decreasing"
    return "stable"


def generate_technical_summary(candles: List[OHLCCandle]) -> str:
    """Summarise trend, range position and volume over a candle window.

    Args:
        candles: Candles in chronological order

    Returns:
        One-line human-readable summary, or an empty string without candles
    """
    if not candles:
        return ""

    latest = candles[-1]
    earliest = candles[0]

    if earliest.open:
        price_change = (latest.close - earliest.open) / earliest.open * 100
    else:
        price_change = 0.0
    trend = "uptrend" if price_change > 0 else "downtrend"

    period_high = max(c.high for c in candles)
    period_low = min(c.low for c in candles)
    if period_high > period_low:
        price_position = (latest.close - period_low) / (period_high - period_low) * 100
    else:
        price_position = 50.0

    volume_trend = classify_volume_trend(candles)

    return (
        f"6h {trend} ({format_signed(price_change)}%). "
        f"Price at {price_position:.0f}% of range. "
        f"Volume {volume_trend}."
    )
