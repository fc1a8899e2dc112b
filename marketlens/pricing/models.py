"""Pydantic models for crypto price feed data structures."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OHLCCandle(BaseModel):
    """A single OHLC candle."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    timestamp: int
    open: float = 0.0
    high: float = 0.0
    low: float = 0.0
    close: float = 0.0
    volume: float = 0.0


class CryptoPriceData(BaseModel):
    """24h ticker statistics for a trading pair."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    symbol: str
    current_price: float = 0.0
    price_change_24h: float = 0.0
    price_change_percent_24h: float = 0.0
    high_24h: float = 0.0
    low_24h: float = 0.0
    volume_24h: float = 0.0


class CryptoTechnicalData(CryptoPriceData):
    """Ticker statistics plus recent candles and their technical summary."""

    candles: List[OHLCCandle] = Field(default_factory=list)
    technical_summary: str = ""
