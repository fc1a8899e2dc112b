"""Crypto market-data client for live price enrichment."""

import logging
from typing import Any, Dict, List, Optional

import requests

from marketlens.config import Settings, get_settings
from marketlens.pricing.exceptions import (
    PriceFeedAPIError,
    PriceFeedError,
    PriceFeedTimeoutError,
)
from marketlens.pricing.models import CryptoPriceData, CryptoTechnicalData, OHLCCandle
from marketlens.pricing.technical import generate_technical_summary
from marketlens.utils.helpers import coerce_float

logger = logging.getLogger(__name__)


class CryptoPriceClient:
    """Client for a Binance-compatible spot market-data API.

    Enrichment is best-effort: the public methods never raise, they log and
    return None (or an empty list) so the analysis proceeds without live data.
    Requests are not retried.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize price client.

        Args:
            settings: Application settings. If None, uses config singleton.
            session: HTTP session to use. If None, a new one is created.
        """
        self.settings = settings or get_settings()
        self.base_url = self.settings.price_feed_base_url.rstrip("/")
        self.timeout = self.settings.price_feed_timeout
        self.session = session or requests.Session()

    def trading_pair(self, symbol: str) -> str:
        """Build the exchange trading pair for a base symbol, e.g. BTC -> BTCUSDT."""
        normalized = "".join(symbol.upper().split())
        return f"{normalized}{self.settings.price_feed_quote_asset}"

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        """Perform a GET request and decode the JSON body.

        Raises:
            PriceFeedTimeoutError: If the request timed out
            PriceFeedAPIError: If the request failed or returned non-2xx
        """
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise PriceFeedTimeoutError(f"Timed out after {self.timeout}s: {url}") from e
        except requests.exceptions.RequestException as e:
            raise PriceFeedAPIError(f"Request failed: {str(e)}") from e

        if not response.ok:
            raise PriceFeedAPIError(
                f"Price feed returned {response.status_code}",
                status_code=response.status_code,
                response_data={"body": response.text[:200]},
            )

        try:
            return response.json()
        except ValueError as e:
            raise PriceFeedAPIError(f"Invalid JSON from price feed: {str(e)}") from e

    def get_ticker(self, symbol: str) -> Optional[CryptoPriceData]:
        """Fetch 24h ticker statistics.

        Args:
            symbol: Base asset symbol (e.g. "BTC")

        Returns:
            Ticker statistics, or None if the feed is unavailable
        """
        pair = self.trading_pair(symbol)
        try:
            data = self._get("/api/v3/ticker/24hr", {"symbol": pair})
        except PriceFeedError as e:
            logger.error(f"Error fetching price for {symbol}: {e}")
            return None

        if not isinstance(data, dict):
            logger.error(f"Unexpected ticker payload for {symbol}: {type(data).__name__}")
            return None

        def number(key: str) -> float:
            return coerce_float(data.get(key)) or 0.0

        return CryptoPriceData(
            symbol=pair,
            current_price=number("lastPrice"),
            price_change_24h=number("priceChange"),
            price_change_percent_24h=number("priceChangePercent"),
            high_24h=number("highPrice"),
            low_24h=number("lowPrice"),
            volume_24h=number("volume"),
        )

    def get_candles(self, symbol: str) -> List[OHLCCandle]:
        """Fetch recent OHLC candles in chronological order.

        Args:
            symbol: Base asset symbol (e.g. "BTC")

        Returns:
            Candles, or an empty list if the feed is unavailable
        """
        params = {
            "symbol": self.trading_pair(symbol),
            "interval": self.settings.candle_interval,
            "limit": self.settings.candle_limit,
        }
        try:
            data = self._get("/api/v3/klines", params)
        except PriceFeedError as e:
            logger.error(f"Error fetching OHLC for {symbol}: {e}")
            return []

        if not isinstance(data, list):
            logger.error(f"Unexpected klines payload for {symbol}: {type(data).__name__}")
            return []

        candles = []
        for row in data:
            if not isinstance(row, (list, tuple)) or len(row) < 6:
                continue
            candles.append(
                OHLCCandle(
                    timestamp=int(coerce_float(row[0]) or 0),
                    open=coerce_float(row[1]) or 0.0,
                    high=coerce_float(row[2]) or 0.0,
                    low=coerce_float(row[3]) or 0.0,
                    close=coerce_float(row[4]) or 0.0,
                    volume=coerce_float(row[5]) or 0.0,
                )
            )
        return candles

    def get_technical_data(self, symbol: str) -> Optional[CryptoTechnicalData]:
        """Fetch ticker and candles and build the technical summary.

        Args:
            symbol: Base asset symbol (e.g. "BTC")

        Returns:
            Combined data, or None when ticker stats are unavailable
        """
        price_data = self.get_ticker(symbol)
        if price_data is None:
            return None

        return build_technical_data(price_data, self.get_candles(symbol))

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()


def build_technical_data(
    price_data: CryptoPriceData, candles: List[OHLCCandle]
) -> CryptoTechnicalData:
    """Combine ticker stats with candles and their technical summary."""
    return CryptoTechnicalData(
        **price_data.model_dump(),
        candles=candles,
        technical_summary=generate_technical_summary(candles),
    )
