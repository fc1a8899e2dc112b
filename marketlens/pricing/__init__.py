"""Live crypto price enrichment for market analysis prompts."""

from marketlens.pricing.client import CryptoPriceClient
from marketlens.pricing.models import CryptoPriceData, CryptoTechnicalData, OHLCCandle
from marketlens.pricing.technical import generate_technical_summary

__all__ = [
    "CryptoPriceClient",
    "CryptoPriceData",
    "CryptoTechnicalData",
    "OHLCCandle",
    "generate_technical_summary",
]
