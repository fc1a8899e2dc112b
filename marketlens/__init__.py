"""MarketLens - multi-model AI consensus analysis for prediction markets."""

__version__ = "0.1.0"
