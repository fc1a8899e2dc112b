"""Exceptions for market analysis operations."""


class MarketLensError(Exception):
    """Base exception for MarketLens errors."""

    pass


class AnalysisValidationError(MarketLensError):
    """Model output violated the structured analysis contract."""

    pass


class GatewayError(MarketLensError):
    """LLM gateway request failed."""

    def __init__(self, message: str, model: str = None, status_code: int = None):
        super().__init__(message)
        self.model = model
        self.status_code = status_code


class NoModelAnalysesError(MarketLensError):
    """Every model attempt failed, so no judgment could be produced."""

    pass
