"""Exceptions for crypto price feed operations."""


class PriceFeedError(Exception):
    """Base exception for price feed errors."""

    pass


class PriceFeedTimeoutError(PriceFeedError):
    """Price feed did not answer within the configured timeout."""

    pass


class PriceFeedAPIError(PriceFeedError):
    """Price feed request failed."""

    def __init__(self, message: str, status_code: int = None, response_data: dict = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data
