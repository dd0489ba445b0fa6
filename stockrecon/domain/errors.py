"""Error taxonomy for the stock detail pipeline."""

from typing import Optional


class StockReconError(Exception):
    """Base class for all pipeline errors."""


class TickerNotFoundError(StockReconError):
    """The requested ticker does not exist at the provider."""

    def __init__(self, ticker: str):
        self.ticker = ticker
        super().__init__(f"ticker not found: {ticker}")


class RequiredFetchError(StockReconError):
    """A required fetch failed; the whole request fails with it."""

    def __init__(self, ticker: str, operation: str, cause: Optional[BaseException] = None):
        self.ticker = ticker
        self.operation = operation
        self.cause = cause
        message = f"fetching {operation} for {ticker}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ProviderError(StockReconError):
    """Transport, HTTP or payload failure inside a data provider."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
