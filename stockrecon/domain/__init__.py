"""Domain layer - response models and error types."""

from .errors import ProviderError, RequiredFetchError, StockReconError, TickerNotFoundError
from .models import AssetType, StockDetailResponse

__all__ = [
    "AssetType",
    "StockDetailResponse",
    "StockReconError",
    "TickerNotFoundError",
    "RequiredFetchError",
    "ProviderError",
]
