"""Web API - FastAPI application exposing stock detail and search."""

import logging
import re
from typing import List, Optional

from fastapi import FastAPI, Header, HTTPException, Query, status

from .domain.errors import RequiredFetchError, TickerNotFoundError
from .domain.models import SearchResult, StockDetailResponse
from .services.stock_service import StockService

logger = logging.getLogger(__name__)

TICKER_PATTERN = re.compile(r"[A-Z0-9.\-]{1,12}")

# Service and API token are injected at startup
_service: Optional[StockService] = None
_api_token: Optional[str] = None


def configure_service(service: Optional[StockService], api_token: Optional[str] = None) -> None:
    """Configure API with the stock service it serves and, optionally, the X-API-Key it requires."""
    global _service, _api_token
    _service = service
    _api_token = api_token or None


def _get_service() -> StockService:
    if _service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not configured",
        )
    return _service


def _require_api_auth(x_api_key: Optional[str]) -> None:
    """Enforce API key auth when a token was configured."""
    if _api_token is None:
        return
    if not x_api_key or x_api_key != _api_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )


web_api = FastAPI(title="Stock Fundamentals API")


@web_api.get("/healthz")
async def healthz():
    """Unauthenticated health probe endpoint for external pingers."""
    return {"status": "ok", "service_configured": _service is not None}


@web_api.get("/api/stock/{ticker}", response_model=StockDetailResponse)
async def api_stock_detail(
    ticker: str,
    x_api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
):
    """Full stock detail: company, quote, scores, signals and enrichment blocks."""
    _require_api_auth(x_api_key)
    service = _get_service()

    ticker = ticker.strip().upper()
    if not TICKER_PATTERN.fullmatch(ticker):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid ticker. Example: AAPL, BRK.B, VOO",
        )

    try:
        return await service.get_stock_detail(ticker)
    except TickerNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except RequiredFetchError as exc:
        logger.error("Stock detail failed for %s: %s", ticker, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc


@web_api.get("/api/search", response_model=List[SearchResult])
async def api_search(
    q: str = Query(default=""),
    limit: int = Query(default=10, ge=1, le=50),
    x_api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
):
    """Ticker/company name search."""
    _require_api_auth(x_api_key)
    service = _get_service()

    try:
        return await service.search(q, limit)
    except RequiredFetchError as exc:
        logger.error("Search failed for %r: %s", q, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
