"""Main entry point for the stock fundamentals API."""

import logging
import sys

import uvicorn

from .config import Config
from .http_client import configure_http
from .providers.fmp import FMPRepository
from .services.fetcher import StockFetcher
from .services.response_cache import ResponseCache
from .services.stock_service import StockService
from .storage.stock_cache import SQLiteStockCache
from .web_api import configure_service, web_api

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def build_service(config: Config) -> StockService:
    """Wire repository, fetcher and cache into a StockService."""
    configure_http(config.max_concurrent_requests)

    repository = FMPRepository(
        api_key=config.fmp_api_key,
        base_url=config.fmp_base_url,
        rpm=config.fmp_rpm,
        rps=config.fmp_rps,
        cache_ttl=config.provider_cache_ttl,
        timeout=config.http_timeout,
        retries=config.max_retries,
    )
    store = SQLiteStockCache(config.stock_cache_db_path)
    cache = ResponseCache(store, ttl_seconds=config.stock_cache_ttl, provider=repository.name)
    fetcher = StockFetcher(repository, fetch_timeout=config.fetch_timeout)
    return StockService(fetcher, cache=cache)


def run() -> None:
    """Synchronous entry point for running the API server."""
    try:
        config = Config.from_env()
    except ValueError as exc:
        logger.error("Configuration error: %s", exc)
        sys.exit(1)

    configure_service(build_service(config), api_token=config.web_api_token)

    logger.info(
        "Configuration: provider=fmp, stock_cache_ttl=%d, fetch_timeout=%.1f, max_concurrent_requests=%d, auth=%s",
        config.stock_cache_ttl,
        config.fetch_timeout,
        config.max_concurrent_requests,
        "on" if config.web_api_token else "off",
    )
    logger.info("Starting web API server on %s:%d", config.api_host, config.api_port)

    try:
        uvicorn.run(web_api, host=config.api_host, port=config.api_port, log_level="warning")
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    run()
