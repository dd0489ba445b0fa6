"""Configuration management for the stock fundamentals service."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

FMP_BASE_URL = "https://financialmodelingprep.com/stable"


@dataclass
class Config:
    """Application configuration loaded from environment variables."""

    # Financial Modeling Prep
    fmp_api_key: str
    fmp_base_url: str = FMP_BASE_URL
    fmp_rpm: int = 300  # Starter plan limit
    fmp_rps: int = 10

    # Cache TTLs (seconds)
    provider_cache_ttl: int = 300  # Raw provider responses: 5 minutes
    stock_cache_ttl: int = 86400  # Assembled stock detail: 24 hours
    stock_cache_db_path: str = "stock_cache.db"

    # Fetch orchestration
    fetch_timeout: float = 20.0  # Per-fetch deadline

    # Network settings
    http_timeout: int = 30
    max_concurrent_requests: int = 10
    max_retries: int = 3

    # HTTP API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    web_api_token: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        fmp_api_key = os.getenv("FMP_API_KEY", "").strip()
        if not fmp_api_key:
            raise ValueError("FMP_API_KEY environment variable is required")

        return cls(
            fmp_api_key=fmp_api_key,
            fmp_base_url=os.getenv("FMP_BASE_URL", FMP_BASE_URL).strip().rstrip("/") or FMP_BASE_URL,
            fmp_rpm=int(os.getenv("FMP_RPM", "300")),
            fmp_rps=int(os.getenv("FMP_RPS", "10")),
            provider_cache_ttl=int(os.getenv("PROVIDER_CACHE_TTL", "300")),
            stock_cache_ttl=int(os.getenv("STOCK_CACHE_TTL", "86400")),
            stock_cache_db_path=os.getenv("STOCK_CACHE_DB_PATH", "stock_cache.db"),
            fetch_timeout=float(os.getenv("FETCH_TIMEOUT", "20")),
            http_timeout=int(os.getenv("HTTP_TIMEOUT", "30")),
            max_concurrent_requests=int(os.getenv("MAX_CONCURRENT_REQUESTS", "10")),
            max_retries=int(os.getenv("MAX_RETRIES", "3")),
            api_host=os.getenv("API_HOST", "0.0.0.0"),
            api_port=int(os.getenv("API_PORT", "8000")),
            web_api_token=os.getenv("WEB_API_TOKEN", "").strip() or None,
        )
