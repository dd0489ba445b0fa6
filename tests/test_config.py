import pytest

from stockrecon.config import FMP_BASE_URL, Config


def test_from_env_requires_api_key(monkeypatch):
    monkeypatch.delenv("FMP_API_KEY", raising=False)
    with pytest.raises(ValueError):
        Config.from_env()


def test_from_env_defaults(monkeypatch):
    for name in ("FMP_BASE_URL", "STOCK_CACHE_TTL", "FETCH_TIMEOUT", "WEB_API_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("FMP_API_KEY", "abc123")

    config = Config.from_env()

    assert config.fmp_api_key == "abc123"
    assert config.fmp_base_url == FMP_BASE_URL
    assert config.stock_cache_ttl == 86400
    assert config.fetch_timeout == 20.0
    assert config.web_api_token is None


def test_from_env_overrides(monkeypatch):
    monkeypatch.setenv("FMP_API_KEY", "abc123")
    monkeypatch.setenv("FMP_BASE_URL", "https://example.test/stable/")
    monkeypatch.setenv("STOCK_CACHE_TTL", "600")
    monkeypatch.setenv("FETCH_TIMEOUT", "2.5")
    monkeypatch.setenv("WEB_API_TOKEN", " secret ")

    config = Config.from_env()

    assert config.fmp_base_url == "https://example.test/stable"
    assert config.stock_cache_ttl == 600
    assert config.fetch_timeout == 2.5
    assert config.web_api_token == "secret"
