from fastapi.testclient import TestClient

from conftest import FakeRepository
from stockrecon.domain.errors import ProviderError
from stockrecon.services import StockFetcher, StockService
from stockrecon.web_api import configure_service, web_api


class TestStockDetailAPI:

    def setup_method(self):
        self.repo = FakeRepository()
        self.service = StockService(StockFetcher(self.repo, fetch_timeout=1.0))
        configure_service(self.service)
        self.client = TestClient(web_api)

    def teardown_method(self):
        configure_service(None)

    def test_stock_detail(self):
        response = self.client.get("/api/stock/acme")
        assert response.status_code == 200
        payload = response.json()
        assert payload["asset_type"] == "stock"
        assert payload["company"]["ticker"] == "ACME"
        assert payload["scores"]["piotroski"]["score"] == 6
        assert payload["scores"]["altman_z"]["zone"] == "safe"
        assert payload["signals"][0]["type"] == "bullish"
        assert payload["meta"]["degraded"] == []

    def test_unknown_ticker_is_404(self):
        self.repo.overrides = {"get_company": None}

        response = self.client.get("/api/stock/NOPE")
        assert response.status_code == 404
        assert response.json()["detail"] == "ticker not found: NOPE"

    def test_required_failure_is_502(self):
        self.repo.failures = {"get_quote": ProviderError("upstream down", status_code=503)}

        response = self.client.get("/api/stock/ACME")
        assert response.status_code == 502
        assert "fetching quote for ACME" in response.json()["detail"]

    def test_optional_failure_still_200(self):
        self.repo.failures = {"get_holdings": ProviderError("13F feed down")}

        response = self.client.get("/api/stock/ACME")
        assert response.status_code == 200
        assert response.json()["holdings"] is None
        assert response.json()["meta"]["degraded"] == ["holdings"]

    def test_invalid_ticker_is_400(self):
        response = self.client.get("/api/stock/NOT_A_TICKER")
        assert response.status_code == 400
        assert "get_company" not in self.repo.calls

    def test_api_key_required_when_configured(self):
        configure_service(self.service, api_token="secret")

        assert self.client.get("/api/stock/ACME").status_code == 401
        assert self.client.get("/api/stock/ACME", headers={"X-API-Key": "wrong"}).status_code == 401
        assert self.client.get("/api/stock/ACME", headers={"X-API-Key": "secret"}).status_code == 200

    def test_search(self):
        response = self.client.get("/api/search", params={"q": "acme", "limit": 5})
        assert response.status_code == 200
        assert response.json() == [{"ticker": "ACME", "name": "Acme Corp", "exchange": "", "sector": ""}]

    def test_search_failure_is_502(self):
        self.repo.failures = {"search": ProviderError("search down")}

        assert self.client.get("/api/search", params={"q": "acme"}).status_code == 502

    def test_api_key_comes_from_configuration_not_environment(self, monkeypatch):
        monkeypatch.setenv("WEB_API_TOKEN", "secret")

        assert self.client.get("/api/stock/ACME").status_code == 200

    def test_healthz_is_public(self):
        configure_service(self.service, api_token="secret")

        response = self.client.get("/healthz")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service_configured": True}


def test_unconfigured_service_is_503():
    configure_service(None)
    client = TestClient(web_api)

    assert client.get("/api/stock/ACME").status_code == 503
