"""Tests for the health check and pass-through proxy endpoints."""

from unittest.mock import patch

import httpx
import pytest
import respx
from httpx import ASGITransport, AsyncClient

from arcaneledger.main import app

SPELLBOOK = "https://backend.commanderspellbook.com/variants/"
PRICELIST = "https://api.cardkingdom.com/api/pricelist"


@pytest.fixture
async def client():
    """Async test client bound to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestHealthEndpoint:
    async def test_health_returns_healthy(self, client: AsyncClient) -> None:
        """Liveness probe returns healthy without calling upstream."""
        with patch("arcaneledger.api.health.settings") as mock_settings:
            mock_settings.is_configured = False
            response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "store_configured": False}


class TestSpellbookProxy:
    """Tests for the combo database proxy."""

    @respx.mock
    async def test_forwards_query_and_relays_body(self, client: AsyncClient) -> None:
        route = respx.get(SPELLBOOK).mock(
            return_value=httpx.Response(200, json={"results": [], "next": None})
        )

        response = await client.get("/api/spellbook", params={"q": 'card="Sol Ring"'})

        assert response.status_code == 200
        assert response.json() == {"results": [], "next": None}
        assert response.headers["access-control-allow-origin"] == "*"
        assert route.calls.last.request.url.params["q"] == 'card="Sol Ring"'

    @respx.mock
    async def test_relays_upstream_status(self, client: AsyncClient) -> None:
        respx.get(SPELLBOOK).mock(return_value=httpx.Response(429, json={"detail": "slow down"}))

        response = await client.get("/api/spellbook")

        assert response.status_code == 429
        assert response.json() == {"detail": "slow down"}

    @respx.mock
    async def test_network_failure(self, client: AsyncClient) -> None:
        respx.get(SPELLBOOK).mock(side_effect=httpx.ConnectError("connection refused"))

        response = await client.get("/api/spellbook")

        assert response.status_code == 500
        assert response.json() == {"error": "connection refused"}


class TestPricelistProxy:
    """Tests for the price list proxy."""

    @respx.mock
    async def test_success_is_cacheable(self, client: AsyncClient) -> None:
        respx.get(PRICELIST).mock(return_value=httpx.Response(200, json={"data": []}))

        response = await client.get("/api/ck-pricelist")

        assert response.status_code == 200
        assert response.json() == {"data": []}
        assert response.headers["cache-control"] == "s-maxage=3600, stale-while-revalidate"
        assert response.headers["access-control-allow-origin"] == "*"

    @respx.mock
    async def test_upstream_error(self, client: AsyncClient) -> None:
        respx.get(PRICELIST).mock(return_value=httpx.Response(503))

        response = await client.get("/api/ck-pricelist")

        assert response.status_code == 503
        assert response.json() == {"error": "Card Kingdom API returned 503"}
