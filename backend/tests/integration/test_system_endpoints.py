"""
Integration tests for system endpoints and HTTP middleware.

Tests cover:
- Feature flags per tenant
- Health check
- Security headers, including no-referrer for token URLs
- Client id cookie issuance
"""

from sqlalchemy.exc import OperationalError

import portal.main as main_module


class TestFeatureFlags:
    async def test_generic_tenant(self, client, monkeypatch, portal_settings):
        monkeypatch.setattr(portal_settings, "TENANT", "generic")

        response = await client.get("/api/v1/system/features")

        assert response.status_code == 200
        body = response.json()
        assert body["tenant"] == "generic"
        assert body["features"]["gift_cards"] is False

    async def test_olga_tenant(self, client, monkeypatch, portal_settings):
        monkeypatch.setattr(portal_settings, "TENANT", "olga")

        response = await client.get("/api/v1/system/features")

        features = response.json()["features"]
        assert features["gift_cards"] is True
        assert features["package_catalog"] is True
        assert features["notifications"] is False


class TestHealth:
    async def test_healthy(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    async def test_unhealthy_returns_503(self, client, monkeypatch):
        class BrokenSession:
            async def __aenter__(self):
                raise OperationalError("SELECT 1", {}, Exception("connection refused"))

            async def __aexit__(self, *exc):
                return False

        monkeypatch.setattr(main_module, "AsyncSessionLocal", BrokenSession)

        response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"


class TestSecurityHeaders:
    async def test_api_responses_carry_headers(self, client):
        response = await client.get("/api/v1/system/features")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
        assert "no-store" in response.headers["Cache-Control"]

    async def test_token_urls_get_no_referrer(self, client, created_shoot):
        response = await client.get(
            f"/api/v1/shoots/{created_shoot['id']}/view",
            params={"token": created_shoot["access_token"]},
        )

        assert response.headers["Referrer-Policy"] == "no-referrer"

    async def test_failed_token_urls_get_no_referrer(self, client):
        response = await client.get("/api/v1/shoots/anything/view", params={"token": "x"})

        assert response.status_code == 401
        assert response.headers["Referrer-Policy"] == "no-referrer"


class TestClientIdCookie:
    async def test_first_request_sets_cookie(self, client):
        response = await client.get("/api/v1/auth/pin")

        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith("portal_client=")
        assert "HttpOnly" in set_cookie

    async def test_existing_cookie_is_kept(self, client):
        await client.get("/api/v1/auth/pin")
        response = await client.get("/api/v1/auth/pin")

        assert "set-cookie" not in response.headers

    async def test_malformed_cookie_is_replaced(self, client):
        client.cookies.set("portal_client", "short")

        response = await client.get("/api/v1/auth/pin")

        assert "portal_client=" in response.headers["set-cookie"]
        assert "short" not in response.headers["set-cookie"]

    async def test_cookie_set_on_error_response(self, client):
        response = await client.post("/api/v1/auth/pin", json={"pin": "0000"})

        assert response.status_code == 401
        assert "portal_client=" in response.headers["set-cookie"]


class TestErrorEnvelope:
    async def test_api_error_echoes_request_id(self, client):
        response = await client.get("/api/v1/shoots", headers={"X-Request-ID": "req-123"})

        assert response.status_code == 401
        body = response.json()
        assert body["code"] == "AUTH_1001"
        assert body["request_id"] == "req-123"
        assert "timestamp" in body

    async def test_unknown_route_uses_envelope(self, client):
        response = await client.get("/api/v1/nowhere")

        assert response.status_code == 404
        assert response.json()["code"] == "RES_4001"
