"""HTTP API tests through the ASGI app with overridden dependencies."""

import pytest
from httpx import ASGITransport, AsyncClient

from config.settings import IngestSettings
from trustfeed.middlewares import get_db_session
from trustfeed.models import Notification, TokenAnalysis, TokenEvent, WatchlistEntry
from trustfeed.services.providers.scorer import ScoreResult
from trustfeed.web.app import app, get_discovery, get_gateway, get_scanner

from .conftest import WALLET, count_rows, make_mint


class FakeDiscovery:
    def __init__(self):
        self.runs = 0

    async def run(self):
        self.runs += 1
        return {"ingested": 2, "total": 3, "enriched": 1, "timestamp": "2025-06-01T12:00:00+00:00"}


@pytest.fixture
def ingest_settings():
    return IngestSettings(webhook_secret="hook-secret", cron_secret="cron-secret")


@pytest.fixture
def discovery():
    return FakeDiscovery()


@pytest.fixture
async def client(session_maker, gateway, scanner, discovery):
    async def _session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db_session] = _session
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_scanner] = lambda: scanner
    app.dependency_overrides[get_discovery] = lambda: discovery
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
    app.dependency_overrides.clear()


def _webhook(*mints):
    return [{"signature": "sig", "tokenTransfers": [{"mint": mint} for mint in mints]}]


class TestIngestEndpoint:
    """POST /api/ingest/new-tokens"""

    async def test_unauthorized_writes_nothing(self, client, session_maker):
        """Wrong secret is 401 and the store stays empty"""
        response = await client.post("/api/ingest/new-tokens", json=_webhook(make_mint(1)), headers={"Authorization": "bad"})

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}
        assert await count_rows(session_maker, TokenEvent) == 0

    async def test_webhook_ingest(self, client):
        """Valid secret ingests distinct mints"""
        headers = {"Authorization": "hook-secret"}
        response = await client.post("/api/ingest/new-tokens", json=_webhook(make_mint(1), make_mint(2), make_mint(1)), headers=headers)

        assert response.status_code == 200
        assert response.json() == {"ingested": 2, "total": 2}

    async def test_batch_ingest(self, client):
        """Internal batch with Bearer cron secret"""
        body = {"tokens": [{"mint": make_mint(1), "name": "A", "symbol": "A", "source": "jupiter"}]}

        response = await client.post("/api/ingest/new-tokens", json=body, headers={"Authorization": "Bearer cron-secret"})

        assert response.status_code == 200
        assert response.json() == {"ingested": 1, "total": 1}

    async def test_invalid_batch(self, client, session_maker):
        """Schema failure is 400 with details"""
        body = {"tokens": [{"mint": "bad", "source": "jupiter"}]}

        response = await client.post("/api/ingest/new-tokens", json=body, headers={"Authorization": "Bearer cron-secret"})

        assert response.status_code == 400
        payload = response.json()
        assert payload["error"] == "Invalid request"
        assert payload["details"]
        assert await count_rows(session_maker, TokenEvent) == 0

    async def test_invalid_json(self, client):
        """Unparseable body is 400"""
        response = await client.post(
            "/api/ingest/new-tokens",
            content=b"{not json",
            headers={"Authorization": "Bearer cron-secret", "Content-Type": "application/json"},
        )

        assert response.status_code == 400


class TestNotificationsEndpoint:
    """GET/PATCH /api/notifications"""

    async def test_wallet_validation(self, client):
        """Short wallet is 400"""
        response = await client.get("/api/notifications", params={"wallet": "short"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid parameters"

    async def test_missing_wallet(self, client):
        """Wallet is required"""
        response = await client.get("/api/notifications")

        assert response.status_code == 400

    async def test_poll_returns_new_alert(self, client, scorer, session_maker):
        """Feed includes the alert created by this poll"""
        mint = make_mint(1)
        async with session_maker() as session:
            session.add(WatchlistEntry(user_wallet=WALLET, mint=mint))
            session.add(TokenAnalysis(mint=mint, name="Alpha", trust_rating=70.0, risk_flags=[]))
            await session.commit()
        scorer.results[mint] = ScoreResult(mint=mint, rating=50.0)

        response = await client.get("/api/notifications", params={"wallet": WALLET})

        assert response.status_code == 200
        payload = response.json()
        assert payload["unreadCount"] == 1
        assert payload["notifications"][0]["message"] == "Alpha trust rating changed from 70 to 50"

    async def test_mark_all_read(self, client, session_maker):
        """PATCH with markAllRead clears unread count"""
        async with session_maker() as session:
            session.add(Notification(user_wallet=WALLET, mint=make_mint(1), kind="score_change", message="m"))
            await session.commit()

        response = await client.patch("/api/notifications", json={"wallet": WALLET, "markAllRead": True})
        feed = await client.get("/api/notifications", params={"wallet": WALLET})

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert feed.json()["unreadCount"] == 0

    async def test_mark_selected_read(self, client, session_maker):
        """PATCH with ids marks only those"""
        async with session_maker() as session:
            first = Notification(user_wallet=WALLET, mint=make_mint(1), kind="score_change", message="a")
            second = Notification(user_wallet=WALLET, mint=make_mint(2), kind="score_change", message="b")
            session.add_all([first, second])
            await session.commit()

        await client.patch("/api/notifications", json={"wallet": WALLET, "notificationIds": [first.id]})
        feed = await client.get("/api/notifications", params={"wallet": WALLET})

        assert feed.json()["unreadCount"] == 1

    async def test_patch_rejects_bad_ids(self, client):
        """Non-uuid ids fail validation"""
        response = await client.patch("/api/notifications", json={"wallet": WALLET, "notificationIds": ["nope"]})

        assert response.status_code == 400


class TestCronEndpoint:
    """GET /api/cron/refresh-tokens"""

    async def test_requires_bearer(self, client, discovery):
        """Missing secret is 401 and the job does not run"""
        response = await client.get("/api/cron/refresh-tokens")

        assert response.status_code == 401
        assert discovery.runs == 0

    async def test_runs_job(self, client, discovery):
        """Authorized call returns job summary"""
        response = await client.get("/api/cron/refresh-tokens", headers={"Authorization": "Bearer cron-secret"})

        assert response.status_code == 200
        assert response.json()["enriched"] == 1
        assert discovery.runs == 1


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class ExplodingScanner:
    async def poll(self, session, wallet):
        raise RuntimeError("boom")


class TestUnexpectedErrors:
    async def test_generic_500(self, client):
        """Internal detail never reaches the client"""
        app.dependency_overrides[get_scanner] = ExplodingScanner

        response = await client.get("/api/notifications", params={"wallet": WALLET})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
