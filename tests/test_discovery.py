"""Tests for the discovery cron job and the Jupiter recent-token cache."""

from aiocache import SimpleMemoryCache

from config.settings import DiscoverySettings
from trustfeed.models import TokenEvent
from trustfeed.repositories import get_token_event
from trustfeed.services.ingest.discovery import DiscoveryJob
from trustfeed.services.providers.dexscreener import TokenProfile
from trustfeed.services.providers.jupiter import RECENT_CACHE_KEY, JupiterClient, RecentToken
from trustfeed.services.providers.scorer import ScoreResult

from .conftest import count_rows, make_mint


class FakeJupiter:
    def __init__(self, tokens):
        self.tokens = tokens

    async def fetch_recent_tokens(self, limit=20):
        return self.tokens[:limit]


class FakeDexScreener:
    def __init__(self, profiles):
        self.profiles = profiles

    async def fetch_latest_profiles(self, limit=20):
        return self.profiles[:limit]


def _job(gateway, session_maker, scorer, recent=(), profiles=(), **settings):
    return DiscoveryJob(
        gateway,
        session_maker,
        scorer,
        FakeJupiter(list(recent)),
        FakeDexScreener(list(profiles)),
        DiscoverySettings(**settings),
        scorer_timeout=0.2,
    )


class TestCollectTokens:
    """Merging source feeds into one batch"""

    async def test_jupiter_wins_on_duplicates(self, gateway, session_maker, scorer):
        """DexScreener only adds mints Jupiter did not list"""
        shared = make_mint(1)
        job = _job(
            gateway,
            session_maker,
            scorer,
            recent=[RecentToken(shared, "Jup", "JUP", None)],
            profiles=[TokenProfile(shared, "https://dex/1.png"), TokenProfile(make_mint(2), None)],
        )

        tokens = await job.collect_tokens()

        assert [(t.mint, t.source) for t in tokens] == [(shared, "jupiter"), (make_mint(2), "dexscreener")]

    async def test_invalid_mints_dropped(self, gateway, session_maker, scorer):
        """Addresses outside 32-44 chars are skipped"""
        job = _job(gateway, session_maker, scorer, profiles=[TokenProfile("tiny", None), TokenProfile("x" * 50, None)])

        assert await job.collect_tokens() == []


class TestDiscoveryRun:
    """Ingest plus backfill of analysis"""

    async def test_run_ingests_and_enriches(self, gateway, session_maker, scorer):
        """New rows are written then scored"""
        first, second = make_mint(1), make_mint(2)
        scorer.results[first] = ScoreResult(mint=first, rating=64.0, deployer_tier="silver", name="Scored")
        job = _job(
            gateway,
            session_maker,
            scorer,
            recent=[RecentToken(first, None, None, None), RecentToken(second, "Two", "TWO", None)],
        )

        summary = await job.run()

        assert summary["ingested"] == 2
        assert summary["total"] == 2
        assert summary["enriched"] == 1
        assert "timestamp" in summary
        async with session_maker() as session:
            row = await get_token_event(session, first)
            untouched = await get_token_event(session, second)
        assert row.analyzed is True
        assert row.trust_rating == 64.0
        assert row.name == "Scored"
        assert untouched.analyzed is False

    async def test_rerun_is_idempotent(self, gateway, session_maker, scorer):
        """Second run inserts nothing and does not rescore analyzed rows"""
        mint = make_mint(1)
        scorer.results[mint] = ScoreResult(mint=mint, rating=64.0)
        job = _job(gateway, session_maker, scorer, recent=[RecentToken(mint, "One", "ONE", None)])

        await job.run()
        summary = await job.run()

        assert summary["ingested"] == 0
        assert summary["enriched"] == 0
        assert scorer.calls == [mint]
        assert await count_rows(session_maker, TokenEvent) == 1

    async def test_scorer_failure_skipped(self, gateway, session_maker, scorer):
        """Failed scoring leaves the row for the next run"""
        mint = make_mint(1)
        scorer.failing.add(mint)
        job = _job(gateway, session_maker, scorer, recent=[RecentToken(mint, "One", "ONE", None)])

        summary = await job.run()

        assert summary["enriched"] == 0
        async with session_maker() as session:
            assert (await get_token_event(session, mint)).analyzed is False

    async def test_enrich_limit(self, gateway, session_maker, scorer):
        """Only enrich_limit rows are scored per run"""
        mints = [make_mint(i) for i in range(4)]
        job = _job(
            gateway,
            session_maker,
            scorer,
            recent=[RecentToken(mint, f"T{i}", f"T{i}", None) for i, mint in enumerate(mints)],
            enrich_limit=2,
        )

        await job.run()

        assert len(scorer.calls) == 2


class TestJupiterCache:
    """Recent list is served from cache within TTL"""

    async def test_cached_list_used(self):
        """Pre-filled cache avoids the network"""
        cache = SimpleMemoryCache()
        await cache.set(
            RECENT_CACHE_KEY,
            [
                {"id": make_mint(1), "name": "One", "symbol": "ONE", "icon": "https://img/1.png"},
                {"address": make_mint(2), "logoURI": "https://img/2.png"},
                {"name": "no mint"},
            ],
        )
        client = JupiterClient(DiscoverySettings(), cache=cache)

        tokens = await client.fetch_recent_tokens(limit=5)

        assert [t.mint for t in tokens] == [make_mint(1), make_mint(2)]
        assert tokens[1].image_url == "https://img/2.png"
