"""Shared fixtures: temp sqlite database, fake upstream providers."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest
from sqlalchemy import func
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from config.settings import IngestSettings, WatchlistSettings
from trustfeed import models  # noqa: F401
from trustfeed.errors import UpstreamSoftFailure
from trustfeed.services.ingest.enrichment import MetadataEnricher
from trustfeed.services.ingest.gateway import IngestionGateway
from trustfeed.services.providers.helius import TokenMetadata
from trustfeed.services.providers.scorer import ScoreResult
from trustfeed.services.watch.scanner import WatchlistScanner

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
WALLET = "WaLLet".ljust(40, "1")
OTHER_WALLET = "OtherWaLLet".ljust(40, "2")


def make_mint(index: int) -> str:
    return f"Tok{index:02d}".ljust(40, "1")


class FakeMetadataProvider:
    """Metadata by mint; selected mints fail or hang."""

    def __init__(self, known=None, failing=(), slow=()):
        self.known = dict(known or {})
        self.failing = set(failing)
        self.slow = set(slow)
        self.calls: list[str] = []

    async def get_metadata(self, mint: str) -> TokenMetadata | None:
        self.calls.append(mint)
        if mint in self.failing:
            raise UpstreamSoftFailure(f"provider down for {mint}")
        if mint in self.slow:
            await asyncio.sleep(5)
        return self.known.get(mint)


class FakeScorer:
    """Returns preset scores and records the order of calls."""

    def __init__(self, results=None, failing=()):
        self.results = dict(results or {})
        self.failing = set(failing)
        self.calls: list[str] = []

    async def analyze(self, mint: str) -> ScoreResult | None:
        self.calls.append(mint)
        if mint in self.failing:
            raise UpstreamSoftFailure(f"scorer down for {mint}")
        return self.results.get(mint)


@pytest.fixture
async def session_maker(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def provider():
    return FakeMetadataProvider()


@pytest.fixture
def scorer():
    return FakeScorer()


@pytest.fixture
def ingest_settings():
    return IngestSettings()


@pytest.fixture
def gateway(session_maker, provider, ingest_settings):
    enricher = MetadataEnricher(provider, timeout=0.2, concurrency=2)
    return IngestionGateway(session_maker, enricher, ingest_settings)


@pytest.fixture
def scanner(scorer):
    return WatchlistScanner(scorer, settings=WatchlistSettings(), scorer_timeout=0.2, clock=lambda: FIXED_NOW)


async def count_rows(session_maker, model) -> int:
    async with session_maker() as session:
        return int((await session.exec(select(func.count()).select_from(model))).one())
