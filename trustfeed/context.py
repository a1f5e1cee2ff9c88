"""Глобальные сервисы и зависимости TrustFeed."""

from __future__ import annotations

from datetime import timedelta

from config.settings import get_settings
from .middlewares import get_session_maker
from .services.ingest.discovery import DiscoveryJob
from .services.ingest.enrichment import MetadataEnricher
from .services.ingest.gateway import IngestionGateway
from .services.providers.dexscreener import DexScreenerClient
from .services.providers.helius import HeliusMetadataProvider
from .services.providers.jupiter import JupiterClient
from .services.providers.scorer import HttpReputationScorer
from .services.watch.notifier import NotificationEmitter
from .services.watch.scanner import WatchlistScanner
from .utils.cache import configure_cache

settings = get_settings()

configure_cache(settings.cache)
session_maker = get_session_maker()

metadata_provider = HeliusMetadataProvider(settings.helius)
scorer = HttpReputationScorer(settings.scorer)
enricher = MetadataEnricher(
    metadata_provider,
    timeout=settings.helius.request_timeout,
    concurrency=settings.ingest.enrich_concurrency,
)
gateway = IngestionGateway(session_maker, enricher, settings.ingest)
watchlist_scanner = WatchlistScanner(
    scorer,
    NotificationEmitter(timedelta(hours=settings.watchlist.cooldown_hours)),
    settings.watchlist,
    scorer_timeout=settings.scorer.request_timeout,
)
discovery_job = DiscoveryJob(
    gateway,
    session_maker,
    scorer,
    JupiterClient(settings.discovery),
    DexScreenerClient(settings.discovery),
    settings.discovery,
    scorer_timeout=settings.scorer.request_timeout,
)


async def close_clients() -> None:
    await metadata_provider.close()
    await scorer.close()


__all__ = [
    "close_clients",
    "discovery_job",
    "gateway",
    "metadata_provider",
    "scorer",
    "session_maker",
    "settings",
    "watchlist_scanner",
]
