"""Cron-джоба discovery: свежие токены Jupiter/DexScreener + дозаполнение анализа.

Фаза 1 превращает ленты источников во внутренний батч и прогоняет его через
шлюз (без HTTP и без повторной аутентификации). Фаза 2 берёт несколько
непроанализированных канонических записей и заполняет рейтинг через скорер;
строка меняется, только пока analyzed = false.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

from loguru import logger
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config.settings import DiscoverySettings, get_settings
from trustfeed.models import TokenSource
from trustfeed.repositories import list_unanalyzed_events, mark_event_analyzed
from trustfeed.services.providers.dexscreener import DexScreenerClient
from trustfeed.services.providers.jupiter import JupiterClient
from trustfeed.services.providers.scorer import ReputationScorer
from .gateway import IngestionGateway
from .outcomes import IngestReport
from .schemas import BatchToken

MIN_MINT_LENGTH = 32
MAX_MINT_LENGTH = 44


class DiscoveryJob:
    def __init__(
        self,
        gateway: IngestionGateway,
        session_maker: async_sessionmaker[AsyncSession],
        scorer: ReputationScorer,
        jupiter: JupiterClient,
        dexscreener: DexScreenerClient,
        settings: DiscoverySettings | None = None,
        scorer_timeout: float = 10.0,
    ) -> None:
        cfg = settings or get_settings().discovery
        self._gateway = gateway
        self._session_maker = session_maker
        self._scorer = scorer
        self._jupiter = jupiter
        self._dexscreener = dexscreener
        self._recent_limit = cfg.recent_limit
        self._enrich_limit = cfg.enrich_limit
        self._scorer_timeout = scorer_timeout

    async def run(self) -> dict[str, Any]:
        report = await self.ingest_new_tokens()
        enriched = await self.enrich_unanalyzed()
        return {
            "ingested": report.ingested,
            "total": report.total,
            "enriched": enriched,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def collect_tokens(self) -> list[BatchToken]:
        """Jupiter первым, DexScreener добавляет только новые mint'ы."""

        recent, profiles = await asyncio.gather(
            self._jupiter.fetch_recent_tokens(self._recent_limit),
            self._dexscreener.fetch_latest_profiles(self._recent_limit),
        )
        tokens: dict[str, BatchToken] = {}
        candidates = [
            (item.mint, item.name, item.symbol, item.image_url, TokenSource.JUPITER)
            for item in recent
        ] + [
            (item.mint, None, None, item.icon, TokenSource.DEXSCREENER)
            for item in profiles
        ]
        for mint, name, symbol, image_url, source in candidates:
            if mint in tokens or not MIN_MINT_LENGTH <= len(mint) <= MAX_MINT_LENGTH:
                continue
            try:
                tokens[mint] = BatchToken(
                    mint=mint,
                    name=name,
                    symbol=symbol,
                    image_url=image_url,
                    source=source.value,
                )
            except ValidationError as exc:
                logger.debug("Discovery: пропускаем {mint}: {error}", mint=mint, error=exc)
        return list(tokens.values())

    async def ingest_new_tokens(self) -> IngestReport:
        tokens = await self.collect_tokens()
        if not tokens:
            logger.info("Discovery: источники не вернули новых токенов")
            return IngestReport()
        return await self._gateway.ingest_batch(tokens)

    async def enrich_unanalyzed(self) -> int:
        """Возвращает число строк, которым проставлен анализ."""

        try:
            async with self._session_maker() as session:
                pending = [event.mint for event in await list_unanalyzed_events(session, self._enrich_limit)]
        except SQLAlchemyError as exc:
            logger.error("Discovery: не удалось выбрать непроанализированные токены: {error}", error=exc)
            return 0

        enriched = 0
        for mint in pending:
            try:
                score = await asyncio.wait_for(self._scorer.analyze(mint), timeout=self._scorer_timeout)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Discovery: скорер не ответил для {mint}: {error}", mint=mint, error=exc)
                continue
            if score is None:
                continue
            try:
                async with self._session_maker() as session:
                    if await mark_event_analyzed(session, mint, score):
                        enriched += 1
            except SQLAlchemyError as exc:
                logger.error("Discovery: не удалось сохранить анализ {mint}: {error}", mint=mint, error=exc)
        logger.info("Discovery: проанализировано {enriched}/{total}", enriched=enriched, total=len(pending))
        return enriched


__all__ = ["DiscoveryJob"]
