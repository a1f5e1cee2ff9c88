"""Шлюз приёма новых токенов.

Принимает два вида payload'ов:
* массив enhanced-транзакций от Helius (вебхук);
* объект {"tokens": [...]} от внутренних cron/backfill вызовов.

Цепочка: аутентификация -> схема -> извлечение mint'ов -> источник ->
обогащение -> INSERT IF ABSENT. Ошибка одного субъекта не трогает соседей.
"""

from __future__ import annotations

from typing import Any, Sequence

from loguru import logger
from pydantic import TypeAdapter, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config.settings import IngestSettings, get_settings
from trustfeed.errors import PayloadValidationError, StoreWriteFailure, jsonable_errors
from trustfeed.models import TokenEvent
from trustfeed.repositories import insert_token_event_if_absent
from trustfeed.utils.security import verify_bearer_secret, verify_webhook_secret
from .enrichment import EnrichmentResult, MetadataEnricher
from .extractor import classify_batch_source, extract_mints
from .outcomes import IngestReport, OutcomeStatus, SubjectOutcome
from .schemas import BatchToken, IngestBatch, WebhookTransaction

_webhook_adapter = TypeAdapter(list[WebhookTransaction])


class IngestionGateway:
    """Маршрутизация, аутентификация и запись канонических TokenEvent."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        enricher: MetadataEnricher,
        settings: IngestSettings | None = None,
    ) -> None:
        cfg = settings or get_settings().ingest
        self._session_maker = session_maker
        self._enricher = enricher
        self._webhook_secret = cfg.webhook_secret
        self._batch_secret = cfg.cron_secret
        self._program_id = cfg.graduation_program_id
        self._neutral_rating = cfg.neutral_trust_rating

    async def handle(self, body: Any, authorization: str | None) -> IngestReport:
        """Точка входа HTTP: массив -> вебхук, иначе внутренний батч."""

        if isinstance(body, list):
            verify_webhook_secret(authorization, self._webhook_secret)
            return await self.ingest_webhook(self._parse_webhook(body))

        self.authorize_internal(authorization)
        return await self.ingest_batch(self._parse_batch(body).tokens)

    def authorize_internal(self, authorization: str | None) -> None:
        """Bearer-секрет внутренних вызовов (батч, cron)."""

        verify_bearer_secret(authorization, self._batch_secret)

    async def ingest_webhook(self, transactions: Sequence[WebhookTransaction]) -> IngestReport:
        mints = sorted(extract_mints(transactions))
        if not mints:
            logger.debug("Вебхук без token transfers ({count} tx), пропускаем", count=len(transactions))
            return IngestReport()

        source = classify_batch_source(transactions, self._program_id)
        enrichment = await self._enricher.enrich_many(mints)
        report = IngestReport()
        for mint in mints:
            result = enrichment[mint]
            metadata = result.metadata
            event = self._build_event(
                mint,
                source=source.value,
                name=metadata.name if metadata else None,
                symbol=metadata.symbol if metadata else None,
                image_url=metadata.image if metadata else None,
                raw=metadata.raw if metadata else None,
            )
            report.outcomes.append(await self._persist(event, result))

        logger.info(
            "📥 Вебхук: {ingested}/{total} новых mint, источник {source}",
            ingested=report.ingested,
            total=report.total,
            source=source.value,
        )
        return report

    async def ingest_batch(self, tokens: Sequence[BatchToken]) -> IngestReport:
        """Внутренний батч: источник берём из payload как есть."""

        # Обогащаем только те, у кого нет ни имени, ни тикера
        enrichment = await self._enricher.enrich_many(
            token.mint for token in tokens if not token.name and not token.symbol
        )
        report = IngestReport()
        for token in tokens:
            name, symbol, image_url = token.name, token.symbol, token.image_url
            raw = None
            result = enrichment.get(token.mint)
            if result is not None and result.metadata is not None:
                name = result.metadata.name
                symbol = result.metadata.symbol
                image_url = result.metadata.image or image_url
                raw = result.metadata.raw
            event = self._build_event(
                token.mint,
                source=token.source,
                name=name,
                symbol=symbol,
                image_url=image_url,
                raw=raw,
            )
            report.outcomes.append(await self._persist(event, result))

        logger.info(
            "📦 Батч: {ingested}/{total} новых mint, дубликатов {dup}, ошибок {failed}",
            ingested=report.ingested,
            total=report.total,
            dup=report.count(OutcomeStatus.DUPLICATE),
            failed=report.count(OutcomeStatus.FAILED),
        )
        return report

    def _build_event(
        self,
        mint: str,
        *,
        source: str,
        name: str | None,
        symbol: str | None,
        image_url: str | None,
        raw: dict[str, Any] | None,
    ) -> TokenEvent:
        return TokenEvent(
            mint=mint,
            name=name,
            symbol=symbol,
            image_url=image_url,
            source=source,
            raw_metadata={"asset": raw} if raw else {},
            analyzed=False,
            trust_rating=self._neutral_rating,
            deployer_tier=None,
        )

    async def _persist(self, event: TokenEvent, enrichment: EnrichmentResult | None) -> SubjectOutcome:
        soft_failure = enrichment.error if enrichment is not None else None
        try:
            inserted = await self._write(event)
        except StoreWriteFailure as failure:
            logger.error("Не удалось записать {mint}: {error}", mint=failure.mint, error=failure.reason)
            return SubjectOutcome(
                mint=event.mint,
                status=OutcomeStatus.FAILED,
                source=event.source,
                soft_failure=soft_failure,
                error=failure.reason,
            )
        return SubjectOutcome(
            mint=event.mint,
            status=OutcomeStatus.INGESTED if inserted else OutcomeStatus.DUPLICATE,
            source=event.source,
            soft_failure=soft_failure,
        )

    async def _write(self, event: TokenEvent) -> bool:
        try:
            async with self._session_maker() as session:
                return await insert_token_event_if_absent(session, event)
        except SQLAlchemyError as exc:
            raise StoreWriteFailure(event.mint, str(exc)) from exc

    @staticmethod
    def _parse_webhook(body: list[Any]) -> list[WebhookTransaction]:
        try:
            return _webhook_adapter.validate_python(body)
        except ValidationError as exc:
            raise PayloadValidationError("Invalid webhook payload", jsonable_errors(exc.errors())) from exc

    @staticmethod
    def _parse_batch(body: Any) -> IngestBatch:
        try:
            return IngestBatch.model_validate(body)
        except ValidationError as exc:
            raise PayloadValidationError("Invalid request", jsonable_errors(exc.errors())) from exc


__all__ = ["IngestionGateway"]
