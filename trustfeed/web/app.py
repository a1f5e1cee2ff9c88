"""FastAPI backend TrustFeed: приём новых токенов и центр уведомлений."""

from __future__ import annotations

from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import Depends, FastAPI, Header, Query, Request
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from trustfeed.context import (
    close_clients,
    discovery_job,
    gateway,
    settings,
    watchlist_scanner,
)
from trustfeed.errors import PayloadValidationError
from trustfeed.logging_config import setup_logging
from trustfeed.middlewares import get_db_session, init_db, register_error_handlers
from trustfeed.services.ingest.discovery import DiscoveryJob
from trustfeed.services.ingest.gateway import IngestionGateway
from trustfeed.services.watch.scanner import WatchlistScanner

class IngestResponse(BaseModel):
    ingested: int
    total: int | None = None


class MarkReadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    wallet: str = Field(..., min_length=32, max_length=44)
    notification_ids: list[UUID] | None = Field(None, alias="notificationIds")
    mark_all_read: bool | None = Field(None, alias="markAllRead")


class SuccessResponse(BaseModel):
    success: bool = True


def get_gateway() -> IngestionGateway:
    return gateway


def get_scanner() -> WatchlistScanner:
    return watchlist_scanner


def get_discovery() -> DiscoveryJob:
    return discovery_job


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(json=settings.logging.json_format, level=settings.logging.level)
    if settings.database.create_tables:
        await init_db()
    if settings.ingest.webhook_secret is None:
        logger.warning("INGEST__WEBHOOK_SECRET не задан, вебхук принимается без проверки")
    if settings.ingest.cron_secret is None:
        logger.warning("INGEST__CRON_SECRET не задан, внутренние батчи принимаются без проверки")
    logger.info("TrustFeed API стартует в окружении {env}", env=settings.environment)
    yield
    await close_clients()
    logger.info("TrustFeed API корректно остановлен")


app = FastAPI(title="TrustFeed API", lifespan=lifespan)
register_error_handlers(app)


# ============================================================================
# Приём новых токенов (вебхук Helius + внутренние батчи)
# ============================================================================

@app.post("/api/ingest/new-tokens", response_model=IngestResponse, response_model_exclude_none=True)
async def ingest_new_tokens(
    request: Request,
    authorization: str | None = Header(None),
    ingestion: IngestionGateway = Depends(get_gateway),
) -> dict:
    """Массив -> вебхук Helius, объект {"tokens": [...]} -> внутренний батч."""

    try:
        body = await request.json()
    except ValueError as exc:
        raise PayloadValidationError("Invalid JSON body") from exc
    report = await ingestion.handle(body, authorization)
    return report.as_response()


@app.get("/api/cron/refresh-tokens")
async def refresh_tokens(
    authorization: str | None = Header(None),
    ingestion: IngestionGateway = Depends(get_gateway),
    job: DiscoveryJob = Depends(get_discovery),
) -> dict:
    ingestion.authorize_internal(authorization)
    return await job.run()


# ============================================================================
# Центр уведомлений
# ============================================================================

@app.get("/api/notifications")
async def get_notifications(
    wallet: str = Query(..., min_length=32, max_length=44),
    session: AsyncSession = Depends(get_db_session),
    scanner: WatchlistScanner = Depends(get_scanner),
) -> dict:
    """Пересчитывает часть вотчлиста и отдаёт ленту вместе с новыми алертами."""

    feed = await scanner.poll(session, wallet)
    return feed.as_response()


@app.patch("/api/notifications", response_model=SuccessResponse)
async def mark_notifications(
    payload: MarkReadRequest,
    session: AsyncSession = Depends(get_db_session),
    scanner: WatchlistScanner = Depends(get_scanner),
) -> SuccessResponse:
    ids = [str(item) for item in payload.notification_ids] if payload.notification_ids else None
    updated = await scanner.mark_read(
        session,
        payload.wallet,
        ids,
        mark_all=bool(payload.mark_all_read),
    )
    logger.debug("Отмечено прочитанными {count} уведомлений {wallet}", count=updated, wallet=payload.wallet)
    return SuccessResponse()


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok", "service": "trustfeed"}
