"""Сканер вотчлиста: пересчёт ограниченного числа токенов за один опрос.

Запускается не по расписанию, а при каждом открытии центра уведомлений.
Опрос двухфазный: сначала scan_and_emit, затем read_feed, поэтому ответ
всегда содержит уведомления, созданные этим же вызовом.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Sequence

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import WatchlistSettings, get_settings
from trustfeed.models import Notification
from trustfeed.models.base import utcnow
from trustfeed.repositories import (
    count_unread,
    get_cached_analyses,
    list_notifications,
    list_watched_mints,
    mark_notifications_read,
)
from trustfeed.services.providers.scorer import ReputationScorer, ScoreResult
from .drift import detect_drift
from .notifier import NotificationEmitter


@dataclass(slots=True)
class ScanResult:
    checked: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    emitted: list[Notification] = field(default_factory=list)
    suppressed: int = 0


@dataclass(slots=True)
class NotificationFeed:
    notifications: list[Notification]
    unread_count: int

    def as_response(self) -> dict[str, Any]:
        return {
            "notifications": [item.as_dict() for item in self.notifications],
            "unreadCount": self.unread_count,
        }


class WatchlistScanner:
    def __init__(
        self,
        scorer: ReputationScorer,
        emitter: NotificationEmitter | None = None,
        settings: WatchlistSettings | None = None,
        *,
        scorer_timeout: float = 10.0,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        cfg = settings or get_settings().watchlist
        self._scorer = scorer
        self._emitter = emitter or NotificationEmitter(timedelta(hours=cfg.cooldown_hours))
        self._recheck_limit = cfg.recheck_limit
        self._threshold = cfg.score_change_threshold
        self._feed_limit = cfg.feed_limit
        self._scorer_timeout = scorer_timeout
        self._clock = clock

    async def poll(self, session: AsyncSession, wallet: str) -> NotificationFeed:
        """Сканирование + чтение ленты. Сбой записи не ломает чтение."""

        try:
            await self.scan_and_emit(session, wallet)
        except SQLAlchemyError as exc:
            logger.error("Сканер вотчлиста {wallet} упал на БД: {error}", wallet=wallet, error=exc)
            await session.rollback()
        return await self.read_feed(session, wallet)

    async def scan_and_emit(self, session: AsyncSession, wallet: str) -> ScanResult:
        result = ScanResult()
        watched = await list_watched_mints(session, wallet)
        if not watched:
            return result

        cached = await get_cached_analyses(session, watched)
        # Снапшоты отвязаны от сессии: rollback после сбоя записи не экспирит их
        for snapshot in cached.values():
            session.expunge(snapshot)
        # Лимит на число пересчётов за визит, остальные дождутся следующего опроса
        selected = watched[: self._recheck_limit]
        result.skipped.extend(watched[self._recheck_limit :])

        for mint in selected:
            snapshot = cached.get(mint)
            if snapshot is None:
                result.skipped.append(mint)
                continue
            fresh = await self._analyze(mint)
            result.checked.append(mint)
            if fresh is None:
                continue
            for candidate in detect_drift(snapshot, fresh, self._threshold):
                try:
                    notification = await self._emitter.emit(session, wallet, candidate, self._clock())
                except SQLAlchemyError as exc:
                    logger.error(
                        "Не удалось создать {kind} для {mint}: {error}",
                        kind=candidate.kind.value,
                        mint=mint,
                        error=exc,
                    )
                    await session.rollback()
                    continue
                if notification is None:
                    result.suppressed += 1
                else:
                    result.emitted.append(notification)

        logger.debug(
            "Вотчлист {wallet}: проверено {checked}, новых уведомлений {emitted}, подавлено {suppressed}",
            wallet=wallet,
            checked=len(result.checked),
            emitted=len(result.emitted),
            suppressed=result.suppressed,
        )
        return result

    async def read_feed(self, session: AsyncSession, wallet: str) -> NotificationFeed:
        notifications = await list_notifications(session, wallet, limit=self._feed_limit)
        unread = await count_unread(session, wallet)
        return NotificationFeed(notifications=notifications, unread_count=unread)

    async def mark_read(
        self,
        session: AsyncSession,
        wallet: str,
        notification_ids: Sequence[str] | None = None,
        *,
        mark_all: bool = False,
    ) -> int:
        if mark_all:
            return await mark_notifications_read(session, wallet)
        if not notification_ids:
            return 0
        return await mark_notifications_read(session, wallet, notification_ids)

    async def _analyze(self, mint: str) -> ScoreResult | None:
        """Последовательный вызов скорера; сбой или таймаут -> None."""

        try:
            return await asyncio.wait_for(self._scorer.analyze(mint), timeout=self._scorer_timeout)
        except asyncio.TimeoutError:
            logger.warning("Скорер не уложился в {timeout}s для {mint}", timeout=self._scorer_timeout, mint=mint)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Скорер упал для {mint}: {error}", mint=mint, error=exc)
        return None


__all__ = ["NotificationFeed", "ScanResult", "WatchlistScanner"]
