"""Создание уведомлений с антиспам-окном на (кошелёк, mint, тип)."""

from __future__ import annotations

from datetime import datetime, timedelta

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from trustfeed.models import Notification, NotificationKind
from trustfeed.repositories import create_notification, find_recent_notification
from .drift import DriftCandidate

MINT_FALLBACK_LENGTH = 8


def _fmt(value: float) -> str:
    return f"{value:g}"


def build_message(candidate: DriftCandidate) -> str:
    display = candidate.token_name or candidate.mint[:MINT_FALLBACK_LENGTH]
    if candidate.kind is NotificationKind.SCORE_CHANGE:
        return (
            f"{display} trust rating changed from "
            f"{_fmt(candidate.old_value)} to {_fmt(candidate.new_value)}"
        )
    return f"New risk flag detected for {display}"


class NotificationEmitter:
    """Read-before-write: дубликат в пределах cooldown подавляется.

    Это мягкая уникальность, а не ключ БД; два параллельных опроса в теории
    могут проскочить оба.
    """

    def __init__(self, cooldown: timedelta = timedelta(hours=24)) -> None:
        self._cooldown = cooldown

    @property
    def cooldown(self) -> timedelta:
        return self._cooldown

    async def emit(
        self,
        session: AsyncSession,
        wallet: str,
        candidate: DriftCandidate,
        now: datetime,
    ) -> Notification | None:
        existing = await find_recent_notification(
            session,
            wallet=wallet,
            mint=candidate.mint,
            kind=candidate.kind.value,
            since=now - self._cooldown,
        )
        if existing is not None:
            logger.debug(
                "Cooldown: {kind} для {mint} уже отправлено {created}",
                kind=candidate.kind.value,
                mint=candidate.mint,
                created=existing.created_at,
            )
            return None

        notification = Notification(
            user_wallet=wallet,
            mint=candidate.mint,
            token_name=candidate.token_name,
            kind=candidate.kind.value,
            message=build_message(candidate),
            old_value=candidate.old_value,
            new_value=candidate.new_value,
            read=False,
            created_at=now,
        )
        notification = await create_notification(session, notification)
        logger.info(
            "🔔 {kind} для {wallet}: {message}",
            kind=candidate.kind.value,
            wallet=wallet,
            message=notification.message,
        )
        return notification


__all__ = ["NotificationEmitter", "build_message"]
