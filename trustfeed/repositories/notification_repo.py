"""Работа с таблицей уведомлений."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from trustfeed.models import Notification


async def find_recent_notification(
    session: AsyncSession,
    *,
    wallet: str,
    mint: str,
    kind: str,
    since: datetime,
) -> Notification | None:
    stmt = (
        select(Notification)
        .where(
            Notification.user_wallet == wallet,
            Notification.mint == mint,
            Notification.kind == kind,
            col(Notification.created_at) > since,
        )
        .limit(1)
    )
    return (await session.exec(stmt)).first()


async def create_notification(session: AsyncSession, notification: Notification) -> Notification:
    session.add(notification)
    await session.commit()
    await session.refresh(notification)
    return notification


async def list_notifications(session: AsyncSession, wallet: str, limit: int = 50) -> list[Notification]:
    stmt = (
        select(Notification)
        .where(Notification.user_wallet == wallet)
        .order_by(col(Notification.created_at).desc())
        .limit(limit)
    )
    result = await session.exec(stmt)
    return list(result.all())


async def count_unread(session: AsyncSession, wallet: str) -> int:
    stmt = select(func.count()).select_from(Notification).where(
        Notification.user_wallet == wallet,
        col(Notification.read).is_(False),
    )
    return int((await session.exec(stmt)).one())


async def mark_notifications_read(
    session: AsyncSession,
    wallet: str,
    notification_ids: Sequence[str] | None = None,
) -> int:
    """Помечает прочитанными все (ids=None) или выбранные уведомления кошелька."""

    stmt = update(Notification).where(
        col(Notification.user_wallet) == wallet,
        col(Notification.read).is_(False),
    )
    if notification_ids is not None:
        if not notification_ids:
            return 0
        stmt = stmt.where(col(Notification.id).in_(list(notification_ids)))
    result = await session.exec(stmt.values(read=True))
    await session.commit()
    return result.rowcount or 0


__all__ = [
    "count_unread",
    "create_notification",
    "find_recent_notification",
    "list_notifications",
    "mark_notifications_read",
]
