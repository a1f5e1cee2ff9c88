"""Чтение вотчлиста пользователя."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from trustfeed.models import WatchlistEntityType, WatchlistEntry


async def list_watched_mints(
    session: AsyncSession,
    wallet: str,
    entity_type: str = WatchlistEntityType.TOKEN,
) -> list[str]:
    """Адреса из вотчлиста в порядке добавления (старые первыми)."""

    stmt = (
        select(WatchlistEntry.mint)
        .where(WatchlistEntry.user_wallet == wallet, WatchlistEntry.entity_type == entity_type)
        .order_by(col(WatchlistEntry.added_at).asc(), col(WatchlistEntry.id).asc())
    )
    result = await session.exec(stmt)
    return list(result.all())


__all__ = ["list_watched_mints"]
