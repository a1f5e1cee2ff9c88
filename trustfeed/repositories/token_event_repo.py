"""Работа с таблицей new_token_events."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from trustfeed.models import TokenEvent
from trustfeed.models.base import utcnow

if TYPE_CHECKING:
    from trustfeed.services.providers.scorer import ScoreResult

_INSERT_COLUMNS = (
    "mint",
    "name",
    "symbol",
    "image_url",
    "source",
    "analyzed",
    "trust_rating",
    "deployer_tier",
    "created_at",
    "updated_at",
)


def _insert_for(session: AsyncSession):
    dialect = session.bind.dialect.name if session.bind is not None else "sqlite"
    if dialect == "postgresql":
        return pg_insert
    return sqlite_insert


async def insert_token_event_if_absent(session: AsyncSession, event: TokenEvent) -> bool:
    """INSERT ... ON CONFLICT (mint) DO NOTHING.

    Возвращает True только при реальной первой вставке; существующую строку
    (в том числе уже проанализированную) не трогает.
    """

    values: dict[str, Any] = {}
    for name in _INSERT_COLUMNS:
        value = getattr(event, name)
        values[name] = value.value if isinstance(value, Enum) else value
    values["metadata"] = event.raw_metadata or {}
    insert = _insert_for(session)
    stmt = (
        insert(TokenEvent.__table__)
        .values(**values)
        .on_conflict_do_nothing(index_elements=["mint"])
    )
    result = await session.exec(stmt)
    await session.commit()
    return (result.rowcount or 0) > 0


async def get_token_event(session: AsyncSession, mint: str) -> TokenEvent | None:
    stmt = select(TokenEvent).where(TokenEvent.mint == mint)
    return (await session.exec(stmt)).one_or_none()


async def list_unanalyzed_events(session: AsyncSession, limit: int) -> list[TokenEvent]:
    stmt = (
        select(TokenEvent)
        .where(col(TokenEvent.analyzed).is_(False))
        .order_by(col(TokenEvent.created_at).desc())
        .limit(limit)
    )
    result = await session.exec(stmt)
    return list(result.all())


async def mark_event_analyzed(session: AsyncSession, mint: str, score: "ScoreResult") -> bool:
    """Заполняет поля анализа, только пока строка ещё не проанализирована."""

    values: dict[str, Any] = {
        "analyzed": True,
        "trust_rating": score.rating,
        "deployer_tier": score.deployer_tier,
        "updated_at": utcnow(),
    }
    if score.name:
        values["name"] = score.name
    if score.symbol:
        values["symbol"] = score.symbol
    if score.image_url:
        values["image_url"] = score.image_url
    stmt = (
        update(TokenEvent)
        .where(col(TokenEvent.mint) == mint, col(TokenEvent.analyzed).is_(False))
        .values(**values)
    )
    result = await session.exec(stmt)
    await session.commit()
    return (result.rowcount or 0) > 0


__all__ = [
    "get_token_event",
    "insert_token_event_if_absent",
    "list_unanalyzed_events",
    "mark_event_analyzed",
]
