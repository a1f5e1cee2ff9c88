"""Кеш анализов токенов (пишет внешний анализатор, мы только читаем)."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from trustfeed.models import TokenAnalysis


async def get_cached_analyses(
    session: AsyncSession,
    mints: Sequence[str],
) -> dict[str, TokenAnalysis]:
    """Один батч-запрос IN (...) вместо N отдельных."""

    if not mints:
        return {}
    stmt = select(TokenAnalysis).where(col(TokenAnalysis.mint).in_(list(mints)))
    result = await session.exec(stmt)
    return {row.mint: row for row in result.all()}


__all__ = ["get_cached_analyses"]
