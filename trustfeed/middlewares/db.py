"""Движок БД и фабрика AsyncSession для обработчиков FastAPI."""

from __future__ import annotations

from typing import AsyncIterator

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config.settings import get_settings
from trustfeed import models  # noqa: F401  импортируем модели для регистрации метаданных

settings = get_settings()
engine = create_async_engine(
    settings.database.dsn,
    echo=settings.database.echo,
    poolclass=NullPool,
)
session_maker: async_sessionmaker[AsyncSession] = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db() -> None:
    """Временная инициализация таблиц (до появления Alembic миграций)."""

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    return session_maker


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """Depends-зависимость: одна сессия на запрос."""

    async with session_maker() as session:
        yield session


__all__ = ["engine", "get_db_session", "get_session_maker", "init_db"]
