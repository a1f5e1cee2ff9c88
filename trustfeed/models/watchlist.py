"""Вотчлист пользователя (создаётся и удаляется снаружи, здесь только читаем)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from .base import utcnow


class WatchlistEntityType(str):
    TOKEN = "token"
    WALLET = "wallet"
    DEPLOYER = "deployer"


class WatchlistEntry(SQLModel, table=True):
    __tablename__ = "watchlist"
    __table_args__ = (UniqueConstraint("user_wallet", "mint", name="uq_watchlist_wallet_mint"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_wallet: str = Field(max_length=64, index=True)
    mint: str = Field(max_length=64, index=True)
    entity_type: str = Field(default=WatchlistEntityType.TOKEN, max_length=16)
    added_at: datetime = Field(default_factory=utcnow, nullable=False)


__all__ = ["WatchlistEntityType", "WatchlistEntry"]
