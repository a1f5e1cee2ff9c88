"""Каноническая запись о новом токене (одна строка на mint)."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field

from .base import TimeStampedModel


class TokenSource(str, Enum):
    JUPITER = "jupiter"
    DEXSCREENER = "dexscreener"
    PUMPFUN_GRADUATED = "pumpfun_graduated"
    HELIUS_WEBHOOK = "helius_webhook"


class TokenEvent(TimeStampedModel, table=True):
    """Создаётся шлюзом при первом появлении mint, дальше правит только анализатор."""

    __tablename__ = "new_token_events"

    id: Optional[int] = Field(default=None, primary_key=True)
    mint: str = Field(max_length=64, unique=True, index=True)
    name: Optional[str] = Field(default=None, max_length=256)
    symbol: Optional[str] = Field(default=None, max_length=64)
    image_url: Optional[str] = Field(default=None)
    source: str = Field(default=TokenSource.HELIUS_WEBHOOK.value, max_length=32, index=True)
    raw_metadata: dict = Field(default_factory=dict, sa_column=Column("metadata", JSON))
    analyzed: bool = Field(default=False, index=True)
    trust_rating: float = Field(default=0.0)
    deployer_tier: Optional[str] = Field(default=None, max_length=32)


__all__ = ["TokenEvent", "TokenSource"]
