"""Последний известный снапшот анализа токена (база для сравнения)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, SQLModel

from .base import utcnow


class TokenAnalysis(SQLModel, table=True):
    __tablename__ = "token_analyses"

    id: Optional[int] = Field(default=None, primary_key=True)
    mint: str = Field(max_length=64, unique=True, index=True)
    name: Optional[str] = Field(default=None, max_length=256)
    symbol: Optional[str] = Field(default=None, max_length=64)
    trust_rating: float = Field(default=0.0)
    risk_flags: list = Field(default_factory=list, sa_column=Column(JSON))
    analyzed_at: datetime = Field(default_factory=utcnow, nullable=False)


__all__ = ["TokenAnalysis"]
