"""Уведомления пользователей о дрейфе рейтинга и новых риск-флагах."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from .base import utcnow


class NotificationKind(str, Enum):
    SCORE_CHANGE = "score_change"
    NEW_RISK_FLAG = "new_risk_flag"


class Notification(SQLModel, table=True):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_cooldown", "user_wallet", "mint", "kind", "created_at"),
    )

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=36)
    user_wallet: str = Field(max_length=64, index=True)
    mint: str = Field(max_length=64)
    token_name: Optional[str] = Field(default=None, max_length=256)
    kind: str = Field(max_length=32)
    message: str
    old_value: Optional[float] = Field(default=None)
    new_value: Optional[float] = Field(default=None)
    read: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_wallet": self.user_wallet,
            "mint": self.mint,
            "token_name": self.token_name,
            "type": self.kind,
            "message": self.message,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "read": self.read,
            "created_at": self.created_at.isoformat(),
        }


__all__ = ["Notification", "NotificationKind"]
