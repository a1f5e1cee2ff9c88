"""Pydantic-схемы входящих payload'ов шлюза."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

SourceLiteral = Literal["jupiter", "dexscreener", "pumpfun_graduated", "helius_webhook"]


# ============================================================================
# Helius enhanced-transaction webhook (массив транзакций)
# ============================================================================

class TokenTransfer(BaseModel):
    model_config = ConfigDict(extra="allow")

    mint: str | None = None


class Instruction(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    program_id: str | None = Field(None, alias="programId")


class WebhookTransaction(BaseModel):
    """Одна enhanced-транзакция; нас интересуют только трансферы и инструкции."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    signature: str | None = None
    token_transfers: list[TokenTransfer] | None = Field(None, alias="tokenTransfers")
    instructions: list[Instruction] | None = None


# ============================================================================
# Внутренний батч (cron / backfill)
# ============================================================================

class BatchToken(BaseModel):
    mint: str = Field(..., min_length=32, max_length=44)
    name: str | None = None
    symbol: str | None = None
    image_url: str | None = None
    source: SourceLiteral


class IngestBatch(BaseModel):
    tokens: list[BatchToken]


__all__ = [
    "BatchToken",
    "IngestBatch",
    "Instruction",
    "SourceLiteral",
    "TokenTransfer",
    "WebhookTransaction",
]
