"""Извлечение mint'ов из вебхука и определение происхождения батча."""

from __future__ import annotations

from typing import Iterable, Sequence

from trustfeed.models import TokenSource
from .schemas import WebhookTransaction


def extract_mints(transactions: Iterable[WebhookTransaction]) -> set[str]:
    """Все mint'ы из tokenTransfers по всем транзакциям, без повторов."""

    mints: set[str] = set()
    for tx in transactions:
        for transfer in tx.token_transfers or ():
            if transfer.mint:
                mints.add(transfer.mint)
    return mints


def is_graduation(tx: WebhookTransaction, program_id: str) -> bool:
    """Транзакция содержит инструкцию программы graduation."""

    return any(ix.program_id == program_id for ix in tx.instructions or ())


def classify_batch_source(transactions: Sequence[WebhookTransaction], program_id: str) -> TokenSource:
    """Классификация на уровне всей доставки, а не отдельного mint.

    Если хоть одна транзакция батча попала в программу graduation, все mint'ы
    батча помечаются pumpfun_graduated, включая попутные.
    """

    if any(is_graduation(tx, program_id) for tx in transactions):
        return TokenSource.PUMPFUN_GRADUATED
    return TokenSource.HELIUS_WEBHOOK


__all__ = ["classify_batch_source", "extract_mints", "is_graduation"]
