"""Сравнение закешированного и свежего анализа токена."""

from __future__ import annotations

from dataclasses import dataclass

from trustfeed.models import NotificationKind, TokenAnalysis
from trustfeed.services.providers.scorer import ScoreResult


@dataclass(slots=True)
class DriftCandidate:
    """Кандидат на уведомление; эмиттер ещё проверит cooldown."""

    mint: str
    kind: NotificationKind
    old_value: float
    new_value: float
    token_name: str | None = None


def detect_drift(
    cached: TokenAnalysis,
    fresh: ScoreResult,
    threshold: float,
) -> list[DriftCandidate]:
    """0, 1 или 2 кандидата: изменение рейтинга и/или прирост риск-флагов."""

    token_name = fresh.name or cached.name
    candidates: list[DriftCandidate] = []

    if abs(fresh.rating - cached.trust_rating) >= threshold:
        candidates.append(
            DriftCandidate(
                mint=cached.mint,
                kind=NotificationKind.SCORE_CHANGE,
                old_value=cached.trust_rating,
                new_value=fresh.rating,
                token_name=token_name,
            )
        )

    old_flags = len(cached.risk_flags) if isinstance(cached.risk_flags, list) else 0
    new_flags = len(fresh.risk_flags)
    if new_flags > old_flags:
        candidates.append(
            DriftCandidate(
                mint=cached.mint,
                kind=NotificationKind.NEW_RISK_FLAG,
                old_value=old_flags,
                new_value=new_flags,
                token_name=token_name,
            )
        )
    return candidates


__all__ = ["DriftCandidate", "detect_drift"]
