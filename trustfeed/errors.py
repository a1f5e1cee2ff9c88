"""Иерархия ошибок конвейера приёма и мониторинга."""

from __future__ import annotations

from typing import Any


class TrustFeedError(Exception):
    """Базовое исключение TrustFeed."""


class AuthError(TrustFeedError):
    """Неверный или отсутствующий общий секрет. Ничего не записываем."""


class PayloadValidationError(TrustFeedError):
    """Тело запроса не прошло схему; батч отклоняется целиком."""

    def __init__(self, message: str = "Invalid request", details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class UpstreamSoftFailure(TrustFeedError):
    """Провайдер метаданных или скорер упал/не ответил. Гасится на уровне субъекта."""


class StoreWriteFailure(TrustFeedError):
    """Запись одного субъекта в хранилище не удалась."""

    def __init__(self, mint: str, reason: str) -> None:
        super().__init__(f"{mint}: {reason}")
        self.mint = mint
        self.reason = reason


def jsonable_errors(errors) -> list[dict[str, Any]]:
    """Оставляет в ошибках pydantic только сериализуемые поля."""

    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in errors
    ]


__all__ = [
    "AuthError",
    "PayloadValidationError",
    "StoreWriteFailure",
    "TrustFeedError",
    "UpstreamSoftFailure",
    "jsonable_errors",
]
