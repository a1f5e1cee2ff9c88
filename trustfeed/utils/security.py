"""Проверка общих секретов для вебхука и внутренних батчей."""

from __future__ import annotations

import hmac

from pydantic import SecretStr

from trustfeed.errors import AuthError

BEARER_PREFIX = "Bearer "


def _secret_value(secret: SecretStr | str | None) -> str | None:
    if secret is None:
        return None
    value = secret.get_secret_value() if isinstance(secret, SecretStr) else secret
    return value or None


def _matches(candidate: str | None, expected: str) -> bool:
    if candidate is None:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


def verify_webhook_secret(header: str | None, secret: SecretStr | str | None) -> None:
    """Helius шлёт authHeader как есть; принимаем и голый секрет, и Bearer-форму.

    Секрет не настроен -> проверка пропускается (явный выбор оператора).
    """

    expected = _secret_value(secret)
    if expected is None:
        return
    if _matches(header, expected) or _matches(header, f"{BEARER_PREFIX}{expected}"):
        return
    raise AuthError("webhook secret mismatch")


def verify_bearer_secret(header: str | None, secret: SecretStr | str | None) -> None:
    """Внутренние вызовы (cron/backfill) обязаны прислать `Bearer <secret>`."""

    expected = _secret_value(secret)
    if expected is None:
        return
    if not _matches(header, f"{BEARER_PREFIX}{expected}"):
        raise AuthError("bearer secret mismatch")


__all__ = ["verify_bearer_secret", "verify_webhook_secret"]
