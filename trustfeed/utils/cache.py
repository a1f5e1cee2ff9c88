"""Единая точка настройки aiocache.

Каждый компонент получает собственный экземпляр кеша (со своим namespace и TTL)
через конструктор, поэтому в тестах кеш легко подменить или заполнить заранее.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable
from urllib.parse import urlparse

from aiocache import SimpleMemoryCache, caches
from aiocache.base import BaseCache

try:
    from aiocache import RedisCache
except (ImportError, AttributeError):  # pragma: no cover - optional dependency
    RedisCache = None  # type: ignore[assignment]

from config.settings import CacheSettings, get_settings

_configured = False


def configure_cache(cache_settings: CacheSettings | None = None) -> None:
    """Настраивает aiocache в зависимости от backend (memory/redis)."""

    global _configured
    if _configured:
        return

    cfg = cache_settings or get_settings().cache
    if cfg.backend == "redis":
        if RedisCache is None:
            raise RuntimeError(
                "Для использования RedisCache установите пакет 'redis' и aiocache[redis]"
            )
        config = _build_redis_config(cfg.redis_dsn)
        caches.set_config(
            {
                "default": {
                    "cache": RedisCache,
                    **config,
                    "ttl": cfg.ttl_seconds,
                }
            }
        )
    else:
        caches.set_config(
            {
                "default": {
                    "cache": SimpleMemoryCache,
                    "ttl": cfg.ttl_seconds,
                }
            }
        )
    _configured = True


def create_cache(namespace: str, ttl: int | None = None) -> BaseCache:
    """Новый экземпляр кеша по конфигу default, изолированный namespace."""

    configure_cache()
    overrides: dict[str, Any] = {"namespace": namespace}
    if ttl is not None:
        overrides["ttl"] = ttl
    return caches.create("default", **overrides)


async def cached_call(
    cache: BaseCache,
    key: str,
    ttl: int,
    factory: Callable[[], Awaitable[Any]],
) -> Any:
    """Мини-хелпер: если значение отсутствует – вызывает factory.

    Пустые результаты (None, []) не кешируются, чтобы сбой источника
    не залипал на весь TTL.
    """

    value = await cache.get(key)
    if value is not None:
        return value
    value = await factory()
    if value:
        await cache.set(key, value, ttl=ttl)
    return value


def _build_redis_config(dsn: str | None) -> dict[str, Any]:
    if not dsn:
        raise RuntimeError("CACHE__BACKEND=redis, но redis_dsn не указан")
    parsed = urlparse(dsn)
    if parsed.scheme not in {"redis", "rediss"}:
        raise ValueError(f"Неподдерживаемая схема Redis DSN: {parsed.scheme}")
    db = 0
    if parsed.path and parsed.path != "/":
        try:
            db = int(parsed.path.lstrip("/"))
        except ValueError:
            db = 0
    return {
        "endpoint": parsed.hostname or "localhost",
        "port": parsed.port or 6379,
        "password": parsed.password,
        "db": db,
        "ssl": parsed.scheme == "rediss",
    }


__all__ = ["cached_call", "configure_cache", "create_cache"]
