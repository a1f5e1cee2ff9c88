"""Jupiter: недавно залистенные токены для cron-джобы discovery."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import aiohttp
from aiocache.base import BaseCache
from loguru import logger

from config.settings import DiscoverySettings, get_settings
from trustfeed.utils.cache import cached_call, create_cache

RECENT_CACHE_KEY = "jupiter:recent"


@dataclass(slots=True)
class RecentToken:
    mint: str
    name: str | None
    symbol: str | None
    image_url: str | None


class JupiterClient:
    """Список свежих токенов с TTL-кешем, который владелец передаёт в конструктор."""

    def __init__(
        self,
        settings: DiscoverySettings | None = None,
        cache: BaseCache | None = None,
    ) -> None:
        cfg = settings or get_settings().discovery
        self._url = str(cfg.jupiter_recent_url)
        self._api_key = cfg.jupiter_api_key.get_secret_value() if cfg.jupiter_api_key else None
        self._timeout = cfg.request_timeout
        self._cache_ttl = cfg.recent_cache_ttl_sec
        self._cache = cache if cache is not None else create_cache("jupiter", ttl=self._cache_ttl)

    async def fetch_recent_tokens(self, limit: int = 20) -> list[RecentToken]:
        """Возвращает до limit токенов; сбой источника -> пустой список."""

        raw = await cached_call(self._cache, RECENT_CACHE_KEY, self._cache_ttl, self._download)
        tokens = [token for token in (self._parse(item) for item in raw or []) if token]
        return tokens[:limit]

    async def _download(self) -> list[dict[str, Any]]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["x-api-key"] = self._api_key
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self._timeout)) as session:
                async with session.get(self._url, headers=headers) as resp:
                    if resp.status != 200:
                        logger.warning("Jupiter recent вернул HTTP {status}", status=resp.status)
                        return []
                    data = await resp.json()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Jupiter recent недоступен: {error}", error=exc)
            return []
        return data if isinstance(data, list) else []

    @staticmethod
    def _parse(item: Any) -> RecentToken | None:
        if not isinstance(item, dict):
            return None
        mint = item.get("id") or item.get("mint") or item.get("address")
        if not mint:
            return None
        return RecentToken(
            mint=mint,
            name=item.get("name") or None,
            symbol=item.get("symbol") or None,
            image_url=item.get("icon") or item.get("logoURI") or None,
        )


__all__ = ["JupiterClient", "RecentToken"]
