"""DexScreener: последние профили токенов (только Solana)."""

from __future__ import annotations

from dataclasses import dataclass

import aiohttp
from loguru import logger

from config.settings import DiscoverySettings, get_settings


@dataclass(slots=True)
class TokenProfile:
    mint: str
    icon: str | None


class DexScreenerClient:
    def __init__(self, settings: DiscoverySettings | None = None) -> None:
        cfg = settings or get_settings().discovery
        self._url = str(cfg.dexscreener_profiles_url)
        self._timeout = cfg.request_timeout

    async def fetch_latest_profiles(self, limit: int = 20) -> list[TokenProfile]:
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self._timeout)) as session:
                async with session.get(self._url) as resp:
                    if resp.status != 200:
                        logger.warning("DexScreener profiles вернул HTTP {status}", status=resp.status)
                        return []
                    data = await resp.json()
        except Exception as exc:  # noqa: BLE001
            logger.warning("DexScreener profiles недоступен: {error}", error=exc)
            return []
        if not isinstance(data, list):
            return []
        profiles = [
            TokenProfile(mint=item["tokenAddress"], icon=item.get("icon") or None)
            for item in data
            if isinstance(item, dict) and item.get("chainId") == "solana" and item.get("tokenAddress")
        ]
        return profiles[:limit]


__all__ = ["DexScreenerClient", "TokenProfile"]
