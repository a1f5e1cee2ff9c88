"""Helius DAS: метаданные токена по mint через JSON-RPC getAsset.

Клиент держит одну aiohttp-сессию с ограниченным таймаутом; ошибки сети и
HTTP поднимаются как UpstreamSoftFailure, отсутствие ассета -> None.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

import aiohttp
from loguru import logger

from config.settings import HeliusSettings, get_settings
from trustfeed.errors import UpstreamSoftFailure


@dataclass(slots=True)
class TokenMetadata:
    """То, что шлюзу нужно от провайдера метаданных."""

    mint: str
    name: str | None = None
    symbol: str | None = None
    image: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)


class MetadataProvider(Protocol):
    async def get_metadata(self, mint: str) -> TokenMetadata | None:
        ...


class HeliusMetadataProvider:
    """Обёртка над DAS getAsset."""

    def __init__(self, settings: HeliusSettings | None = None) -> None:
        cfg = settings or get_settings().helius
        self._rpc_url = str(cfg.rpc_url)
        self._api_key = cfg.api_key.get_secret_value() if cfg.api_key else None
        self._timeout = cfg.request_timeout
        self._session: aiohttp.ClientSession | None = None

    @property
    def timeout(self) -> float:
        return self._timeout

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def get_metadata(self, mint: str) -> TokenMetadata | None:
        asset = await self._rpc_call("getAsset", {"id": mint})
        if not asset:
            return None
        return self._parse_asset(mint, asset)

    async def _rpc_call(self, method: str, params: dict[str, Any]) -> Any:
        if not self._api_key:
            raise UpstreamSoftFailure("HELIUS__API_KEY не задан")
        session = self._ensure_session()
        payload = {"jsonrpc": "2.0", "id": "trustfeed", "method": method, "params": params}
        try:
            async with session.post(self._rpc_url, params={"api-key": self._api_key}, json=payload) as resp:
                if resp.status >= 400:
                    text = await resp.text()
                    raise UpstreamSoftFailure(f"Helius {method} HTTP {resp.status}: {text[:200]}")
                data = await resp.json()
        except aiohttp.ClientError as exc:
            raise UpstreamSoftFailure(f"Helius {method} недоступен: {exc}") from exc
        if data.get("error"):
            # DAS отвечает ошибкой на неизвестный ассет, это промах, а не сбой
            logger.debug("Helius {method} вернул ошибку: {error}", method=method, error=data["error"])
            return None
        return data.get("result")

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self._timeout))
        return self._session

    @staticmethod
    def _parse_asset(mint: str, asset: dict[str, Any]) -> TokenMetadata:
        content = asset.get("content") or {}
        metadata = content.get("metadata") or {}
        links = content.get("links") or {}
        return TokenMetadata(
            mint=asset.get("id") or mint,
            name=metadata.get("name") or None,
            symbol=metadata.get("symbol") or None,
            image=links.get("image") or None,
            raw=asset,
        )


__all__ = ["HeliusMetadataProvider", "MetadataProvider", "TokenMetadata"]
