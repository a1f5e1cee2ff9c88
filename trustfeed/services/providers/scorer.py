"""Клиент внешнего репутационного скорера.

Алгоритм скоринга нам непрозрачен: берём рейтинг и список риск-флагов.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

import aiohttp
from loguru import logger

from config.settings import ScorerSettings, get_settings
from trustfeed.errors import UpstreamSoftFailure


@dataclass(slots=True)
class ScoreResult:
    """Свежий снапшот анализа токена."""

    mint: str
    rating: float
    name: str | None = None
    symbol: str | None = None
    image_url: str | None = None
    deployer_tier: str | None = None
    risk_flags: list[Any] = field(default_factory=list)

    @classmethod
    def from_payload(cls, mint: str, data: dict[str, Any]) -> "ScoreResult":
        rating = data.get("trustRating", data.get("rating"))
        if rating is None:
            raise UpstreamSoftFailure(f"скорер не вернул рейтинг для {mint}")
        flags = data.get("riskFlags") or data.get("risk_flags") or []
        return cls(
            mint=data.get("mint") or mint,
            rating=float(rating),
            name=data.get("name") or None,
            symbol=data.get("symbol") or None,
            image_url=data.get("imageUrl") or data.get("image_url") or None,
            deployer_tier=data.get("deployerTier") or data.get("deployer_tier") or None,
            risk_flags=list(flags) if isinstance(flags, list) else [],
        )


class ReputationScorer(Protocol):
    async def analyze(self, mint: str) -> ScoreResult | None:
        ...


class HttpReputationScorer:
    """GET {base_url}/api/analyze/{mint} -> {trustRating, name, riskFlags, ...}."""

    def __init__(self, settings: ScorerSettings | None = None) -> None:
        cfg = settings or get_settings().scorer
        self._base_url = str(cfg.base_url).rstrip("/") if cfg.base_url else None
        self._headers = {"Accept": "application/json"}
        if cfg.api_key:
            self._headers["Authorization"] = f"Bearer {cfg.api_key.get_secret_value()}"
        self._timeout = cfg.request_timeout
        self._session: aiohttp.ClientSession | None = None

    @property
    def timeout(self) -> float:
        return self._timeout

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def analyze(self, mint: str) -> ScoreResult | None:
        if self._base_url is None:
            raise UpstreamSoftFailure("SCORER__BASE_URL не задан")
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers=self._headers,
            )
        url = f"{self._base_url}/api/analyze/{mint}"
        try:
            async with self._session.get(url) as resp:
                if resp.status == 404:
                    return None
                if resp.status >= 400:
                    raise UpstreamSoftFailure(f"скорер ответил HTTP {resp.status} для {mint}")
                data = await resp.json()
        except aiohttp.ClientError as exc:
            raise UpstreamSoftFailure(f"скорер недоступен: {exc}") from exc
        if not isinstance(data, dict):
            logger.debug("Скорер вернул неожиданный ответ для {mint}: {data}", mint=mint, data=data)
            return None
        return ScoreResult.from_payload(mint, data)


__all__ = ["HttpReputationScorer", "ReputationScorer", "ScoreResult"]
