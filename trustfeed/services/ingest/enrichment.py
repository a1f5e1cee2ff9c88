"""Обогащение субъектов метаданными от внешнего провайдера.

Каждый mint обрабатывается независимо: таймаут или падение провайдера
для одного токена не блокирует и не валит остальные.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Iterable

from loguru import logger

from trustfeed.services.providers.helius import MetadataProvider, TokenMetadata


@dataclass(slots=True)
class EnrichmentResult:
    mint: str
    metadata: TokenMetadata | None = None
    error: str | None = None

    @property
    def soft_failed(self) -> bool:
        return self.error is not None


class MetadataEnricher:
    def __init__(
        self,
        provider: MetadataProvider,
        *,
        timeout: float = 10.0,
        concurrency: int = 5,
    ) -> None:
        self._provider = provider
        self._timeout = timeout
        self._concurrency = concurrency

    async def enrich(self, mint: str) -> EnrichmentResult:
        """Один вызов провайдера с ограниченным таймаутом."""

        try:
            metadata = await asyncio.wait_for(self._provider.get_metadata(mint), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("Метаданные {mint}: таймаут {timeout}s", mint=mint, timeout=self._timeout)
            return EnrichmentResult(mint=mint, error=f"timeout after {self._timeout}s")
        except Exception as exc:  # noqa: BLE001
            logger.warning("Метаданные {mint}: провайдер упал: {error}", mint=mint, error=exc)
            return EnrichmentResult(mint=mint, error=str(exc) or exc.__class__.__name__)
        if metadata is None:
            logger.debug("Метаданные {mint}: провайдер не знает токен", mint=mint)
        return EnrichmentResult(mint=mint, metadata=metadata)

    async def enrich_many(self, mints: Iterable[str]) -> dict[str, EnrichmentResult]:
        """Параллельно (с ограничением concurrency) обогащает независимые mint'ы."""

        unique = list(dict.fromkeys(mints))
        if not unique:
            return {}
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _bounded(mint: str) -> EnrichmentResult:
            async with semaphore:
                return await self.enrich(mint)

        results = await asyncio.gather(*(_bounded(mint) for mint in unique))
        return {result.mint: result for result in results}


__all__ = ["EnrichmentResult", "MetadataEnricher"]
