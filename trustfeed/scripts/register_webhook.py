"""Регистрация enhanced-вебхука Helius на эндпоинт приёма токенов.

Повторный запуск безопасен: если вебхук на тот же URL уже есть, ничего не создаётся.
"""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp
from loguru import logger

from config.settings import AppSettings, get_settings
from trustfeed.logging_config import setup_logging

INGEST_PATH = "/api/ingest/new-tokens"
# Token Metadata program: CreateMetadataAccount сопровождает каждый новый mint
TOKEN_METADATA_PROGRAM_ID = "metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s"


def build_webhook_payload(webhook_url: str, auth_header: str | None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "webhookURL": webhook_url,
        "transactionTypes": ["TOKEN_MINT"],
        "accountAddresses": [TOKEN_METADATA_PROGRAM_ID],
        "webhookType": "enhanced",
    }
    if auth_header:
        payload["authHeader"] = auth_header
    return payload


async def register_webhook(settings: AppSettings) -> dict[str, Any] | None:
    helius = settings.helius
    if helius.api_key is None:
        raise RuntimeError("HELIUS__API_KEY не задан")
    if helius.public_base_url is None:
        raise RuntimeError("HELIUS__PUBLIC_BASE_URL не задан")

    webhook_url = str(helius.public_base_url).rstrip("/") + INGEST_PATH
    params = {"api-key": helius.api_key.get_secret_value()}
    secret = settings.ingest.webhook_secret
    payload = build_webhook_payload(webhook_url, secret.get_secret_value() if secret else None)
    timeout = aiohttp.ClientTimeout(total=helius.request_timeout)

    async with aiohttp.ClientSession(timeout=timeout) as session:
        async with session.get(str(helius.webhooks_url), params=params) as resp:
            resp.raise_for_status()
            existing = await resp.json(content_type=None) or []
        for hook in existing:
            if hook.get("webhookURL") == webhook_url:
                logger.info("Вебхук {id} уже указывает на {url}", id=hook.get("webhookID"), url=webhook_url)
                return None

        async with session.post(str(helius.webhooks_url), params=params, json=payload) as resp:
            resp.raise_for_status()
            created = await resp.json(content_type=None)
    logger.success("Вебхук Helius зарегистрирован: {id}", id=created.get("webhookID"))
    return created


def main() -> None:
    settings = get_settings()
    setup_logging(json=settings.logging.json_format, level=settings.logging.level)
    asyncio.run(register_webhook(settings))


if __name__ == "__main__":
    main()
