"""Утилита для первичной инициализации базы данных TrustFeed."""

from __future__ import annotations

import asyncio

from loguru import logger

from trustfeed.middlewares.db import init_db


def main() -> None:
    asyncio.run(init_db())
    logger.info("Таблицы TrustFeed созданы")


if __name__ == "__main__":
    main()
