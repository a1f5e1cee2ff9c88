"""Entry point for TrustFeed API."""

from __future__ import annotations

import uvicorn

from config.settings import get_settings
from .logging_config import setup_logging


def main() -> None:
    settings = get_settings()
    setup_logging(json=settings.logging.json_format, level=settings.logging.level)
    uvicorn.run(
        "trustfeed.web.app:app",
        host="0.0.0.0",
        port=8000,
        log_level=settings.logging.level.lower(),
        reload=not settings.is_production,
    )


if __name__ == "__main__":
    main()
