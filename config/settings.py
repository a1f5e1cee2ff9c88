"""Глобальные настройки TrustFeed.

Настройки разделены по доменам (приём событий, Helius, скоринг, вотчлист и т.д.),
поэтому новые источники токенов подключаются без переписывания базового кода.
Вся конфигурация загружается из переменных окружения через Pydantic Settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    Field,
    PositiveFloat,
    PositiveInt,
    SecretStr,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent
ACCESSIBLE_ENV_FILE = BASE_DIR / "config" / "runtime.env"
DEFAULT_ENV_FILE = BASE_DIR / ".env"
ENV_FILE = ACCESSIBLE_ENV_FILE if ACCESSIBLE_ENV_FILE.exists() else DEFAULT_ENV_FILE

PUMPFUN_PROGRAM_ID = "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P"


def _empty_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class IngestSettings(BaseModel):
    """Приём событий: секреты вебхука и внутренних батчей."""

    webhook_secret: SecretStr | None = Field(
        None, description="Заголовок Authorization, который шлёт Helius (пусто = без проверки)"
    )
    cron_secret: SecretStr | None = Field(
        None, description="Bearer-секрет для cron/backfill батчей (пусто = без проверки)"
    )
    graduation_program_id: str = Field(
        PUMPFUN_PROGRAM_ID, description="Программа, инструкция которой означает graduation"
    )
    enrich_concurrency: PositiveInt = 5
    neutral_trust_rating: float = 0.0

    @field_validator("webhook_secret", "cron_secret", mode="before")
    @classmethod
    def _empty_str_to_none(cls, value):
        return _empty_to_none(value)


class HeliusSettings(BaseModel):
    """Helius DAS (метаданные токенов) и API вебхуков."""

    api_key: SecretStr | None = None
    rpc_url: AnyHttpUrl = Field("https://mainnet.helius-rpc.com/")
    webhooks_url: AnyHttpUrl = Field("https://api.helius.xyz/v0/webhooks")
    public_base_url: AnyHttpUrl | None = Field(
        None, description="Публичный адрес сервиса для регистрации вебхука"
    )
    request_timeout: PositiveFloat = 10.0

    @field_validator("api_key", "public_base_url", mode="before")
    @classmethod
    def _empty_str_to_none(cls, value):
        return _empty_to_none(value)


class ScorerSettings(BaseModel):
    """Внешний сервис репутационного скоринга."""

    base_url: AnyHttpUrl | None = None
    api_key: SecretStr | None = None
    request_timeout: PositiveFloat = 10.0

    @field_validator("base_url", "api_key", mode="before")
    @classmethod
    def _empty_str_to_none(cls, value):
        return _empty_to_none(value)


class WatchlistSettings(BaseModel):
    """Параметры пересчёта вотчлиста и антиспама уведомлений."""

    recheck_limit: PositiveInt = Field(3, description="Сколько токенов пересчитываем за один визит")
    score_change_threshold: PositiveFloat = 5.0
    cooldown_hours: PositiveInt = 24
    feed_limit: PositiveInt = 50


class DiscoverySettings(BaseModel):
    """Источники новых токенов для cron-джобы."""

    jupiter_recent_url: AnyHttpUrl = Field("https://api.jup.ag/tokens/v2/recent")
    jupiter_api_key: SecretStr | None = None
    dexscreener_profiles_url: AnyHttpUrl = Field(
        "https://api.dexscreener.com/token-profiles/latest/v1"
    )
    recent_limit: PositiveInt = 20
    recent_cache_ttl_sec: PositiveInt = 300
    enrich_limit: PositiveInt = 5
    request_timeout: PositiveFloat = 10.0

    @field_validator("jupiter_api_key", mode="before")
    @classmethod
    def _empty_str_to_none(cls, value):
        return _empty_to_none(value)


class CacheSettings(BaseModel):
    """Настройки кешей (aiocache поддерживает memory / redis)."""

    backend: Literal["memory", "redis"] = "memory"
    ttl_seconds: int = 300
    redis_dsn: str | None = None


class DatabaseSettings(BaseModel):
    """SQLModel + aiosqlite (по умолчанию) и готовность к Postgres."""

    dsn: str = Field(
        "sqlite+aiosqlite:///./database/trustfeed.db",
        description="Строка подключения SQLAlchemy/SQLModel",
    )
    echo: bool = False
    create_tables: bool = Field(True, description="create_all при старте (до Alembic)")


class LoggingSettings(BaseModel):
    level: str = "INFO"
    json_format: bool = False


class AppSettings(BaseSettings):
    """Главный контейнер настроек TrustFeed."""

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: Literal["dev", "prod"] = "dev"
    ingest: IngestSettings = IngestSettings()
    helius: HeliusSettings = HeliusSettings()
    scorer: ScorerSettings = ScorerSettings()
    watchlist: WatchlistSettings = WatchlistSettings()
    discovery: DiscoverySettings = DiscoverySettings()
    cache: CacheSettings = CacheSettings()
    database: DatabaseSettings = DatabaseSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def is_production(self) -> bool:
        """True, если сервис запущен в продовой среде."""

        return self.environment == "prod"


# Ленивый синглтон (избегаем глобальных переменных в модулях).
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Возвращает единый экземпляр настроек.

    Значения кэшируются, поэтому .env читается ровно один раз за процесс.
    """

    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


__all__ = [
    "AppSettings",
    "CacheSettings",
    "DatabaseSettings",
    "DiscoverySettings",
    "HeliusSettings",
    "IngestSettings",
    "LoggingSettings",
    "PUMPFUN_PROGRAM_ID",
    "ScorerSettings",
    "WatchlistSettings",
    "get_settings",
]
