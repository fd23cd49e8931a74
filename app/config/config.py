# app/config/config.py
from pathlib import Path
from typing import Any, Literal
from zoneinfo import ZoneInfo

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parents[2]
_DEFAULT_DATA_DIR = _PROJECT_ROOT / "data"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        populate_by_name=True,
        extra="ignore",
    )

    # окружение
    env: str = Field("dev", alias="ENV")
    # пусто → DEBUG в dev, INFO в остальных окружениях
    log_level: str | None = Field(None, alias="LOG_LEVEL")
    data_dir: Path = Field(_DEFAULT_DATA_DIR, alias="DATA_DIR")

    # таймзона
    timezone_name: str = Field("UTC", alias="TIMEZONE")

    bot_token: str = Field("BOT_TOKEN", alias="BOT_TOKEN")

    # БД
    db_url: str | None = Field(None, alias="DATABASE_URL")
    db_filename: str = Field("admission.db", alias="DB_FILENAME")
    db_echo: bool = Field(False, alias="DB_ECHO")
    # Прогоны фильтра одной сессии не должны пересекаться: читаем снапшот и пишем решения
    # в одной транзакции с этим уровнем изоляции. REPEATABLE READ / READ COMMITTED только
    # для серверных БД (PostgreSQL, MySQL); SQLite принимает лишь SERIALIZABLE.
    db_isolation_level: Literal[
        "SERIALIZABLE", "REPEATABLE READ", "READ COMMITTED"
    ] = Field("SERIALIZABLE", alias="DB_ISOLATION_LEVEL")

    # ───────────────── Виртуальный фильтр ─────────────────────────────
    # Ограничение на весь прогон (секунды). None или 0 — без ограничения.
    # Проверяется перед фазой записи: прогон, вышедший за лимит, ничего не пишет.
    filter_timeout_seconds: float | None = Field(None, alias="FILTER_TIMEOUT_SECONDS")

    # Куда export_results.py кладёт xlsx по умолчанию
    export_dir: Path | None = Field(None, alias="EXPORT_DIR")

    @field_validator("data_dir", mode="before")
    @classmethod
    def _expand_data_dir(cls, raw: Any) -> Path:
        return Path(raw or _DEFAULT_DATA_DIR).expanduser().resolve()

    @model_validator(mode="after")
    def _check_isolation_for_backend(self) -> "Settings":
        if self.database_url.startswith("sqlite") and self.db_isolation_level != "SERIALIZABLE":
            raise ValueError(
                f"DB_ISOLATION_LEVEL={self.db_isolation_level} is not supported by SQLite; "
                f"use SERIALIZABLE or set DATABASE_URL to a server database"
            )
        return self

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone_name)

    @property
    def database_url(self) -> str:
        return self.db_url or f"sqlite:///{self.data_dir / self.db_filename}"

    @property
    def export_path(self) -> Path:
        return self.export_dir or self.data_dir / "exports"


settings = Settings()
