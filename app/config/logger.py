# app/config/logger.py
import logging
import sys

from app.config.config import settings

LOGGER_NAME = "admission_filter"
LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"


def _resolve_level(raw: str | None, env: str) -> int:
    if raw:
        level = logging.getLevelName(raw.upper())
        if isinstance(level, int):
            return level
        raise ValueError(f"Unknown LOG_LEVEL: {raw!r}")
    return logging.DEBUG if env == "dev" else logging.INFO


def configure_logger(name: str = LOGGER_NAME, level: int = logging.INFO) -> logging.Logger:
    """
    Логгер приложения со своим stdout-хендлером. Повторный вызов
    (перезагрузка модуля в тестах, второй скрипт в том же процессе)
    только меняет уровень, второй хендлер не добавляется.
    """
    log = logging.getLogger(name)
    log.setLevel(level)

    handler = next((h for h in log.handlers if getattr(h, "_admission_filter", False)), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler._admission_filter = True
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        log.addHandler(handler)
    handler.setLevel(level)
    return log


LOG_LEVEL = _resolve_level(settings.log_level, settings.env)
logger = configure_logger(LOGGER_NAME, LOG_LEVEL)

# aiogram пишет каждое обновление на INFO
if settings.env != "dev":
    logging.getLogger("aiogram.event").setLevel(logging.WARNING)
