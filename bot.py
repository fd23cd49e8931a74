#!/usr/bin/env python3
from app.config.config import settings
from app.config.logger import logger
from app.presentation.bot import start_bot


if __name__ == "__main__":
    logger.info("=== бот поиска результатов старт ===")
    start_bot(settings.bot_token)
