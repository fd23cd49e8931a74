"""
Telegram-бот: публичный поиск результата зачисления по номеру удостоверения.
"""
import asyncio
from textwrap import dedent
from typing import List

from aiogram import Bot, Dispatcher, F
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import Message
from sqlalchemy.orm import sessionmaker

from app.application.use_cases.lookup_result import LookupResultUseCase
from app.config.logger import logger
from app.domain.models import ResultLookup
from app.infrastructure.db.repositories.admission_repository import AdmissionRepository
from app.infrastructure.db.session import create_session_factory

_Session: sessionmaker | None = None

_STATUS_LINE = {
    "accepted": "🟢 *Зачислен*",
    "rejected": "🔴 Не зачислен",
    "pending": "🟡 Решение ещё не принято",
}


def split_message(text: str, max_len: int = 4000) -> List[str]:
    parts = []
    while len(text) > max_len:
        split_idx = text.rfind('\n', 0, max_len)
        if split_idx == -1:
            split_idx = max_len
        parts.append(text[:split_idx].strip())
        text = text[split_idx:].strip()
    if text:
        parts.append(text)
    return parts


def format_lookup(id_card: str, lookup: ResultLookup | None) -> str:
    if lookup is None:
        return f"По удостоверению `{id_card}` результатов не найдено 🤷‍♂️"

    lines = [
        f"👤 *{lookup.full_name}*  (`{lookup.id_card}`)",
        f"📅 {lookup.session_name}",
        "",
        _STATUS_LINE.get(lookup.status, lookup.status),
        f"• Направление: `{lookup.program_code}`  *{lookup.program_name}*",
        f"• Способ приёма: {lookup.admission_method}",
        f"• Балл: *{lookup.score:.2f}*",
    ]
    if lookup.ranking is not None:
        lines.append(f"• Место в рейтинге: {lookup.ranking}")
    return "\n".join(lines)


def _extract_id_card(text: str | None) -> str:
    parts = (text or "").split()
    return parts[0] if parts else ""


async def start_cmd(msg: Message):
    await msg.answer(
        dedent("""
        Привет! Отправь мне **номер удостоверения личности** — покажу результат зачисления.

        /result <номер> — то же самое командой
        """).strip(),
        parse_mode="Markdown"
    )


async def _reply_lookup(msg: Message, id_card: str):
    if not id_card:
        await msg.answer("Укажите номер удостоверения, например: `/result 001234567890`",
                         parse_mode="Markdown")
        return

    session = _Session()
    repo = AdmissionRepository(session)
    try:
        lookup = LookupResultUseCase(repo).execute(id_card)
        for part in split_message(format_lookup(id_card, lookup)):
            try:
                await msg.answer(part, parse_mode="Markdown")
            except TelegramBadRequest:
                await msg.answer("⚠️ Не удалось отправить сообщение (возможно, проблема с Markdown).")
                break
    except Exception as exc:
        logger.exception("TG-handler error: %s", exc)
        await msg.answer("Произошла ошибка 😥")
    finally:
        session.close()


async def result_cmd(msg: Message, command: CommandObject):
    await _reply_lookup(msg, _extract_id_card(command.args))


async def id_card_handler(msg: Message):
    await _reply_lookup(msg, _extract_id_card(msg.text))


def start_bot(bot_token) -> None:
    global _Session
    _Session = create_session_factory()

    bot = Bot(bot_token)
    dp = Dispatcher()

    dp.message.register(start_cmd, CommandStart())
    dp.message.register(result_cmd, Command("result"))
    dp.message.register(id_card_handler, F.text.regexp(r"^\s*\d+\s*$"))

    logger.info("Telegram-бот запущен.")
    asyncio.run(dp.start_polling(bot))
