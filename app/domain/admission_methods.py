# app/domain/admission_methods.py
"""
Способы приёма и коды блоков (A00, D01, ...).

Квоты, ранжирование и движок распределения группируют заявки по ключу
(major_id, нормализованный способ). Нормализация одна на всех, иначе один и тот же
студент окажется в разных корзинах на разных этапах.
"""
from __future__ import annotations

import re

ENTRANCE_EXAM = "entrance_exam"
HIGH_SCHOOL_TRANSCRIPT = "high_school_transcript"
DIRECT_ADMISSION = "direct_admission"

# одна буква + две цифры
BLOCK_CODE_RE = re.compile(r"^[A-Za-z]\d{2}$")

BLOCK_TO_METHOD: dict[str, str] = {
    "A00": ENTRANCE_EXAM,
    "A01": ENTRANCE_EXAM,
    "B00": ENTRANCE_EXAM,
    "C00": ENTRANCE_EXAM,
    "D01": HIGH_SCHOOL_TRANSCRIPT,
    "D07": HIGH_SCHOOL_TRANSCRIPT,
    "D08": HIGH_SCHOOL_TRANSCRIPT,
    "D09": HIGH_SCHOOL_TRANSCRIPT,
    "D10": HIGH_SCHOOL_TRANSCRIPT,
}

# Предметы блока (для подсчёта балла и базовой допустимости)
BLOCK_SUBJECTS: dict[str, tuple[str, ...]] = {
    "A00": ("math", "physics", "chemistry"),
    "A01": ("math", "physics", "english"),
    "B00": ("math", "chemistry", "biology"),
    "C00": ("literature", "history", "geography"),
    "D01": ("math", "literature", "english"),
    "D07": ("math", "chemistry", "english"),
    "D08": ("math", "biology", "english"),
    "D09": ("math", "geography", "english"),
    "D10": ("math", "history", "english"),
}


def is_block_code(raw: str | None) -> bool:
    return bool(raw) and BLOCK_CODE_RE.match(raw) is not None


def normalize_admission_method(raw: str) -> str:
    """
    'A00' → 'entrance_exam', 'd01' → 'high_school_transcript'.
    Неизвестный блок → 'entrance_exam'; не-блок возвращается как есть.
    """
    if not is_block_code(raw):
        return raw
    return BLOCK_TO_METHOD.get(raw.upper(), ENTRANCE_EXAM)


def bucket_key(major_id: str, raw_method: str) -> tuple[str, str]:
    return major_id, normalize_admission_method(raw_method)
