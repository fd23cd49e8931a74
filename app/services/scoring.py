# app/services/scoring.py
"""
Допустимость и конкурсный балл заявки.

Ядро фильтра вызывает любую функцию вида
    evaluator(subject_scores, admission_method, conditions, priority_points) -> Evaluation
Здесь — реализация по умолчанию по правилам приёмной комиссии.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Mapping

from app.domain.admission_methods import (
    BLOCK_SUBJECTS,
    DIRECT_ADMISSION,
    ENTRANCE_EXAM,
    HIGH_SCHOOL_TRANSCRIPT,
    is_block_code,
)
from app.domain.models import Evaluation, QuotaConditions

# Порог, начиная с которого льготный балл уменьшается (шкала 30)
PRIORITY_REDUCTION_THRESHOLD = 22.5
MAX_BLOCK_TOTAL = 30.0


@dataclass(frozen=True)
class MethodConfig:
    formula: str  # 'sum' | 'average' | 'weighted'
    required_subjects: tuple[str, ...]


ADMISSION_METHODS: dict[str, MethodConfig] = {
    ENTRANCE_EXAM: MethodConfig("sum", ("math", "physics", "chemistry")),
    HIGH_SCHOOL_TRANSCRIPT: MethodConfig("average", ("math", "literature", "english")),
    DIRECT_ADMISSION: MethodConfig("weighted", ("math", "physics")),
}

Evaluator = Callable[[Mapping[str, float], str, QuotaConditions | None, float], Evaluation]


def _has_score(scores: Mapping[str, float], subject: str) -> bool:
    value = scores.get(subject)
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def required_subjects(admission_method: str) -> tuple[str, ...] | None:
    """Предметы блока или способа; None — способ неизвестен."""
    if is_block_code(admission_method):
        return BLOCK_SUBJECTS.get(admission_method.upper())
    cfg = ADMISSION_METHODS.get(admission_method)
    return cfg.required_subjects if cfg else None


def base_score(scores: Mapping[str, float], admission_method: str) -> float:
    """
    Балл без льгот. Блок — сумма трёх предметов; способ — по своей формуле.
    """
    if is_block_code(admission_method):
        return sum(float(scores[s]) for s in BLOCK_SUBJECTS[admission_method.upper()])

    cfg = ADMISSION_METHODS[admission_method]
    if cfg.formula == "sum":
        return sum(float(scores[s]) for s in cfg.required_subjects)
    if cfg.formula == "average":
        return sum(float(scores[s]) for s in cfg.required_subjects) / len(cfg.required_subjects)
    if cfg.formula == "weighted":
        return float(scores["math"]) * 2 + float(scores["physics"]) * 1.5
    raise ValueError(f"Unknown formula: {cfg.formula}")


def effective_priority_bonus(base: float, priority_points: float,
                             conditions: QuotaConditions | None) -> float:
    bonus = float(priority_points or 0)
    pb = conditions.priority_bonus if conditions else None
    if pb is not None:
        if not pb.enabled:
            return 0.0
        if pb.max_bonus is not None:
            bonus = min(bonus, pb.max_bonus)
    # Высокий балл → льгота уменьшается пропорционально (30 - балл) / 7.5
    if base >= PRIORITY_REDUCTION_THRESHOLD:
        bonus = max(0.0, (MAX_BLOCK_TOTAL - base) / 7.5 * bonus)
    return bonus


def _meets_conditions(scores: Mapping[str, float], base: float,
                      conditions: QuotaConditions | None) -> bool:
    if conditions is None:
        return True
    if not all(_has_score(scores, s) for s in conditions.required_subjects):
        return False
    if conditions.subject_combinations and not any(
            all(_has_score(scores, s) for s in combo)
            for combo in conditions.subject_combinations
    ):
        return False
    for subject, minimum in conditions.min_subject_scores.items():
        if not _has_score(scores, subject) or float(scores[subject]) < minimum:
            return False
    if conditions.min_total_score is not None and base < conditions.min_total_score:
        return False
    return True


def evaluate(subject_scores: Mapping[str, float] | None,
             admission_method: str,
             conditions: QuotaConditions | None = None,
             priority_points: float = 0.0) -> Evaluation:
    scores = subject_scores or {}
    subjects = required_subjects(admission_method)
    if subjects is None or not all(_has_score(scores, s) for s in subjects):
        return Evaluation(basic_eligible=False, quota_eligible=False, score=0.0)

    base = base_score(scores, admission_method)
    if not _meets_conditions(scores, base, conditions):
        return Evaluation(basic_eligible=True, quota_eligible=False, score=0.0)

    bonus = effective_priority_bonus(base, priority_points, conditions)
    return Evaluation(basic_eligible=True, quota_eligible=True, score=round(base + bonus, 2))
