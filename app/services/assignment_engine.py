# app/services/assignment_engine.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

import numpy as np

from app.config.logger import logger
from app.domain.admission_methods import bucket_key
from app.domain.errors import ComputationError
from app.domain.models import Quota, RankedApplication

BucketKey = Tuple[str, str]  # (major_id, нормализованный способ)


@dataclass
class AssignmentOutcome:
    """
    admitted: student_id → индекс зачисленной заявки в arena
    rejected_ids: application_id всех отклонённых по квоте
    """
    arena: List[RankedApplication]
    admitted: Dict[str, int] = field(default_factory=dict)
    rejected_ids: set[str] = field(default_factory=set)
    passes: int = 0

    def admitted_application_ids(self) -> set[str]:
        return {self.arena[i].application_id for i in self.admitted.values()}


class StableAssignmentEngine:
    """
    Устойчивое распределение мест (отложенное принятие, как у Гейла–Шепли):
      • каждый студент «держит» лучшую по приоритету неотклонённую заявку;
      • корзина (направление, способ) оставляет не больше quota предложений,
        лишние — с худшим баллом — отклоняются;
      • повторяем, пока проход не даст ни одного нового отклонения.

    Тай-брейк при равном балле: меньший student_id (сравнение строк) выигрывает место.
    Неизвестная корзина — ёмкость 0.
    """

    def __init__(self, ranked: Sequence[RankedApplication], capacities: Mapping[BucketKey, int]):
        self._arena: List[RankedApplication] = list(ranked)
        self._capacities = dict(capacities)

        n = len(self._arena)
        self._score = np.fromiter((a.calculated_score for a in self._arena), dtype=np.float64, count=n)
        self._rejected = np.zeros(n, dtype=bool)

        # студент → индексы его заявок по возрастанию приоритета; курсор — текущая лучшая
        prefs: Dict[str, List[int]] = {}
        for idx, app in enumerate(self._arena):
            prefs.setdefault(app.student_id, []).append(idx)
        for idxs in prefs.values():
            idxs.sort(key=lambda i: (self._arena[i].priority, self._arena[i].application_id))
        self._prefs = {sid: prefs[sid] for sid in sorted(prefs)}
        self._cursor: Dict[str, int] = {sid: 0 for sid in self._prefs}

    def _bucket(self, idx: int) -> BucketKey:
        app = self._arena[idx]
        return app.major_id, app.admission_method

    def _active_proposal(self, student_id: str) -> int | None:
        pos = self._cursor[student_id]
        idxs = self._prefs[student_id]
        if pos >= len(idxs):
            return None
        idx = idxs[pos]
        if self._rejected[idx]:
            raise ComputationError(
                f"Student {student_id} proposes already rejected application "
                f"{self._arena[idx].application_id}"
            )
        return idx

    def _single_pass(self) -> int:
        proposals: Dict[BucketKey, List[int]] = {}
        for sid in self._prefs:
            idx = self._active_proposal(sid)
            if idx is not None:
                proposals.setdefault(self._bucket(idx), []).append(idx)

        new_rejections = 0
        for key, idxs in proposals.items():
            cap = max(int(self._capacities.get(key, 0)), 0)
            if len(idxs) <= cap:
                continue
            idxs.sort(key=lambda i: (-self._score[i], self._arena[i].student_id))
            for idx in idxs[cap:]:
                self._rejected[idx] = True
                self._cursor[self._arena[idx].student_id] += 1
                new_rejections += 1
        return new_rejections

    def run(self) -> AssignmentOutcome:
        # каждый проход либо отклоняет хотя бы одну заявку, либо последний
        max_passes = len(self._arena) + 1
        passes = 0
        while True:
            passes += 1
            if passes > max_passes:
                raise ComputationError(f"No fixed point after {max_passes} passes")
            rejected = self._single_pass()
            logger.debug("   проход %d: отклонено %d", passes, rejected)
            if rejected == 0:
                break

        outcome = AssignmentOutcome(arena=self._arena, passes=passes)
        for sid in self._prefs:
            idx = self._active_proposal(sid)
            if idx is not None:
                outcome.admitted[sid] = idx
        outcome.rejected_ids = {
            self._arena[i].application_id for i in np.flatnonzero(self._rejected)
        }
        logger.info("Распределение: %d проходов, зачислено %d, отклонено по квоте %d",
                    passes, len(outcome.admitted), int(self._rejected.sum()))
        return outcome


def build_capacities(quotas: Iterable[Quota]) -> Dict[BucketKey, int]:
    """
    Ёмкости корзин по квотам сессии. Квоты, совпавшие после нормализации
    (например A00 и A01 одного направления), суммируются.
    """
    caps: Dict[BucketKey, int] = {}
    for q in quotas:
        key = bucket_key(q.major_id, q.admission_method)
        if key in caps:
            logger.warning("Квоты %s/%s сливаются в корзину %s — места суммируются",
                           q.major_id, q.admission_method, key)
        caps[key] = caps.get(key, 0) + int(q.quota)
    return caps
