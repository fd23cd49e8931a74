# app/services/ranking.py
from __future__ import annotations

from typing import Iterable

import pandas as pd

from app.domain.admission_methods import normalize_admission_method
from app.domain.models import Application, RankedApplication

_COLUMNS = ["application_id", "student_id", "major_id", "admission_method",
            "priority", "calculated_score"]


def rank_applications(candidates: Iterable[tuple[Application, float]]) -> list[RankedApplication]:
    """
    Ранжирует допущенные заявки внутри корзин (major_id, нормализованный способ).

    Полный порядок: балл ↓, student_id ↑, приоритет ↑. Сортировка стабильная
    (mergesort), так что одинаковый вход всегда даёт одинаковые ранги.
    Ранги плотные: 1, 2, 3, ... даже при равных баллах.
    """
    rows = [
        (app.id, app.student_id, app.major_id, normalize_admission_method(app.admission_method),
         int(app.preference_priority), float(score))
        for app, score in candidates
    ]
    if not rows:
        return []

    df = pd.DataFrame(rows, columns=_COLUMNS)
    df = df.sort_values(
        ["major_id", "admission_method", "calculated_score", "student_id", "priority"],
        ascending=[True, True, False, True, True],
        kind="mergesort",
    ).reset_index(drop=True)
    df["rank"] = df.groupby(["major_id", "admission_method"], sort=False).cumcount() + 1

    return [
        RankedApplication(
            application_id=r.application_id,
            student_id=r.student_id,
            major_id=r.major_id,
            admission_method=r.admission_method,
            priority=int(r.priority),
            calculated_score=float(r.calculated_score),
            rank=int(r.rank),
        )
        for r in df.itertuples(index=False)
    ]
