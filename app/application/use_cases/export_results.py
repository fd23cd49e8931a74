from __future__ import annotations

import io
from dataclasses import asdict
from typing import List

import pandas as pd
from openpyxl.utils import get_column_letter

from app.config.logger import logger
from app.domain.errors import SessionNotFoundError
from app.domain.models import ResultRow
from app.infrastructure.db.repositories.admission_repository import AdmissionRepository

SHEET_NAME = "Admission Results"

# колонка → (заголовок, ширина)
_COLUMNS = {
    "student_id": ("Student ID", 38),
    "id_card": ("ID Card", 15),
    "full_name": ("Full Name", 30),
    "major_code": ("Major Code", 12),
    "major_name": ("Major Name", 40),
    "admission_method": ("Admission Method", 20),
    "final_score": ("Final Score", 12),
    "preference": ("Preference", 12),
}


class ExportAdmissionResultsUseCase:
    """
    Excel со списком зачисленных: направление по коду ↑, балл ↓.
    """

    def __init__(self, repo: AdmissionRepository):
        self._repo = repo

    def result_rows(self, session_id: str) -> List[ResultRow]:
        return [
            ResultRow(
                student_id=student.id,
                id_card=student.id_card,
                full_name=student.full_name,
                major_code=major.code,
                major_name=major.name,
                admission_method=app.admission_method,
                final_score=float(app.calculated_score or 0),
                preference=app.preference_priority,
            )
            for student, major, app in self._repo.get_admitted_rows(session_id)
        ]

    def execute(self, session_id: str) -> bytes:
        if self._repo.get_session(session_id) is None:
            raise SessionNotFoundError(session_id)

        rows = self.result_rows(session_id)
        df = pd.DataFrame([asdict(r) for r in rows], columns=list(_COLUMNS))
        df = df.rename(columns={k: title for k, (title, _) in _COLUMNS.items()})

        buf = io.BytesIO()
        with pd.ExcelWriter(buf, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name=SHEET_NAME, index=False)
            ws = writer.sheets[SHEET_NAME]
            for i, (_, width) in enumerate(_COLUMNS.values(), start=1):
                ws.column_dimensions[get_column_letter(i)].width = width

        logger.info("Выгрузка сессии %s: %d зачисленных", session_id, len(rows))
        return buf.getvalue()
