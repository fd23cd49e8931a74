from __future__ import annotations

from app.domain.models import AdmissionStatus, ResultLookup
from app.infrastructure.db.repositories.admission_repository import AdmissionRepository

_PUBLIC_STATUS = {
    AdmissionStatus.ADMITTED: "accepted",
    AdmissionStatus.NOT_ADMITTED: "rejected",
    AdmissionStatus.PENDING: "pending",
}


class LookupResultUseCase:
    """
    Публичный поиск результата по номеру удостоверения личности.
    Берётся последняя сессия студента; в ней — зачисленная заявка,
    а если её нет — заявка первого приоритета.
    """

    def __init__(self, repo: AdmissionRepository):
        self._repo = repo

    def execute(self, id_card: str) -> ResultLookup | None:
        student = self._repo.find_student_by_id_card(id_card.strip())
        if student is None:
            return None

        rows = self._repo.get_lookup_rows(student.id)
        if not rows:
            return None

        session_id = rows[0][2].id
        in_session = [r for r in rows if r[2].id == session_id]
        app, major, session = next(
            (r for r in in_session if r[0].admission_status is AdmissionStatus.ADMITTED),
            in_session[0],
        )

        return ResultLookup(
            full_name=student.full_name,
            id_card=student.id_card,
            date_of_birth=student.date_of_birth.isoformat() if student.date_of_birth else None,
            program_code=major.code,
            program_name=major.name,
            session_name=session.name,
            status=_PUBLIC_STATUS[app.admission_status],
            score=float(app.calculated_score or 0),
            ranking=app.rank_in_major,
            admission_method=app.admission_method,
        )
