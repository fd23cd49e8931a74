from __future__ import annotations

from app.domain.errors import SessionNotFoundError
from app.domain.models import Application
from app.infrastructure.db.repositories.admission_repository import AdmissionRepository


class GetFilterResultsUseCase:
    """
    Сохранённые решения сессии (статус + причина отказа по каждой заявке).
    Если задан student_id — только его заявки.
    """

    def __init__(self, repo: AdmissionRepository):
        self._repo = repo

    def execute(self, session_id: str, student_id: str | None = None) -> list[Application]:
        if self._repo.get_session(session_id) is None:
            raise SessionNotFoundError(session_id)
        if student_id is not None:
            return self._repo.get_applications_by_student(session_id, student_id)
        return self._repo.get_applications_by_session(session_id)
