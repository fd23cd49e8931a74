from __future__ import annotations

from typing import List

from sqlalchemy.exc import SQLAlchemyError

from app.config.logger import logger
from app.domain.errors import SessionNotFoundError
from app.domain.models import EmailNotification
from app.infrastructure.db.repositories.admission_repository import AdmissionRepository

TEMPLATE_NAME = "admission-result"


class QueueAdmissionNotificationsUseCase:
    """
    Ставит в очередь по одному письму на каждого зачисленного студента сессии.
    Старые неотправленные письма этой сессии заменяются; решения не меняются.
    """

    def __init__(self, repo: AdmissionRepository):
        self._repo = repo

    def execute(self, session_id: str) -> int:
        if self._repo.get_session(session_id) is None:
            raise SessionNotFoundError(session_id)

        notifications: List[EmailNotification] = []
        skipped = 0
        for student, major, app in self._repo.get_admitted_rows(session_id):
            if not student.email:
                logger.warning("У студента %s нет email — письмо пропущено", student.id)
                skipped += 1
                continue
            notifications.append(EmailNotification(
                session_id=session_id,
                student_id=student.id,
                email=student.email,
                template_name=TEMPLATE_NAME,
                template_data={
                    "studentName": student.full_name,
                    "majorName": major.name,
                    "admissionMethod": app.admission_method,
                    "finalScore": float(app.calculated_score or 0),
                    "preference": app.preference_priority,
                    "isAdmitted": True,
                },
            ))

        try:
            self._repo.clear_pending_notifications(session_id)
            self._repo.add_notifications_bulk(notifications)
            self._repo.commit()
        except SQLAlchemyError as db_err:
            logger.exception("Ошибка транзакции, выполняем rollback: %s", db_err)
            self._repo.rollback()
            raise

        logger.info("Писем в очереди: %d (без email: %d)", len(notifications), skipped)
        return len(notifications)
