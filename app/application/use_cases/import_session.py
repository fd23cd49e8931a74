from __future__ import annotations

import datetime
from typing import Any, Mapping

from sqlalchemy.exc import SQLAlchemyError

from app.config.logger import logger
from app.domain.models import (
    AdmissionSession, Application, Major, Quota, QuotaConditions, Student
)
from app.infrastructure.db.repositories.admission_repository import AdmissionRepository


class ImportSessionSnapshotUseCase:
    """
    Загружает сессию целиком из JSON:
        {"session": {...}, "majors": [...], "students": [...],
         "quotas": [...], "applications": [...]}
    Существующие записи с теми же ключами перезаписываются. Один коммит в конце.
    """

    def __init__(self, repo: AdmissionRepository):
        self._repo = repo

    @staticmethod
    def _parse_date(raw: str | None) -> datetime.date | None:
        return datetime.date.fromisoformat(raw) if raw else None

    def execute(self, payload: Mapping[str, Any]) -> dict[str, int]:
        s = payload["session"]
        session = AdmissionSession(id=s["id"], name=s["name"], year=int(s["year"]))
        counts = {"majors": 0, "students": 0, "quotas": 0, "applications": 0}

        # некорректная квота отклоняется до любой записи
        for q in payload.get("quotas", []):
            seats = q["quota"]
            if isinstance(seats, bool) or not isinstance(seats, int) or seats <= 0:
                raise ValueError(
                    f"Quota {q['major_id']}/{q['admission_method']}: "
                    f"capacity must be a positive integer, got {seats!r}"
                )

        try:
            self._repo.add_session(session)

            for m in payload.get("majors", []):
                self._repo.add_major(Major(id=m["id"], code=m["code"], name=m["name"]))
                counts["majors"] += 1

            for st in payload.get("students", []):
                self._repo.add_student(Student(
                    id=st["id"],
                    id_card=st["id_card"],
                    full_name=st["full_name"],
                    date_of_birth=self._parse_date(st.get("date_of_birth")),
                    email=st.get("email"),
                    priority_points=float(st.get("priority_points", 0)),
                ))
                counts["students"] += 1

            for q in payload.get("quotas", []):
                self._repo.add_quota(Quota(
                    session_id=session.id,
                    major_id=q["major_id"],
                    admission_method=q["admission_method"],
                    quota=q["quota"],
                    conditions=QuotaConditions.model_validate(q.get("conditions") or {}),
                ))
                counts["quotas"] += 1

            for a in payload.get("applications", []):
                self._repo.add_application(Application(
                    id=a["id"],
                    session_id=session.id,
                    student_id=a["student_id"],
                    major_id=a["major_id"],
                    admission_method=a["admission_method"],
                    preference_priority=int(a["preference_priority"]),
                    subject_scores=dict(a.get("subject_scores") or {}),
                ))
                counts["applications"] += 1

            self._repo.commit()
        except SQLAlchemyError as db_err:
            logger.exception("Ошибка транзакции, выполняем rollback: %s", db_err)
            self._repo.rollback()
            raise

        logger.info("Импорт сессии %s: %s", session.id, counts)
        return counts
