# repositories/admission_repository.py
from typing import Dict, Iterable, List, Sequence, Tuple

from sqlalchemy import delete
from sqlalchemy.orm import Session

from app.domain.models import (
    AdmissionDecision, AdmissionSession, AdmissionStatus, Application, EmailNotification, EmailStatus,
    Major, Quota, QuotaConditions, RejectionReason, Student
)
from app.infrastructure.db.models import (
    AdmissionSessionModel, ApplicationModel, EmailNotificationModel, MajorModel, SessionQuotaModel, StudentModel
)


class AdmissionRepository:
    def __init__(self, session: Session):
        self._session = session

    # ——— МАППЕРЫ ——————————————————————————————————————————————
    @staticmethod
    def _to_session_model(s: AdmissionSession) -> AdmissionSessionModel:
        return AdmissionSessionModel(id=s.id, name=s.name, year=s.year)

    @staticmethod
    def _to_session_domain(m: AdmissionSessionModel) -> AdmissionSession:
        return AdmissionSession(id=m.id, name=m.name, year=m.year)

    @staticmethod
    def _to_major_model(major: Major) -> MajorModel:
        return MajorModel(id=major.id, code=major.code, name=major.name)

    @staticmethod
    def _to_major_domain(m: MajorModel) -> Major:
        return Major(id=m.id, code=m.code, name=m.name)

    @staticmethod
    def _to_student_model(st: Student) -> StudentModel:
        return StudentModel(
            id=st.id,
            id_card=st.id_card,
            full_name=st.full_name,
            date_of_birth=st.date_of_birth,
            email=st.email,
            priority_points=st.priority_points,
        )

    @staticmethod
    def _to_student_domain(m: StudentModel) -> Student:
        return Student(
            id=m.id,
            id_card=m.id_card,
            full_name=m.full_name,
            date_of_birth=m.date_of_birth,
            email=m.email,
            priority_points=float(m.priority_points or 0),
        )

    @staticmethod
    def _to_quota_model(q: Quota) -> SessionQuotaModel:
        return SessionQuotaModel(
            session_id=q.session_id,
            major_id=q.major_id,
            admission_method=q.admission_method,
            quota=q.quota,
            conditions=q.conditions.to_json(),
        )

    @staticmethod
    def _to_quota_domain(m: SessionQuotaModel) -> Quota:
        return Quota(
            session_id=m.session_id,
            major_id=m.major_id,
            admission_method=m.admission_method,
            quota=m.quota,
            conditions=QuotaConditions.model_validate(m.conditions or {}),
        )

    @staticmethod
    def _to_application_model(app: Application) -> ApplicationModel:
        return ApplicationModel(
            id=app.id,
            session_id=app.session_id,
            student_id=app.student_id,
            major_id=app.major_id,
            admission_method=app.admission_method,
            preference_priority=app.preference_priority,
            subject_scores=dict(app.subject_scores),
            calculated_score=app.calculated_score,
            rank_in_major=app.rank_in_major,
            admission_status=app.admission_status.value,
            rejection_reason=app.rejection_reason.value if app.rejection_reason else None,
        )

    @staticmethod
    def _to_application_domain(m: ApplicationModel) -> Application:
        return Application(
            id=m.id,
            session_id=m.session_id,
            student_id=m.student_id,
            major_id=m.major_id,
            admission_method=m.admission_method,
            preference_priority=m.preference_priority,
            subject_scores=dict(m.subject_scores or {}),
            calculated_score=m.calculated_score,
            rank_in_major=m.rank_in_major,
            admission_status=AdmissionStatus(m.admission_status),
            rejection_reason=RejectionReason(m.rejection_reason) if m.rejection_reason else None,
        )

    @staticmethod
    def _to_notification_model(n: EmailNotification) -> EmailNotificationModel:
        return EmailNotificationModel(
            session_id=n.session_id,
            student_id=n.student_id,
            email=n.email,
            template_name=n.template_name,
            template_data=n.template_data,
            status=n.status.value,
            attempts=n.attempts,
        )

    @staticmethod
    def _to_notification_domain(m: EmailNotificationModel) -> EmailNotification:
        return EmailNotification(
            id=m.id,
            session_id=m.session_id,
            student_id=m.student_id,
            email=m.email,
            template_name=m.template_name,
            template_data=dict(m.template_data or {}),
            status=EmailStatus(m.status),
            attempts=m.attempts,
        )

    # ——— CRUD МЕТОДЫ ——————————————————————————————————————————————

    def add_session(self, s: AdmissionSession) -> None:
        self._session.merge(self._to_session_model(s))

    def add_major(self, major: Major) -> None:
        self._session.merge(self._to_major_model(major))

    def add_student(self, student: Student) -> None:
        self._session.merge(self._to_student_model(student))

    def add_quota(self, quota: Quota) -> None:
        existing = (
            self._session.query(SessionQuotaModel)
            .filter_by(session_id=quota.session_id,
                       major_id=quota.major_id,
                       admission_method=quota.admission_method)
            .one_or_none()
        )
        if existing is None:
            self._session.add(self._to_quota_model(quota))
            return
        existing.quota = quota.quota
        existing.conditions = quota.conditions.to_json()

    def add_application(self, application: Application) -> None:
        self._session.merge(self._to_application_model(application))

    def get_session(self, session_id: str, *, for_update: bool = False) -> AdmissionSession | None:
        """
        for_update=True → SELECT ... FOR UPDATE: второй прогон той же сессии ждёт
        окончания первого (на SQLite достаточно уровня изоляции).
        """
        q = self._session.query(AdmissionSessionModel).filter_by(id=session_id)
        if for_update:
            q = q.with_for_update()
        m = q.one_or_none()
        return self._to_session_domain(m) if m else None

    def get_applications_by_session(self, session_id: str) -> List[Application]:
        rows = (
            self._session.query(ApplicationModel)
            .filter_by(session_id=session_id)
            .order_by(ApplicationModel.student_id.asc(),
                      ApplicationModel.preference_priority.asc(),
                      ApplicationModel.id.asc())
            .all()
        )
        return [self._to_application_domain(m) for m in rows]

    def get_quotas_by_session(self, session_id: str) -> List[Quota]:
        rows = (
            self._session.query(SessionQuotaModel)
            .filter_by(session_id=session_id)
            .order_by(SessionQuotaModel.major_id.asc(), SessionQuotaModel.admission_method.asc())
            .all()
        )
        return [self._to_quota_domain(m) for m in rows]

    def get_priority_points(self, student_ids: Iterable[str]) -> Dict[str, float]:
        ids = list(set(student_ids))
        if not ids:
            return {}
        rows = (
            self._session.query(StudentModel.id, StudentModel.priority_points)
            .filter(StudentModel.id.in_(ids))
            .all()
        )
        return {r.id: float(r.priority_points or 0) for r in rows}

    def save_decisions(self, decisions: Sequence[AdmissionDecision]) -> None:
        """
        Перезаписывает балл, ранг, статус и причину у всех заявок сессии.
        Коммит — на стороне use case (одна транзакция на прогон).
        """
        rows = [
            {
                "id": d.application_id,
                "calculated_score": d.calculated_score,
                "rank_in_major": d.rank,
                "admission_status": d.status.value,
                "rejection_reason": d.rejection_reason.value if d.rejection_reason else None,
            }
            for d in decisions
        ]
        if rows:
            self._session.bulk_update_mappings(ApplicationModel, rows)
        self._session.flush()

    def get_applications_by_student(self, session_id: str, student_id: str) -> List[Application]:
        rows = (
            self._session.query(ApplicationModel)
            .filter_by(session_id=session_id, student_id=student_id)
            .order_by(ApplicationModel.preference_priority.asc())
            .all()
        )
        return [self._to_application_domain(m) for m in rows]

    def get_majors_by_ids(self, ids: Sequence[str]) -> Dict[str, Major]:
        if not ids:
            return {}
        rows = (
            self._session.query(MajorModel)
            .filter(MajorModel.id.in_(list(ids)))
            .all()
        )
        return {m.id: self._to_major_domain(m) for m in rows}

    # ——— Отчёты ——————————————————————————————————————————————————

    def get_admitted_rows(self, session_id: str) -> List[Tuple[Student, Major, Application]]:
        """
        Зачисленные в сессии: направление по коду ↑, балл ↓.
        """
        rows = (
            self._session.query(ApplicationModel, StudentModel, MajorModel)
            .join(StudentModel, ApplicationModel.student_id == StudentModel.id)
            .join(MajorModel, ApplicationModel.major_id == MajorModel.id)
            .filter(ApplicationModel.session_id == session_id,
                    ApplicationModel.admission_status == AdmissionStatus.ADMITTED.value)
            .order_by(MajorModel.code.asc(),
                      ApplicationModel.calculated_score.desc(),
                      ApplicationModel.student_id.asc())
            .all()
        )
        return [
            (self._to_student_domain(st), self._to_major_domain(mj), self._to_application_domain(app))
            for app, st, mj in rows
        ]

    def find_student_by_id_card(self, id_card: str) -> Student | None:
        m = self._session.query(StudentModel).filter_by(id_card=id_card).one_or_none()
        return self._to_student_domain(m) if m else None

    def get_lookup_rows(self, student_id: str) -> List[Tuple[Application, Major, AdmissionSession]]:
        """
        Все заявки студента: свежая сессия первой, внутри — по приоритету.
        """
        rows = (
            self._session.query(ApplicationModel, MajorModel, AdmissionSessionModel)
            .join(MajorModel, ApplicationModel.major_id == MajorModel.id)
            .join(AdmissionSessionModel, ApplicationModel.session_id == AdmissionSessionModel.id)
            .filter(ApplicationModel.student_id == student_id)
            .order_by(AdmissionSessionModel.year.desc(),
                      AdmissionSessionModel.id.asc(),
                      ApplicationModel.preference_priority.asc())
            .all()
        )
        return [
            (self._to_application_domain(app), self._to_major_domain(mj), self._to_session_domain(s))
            for app, mj, s in rows
        ]

    # ——— Письма ——————————————————————————————————————————————————

    def clear_pending_notifications(self, session_id: str) -> None:
        self._session.execute(
            delete(EmailNotificationModel).where(
                EmailNotificationModel.session_id == session_id,
                EmailNotificationModel.status == EmailStatus.PENDING.value,
            )
        )

    def add_notifications_bulk(self, notifications: Iterable[EmailNotification]) -> None:
        objs = [self._to_notification_model(n) for n in notifications]
        if objs:
            self._session.add_all(objs)

    def get_notifications_by_session(self, session_id: str) -> List[EmailNotification]:
        rows = (
            self._session.query(EmailNotificationModel)
            .filter_by(session_id=session_id)
            .order_by(EmailNotificationModel.id.asc())
            .all()
        )
        return [self._to_notification_domain(m) for m in rows]

    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()
