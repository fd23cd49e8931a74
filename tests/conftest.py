"""Shared fixtures: in-memory database, repository and a small session builder."""

from __future__ import annotations

from typing import Mapping

import pytest
from sqlalchemy.orm import sessionmaker

from app.domain.models import (
    AdmissionSession, Application, Evaluation, Major, Quota, QuotaConditions, RankedApplication, Student
)
from app.infrastructure.db.repositories.admission_repository import AdmissionRepository
from app.infrastructure.db.session import create_db_engine

SESSION_ID = "s-2024"


@pytest.fixture()
def db_session():
    """Fresh in-memory SQLite database per test."""
    engine = create_db_engine("sqlite://")
    session = sessionmaker(bind=engine, future=True)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture()
def repo(db_session) -> AdmissionRepository:
    return AdmissionRepository(db_session)


def total_evaluator(scores: Mapping[str, float], method: str,
                    conditions: QuotaConditions | None, points: float) -> Evaluation:
    """Score is taken as-is from scores['total']; flags 'basic'/'quota' switch eligibility off."""
    return Evaluation(
        basic_eligible=bool(scores.get("basic", True)),
        quota_eligible=bool(scores.get("quota", True)),
        score=float(scores.get("total", 0)),
    )


def ranked(app_id: str, student: str, major: str, priority: int, score: float,
           method: str = "entrance_exam", rank: int = 1) -> RankedApplication:
    return RankedApplication(
        application_id=app_id,
        student_id=student,
        major_id=major,
        admission_method=method,
        priority=priority,
        calculated_score=score,
        rank=rank,
    )


class SessionBuilder:
    """Seeds one admission session through the repository."""

    def __init__(self, repo: AdmissionRepository, session_id: str = SESSION_ID):
        self.repo = repo
        self.session_id = session_id
        repo.add_session(AdmissionSession(id=session_id, name="Tuyển sinh 2024 - Đợt 1", year=2024))

    def major(self, major_id: str, code: str | None = None, name: str | None = None) -> "SessionBuilder":
        self.repo.add_major(Major(id=major_id, code=code or major_id.upper(), name=name or f"Major {major_id}"))
        return self

    def quota(self, major_id: str, seats: int, method: str = "entrance_exam",
              conditions: dict | None = None) -> "SessionBuilder":
        self.repo.add_quota(Quota(
            session_id=self.session_id,
            major_id=major_id,
            admission_method=method,
            quota=seats,
            conditions=QuotaConditions.model_validate(conditions or {}),
        ))
        return self

    def student(self, student_id: str, email: str | None = None,
                priority_points: float = 0.0, id_card: str | None = None) -> "SessionBuilder":
        self.repo.add_student(Student(
            id=student_id,
            id_card=id_card or f"0012345678{student_id[-2:]}",
            full_name=f"Student {student_id}",
            email=email,
            priority_points=priority_points,
        ))
        return self

    def apply(self, app_id: str, student_id: str, major_id: str, priority: int,
              scores: dict, method: str = "entrance_exam") -> "SessionBuilder":
        self.repo.add_application(Application(
            id=app_id,
            session_id=self.session_id,
            student_id=student_id,
            major_id=major_id,
            admission_method=method,
            preference_priority=priority,
            subject_scores=scores,
        ))
        return self

    def commit(self) -> "SessionBuilder":
        self.repo.commit()
        return self


@pytest.fixture()
def builder(repo) -> SessionBuilder:
    return SessionBuilder(repo)


@pytest.fixture()
def three_student_session(builder) -> SessionBuilder:
    """
    2 majors × 1 seat; S1=90, S2=80 prefer M1 then M2; S3=70 prefers M2 then M1.
    """
    builder.major("m1", "CNTT").major("m2", "KTPM")
    builder.quota("m1", 1).quota("m2", 1)
    for sid, email in (("st01", "a@example.com"), ("st02", "b@example.com"), ("st03", None)):
        builder.student(sid, email=email)
    builder.apply("a1", "st01", "m1", 1, {"total": 90}).apply("a2", "st01", "m2", 2, {"total": 90})
    builder.apply("b1", "st02", "m1", 1, {"total": 80}).apply("b2", "st02", "m2", 2, {"total": 80})
    builder.apply("c1", "st03", "m2", 1, {"total": 70}).apply("c2", "st03", "m1", 2, {"total": 70})
    return builder.commit()
