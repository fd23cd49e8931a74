from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class AdmissionSessionModel(Base):
    __tablename__ = 'admission_sessions'
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    year = Column(Integer, nullable=False)


class MajorModel(Base):
    __tablename__ = 'majors'
    id = Column(String, primary_key=True)
    code = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=False)


class StudentModel(Base):
    __tablename__ = 'students'
    id = Column(String, primary_key=True)
    id_card = Column(String, nullable=False, unique=True)
    full_name = Column(String, nullable=False)
    date_of_birth = Column(Date, nullable=True)
    email = Column(String, nullable=True)
    priority_points = Column(Float, nullable=False, default=0.0)

    applications = relationship('ApplicationModel', back_populates='student')


class SessionQuotaModel(Base):
    __tablename__ = 'session_quotas'
    __table_args__ = (
        UniqueConstraint('session_id', 'major_id', 'admission_method', name='uq_quota_session_major_method'),
    )
    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String, ForeignKey('admission_sessions.id'), nullable=False, index=True)
    major_id = Column(String, ForeignKey('majors.id'), nullable=False)
    admission_method = Column(String, nullable=False)
    quota = Column(Integer, nullable=False)
    conditions = Column(JSON, nullable=True)

    major = relationship('MajorModel')


class ApplicationModel(Base):
    __tablename__ = 'applications'
    # естественный ключ: один приоритет — одна заявка
    __table_args__ = (
        UniqueConstraint('student_id', 'session_id', 'preference_priority', name='uq_application_student_priority'),
    )
    id = Column(String, primary_key=True)
    session_id = Column(String, ForeignKey('admission_sessions.id'), nullable=False, index=True)
    student_id = Column(String, ForeignKey('students.id'), nullable=False)
    major_id = Column(String, ForeignKey('majors.id'), nullable=False)
    admission_method = Column(String, nullable=False)
    preference_priority = Column(Integer, nullable=False)
    subject_scores = Column(JSON, nullable=False, default=dict)
    calculated_score = Column(Float, nullable=True)
    rank_in_major = Column(Integer, nullable=True)
    admission_status = Column(String, nullable=False, default='pending')
    rejection_reason = Column(String, nullable=True)

    student = relationship('StudentModel', back_populates='applications')
    major = relationship('MajorModel')
    session = relationship('AdmissionSessionModel')


# ────────── Очередь писем ────────────────────────────────────────────────
class EmailNotificationModel(Base):
    """
    Исходящее письмо с результатом; отправляет отдельный воркер.
    """
    __tablename__ = "email_notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String, ForeignKey("admission_sessions.id"), nullable=False, index=True)
    student_id = Column(String, ForeignKey("students.id"), nullable=False)
    email = Column(String, nullable=False)
    template_name = Column(String, nullable=False)
    template_data = Column(JSON, nullable=False)
    status = Column(String, nullable=False, default="pending")
    attempts = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    student = relationship("StudentModel")
