import datetime
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AdmissionStatus(str, Enum):
    PENDING = "pending"
    ADMITTED = "admitted"
    NOT_ADMITTED = "not_admitted"


class RejectionReason(str, Enum):
    NOT_ELIGIBLE_BASIC = "not_eligible_basic"
    NOT_ELIGIBLE_QUOTA = "not_eligible_quota"
    ADMITTED_HIGHER_PRIORITY = "admitted_higher_priority"
    BELOW_QUOTA_CUTOFF = "below_quota_cutoff"


class EmailStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


# ────────── Условия квоты ────────────────────────────────────────────────
class PriorityBonus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    enabled: bool = True
    max_bonus: float | None = Field(None, alias="maxBonus")


class QuotaConditions(BaseModel):
    """
    Условия допуска к квоте. В БД лежит JSON в camelCase:
        {"minTotalScore": 18, "minSubjectScores": {"math": 5},
         "subjectCombinations": [["math", "physics", "chemistry"]],
         "priorityBonus": {"enabled": true, "maxBonus": 2}}
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    min_total_score: float | None = Field(None, alias="minTotalScore")
    min_subject_scores: dict[str, float] = Field(default_factory=dict, alias="minSubjectScores")
    required_subjects: list[str] = Field(default_factory=list, alias="requiredSubjects")
    subject_combinations: list[list[str]] = Field(default_factory=list, alias="subjectCombinations")
    priority_bonus: PriorityBonus | None = Field(None, alias="priorityBonus")

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# ────────── Справочники ─────────────────────────────────────────────────
@dataclass
class AdmissionSession:
    """
    Приёмная кампания (тур). Заявки, квоты и решения живут в её рамках.
    """
    id: str
    name: str
    year: int


@dataclass
class Major:
    id: str
    code: str  # 'CNTT'
    name: str  # 'Công nghệ thông tin'


@dataclass
class Student:
    """
    Абитуриент.
    """
    id: str
    id_card: str  # номер удостоверения личности, по нему публичный поиск
    full_name: str
    date_of_birth: datetime.date | None = None
    email: str | None = None
    priority_points: float = 0.0  # льготные баллы


@dataclass
class Quota:
    """
    Число мест для пары (направление, способ приёма) в сессии.
    """
    session_id: str
    major_id: str
    admission_method: str  # как задано в квоте: 'entrance_exam' или блок 'A00'
    quota: int
    conditions: QuotaConditions = field(default_factory=QuotaConditions)


@dataclass
class Application:
    """
    Заявка абитуриента на направление с данным приоритетом.
    (student_id, session_id, preference_priority) — естественный ключ.
    """
    id: str
    session_id: str
    student_id: str
    major_id: str
    admission_method: str  # сырой код: способ или блок
    preference_priority: int  # 1 — самый желанный
    subject_scores: dict[str, float] = field(default_factory=dict)
    calculated_score: float | None = None
    rank_in_major: int | None = None
    admission_status: AdmissionStatus = AdmissionStatus.PENDING
    rejection_reason: RejectionReason | None = None


# ────────── Виртуальный фильтр ──────────────────────────────────────────
@dataclass(frozen=True)
class Evaluation:
    basic_eligible: bool
    quota_eligible: bool
    score: float

    @property
    def eligible(self) -> bool:
        return self.basic_eligible and self.quota_eligible


@dataclass(frozen=True)
class RankedApplication:
    """
    Допущенная заявка с местом в своей корзине (major_id, нормализованный способ).
    """
    application_id: str
    student_id: str
    major_id: str
    admission_method: str  # нормализованный
    priority: int
    calculated_score: float
    rank: int  # 1 — лучший в корзине


@dataclass(frozen=True)
class AdmissionDecision:
    application_id: str
    student_id: str
    major_id: str
    admission_method: str  # нормализованный
    priority: int
    calculated_score: float
    rank: int | None
    status: AdmissionStatus
    rejection_reason: RejectionReason | None
    admitted_preference: int | None  # = priority только для зачисленной заявки


@dataclass
class FilterResult:
    session_id: str
    total_students: int
    admitted_count: int
    execution_time: int  # мс
    decisions: list[AdmissionDecision]


# ────────── Отчёты / уведомления ────────────────────────────────────────
@dataclass
class ResultRow:
    """
    Строка выгрузки зачисленных.
    """
    student_id: str
    id_card: str
    full_name: str
    major_code: str
    major_name: str
    admission_method: str
    final_score: float
    preference: int


@dataclass
class ResultLookup:
    full_name: str
    id_card: str
    date_of_birth: str | None  # 'YYYY-MM-DD'
    program_code: str
    program_name: str
    session_name: str
    status: str  # 'accepted' | 'rejected' | 'pending'
    score: float
    ranking: int | None
    admission_method: str


@dataclass
class EmailNotification:
    session_id: str
    student_id: str
    email: str
    template_name: str
    template_data: dict
    status: EmailStatus = EmailStatus.PENDING
    attempts: int = 0
    id: int | None = None
