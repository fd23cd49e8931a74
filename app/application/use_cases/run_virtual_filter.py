from __future__ import annotations

import time
from typing import Dict, List, Tuple

from sqlalchemy.exc import SQLAlchemyError

from app.config.config import settings
from app.config.logger import logger
from app.domain.admission_methods import bucket_key
from app.domain.errors import FilterTimeoutError, PersistenceError, SessionNotFoundError
from app.domain.models import (
    AdmissionStatus, Application, Evaluation, FilterResult, Quota, QuotaConditions
)
from app.infrastructure.db.repositories.admission_repository import AdmissionRepository
from app.services.assignment_engine import StableAssignmentEngine, build_capacities
from app.services.decisions import materialize_decisions
from app.services.ranking import rank_applications
from app.services.scoring import Evaluator, evaluate


class RunVirtualFilterUseCase:
    """
    Полный прогон виртуального фильтра для одной сессии:
        1. снапшот заявок и квот (строка сессии блокируется)
        2. допустимость и баллы
        3. ранжирование внутри корзин
        4. устойчивое распределение мест
        5. решения по каждой заявке → запись одним коммитом

    Всё-или-ничего: любая ошибка → rollback, прежние решения сессии остаются.
    Повторный прогон на тех же данных даёт те же решения.
    """

    def __init__(self, repo: AdmissionRepository,
                 evaluator: Evaluator = evaluate,
                 timeout_seconds: float | None = None):
        self._repo = repo
        self._evaluate = evaluator
        self._timeout = settings.filter_timeout_seconds if timeout_seconds is None else timeout_seconds

    @staticmethod
    def _conditions_index(quotas: List[Quota]) -> Tuple[Dict[Tuple[str, str], QuotaConditions],
                                                        Dict[Tuple[str, str], QuotaConditions]]:
        raw: Dict[Tuple[str, str], QuotaConditions] = {}
        normalized: Dict[Tuple[str, str], QuotaConditions] = {}
        for q in quotas:
            raw[(q.major_id, q.admission_method)] = q.conditions
            normalized.setdefault(bucket_key(q.major_id, q.admission_method), q.conditions)
        return raw, normalized

    def _evaluate_all(self, applications: List[Application],
                      quotas: List[Quota]) -> Dict[str, Evaluation]:
        raw, normalized = self._conditions_index(quotas)
        points = self._repo.get_priority_points(a.student_id for a in applications)

        evaluations: Dict[str, Evaluation] = {}
        for app in applications:
            conditions = raw.get((app.major_id, app.admission_method))
            if conditions is None:
                conditions = normalized.get(bucket_key(app.major_id, app.admission_method))
            ev = self._evaluate(app.subject_scores, app.admission_method, conditions,
                                points.get(app.student_id, 0.0))
            if not ev.eligible:
                ev = Evaluation(ev.basic_eligible, ev.quota_eligible, 0.0)
            evaluations[app.id] = ev
        return evaluations

    def _check_deadline(self, session_id: str, started: float) -> None:
        if not self._timeout:
            return
        elapsed = time.monotonic() - started
        if elapsed > self._timeout:
            raise FilterTimeoutError(session_id, elapsed, self._timeout)

    def execute(self, session_id: str) -> FilterResult:
        started = time.monotonic()
        logger.info("=== Виртуальный фильтр: сессия %s ===", session_id)
        try:
            if self._repo.get_session(session_id, for_update=True) is None:
                raise SessionNotFoundError(session_id)

            applications = self._repo.get_applications_by_session(session_id)
            quotas = self._repo.get_quotas_by_session(session_id)
            logger.info("Снапшот: %d заявок, %d квот", len(applications), len(quotas))

            evaluations = self._evaluate_all(applications, quotas)
            eligible = [(a, evaluations[a.id].score) for a in applications if evaluations[a.id].eligible]
            logger.info("→ допущено к ранжированию %d из %d", len(eligible), len(applications))

            ranked = rank_applications(eligible)
            capacities = build_capacities(quotas)
            outcome = StableAssignmentEngine(ranked, capacities).run()
            decisions = materialize_decisions(applications, evaluations, ranked, outcome, capacities)

            # после этой точки только запись
            self._check_deadline(session_id, started)

            try:
                self._repo.save_decisions(decisions)
                self._repo.commit()
            except SQLAlchemyError as db_err:
                raise PersistenceError(f"Failed to persist decisions for session {session_id}: {db_err}") \
                    from db_err
        except Exception:
            logger.exception("Прогон фильтра для сессии %s отменён, выполняем rollback", session_id)
            self._repo.rollback()
            raise

        execution_time = int(round((time.monotonic() - started) * 1000))
        admitted_count = sum(1 for d in decisions if d.status is AdmissionStatus.ADMITTED)
        result = FilterResult(
            session_id=session_id,
            total_students=len({d.student_id for d in decisions}),
            admitted_count=admitted_count,
            execution_time=execution_time,
            decisions=decisions,
        )
        logger.info("✅ Сессия %s: студентов %d, зачислено %d, %d мс",
                    session_id, result.total_students, admitted_count, execution_time)
        return result
