# app/services/decisions.py
from __future__ import annotations

from collections import Counter
from typing import Dict, Mapping, Sequence

from app.domain.admission_methods import normalize_admission_method
from app.domain.errors import ComputationError
from app.domain.models import (
    AdmissionDecision,
    AdmissionStatus,
    Application,
    Evaluation,
    RankedApplication,
    RejectionReason,
)
from app.services.assignment_engine import AssignmentOutcome, BucketKey


def materialize_decisions(
        applications: Sequence[Application],
        evaluations: Mapping[str, Evaluation],
        ranked: Sequence[RankedApplication],
        outcome: AssignmentOutcome,
        capacities: Mapping[BucketKey, int],
) -> list[AdmissionDecision]:
    """
    Одно решение на каждую заявку сессии, включая недопущенные.

    Причины отказа:
      • not_eligible_basic / not_eligible_quota — отсеяна до ранжирования;
      • admitted_higher_priority — студент зачислен по более приоритетной заявке;
      • below_quota_cutoff — не прошёл по баллу (или корзина без мест).
    Порядок: (student_id, preference_priority, application_id) — одинаковый от прогона к прогону.
    """
    ranked_by_id: Dict[str, RankedApplication] = {r.application_id: r for r in ranked}
    admitted_ids = outcome.admitted_application_ids()
    admitted_priority: Dict[str, int] = {
        sid: outcome.arena[idx].priority for sid, idx in outcome.admitted.items()
    }

    decisions: list[AdmissionDecision] = []
    ordered = sorted(applications, key=lambda a: (a.student_id, a.preference_priority, a.id))
    for app in ordered:
        method = normalize_admission_method(app.admission_method)
        ev = evaluations.get(app.id)
        if ev is None:
            raise ComputationError(f"Application {app.id} was not evaluated")

        r = ranked_by_id.get(app.id)
        if r is None:
            if ev.eligible:
                raise ComputationError(f"Eligible application {app.id} is missing from ranking")
            reason = (RejectionReason.NOT_ELIGIBLE_BASIC if not ev.basic_eligible
                      else RejectionReason.NOT_ELIGIBLE_QUOTA)
            decisions.append(AdmissionDecision(
                application_id=app.id, student_id=app.student_id, major_id=app.major_id,
                admission_method=method, priority=app.preference_priority,
                calculated_score=0.0, rank=None,
                status=AdmissionStatus.NOT_ADMITTED, rejection_reason=reason,
                admitted_preference=None,
            ))
            continue

        if app.id in admitted_ids:
            status, reason, admitted_pref = AdmissionStatus.ADMITTED, None, r.priority
        else:
            best = admitted_priority.get(app.student_id)
            reason = (RejectionReason.ADMITTED_HIGHER_PRIORITY
                      if best is not None and best < r.priority
                      else RejectionReason.BELOW_QUOTA_CUTOFF)
            status, admitted_pref = AdmissionStatus.NOT_ADMITTED, None

        decisions.append(AdmissionDecision(
            application_id=app.id, student_id=app.student_id, major_id=app.major_id,
            admission_method=r.admission_method, priority=r.priority,
            calculated_score=r.calculated_score, rank=r.rank,
            status=status, rejection_reason=reason, admitted_preference=admitted_pref,
        ))

    _check_invariants(decisions, capacities, expected=len(applications))
    return decisions


def _check_invariants(decisions: Sequence[AdmissionDecision],
                      capacities: Mapping[BucketKey, int],
                      expected: int) -> None:
    if len(decisions) != expected:
        raise ComputationError(f"{len(decisions)} decisions for {expected} applications")

    admitted = [d for d in decisions if d.status is AdmissionStatus.ADMITTED]

    per_student = Counter(d.student_id for d in admitted)
    twice = [sid for sid, n in per_student.items() if n > 1]
    if twice:
        raise ComputationError(f"Students admitted more than once: {sorted(twice)}")

    per_bucket = Counter((d.major_id, d.admission_method) for d in admitted)
    for key, n in per_bucket.items():
        if n > capacities.get(key, 0):
            raise ComputationError(f"Bucket {key} over quota: {n} > {capacities.get(key, 0)}")
