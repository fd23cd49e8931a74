import pytest

from conftest import ranked
from app.domain.errors import ComputationError
from app.domain.models import AdmissionStatus, Application, Evaluation, RejectionReason
from app.services.assignment_engine import StableAssignmentEngine
from app.services.decisions import materialize_decisions

CAPS = {("m1", "entrance_exam"): 1, ("m2", "entrance_exam"): 1}


def _app(app_id, student, major, priority):
    return Application(id=app_id, session_id="s", student_id=student, major_id=major,
                       admission_method="entrance_exam", preference_priority=priority)


@pytest.fixture()
def decided():
    applications = [
        _app("a1", "st01", "m1", 1), _app("a2", "st01", "m2", 2),
        _app("b1", "st02", "m1", 1), _app("b2", "st02", "m2", 2),
        _app("c1", "st03", "m2", 1), _app("c2", "st03", "m1", 2),
        _app("d1", "st04", "m1", 1), _app("e1", "st05", "m2", 1),
    ]
    evaluations = {a.id: Evaluation(True, True, 0.0) for a in applications}
    evaluations["d1"] = Evaluation(False, False, 0.0)
    evaluations["e1"] = Evaluation(True, False, 0.0)
    rank_list = [
        ranked("a1", "st01", "m1", 1, 90, rank=1), ranked("a2", "st01", "m2", 2, 90, rank=1),
        ranked("b1", "st02", "m1", 1, 80, rank=2), ranked("b2", "st02", "m2", 2, 80, rank=2),
        ranked("c1", "st03", "m2", 1, 70, rank=3), ranked("c2", "st03", "m1", 2, 70, rank=3),
    ]
    outcome = StableAssignmentEngine(rank_list, CAPS).run()
    return applications, evaluations, rank_list, outcome


def test_one_decision_per_application_with_reasons(decided):
    applications, evaluations, rank_list, outcome = decided
    decisions = materialize_decisions(applications, evaluations, rank_list, outcome, CAPS)

    assert len(decisions) == len(applications)
    by_id = {d.application_id: d for d in decisions}
    assert set(by_id) == {a.id for a in applications}

    assert by_id["a1"].status is AdmissionStatus.ADMITTED
    assert by_id["a1"].rejection_reason is None
    assert by_id["a1"].admitted_preference == 1
    assert by_id["a2"].rejection_reason is RejectionReason.ADMITTED_HIGHER_PRIORITY
    assert by_id["b1"].rejection_reason is RejectionReason.BELOW_QUOTA_CUTOFF
    assert by_id["b2"].status is AdmissionStatus.ADMITTED
    assert by_id["b2"].admitted_preference == 2
    assert by_id["c1"].rejection_reason is RejectionReason.BELOW_QUOTA_CUTOFF
    assert by_id["c2"].rejection_reason is RejectionReason.BELOW_QUOTA_CUTOFF
    assert by_id["d1"].rejection_reason is RejectionReason.NOT_ELIGIBLE_BASIC
    assert by_id["e1"].rejection_reason is RejectionReason.NOT_ELIGIBLE_QUOTA
    assert by_id["e1"].calculated_score == 0.0
    assert by_id["e1"].rank is None


def test_decisions_are_ordered_by_student_then_priority(decided):
    applications, evaluations, rank_list, outcome = decided
    decisions = materialize_decisions(list(reversed(applications)), evaluations, rank_list, outcome, CAPS)
    assert [d.application_id for d in decisions] == ["a1", "a2", "b1", "b2", "c1", "c2", "d1", "e1"]


def test_over_quota_outcome_is_rejected(decided):
    applications, evaluations, rank_list, outcome = decided
    with pytest.raises(ComputationError):
        materialize_decisions(applications, evaluations, rank_list, outcome,
                              {("m1", "entrance_exam"): 0, ("m2", "entrance_exam"): 1})


def test_eligible_but_unranked_application_is_an_error(decided):
    applications, evaluations, rank_list, outcome = decided
    with pytest.raises(ComputationError):
        materialize_decisions(applications, evaluations, rank_list[1:], outcome, CAPS)
