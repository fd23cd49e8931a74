import random
from collections import Counter

import pytest

from conftest import ranked
from app.domain.errors import ComputationError
from app.domain.models import Quota
from app.services.assignment_engine import StableAssignmentEngine, build_capacities


def _admitted_ids(outcome):
    return outcome.admitted_application_ids()


def _scenario():
    return [
        ranked("a1", "st01", "m1", 1, 90), ranked("a2", "st01", "m2", 2, 90),
        ranked("b1", "st02", "m1", 1, 80), ranked("b2", "st02", "m2", 2, 80),
        ranked("c1", "st03", "m2", 1, 70), ranked("c2", "st03", "m1", 2, 70),
    ]


def test_three_students_two_majors():
    caps = {("m1", "entrance_exam"): 1, ("m2", "entrance_exam"): 1}
    outcome = StableAssignmentEngine(_scenario(), caps).run()

    assert _admitted_ids(outcome) == {"a1", "b2"}
    assert set(outcome.admitted) == {"st01", "st02"}
    assert outcome.rejected_ids == {"b1", "c1", "c2"}
    assert outcome.passes == 4


def test_result_does_not_depend_on_input_order():
    caps = {("m1", "entrance_exam"): 1, ("m2", "entrance_exam"): 1}
    apps = _scenario()
    first = StableAssignmentEngine(apps, caps).run()
    second = StableAssignmentEngine(list(reversed(apps)), caps).run()
    assert _admitted_ids(first) == _admitted_ids(second)
    assert first.rejected_ids == second.rejected_ids


def test_equal_scores_lower_student_id_wins():
    caps = {("m1", "entrance_exam"): 1}
    apps = [ranked("x", "st09", "m1", 1, 25.5), ranked("y", "st02", "m1", 1, 25.5)]

    outcome = StableAssignmentEngine(apps, caps).run()
    assert _admitted_ids(outcome) == {"y"}

    outcome = StableAssignmentEngine(list(reversed(apps)), caps).run()
    assert _admitted_ids(outcome) == {"y"}


def test_student_id_tie_break_is_string_order():
    caps = {("m1", "entrance_exam"): 1}
    # "10" < "9" as strings
    apps = [ranked("x", "9", "m1", 1, 20), ranked("y", "10", "m1", 1, 20)]
    assert _admitted_ids(StableAssignmentEngine(apps, caps).run()) == {"y"}


def test_unknown_bucket_has_zero_capacity():
    apps = [ranked("x", "st01", "m1", 1, 20, method="direct_admission"),
            ranked("y", "st01", "m2", 2, 18)]
    outcome = StableAssignmentEngine(apps, {("m2", "entrance_exam"): 1}).run()

    assert "x" in outcome.rejected_ids
    assert _admitted_ids(outcome) == {"y"}


def test_falls_back_to_second_choice():
    caps = {("m1", "entrance_exam"): 1, ("m2", "entrance_exam"): 2}
    apps = [
        ranked("a1", "st01", "m1", 1, 28),
        ranked("b1", "st02", "m1", 1, 27), ranked("b2", "st02", "m2", 2, 27),
    ]
    outcome = StableAssignmentEngine(apps, caps).run()
    assert outcome.admitted == {"st01": 0, "st02": 2}


def test_empty_input():
    outcome = StableAssignmentEngine([], {}).run()
    assert outcome.admitted == {}
    assert outcome.rejected_ids == set()
    assert outcome.passes == 1


def test_rejected_cursor_raises_computation_error():
    engine = StableAssignmentEngine([ranked("x", "st01", "m1", 1, 20)], {("m1", "entrance_exam"): 1})
    engine._rejected[0] = True
    with pytest.raises(ComputationError):
        engine.run()


def test_build_capacities_merges_normalized_keys():
    quotas = [
        Quota(session_id="s", major_id="m1", admission_method="A00", quota=40),
        Quota(session_id="s", major_id="m1", admission_method="A01", quota=30),
        Quota(session_id="s", major_id="m1", admission_method="D01", quota=10),
    ]
    assert build_capacities(quotas) == {
        ("m1", "entrance_exam"): 70,
        ("m1", "high_school_transcript"): 10,
    }


def _random_pool(seed: int):
    rnd = random.Random(seed)
    majors = ["m1", "m2", "m3", "m4"]
    caps = {(m, "entrance_exam"): rnd.randint(1, 4) for m in majors}
    apps = []
    for s in range(30):
        sid = f"st{s:03d}"
        score = round(rnd.uniform(15, 30), 1)
        for prio, major in enumerate(rnd.sample(majors, rnd.randint(1, 4)), start=1):
            apps.append(ranked(f"{sid}-{prio}", sid, major, prio, score))
    return apps, caps


@pytest.mark.parametrize("seed", [1, 7, 42])
def test_random_pool_is_quota_bounded_and_stable(seed):
    apps, caps = _random_pool(seed)
    outcome = StableAssignmentEngine(apps, caps).run()
    admitted = {sid: apps[idx] for sid, idx in outcome.admitted.items()}

    # места в корзине не превышены
    per_bucket = Counter((a.major_id, a.admission_method) for a in admitted.values())
    for key, n in per_bucket.items():
        assert n <= caps[key]

    # нет студента, которого корзина предпочла бы одному из зачисленных
    by_student = {}
    for a in apps:
        by_student.setdefault(a.student_id, []).append(a)
    for sid, own in by_student.items():
        held = admitted.get(sid)
        for a in own:
            if held is not None and a.priority >= held.priority:
                continue
            key = (a.major_id, a.admission_method)
            holders = [h for h in admitted.values() if (h.major_id, h.admission_method) == key]
            assert len(holders) == caps[key]
            for h in holders:
                assert (h.calculated_score, _neg(h.student_id)) > (a.calculated_score, _neg(a.student_id))


def _neg(student_id: str):
    # меньший student_id — «лучше», для сравнения кортежей
    return tuple(-ord(c) for c in student_id)
