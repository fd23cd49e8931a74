import pytest

from app.domain.admission_methods import bucket_key, is_block_code, normalize_admission_method


@pytest.mark.parametrize("raw, expected", [
    ("A00", "entrance_exam"),
    ("A01", "entrance_exam"),
    ("B00", "entrance_exam"),
    ("C00", "entrance_exam"),
    ("D01", "high_school_transcript"),
    ("D07", "high_school_transcript"),
    ("d10", "high_school_transcript"),
    ("Z99", "entrance_exam"),
])
def test_block_codes_are_mapped(raw, expected):
    assert normalize_admission_method(raw) == expected


@pytest.mark.parametrize("raw", ["entrance_exam", "high_school_transcript", "A001", "AB1", "0A0", ""])
def test_other_codes_pass_through(raw):
    assert normalize_admission_method(raw) == raw


def test_is_block_code():
    assert is_block_code("D01")
    assert not is_block_code("direct_admission")
    assert not is_block_code(None)


def test_bucket_key_uses_normalized_method():
    assert bucket_key("m1", "A00") == bucket_key("m1", "entrance_exam") == ("m1", "entrance_exam")
