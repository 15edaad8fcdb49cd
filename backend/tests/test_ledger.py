import pytest

import ledger
from errors import ColumnNotFound, InvalidGradeKey, StudentNotFound
from helpers import make_state


@pytest.mark.parametrize("raw, expected", [
    ("17", 17),
    (" 8 ", 8),
    (12, 12),
    ("٣٥", 35),
    ("", None),
    ("   ", None),
    (None, None),
    ("abc", None),
    ("-4", None),
    (-4, None),
    ("7.5", None),
])
def test_parse_grade(raw, expected):
    assert ledger.parse_grade(raw) == expected


def test_set_grade_does_not_clamp():
    state = make_state([10], students=[{}])
    assert ledger.set_grade(state, 1, "s0-m0-c0", "40") == 40
    assert state.students[0].grades["s0-m0-c0"] == 40


def test_set_grade_blank_clears():
    state = make_state([10], students=[{"s0-m0-c0": 5}])
    ledger.set_grade(state, 1, "s0-m0-c0", "")
    assert state.students[0].grades["s0-m0-c0"] is None


def test_enter_grade_clamps_to_column_max():
    state = make_state([25], students=[{}])
    assert ledger.enter_grade(state, 1, "s0-m0-c0", "30") == 25


def test_enter_grade_clamps_exam_to_record_exam_max():
    state = make_state([25], exam_max=60, students=[{}])
    assert ledger.enter_grade(state, 1, "s1-m1-exam", "75") == 60


def test_enter_grade_clamps_single_exams_to_100():
    state = make_state([], students=[{}])
    assert ledger.enter_grade(state, 1, "midYear", "120") == 100
    assert ledger.enter_grade(state, 1, "finalExam", "99") == 99


def test_enter_grade_zero_max_does_not_clamp():
    state = make_state([0], students=[{}])
    assert ledger.enter_grade(state, 1, "s0-m0-c0", "12") == 12


def test_enter_grade_keeps_entered_zero():
    state = make_state([25], students=[{}])
    assert ledger.enter_grade(state, 1, "s0-m0-c0", "0") == 0


def test_enter_grade_rejects_unknown_key_and_column():
    state = make_state([25], students=[{}])
    with pytest.raises(InvalidGradeKey):
        ledger.enter_grade(state, 1, "bogus", "1")
    with pytest.raises(InvalidGradeKey):
        ledger.enter_grade(state, 1, "s2-m0-c0", "1")
    with pytest.raises(ColumnNotFound):
        ledger.enter_grade(state, 1, "s0-m0-c3", "1")


def test_enter_grade_rejects_non_canonical_keys():
    state = make_state([25], students=[{}])
    for key in ("s0-m0-c00", "s00-m0-exam", "s0-m01-c0"):
        with pytest.raises(InvalidGradeKey):
            ledger.enter_grade(state, 1, key, "20")
    assert state.students[0].grades == {}


def test_clamp_stored_grades():
    state = make_state([10], exam_max=40, students=[{
        "s0-m0-c0": 15, "s0-m0-exam": 30, "s1-m1-exam": 55, "finalExam": 900,
        "s0-m0-c5": 99, "legacy": 7, "midYear": None,
    }])
    assert ledger.clamp_stored_grades(state) == 3
    assert state.students[0].grades == {
        "s0-m0-c0": 10, "s0-m0-exam": 30, "s1-m1-exam": 40, "finalExam": 100,
        "s0-m0-c5": 99, "legacy": 7, "midYear": None,
    }


def test_unknown_student():
    state = make_state([25])
    with pytest.raises(StudentNotFound):
        ledger.set_grade(state, 99, "s0-m0-c0", "1")


def test_add_students_assigns_sequential_ids():
    state = make_state([], students=[{}, {}])
    ledger.remove_student(state, 1)
    added = ledger.add_students(state, ["علي", "زينب"])
    assert [s.id for s in added] == [3, 4]
    assert [s.name for s in state.students] == ["طالب 2", "علي", "زينب"]


def test_add_student_to_empty_roster_starts_at_one():
    state = make_state([])
    assert ledger.add_student(state).id == 1


def test_rename_student():
    state = make_state([], students=[{}])
    ledger.rename_student(state, 1, "حسن")
    assert state.students[0].name == "حسن"


def test_remove_student_drops_grades():
    state = make_state([10], students=[{"s0-m0-c0": 4}, {}])
    removed = ledger.remove_student(state, 1)
    assert removed.grades == {"s0-m0-c0": 4}
    assert [s.id for s in state.students] == [2]
    with pytest.raises(StudentNotFound):
        ledger.remove_student(state, 1)


def test_renumber_after_removing_middle_column():
    state = make_state([10, 10, 10], students=[
        {"s0-m0-c0": 1, "s0-m0-c1": 2, "s0-m0-c2": 3, "s0-m1-c1": 9},
        {"s0-m0-c1": 5},
    ])
    state.columns(0, 0).pop(1)
    ledger.renumber_after_column_removal(state, 0, 0, 1)

    first, second = state.students
    assert first.grades == {"s0-m0-c0": 1, "s0-m0-c1": 3, "s0-m1-c1": 9}
    # the removed column's grade must not survive under the shifted key
    assert second.grades == {}
