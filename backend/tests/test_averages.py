from averages import (
    REGIME_PERCENTAGE,
    REGIME_POINT_SUM,
    calculate_all,
    calculate_month,
    calculate_student,
    final_grade,
    month_average_max,
    round_half_up,
    semester_average,
    yearly_effort,
)
from gradebook import CustomColumn
from helpers import make_state


def test_zero_maxima_give_zero_everywhere():
    state = make_state([], exam_max=0, students=[{}])
    result = calculate_month(state, state.students[0], 0, 0)
    assert result.daily_total == 0
    assert result.exam == 0
    assert result.display_avg == 0
    assert result.normalized_avg == 0


def test_point_sum_regime_when_both_maxima_below_100():
    # daily max 90, exam max 80
    state = make_state([40, 50], exam_max=80, students=[{"s0-m0-c0": 30, "s0-m0-c1": 40, "s0-m0-exam": 60}])
    result = calculate_month(state, state.students[0], 0, 0)
    assert result.regime == REGIME_POINT_SUM
    assert result.display_avg == 130
    assert result.normalized_avg == round_half_up(130 / 170 * 100)


def test_percentage_regime_when_daily_max_reaches_100():
    # daily max 120, exam max 80
    state = make_state([60, 60], exam_max=80, students=[{"s0-m0-c0": 60, "s0-m0-c1": 30, "s0-m0-exam": 40}])
    result = calculate_month(state, state.students[0], 0, 0)
    assert result.regime == REGIME_PERCENTAGE
    # (90/120*100 + 40/80*100) / 2 = (75 + 50) / 2
    assert result.display_avg == 63
    assert result.normalized_avg == 63


def test_exam_max_of_100_forces_percentage_regime():
    state = make_state([40, 60], exam_max=100, students=[{"s0-m0-c0": 30, "s0-m0-c1": 50, "s0-m0-exam": 70}])
    result = calculate_month(state, state.students[0], 0, 0)
    assert result.daily_total == 80
    assert result.daily_max == 100
    assert result.regime == REGIME_PERCENTAGE
    assert result.display_avg == 75


def test_point_sum_example():
    state = make_state([40], exam_max=50, students=[{"s0-m0-c0": 35, "s0-m0-exam": 40}])
    result = calculate_month(state, state.students[0], 0, 0)
    assert result.regime == REGIME_POINT_SUM
    assert result.display_avg == 75
    assert result.normalized_avg == 83


def test_missing_grades_count_as_zero():
    state = make_state([20, 20], exam_max=50, students=[{"s0-m0-c0": 15}])
    result = calculate_month(state, state.students[0], 0, 0)
    assert result.daily_total == 15
    assert result.exam == 0
    assert result.display_avg == 15


def test_zero_exam_max_contributes_nothing_in_percentage_regime():
    state = make_state([100], exam_max=0, students=[{"s0-m0-c0": 80, "s0-m0-exam": 5}])
    result = calculate_month(state, state.students[0], 0, 0)
    assert result.regime == REGIME_PERCENTAGE
    assert result.normalized_avg == 40


def test_semester_average_uses_normalized_month_figures():
    state = make_state([], exam_max=50, students=[{
        "s0-m0-c0": 35, "s0-m0-exam": 40,    # month 0: point sum, shows 75, normalised 83
        "s0-m1-c0": 80, "s0-m1-exam": 35,    # month 1: percentage, (80 + 70) / 2 = 75
    }])
    state.semesters[0].months[0].custom_columns = [CustomColumn("نشاط", 40)]
    state.semesters[0].months[1].custom_columns = [CustomColumn("نشاط", 100)]
    student = state.students[0]

    first = calculate_month(state, student, 0, 0)
    second = calculate_month(state, student, 0, 1)
    assert (first.display_avg, first.normalized_avg) == (75, 83)
    assert (second.display_avg, second.normalized_avg) == (75, 75)
    # mean of the display figures would be 75
    assert semester_average(state, student, 0) == 79


def test_year_end_figures():
    effort = yearly_effort(80, 70, 90)
    assert effort == 80
    assert final_grade(effort, 85) == 83


def test_absent_mid_year_and_final_exam_count_as_zero():
    assert yearly_effort(90, None, 90) == 60
    assert final_grade(60, None) == 30


def test_round_half_up():
    assert round_half_up(82.5) == 83
    assert round_half_up(0.5) == 1
    assert round_half_up(2.4999) == 2
    assert round_half_up(-2.5) == -3


def test_month_average_max():
    assert month_average_max(40, 50) == 90
    assert month_average_max(100, 50) == 100
    assert month_average_max(0, 50) == 100


def test_calculate_student_bundles_year():
    grades = {"midYear": 70, "finalExam": 85}
    for sem in range(2):
        for month in range(2):
            grades[f"s{sem}-m{month}-c0"] = 80 if sem == 0 else 90
            grades[f"s{sem}-m{month}-exam"] = 80 if sem == 0 else 90
    state = make_state([100], exam_max=100, students=[grades])
    result = calculate_student(state, state.students[0])
    assert result.semesters == [80, 90]
    assert result.mid_year == 70
    assert result.yearly_effort == 80
    assert result.final_exam == 85
    assert result.final_grade == 83
    assert result.to_dict()["months"][0]["regime"] == REGIME_PERCENTAGE


def test_calculate_all_is_keyed_by_student_id():
    state = make_state([10], exam_max=10, students=[{}, {"s0-m0-c0": 10}])
    results = calculate_all(state)
    assert set(results) == {1, 2}
    assert results[2].month(0, 0).display_avg == 10
