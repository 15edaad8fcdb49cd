"""Monthly, semester and yearly averages.

This is the single authoritative implementation of the gradebook arithmetic.
The on-screen table, the JSON report and every exporter go through it.

A month combines the sum of its activity columns ("daily") with its written
exam.  Two regimes exist:

* **Point-sum** (regime A): both maxima are positive and below 100.  The month
  shows the plain point total ``daily + exam`` and is normalised against
  ``daily_max + exam_max`` only when months are combined.
* **Percentage** (regime B): anything else.  Daily and exam are each scaled
  to 0–100 (a zero max scales to 0) and averaged.

Semester averages always combine the months' normalised (0–100) figures.
"""
import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from gradebook import (
    FINAL_EXAM_KEY,
    MID_YEAR_KEY,
    MONTHS_PER_SEMESTER,
    SEMESTER_COUNT,
    GradebookState,
    Student,
    column_key,
    exam_key,
)

REGIME_POINT_SUM = "A"
REGIME_PERCENTAGE = "B"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties away from zero (82.5 -> 83)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def is_point_sum_regime(daily_max: int, exam_max: int) -> bool:
    return 0 < daily_max < 100 and 0 < exam_max < 100


def month_average_max(daily_max: int, exam_max: int) -> int:
    """Maximum a month's displayed average can reach."""
    if is_point_sum_regime(daily_max, exam_max):
        return daily_max + exam_max
    return 100


@dataclass(frozen=True)
class MonthAverage:
    daily_total: int
    exam: int
    daily_max: int
    exam_max: int
    display_avg: int
    normalized_avg: int
    regime: str


def calculate_month(state: GradebookState, student: Student, sem: int, month: int) -> MonthAverage:
    columns = state.columns(sem, month)
    daily_total = sum(student.grade(column_key(sem, month, i)) or 0 for i in range(len(columns)))
    exam = student.grade(exam_key(sem, month)) or 0
    daily_max = sum(c.max or 0 for c in columns)
    exam_max = state.info.exam_max_grade

    if is_point_sum_regime(daily_max, exam_max):
        display = daily_total + exam
        normalized = display / (daily_max + exam_max) * 100
        regime = REGIME_POINT_SUM
    else:
        normalized_daily = daily_total / daily_max * 100 if daily_max > 0 else 0
        normalized_exam = exam / exam_max * 100 if exam_max > 0 else 0
        normalized = (normalized_daily + normalized_exam) / 2
        display = normalized
        regime = REGIME_PERCENTAGE

    return MonthAverage(
        daily_total=daily_total,
        exam=exam,
        daily_max=daily_max,
        exam_max=exam_max,
        display_avg=round_half_up(display),
        normalized_avg=round_half_up(normalized),
        regime=regime,
    )


def combine_months(months: List[MonthAverage]) -> int:
    return round_half_up(sum(m.normalized_avg for m in months) / len(months))


def semester_average(state: GradebookState, student: Student, sem: int) -> int:
    return combine_months([
        calculate_month(state, student, sem, m) for m in range(MONTHS_PER_SEMESTER)
    ])


def yearly_effort(first_semester_avg: int, mid_year: Optional[int], second_semester_avg: int) -> int:
    return round_half_up((first_semester_avg + (mid_year or 0) + second_semester_avg) / 3)


def final_grade(effort: int, final_exam: Optional[int]) -> int:
    return round_half_up((effort + (final_exam or 0)) / 2)


@dataclass(frozen=True)
class StudentAverages:
    student_id: int
    months: Dict[tuple, MonthAverage]   # (sem, month) -> MonthAverage
    semesters: List[int]
    mid_year: Optional[int]
    yearly_effort: int
    final_exam: Optional[int]
    final_grade: int

    def month(self, sem: int, month: int) -> MonthAverage:
        return self.months[(sem, month)]

    def to_dict(self) -> dict:
        return {
            "student_id": self.student_id,
            "months": [
                {
                    "semester": sem,
                    "month": month,
                    "daily_total": avg.daily_total,
                    "exam": avg.exam,
                    "display_avg": avg.display_avg,
                    "normalized_avg": avg.normalized_avg,
                    "regime": avg.regime,
                }
                for (sem, month), avg in sorted(self.months.items())
            ],
            "semesters": list(self.semesters),
            "mid_year": self.mid_year,
            "yearly_effort": self.yearly_effort,
            "final_exam": self.final_exam,
            "final_grade": self.final_grade,
        }


def calculate_student(state: GradebookState, student: Student) -> StudentAverages:
    months = {
        (sem, month): calculate_month(state, student, sem, month)
        for sem in range(SEMESTER_COUNT)
        for month in range(MONTHS_PER_SEMESTER)
    }
    semesters = [
        combine_months([months[(sem, m)] for m in range(MONTHS_PER_SEMESTER)])
        for sem in range(SEMESTER_COUNT)
    ]
    mid_year = student.grade(MID_YEAR_KEY)
    final_exam = student.grade(FINAL_EXAM_KEY)
    effort = yearly_effort(semesters[0], mid_year, semesters[1])
    return StudentAverages(
        student_id=student.id,
        months=months,
        semesters=semesters,
        mid_year=mid_year,
        yearly_effort=effort,
        final_exam=final_exam,
        final_grade=final_grade(effort, final_exam),
    )


def calculate_all(state: GradebookState) -> Dict[int, StudentAverages]:
    return {s.id: calculate_student(state, s) for s in state.students}
