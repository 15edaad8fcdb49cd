from gradebook import CustomColumn, GradebookState, Student, new_gradebook


def make_state(month_maxes=None, exam_max=100, students=()):
    """Record whose every month uses *month_maxes* as its column maxima."""
    state = new_gradebook(teacher_name="أحمد", subject_name="رياضيات", class_name="الخامس / أ")
    state.info.exam_max_grade = exam_max
    for sem in state.semesters:
        for month in sem.months:
            month.custom_columns = [
                CustomColumn(title=f"نشاط {i + 1}", max=m) for i, m in enumerate(month_maxes or [])
            ]
    for i, grades in enumerate(students, start=1):
        state.students.append(Student(id=i, name=f"طالب {i}", grades=dict(grades)))
    return state


def roster(n):
    state = GradebookState()
    state.students = [Student(id=i, name=f"Student {i}") for i in range(1, n + 1)]
    return state
