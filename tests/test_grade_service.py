import logging

import pytest
from domain.models import ParsedResult, Semester, Subject, GradedSemester
from services.credit_service import CreditTable
from services.demo_service import get_demo_result
from services.grade_service import GradeService


def make_subject(code: str, total: int) -> Subject:
    return Subject(code=code, name=f"Subject {code}", internal=0, external=total, total=total)


@pytest.fixture
def empty_credits():
    return CreditTable()


@pytest.mark.parametrize("below, above, gp_below, gp_above", [
    (39, 40, 0, 4),
    (44, 45, 4, 5),
    (49, 50, 5, 6),
    (54, 55, 6, 7),
    (64, 65, 7, 8),
    (74, 75, 8, 9),
    (89, 90, 9, 10),
])
def test_grade_point_boundaries(below, above, gp_below, gp_above):
    assert GradeService.get_grade_point(below) == gp_below
    assert GradeService.get_grade_point(above) == gp_above


def test_grade_point_is_monotonic():
    points = [GradeService.get_grade_point(m) for m in range(0, 101)]
    assert points == sorted(points)
    assert set(points) == {0, 4, 5, 6, 7, 8, 9, 10}


def test_demo_result(empty_credits):
    graded = GradeService.grade(get_demo_result(), empty_credits)

    first = graded.semesters[0]
    assert [s.total for s in first.subjects] == [90, 81, 94, 78, 70]
    assert [s.grade_point for s in first.subjects] == [10, 9, 10, 9, 8]
    assert all(s.credits == 3 for s in first.subjects)
    assert first.total_credits == 15
    assert first.sgpa == "9.20"

    assert [s.sgpa for s in graded.semesters] == ["9.20", "9.00", "9.40", "9.20"]
    assert graded.total_credits == 60
    assert graded.cgpa == "9.20"


def test_credits_are_looked_up_by_exact_code():
    credits = CreditTable({"ES-101": 4, "ES-102": 2})
    parsed = ParsedResult(semesters=[
        Semester(semester=1, subjects=[make_subject("ES-101", 90), make_subject("ES-102", 50), make_subject("es-101", 40)])
    ])

    graded = GradeService.grade(parsed, credits)
    semester = graded.semesters[0]

    assert [s.credits for s in semester.subjects] == [4, 2, 3]
    assert semester.total_credits == 9
    # (10*4 + 6*2 + 4*3) / 9 = 64 / 9 = 7.111...
    assert semester.sgpa == "7.11"


def test_unknown_code_logs_warning(empty_credits, caplog):
    parsed = ParsedResult(semesters=[Semester(semester=1, subjects=[make_subject("XX-999", 80)])])

    with caplog.at_level(logging.WARNING, logger="services.grade_service"):
        graded = GradeService.grade(parsed, empty_credits)

    assert graded.semesters[0].subjects[0].credits == 3
    assert "XX-999" in caplog.text


def test_average_rounds_half_up_with_two_decimals():
    assert GradeService.average(8, 1) == "8.00"
    assert GradeService.average(1, 8) == "0.13"  # 0.125
    assert GradeService.average(2, 3) == "0.67"
    assert GradeService.average(100, 10) == "10.00"


def test_zero_credits_never_divides():
    assert GradeService.average(0, 0) == "0.00"

    graded = GradeService.grade(ParsedResult(semesters=[Semester(semester=1, subjects=[])]), CreditTable())
    assert graded.semesters[0].sgpa == "0.00"
    assert graded.semesters[0].total_credits == 0
    assert graded.cgpa == "0.00"


def test_no_semesters_gives_zero_cgpa(empty_credits):
    graded = GradeService.grade(ParsedResult(student_name="A"), empty_credits)

    assert graded.student_name == "A"
    assert graded.semesters == []
    assert graded.cgpa == "0.00"
    assert graded.total_credits == 0


def test_sgpa_within_bounds(empty_credits):
    parsed = ParsedResult(semesters=[
        Semester(semester=1, subjects=[make_subject("AB-100", m) for m in (0, 12, 39)]),
        Semester(semester=2, subjects=[make_subject("AB-200", m) for m in (90, 99, 100)]),
    ])
    graded = GradeService.grade(parsed, empty_credits)

    assert [s.sgpa for s in graded.semesters] == ["0.00", "10.00"]
    assert graded.cgpa == "5.00"


def test_grading_is_idempotent_and_leaves_input_untouched(empty_credits):
    parsed = get_demo_result()
    before = parsed.to_dict()

    first = GradeService.grade(parsed, empty_credits)
    second = GradeService.grade(parsed, empty_credits)

    assert first.to_dict() == second.to_dict()
    assert parsed.to_dict() == before
    assert not isinstance(parsed.semesters[0], GradedSemester)


def test_graded_result_serializes_camel_case(empty_credits):
    data = GradeService.grade(get_demo_result(), empty_credits).to_dict()

    assert data["studentName"] == "VIJAY KUMAR"
    assert data["enrollmentNo"] == "11015603123"
    assert data["totalCredits"] == 60
    assert data["cgpa"] == "9.20"
    assert data["semesters"][0]["totalCredits"] == 15
    assert data["semesters"][0]["subjects"][0] == {
        "code": "ES-101",
        "name": "Engineering Physics",
        "internal": 23,
        "external": 67,
        "total": 90,
        "gradePoint": 10,
        "credits": 3,
    }
