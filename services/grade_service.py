from decimal import Decimal, ROUND_HALF_UP
from typing import List, Mapping, Tuple
import logging

from domain.models import GradedResult, GradedSemester, GradedSubject, ParsedResult, Semester, Subject
from services.credit_service import DEFAULT_CREDITS

logger = logging.getLogger(__name__)

# (minimum total marks, grade point), highest band first
GRADE_BANDS: List[Tuple[int, int]] = [
    (90, 10),
    (75, 9),
    (65, 8),
    (55, 7),
    (50, 6),
    (45, 5),
    (40, 4),
]

TWO_PLACES = Decimal("0.01")


class GradeService:
    """
    Turns raw marks into grade points, SGPA and CGPA.
    Nothing here does I/O or touches shared state, so a single credit table
    can serve any number of concurrent requests.
    """

    @staticmethod
    def get_grade_point(marks: int) -> int:
        for minimum, grade_point in GRADE_BANDS:
            if marks >= minimum:
                return grade_point
        return 0

    @staticmethod
    def resolve_credits(code: str, credits: Mapping[str, int]) -> int:
        value = credits.get(code)
        if not value:
            logger.warning(f"Subject code {code} not found in credit table, using default {DEFAULT_CREDITS} credits")
            return DEFAULT_CREDITS
        return value

    @staticmethod
    def average(grade_points: int, credits: int) -> str:
        """
        Credit-weighted average rounded half-up to two places, e.g. "8.00".
        Zero credits is "0.00" rather than an error.
        """
        if credits <= 0:
            return "0.00"
        value = (Decimal(grade_points) / Decimal(credits)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
        return f"{value:.2f}"

    @staticmethod
    def grade_subject(subject: Subject, credits: Mapping[str, int]) -> GradedSubject:
        return GradedSubject(
            code=subject.code,
            name=subject.name,
            internal=subject.internal,
            external=subject.external,
            total=subject.total,
            grade_point=GradeService.get_grade_point(subject.total),
            credits=GradeService.resolve_credits(subject.code, credits),
        )

    @staticmethod
    def grade_semester(semester: Semester, credits: Mapping[str, int]) -> Tuple[GradedSemester, int]:
        """
        Returns the graded semester together with its credit-weighted grade
        points, which the CGPA is built from.
        """
        subjects = [GradeService.grade_subject(s, credits) for s in semester.subjects]
        grade_points = sum(s.grade_point * s.credits for s in subjects)
        total_credits = sum(s.credits for s in subjects)

        graded = GradedSemester(
            semester=semester.semester,
            subjects=subjects,
            sgpa=GradeService.average(grade_points, total_credits),
            total_credits=total_credits,
        )
        return graded, grade_points

    @staticmethod
    def grade(parsed: ParsedResult, credits: Mapping[str, int]) -> GradedResult:
        """
        Grades every semester of a parsed result. The input is left untouched
        and the same input always produces an identical result.
        """
        semesters = []
        total_credits = 0
        total_grade_points = 0

        for semester in parsed.semesters:
            graded, grade_points = GradeService.grade_semester(semester, credits)
            semesters.append(graded)
            total_credits += graded.total_credits
            total_grade_points += grade_points

        return GradedResult(
            student_name=parsed.student_name,
            enrollment_no=parsed.enrollment_no,
            programme=parsed.programme,
            semesters=semesters,
            cgpa=GradeService.average(total_grade_points, total_credits),
            total_credits=total_credits,
        )
