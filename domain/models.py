from dataclasses import dataclass, field
from typing import List, Dict, Any


@dataclass
class Subject:
    code: str
    name: str
    internal: int
    external: int
    total: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "name": self.name,
            "internal": self.internal,
            "external": self.external,
            "total": self.total,
        }


@dataclass
class GradedSubject(Subject):
    grade_point: int = 0
    credits: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["gradePoint"] = self.grade_point
        data["credits"] = self.credits
        return data


@dataclass
class Semester:
    semester: int
    subjects: List[Subject] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "semester": self.semester,
            "subjects": [s.to_dict() for s in self.subjects],
        }


@dataclass
class GradedSemester(Semester):
    sgpa: str = "0.00"
    total_credits: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["sgpa"] = self.sgpa
        data["totalCredits"] = self.total_credits
        return data


@dataclass
class ParsedResult:
    """
    Student identity plus the semesters recovered from a result page.
    An empty `semesters` list means extraction failed.
    """
    student_name: str = ""
    enrollment_no: str = ""
    programme: str = ""
    semesters: List[Semester] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "studentName": self.student_name,
            "enrollmentNo": self.enrollment_no,
            "programme": self.programme,
            "semesters": [s.to_dict() for s in self.semesters],
        }


@dataclass
class GradedResult(ParsedResult):
    cgpa: str = "0.00"
    total_credits: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["cgpa"] = self.cgpa
        data["totalCredits"] = self.total_credits
        return data
