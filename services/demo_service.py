from domain.models import ParsedResult, Semester, Subject

# code, name, internal, external
DEMO_SEMESTERS = [
    [
        ("ES-101", "Engineering Physics", 23, 67),
        ("ES-102", "Engineering Chemistry", 21, 60),
        ("ES-103", "Mathematics-I", 24, 70),
        ("ES-104", "English", 20, 58),
        ("ES-105", "Engineering Graphics", 18, 52),
    ],
    [
        ("ES-111", "Mathematics-II", 22, 65),
        ("ES-112", "Basic Electronics", 19, 55),
        ("ES-113", "Programming in C", 25, 71),
        ("ES-114", "Environmental Studies", 20, 60),
        ("ES-115", "Workshop Practice", 22, 63),
    ],
    [
        ("ES-121", "Data Structures", 24, 68),
        ("ES-122", "Computer Organization", 21, 59),
        ("ES-123", "Digital Electronics", 23, 66),
        ("ES-124", "Mathematics-III", 22, 64),
        ("ES-125", "Operating Systems", 25, 70),
    ],
    [
        ("ES-131", "Database Management Systems", 23, 65),
        ("ES-132", "Computer Networks", 24, 69),
        ("ES-133", "Software Engineering", 22, 62),
        ("ES-134", "Theory of Computation", 21, 58),
        ("ES-135", "Microprocessors", 20, 56),
    ],
]


def get_demo_result() -> ParsedResult:
    """Fixed sample result used by the demo endpoint; a fresh copy on every call."""
    return ParsedResult(
        student_name="VIJAY KUMAR",
        enrollment_no="11015603123",
        programme="B.Tech - Computer Science & Engineering",
        semesters=[
            Semester(
                semester=number,
                subjects=[
                    Subject(code=code, name=name, internal=internal, external=external, total=internal + external)
                    for code, name, internal, external in rows
                ],
            )
            for number, rows in enumerate(DEMO_SEMESTERS, start=1)
        ],
    )
