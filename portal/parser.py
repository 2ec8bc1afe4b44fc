from bs4 import BeautifulSoup, Tag
from dataclasses import dataclass
from enum import Enum
from typing import List, Dict, Optional
import logging
import re

from domain.models import ParsedResult, Semester, Subject

logger = logging.getLogger(__name__)

# e.g. ES-101, BS112, CSE-201
SUBJECT_CODE_PATTERN = re.compile(r"^[A-Za-z]{2,4}-?\d{3}$")
# Any single alphanumeric token with at least one letter, for header-located codes
CODE_TOKEN_PATTERN = re.compile(r"^(?=.*[A-Za-z])[A-Za-z0-9][A-Za-z0-9/-]*$")
MARKS_PATTERN = re.compile(r"^\s*(\d+)")

MIN_ROW_CELLS = 4
MAX_LABEL_LENGTH = 80
LABEL_TAGS = ["td", "th", "span", "div", "label", "p", "b", "strong", "li", "dt", "dd"]

IDENTITY_LABELS = {
    "student_name": re.compile(r"student\s*name", re.IGNORECASE),
    "enrollment_no": re.compile(r"enrol{1,2}ment\s*no", re.IGNORECASE),
    "programme": re.compile(r"programme", re.IGNORECASE),
}


class ColumnRole(Enum):
    CODE = "code"
    NAME = "name"
    INTERNAL = "internal"
    EXTERNAL = "external"
    TOTAL = "total"
    UNKNOWN = "unknown"


def classify_header(text: str) -> ColumnRole:
    """
    Maps a header cell's text to the column role it most likely holds.
    Rules are checked in order, so "Subject Code" is a CODE column even
    though it also mentions "subject".
    """
    header = text.lower()
    if "code" in header or ("sub" in header and "no" in header):
        return ColumnRole.CODE
    if "subject" in header and "name" in header:
        return ColumnRole.NAME
    if any(k in header for k in ("internal", "int", "mid")):
        return ColumnRole.INTERNAL
    if any(k in header for k in ("external", "ext", "end")):
        return ColumnRole.EXTERNAL
    if "total" in header or "grand" in header:
        return ColumnRole.TOTAL
    return ColumnRole.UNKNOWN


def classify_columns(headers: List[str]) -> Dict[ColumnRole, int]:
    """First matching column wins for each role."""
    columns: Dict[ColumnRole, int] = {}
    for idx, text in enumerate(headers):
        role = classify_header(text)
        if role is not ColumnRole.UNKNOWN and role not in columns:
            columns[role] = idx
    return columns


def is_subject_code(text: str) -> bool:
    return bool(SUBJECT_CODE_PATTERN.match(text.strip()))


def parse_marks(text: Optional[str]) -> int:
    """Leading integer of a marks cell ("67*" -> 67); anything else is 0."""
    if not text:
        return 0
    match = MARKS_PATTERN.match(text)
    return int(match.group(1)) if match else 0


def looks_like_code(text: str) -> bool:
    return bool(CODE_TOKEN_PATTERN.match(text))


def _text(element: Tag) -> str:
    return " ".join(element.get_text(" ", strip=True).split())


@dataclass
class RowFields:
    """Partially resolved subject row, filled in by the extraction strategies."""
    code: str = ""
    name: str = ""
    internal: int = 0
    external: int = 0
    total: Optional[int] = None
    code_index: Optional[int] = None
    name_index: Optional[int] = None
    marks_resolved: bool = False

    def to_subject(self) -> Optional[Subject]:
        if not looks_like_code(self.code):
            return None
        total = self.total
        if total is None:
            total = self.internal + self.external
        if total <= 0:
            return None
        return Subject(
            code=self.code,
            name=self.name,
            internal=self.internal,
            external=self.external,
            total=total,
        )


def from_header_columns(cells: List[str], columns: Dict[ColumnRole, int]) -> RowFields:
    fields = RowFields()

    def cell(role: ColumnRole) -> Optional[str]:
        idx = columns.get(role)
        if idx is None or idx >= len(cells):
            return None
        return cells[idx]

    code = cell(ColumnRole.CODE)
    if code and looks_like_code(code):
        fields.code = code
        fields.code_index = columns[ColumnRole.CODE]

    name = cell(ColumnRole.NAME)
    if name:
        fields.name = name
        fields.name_index = columns[ColumnRole.NAME]

    internal = cell(ColumnRole.INTERNAL)
    if internal is not None:
        fields.internal = parse_marks(internal)
        fields.marks_resolved = True

    external = cell(ColumnRole.EXTERNAL)
    if external is not None:
        fields.external = parse_marks(external)
        fields.marks_resolved = True

    total = cell(ColumnRole.TOTAL)
    if total is not None:
        fields.total = parse_marks(total)
        fields.marks_resolved = True

    return fields


def from_code_pattern(cells: List[str], fields: RowFields) -> RowFields:
    """
    Locates the subject code by its shape when the header did not give us one.
    The cell right after the code is taken as the subject name.
    """
    if fields.code and fields.name:
        return fields

    if not fields.code:
        code_idx = next((i for i, text in enumerate(cells) if is_subject_code(text)), None)
        if code_idx is None:
            return fields
        fields.code = cells[code_idx]
        fields.code_index = code_idx
        # The header name column does not line up with this row.
        fields.name = ""
        fields.name_index = None

    name_idx = fields.code_index + 1 if fields.code_index is not None else None
    if not fields.name and name_idx is not None and name_idx < len(cells):
        fields.name = cells[name_idx]
        fields.name_index = name_idx
    return fields


def from_trailing_marks(cells: List[str], fields: RowFields) -> RowFields:
    """
    Without any marks column, read the numeric cells that follow the code/name
    as internal, external, total (or internal, external / total alone).
    """
    if fields.marks_resolved or fields.code_index is None:
        return fields

    start = max(i for i in (fields.code_index, fields.name_index) if i is not None) + 1
    numbers = [parse_marks(text) for text in cells[start:] if MARKS_PATTERN.match(text)]

    if len(numbers) >= 3:
        fields.internal, fields.external, fields.total = numbers[0], numbers[1], numbers[2]
    elif len(numbers) == 2:
        fields.internal, fields.external = numbers
    elif len(numbers) == 1:
        fields.total = numbers[0]
    else:
        return fields

    fields.marks_resolved = True
    return fields


class ResultParser:
    @staticmethod
    def extract(html_content: str) -> ParsedResult:
        """
        Parses an exam portal result page into student identity and semesters.
        Never raises: on failure the returned result simply has no semesters.
        """
        result = ParsedResult()
        if not html_content:
            return result

        try:
            soup = BeautifulSoup(html_content, "html.parser")

            identity = ResultParser.extract_identity(soup)
            result.student_name = identity["student_name"]
            result.enrollment_no = identity["enrollment_no"]
            result.programme = identity["programme"]

            for table in soup.find_all("table"):
                subjects = ResultParser.parse_table(table)
                if not subjects:
                    continue
                result.semesters.append(
                    Semester(semester=len(result.semesters) + 1, subjects=subjects)
                )
        except Exception as e:
            logger.exception(f"Failed to parse result page: {e}")

        logger.info(f"Extracted {len(result.semesters)} semesters for '{result.enrollment_no}'")
        return result

    @staticmethod
    def extract_identity(soup: BeautifulSoup) -> Dict[str, str]:
        identity = {key: "" for key in IDENTITY_LABELS}

        for element in soup.find_all(LABEL_TAGS):
            text = _text(element)
            if not text or len(text) > MAX_LABEL_LENGTH:
                continue

            for key, pattern in IDENTITY_LABELS.items():
                if identity[key]:
                    continue
                match = pattern.match(text)
                if not match:
                    continue
                # A wrapper around the real label (and its value) is not a label.
                if any(pattern.match(_text(child)) for child in element.find_all(LABEL_TAGS)):
                    continue
                identity[key] = ResultParser._label_value(element, text[match.end():])

            if all(identity.values()):
                break

        return identity

    @staticmethod
    def _label_value(label: Tag, rest: str) -> str:
        # "Student Name : VIJAY KUMAR" inside a single element
        inline = re.match(r"^[^:]*:\s*(.+)$", rest)
        if inline:
            return inline.group(1).strip()

        # <td><b>Enrolment No</b></td><td>...</td>: the value sits next to the
        # element that only wraps the label.
        node = label
        while (node.find_next_sibling() is None and isinstance(node.parent, Tag)
               and node.parent.name in LABEL_TAGS and _text(node.parent) == _text(label)):
            node = node.parent

        sibling = node.find_next_sibling()
        return _text(sibling) if sibling is not None else ""

    @staticmethod
    def parse_table(table: Tag) -> List[Subject]:
        # Rows of nested tables belong to those tables, not this one.
        rows = [tr for tr in table.find_all("tr") if tr.find_parent("table") is table]
        if not rows:
            return []

        columns: Dict[ColumnRole, int] = {}
        first_cells = rows[0].find_all(["td", "th"], recursive=False)
        first_texts = [_text(c) for c in first_cells]
        if ResultParser.is_header_row(first_cells, first_texts):
            columns = classify_columns(first_texts)
            rows = rows[1:]

        subjects = []
        for row in rows:
            cells = [_text(c) for c in row.find_all(["td", "th"], recursive=False)]
            subject = ResultParser.parse_row(cells, columns)
            if subject:
                subjects.append(subject)
        return subjects

    @staticmethod
    def is_header_row(cells: List[Tag], texts: List[str]) -> bool:
        if any(is_subject_code(t) for t in texts):
            return False
        if any(c.name == "th" for c in cells):
            return True
        return bool(classify_columns(texts))

    @staticmethod
    def parse_row(cells: List[str], columns: Dict[ColumnRole, int]) -> Optional[Subject]:
        if len(cells) < MIN_ROW_CELLS:
            return None

        fields = from_header_columns(cells, columns)
        for strategy in (from_code_pattern, from_trailing_marks):
            fields = strategy(cells, fields)
        return fields.to_subject()
