import csv
import logging
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional

logger = logging.getLogger(__name__)

# Fallback for codes missing from the table. A policy choice, not a university rule.
DEFAULT_CREDITS = 3


class CreditTable(Mapping[str, int]):
    """
    Read-only subject code -> credits lookup. Built once at startup and shared
    between requests; lookups are exact string matches.
    """

    def __init__(self, credits: Optional[Dict[str, int]] = None):
        self._credits = MappingProxyType(dict(credits or {}))

    def __getitem__(self, code: str) -> int:
        return self._credits[code]

    def __iter__(self) -> Iterator[str]:
        return iter(self._credits)

    def __len__(self) -> int:
        return len(self._credits)

    def __repr__(self) -> str:
        return f"CreditTable({len(self)} subjects)"


def load_credit_table(path: str) -> CreditTable:
    """
    Reads a `code,credits` CSV (header row skipped). Bad rows are skipped and
    a missing or unreadable file gives an empty table.
    """
    credits: Dict[str, int] = {}
    try:
        with open(path, newline="", encoding="utf-8") as f:
            reader = csv.reader(f)
            next(reader, None)
            for line_no, row in enumerate(reader, start=2):
                if len(row) < 2:
                    if any(cell.strip() for cell in row):
                        logger.debug(f"Skipping malformed credit row {line_no}: {row}")
                    continue

                code, value = row[0].strip(), row[1].strip()
                try:
                    value = int(value)
                except ValueError:
                    logger.debug(f"Skipping credit row {line_no} with bad credits: {row}")
                    continue

                if not code or value <= 0:
                    logger.debug(f"Skipping credit row {line_no}: {row}")
                    continue
                credits[code] = value
    except (OSError, csv.Error, UnicodeDecodeError) as e:
        logger.error(f"Error loading credits from {path}: {e}")
        return CreditTable()

    logger.info(f"Loaded {len(credits)} subject credits")
    return CreditTable(credits)
