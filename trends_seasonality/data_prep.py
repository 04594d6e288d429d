# trends_seasonality/data_prep.py
from __future__ import annotations
import csv, io, logging, os, re
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

import pandas as pd

from .errors import (
    DateColumnNotFoundError,
    EmptyFileError,
    FileTooLargeError,
    HeaderNotFoundError,
    InvalidFileTypeError,
    MalformedCsvError,
    NoValidDataError,
    ValueColumnNotFoundError,
)
from .models import UNKNOWN_COUNTRY, SeriesMetadata, TimeSeriesPoint, sort_points

logger = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 10 * 1024 * 1024
METADATA_SCAN_ROWS = 5
CSV_CONTENT_TYPES = {"text/csv"}

Row = List[str]

_ISO_DATE_RX = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DIGIT_RX = re.compile(r"\d")
_PAREN_RX = re.compile(r"\(([^)]+)\)")
_LEADING_FLOAT_RX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_PERIOD_WORDS = ("week", "month", "date")


# --- helpers ---

def is_period_label(cell: str) -> bool:
    """True for header cells naming the time axis: contains week/month/date, or is exactly 'day'."""
    s = (cell or "").strip().lower()
    return any(w in s for w in _PERIOD_WORDS) or s == "day"

def _mentions_period(s: str) -> bool:
    s = s.lower()
    return any(w in s for w in _PERIOD_WORDS)

def _is_numeric(s: str) -> bool:
    try:
        float(s)
    except ValueError:
        return False
    return True

def _parse_float(s: str) -> float:
    # leading-number parse: "45abc" -> 45.0, garbage -> 0.0
    m = _LEADING_FLOAT_RX.match(s.strip())
    return float(m.group(0)) if m else 0.0

def decode_bytes(data: Union[bytes, str]) -> str:
    if isinstance(data, str):
        return data.lstrip("\ufeff")
    return data.decode("utf-8-sig", errors="replace")


# --- upload checks ---

def validate_upload(
    filename: str,
    size: int,
    content_type: Optional[str] = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> None:
    """
    Reject a file before parsing:
      - neither a text/csv MIME type nor a .csv extension -> InvalidFileTypeError
      - larger than max_bytes -> FileTooLargeError
    """
    is_csv_name = (filename or "").lower().endswith(".csv")
    if content_type not in CSV_CONTENT_TYPES and not is_csv_name:
        raise InvalidFileTypeError(filename, content_type)
    if size > max_bytes:
        raise FileTooLargeError(size, max_bytes)


# --- tokenizing + metadata ---

def tokenize_rows(text: str) -> List[Row]:
    """
    Comma-delimited, double-quote escaped. Blank lines are dropped entirely.
    An unterminated quote runs to the end of the text, so a single field may be
    as long as the whole file.
    """
    if len(text) >= csv.field_size_limit():
        csv.field_size_limit(len(text) + 1)
    reader = csv.reader(io.StringIO(text, newline=""))
    try:
        return [row for row in reader if row]
    except csv.Error as e:
        raise MalformedCsvError(str(e), line=reader.line_num) from e

def keyword_from_filename(filename: Optional[str]) -> str:
    base = os.path.basename(filename or "")
    stem, _ = os.path.splitext(base)
    return re.sub(r"[_-]", " ", stem)

def _match_metadata_cell(cell: str) -> Optional[Tuple[str, str]]:
    s = cell.strip()

    # "coffee: (United States)"
    if ":" in s and "(" in s and ")" in s:
        term = s.split(":")[0].strip()
        m = _PAREN_RX.search(s)
        if term and m and not _mentions_period(term):
            return term, m.group(1).strip()

    # "coffee (United States)"
    if "(" in s and ")" in s and 5 < len(s) < 100:
        term = s.split("(")[0].strip()
        m = _PAREN_RX.search(s)
        if (term and m and not _mentions_period(term)
                and "%" not in term and not _is_numeric(term)):
            return term, m.group(1).strip()

    return None

def extract_metadata(rows: Sequence[Row], filename: Optional[str] = None) -> SeriesMetadata:
    """
    Best effort: first cell in the leading rows shaped like '<term>: (<region>)'
    or '<term> (<region>)'. Otherwise the filename becomes the keyword.
    """
    for row in rows[:METADATA_SCAN_ROWS]:
        for cell in row:
            hit = _match_metadata_cell(cell)
            if hit:
                return SeriesMetadata(keyword=hit[0], country=hit[1])

    keyword = keyword_from_filename(filename)
    logger.info("No keyword/region cell found; using filename keyword %r", keyword)
    return SeriesMetadata(keyword=keyword, country=UNKNOWN_COUNTRY)


# --- cell conversion ---

def _slash_date(s: str) -> Optional[date]:
    # month first, as US-locale Trends exports write it; "15/01/2023" is rejected
    try:
        return datetime.strptime(s, "%m/%d/%Y").date()
    except ValueError:
        return None

def _general_date(s: str) -> Optional[date]:
    # words like "today"/"now" would resolve to the wall clock
    if not _DIGIT_RX.search(s):
        return None
    ts = pd.to_datetime(s, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    return ts.date()

def parse_date_cell(cell: str) -> Optional[date]:
    """
    '2023-01-01', '2023-01-01 - 2023-01-07' (week range, first day wins),
    '01/15/2023', 'Jan 2023', ... -> date, or None when nothing parses.
    """
    s = cell.strip()
    if "-" in s:
        first = s.split(" - ")[0]
        if _ISO_DATE_RX.match(first):
            try:
                return datetime.strptime(first, "%Y-%m-%d").date()
            except ValueError:
                return None
        return _general_date(first)
    if "/" in s:
        return _slash_date(s)
    return _general_date(s)

def parse_value_cell(cell: str) -> float:
    s = cell.strip()
    if "%" in s:
        return _parse_float(s.replace("%", ""))
    if s == "<1":
        return 0.5
    return _parse_float(s)


# --- header discovery / row conversion ---

class ScanState(Enum):
    SCANNING = "scanning-for-header"
    COLUMNS_RESOLVED = "columns-resolved"
    CONVERTING = "converting-rows"
    DONE = "done"


class HeaderScanner:
    """
    Walks the tokenized rows in three steps, each with its own failure:
      find_header()      SCANNING -> (header found)     HeaderNotFoundError
      resolve_columns()  -> COLUMNS_RESOLVED            Date/ValueColumnNotFoundError
      convert_rows()     -> CONVERTING -> DONE          (bad rows are skipped)
    """

    def __init__(self, rows: Sequence[Row]):
        self.rows = rows
        self.state = ScanState.SCANNING
        self.header_index: Optional[int] = None
        self.date_col: Optional[int] = None
        self.value_col: Optional[int] = None
        self.skipped = 0

    @property
    def header(self) -> Row:
        if self.header_index is None:
            raise RuntimeError("header not located yet")
        return list(self.rows[self.header_index])

    def find_header(self) -> int:
        for i, row in enumerate(self.rows):
            if len(row) >= 2 and any(is_period_label(c) for c in row):
                self.header_index = i
                return i
        raise HeaderNotFoundError(len(self.rows))

    def resolve_columns(self) -> Tuple[int, int]:
        if self.header_index is None:
            self.find_header()
        header = self.header

        date_col = next((i for i, c in enumerate(header) if is_period_label(c)), None)
        if date_col is None:
            raise DateColumnNotFoundError(header)
        value_col = next(
            (i for i, c in enumerate(header)
             if i != date_col and not is_period_label(c) and c.strip() != ""),
            None,
        )
        if value_col is None:
            raise ValueColumnNotFoundError(header)

        self.date_col, self.value_col = date_col, value_col
        self.state = ScanState.COLUMNS_RESOLVED
        logger.debug("Header at row %d: date=%r value=%r",
                     self.header_index + 1, header[date_col], header[value_col])
        return date_col, value_col

    def _convert_row(self, row_no: int, row: Row) -> Optional[TimeSeriesPoint]:
        if len(row) <= max(self.date_col, self.value_col):
            return None
        date_str = row[self.date_col].strip()
        value_str = row[self.value_col].strip()
        if not date_str or not value_str:
            return None

        day = parse_date_cell(date_str)
        if day is None:
            logger.warning("Skipping row %d due to invalid date: %s", row_no, date_str)
            return None
        return TimeSeriesPoint.from_date(day, parse_value_cell(value_str))

    def convert_rows(self) -> List[TimeSeriesPoint]:
        if self.state is not ScanState.COLUMNS_RESOLVED:
            self.resolve_columns()
        self.state = ScanState.CONVERTING

        points: List[TimeSeriesPoint] = []
        start = self.header_index + 1
        for offset, row in enumerate(self.rows[start:]):
            pt = self._convert_row(start + offset + 1, row)
            if pt is None:
                self.skipped += 1
                continue
            points.append(pt)

        self.state = ScanState.DONE
        if not points:
            raise NoValidDataError(len(self.rows) - start)
        if self.skipped:
            logger.info("Parsed %d points, skipped %d rows", len(points), self.skipped)
        return sort_points(points)


# --- public entrypoints ---

def parse_trends_csv(
    data: Union[bytes, str],
    filename: Optional[str] = None,
) -> Tuple[List[TimeSeriesPoint], SeriesMetadata]:
    """
    Google Trends CSV export -> (points sorted by date, metadata).
    Raises a ParseError subclass when the file has no usable structure.
    """
    rows = tokenize_rows(decode_bytes(data))
    if not rows:
        raise EmptyFileError()

    meta = extract_metadata(rows, filename)
    scanner = HeaderScanner(rows)
    scanner.find_header()
    scanner.resolve_columns()
    points = scanner.convert_rows()
    return points, meta

def load_trends_file(
    path: str,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> Tuple[List[TimeSeriesPoint], SeriesMetadata]:
    validate_upload(path, os.path.getsize(path), max_bytes=max_bytes)
    with open(path, "rb") as fh:
        raw = fh.read()
    return parse_trends_csv(raw, filename=path)
