"""Data ingestion module for Table Deck Builder.

Reads a source spreadsheet into an ordered list of text rows, where the
first row is the header:

- Excel workbooks (.xlsx, .xlsm) — first worksheet unless a sheet is named
- CSV files — UTF-16 LE (tab-delimited, with BOM) or UTF-8 (comma-delimited)

Every cell becomes a string; blank cells become "".  Like a sheet's used
range, blank rows before the first and after the last non-blank row are
dropped, while blank rows between them are kept as empty table rows.
"""

import datetime
import logging
import math
import zipfile
from pathlib import Path

import pandas as pd

from tabledeck.errors import EmptyDataset, InputNotFound, InputUnreadable

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
CSV_SUFFIXES = {".csv", ".txt"}


# ---------------------------------------------------------------------------
# Cell parsing
# ---------------------------------------------------------------------------

def cell_text(value):
    """Convert a raw spreadsheet cell into display text.

    Examples:
        None      -> ""
        NaN       -> ""
        42        -> "42"
        42.0      -> "42"
        3.5       -> "3.5"
        Timestamp("2026-01-31")          -> "2026-01-31"
        Timestamp("2026-01-31 09:30")    -> "2026-01-31 09:30:00"
        "  text " -> "  text "
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    if value is pd.NaT:
        return ""
    if isinstance(value, (pd.Timestamp, datetime.datetime)):
        if (value.hour, value.minute, value.second, value.microsecond) == (0, 0, 0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    return str(value)


def frame_to_rows(df):
    """Convert a header-less DataFrame into a list of text rows.

    Leading and trailing blank rows are trimmed; interior ones are kept.
    """
    rows = [[cell_text(v) for v in record]
            for record in df.itertuples(index=False, name=None)]
    used = [i for i, row in enumerate(rows) if any(row)]
    if not used:
        return []
    return rows[used[0]:used[-1] + 1]


# ---------------------------------------------------------------------------
# Encoding detection and CSV reading
# ---------------------------------------------------------------------------

def detect_encoding(path):
    """Detect whether a file is UTF-16 LE (with BOM) or UTF-8.

    Returns (encoding, delimiter) tuple.
    """
    with open(path, "rb") as f:
        raw = f.read(4)
    if raw[:2] == b"\xff\xfe":
        return "utf-16", "\t"
    return "utf-8-sig", ","


def read_csv_rows(path):
    """Read a CSV file into text rows with automatic encoding detection."""
    encoding, sep = detect_encoding(path)
    try:
        df = pd.read_csv(path, encoding=encoding, sep=sep, header=None,
                         dtype=str, keep_default_na=False,
                         skip_blank_lines=False)
    except pd.errors.EmptyDataError:
        return []
    return frame_to_rows(df)


# ---------------------------------------------------------------------------
# Excel reading
# ---------------------------------------------------------------------------

def read_excel_rows(path, sheet=None):
    """Read one worksheet of an Excel workbook into text rows.

    Args:
        path: Path to the .xlsx / .xlsm file.
        sheet: Worksheet name or 0-based index; defaults to the first sheet.
    """
    sheet_name = 0 if sheet is None else sheet
    df = pd.read_excel(path, sheet_name=sheet_name, header=None,
                       dtype=object, engine="openpyxl")
    return frame_to_rows(df)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def read_rows(path, sheet=None):
    """Read a spreadsheet file into an ordered list of text rows.

    Args:
        path: Path to an Excel workbook or CSV file.
        sheet: Optional worksheet name or index (Excel only).

    Returns:
        list[list[str]] — the header row first, then the data rows.

    Raises:
        InputNotFound: If the path does not exist.
        InputUnreadable: If the file type is unsupported or parsing fails.
    """
    path = Path(path)
    if not path.exists():
        raise InputNotFound(f"Source file not found: {path}")

    suffix = path.suffix.lower()
    try:
        if suffix in EXCEL_SUFFIXES:
            rows = read_excel_rows(path, sheet)
        elif suffix in CSV_SUFFIXES:
            rows = read_csv_rows(path)
        else:
            raise InputUnreadable(
                f"Unsupported file type '{path.suffix}'. "
                f"Valid types: {', '.join(sorted(EXCEL_SUFFIXES | CSV_SUFFIXES))}"
            )
    except InputUnreadable:
        raise
    except (ValueError, KeyError, IndexError, OSError, zipfile.BadZipFile) as exc:
        raise InputUnreadable(f"Could not read {path}") from exc

    logger.debug("Read %d row(s) from %s", len(rows), path)
    return rows


def split_header(rows):
    """Split rows into (header, data_rows).

    Raises:
        EmptyDataset: If there is no header or no data row after it.
    """
    if not rows:
        raise EmptyDataset("No rows found in source")
    header, data = list(rows[0]), [list(r) for r in rows[1:]]
    if not data:
        raise EmptyDataset("Source has a header row but no data rows")
    return header, data
