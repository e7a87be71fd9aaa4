"""Spreadsheet ingestion module for Wrapped Builder.

Reads an uploaded customer file into plain row dicts plus the header-ordered
column list:
- CSV (.csv): header row inferred, every cell read as text
- Excel (.xlsx via openpyxl, .xls via xlrd): first sheet only, header row

Malformed or empty files of a supported type never raise; they produce an
empty ``IngestResult`` which downstream stages treat as a valid, if useless,
upload.
"""

import io
import logging
import math
import zipfile
from datetime import date, datetime
from pathlib import Path

import pandas as pd
import xlrd
from openpyxl.utils.exceptions import InvalidFileException

from wrapped_builder.errors import IngestionError
from wrapped_builder.schema.models import IngestResult, RawRow


_LOGGER = logging.getLogger(__name__)

CSV_EXTENSIONS = {"csv"}
EXCEL_ENGINES = {"xlsx": "openpyxl", "xls": "xlrd"}
SUPPORTED_EXTENSIONS = CSV_EXTENSIONS | set(EXCEL_ENGINES)

_READ_ERRORS = (
    pd.errors.EmptyDataError,
    pd.errors.ParserError,
    UnicodeDecodeError,
    ValueError,
    KeyError,
    OSError,
    zipfile.BadZipFile,
    InvalidFileException,
    xlrd.XLRDError,
)


# ---------------------------------------------------------------------------
# Cell and column cleaning
# ---------------------------------------------------------------------------

def clean_columns(df):
    """Strip whitespace from column names and make them strings."""
    df.columns = [c.strip() if isinstance(c, str) else str(c) for c in df.columns]
    return df


def clean_cell(value):
    """Convert a pandas cell to a plain Python value.

    NaN/None become ``""`` (blank); numpy scalars become native numbers;
    timestamps become ISO strings; whole floats from Excel become ints.
    """
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass  # non-scalar, pass through
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    elif hasattr(value, "item") and not isinstance(value, (str, bytes)):
        value = value.item()
    if isinstance(value, float):
        if math.isinf(value):
            return ""
        if value.is_integer():
            return int(value)
        return value
    if isinstance(value, datetime):
        if value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


def _is_blank(value) -> bool:
    return value == "" or (isinstance(value, str) and not value.strip())


def frame_to_rows(df) -> list[RawRow]:
    """Convert a DataFrame to row dicts, dropping rows with no content."""
    rows: list[RawRow] = []
    for record in df.to_dict(orient="records"):
        row = {str(k): clean_cell(v) for k, v in record.items()}
        if all(_is_blank(v) for v in row.values()):
            continue
        rows.append(row)
    return rows


# ---------------------------------------------------------------------------
# Format readers
# ---------------------------------------------------------------------------

def _as_buffer(source):
    """Return something pandas can read: a path or a binary buffer."""
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(source)
    return source


def read_csv(source) -> IngestResult:
    """Read comma-separated text with a header row."""
    try:
        df = pd.read_csv(
            _as_buffer(source),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except _READ_ERRORS as exc:
        _LOGGER.warning("Could not parse CSV upload: %s", exc)
        return IngestResult()
    df = clean_columns(df)
    return IngestResult(rows=frame_to_rows(df), columns=list(df.columns))


def read_excel(source, extension: str = "xlsx") -> IngestResult:
    """Read the first sheet of a workbook, keyed by its header row."""
    engine = EXCEL_ENGINES.get(extension, "openpyxl")
    try:
        df = pd.read_excel(_as_buffer(source), sheet_name=0, engine=engine)
    except _READ_ERRORS as exc:
        _LOGGER.warning("Could not parse %s upload: %s", extension, exc)
        return IngestResult()
    df = clean_columns(df)
    df = df.dropna(how="all")
    return IngestResult(rows=frame_to_rows(df), columns=list(df.columns))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def file_extension(name) -> str:
    """Lower-case extension without the dot (``"Data.XLSX"`` -> ``"xlsx"``)."""
    return Path(str(name)).suffix.lower().lstrip(".")


def ingest(source, filename: str | None = None) -> IngestResult:
    """Ingest an uploaded customer file.

    Args:
        source: Path to the file, or its raw bytes / a binary file object.
        filename: Original file name; required when *source* is not a path,
            since the extension selects the reader.

    Returns:
        IngestResult with rows and header-ordered columns.

    Raises:
        IngestionError: If the extension is not csv, xlsx, or xls.
    """
    if filename is None:
        if isinstance(source, (str, Path)):
            filename = str(source)
        else:
            filename = getattr(source, "name", "")
    ext = file_extension(filename)
    if ext not in SUPPORTED_EXTENSIONS:
        raise IngestionError(
            f"Unsupported file type '{ext or filename}'. "
            f"Valid types: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
        )

    if ext in CSV_EXTENSIONS:
        result = read_csv(source)
    else:
        result = read_excel(source, ext)
    _LOGGER.info("Ingested %d row(s), %d column(s) from %s",
                 len(result.rows), len(result.columns), filename)
    return result
