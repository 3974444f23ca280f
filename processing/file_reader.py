"""
Tabular file reader — loads a price-list file into a 2-D grid of cells.

Supported inputs:
  - .csv / .txt: delimiter sniffed (comma, semicolon, tab, pipe)
  - .tsv: tab-delimited
  - .xlsx / .xlsm: first worksheet, computed values

Text files are read entirely as strings (no type inference) so "10,50" and
"0012" reach the normalizer untouched.  Spreadsheet number cells keep their
numeric value; the price parser passes real numbers through as-is.

Public API:
    read_tabular_file(file_path) → FileReadResult
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path

import openpyxl
import pandas as pd

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS: set[str] = {".csv", ".txt"}
TAB_EXTENSIONS: set[str] = {".tsv"}
EXCEL_EXTENSIONS: set[str] = {".xlsx", ".xlsm"}

SUPPORTED_EXTENSIONS: set[str] = TEXT_EXTENSIONS | TAB_EXTENSIONS | EXCEL_EXTENSIONS

# Delimiters considered for .csv / .txt files, in tie-break order
CANDIDATE_DELIMITERS: str = ",;\t|"

# Non-blank lines sampled when sniffing the delimiter
SNIFF_SAMPLE_LINES: int = 20


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class FileReadResult:
    """Complete result of reading one tabular file."""

    grid: list[list[object]] = field(default_factory=list)
    sheet_name: str = ""
    total_rows_read: int = 0
    errors: list[str] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def read_tabular_file(file_path: Path) -> FileReadResult:
    """
    Read a delimited-text or spreadsheet file into a grid.

    Args:
        file_path: Path to the file.

    Returns:
        FileReadResult with the grid (trailing blank rows removed) and any
        errors encountered.  On error the grid is empty.
    """
    file_path = Path(file_path)
    result = FileReadResult()
    extension = file_path.suffix.lower()

    if extension not in SUPPORTED_EXTENSIONS:
        error_message = (
            f"Unsupported file type '{extension}' for '{file_path.name}'. "
            f"Supported: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
        )
        logger.error(error_message)
        result.errors.append(error_message)
        return result

    try:
        if extension in EXCEL_EXTENSIONS:
            grid, sheet_name = _read_excel_grid(file_path)
        else:
            separator = "\t" if extension in TAB_EXTENSIONS else None
            grid, sheet_name = _read_text_grid(file_path, separator), ""
    except Exception as exc:
        error_message = f"Cannot open file '{file_path.name}': {exc}"
        logger.error(error_message)
        result.errors.append(error_message)
        return result

    result.grid = _trim_trailing_blank_rows(grid)
    result.sheet_name = sheet_name
    result.total_rows_read = len(result.grid)

    logger.info(
        f"Finished reading '{file_path.name}': {result.total_rows_read} rows"
        + (f" from sheet '{sheet_name}'" if sheet_name else "")
    )
    return result


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _read_text_grid(file_path: Path, separator: str | None) -> list[list[object]]:
    """
    Read a delimited text file as strings.

    With separator=None the delimiter is sniffed from the first non-blank
    lines, so title lines and blank lines above the header do not decide it.
    Rows of different lengths are padded to the widest row.
    """
    raw_bytes = file_path.read_bytes()
    try:
        text = raw_bytes.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.info(f"'{file_path.name}' is not UTF-8 — reading as latin-1")
        text = raw_bytes.decode("latin-1")

    if not text.strip():
        logger.info(f"'{file_path.name}' has no content")
        return []

    if separator is None:
        separator = _sniff_delimiter(text)

    width = max(
        (len(row) for row in csv.reader(io.StringIO(text), delimiter=separator)),
        default=1,
    )
    logger.debug(f"'{file_path.name}': delimiter {separator!r}, {width} columns")

    dataframe = pd.read_csv(
        io.StringIO(text),
        sep=separator,
        header=None,
        names=list(range(width)),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=False,
    )
    return dataframe.fillna("").values.tolist()


def _sniff_delimiter(text: str) -> str:
    """
    Pick the delimiter of a text price list.

    csv.Sniffer runs over the first SNIFF_SAMPLE_LINES non-blank lines.  When
    it cannot decide (a title line breaks its consistency check), the
    candidate that splits the most sample lines wins, in candidate order on
    ties.  Defaults to a comma.
    """
    sample_lines = [line for line in text.splitlines() if line.strip()][:SNIFF_SAMPLE_LINES]

    try:
        dialect = csv.Sniffer().sniff("\n".join(sample_lines), delimiters=CANDIDATE_DELIMITERS)
        return dialect.delimiter
    except csv.Error:
        logger.debug("csv.Sniffer could not decide — counting delimiter coverage")

    best_delimiter, best_lines = ",", 0
    for delimiter in CANDIDATE_DELIMITERS:
        split_lines = sum(
            1 for row in csv.reader(sample_lines, delimiter=delimiter) if len(row) > 1
        )
        if split_lines > best_lines:
            best_delimiter, best_lines = delimiter, split_lines

    return best_delimiter


def _read_excel_grid(file_path: Path) -> tuple[list[list[object]], str]:
    """
    Read the first worksheet of an Excel workbook.

    Returns:
        Tuple of (grid, sheet_name).  Empty cells become "".
    """
    workbook = openpyxl.load_workbook(file_path, data_only=True, read_only=True)
    try:
        sheet_name = workbook.sheetnames[0]
        worksheet = workbook[sheet_name]

        grid: list[list[object]] = []
        for row in worksheet.iter_rows(values_only=True):
            grid.append(["" if value is None else value for value in row])
    finally:
        workbook.close()

    return grid, sheet_name


def _trim_trailing_blank_rows(grid: list[list[object]]) -> list[list[object]]:
    end = len(grid)
    while end > 0 and all(str(cell).strip() == "" for cell in grid[end - 1]):
        end -= 1
    return grid[:end]
