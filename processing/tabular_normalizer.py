"""
Tabular normalizer — turns a 2-D grid of cells into product records.

Works on any grid regardless of where the header sits or how columns are
named:
  1. Header detection: the first of the top HEADER_SCAN_ROWS rows that has
     both a name-like and a price-like cell.  No match → row 0.
  2. Column tagging: each header cell gets a role (name / price / brand /
     unknown) from the keyword tables in config/column_keywords.py.
  3. Row extraction: every row below the header becomes a record; rows with
     a too-short name or a zero price are dropped silently.

When the header has no name + price pair, column 0 is taken as the name and
column 1 as the price.

Public API:
    normalize_grid(grid) → TabularNormalizationResult
    find_header_row(grid) → int
    classify_columns(header_cells) → ColumnRoles
"""

import logging
from dataclasses import dataclass, field

from config.column_keywords import (
    BRAND_KEYWORDS,
    DEFAULT_CURRENCY,
    FALLBACK_NAME_COLUMN,
    FALLBACK_PRICE_COLUMN,
    HEADER_SCAN_ROWS,
    MIN_NAME_LENGTH,
    NAME_KEYWORDS,
    PRICE_KEYWORDS,
    ROLE_BRAND,
    ROLE_NAME,
    ROLE_PRICE,
    ROLE_UNKNOWN,
)
from processing.models import RawProductRecord
from processing.numeric_parser import detect_currency, parse_price

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class ColumnRoles:
    """Which grid column plays which role."""

    name_column: int = FALLBACK_NAME_COLUMN
    price_column: int = FALLBACK_PRICE_COLUMN
    brand_column: int | None = None
    used_fallback: bool = False

    roles: list[str] = field(default_factory=list)
    """Role tag per header column (ROLE_NAME / ROLE_PRICE / ROLE_BRAND / ROLE_UNKNOWN)."""


@dataclass
class TabularNormalizationResult:
    """Output of the normalize_grid() function."""

    records: list[RawProductRecord] = field(default_factory=list)
    header_row_index: int = 0
    columns: ColumnRoles = field(default_factory=ColumnRoles)
    rows_read: int = 0
    rows_dropped: int = 0


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def normalize_grid(grid: list[list[object]]) -> TabularNormalizationResult:
    """
    Extract product records from a grid of cells.

    Args:
        grid: Rows of cell values (strings, or numbers from spreadsheets).

    Returns:
        TabularNormalizationResult with records in row order plus the
        detected header row and column roles.
    """
    if not grid:
        return TabularNormalizationResult()

    header_idx = find_header_row(grid)
    columns = classify_columns(grid[header_idx])

    result = TabularNormalizationResult(header_row_index=header_idx, columns=columns)

    for row_offset, row in enumerate(grid[header_idx + 1 :], start=header_idx + 1):
        result.rows_read += 1
        record = _extract_record(row, columns)

        if record is None:
            result.rows_dropped += 1
            logger.debug(f"Row {row_offset}: dropped (short name or no price)")
            continue

        result.records.append(record)

    logger.info(
        f"Grid normalized: header at row {header_idx}, "
        f"name={columns.name_column}, price={columns.price_column}, "
        f"brand={columns.brand_column}, fallback={columns.used_fallback}, "
        f"{len(result.records)} records kept, {result.rows_dropped} dropped"
    )

    return result


def find_header_row(grid: list[list[object]]) -> int:
    """
    Return the index of the first row that looks like a header.

    A row qualifies when at least one cell contains a name keyword and at
    least one cell contains a price keyword (case-insensitive).  Only the
    first HEADER_SCAN_ROWS rows are scanned.  Returns 0 if none qualifies.
    """
    for row_idx, row in enumerate(grid[:HEADER_SCAN_ROWS]):
        cells = [_cell_text(cell).lower() for cell in row]
        has_name = any(_matches(cell, NAME_KEYWORDS) for cell in cells)
        has_price = any(_matches(cell, PRICE_KEYWORDS) for cell in cells)

        if has_name and has_price:
            logger.debug(f"Header row detected at index {row_idx}")
            return row_idx

    logger.info("No header row matched the keyword tables — using row 0")
    return 0


def classify_columns(header_cells: list[object]) -> ColumnRoles:
    """
    Tag header cells with column roles.

    - name: first column matching a name keyword and no price keyword
      (keeps "price description" out of the name slot).
    - price: first column matching a price keyword.
    - brand: first other column matching a brand / SKU keyword.

    Falls back to name=0, price=1 when no name + price pair is found.

    Args:
        header_cells: Cells of the header row.

    Returns:
        ColumnRoles with column indices and a role tag per column.
    """
    lowered = [_cell_text(cell).lower() for cell in header_cells]

    name_column = _first_index(
        lowered,
        lambda text: _matches(text, NAME_KEYWORDS) and not _matches(text, PRICE_KEYWORDS),
    )
    price_column = _first_index(lowered, lambda text: _matches(text, PRICE_KEYWORDS))

    if name_column is None or price_column is None:
        logger.info(
            "No name + price column pair in header — falling back to "
            f"columns {FALLBACK_NAME_COLUMN} (name) and {FALLBACK_PRICE_COLUMN} (price)"
        )
        return ColumnRoles(
            used_fallback=True,
            roles=_role_tags(len(lowered), FALLBACK_NAME_COLUMN, FALLBACK_PRICE_COLUMN, None),
        )

    brand_column = _first_index(
        lowered,
        lambda text: _matches(text, BRAND_KEYWORDS),
        exclude={name_column, price_column},
    )

    return ColumnRoles(
        name_column=name_column,
        price_column=price_column,
        brand_column=brand_column,
        used_fallback=False,
        roles=_role_tags(len(lowered), name_column, price_column, brand_column),
    )


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _extract_record(row: list[object], columns: ColumnRoles) -> RawProductRecord | None:
    """
    Build one record from a data row, or None if the row is filtered out.

    Args:
        row: Cell values for the row.
        columns: Column roles from the header.
    """
    name = _cell_text(_cell_at(row, columns.name_column)).strip()
    if len(name) < MIN_NAME_LENGTH:
        return None

    price_cell = _cell_at(row, columns.price_column)
    price = parse_price(price_cell)
    if price <= 0:
        return None

    brand = ""
    if columns.brand_column is not None:
        brand = _cell_text(_cell_at(row, columns.brand_column)).strip()

    return RawProductRecord(
        name=name,
        brand=brand,
        original_price=price,
        currency=detect_currency(price_cell) or DEFAULT_CURRENCY,
    )


def _matches(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


def _first_index(values: list[str], predicate, exclude: set[int] | None = None) -> int | None:
    """Index of the first value satisfying *predicate*, skipping *exclude*."""
    for idx, value in enumerate(values):
        if exclude and idx in exclude:
            continue
        if predicate(value):
            return idx
    return None


def _role_tags(
    width: int,
    name_column: int,
    price_column: int,
    brand_column: int | None,
) -> list[str]:
    roles = [ROLE_UNKNOWN] * width
    for idx, role in (
        (name_column, ROLE_NAME),
        (price_column, ROLE_PRICE),
        (brand_column, ROLE_BRAND),
    ):
        if idx is not None and idx < width:
            roles[idx] = role
    return roles


def _cell_at(row: list[object], idx: int) -> object:
    return row[idx] if 0 <= idx < len(row) else ""


def _cell_text(cell: object) -> str:
    """Stringify a cell; None becomes ""."""
    if cell is None:
        return ""
    return str(cell)
