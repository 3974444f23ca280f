"""
Messy-column detector — spots free-text columns with embedded prices.

Some price lists are pasted chat messages or scraped text: one column holds
whole sentences like "Aceite de oliva 500ml - $4.500 c/u".  Column
extraction cannot parse those, so the column is collected into a text block
and handed to the cleaning collaborator instead.

Public API:
    detect_messy_column(sample) → int | None
    build_text_block(grid, column) → str
"""

import logging

from config.column_keywords import (
    CURRENCY_MARKERS,
    MESSY_CELL_MIN_LENGTH,
    MESSY_ROW_FRACTION,
    TEXT_BLOCK_MAX_CHARS,
    TEXT_BLOCK_MIN_CELL_LENGTH,
)

logger = logging.getLogger(__name__)


def detect_messy_column(sample: list[list[object]]) -> int | None:
    """
    Find the first column whose cells are mostly free text with a price.

    A column is messy when more than MESSY_ROW_FRACTION of the sampled rows
    have a cell in that column containing a currency marker and longer than
    MESSY_CELL_MIN_LENGTH characters.

    Args:
        sample: The first rows of the grid.

    Returns:
        Index of the messy column, or None.
    """
    if not sample:
        return None

    width = max(len(row) for row in sample)
    threshold = len(sample) * MESSY_ROW_FRACTION

    for column in range(width):
        messy_rows = sum(1 for row in sample if _is_messy_cell(_cell_at(row, column)))

        if messy_rows > threshold:
            logger.info(
                f"Column {column} looks like free text with prices "
                f"({messy_rows}/{len(sample)} rows)"
            )
            return column

    return None


def build_text_block(grid: list[list[object]], column: int) -> str:
    """
    Join the non-trivial cells of *column* into one newline-separated block.

    Cells of TEXT_BLOCK_MIN_CELL_LENGTH characters or fewer are skipped and
    the block is cut to TEXT_BLOCK_MAX_CHARS.
    """
    lines = [
        text
        for text in (_cell_text(_cell_at(row, column)) for row in grid)
        if len(text) > TEXT_BLOCK_MIN_CELL_LENGTH
    ]
    block = "\n".join(lines)

    if len(block) > TEXT_BLOCK_MAX_CHARS:
        logger.info(
            f"Text block truncated from {len(block)} to {TEXT_BLOCK_MAX_CHARS} chars"
        )
        block = block[:TEXT_BLOCK_MAX_CHARS]

    return block


def _is_messy_cell(cell: object) -> bool:
    text = _cell_text(cell)
    return len(text) > MESSY_CELL_MIN_LENGTH and any(
        marker in text for marker in CURRENCY_MARKERS
    )


def _cell_at(row: list[object], idx: int) -> object:
    return row[idx] if idx < len(row) else ""


def _cell_text(cell: object) -> str:
    return "" if cell is None else str(cell)
