"""
Price-list export — chat-ready text and a formatted Excel workbook.

Text: one block per product (name, brand, client-facing price), with *bold*
markers for chat apps; the plain variant drops the markers for a .txt
download.  The price shown is the suggested price when visible, otherwise
the seller price; with both hidden no price line is written.

Excel: one "Price List" sheet with only the visible price columns, styled
header, money number formats, auto-filter, and a frozen header row.

Public API:
    build_price_list_text(priced, visibility, for_chat, today) → str
    export_price_list_excel(priced, visibility, output_path) → Path
"""

import logging
from datetime import date
from pathlib import Path

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from processing.models import Visibility
from processing.pricing_engine import PricedProduct, priced_view_to_dataframe

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Constants
# ═══════════════════════════════════════════════════════════════════════════

_SEPARATOR_LINE = "-" * 34

_HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
_HEADER_FONT = Font(color="FFFFFF", bold=True, size=11)
_NORMAL_FONT = Font(size=10)

# Max column width (characters) to prevent excessively wide columns
_MAX_COL_WIDTH = 50
_MIN_COL_WIDTH = 8

_MONEY_FORMAT = "#,##0.00"
_MONEY_COLUMNS: set[str] = {"Base Cost", "Seller Price", "Suggested Price"}

# Internal bookkeeping columns left out of the customer-facing export
_EXCLUDED_COLUMNS: set[str] = {"Id", "Source"}


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def build_price_list_text(
    priced: list[PricedProduct],
    visibility: Visibility,
    for_chat: bool = True,
    today: date | None = None,
) -> str:
    """
    Render the priced view as a shareable text list.

    Args:
        priced: Rows from pricing_engine.project_catalog().
        visibility: Which prices may be shown.
        for_chat: Keep *bold* markers (chat apps); False strips them.
        today: Date printed in the header (defaults to today).

    Returns:
        The complete text.
    """
    list_date = today or date.today()
    header = f"📦 *PRICE LIST - {list_date:%Y-%m-%d}*\n{_SEPARATOR_LINE}\n\n"

    blocks: list[str] = []
    for row in priced:
        lines = [f"🛍️ *{row.product.name.upper()}*"]
        if row.product.brand:
            lines.append(f"🏷️ Brand: {row.product.brand}")

        price = _client_facing_price(row, visibility)
        if price is not None:
            lines.append(f"💰 Price: {row.currency}{price:,.2f}")

        lines.append(_SEPARATOR_LINE)
        blocks.append("\n".join(lines))

    text = header + "\n\n".join(blocks)

    if not for_chat:
        text = text.replace("*", "")

    logger.info(f"Built price-list text for {len(priced)} products")
    return text


def export_price_list_excel(
    priced: list[PricedProduct],
    visibility: Visibility,
    output_path: Path,
) -> Path:
    """
    Write the priced view to a formatted Excel workbook.

    Args:
        priced: Rows from pricing_engine.project_catalog().
        visibility: Which price columns to include.
        output_path: Where the .xlsx file should be saved.

    Returns:
        The output_path (same as input, for convenience).
    """
    dataframe = priced_view_to_dataframe(priced, visibility)
    columns = [c for c in dataframe.columns if c not in _EXCLUDED_COLUMNS]

    workbook = openpyxl.Workbook()
    worksheet = workbook.active
    worksheet.title = "Price List"

    # Write header row
    for col_idx, col_name in enumerate(columns, start=1):
        cell = worksheet.cell(row=1, column=col_idx, value=col_name)
        cell.fill = _HEADER_FILL
        cell.font = _HEADER_FONT
        cell.alignment = Alignment(horizontal="center")

    # Write data rows
    for row_offset, df_idx in enumerate(dataframe.index):
        excel_row = row_offset + 2  # 1-based, header is row 1
        for col_idx, col_name in enumerate(columns, start=1):
            cell = worksheet.cell(
                row=excel_row, column=col_idx, value=dataframe.at[df_idx, col_name]
            )
            cell.font = _NORMAL_FONT
            if col_name in _MONEY_COLUMNS:
                cell.number_format = _MONEY_FORMAT

    _auto_fit_column_widths(worksheet)

    if columns:
        last_col_letter = get_column_letter(len(columns))
        worksheet.auto_filter.ref = f"A1:{last_col_letter}{len(dataframe) + 1}"

    # Freeze the header row
    worksheet.freeze_panes = "A2"

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(str(output_path))
    workbook.close()

    logger.info(f"Price list saved to '{output_path}' ({len(dataframe)} products)")
    return output_path


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _client_facing_price(row: PricedProduct, visibility: Visibility) -> float | None:
    if visibility.show_suggested_price:
        return row.suggested_price
    if visibility.show_seller_price:
        return row.seller_price
    return None


def _auto_fit_column_widths(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
) -> None:
    """Set each column's width from its longest value, within bounds."""
    for column_cells in worksheet.columns:
        max_length = max(
            (len(str(cell.value)) for cell in column_cells if cell.value is not None),
            default=0,
        )
        width = min(max(max_length + 2, _MIN_COL_WIDTH), _MAX_COL_WIDTH)
        worksheet.column_dimensions[column_cells[0].column_letter].width = width
