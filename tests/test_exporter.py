"""
Tests for utils/exporter.py

Covers: chat text layout, plain-text variant, which price is shown per
visibility preset, and the Excel export (columns, number formats, header).
"""

from datetime import date
from pathlib import Path

import openpyxl

from processing.catalog import upsert_products
from processing.models import (
    SOURCE_FILE,
    PricingConfiguration,
    RawProductRecord,
    Visibility,
)
from processing.pricing_engine import project_catalog
from utils.exporter import build_price_list_text, export_price_list_excel

_TODAY = date(2024, 5, 1)


def _make_priced():
    records = [
        RawProductRecord(name="Blue Widget", brand="Acme", original_price=1000.0, currency="$"),
        RawProductRecord(name="Rice", brand="", original_price=10.0, currency="€"),
    ]
    catalog = upsert_products([], records, SOURCE_FILE, now="2024-05-01T00:00:00+00:00").catalog
    config = PricingConfiguration(tiers={"t1": 10.0}, active_tier="t1", client_adjustment=0.0)
    return project_catalog(catalog, config)


# ═══════════════════════════════════════════════════════════════════════════
# Text export
# ═══════════════════════════════════════════════════════════════════════════

class TestBuildPriceListText:
    def test_chat_layout(self):
        text = build_price_list_text(_make_priced(), Visibility(), for_chat=True, today=_TODAY)

        lines = text.split("\n")
        assert lines[0] == "📦 *PRICE LIST - 2024-05-01*"
        assert lines[1] == "-" * 34
        assert "🛍️ *BLUE WIDGET*" in text
        assert "🏷️ Brand: Acme" in text
        assert "💰 Price: $1,100.00" in text
        assert "💰 Price: €11.00" in text

    def test_product_without_brand_has_no_brand_line(self):
        text = build_price_list_text(_make_priced()[1:], Visibility(), today=_TODAY)
        assert "Brand:" not in text

    def test_plain_text_strips_bold_markers(self):
        text = build_price_list_text(_make_priced(), Visibility(), for_chat=False, today=_TODAY)
        assert "*" not in text
        assert "PRICE LIST - 2024-05-01" in text

    def test_no_visible_price_omits_price_line(self):
        hidden = Visibility(show_base_cost=True, show_seller_price=False, show_suggested_price=False)
        text = build_price_list_text(_make_priced(), hidden, today=_TODAY)
        assert "Price:" not in text

    def test_empty_view_has_header_only(self):
        text = build_price_list_text([], Visibility(), today=_TODAY)
        assert text.startswith("📦 *PRICE LIST - 2024-05-01*")
        assert "🛍️" not in text


# ═══════════════════════════════════════════════════════════════════════════
# Excel export
# ═══════════════════════════════════════════════════════════════════════════

class TestExportPriceListExcel:
    def test_workbook_contents(self, tmp_path: Path):
        output = export_price_list_excel(_make_priced(), Visibility(), tmp_path / "out" / "list.xlsx")

        workbook = openpyxl.load_workbook(output)
        worksheet = workbook["Price List"]
        header = [cell.value for cell in worksheet[1]]

        assert header == ["Name", "Brand", "Currency", "Base Cost", "Seller Price", "Suggested Price"]
        assert worksheet.max_row == 3
        assert worksheet["A2"].value == "Blue Widget"
        assert worksheet["E2"].value == 1100.0
        assert worksheet["E2"].number_format == "#,##0.00"
        assert worksheet.freeze_panes == "A2"

    def test_client_view_columns(self, tmp_path: Path):
        client = Visibility(show_base_cost=False, show_seller_price=False)

        output = export_price_list_excel(_make_priced(), client, tmp_path / "client.xlsx")

        worksheet = openpyxl.load_workbook(output)["Price List"]
        header = [cell.value for cell in worksheet[1]]
        assert header == ["Name", "Brand", "Currency", "Suggested Price"]
