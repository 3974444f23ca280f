"""
Tests for processing/file_reader.py

Covers: delimiter sniffing for CSV (comma, semicolon, pipe), title and
blank lines above the header, ragged rows, TSV, Excel workbooks (numeric
cells kept numeric, first sheet only), text kept as text, unsupported
extensions, and trailing blank-row trimming.
"""

from pathlib import Path

import openpyxl

from processing.file_reader import (
    FileReadResult,
    _trim_trailing_blank_rows,
    read_tabular_file,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _write_text(tmp_path: Path, filename: str, content: str) -> Path:
    path = tmp_path / filename
    path.write_text(content, encoding="utf-8")
    return path


def _write_workbook(tmp_path: Path, rows: list[list[object]], filename: str = "prices.xlsx") -> Path:
    workbook = openpyxl.Workbook()
    worksheet = workbook.active
    worksheet.title = "Lista"
    for row in rows:
        worksheet.append(row)
    extra = workbook.create_sheet("Ignored")
    extra.append(["Should", "not", "be", "read"])
    path = tmp_path / filename
    workbook.save(path)
    return path


# ═══════════════════════════════════════════════════════════════════════════
# Delimited text
# ═══════════════════════════════════════════════════════════════════════════

class TestDelimitedText:
    def test_comma_csv(self, tmp_path: Path):
        path = _write_text(tmp_path, "prices.csv", "Product,Price\nWidget,10.50\nGadget,20.00\n")

        result = read_tabular_file(path)

        assert isinstance(result, FileReadResult)
        assert result.errors == []
        assert result.grid == [["Product", "Price"], ["Widget", "10.50"], ["Gadget", "20.00"]]
        assert result.total_rows_read == 3

    def test_semicolon_csv_keeps_decimal_commas(self, tmp_path: Path):
        path = _write_text(tmp_path, "precios.csv", "Producto;Precio\nAceite;1.234,56\n")

        result = read_tabular_file(path)

        assert result.grid == [["Producto", "Precio"], ["Aceite", "1.234,56"]]

    def test_values_stay_strings(self, tmp_path: Path):
        path = _write_text(tmp_path, "codes.csv", "Code,Price\n0012,5\n")

        result = read_tabular_file(path)

        assert result.grid[1] == ["0012", "5"]

    def test_tsv(self, tmp_path: Path):
        path = _write_text(tmp_path, "prices.tsv", "SKU\tProduct Name\tUnit Price\nA1\tWidget\t$10.50\n")

        result = read_tabular_file(path)

        assert result.grid == [["SKU", "Product Name", "Unit Price"], ["A1", "Widget", "$10.50"]]

    def test_banner_line_before_header(self, tmp_path: Path):
        path = _write_text(
            tmp_path,
            "precios.csv",
            'Lista de precios Mayo\nProducto,Marca,Precio\nAceite,Cocinero,"1.234,56"\nArroz,Gallo,"850,00"\n',
        )

        result = read_tabular_file(path)

        assert result.errors == []
        assert result.grid == [
            ["Lista de precios Mayo", "", ""],
            ["Producto", "Marca", "Precio"],
            ["Aceite", "Cocinero", "1.234,56"],
            ["Arroz", "Gallo", "850,00"],
        ]

    def test_leading_blank_lines(self, tmp_path: Path):
        path = _write_text(tmp_path, "prices.csv", '\n\nSKU,Product Name,Unit Price\nA1,Widget,"10,50"\n')

        result = read_tabular_file(path)

        assert result.errors == []
        assert result.grid == [
            ["", "", ""],
            ["", "", ""],
            ["SKU", "Product Name", "Unit Price"],
            ["A1", "Widget", "10,50"],
        ]

    def test_ragged_rows_kept(self, tmp_path: Path):
        path = _write_text(tmp_path, "prices.csv", "Product,Price\nWidget,10\nGadget,20,Acme,extra\n")

        result = read_tabular_file(path)

        assert result.grid == [
            ["Product", "Price", "", ""],
            ["Widget", "10", "", ""],
            ["Gadget", "20", "Acme", "extra"],
        ]

    def test_pipe_delimited_txt(self, tmp_path: Path):
        path = _write_text(tmp_path, "prices.txt", "Product|Price\nWidget|10\n")

        result = read_tabular_file(path)

        assert result.grid == [["Product", "Price"], ["Widget", "10"]]

    def test_blank_file_has_no_rows(self, tmp_path: Path):
        path = _write_text(tmp_path, "empty.csv", "\n\n")

        result = read_tabular_file(path)

        assert result.grid == []
        assert result.errors == []

    def test_latin1_file(self, tmp_path: Path):
        path = tmp_path / "latin.csv"
        path.write_bytes("Producto,Precio\nJamón,12\n".encode("latin-1"))

        result = read_tabular_file(path)

        assert result.errors == []
        assert result.grid[1] == ["Jamón", "12"]


# ═══════════════════════════════════════════════════════════════════════════
# Excel
# ═══════════════════════════════════════════════════════════════════════════

class TestExcel:
    def test_first_sheet_with_numeric_cells(self, tmp_path: Path):
        path = _write_workbook(tmp_path, [["Product", "Price"], ["Widget", 12.5], ["Gadget", 3]])

        result = read_tabular_file(path)

        assert result.errors == []
        assert result.sheet_name == "Lista"
        assert result.grid == [["Product", "Price"], ["Widget", 12.5], ["Gadget", 3]]

    def test_empty_cells_become_blank(self, tmp_path: Path):
        path = _write_workbook(tmp_path, [["Product", None, "Price"], ["Widget", None, 1]])

        result = read_tabular_file(path)

        assert result.grid[0] == ["Product", "", "Price"]


# ═══════════════════════════════════════════════════════════════════════════
# Errors and trimming
# ═══════════════════════════════════════════════════════════════════════════

class TestErrorsAndTrimming:
    def test_unsupported_extension(self, tmp_path: Path):
        path = tmp_path / "prices.pdf"
        path.write_bytes(b"%PDF-1.4")

        result = read_tabular_file(path)

        assert result.grid == []
        assert len(result.errors) == 1
        assert "Unsupported" in result.errors[0]

    def test_corrupt_workbook(self, tmp_path: Path):
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"not a zip file")

        result = read_tabular_file(path)

        assert result.grid == []
        assert len(result.errors) == 1

    def test_trailing_blank_rows_removed(self):
        grid = [["Product", "Price"], ["Widget", "1"], ["", ""], ["  ", ""]]
        assert _trim_trailing_blank_rows(grid) == [["Product", "Price"], ["Widget", "1"]]

    def test_inner_blank_rows_kept(self):
        grid = [["Title", ""], ["", ""], ["Product", "Price"]]
        assert _trim_trailing_blank_rows(grid) == grid
