"""Tests for the mapping exports (Excel + PDF) and the terminal renderer."""

import pytest

from controllers import ALL_SCHEMAS, list_controller
from export.excel_export import INFO_SHEET, MAPPING_SHEET, ExcelExporter
from export.helpers import credits_pill, format_side, hex_to_rgb, mapping_cells, mapping_headers
from export.mapping import MappingView
from export.pdf_export import PdfExporter, _pdf_safe
from export.tui_renderer import (
    mapping_rows, mapping_table_headers, record_headers, record_rows,
)


@pytest.fixture
def view(api) -> MappingView:
    v = MappingView(api, "1", "EE")
    assert v.load()
    return v


# ─── HELPERS ──────────────────────────────────────────────────────────────────

class TestHelpers:
    def test_hex_to_rgb(self):
        """Hex colours convert with or without a leading hash."""
        assert hex_to_rgb("4472C4") == (0x44, 0x72, 0xC4)
        assert hex_to_rgb("#FFFFFF") == (255, 255, 255)

    def test_credits_pill_two_decimals(self):
        """Credit pills always show two decimals."""
        assert credits_pill(3) == "3.00"
        assert credits_pill(4.5) == "4.50"

    def test_headers_name_both_sides(self):
        """Headers name the transfer school and the home campus."""
        assert mapping_headers("ELAC") == ["", "From: ELAC", "→", "To: CalState LA"]

    def test_cells_mark_selection(self, view):
        """Selected rows carry a check mark in the first cell."""
        row = view.rows[0]
        assert mapping_cells(row, selected=True)[0] == "✓"
        assert mapping_cells(row)[0] == ""
        assert mapping_cells(row)[1] == format_side(
            row.ext_course_code, row.ext_course_name, row.ext_credits
        )

    def test_pdf_safe_replaces_arrows(self):
        """Characters outside latin-1 are replaced for the PDF fonts."""
        assert _pdf_safe("A → B ✓") == "A -> B x"


# ─── EXCEL ────────────────────────────────────────────────────────────────────

class TestExcelExport:
    def test_workbook_sheets_and_rows(self, view, tmp_path):
        """The workbook has a header row plus one row per mapping row."""
        from openpyxl import load_workbook

        out = tmp_path / "out" / "mapping.xlsx"
        ExcelExporter(view).export(out)
        assert out.exists()

        wb = load_workbook(out)
        assert wb.sheetnames == [MAPPING_SHEET, INFO_SHEET]
        ws = wb[MAPPING_SHEET]
        assert ws.cell(row=1, column=2).value == "East Los Angeles College code"
        assert ws.cell(row=1, column=6).value == "CalState LA code"
        assert ws.max_row == 1 + len(view.rows)
        assert ws.cell(row=4, column=6).value == "MATH 2110"
        assert ws.cell(row=4, column=8).value == "4.00"

    def test_selected_rows_are_marked(self, view, tmp_path):
        """Only selected rows get a mark."""
        from openpyxl import load_workbook

        view.toggle_select(view.rows[1].id)
        out = tmp_path / "mapping.xlsx"
        ExcelExporter(view).export(out)
        ws = load_workbook(out)[MAPPING_SHEET]
        marks = [ws.cell(row=r, column=1).value for r in range(2, 2 + len(view.rows))]
        assert marks == [None, "✓", None]

    def test_info_sheet(self, view, tmp_path):
        """The info sheet carries the department and counts."""
        from openpyxl import load_workbook

        out = tmp_path / "mapping.xlsx"
        ExcelExporter(view).export(out)
        ws = load_workbook(out)[INFO_SHEET]
        info = {ws.cell(row=r, column=1).value: ws.cell(row=r, column=2).value
                for r in range(1, ws.max_row + 1)}
        assert info["Department"] == "Electrical Engineering"
        assert info["Rows"] == 3
        assert info["Selected"] == 0


# ─── PDF ──────────────────────────────────────────────────────────────────────

class TestPdfExport:
    def test_pdf_is_written(self, view, tmp_path):
        """The exporter creates missing directories and writes a PDF."""
        out = tmp_path / "pdf" / "mapping.pdf"
        PdfExporter(view).export(out)
        assert out.read_bytes().startswith(b"%PDF")

    def test_long_mapping_spans_pages(self, view, tmp_path):
        """A long mapping grows the document."""
        short = tmp_path / "short.pdf"
        PdfExporter(view).export(short)
        view.rows = view.rows * 40
        long = tmp_path / "long.pdf"
        PdfExporter(view).export(long)
        assert long.stat().st_size > short.stat().st_size


# ─── TERMINAL RENDERER ────────────────────────────────────────────────────────

class TestRenderer:
    def test_record_rows(self, api):
        """Rows start with the record id."""
        ctrl = list_controller(ALL_SCHEMAS["schools"], api)
        ctrl.load()
        assert record_headers(ctrl.schema) == ["ID", "Name", "Location"]
        assert record_rows(ctrl.schema, ctrl.visible)[1] == [
            "2", "Pasadena City College", "Pasadena, CA",
        ]

    def test_course_rows_join_lists(self, api):
        """List fields are joined with commas."""
        ctrl = list_controller(ALL_SCHEMAS["courses"], api)
        ctrl.load()
        row = record_rows(ctrl.schema, ctrl.visible)[1]
        assert row[0] == "c2"
        assert "EE, CS" in row

    def test_mapping_rows(self, view):
        """Mapping rows carry the row id and selection mark."""
        view.toggle_select(view.rows[0].id)
        rows = mapping_rows(view)
        assert rows[0][0] == view.rows[0].id
        assert rows[0][1] == "✓"
        assert mapping_table_headers(view)[2] == "From: East Los Angeles College"
