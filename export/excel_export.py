"""Excel export of the autoimport mapping table (openpyxl)."""

from pathlib import Path

from config.defaults import HOME_INSTITUTION_NAME
from export.helpers import COLORS, credits_pill, today_str
from export.mapping import MappingView

MAPPING_SHEET = "Mapping"
INFO_SHEET = "Info"


class ExcelExporter:
    """Exports a loaded MappingView into a workbook with a mapping sheet and an info sheet."""

    # Column widths (Excel units)
    COL_MARK_W  = 4
    COL_CODE_W  = 16
    COL_NAME_W  = 36
    COL_CRED_W  = 9
    COL_ARROW_W = 4

    ROW_HEADER_H = 22

    def __init__(self, view: MappingView):
        self.view = view

    # ─── Public API ───────────────────────────────────────────────────────────

    def export(self, output_path: Path) -> None:
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)

        self._sheet_mapping(wb)
        self._sheet_info(wb)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)

    # ─── Style helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _center_align(self, wrap: bool = True):
        from openpyxl.styles import Alignment
        return Alignment(wrap_text=wrap, horizontal="center", vertical="center")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    # ─── Sheets ───────────────────────────────────────────────────────────────

    def headers(self) -> list[str]:
        school = self.view.school_name
        return [
            "",
            f"{school} code", f"{school} course", "Units",
            "→",
            f"{HOME_INSTITUTION_NAME} code", f"{HOME_INSTITUTION_NAME} course", "Units",
        ]

    def _sheet_mapping(self, wb) -> None:
        from openpyxl.styles import Font
        from openpyxl.utils import get_column_letter

        ws = wb.create_sheet(MAPPING_SHEET)
        widths = [
            self.COL_MARK_W, self.COL_CODE_W, self.COL_NAME_W, self.COL_CRED_W,
            self.COL_ARROW_W, self.COL_CODE_W, self.COL_NAME_W, self.COL_CRED_W,
        ]
        for col, w in enumerate(widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = w

        border = self._thin_border()
        header_fill = self._fill(COLORS["header"])
        for col, text in enumerate(self.headers(), 1):
            cell = ws.cell(row=1, column=col, value=text)
            cell.fill = header_fill
            cell.font = Font(bold=True, color="FFFFFF", size=10)
            cell.alignment = self._center_align(wrap=False)
            cell.border = border
        ws.row_dimensions[1].height = self.ROW_HEADER_H
        ws.freeze_panes = "A2"

        for excel_row, row in enumerate(self.view.rows, 2):
            selected = self.view.is_selected(row)
            ext_fill = self._fill(COLORS["selected" if selected else "external"])
            home_fill = self._fill(COLORS["selected" if selected else "home"])
            values = [
                ("✓" if selected else None, None),
                (row.ext_course_code, ext_fill),
                (row.ext_course_name, ext_fill),
                (credits_pill(row.ext_credits), ext_fill),
                ("→", self._fill(COLORS["arrow"])),
                (row.csula_course_code, home_fill),
                (row.csula_course_name, home_fill),
                (credits_pill(row.csula_credits), home_fill),
            ]
            for col, (value, fill) in enumerate(values, 1):
                c = ws.cell(row=excel_row, column=col, value=value)
                if fill is not None:
                    c.fill = fill
                c.border = border
                c.alignment = self._center_align(wrap=col in (3, 7))
                c.font = Font(
                    size=9,
                    bold=col in (2, 6),
                    color="FFFFFF" if col == 5 else "000000",
                )

    def _sheet_info(self, wb) -> None:
        from openpyxl.styles import Font
        ws = wb.create_sheet(INFO_SHEET)
        ws.column_dimensions["A"].width = 18
        ws.column_dimensions["B"].width = 40
        rows = [
            ("Department", self.view.department_name),
            ("From", self.view.school_name),
            ("To", HOME_INSTITUTION_NAME),
            ("Rows", len(self.view.rows)),
            ("Selected", len(self.view.selected)),
            ("Exported", today_str()),
        ]
        for r, (label, value) in enumerate(rows, 1):
            ws.cell(row=r, column=1, value=label).font = Font(bold=True)
            ws.cell(row=r, column=2, value=value)
