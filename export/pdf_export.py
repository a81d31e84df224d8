"""PDF export of the autoimport mapping table (fpdf2)."""

from pathlib import Path

from config.defaults import HOME_INSTITUTION_NAME
from export.helpers import COLORS, credits_pill, hex_to_rgb, today_str
from export.mapping import MappingRow, MappingView


def _pdf_safe(text: str) -> str:
    """Replace characters the fpdf2 built-in fonts (latin-1) cannot draw."""
    return (
        text
        .replace("→", "->")     # →
        .replace("✓", "x")      # ✓
        .replace("—", " - ")    # em dash
        .replace("–", "-")      # en dash
        .encode("latin-1", "replace").decode("latin-1")
    )


# ─── A4 portrait dimensions ───────────────────────────────────────────────────
# A4 portrait: 210 × 297 mm
# Usable width (10 mm margins left + right): 190 mm
# Columns: mark(8) + external(86) + arrow(10) + home(86) = 190 mm ✓

_COLS = {
    "mark":  8,
    "side":  86,
    "arrow": 10,
}
_ROW_HEADER_H = 8     # mm
_ROW_H        = 15    # mm (code, name, credits)
_LINE_H       = 4     # mm per text line
_FONT_HEADER  = 9     # pt
_FONT_CONTENT = 8     # pt
_TOP_Y        = 26.0  # first table row, below the title line
_BOTTOM       = 18    # mm kept free for the footer


class _MappingPdf:
    """Internal wrapper around fpdf.FPDF for mapping pages."""

    def __init__(self, title: str, subtitle: str):
        from fpdf import FPDF

        class _Pdf(FPDF):
            def __init__(inner, t, st):
                super().__init__(orientation="P", unit="mm", format="A4")
                inner._title = t
                inner._subtitle = st
                inner.alias_nb_pages()
                inner.set_auto_page_break(auto=False)
                inner.set_margins(left=10, top=22, right=10)

            def header(inner):
                inner.set_font("Helvetica", "B", 13)
                inner.set_xy(10, 8)
                inner.cell(120, 8, _pdf_safe(inner._title), border=0, align="L")
                inner.set_font("Helvetica", "", 9)
                inner.cell(0, 8, _pdf_safe(inner._subtitle), border=0, align="R")
                inner.set_draw_color(150, 150, 150)
                inner.line(10, 18, inner.w - 10, 18)

            def footer(inner):
                inner.set_y(-14)
                inner.set_font("Helvetica", "I", 7)
                inner.cell(
                    0, 8,
                    f"{today_str()}  |  Page {inner.page_no()}/{{nb}}",
                    border=0, align="C",
                )

        self._pdf = _Pdf(title, subtitle)

    @property
    def page_h(self) -> float:
        return self._pdf.h

    def add_page(self) -> None:
        self._pdf.add_page()

    def save(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._pdf.output(str(path))

    # ─── Cells ────────────────────────────────────────────────────────────────

    def draw_cell(
        self,
        x: float, y: float,
        w: float, h: float,
        lines: list[tuple[str, str]] = (),
        bg_hex: str | None = None,
        font_size: int = _FONT_CONTENT,
        text_color: tuple[int, int, int] = (0, 0, 0),
        align: str = "L",
    ) -> None:
        """Draw one bordered cell; lines are (text, style) pairs."""
        pdf = self._pdf

        if bg_hex:
            r, g, b = hex_to_rgb(bg_hex)
            pdf.set_fill_color(r, g, b)
            pdf.rect(x, y, w, h, style="F")

        pdf.set_draw_color(180, 180, 180)
        pdf.rect(x, y, w, h, style="D")

        lines = [(t, s) for t, s in lines if t][:3]
        if not lines:
            return
        pdf.set_text_color(*text_color)
        y_text = y + max(1.0, (h - len(lines) * _LINE_H) / 2)
        for text, style in lines:
            pdf.set_font("Helvetica", style, font_size)
            pdf.set_xy(x + 1, y_text)
            pdf.cell(w - 2, _LINE_H, _pdf_safe(text)[:60], border=0, align=align)
            y_text += _LINE_H
        pdf.set_text_color(0, 0, 0)

    # ─── Rows ─────────────────────────────────────────────────────────────────

    def draw_header_row(self, x: float, y: float, school_name: str) -> float:
        """Draw the table header and return the y position below it."""
        white = (255, 255, 255)
        cols = [
            ("", _COLS["mark"]),
            (f"From: {school_name}", _COLS["side"]),
            ("->", _COLS["arrow"]),
            (f"To: {HOME_INSTITUTION_NAME}", _COLS["side"]),
        ]
        cx = x
        for label, w in cols:
            self.draw_cell(
                cx, y, w, _ROW_HEADER_H, [(label, "B")],
                bg_hex=COLORS["header"], font_size=_FONT_HEADER,
                text_color=white, align="C",
            )
            cx += w
        return y + _ROW_HEADER_H

    def draw_mapping_row(self, x: float, y: float, row: MappingRow, selected: bool) -> float:
        """Draw one mapping row and return the y position below it."""
        ext_bg = COLORS["selected"] if selected else COLORS["external"]
        home_bg = COLORS["selected"] if selected else COLORS["home"]

        self.draw_cell(x, y, _COLS["mark"], _ROW_H, [("x" if selected else "", "B")],
                       align="C")
        cx = x + _COLS["mark"]
        self.draw_cell(cx, y, _COLS["side"], _ROW_H, [
            (row.ext_course_code, "B"),
            (row.ext_course_name, ""),
            (f"{credits_pill(row.ext_credits)} units", "I"),
        ], bg_hex=ext_bg)
        cx += _COLS["side"]
        self.draw_cell(cx, y, _COLS["arrow"], _ROW_H, [("->", "B")],
                       bg_hex=COLORS["arrow"], text_color=(255, 255, 255), align="C")
        cx += _COLS["arrow"]
        self.draw_cell(cx, y, _COLS["side"], _ROW_H, [
            (row.csula_course_code, "B"),
            (row.csula_course_name, ""),
            (f"{credits_pill(row.csula_credits)} units", "I"),
        ], bg_hex=home_bg)
        return y + _ROW_H


class PdfExporter:
    """Exports a loaded MappingView as a printable PDF."""

    def __init__(self, view: MappingView):
        self.view = view
        self._table_x = 10.0

    def export(self, output_path: Path) -> None:
        view = self.view
        pdf = _MappingPdf(view.department_name, f"From: {view.school_name}")
        pdf.add_page()
        y = pdf.draw_header_row(self._table_x, _TOP_Y, view.school_name)

        for row in view.rows:
            if y + _ROW_H > pdf.page_h - _BOTTOM:
                pdf.add_page()
                y = pdf.draw_header_row(self._table_x, _TOP_Y, view.school_name)
            y = pdf.draw_mapping_row(self._table_x, y, row, view.is_selected(row))

        pdf.save(output_path)
