"""Shared helpers for the Excel and PDF exports."""

from datetime import date

from config.defaults import HOME_INSTITUTION_NAME
from export.mapping import MappingRow

# ─── Colour palette (RRGGBB, no #) ────────────────────────────────────────────

COLORS: dict[str, str] = {
    "header":    "4472C4",
    "arrow":     "2F4F8F",
    "external":  "F5F5F5",
    "home":      "E8F0FE",
    "selected":  "FFF2B3",
    "pill":      "DDDDDD",
}


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Convert an RRGGBB string into an (r, g, b) tuple."""
    h = hex_color.lstrip("#")
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def today_str() -> str:
    """Today's date as MM/DD/YYYY."""
    return date.today().strftime("%m/%d/%Y")


def credits_pill(value) -> str:
    """Credits as printed on the mapping sheet: always two decimals."""
    return f"{float(value):.2f}"


def mapping_headers(school_name: str) -> list[str]:
    """Column headings of the mapping table."""
    return ["", f"From: {school_name}", "→", f"To: {HOME_INSTITUTION_NAME}"]


def format_side(code: str, name: str, credits) -> str:
    """Cell text for one side of a mapping row."""
    return f"{code}\n{name}\n({credits_pill(credits)})"


def mapping_cells(row: MappingRow, selected: bool = False) -> list[str]:
    """[mark, external, arrow, home] for one row."""
    return [
        "✓" if selected else "",
        format_side(row.ext_course_code, row.ext_course_name, row.ext_credits),
        "→",
        format_side(row.csula_course_code, row.csula_course_name, row.csula_credits),
    ]
