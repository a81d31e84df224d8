"""Shared table rendering for the terminal.

Used by the rich output of the CLI and by the textual browser.
"""

from typing import TYPE_CHECKING

from export.helpers import mapping_cells, mapping_headers

if TYPE_CHECKING:
    from controllers.schemas import EntitySchema
    from export.mapping import MappingView


def record_headers(schema: "EntitySchema") -> list[str]:
    return ["ID"] + [c.header for c in schema.columns]


def record_rows(schema: "EntitySchema", records: list) -> list[list[str]]:
    """One row per record: [id, column values...]."""
    rows: list[list[str]] = []
    for record in records:
        rows.append([str(record.id)] + [str(c.value(record)) for c in schema.columns])
    return rows


def mapping_rows(view: "MappingView") -> list[list[str]]:
    """Rows of the autoimport table; the first cell is the row id."""
    return [[row.id] + mapping_cells(row, view.is_selected(row)) for row in view.rows]


def mapping_table_headers(view: "MappingView") -> list[str]:
    return ["Row"] + mapping_headers(view.school_name)
