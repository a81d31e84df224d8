"""Autoimport: flatten course mappings into printable rows."""

import logging
from typing import Optional, Union

from pydantic import BaseModel

from client.api import ApiError, StarApi
from config.defaults import SENTINEL_COURSE_CODE
from controllers.state import StateMachine, ViewState
from models.mapping import Mapping

logger = logging.getLogger(__name__)


class MappingRow(BaseModel):
    """One printable line: external course → one home course."""

    id: str
    ext_course_code: str
    ext_course_name: str
    ext_credits: Union[int, float]
    csula_course_code: str
    csula_course_name: str
    csula_credits: Union[int, float]


def flatten_mappings(mappings: list[Mapping]) -> list[MappingRow]:
    """One row per home course of every decided mapping.

    Mappings whose external code is the "READY 0001" placeholder are
    skipped. Rows are sorted by home course code, ignoring case; the sort
    is stable, so equal codes keep the order of the mappings they came from.
    """
    rows: list[MappingRow] = []
    for idx, mapping in enumerate(mappings):
        ext = mapping.external_course
        ext_codes = ext.code_label
        if ext_codes == SENTINEL_COURSE_CODE:
            continue
        for i, home in enumerate(mapping.csula_course):
            home_codes = home.code_label
            rows.append(MappingRow(
                id=f"{ext_codes}-{home_codes}-{idx}-{i}",
                ext_course_code=ext_codes,
                ext_course_name=ext.course_name,
                ext_credits=ext.course_credits,
                csula_course_code=home_codes,
                csula_course_name=home.course_name,
                csula_credits=home.course_credits,
            ))
    return sorted(rows, key=lambda r: r.csula_course_code.casefold())


class MappingView:
    """State of the autoimport result page.

    Row selection only highlights rows when printing; nothing is sent to
    the server.
    """

    def __init__(self, api: StarApi, school_id: str, department: str):
        self.api = api
        self.school_id = school_id
        self.department = department
        self.rows: list[MappingRow] = []
        self.error: Optional[str] = None
        self.department_name = "Courses Mapping"
        self.school_name = "Transfer School"
        self.selected: set[str] = set()
        self.machine = StateMachine(ViewState.LOADING, name="autoimport")

    @property
    def state(self) -> ViewState:
        return self.machine.state

    def load(self) -> bool:
        try:
            response = self.api.course_mapping(self.school_id, self.department)
        except ApiError as e:
            logger.warning(f"Mapping fetch failed: {e.message}")
            self.error = "Failed to fetch mapping data"
            self.machine.go(ViewState.ERROR)
            return False

        self.department_name = response.department_name
        self.school_name = response.school_name
        self.rows = flatten_mappings(response.mappings)
        if not self.rows:
            self.error = "No mapping course available"
            self.machine.go(ViewState.ERROR)
            return False
        self.error = None
        self.machine.go(ViewState.READY)
        return True

    def toggle_select(self, row_id: str) -> bool:
        """Flip the selection of one row; returns the new state."""
        if not any(r.id == row_id for r in self.rows):
            raise KeyError(f"No mapping row {row_id!r}")
        if row_id in self.selected:
            self.selected.discard(row_id)
            return False
        self.selected.add(row_id)
        return True

    def is_selected(self, row: MappingRow) -> bool:
        return row.id in self.selected
