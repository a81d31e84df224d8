"""Course equivalency mappings as returned by /course-mapping (pydantic v2)."""

from typing import Union

from pydantic import field_validator

from models.base import StarRecord


class MappedCourse(StarRecord):
    """Course reference inside a mapping; codes may be a string or a list."""

    course_code: Union[str, list[str]] = ""
    course_name: str = ""
    course_credits: Union[int, float] = 0

    @property
    def code_label(self) -> str:
        if isinstance(self.course_code, list):
            return ", ".join(self.course_code)
        return self.course_code


class Mapping(StarRecord):
    """One external course equated to one or more home courses (a combo)."""

    external_course: MappedCourse
    csula_course: list[MappedCourse] = []


class MappingResponse(StarRecord):
    """Envelope of the /course-mapping response."""

    mappings: list[Mapping] = []
    department_name: str = "Courses Mapping"
    school_name: str = "Transfer School"

    @field_validator("department_name", mode="before")
    @classmethod
    def _default_department(cls, v):
        return v or "Courses Mapping"

    @field_validator("school_name", mode="before")
    @classmethod
    def _default_school(cls, v):
        return v or "Transfer School"

    @field_validator("mappings", mode="before")
    @classmethod
    def _null_mappings(cls, v):
        return v or []
