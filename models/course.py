"""Data model for an external-institution course (pydantic v2)."""

from typing import Optional, Union

from pydantic import AliasChoices, Field, model_validator

from models.base import StarRecord, format_credits
from models.school import School


class Course(StarRecord):
    """A course taught at a transfer school.

    course_code may hold several codes for cross-listed sections and
    department may name several owning departments.
    """

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    course_name: str
    course_code: list[str] = []
    credits: Union[int, float] = 0
    category: str = ""
    department: list[str] = []
    equivalent_to: list[str] = []     # home course codes this course maps to
    school: Optional[School] = None
    s_id: Optional[str] = None

    @model_validator(mode="after")
    def _require_school(self):
        if self.school is None and not self.s_id:
            raise ValueError(f"Course {self.id!r} has no school reference")
        return self

    @property
    def school_id(self) -> str:
        return self.school.id if self.school is not None else self.s_id

    @property
    def school_name(self) -> str:
        return self.school.name if self.school is not None else ""

    @property
    def credits_label(self) -> str:
        return format_credits(self.credits)
