"""Data model for an academic program (pydantic v2)."""

from typing import Optional

from pydantic import AliasChoices, Field, model_validator

from models.base import StarRecord
from models.school import School


class Program(StarRecord):
    """A program (department) offered by one school."""

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str
    department: str
    school: Optional[School] = None
    s_id: Optional[str] = None

    @model_validator(mode="after")
    def _require_school(self):
        if self.school is None and not self.s_id:
            raise ValueError(f"Program {self.id!r} has no school reference")
        return self

    @property
    def school_id(self) -> str:
        return self.school.id if self.school is not None else self.s_id

    @property
    def school_name(self) -> str:
        return self.school.name if self.school is not None else ""
