"""Data model for a home-institution (Cal State LA) course (pydantic v2)."""

from typing import Optional, Union

from pydantic import AliasChoices, Field

from models.base import StarRecord, format_credits


class Department(StarRecord):
    id: str     # "EE", "CS"
    name: str = ""


class Requisite(StarRecord):
    """Pre- or co-requisite block: course codes plus free text."""

    course_code: list[str] = []
    description: str = ""


class CsulaCourse(StarRecord):
    """A course of the target catalog."""

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    course_name: str
    course_code: list[str] = []
    credits: Union[int, float] = 0
    department: list[Department] = []
    pre_requisite: Requisite = Field(default_factory=Requisite)
    co_requisite: Requisite = Field(default_factory=Requisite)
    course_type: str = ""
    is_pre_and_coreq_same: Optional[bool] = Field(
        None, alias="isPreAndCoreqAreSame"
    )
    term: list[str] = []              # "Fall", "Spring", ...

    @property
    def department_id(self) -> str:
        """Id of the first department; the form edits exactly one."""
        return self.department[0].id if self.department else ""

    @property
    def credits_label(self) -> str:
        return format_credits(self.credits)
