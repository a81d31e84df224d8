"""Data model for an institution (pydantic v2)."""

from typing import Optional

from pydantic import Field

from models.base import StarRecord


class School(StarRecord):
    """An institution students transfer from."""

    id: str                       # public school id ("s_id"), used by programs/courses
    name: str
    location: str = ""
    storage_id: Optional[str] = Field(None, alias="_id")  # backend storage key, not used for routing
