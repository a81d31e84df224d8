"""Shared pydantic settings for records received over the REST boundary."""

from pydantic import BaseModel, ConfigDict, model_validator


class StarRecord(BaseModel):
    """Base for all backend records.

    Unknown keys (timestamps, __v, ...) are ignored, numeric ids are
    accepted as strings and fields may be filled by name or by alias.
    A null value counts as "not set", so the field falls back to its
    default; a null required field is still rejected.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data):
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


def format_credits(value) -> str:
    """Credits as the backend shows them: 3 -> "3", 4.5 -> "4.5"."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
