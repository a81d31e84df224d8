"""Form field descriptors and the text normalisation shared by all forms."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from config.defaults import CODE_LIST_ALLOWED

_DISALLOWED = re.compile(f"[^{CODE_LIST_ALLOWED}]")


class FieldKind(str, Enum):
    TEXT = "text"
    CODES = "codes"          # comma-separated code list, stored as list[str]
    NUMBER = "number"        # raw input text, converted on submit
    CHOICE = "choice"        # one id out of a choice source
    MULTI_CHOICE = "multi"   # toggled set of ids
    FLAG = "flag"            # tri-state: True / False / unset


@dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str
    kind: FieldKind = FieldKind.TEXT
    hint: str = ""
    # Where CHOICE / MULTI_CHOICE options come from:
    # "schools", "programs", "csula_departments", "terms"
    choices: Optional[str] = None

    def empty(self):
        if self.kind in (FieldKind.CODES, FieldKind.MULTI_CHOICE):
            return []
        if self.kind == FieldKind.FLAG:
            return None
        return ""


class ValidationFailure(Exception):
    """A form rule failed; message is shown to the user as-is."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


def normalize_code_list(raw: str) -> list[str]:
    """Sanitise free-text codes while typing.

    Characters outside [A-Za-z0-9,_- ] are stripped, the rest is split on
    commas and each token is left-trimmed. Empty tokens survive here so the
    input can still be edited; clean_list drops them on submit.

    >>> normalize_code_list("ENGR 10, eng_10!!")
    ['ENGR 10', 'eng_10']
    """
    return [token.lstrip() for token in _DISALLOWED.sub("", raw).split(",")]


def clean_list(values: list[str]) -> list[str]:
    """Trim every entry and drop the empty ones."""
    return [v.strip() for v in values if v and v.strip()]


def to_number(raw: Union[str, int, float, None], field: str = "credits") -> Union[int, float]:
    """Convert form input to a JSON number; empty input counts as 0."""
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return raw
    text = (raw or "").strip()
    if not text:
        return 0
    try:
        value = float(text)
    except ValueError:
        raise ValidationFailure(field, f"{field.capitalize()} must be a number.")
    return int(value) if value.is_integer() else value
