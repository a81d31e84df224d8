"""Generic add/edit form driven by an EntitySchema."""

import logging
from typing import Optional

from client.api import ApiError, RemoteCollection, StarApi
from config.defaults import CSULA_DEPARTMENTS, TERM_OPTIONS
from controllers.fields import (
    FieldKind,
    ValidationFailure,
    clean_list,
    normalize_code_list,
)
from controllers.schemas import EntitySchema
from controllers.state import StateMachine, ViewState

logger = logging.getLogger(__name__)

__all__ = ["ChoiceProvider", "FormController", "normalize_code_list"]

_TRUE = {"y", "yes", "true", "1"}
_FALSE = {"n", "no", "false", "0"}


class ChoiceProvider:
    """Options for CHOICE / MULTI_CHOICE fields, fetched on demand."""

    def __init__(self, api: Optional[StarApi] = None):
        self.api = api
        self._schools: Optional[list[tuple[str, str]]] = None

    def options(self, source: str, draft: dict) -> list[tuple[str, str]]:
        if source == "csula_departments":
            return [(d["id"], d["name"]) for d in CSULA_DEPARTMENTS]
        if source == "terms":
            return [(t, t) for t in TERM_OPTIONS]
        if self.api is None:
            return []
        if source == "schools":
            if self._schools is None:
                self._schools = [(s.id, s.name) for s in self.api.schools.list()]
            return self._schools
        if source == "programs":
            school_id = draft.get("s_id")
            if not school_id:
                return []
            return [
                (p.department, f"{p.department} ({p.name})")
                for p in self.api.programs_of_school(school_id)
            ]
        raise KeyError(f"Unknown choice source {source!r}")


class FormController:
    """Draft state, normalisation, validation and submission of one record.

    Without record_id the form creates; with it the form edits and must
    be load()ed first.
    """

    def __init__(
        self,
        schema: EntitySchema,
        collection: RemoteCollection,
        record_id: Optional[str] = None,
        choices: Optional[ChoiceProvider] = None,
    ):
        self.schema = schema
        self.collection = collection
        self.record_id = record_id
        self.choice_provider = choices or ChoiceProvider()
        self.draft: dict = schema.empty_draft()
        self.error: Optional[str] = None
        self.success: Optional[str] = None
        self.redirect: Optional[str] = None
        self.last_payload: Optional[dict] = None
        self.saved = None
        initial = ViewState.LOADING if self.editing else ViewState.READY
        self.machine = StateMachine(initial, name=f"{schema.key}-form")

    @property
    def editing(self) -> bool:
        return self.record_id is not None

    @property
    def state(self) -> ViewState:
        return self.machine.state

    # ─── Edit mode ───

    def load(self) -> bool:
        """Prefill the draft from the server record.

        A missing record or a server error sends the user back to the list
        instead of showing an empty form.
        """
        if not self.editing:
            raise ValueError("load() is only used in edit mode")
        if self.machine.can_go(ViewState.LOADING):
            self.machine.go(ViewState.LOADING)
        try:
            record = self.collection.get(self.record_id)
        except ApiError as e:
            logger.warning(
                f"Error fetching {self.schema.entity} {self.record_id}: {e.message}"
            )
            self.error = f"Error fetching {self.schema.entity} details."
            self.redirect = self.schema.route
            if self.machine.can_go(ViewState.ERROR):
                self.machine.go(ViewState.ERROR)
            return False
        self.draft = {**self.schema.empty_draft(), **self.schema.to_draft(record)}
        self.machine.go(ViewState.READY)
        return True

    # ─── Field state ───

    def set(self, name: str, value) -> None:
        spec = self.schema.field_spec(name)
        if spec.kind == FieldKind.CODES and isinstance(value, str):
            value = normalize_code_list(value)
        elif spec.kind == FieldKind.MULTI_CHOICE and isinstance(value, str):
            value = clean_list(value.split(","))
        elif spec.kind == FieldKind.FLAG and isinstance(value, str):
            value = _parse_flag(value)
        elif spec.kind in (FieldKind.TEXT, FieldKind.NUMBER, FieldKind.CHOICE):
            value = "" if value is None else str(value)
        self.draft[name] = value

    def toggle(self, name: str, value: str) -> None:
        """Add value to a multi-choice field, or remove it if present."""
        spec = self.schema.field_spec(name)
        if spec.kind != FieldKind.MULTI_CHOICE:
            raise ValueError(f"{name} is not a multi-choice field")
        current = list(self.draft.get(name) or [])
        if value in current:
            current.remove(value)
        else:
            current.append(value)
        self.draft[name] = current

    def text_of(self, name: str) -> str:
        """Current value as shown in an input box."""
        value = self.draft.get(name)
        if isinstance(value, list):
            return ", ".join(value)
        if value is None:
            return ""
        if isinstance(value, bool):
            return "yes" if value else "no"
        return str(value)

    def choices(self, name: str) -> list[tuple[str, str]]:
        spec = self.schema.field_spec(name)
        if spec.choices is None:
            return []
        try:
            return self.choice_provider.options(spec.choices, self.draft)
        except ApiError as e:
            logger.warning(f"Error fetching {spec.choices}: {e.message}")
            if spec.choices == "schools":
                self._show_error(f"Error fetching {spec.choices}.")
            return []

    def reset(self) -> None:
        self.draft = self.schema.empty_draft()

    # ─── Submit ───

    def validate(self) -> None:
        """Check the rules in order; the first failure is raised."""
        for rule in self.schema.rules_for(self.editing):
            if not rule.check(self.draft):
                raise ValidationFailure(rule.field, rule.message)

    def submit(self) -> bool:
        self.machine.go(ViewState.SUBMITTING)
        try:
            self.validate()
            payload = self.schema.serialize(self.draft)
        except ValidationFailure as e:
            self.error = e.message
            self.machine.go(ViewState.ERROR_DIALOG)
            return False

        try:
            if self.editing:
                self.saved = self.collection.update(self.record_id, payload)
            else:
                self.saved = self.collection.create(payload)
        except ApiError as e:
            verb = "update" if self.editing else "add"
            logger.warning(f"Error {verb}ing {self.schema.entity}: {e.message}")
            self.error = e.message or f"Failed to {verb} {self.schema.entity}."
            self.machine.go(ViewState.ERROR_DIALOG)
            return False

        self.last_payload = payload
        done = "updated" if self.editing else "added"
        self.success = f"{self.schema.title} {done} successfully."
        if not self.editing:
            self.reset()
        self.machine.go(ViewState.SUCCESS_DIALOG)
        return True

    def dismiss(self) -> None:
        """Close the success or error dialog."""
        self.error = None
        self.success = None
        self.machine.go(ViewState.READY)

    def _show_error(self, message: str) -> None:
        self.error = message
        if self.machine.can_go(ViewState.ERROR_DIALOG):
            self.machine.go(ViewState.ERROR_DIALOG)


def _parse_flag(text: str) -> Optional[bool]:
    t = text.strip().lower()
    if t in _TRUE:
        return True
    if t in _FALSE:
        return False
    return None
