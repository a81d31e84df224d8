"""Named view states shared by every list and form screen."""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class ViewState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    SUBMITTING = "submitting"
    SUCCESS_DIALOG = "success_dialog"
    ERROR_DIALOG = "error_dialog"


class InvalidTransition(Exception):
    pass


_TRANSITIONS: dict[ViewState, set[ViewState]] = {
    ViewState.LOADING: {ViewState.READY, ViewState.ERROR},
    ViewState.READY: {
        ViewState.LOADING,
        ViewState.AWAITING_CONFIRMATION,
        ViewState.SUBMITTING,
        ViewState.ERROR_DIALOG,
    },
    # Only a manual reload leaves a failed initial load.
    ViewState.ERROR: {ViewState.LOADING},
    ViewState.AWAITING_CONFIRMATION: {ViewState.READY, ViewState.ERROR_DIALOG},
    ViewState.SUBMITTING: {ViewState.SUCCESS_DIALOG, ViewState.ERROR_DIALOG},
    ViewState.SUCCESS_DIALOG: {ViewState.READY},
    ViewState.ERROR_DIALOG: {ViewState.READY},
}


class StateMachine:
    """Holds the current ViewState and rejects undefined transitions."""

    def __init__(self, initial: ViewState = ViewState.LOADING, name: str = "view"):
        self.state = initial
        self.name = name

    def go(self, target: ViewState) -> None:
        if target == self.state:
            return
        if target not in _TRANSITIONS[self.state]:
            raise InvalidTransition(
                f"{self.name}: {self.state.value} -> {target.value} is not allowed"
            )
        logger.debug(f"{self.name}: {self.state.value} -> {target.value}")
        self.state = target

    def can_go(self, target: ViewState) -> bool:
        return target == self.state or target in _TRANSITIONS[self.state]

    @property
    def is_dialog(self) -> bool:
        return self.state in (ViewState.SUCCESS_DIALOG, ViewState.ERROR_DIALOG)

    def __repr__(self) -> str:
        return f"StateMachine({self.name}={self.state.value})"
