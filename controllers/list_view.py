"""Generic list screen: load, search, category filter and delete.

Local state is a cache of the server's collection. Deletes are applied
locally only after the server confirmed them. Each local mutation bumps
a version counter and leaves a tombstone, so a list response that was
requested before the delete cannot bring the deleted row back.
"""

import logging
from typing import Callable, NamedTuple, Optional

from client.api import ApiError, RemoteCollection
from controllers.schemas import EntitySchema
from controllers.state import StateMachine, ViewState

logger = logging.getLogger(__name__)


class LoadToken(NamedTuple):
    seq: int        # which load request this is
    version: int    # collection version when the request was sent


def matches(schema: EntitySchema, record, term: str, category_id: Optional[str]) -> bool:
    """Case-insensitive substring search ANDed with the category filter."""
    if term:
        needle = term.lower()
        texts = schema.searchable(record)
        if not any(needle in (t or "").lower() for t in texts):
            return False
    if category_id and schema.category_of is not None:
        if category_id not in schema.category_of(record):
            return False
    return True


class ListViewController:
    def __init__(
        self,
        schema: EntitySchema,
        collection: RemoteCollection,
        category_loader: Optional[Callable[[], list[tuple[str, str]]]] = None,
    ):
        self.schema = schema
        self.collection = collection
        self.category_loader = category_loader
        self.items: list = []
        self.visible: list = []
        self.search_term = ""
        self.category_id: Optional[str] = None
        self.filter_options: list[tuple[str, str]] = []
        self.pending_delete: Optional[str] = None
        self.deleting: Optional[str] = None        # delete sent, answer outstanding
        self.error: Optional[str] = None           # persistent load error
        self.dialog_message: Optional[str] = None  # dismissible error prompt
        self.machine = StateMachine(ViewState.LOADING, name=f"{schema.key}-list")
        self.version = 0
        self._load_seq = 0
        self._applied_seq = -1
        self._tombstones: dict[str, int] = {}

    @property
    def state(self) -> ViewState:
        return self.machine.state

    # ─── Loading ───

    def begin_load(self) -> LoadToken:
        """Mark a list request as sent.

        Only the first load (or a retry after an error) shows LOADING; a
        refresh of a ready list keeps the current rows on screen.
        """
        if self.state in (ViewState.ERROR, ViewState.READY) and not self.items:
            self.machine.go(ViewState.LOADING)
        self._load_seq += 1
        return LoadToken(self._load_seq, self.version)

    def apply_loaded(self, token: LoadToken, items: list) -> bool:
        """Apply a list response; False when it was superseded."""
        if token.seq < self._applied_seq:
            logger.debug(f"{self.schema.key}: dropping stale list response #{token.seq}")
            return False
        deleted_since = {
            rid for rid, v in self._tombstones.items() if v > token.version
        }
        if deleted_since:
            items = [i for i in items if i.id not in deleted_since]
        self._applied_seq = token.seq
        self.items = list(items)
        self.error = None
        if self.state == ViewState.LOADING:
            self.machine.go(ViewState.READY)
        self._refilter()
        return True

    def fail_load(self, message: Optional[str] = None) -> None:
        self.error = message or f"Error fetching {self.schema.plural_entity}."
        if self.state == ViewState.LOADING:
            self.machine.go(ViewState.ERROR)
        else:
            logger.warning(f"{self.schema.key}: refresh failed: {self.error}")

    def load(self) -> bool:
        token = self.begin_load()
        try:
            items = self.collection.list()
        except ApiError as e:
            logger.warning(f"Error fetching {self.schema.plural_entity}: {e.message}")
            self.fail_load()
            return False
        return self.apply_loaded(token, items)

    def category_options(self) -> list[tuple[str, str]]:
        """(id, label) pairs for the category filter, first label wins."""
        if self.schema.category_source == "records" and self.schema.category_pairs:
            seen: dict[str, tuple[str, str]] = {}
            for record in self.items:
                for cid, name in self.schema.category_pairs(record):
                    seen.setdefault(name, (cid, name))
            return list(seen.values())
        if self.category_loader is None:
            return []
        try:
            return self.category_loader()
        except ApiError as e:
            logger.warning(f"Error fetching filter options for {self.schema.key}: {e.message}")
            return []

    # ─── Filtering ───

    def apply_filter(self, term: str, category_id: Optional[str] = None) -> list:
        self.search_term = term or ""
        self.category_id = category_id or None
        return self._refilter()

    def set_search(self, term: str) -> list:
        return self.apply_filter(term, self.category_id)

    def set_category(self, category_id: Optional[str]) -> list:
        return self.apply_filter(self.search_term, category_id)

    def _refilter(self) -> list:
        self.visible = [
            r for r in self.items
            if matches(self.schema, r, self.search_term, self.category_id)
        ]
        return self.visible

    def set_filter_options(self, options: list[tuple[str, str]]) -> None:
        self.filter_options = list(options)

    def next_category(self) -> Optional[str]:
        """Step the category filter: all, then each option in turn, then all again."""
        if not self.filter_options:
            return self.category_id
        ids = [None] + list(dict.fromkeys(cid for cid, _ in self.filter_options))
        pos = ids.index(self.category_id) if self.category_id in ids else 0
        self.set_category(ids[(pos + 1) % len(ids)])
        return self.category_id

    def category_name(self, category_id: Optional[str] = None) -> str:
        cid = category_id if category_id is not None else self.category_id
        if cid is None:
            return self.schema.category_label or ""
        return next((name for oid, name in self.filter_options if oid == cid), cid)

    def find(self, record_id: str):
        return next((r for r in self.items if r.id == record_id), None)

    # ─── Delete ───

    def request_delete(self, record_id: str) -> None:
        self.machine.go(ViewState.AWAITING_CONFIRMATION)
        self.pending_delete = record_id

    def cancel_delete(self) -> None:
        if self.deleting is not None:
            return
        self.pending_delete = None
        self.machine.go(ViewState.READY)

    def begin_delete(self) -> str:
        """Take the pending id for sending.

        Until finish_delete() runs, nothing is pending, so a second
        confirmation cannot send the same delete twice.
        """
        record_id = self.pending_delete
        if record_id is None or self.deleting is not None:
            raise ValueError("No delete pending; call request_delete() first")
        self.pending_delete = None
        self.deleting = record_id
        return record_id

    def confirm_delete(self) -> bool:
        """Send the pending delete and reconcile local state with the answer."""
        record_id = self.begin_delete()
        try:
            self.collection.delete(record_id)
        except ApiError as e:
            return self.finish_delete(record_id, e)
        return self.finish_delete(record_id)

    def finish_delete(self, record_id: str, error: Optional[ApiError] = None) -> bool:
        self.pending_delete = None
        self.deleting = None
        if error is not None:
            logger.warning(f"Error deleting {self.schema.entity} {record_id}: {error.message}")
            self.dialog_message = error.message or f"Failed to delete {self.schema.entity}."
            self.machine.go(ViewState.ERROR_DIALOG)
            return False
        self.version += 1
        self._tombstones[record_id] = self.version
        self.items = [r for r in self.items if r.id != record_id]
        self._refilter()
        self.machine.go(ViewState.READY)
        return True

    def dismiss(self) -> None:
        """Close the error prompt."""
        self.dialog_message = None
        self.machine.go(ViewState.READY)
