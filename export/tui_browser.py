"""Textual browser over the STAR catalog.

Start with: python main.py browse
Navigation: ↑↓, Enter=select, /=search, f=next filter, x=delete,
r=reload, d=light/dark, q=quit, ?=help
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from client.api import StarApi
    from config.manager import ConfigManager

logger = logging.getLogger(__name__)


class StarBrowserApp:
    """Textual TUI for browsing and deleting catalog records.

    Imports textual lazily to keep CLI start-up fast.
    """

    def __init__(self, api: "StarApi", config_manager: Optional["ConfigManager"] = None) -> None:
        self.api = api
        self.config_manager = config_manager

    def run(self) -> None:
        """Start the TUI application."""
        from textual.app import App, ComposeResult
        from textual.binding import Binding
        from textual.containers import Horizontal
        from textual.widgets import (
            DataTable, Footer, Header, Input, Label, ListItem, ListView,
        )

        from config.schema import Theme
        from controllers import ALL_SCHEMAS, ViewState, list_controller
        from export.tui_renderer import record_headers, record_rows

        api = self.api
        manager = self.config_manager
        start_theme = manager.load().theme if manager is not None else Theme.LIGHT
        controllers = {key: list_controller(s, api) for key, s in ALL_SCHEMAS.items()}
        keys = list(controllers)

        class _App(App):
            CSS = """
            ListView { width: 24; border: solid $primary; }
            DataTable { border: solid $secondary; }
            #status { height: 1; padding: 0 1; }
            Input { dock: bottom; }
            """
            BINDINGS = [
                Binding("q", "quit", "Quit"),
                Binding("/", "focus_search", "Search"),
                Binding("f", "next_filter", "Filter"),
                Binding("x", "delete", "Delete"),
                Binding("y", "confirm", "Yes", show=False),
                Binding("n", "cancel", "No", show=False),
                Binding("r", "reload", "Reload"),
                Binding("d", "toggle_theme", "Light/Dark"),
                Binding("?", "show_help", "Help"),
            ]

            def compose(self) -> ComposeResult:
                yield Header()
                with Horizontal():
                    yield ListView(
                        *[ListItem(Label(ALL_SCHEMAS[k].title)) for k in keys],
                        id="entity_list",
                    )
                    yield DataTable(id="record_table", cursor_type="row")
                yield Label("", id="status")
                yield Input(placeholder="Search...", id="search")
                yield Footer()

            def on_mount(self) -> None:
                self.theme = _textual_theme(start_theme)
                self._entity_key = keys[0]
                self._start_load()

            @property
            def ctrl(self):
                return controllers[self._entity_key]

            # ─── Loading ───

            def _start_load(self) -> None:
                ctrl = self.ctrl
                token = ctrl.begin_load()
                self._show_records()
                self.run_worker(lambda: self._fetch_records(ctrl, token), thread=True)

            def _fetch_records(self, ctrl, token) -> None:
                from client.api import ApiError
                try:
                    items = ctrl.collection.list()
                except ApiError as e:
                    logger.warning(f"Browser load failed: {e.message}")
                    self.call_from_thread(self._records_loaded, ctrl, token, None, None)
                    return
                # School filter options need a request; department options come from the rows.
                options = None
                if ctrl.schema.category_source == "schools":
                    options = ctrl.category_options()
                self.call_from_thread(self._records_loaded, ctrl, token, items, options)

            def _records_loaded(self, ctrl, token, items, options) -> None:
                if items is None:
                    ctrl.fail_load()
                elif ctrl.apply_loaded(token, items):
                    if options is None:
                        options = ctrl.category_options()
                    ctrl.set_filter_options(options)
                if ctrl is self.ctrl:
                    self._show_records()

            def _show_records(self) -> None:
                ctrl = self.ctrl
                table = self.query_one("#record_table", DataTable)
                table.clear(columns=True)
                table.add_columns(*record_headers(ctrl.schema))
                for row in record_rows(ctrl.schema, ctrl.visible):
                    table.add_row(*row, key=row[0])
                self.query_one("#status", Label).update(self._status_text())

            def _status_text(self) -> str:
                ctrl = self.ctrl
                if ctrl.state == ViewState.LOADING:
                    return "Loading..."
                if ctrl.state == ViewState.ERROR:
                    return f"{ctrl.error} (r to retry)"
                if ctrl.deleting is not None:
                    return f"Deleting {ctrl.schema.entity} {ctrl.deleting}..."
                if ctrl.state == ViewState.AWAITING_CONFIRMATION:
                    return f"Delete {ctrl.schema.entity} {ctrl.pending_delete}? (y/n)"
                if ctrl.state == ViewState.ERROR_DIALOG:
                    return f"{ctrl.dialog_message} (n to close)"
                return f"{len(ctrl.visible)} {ctrl.schema.plural_entity}  {ctrl.category_name()}"

            # ─── Events ───

            def on_list_view_selected(self, event: ListView.Selected) -> None:
                idx = event.list_view.index
                if idx is None or not 0 <= idx < len(keys):
                    return
                self._entity_key = keys[idx]
                self.query_one("#search", Input).value = self.ctrl.search_term
                self._start_load()

            def on_input_changed(self, event: Input.Changed) -> None:
                self.ctrl.set_search(event.value)
                self._show_records()

            # ─── Actions ───

            def action_focus_search(self) -> None:
                self.query_one("#search", Input).focus()

            def action_next_filter(self) -> None:
                self.ctrl.next_category()
                self._show_records()

            def action_delete(self) -> None:
                table = self.query_one("#record_table", DataTable)
                if self.ctrl.state != ViewState.READY or table.row_count == 0:
                    return
                row = table.get_row_at(table.cursor_row)
                self.ctrl.request_delete(row[0])
                self._show_records()

            def action_confirm(self) -> None:
                ctrl = self.ctrl
                if ctrl.state != ViewState.AWAITING_CONFIRMATION or ctrl.pending_delete is None:
                    return
                record_id = ctrl.begin_delete()
                self._show_records()
                self.run_worker(lambda: self._delete_record(ctrl, record_id), thread=True)

            def _delete_record(self, ctrl, record_id) -> None:
                from client.api import ApiError
                try:
                    ctrl.collection.delete(record_id)
                except ApiError as e:
                    self.call_from_thread(self._record_deleted, ctrl, record_id, e)
                    return
                self.call_from_thread(self._record_deleted, ctrl, record_id, None)

            def _record_deleted(self, ctrl, record_id, error) -> None:
                if ctrl.finish_delete(record_id, error):
                    self.notify(f"{ctrl.schema.title} deleted.")
                if ctrl is self.ctrl:
                    self._show_records()

            def action_cancel(self) -> None:
                ctrl = self.ctrl
                if ctrl.state == ViewState.AWAITING_CONFIRMATION:
                    ctrl.cancel_delete()
                elif ctrl.state == ViewState.ERROR_DIALOG:
                    ctrl.dismiss()
                self._show_records()

            def action_reload(self) -> None:
                if self.ctrl.state in (ViewState.READY, ViewState.ERROR):
                    self._start_load()

            def action_toggle_theme(self) -> None:
                if manager is not None:
                    theme = manager.toggle_theme().theme
                else:
                    theme = Theme.DARK if self.theme == "textual-light" else Theme.LIGHT
                self.theme = _textual_theme(theme)

            def action_show_help(self) -> None:
                self.notify(
                    "↑↓: navigate | Enter: select | /: search | f: filter | "
                    "x: delete | r: reload | d: light/dark | q: quit",
                    title="Help",
                )

        _App().run()


def _textual_theme(theme) -> str:
    return "textual-dark" if theme.value == "dark" else "textual-light"
