"""Tests for the list screen controller and the view state machine."""

import pytest

from client.api import ApiError
from controllers import ALL_SCHEMAS, ViewState, list_controller
from controllers.state import InvalidTransition, StateMachine
from conftest import CSULA_COURSE_WITH_NULLS, CSULA_COURSES


def _ready(api, key):
    ctrl = list_controller(ALL_SCHEMAS[key], api)
    assert ctrl.load()
    return ctrl


# ─── STATE MACHINE ────────────────────────────────────────────────────────────

class TestStateMachine:
    def test_allowed_path(self):
        """Load, submit and dismiss follow the allowed edges."""
        m = StateMachine(ViewState.LOADING)
        m.go(ViewState.READY)
        m.go(ViewState.SUBMITTING)
        m.go(ViewState.SUCCESS_DIALOG)
        m.go(ViewState.READY)
        assert m.state == ViewState.READY

    def test_illegal_transition_raises(self):
        """Jumping between unrelated states raises."""
        m = StateMachine(ViewState.LOADING)
        with pytest.raises(InvalidTransition):
            m.go(ViewState.SUBMITTING)

    def test_error_only_leaves_via_reload(self):
        """A load error only leads back to loading."""
        m = StateMachine(ViewState.ERROR)
        assert not m.can_go(ViewState.READY)
        assert m.can_go(ViewState.LOADING)

    def test_same_state_is_noop(self):
        """Going to the current state changes nothing."""
        m = StateMachine(ViewState.READY)
        m.go(ViewState.READY)
        assert m.state == ViewState.READY


# ─── LOADING ──────────────────────────────────────────────────────────────────

class TestLoading:
    def test_load_fills_items_and_visible(self, api):
        """A successful load shows every record."""
        ctrl = _ready(api, "courses")
        assert ctrl.state == ViewState.READY
        assert [c.id for c in ctrl.visible] == ["c1", "c2"]

    def test_load_failure_sets_error_state(self, api, session):
        """A failed first load shows the fetch error."""
        session.routes[("GET", "/schools")] = (500, None)
        ctrl = list_controller(ALL_SCHEMAS["schools"], api)
        assert not ctrl.load()
        assert ctrl.state == ViewState.ERROR
        assert ctrl.error == "Error fetching schools."

    def test_retry_after_error(self, api, session):
        """Reloading after an error clears it."""
        session.routes[("GET", "/schools")] = (500, None)
        ctrl = list_controller(ALL_SCHEMAS["schools"], api)
        ctrl.load()
        session.routes[("GET", "/schools")] = (200, [])
        assert ctrl.load()
        assert ctrl.state == ViewState.READY
        assert ctrl.error is None

    def test_stale_response_is_dropped(self, api):
        """An older response never replaces a newer one."""
        ctrl = list_controller(ALL_SCHEMAS["courses"], api)
        old = ctrl.begin_load()
        new = ctrl.begin_load()
        courses = api.courses.list()
        assert ctrl.apply_loaded(new, courses[:1])
        assert not ctrl.apply_loaded(old, courses)
        assert [c.id for c in ctrl.items] == ["c1"]

    def test_delete_is_not_undone_by_older_list(self, api, session):
        """A list requested before a delete must not bring the row back."""
        session.routes[("DELETE", "/courses/c1")] = (200, {"message": "deleted"})
        ctrl = _ready(api, "courses")
        token = ctrl.begin_load()
        in_flight = api.courses.list()          # still contains c1
        ctrl.request_delete("c1")
        assert ctrl.confirm_delete()
        assert ctrl.apply_loaded(token, in_flight)
        assert [c.id for c in ctrl.items] == ["c2"]

    def test_list_sent_after_delete_is_trusted(self, api, session):
        """A list requested after a delete is applied as is."""
        session.routes[("DELETE", "/courses/c1")] = (200, None)
        ctrl = _ready(api, "courses")
        ctrl.request_delete("c1")
        ctrl.confirm_delete()
        token = ctrl.begin_load()
        # The server re-created the record in the meantime.
        assert ctrl.apply_loaded(token, api.courses.list())
        assert ctrl.find("c1") is not None

    def test_records_with_null_fields_load(self, api, session):
        """A course stored with null requisites and type still shows in the list."""
        session.routes[("GET", "/csula-courses")] = (
            200, CSULA_COURSES + [CSULA_COURSE_WITH_NULLS],
        )
        ctrl = _ready(api, "csula-courses")
        assert ctrl.state == ViewState.READY
        assert ctrl.find("h4").course_type == ""


# ─── FILTERING ────────────────────────────────────────────────────────────────

class TestFiltering:
    def test_search_is_case_insensitive_substring(self, api):
        """Search ignores case and matches substrings."""
        ctrl = _ready(api, "courses")
        assert [c.id for c in ctrl.set_search("calc")] == ["c2"]

    def test_search_covers_codes_and_school(self, api):
        """Codes and school names are searchable."""
        ctrl = _ready(api, "courses")
        assert [c.id for c in ctrl.set_search("engr 10")] == ["c1"]
        assert [c.id for c in ctrl.set_search("east los")] == ["c1"]

    def test_category_and_search_combine(self, api):
        """Category and search narrow the list together."""
        ctrl = _ready(api, "courses")
        assert [c.id for c in ctrl.apply_filter("", "2")] == ["c2"]
        assert ctrl.apply_filter("engineering", "2") == []

    def test_clearing_category_shows_all(self, api):
        """No category means every record."""
        ctrl = _ready(api, "courses")
        ctrl.set_category("1")
        assert len(ctrl.set_category(None)) == 2

    def test_school_options_come_from_schools(self, api):
        """School filter options are fetched from /schools."""
        ctrl = _ready(api, "programs")
        assert ctrl.category_options() == [
            ("1", "East Los Angeles College"), ("2", "Pasadena City College"),
        ]

    def test_department_options_first_name_wins(self, api):
        """Department options are distinct by name."""
        ctrl = _ready(api, "csula-courses")
        assert ctrl.category_options() == [
            ("EE", "Electrical and Computer Engineering"),
            ("CS", "Computer Science"),
            ("CS", "Comp Sci"),
        ]

    def test_department_filter(self, api):
        """Filtering by department id matches any listed department."""
        ctrl = _ready(api, "csula-courses")
        assert [c.id for c in ctrl.set_category("CS")] == ["h2", "h3"]

    def test_school_search(self, api):
        """Schools are searchable by name."""
        ctrl = _ready(api, "schools")
        assert [s.id for s in ctrl.set_search("pasadena")] == ["2"]

    def test_next_category_cycles_through_options(self, api):
        """The filter steps through every school and back to all."""
        ctrl = _ready(api, "courses")
        ctrl.set_filter_options(ctrl.category_options())
        assert ctrl.next_category() == "1"
        assert ctrl.category_name() == "East Los Angeles College"
        assert ctrl.next_category() == "2"
        assert [c.id for c in ctrl.visible] == ["c2"]
        assert ctrl.next_category() is None
        assert ctrl.category_name() == "All Schools"
        assert len(ctrl.visible) == 2

    def test_filter_options_stay_with_their_entity(self, api):
        """School options loaded for programs never reach the department filter."""
        programs = _ready(api, "programs")
        programs.set_filter_options(programs.category_options())
        csula = list_controller(ALL_SCHEMAS["csula-courses"], api)
        assert csula.filter_options == []
        assert csula.next_category() is None
        assert csula.category_id is None

    def test_next_category_skips_repeated_department_ids(self, api):
        """A department listed under two names is one stop in the cycle."""
        ctrl = _ready(api, "csula-courses")
        ctrl.set_filter_options(ctrl.category_options())
        assert [ctrl.next_category() for _ in range(3)] == ["EE", "CS", None]

    def test_next_category_without_options_keeps_filter(self, api, session):
        """A failed load leaves nothing to cycle through."""
        session.routes[("GET", "/csula-courses")] = (500, None)
        ctrl = list_controller(ALL_SCHEMAS["csula-courses"], api)
        assert not ctrl.load()
        assert ctrl.next_category() is None


# ─── DELETE ───────────────────────────────────────────────────────────────────

class TestDelete:
    def test_cancel_keeps_row(self, api, session):
        """Cancelling a delete sends nothing."""
        ctrl = _ready(api, "schools")
        ctrl.request_delete("1")
        assert ctrl.state == ViewState.AWAITING_CONFIRMATION
        ctrl.cancel_delete()
        assert ctrl.state == ViewState.READY
        assert ctrl.find("1") is not None
        assert session.calls_to("DELETE", "/schools/1") == []

    def test_confirmed_delete_removes_row(self, api, session):
        """A confirmed delete removes the row from the filtered list."""
        session.routes[("DELETE", "/schools/1")] = (200, None)
        ctrl = _ready(api, "schools")
        ctrl.set_search("college")
        ctrl.request_delete("1")
        assert ctrl.confirm_delete()
        assert ctrl.find("1") is None
        assert [s.id for s in ctrl.visible] == ["2"]
        assert ctrl.state == ViewState.READY

    def test_failed_delete_keeps_row_and_shows_prompt(self, api, session):
        """A failed delete keeps the row and opens the dialog."""
        session.routes[("DELETE", "/schools/1")] = (500, None)
        ctrl = _ready(api, "schools")
        ctrl.request_delete("1")
        assert not ctrl.confirm_delete()
        assert ctrl.state == ViewState.ERROR_DIALOG
        assert ctrl.dialog_message == "Failed to delete school."
        assert ctrl.find("1") is not None
        ctrl.dismiss()
        assert ctrl.state == ViewState.READY

    def test_finish_delete_with_error(self, api):
        """The server's message is shown for a refused delete."""
        ctrl = _ready(api, "courses")
        ctrl.request_delete("c2")
        assert not ctrl.finish_delete("c2", ApiError("Course is still mapped", 409))
        assert ctrl.dialog_message == "Course is still mapped"

    def test_confirm_without_request(self, api):
        """Confirming with nothing pending raises."""
        ctrl = _ready(api, "courses")
        with pytest.raises(ValueError):
            ctrl.confirm_delete()

    def test_second_confirm_is_ignored_while_in_flight(self, api, session):
        """A delete already sent cannot be confirmed again before its answer."""
        session.routes[("DELETE", "/schools/1")] = (200, None)
        ctrl = _ready(api, "schools")
        ctrl.request_delete("1")
        record_id = ctrl.begin_delete()
        assert ctrl.pending_delete is None
        assert ctrl.deleting == "1"
        with pytest.raises(ValueError):
            ctrl.begin_delete()
        with pytest.raises(ValueError):
            ctrl.confirm_delete()
        assert session.calls_to("DELETE", "/schools/1") == []
        ctrl.cancel_delete()
        assert ctrl.state == ViewState.AWAITING_CONFIRMATION
        assert ctrl.finish_delete(record_id)
        assert ctrl.deleting is None
        assert ctrl.state == ViewState.READY
        assert ctrl.dialog_message is None
        assert ctrl.find("1") is None
