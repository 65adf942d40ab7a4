"""Tests for ElementBrowserController against the in-memory backend."""

import pytest

from signature_browser.api.exceptions import ApiError
from signature_browser.services.browser_controller import ElementBrowserController
from signature_browser.services.path_builder import BrowserMode, ComponentSelected, Idle, PathBuilding


def names(elements):
    return [e.name for e in elements]


@pytest.fixture
def emitted():
    return []


@pytest.fixture
def controller(api, emitted):
    ctrl = ElementBrowserController(api, on_select_signature=emitted.append)
    ctrl.load_components()
    return ctrl


def test_load_components_sorted_by_name(controller):
    assert [c.name for c in controller.components] == ["C1", "C2"]
    assert controller.components_available


def test_hierarchical_walk_and_confirm(controller, emitted, api):
    controller.select_component(1)
    controller.refresh_candidates()
    assert names(controller.visible_candidates) == ["A", "B"]

    controller.select_element(api.elements[10])
    controller.refresh_candidates()
    assert names(controller.visible_candidates) == ["A1"]

    controller.select_element(api.elements[12])
    assert controller.confirm() == [10, 12]
    assert emitted == [[10, 12]]
    assert controller.state.stage == Idle()
    assert controller.candidates == []


def test_confirm_with_empty_path_emits_nothing(controller, emitted):
    controller.select_component(1)
    assert controller.confirm() is None
    assert emitted == []


def test_free_mode_name_search(api):
    ctrl = ElementBrowserController(api, mode=BrowserMode.FREE)
    ctrl.load_components()
    ctrl.search("foo")
    ctrl.refresh_candidates()
    assert sorted(names(ctrl.visible_candidates)) == ["Foo bar", "Foobaz"]
    query = api.search_requests[-1].query
    assert [(q.field, q.value) for q in query] == [("name", "foo")]

    picked = ctrl.visible_candidates[0]
    ctrl.select_element(picked)
    assert ctrl.selected_component_id is None
    assert ctrl.path == (picked,)


def test_no_query_clears_candidates_without_request(api):
    ctrl = ElementBrowserController(api, mode=BrowserMode.FREE)
    assert ctrl.refresh_candidates() is False
    assert api.search_requests == []
    assert ctrl.candidates == []


def test_visible_candidates_exclude_path_elements(api):
    ctrl = ElementBrowserController(api, mode=BrowserMode.FREE)
    ctrl.load_components()
    ctrl.select_component(1)
    ctrl.select_element(api.elements[10])
    ctrl.select_component(1)
    ctrl.refresh_candidates()
    assert 10 not in [e.signature_element_id for e in ctrl.visible_candidates]
    assert names(ctrl.visible_candidates) == ["A1", "B"]


def test_preseed_success_restores_path(controller, api):
    assert controller.preseed([10, 12]) is True
    assert controller.state.stage == PathBuilding((api.elements[10], api.elements[12]), 1)
    assert api.lookups == [10, 12]
    assert controller.warning is None


def test_preseed_failure_discards_whole_path(controller, api):
    api.fail_ids = {11}
    assert controller.preseed([10, 11]) is False
    assert controller.state.stage == Idle()
    assert controller.path == ()
    assert controller.warning
    assert not controller.preseeding


def test_stale_candidate_response_is_discarded(controller, api):
    controller.select_component(1)
    old_ticket = controller.begin_candidate_fetch()
    old_response = controller.fetch_candidates(old_ticket)

    controller.select_element(api.elements[10])
    new_ticket = controller.begin_candidate_fetch()
    new_response = controller.fetch_candidates(new_ticket)

    assert controller.apply_candidates(new_ticket, new_response) is True
    assert controller.apply_candidates(old_ticket, old_response) is False
    assert names(controller.candidates) == ["A1"]


def test_response_for_changed_query_is_discarded_without_new_fetch(controller, api):
    controller.select_component(1)
    ticket = controller.begin_candidate_fetch()
    response = controller.fetch_candidates(ticket)
    controller.search("b")
    assert controller.apply_candidates(ticket, response) is False
    assert controller.candidates == []


def test_candidate_fetch_failure_keeps_path_and_component(controller, api):
    controller.select_component(1)
    controller.select_element(api.elements[10])
    api.fail_search = True
    assert controller.refresh_candidates() is False
    assert controller.error == "Failed to load elements"
    assert controller.path == (api.elements[10],)
    assert controller.selected_component_id == 1
    assert not controller.loading_candidates


def test_component_failure_disables_selection(api):
    api.fail_components = True
    ctrl = ElementBrowserController(api)
    assert ctrl.load_components() is False
    assert ctrl.components_error
    assert not ctrl.components_available
    assert ctrl.select_component(1) is False
    assert ctrl.state.stage == Idle()

    api.fail_components = False
    assert ctrl.load_components() is True
    assert ctrl.select_component(1) is True


def test_unknown_component_is_ignored(controller):
    assert controller.select_component(99) is False


def test_inline_create_refetches_without_selecting(controller, api):
    controller.select_component(1)
    controller.refresh_candidates()
    requests_before = len(api.search_requests)

    element = controller.create_element_inline("C", index="3")
    assert element is not None
    assert element.signature_component_id == 1
    assert len(api.search_requests) == requests_before + 1
    assert "C" in names(controller.visible_candidates)
    assert controller.path == ()
    assert controller.state.stage == ComponentSelected(1)
    assert not controller.creating_element


def test_inline_create_not_allowed_mid_path_in_hierarchical_mode(controller, api):
    controller.select_component(1)
    controller.select_element(api.elements[10])
    assert controller.create_element_inline("X") is None
    assert api.created == []


def test_inline_create_failure_leaves_state(controller, api):
    controller.select_component(1)
    api.fail_create = True
    assert controller.create_element_inline("C") is None
    assert controller.error == "Failed to create element"
    assert controller.state.stage == ComponentSelected(1)


def test_inline_create_validation_error(controller, api):
    controller.select_component(1)
    assert controller.create_element_inline("   ") is None
    assert controller.error == "Name cannot be empty"
    assert api.created == []


def test_select_mode_resets_and_drops_pending_preseed(controller, api):
    ticket = controller.begin_preseed()
    controller.select_mode(BrowserMode.FREE)
    elements = controller.resolve_initial_path([10])
    assert controller.apply_preseed(ticket, elements) is False
    assert controller.mode is BrowserMode.FREE
    assert controller.path == ()
    assert not controller.preseeding


def test_close_discards_in_flight_results(controller):
    controller.select_component(1)
    ticket = controller.begin_candidate_fetch()
    response = controller.fetch_candidates(ticket)
    controller.close()
    assert controller.apply_candidates(ticket, response) is False
    assert controller.closed


def test_listeners_notified(controller):
    calls = []

    def listener():
        calls.append(controller.state.stage)

    controller.add_listener(listener)
    controller.select_component(1)
    assert calls == [ComponentSelected(1)]
    controller.remove_listener(listener)
    calls.clear()
    controller.reset()
    assert calls == []


def test_describe_snapshot(controller, api):
    controller.select_component(1)
    controller.select_element(api.elements[10])
    snapshot = controller.describe()
    assert snapshot["stage"] == "PathBuilding"
    assert snapshot["path"] == [10]
    assert snapshot["mode"] == "hierarchical"


def test_error_message_from_api_error(controller, api):
    def boom():
        raise ApiError("", status=500)
    api.get_all_components = boom
    controller.load_components()
    assert controller.components_error == "Failed to load components"
