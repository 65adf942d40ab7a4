"""Tests for the path builder state machine."""

import pytest

from signature_browser.api.models import SearchCondition, SignatureElement
from signature_browser.services.path_builder import (
    BrowserMode,
    BuilderState,
    ComponentSelected,
    Confirm,
    Confirmed,
    Idle,
    PathBuilding,
    Preseed,
    RemoveLast,
    Reset,
    SelectComponent,
    SelectElement,
    SelectMode,
    SetSearchTerm,
    can_create_element,
    candidate_query,
    initial_state,
    next_step_prompt,
    transition,
)

A = SignatureElement(10, 1, "A", index="1")
A1 = SignatureElement(12, 1, "A1", index="1", parent_ids=(10,))
X = SignatureElement(30, 3, "X")


def run(state, *actions):
    for action in actions:
        state = transition(state, action)
    return state


def filters(state):
    request = candidate_query(state, page_size=200)
    if request is None:
        return None
    return [(q.field, q.condition, q.value) for q in request.query]


def test_initial_state_is_idle():
    state = initial_state()
    assert state.mode is BrowserMode.HIERARCHICAL
    assert state.stage == Idle()
    assert state.path == ()
    assert filters(state) is None


def test_hierarchical_component_queries_roots():
    state = run(initial_state(), SelectComponent(1))
    assert state.stage == ComponentSelected(1)
    assert filters(state) == [
        ("signatureComponentId", SearchCondition.EQ, 1),
        ("hasParents", SearchCondition.EQ, False),
    ]


def test_hierarchical_path_queries_children_of_last():
    state = run(initial_state(), SelectComponent(1), SelectElement(A))
    assert isinstance(state.stage, PathBuilding)
    assert state.selected_component_id == 1
    assert filters(state) == [("parentIds", SearchCondition.ANY_OF, (10,))]


def test_hierarchical_search_term_adds_name_fragment():
    state = run(initial_state(), SelectComponent(1), SetSearchTerm(" al "))
    assert filters(state)[-1] == ("name", SearchCondition.FRAGMENT, "al")


def test_hierarchical_idle_ignores_search_and_element_picks():
    state = run(initial_state(), SetSearchTerm("foo"))
    assert filters(state) is None
    assert run(state, SelectElement(A)).stage == Idle()


def test_hierarchical_component_locked_while_path_non_empty():
    state = run(initial_state(), SelectComponent(1), SelectElement(A))
    assert transition(state, SelectComponent(2)) == state


def test_select_element_clears_search_term():
    state = run(initial_state(), SelectComponent(1), SetSearchTerm("A"), SelectElement(A))
    assert state.search_term == ""


def test_duplicate_element_is_rejected():
    state = run(initial_state(), SelectComponent(1), SelectElement(A))
    assert transition(state, SelectElement(A)) == state


def test_remove_last_until_idle_in_hierarchical_mode():
    state = run(initial_state(), SelectComponent(1), SelectElement(A), SelectElement(A1))
    steps = 0
    while not isinstance(state.stage, Idle):
        state = transition(state, RemoveLast())
        steps += 1
        assert steps <= 3
    assert state.selected_component_id is None
    assert state.path == ()


def test_remove_last_on_idle_is_noop():
    state = initial_state()
    assert transition(state, RemoveLast()) == state


@pytest.mark.parametrize("start_mode,new_mode", [
    (BrowserMode.HIERARCHICAL, BrowserMode.FREE),
    (BrowserMode.FREE, BrowserMode.HIERARCHICAL),
    (BrowserMode.FREE, BrowserMode.FREE),
])
def test_mode_switch_always_resets(start_mode, new_mode):
    state = run(initial_state(start_mode), SelectComponent(1), SelectElement(A), SetSearchTerm("x"))
    state = transition(state, SelectMode(new_mode))
    assert state == BuilderState(mode=new_mode)
    assert state.selected_component_id is None


def test_free_mode_without_component_searches_by_name_only():
    state = run(initial_state(BrowserMode.FREE), SetSearchTerm("foo"))
    assert filters(state) == [("name", SearchCondition.FRAGMENT, "foo")]


def test_free_mode_without_component_or_term_fetches_nothing():
    assert filters(initial_state(BrowserMode.FREE)) is None


def test_free_mode_component_queries_all_its_elements():
    state = run(initial_state(BrowserMode.FREE), SelectComponent(2))
    assert filters(state) == [("signatureComponentId", SearchCondition.EQ, 2)]


def test_free_mode_pick_clears_component_and_allows_cross_component_paths():
    state = run(initial_state(BrowserMode.FREE), SelectComponent(1), SelectElement(A))
    assert state.stage == PathBuilding((A,), None)
    assert filters(state) is None

    state = run(state, SelectComponent(3))
    assert state.selected_component_id == 3
    state = run(state, SelectElement(X))
    assert state.path_ids == (10, 30)
    assert state.selected_component_id is None


def test_free_mode_remove_last_keeps_chosen_component():
    state = run(initial_state(BrowserMode.FREE), SelectComponent(1), SelectElement(A), SelectComponent(2))
    state = transition(state, RemoveLast())
    assert state.stage == ComponentSelected(2)


def test_confirm_requires_a_path():
    state = run(initial_state(), SelectComponent(1))
    assert transition(state, Confirm()) == state


def test_confirm_then_reset():
    state = run(initial_state(), SelectComponent(1), SelectElement(A), SelectElement(A1), Confirm())
    assert state.stage == Confirmed((10, 12))
    assert candidate_query(state, 200) is None
    assert transition(state, SelectElement(X)) == state
    assert transition(state, Reset()) == BuilderState(mode=BrowserMode.HIERARCHICAL)


def test_preseed_sets_root_component_in_hierarchical_mode():
    state = transition(initial_state(), Preseed((A, A1)))
    assert state.stage == PathBuilding((A, A1), 1)


def test_preseed_with_empty_path_is_idle():
    assert transition(initial_state(BrowserMode.FREE), Preseed(())).stage == Idle()


def test_can_create_element_rules():
    assert not can_create_element(initial_state())
    assert can_create_element(run(initial_state(), SelectComponent(1)))
    assert not can_create_element(run(initial_state(), SelectComponent(1), SelectElement(A)))

    free = run(initial_state(BrowserMode.FREE), SelectComponent(1), SelectElement(A))
    assert not can_create_element(free)
    assert can_create_element(transition(free, SelectComponent(1)))


def test_next_step_prompt():
    assert next_step_prompt(initial_state()) == "1. Select Component to Start"
    state = run(initial_state(), SelectComponent(1), SelectElement(A))
    assert next_step_prompt(state) == '2. Select Child of "A"'
    assert next_step_prompt(initial_state(BrowserMode.FREE)) == "1. Select Component (Optional)"
