"""
Framework-agnostic state machine for building one signature path.

The builder's state is an immutable BuilderState: a mode, a tagged stage and
the settled search term. ``transition`` is the only way to move between
states; it is total, so an action that is not valid in the current state
returns the state unchanged.

Stages:
    Idle                      no component, empty path
    ComponentSelected(id)     component chosen, empty path
    PathBuilding(path, id)    one or more elements chosen
    Confirmed(path_ids)       finished path, emitted then reset to Idle

In hierarchical mode PathBuilding always carries the root component, so a
non-empty path without a component cannot be represented. In free mode the
component is cleared after every pick and PathBuilding.component_id is
whatever component is currently chosen for the next pick (possibly None).
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple, Union

from signature_browser.api import query
from signature_browser.api.models import SearchQueryElement, SearchRequest, SignatureElement


class BrowserMode(Enum):
    HIERARCHICAL = "hierarchical"
    FREE = "free"


# --- Stages -----------------------------------------------------------------

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class ComponentSelected:
    component_id: int


@dataclass(frozen=True)
class PathBuilding:
    path: Tuple[SignatureElement, ...]
    component_id: Optional[int] = None


@dataclass(frozen=True)
class Confirmed:
    path_ids: Tuple[int, ...]


Stage = Union[Idle, ComponentSelected, PathBuilding, Confirmed]


@dataclass(frozen=True)
class BuilderState:
    mode: BrowserMode = BrowserMode.HIERARCHICAL
    stage: Stage = Idle()
    search_term: str = ""

    @property
    def path(self) -> Tuple[SignatureElement, ...]:
        if isinstance(self.stage, PathBuilding):
            return self.stage.path
        return ()

    @property
    def path_ids(self) -> Tuple[int, ...]:
        if isinstance(self.stage, Confirmed):
            return self.stage.path_ids
        return tuple(e.signature_element_id for e in self.path)

    @property
    def selected_component_id(self) -> Optional[int]:
        if isinstance(self.stage, (ComponentSelected, PathBuilding)):
            return self.stage.component_id
        return None

    @property
    def last_element(self) -> Optional[SignatureElement]:
        path = self.path
        return path[-1] if path else None


# --- Actions ----------------------------------------------------------------

@dataclass(frozen=True)
class SelectMode:
    mode: BrowserMode


@dataclass(frozen=True)
class SelectComponent:
    component_id: Optional[int]


@dataclass(frozen=True)
class SelectElement:
    element: SignatureElement


@dataclass(frozen=True)
class RemoveLast:
    pass


@dataclass(frozen=True)
class SetSearchTerm:
    term: str


@dataclass(frozen=True)
class Confirm:
    pass


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class Preseed:
    """Replace the path wholesale with already-resolved elements."""
    path: Tuple[SignatureElement, ...]


Action = Union[SelectMode, SelectComponent, SelectElement, RemoveLast,
               SetSearchTerm, Confirm, Reset, Preseed]


def initial_state(mode: BrowserMode = BrowserMode.HIERARCHICAL) -> BuilderState:
    return BuilderState(mode=mode)


def transition(state: BuilderState, action: Action) -> BuilderState:
    """Apply ``action`` to ``state``; invalid actions are no-ops."""
    if isinstance(action, SelectMode):
        # Switching mode always discards the in-progress path
        return BuilderState(mode=action.mode)

    if isinstance(action, Reset):
        return BuilderState(mode=state.mode)

    if isinstance(action, SetSearchTerm):
        if isinstance(state.stage, Confirmed):
            return state
        return replace(state, search_term=action.term)

    if isinstance(action, SelectComponent):
        return _select_component(state, action.component_id)

    if isinstance(action, SelectElement):
        return _select_element(state, action.element)

    if isinstance(action, RemoveLast):
        return _remove_last(state)

    if isinstance(action, Confirm):
        if not isinstance(state.stage, PathBuilding):
            return state
        return replace(state, stage=Confirmed(state.path_ids), search_term="")

    if isinstance(action, Preseed):
        return _preseed(state, action.path)

    return state


def _select_component(state: BuilderState, component_id: Optional[int]) -> BuilderState:
    stage = state.stage
    if isinstance(stage, Confirmed):
        return state

    if state.mode is BrowserMode.HIERARCHICAL:
        if isinstance(stage, PathBuilding):
            return state
        if component_id is None:
            return replace(state, stage=Idle())
        return replace(state, stage=ComponentSelected(component_id))

    # Free mode: component may change at any time, including mid-path
    if isinstance(stage, PathBuilding):
        return replace(state, stage=PathBuilding(stage.path, component_id))
    if component_id is None:
        return replace(state, stage=Idle())
    return replace(state, stage=ComponentSelected(component_id))


def _select_element(state: BuilderState, element: SignatureElement) -> BuilderState:
    stage = state.stage
    if isinstance(stage, Confirmed):
        return state
    if element.signature_element_id in state.path_ids:
        return state

    if state.mode is BrowserMode.HIERARCHICAL:
        if isinstance(stage, Idle):
            return state
        # Root component is kept for the lifetime of the path
        path = state.path + (element,)
        return replace(state, stage=PathBuilding(path, stage.component_id), search_term="")

    # Free mode: every step is independent, so the component must be re-chosen
    path = state.path + (element,)
    return replace(state, stage=PathBuilding(path, None), search_term="")


def _remove_last(state: BuilderState) -> BuilderState:
    stage = state.stage
    if not isinstance(stage, PathBuilding):
        return state

    path = stage.path[:-1]
    if path:
        return replace(state, stage=PathBuilding(path, stage.component_id))
    if state.mode is BrowserMode.HIERARCHICAL or stage.component_id is None:
        return replace(state, stage=Idle())
    return replace(state, stage=ComponentSelected(stage.component_id))


def _preseed(state: BuilderState, path: Tuple[SignatureElement, ...]) -> BuilderState:
    if not path:
        return BuilderState(mode=state.mode)
    if state.mode is BrowserMode.HIERARCHICAL:
        component_id = path[0].signature_component_id
    else:
        component_id = None
    return BuilderState(mode=state.mode, stage=PathBuilding(tuple(path), component_id))


# --- Derived queries ----------------------------------------------------------

def candidate_filters(state: BuilderState) -> Optional[Tuple[SearchQueryElement, ...]]:
    """Search filters for the next-element candidates, or None when nothing should be fetched."""
    term = state.search_term.strip()
    text_filter = (query.name_fragment(term),) if term else ()
    component_id = state.selected_component_id

    if state.mode is BrowserMode.HIERARCHICAL:
        last = state.last_element
        if last is not None:
            return (query.children_of(last.signature_element_id),) + text_filter
        if component_id is not None:
            return query.roots_of(component_id) + text_filter
        return None

    if component_id is not None:
        return (query.in_component(component_id),) + text_filter
    if term:
        return text_filter
    return None


def candidate_query(state: BuilderState, page_size: int) -> Optional[SearchRequest]:
    if isinstance(state.stage, Confirmed):
        return None
    filters = candidate_filters(state)
    if filters is None:
        return None
    return SearchRequest(query=filters, page=1, page_size=page_size)


def can_create_element(state: BuilderState) -> bool:
    """Inline creation needs a component; hierarchical mode only creates roots."""
    if state.selected_component_id is None:
        return False
    if state.mode is BrowserMode.FREE:
        return True
    return not state.path


def next_step_prompt(state: BuilderState) -> str:
    last = state.last_element
    if state.mode is BrowserMode.HIERARCHICAL:
        if last is None:
            return "1. Select Component to Start"
        return f'2. Select Child of "{last.name}"'
    if last is None:
        return "1. Select Component (Optional)"
    return "2. Select Next Component or Element"
