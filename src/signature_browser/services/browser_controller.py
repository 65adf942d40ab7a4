"""
Controller driving the path builder against the signature API.

Holds the BuilderState plus everything fetched for it (components,
candidates, errors, loading flags). Each fetch is split into three steps so
a UI adapter can run the blocking middle step on a worker thread:

    ticket = controller.begin_candidate_fetch()     # UI thread
    response = controller.fetch_candidates(ticket)  # any thread, no state access
    controller.apply_candidates(ticket, response)   # UI thread, drops stale tickets

``refresh_candidates`` / ``load_components`` chain the three steps
synchronously for headless callers.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from signature_browser.api.exceptions import ApiError, ValidationError
from signature_browser.api.models import (
    CreateElementInput,
    SearchRequest,
    SearchResponse,
    SignatureComponent,
    SignatureElement,
)
from signature_browser.core.request_sequencer import RequestSequencer
from signature_browser.core.sort_utils import sort_components, sort_elements
from signature_browser.protocols.browser_config import get_browser_config
from signature_browser.protocols.signature_api import SignatureApiProtocol
from signature_browser.services.path_builder import (
    Action,
    BrowserMode,
    BuilderState,
    Confirm,
    Confirmed,
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
    transition,
)

logger = logging.getLogger(__name__)

COMPONENTS = "components"
CANDIDATES = "candidates"
PRESEED = "preseed"


@dataclass(frozen=True)
class FetchTicket:
    """Identifies one issued request and the query context it was issued for."""
    kind: str
    seq: int
    request: Optional[SearchRequest] = None


class ElementBrowserController:
    """
    Single-writer owner of one path-building session.

    Usage:
        controller = ElementBrowserController(api, on_select_signature=collection.add_path)
        controller.load_components()
        controller.select_component(3)
        controller.refresh_candidates()
        controller.select_element(controller.visible_candidates[0])
        controller.confirm()  # emits [id] and resets to Idle
    """

    def __init__(
        self,
        api: SignatureApiProtocol,
        on_select_signature: Optional[Callable[[List[int]], None]] = None,
        mode: BrowserMode = BrowserMode.HIERARCHICAL,
        page_size: Optional[int] = None,
    ):
        self._api = api
        self._on_select_signature = on_select_signature
        self._page_size = page_size or get_browser_config().max_search_results
        self._sequencer = RequestSequencer()
        self._listeners: List[Callable[[], None]] = []
        self._closed = False

        self.state: BuilderState = initial_state(mode)
        self.components: List[SignatureComponent] = []
        self.components_error: Optional[str] = None
        self.components_loaded = False
        self.loading_components = False

        self.candidates: List[SignatureElement] = []
        self.error: Optional[str] = None
        self.warning: Optional[str] = None
        self.loading_candidates = False
        self.creating_element = False
        self.preseeding = False

    # --- Observation ------------------------------------------------------

    def add_listener(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def mode(self) -> BrowserMode:
        return self.state.mode

    @property
    def path(self) -> Tuple[SignatureElement, ...]:
        return self.state.path

    @property
    def selected_component_id(self) -> Optional[int]:
        return self.state.selected_component_id

    @property
    def selected_component(self) -> Optional[SignatureComponent]:
        component_id = self.selected_component_id
        for component in self.components:
            if component.signature_component_id == component_id:
                return component
        return None

    @property
    def components_available(self) -> bool:
        """Component selection is disabled until a component fetch succeeds."""
        return self.components_loaded and self.components_error is None

    @property
    def can_confirm(self) -> bool:
        return bool(self.state.path)

    @property
    def can_create_element(self) -> bool:
        return (
            not self.loading_components
            and self.selected_component is not None
            and can_create_element(self.state)
        )

    @property
    def visible_candidates(self) -> List[SignatureElement]:
        """Fetched candidates minus the in-progress path, filtered by the search term."""
        taken = set(self.state.path_ids)
        term = self.state.search_term.strip().lower()
        visible = [
            element for element in self.candidates
            if element.signature_element_id not in taken
            and (not term
                 or term in element.name.lower()
                 or (element.index and term in element.index.lower()))
        ]
        return sort_elements(visible)

    @property
    def truncated(self) -> bool:
        """More candidates may exist than one page holds."""
        return len(self.candidates) >= self._page_size

    def current_query(self) -> Optional[SearchRequest]:
        return candidate_query(self.state, self._page_size)

    # --- State transitions ---------------------------------------------------

    def _dispatch(self, action: Action) -> bool:
        if self._closed:
            return False
        before = self.state
        after = transition(before, action)
        if after == before:
            return False
        self.state = after
        if candidate_query(before, self._page_size) != candidate_query(after, self._page_size):
            # Responses for the old query context no longer apply
            self._sequencer.invalidate(CANDIDATES)
            self.loading_candidates = False
        logger.debug("Builder %s -> %s via %s", before.stage, after.stage, type(action).__name__)
        return True

    def select_mode(self, mode: BrowserMode) -> None:
        self._dispatch(SelectMode(mode))
        # A pre-seed still in flight belongs to the old mode
        self._sequencer.invalidate(PRESEED)
        self.preseeding = False
        self.candidates = []
        self.error = None
        self._notify()

    def select_component(self, component_id: Optional[int]) -> bool:
        if component_id is not None:
            if not self.components_available:
                return False
            if not any(c.signature_component_id == component_id for c in self.components):
                logger.warning("Ignoring unknown component %s", component_id)
                return False
        changed = self._dispatch(SelectComponent(component_id))
        if changed:
            self._notify()
        return changed

    def select_element(self, element: SignatureElement) -> bool:
        changed = self._dispatch(SelectElement(element))
        if changed:
            self._notify()
        return changed

    def remove_last(self) -> bool:
        changed = self._dispatch(RemoveLast())
        if changed:
            self._notify()
        return changed

    def search(self, term: str) -> bool:
        """Apply a settled (already debounced) search term."""
        changed = self._dispatch(SetSearchTerm(term))
        if changed:
            self._notify()
        return changed

    def confirm(self) -> Optional[List[int]]:
        """Emit the finished path and reset; no-op while the path is empty."""
        if not self._dispatch(Confirm()):
            return None
        stage = self.state.stage
        path_ids = list(stage.path_ids) if isinstance(stage, Confirmed) else []
        logger.info("Confirmed signature path %s", path_ids)
        self._dispatch(Reset())
        self.candidates = []
        self.error = None
        if self._on_select_signature is not None:
            self._on_select_signature(path_ids)
        self._notify()
        return path_ids

    def reset(self) -> None:
        self._dispatch(Reset())
        self.candidates = []
        self.error = None
        self._notify()

    def close(self) -> None:
        """Stop accepting responses; in-flight results are discarded."""
        self._sequencer.invalidate_all()
        self._closed = True
        self._listeners.clear()

    # --- Components ---------------------------------------------------------

    def begin_component_fetch(self) -> FetchTicket:
        self.loading_components = True
        self.components_error = None
        self._notify()
        return FetchTicket(COMPONENTS, self._sequencer.issue(COMPONENTS))

    def fetch_components(self, ticket: FetchTicket) -> List[SignatureComponent]:
        return self._api.get_all_components()

    def apply_components(self, ticket: FetchTicket, components: Sequence[SignatureComponent]) -> bool:
        if self._closed or not self._sequencer.is_current(COMPONENTS, ticket.seq):
            return False
        self.components = sort_components(components)
        self.components_loaded = True
        self.components_error = None
        self.loading_components = False
        self._notify()
        return True

    def fail_components(self, ticket: FetchTicket, exc: Exception) -> bool:
        if self._closed or not self._sequencer.is_current(COMPONENTS, ticket.seq):
            return False
        logger.error("Failed to load components: %s", exc)
        self.components_error = _message(exc, "Failed to load components")
        self.loading_components = False
        self._notify()
        return True

    def load_components(self) -> bool:
        ticket = self.begin_component_fetch()
        try:
            components = self.fetch_components(ticket)
        except ApiError as exc:
            self.fail_components(ticket, exc)
            return False
        return self.apply_components(ticket, components)

    # --- Candidates ---------------------------------------------------------

    def begin_candidate_fetch(self) -> Optional[FetchTicket]:
        """Issue a ticket for the current query, or clear candidates when there is none."""
        request = self.current_query()
        self.error = None
        if request is None:
            self._sequencer.invalidate(CANDIDATES)
            self.candidates = []
            self.loading_candidates = False
            self._notify()
            return None
        self.loading_candidates = True
        self._notify()
        return FetchTicket(CANDIDATES, self._sequencer.issue(CANDIDATES), request)

    def fetch_candidates(self, ticket: FetchTicket) -> SearchResponse:
        return self._api.search_elements(ticket.request)

    def _is_current_candidates(self, ticket: FetchTicket) -> bool:
        if self._closed or not self._sequencer.is_current(CANDIDATES, ticket.seq):
            return False
        return ticket.request == self.current_query()

    def apply_candidates(self, ticket: FetchTicket, response: SearchResponse) -> bool:
        if not self._is_current_candidates(ticket):
            logger.debug("Discarding stale candidate response #%s", ticket.seq)
            return False
        self.candidates = sort_elements(response.data)
        self.error = None
        self.loading_candidates = False
        self._notify()
        return True

    def fail_candidates(self, ticket: FetchTicket, exc: Exception) -> bool:
        """Record a fetch failure; the path and selected component are kept."""
        if not self._is_current_candidates(ticket):
            return False
        logger.error("Failed to load elements: %s", exc)
        self.error = _message(exc, "Failed to load elements")
        self.candidates = []
        self.loading_candidates = False
        self._notify()
        return True

    def refresh_candidates(self) -> bool:
        ticket = self.begin_candidate_fetch()
        if ticket is None:
            return False
        return self._run_candidate_fetch(ticket)

    def _run_candidate_fetch(self, ticket: FetchTicket) -> bool:
        try:
            response = self.fetch_candidates(ticket)
        except ApiError as exc:
            self.fail_candidates(ticket, exc)
            return False
        return self.apply_candidates(ticket, response)

    # --- Inline element creation ----------------------------------------------

    def build_create_input(self, name: str, description: Optional[str] = None,
                           index: Optional[str] = None) -> Optional[CreateElementInput]:
        """Payload for an element in the selected component, or None when creation is not allowed."""
        if not self.can_create_element:
            return None
        return CreateElementInput(
            signature_component_id=self.selected_component_id,
            name=name,
            description=description or None,
            index=index or None,
        )

    def create_element(self, payload: CreateElementInput) -> SignatureElement:
        return self._api.create_element(payload)

    def element_created(self, element: SignatureElement) -> Optional[FetchTicket]:
        """Record a successful creation and issue a refetch; the new element is not auto-selected."""
        self.creating_element = False
        logger.info('Element "%s" created', element.name)
        return self.begin_candidate_fetch()

    def element_creation_failed(self, exc: Exception) -> None:
        """Surface the failure; path and component are left untouched for a retry."""
        self.creating_element = False
        logger.error("Failed to create element: %s", exc)
        self.error = _message(exc, "Failed to create element")
        self._notify()

    def create_element_inline(self, name: str, description: Optional[str] = None,
                              index: Optional[str] = None) -> Optional[SignatureElement]:
        payload = self.build_create_input(name, description, index)
        if payload is None:
            return None
        self.creating_element = True
        try:
            element = self.create_element(payload)
        except (ApiError, ValidationError) as exc:
            self.element_creation_failed(exc)
            return None
        ticket = self.element_created(element)
        if ticket is not None:
            self._run_candidate_fetch(ticket)
        return element

    # --- Pre-seeding --------------------------------------------------------

    def begin_preseed(self) -> FetchTicket:
        self.preseeding = True
        self.warning = None
        self._notify()
        return FetchTicket(PRESEED, self._sequencer.issue(PRESEED))

    def resolve_initial_path(self, ids: Sequence[int]) -> List[SignatureElement]:
        """Look up each ID in order; the first failure aborts the whole path."""
        elements = []
        for element_id in ids:
            elements.append(self._api.get_element_by_id(element_id, populate=("parents",)))
        return elements

    def apply_preseed(self, ticket: FetchTicket, elements: Sequence[SignatureElement]) -> bool:
        if self._closed or not self._sequencer.is_current(PRESEED, ticket.seq):
            return False
        self.preseeding = False
        self._dispatch(Preseed(tuple(elements)))
        self.candidates = []
        self._notify()
        return True

    def fail_preseed(self, ticket: FetchTicket, exc: Exception) -> bool:
        """Discard the pre-seed entirely and start empty, with a warning."""
        if self._closed or not self._sequencer.is_current(PRESEED, ticket.seq):
            return False
        logger.warning("Could not restore signature path: %s", exc)
        self.preseeding = False
        self.warning = f"Could not load the current path; starting empty ({_message(exc, 'lookup failed')})"
        self._dispatch(Reset())
        self._notify()
        return True

    def preseed(self, ids: Sequence[int]) -> bool:
        if not ids:
            return False
        ticket = self.begin_preseed()
        try:
            elements = self.resolve_initial_path(ids)
        except ApiError as exc:
            self.fail_preseed(ticket, exc)
            return False
        return self.apply_preseed(ticket, elements)

    def describe(self) -> Dict[str, object]:
        """Snapshot for logging and debugging."""
        return {
            "mode": self.state.mode.value,
            "stage": type(self.state.stage).__name__,
            "component": self.selected_component_id,
            "path": list(self.state.path_ids),
            "search": self.state.search_term,
            "candidates": len(self.candidates),
            "error": self.error,
        }


def _message(exc: Exception, fallback: str) -> str:
    text = getattr(exc, "message", None) or str(exc)
    return text or fallback
