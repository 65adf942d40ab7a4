"""
Element browser widget for building one signature path.

Thin PyQt6 adapter over ElementBrowserController: user input becomes
controller calls, blocking API calls run through BackgroundTaskManager, and
every controller change re-renders the widget from controller state.
"""

import logging
from functools import partial
from typing import List, Optional, Sequence

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QButtonGroup, QComboBox, QDialog, QDialogButtonBox, QFormLayout, QHBoxLayout,
    QLabel, QLineEdit, QListWidget, QListWidgetItem, QPushButton, QRadioButton,
    QVBoxLayout, QWidget,
)

from signature_browser.api.models import CreateElementInput, SearchResponse, SignatureElement
from signature_browser.core.background_task import BackgroundTaskManager
from signature_browser.core.debounce_timer import DebounceTimer
from signature_browser.core.index_format import next_index_preview
from signature_browser.protocols.signature_api import SignatureApiProtocol
from signature_browser.services.browser_controller import ElementBrowserController, FetchTicket
from signature_browser.services.path_builder import BrowserMode, next_step_prompt

logger = logging.getLogger(__name__)

MODE_DESCRIPTIONS = {
    BrowserMode.HIERARCHICAL: "Select elements based on parent-child relationships.",
    BrowserMode.FREE: "Select elements from any component.",
}


class CreateElementDialog(QDialog):
    """Collects name, optional index and description for a new element."""

    def __init__(self, component_name: str, index_placeholder: str = "", parent=None):
        super().__init__(parent)
        self.setWindowTitle(f'Create New Element in "{component_name}"')

        layout = QFormLayout(self)
        self.name_input = QLineEdit()
        self.index_input = QLineEdit()
        if index_placeholder:
            self.index_input.setPlaceholderText(f"Auto: {index_placeholder}")
        self.description_input = QLineEdit()
        layout.addRow("Name", self.name_input)
        layout.addRow("Index", self.index_input)
        layout.addRow("Description", self.description_input)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addRow(buttons)

    def values(self):
        return (
            self.name_input.text().strip(),
            self.description_input.text().strip() or None,
            self.index_input.text().strip() or None,
        )


class ElementBrowserWidget(QWidget):
    """
    Builds one signature path, hierarchically or by free selection.

    Signals:
        signature_selected(list): confirmed path of element IDs
        close_requested(): user cancelled
    """

    signature_selected = pyqtSignal(list)
    close_requested = pyqtSignal()

    def __init__(
        self,
        api: SignatureApiProtocol,
        initial_path: Optional[Sequence[int]] = None,
        mode: BrowserMode = BrowserMode.HIERARCHICAL,
        task_manager: Optional[BackgroundTaskManager] = None,
        parent=None,
    ):
        super().__init__(parent)
        self.controller = ElementBrowserController(
            api, on_select_signature=self._emit_signature, mode=mode
        )
        self._tasks = task_manager or BackgroundTaskManager()
        self._search_debounce = DebounceTimer(handler=self._apply_search)

        self._setup_ui()
        self._setup_connections()
        self.controller.add_listener(self._render)

        self.load_components()
        if initial_path:
            self.preseed(initial_path)
        self._render()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(6)

        # Mode selector
        mode_row = QHBoxLayout()
        self.mode_group = QButtonGroup(self)
        self.hierarchical_radio = QRadioButton("Hierarchical")
        self.free_radio = QRadioButton("Free")
        self.mode_group.addButton(self.hierarchical_radio)
        self.mode_group.addButton(self.free_radio)
        mode_row.addWidget(QLabel("Selection Mode"))
        mode_row.addWidget(self.hierarchical_radio)
        mode_row.addWidget(self.free_radio)
        layout.addLayout(mode_row)
        self.mode_description = QLabel()
        layout.addWidget(self.mode_description)

        # Current path
        self.path_label = QLabel()
        self.path_label.setWordWrap(True)
        layout.addWidget(self.path_label)
        self.warning_label = QLabel()
        self.warning_label.setWordWrap(True)
        layout.addWidget(self.warning_label)

        # Component selector
        component_row = QHBoxLayout()
        self.component_combo = QComboBox()
        self.retry_components_button = QPushButton("Retry")
        component_row.addWidget(self.component_combo, 1)
        component_row.addWidget(self.retry_components_button)
        layout.addLayout(component_row)
        self.components_error_label = QLabel()
        layout.addWidget(self.components_error_label)

        # Element search and candidates
        self.candidates_heading = QLabel()
        layout.addWidget(self.candidates_heading)
        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search available elements...")
        layout.addWidget(self.search_input)
        self.candidate_list = QListWidget()
        layout.addWidget(self.candidate_list, 1)
        self.status_label = QLabel()
        self.status_label.setWordWrap(True)
        layout.addWidget(self.status_label)
        self.create_button = QPushButton()
        layout.addWidget(self.create_button)

        # Actions
        actions = QHBoxLayout()
        self.remove_last_button = QPushButton("Remove Last")
        self.cancel_button = QPushButton("Cancel")
        self.confirm_button = QPushButton("Add This Signature")
        actions.addWidget(self.remove_last_button)
        actions.addWidget(self.cancel_button)
        actions.addStretch()
        actions.addWidget(self.confirm_button)
        layout.addLayout(actions)

    def _setup_connections(self):
        self.hierarchical_radio.toggled.connect(self._on_mode_toggled)
        self.component_combo.currentIndexChanged.connect(self._on_component_changed)
        self.retry_components_button.clicked.connect(self.load_components)
        self.search_input.textChanged.connect(self._search_debounce.trigger)
        self.candidate_list.itemClicked.connect(self._on_candidate_clicked)
        self.create_button.clicked.connect(self._on_create_clicked)
        self.remove_last_button.clicked.connect(self._on_remove_last)
        self.cancel_button.clicked.connect(self.close_requested)
        self.confirm_button.clicked.connect(self.controller.confirm)

    # --- Fetching -----------------------------------------------------------

    def load_components(self):
        ticket = self.controller.begin_component_fetch()
        self._tasks.run(
            "components",
            target=self.controller.fetch_components,
            args=(ticket,),
            on_success=partial(self._on_components_ready, ticket),
            on_error=partial(self._on_components_failed, ticket),
        )

    def _on_components_ready(self, ticket: FetchTicket, components):
        self.controller.apply_components(ticket, components)

    def _on_components_failed(self, ticket: FetchTicket, error: Exception):
        self.controller.fail_components(ticket, error)

    def refresh_candidates(self):
        ticket = self.controller.begin_candidate_fetch()
        if ticket is not None:
            self._run_candidate_fetch(ticket)

    def _run_candidate_fetch(self, ticket: FetchTicket):
        self._tasks.run(
            "candidates",
            target=self.controller.fetch_candidates,
            args=(ticket,),
            on_success=partial(self._on_candidates_ready, ticket),
            on_error=partial(self._on_candidates_failed, ticket),
        )

    def _on_candidates_ready(self, ticket: FetchTicket, response: SearchResponse):
        self.controller.apply_candidates(ticket, response)

    def _on_candidates_failed(self, ticket: FetchTicket, error: Exception):
        self.controller.fail_candidates(ticket, error)

    def preseed(self, ids: Sequence[int]):
        ticket = self.controller.begin_preseed()
        self._tasks.run(
            "preseed",
            target=self.controller.resolve_initial_path,
            args=(list(ids),),
            on_success=partial(self._on_preseed_ready, ticket),
            on_error=partial(self._on_preseed_failed, ticket),
        )

    def _on_preseed_ready(self, ticket: FetchTicket, elements: List[SignatureElement]):
        if self.controller.apply_preseed(ticket, elements):
            self.refresh_candidates()

    def _on_preseed_failed(self, ticket: FetchTicket, error: Exception):
        self.controller.fail_preseed(ticket, error)

    # --- User input -------------------------------------------------------

    def _on_mode_toggled(self, checked: bool):
        mode = BrowserMode.HIERARCHICAL if checked else BrowserMode.FREE
        if mode is self.controller.mode:
            return
        self._clear_search_input()
        self.controller.select_mode(mode)

    def _on_component_changed(self, index: int):
        component_id = self.component_combo.itemData(index)
        if self.controller.select_component(component_id):
            self.refresh_candidates()

    def _apply_search(self, term: str):
        if self.controller.search(term):
            self.refresh_candidates()

    def _on_candidate_clicked(self, item: QListWidgetItem):
        element_id = item.data(Qt.ItemDataRole.UserRole)
        element = next(
            (e for e in self.controller.visible_candidates if e.signature_element_id == element_id),
            None,
        )
        if element is None:
            return
        self._clear_search_input()
        if self.controller.select_element(element):
            self.refresh_candidates()

    def _on_remove_last(self):
        if self.controller.remove_last():
            self.refresh_candidates()

    def _emit_signature(self, path: List[int]):
        self._clear_search_input()
        self.signature_selected.emit(path)

    def _clear_search_input(self):
        self._search_debounce.cancel()
        self.search_input.blockSignals(True)
        self.search_input.clear()
        self.search_input.blockSignals(False)

    def _on_create_clicked(self):
        component = self.controller.selected_component
        if component is None or not self.controller.can_create_element:
            return
        dialog = CreateElementDialog(component.name, next_index_preview(component), parent=self)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return
        self.create_element(*dialog.values())

    def create_element(self, name: str, description: Optional[str] = None, index: Optional[str] = None):
        payload = self.controller.build_create_input(name, description, index)
        if payload is None:
            return
        self.controller.creating_element = True
        self._tasks.run(
            "create",
            target=self.controller.create_element,
            args=(payload,),
            on_success=self._on_element_created,
            on_error=self._on_element_creation_failed,
        )

    def _on_element_created(self, element: SignatureElement):
        ticket = self.controller.element_created(element)
        if ticket is not None:
            self._run_candidate_fetch(ticket)

    def _on_element_creation_failed(self, error: Exception):
        self.controller.element_creation_failed(error)

    # --- Rendering --------------------------------------------------------

    def _render(self):
        controller = self.controller
        state = controller.state
        hierarchical = state.mode is BrowserMode.HIERARCHICAL

        for radio, checked in ((self.hierarchical_radio, hierarchical), (self.free_radio, not hierarchical)):
            radio.blockSignals(True)
            radio.setChecked(checked)
            radio.blockSignals(False)
        self.mode_description.setText(MODE_DESCRIPTIONS[state.mode])

        if state.path:
            labels = " / ".join(e.display_label for e in state.path)
            self.path_label.setText(f"Current Signature: {labels}")
        else:
            self.path_label.setText("Current Signature: Build signature below...")
        self.warning_label.setText(controller.warning or "")
        self.warning_label.setVisible(bool(controller.warning))

        self._render_components(hierarchical)
        self._render_candidates(hierarchical)

        self.remove_last_button.setEnabled(bool(state.path))
        self.confirm_button.setEnabled(controller.can_confirm)

    def _render_components(self, hierarchical: bool):
        controller = self.controller
        state = controller.state
        self.component_combo.blockSignals(True)
        self.component_combo.clear()
        if controller.loading_components:
            self.component_combo.addItem("Loading...", None)
        else:
            self.component_combo.addItem(next_step_prompt(state), None)
            for component in controller.components:
                self.component_combo.addItem(component.name, component.signature_component_id)
        selected = controller.selected_component_id
        index = self.component_combo.findData(selected) if selected is not None else 0
        self.component_combo.setCurrentIndex(max(index, 0))
        self.component_combo.blockSignals(False)

        self.component_combo.setVisible(not state.path or not hierarchical)
        self.component_combo.setEnabled(
            controller.components_available and not (hierarchical and state.path)
        )
        self.components_error_label.setText(controller.components_error or "")
        self.components_error_label.setVisible(controller.components_error is not None)
        self.retry_components_button.setVisible(controller.components_error is not None)

    def _render_candidates(self, hierarchical: bool):
        controller = self.controller
        state = controller.state
        component = controller.selected_component
        last = state.last_element

        if hierarchical:
            heading = (f'Select Child of "{last.name}"' if last is not None
                       else f'Select Element in "{component.name if component else "..."}"')
        else:
            heading = (f'Select Element from "{component.name}"' if component is not None
                       else "Search Elements by Name")
        visible = controller.visible_candidates
        if visible:
            suffix = "+" if controller.truncated else ""
            heading = f"{heading} ({len(visible)}{suffix})"
        self.candidates_heading.setText(heading)

        self.candidate_list.clear()
        for element in visible:
            item = QListWidgetItem(f"{element.index or '-'}  {element.name}")
            item.setData(Qt.ItemDataRole.UserRole, element.signature_element_id)
            self.candidate_list.addItem(item)

        if controller.loading_candidates or controller.preseeding:
            status = "Loading..."
        elif controller.error:
            status = controller.error
        elif controller.current_query() is not None and not visible:
            status = "No matching elements found."
        elif controller.truncated:
            status = "More elements may exist. Refine your search."
        else:
            status = ""
        self.status_label.setText(status)

        self.create_button.setVisible(controller.can_create_element)
        self.create_button.setEnabled(not controller.creating_element)
        if component is not None:
            self.create_button.setText(f'Create New Element in "{component.name}"...')

    # --- Lifecycle --------------------------------------------------------

    def shutdown(self):
        """Stop timers and discard in-flight responses."""
        self._search_debounce.cancel()
        self.controller.close()
        self._tasks.cleanup()

    def closeEvent(self, event):
        self.shutdown()
        super().closeEvent(event)


class ElementBrowserDialog(QDialog):
    """Modal wrapper returning one confirmed path."""

    def __init__(
        self,
        api: SignatureApiProtocol,
        initial_path: Optional[Sequence[int]] = None,
        task_manager: Optional[BackgroundTaskManager] = None,
        parent=None,
    ):
        super().__init__(parent)
        self.setWindowTitle("Select Signature Path")
        self.selected_path: Optional[List[int]] = None

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self.browser = ElementBrowserWidget(
            api, initial_path=initial_path, task_manager=task_manager, parent=self
        )
        layout.addWidget(self.browser)

        self.browser.signature_selected.connect(self._on_signature_selected)
        self.browser.close_requested.connect(self.reject)
        self.finished.connect(lambda _result: self.browser.shutdown())

    def _on_signature_selected(self, path: list):
        self.selected_path = list(path)
        self.accept()

    @classmethod
    def get_signature(cls, api: SignatureApiProtocol, initial_path: Optional[Sequence[int]] = None,
                      parent=None) -> Optional[List[int]]:
        """Show the dialog modally and return the confirmed path, or None if cancelled."""
        dialog = cls(api, initial_path=initial_path, parent=parent)
        if dialog.exec() == QDialog.DialogCode.Accepted:
            return dialog.selected_path
        return None
