"""Form widget holding at most one signature path."""

import logging
from functools import partial
from typing import List, Optional, Sequence

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget

from signature_browser.core.background_task import BackgroundTaskManager
from signature_browser.core.request_sequencer import RequestSequencer
from signature_browser.protocols.signature_api import SignatureApiProtocol
from signature_browser.services.path_collection import SinglePathSelection
from signature_browser.services.path_resolver import PathResolver, ResolvedPath
from signature_browser.widgets.element_browser import ElementBrowserDialog

logger = logging.getLogger(__name__)

RESOLVE = "resolve"
PLACEHOLDER_TEXT = "Select a signature path..."


class SingleSignaturePathPicker(QWidget):
    """
    Picks one path; a new pick replaces the old one.

    The browser opens pre-seeded with the current path.

    Signals:
        path_changed(object): new ID path, or None after clear()
    """

    path_changed = pyqtSignal(object)

    def __init__(
        self,
        api: SignatureApiProtocol,
        path: Optional[Sequence[int]] = None,
        label: str = "Select Signature Path",
        resolver: Optional[PathResolver] = None,
        task_manager: Optional[BackgroundTaskManager] = None,
        parent=None,
    ):
        super().__init__(parent)
        self._api = api
        self._resolver = resolver or PathResolver(api)
        self._tasks = task_manager or BackgroundTaskManager()
        self._sequencer = RequestSequencer()
        self.selection = SinglePathSelection(path, on_change=self._on_selection_changed)
        self.resolved: Optional[ResolvedPath] = None
        self.loading = False
        self._dialog: Optional[ElementBrowserDialog] = None

        self._setup_ui(label)
        self.refresh()

    def _setup_ui(self, label: str):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self.title_label = QLabel(label)
        layout.addWidget(self.title_label)

        row = QHBoxLayout()
        self.path_button = QPushButton(PLACEHOLDER_TEXT)
        self.clear_button = QPushButton("x")
        self.clear_button.setToolTip("Clear signature path")
        row.addWidget(self.path_button, 1)
        row.addWidget(self.clear_button)
        layout.addLayout(row)

        self.path_button.clicked.connect(self.open_browser)
        self.clear_button.clicked.connect(self.clear)

    @property
    def path(self) -> Optional[List[int]]:
        return self.selection.path

    def set_path(self, path: Optional[Sequence[int]]):
        """Replace the path from the owning form without emitting path_changed."""
        self.selection.set_path(path)
        self.refresh()

    def select(self, path: Sequence[int]) -> bool:
        return self.selection.select(path)

    def clear(self) -> bool:
        return self.selection.clear()

    def _on_selection_changed(self, path: Optional[List[int]]):
        self.path_changed.emit(path)
        self.refresh()

    def refresh(self):
        seq = self._sequencer.issue(RESOLVE)
        path = self.selection.path
        if path is None:
            self.resolved = None
            self.loading = False
            self._render()
            return
        self.loading = True
        self._render()
        self._tasks.run(
            RESOLVE,
            target=self._resolver.resolve,
            args=(tuple(path),),
            on_success=partial(self._on_resolved, seq),
            on_error=partial(self._on_resolve_failed, seq),
        )

    def _on_resolved(self, seq: int, resolved: Optional[ResolvedPath]):
        if not self._sequencer.is_current(RESOLVE, seq):
            return
        self.resolved = resolved
        self.loading = False
        self._render()

    def _on_resolve_failed(self, seq: int, error: Exception):
        if not self._sequencer.is_current(RESOLVE, seq):
            return
        logger.error("Error resolving signature path: %s", error)
        path = self.selection.path or []
        self.resolved = ResolvedPath(
            tuple(path), f"[{self._resolver.error_marker}: {','.join(str(i) for i in path)}]"
        )
        self.loading = False
        self._render()

    def _render(self):
        if self.loading:
            self.path_button.setText("Loading path...")
        elif self.resolved is not None and self.resolved.display:
            self.path_button.setText(self.resolved.display)
        else:
            self.path_button.setText(PLACEHOLDER_TEXT)
        self.clear_button.setVisible(self.selection.path is not None)

    def open_browser(self) -> ElementBrowserDialog:
        self._dialog = ElementBrowserDialog(
            self._api,
            initial_path=self.selection.initial_path,
            task_manager=BackgroundTaskManager(inline=self._tasks.inline),
            parent=self,
        )
        self._dialog.browser.signature_selected.connect(self.select)
        self._dialog.open()
        return self._dialog

    def closeEvent(self, event):
        self._tasks.cleanup()
        super().closeEvent(event)
