"""Form widget editing a set of signature paths."""

import logging
from functools import partial
from typing import List, Optional, Sequence

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget

from signature_browser.core.background_task import BackgroundTaskManager
from signature_browser.core.request_sequencer import RequestSequencer
from signature_browser.protocols.signature_api import SignatureApiProtocol
from signature_browser.services.path_collection import PathCollection
from signature_browser.services.path_resolver import PathResolver, ResolvedPath
from signature_browser.widgets.element_browser import ElementBrowserDialog

logger = logging.getLogger(__name__)

RESOLVE = "resolve"


class SignaturePathSelector(QWidget):
    """
    Shows the resolved paths of a PathCollection with per-row removal.

    Signals:
        paths_changed(list): full list of ID paths after an add or remove
    """

    paths_changed = pyqtSignal(list)

    def __init__(
        self,
        api: SignatureApiProtocol,
        label: str = "Signatures",
        paths: Sequence[Sequence[int]] = (),
        resolver: Optional[PathResolver] = None,
        task_manager: Optional[BackgroundTaskManager] = None,
        parent=None,
    ):
        super().__init__(parent)
        self._api = api
        self._resolver = resolver or PathResolver(api)
        self._tasks = task_manager or BackgroundTaskManager()
        self._sequencer = RequestSequencer()
        self.collection = PathCollection(paths, on_change=self._on_collection_changed)
        self.resolved: List[ResolvedPath] = []
        self.loading = False
        self._dialog: Optional[ElementBrowserDialog] = None

        self._setup_ui()
        self.set_label(label)
        self.refresh()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)

        header = QHBoxLayout()
        self.title_label = QLabel()
        self.add_button = QPushButton("Add Signature Path")
        header.addWidget(self.title_label, 1)
        header.addWidget(self.add_button)
        layout.addLayout(header)

        self.rows_container = QWidget()
        self.rows_layout = QVBoxLayout(self.rows_container)
        self.rows_layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.rows_container)

        self.add_button.clicked.connect(self.open_browser)

    def set_label(self, label: str):
        self.title_label.setText(label)

    @property
    def paths(self) -> List[List[int]]:
        return self.collection.paths

    def set_paths(self, paths: Sequence[Sequence[int]]):
        """Replace the paths from the owning form without emitting paths_changed."""
        self.collection.set_paths(paths)
        self.refresh()

    def add_path(self, path: Sequence[int]) -> bool:
        return self.collection.add_path(path)

    def remove_path(self, path: Sequence[int]) -> bool:
        return self.collection.remove_path(path)

    def _on_collection_changed(self, paths: List[List[int]]):
        self.paths_changed.emit(paths)
        self.refresh()

    # --- Resolution -------------------------------------------------------

    def refresh(self):
        seq = self._sequencer.issue(RESOLVE)
        paths = self.collection.paths
        self.loading = True
        self._render()
        self._tasks.run(
            RESOLVE,
            target=self._resolver.resolve_many,
            args=(paths,),
            on_success=partial(self._on_resolved, seq),
            on_error=partial(self._on_resolve_failed, seq),
        )

    def _on_resolved(self, seq: int, resolved: List[ResolvedPath]):
        if not self._sequencer.is_current(RESOLVE, seq):
            return
        self.resolved = resolved
        self.loading = False
        self._render()

    def _on_resolve_failed(self, seq: int, error: Exception):
        if not self._sequencer.is_current(RESOLVE, seq):
            return
        logger.error("Error resolving signatures: %s", error)
        marker = self._resolver.error_marker
        self.resolved = [
            ResolvedPath(tuple(p), f"[{' / '.join(str(i) for i in p)}] ({marker})")
            for p in self.collection.paths
        ]
        self.loading = False
        self._render()

    # --- Rendering --------------------------------------------------------

    def _clear_rows(self):
        while self.rows_layout.count():
            item = self.rows_layout.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()

    def _render(self):
        self._clear_rows()
        if self.loading:
            self.rows_layout.addWidget(QLabel("Loading..."))
            return
        if not self.resolved:
            self.rows_layout.addWidget(QLabel("No signatures added."))
            return
        for resolved in self.resolved:
            row = QWidget()
            row_layout = QHBoxLayout(row)
            row_layout.setContentsMargins(0, 0, 0, 0)
            text = QLabel(resolved.display or "Empty Signature")
            text.setWordWrap(True)
            remove = QPushButton("x")
            remove.setToolTip(f"Remove {resolved.display}")
            remove.clicked.connect(lambda _checked=False, p=resolved.id_path: self.remove_path(p))
            row_layout.addWidget(text, 1)
            row_layout.addWidget(remove)
            self.rows_layout.addWidget(row)

    # --- Browser ----------------------------------------------------------

    def open_browser(self) -> ElementBrowserDialog:
        self._dialog = ElementBrowserDialog(
            self._api, task_manager=BackgroundTaskManager(inline=self._tasks.inline), parent=self
        )
        self._dialog.browser.signature_selected.connect(self.add_path)
        self._dialog.open()
        return self._dialog

    def closeEvent(self, event):
        self._tasks.cleanup()
        super().closeEvent(event)
