"""Background execution of blocking API calls with cleanup."""

import logging
from typing import Callable, Any, Dict, Optional, Tuple
from PyQt6.QtCore import QThread, pyqtSignal

logger = logging.getLogger(__name__)

# --- Module-level constants ---
CLEANUP_WAIT_MS = 200     # Wait time per task during widget close cleanup


class BackgroundTask(QThread):
    """
    Runs one blocking call off the UI thread.

    Usage:
        task = BackgroundTask(target=client.search_elements, args=(request,))
        task.result_ready.connect(on_success)
        task.error_occurred.connect(on_error)  # Receives Exception, not str
        task.start()

        # Later:
        task.cancel()  # Signals won't emit after this

    Results are delivered to slots on the UI thread via queued signals, so
    the state they touch has a single writer.
    """

    result_ready = pyqtSignal(object)
    error_occurred = pyqtSignal(Exception)  # Full exception, caller decides

    def __init__(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        kwargs: dict = None,
        parent=None
    ):
        super().__init__(parent)
        self._target = target
        self._args = args
        self._kwargs = kwargs or {}
        self.cancelled = False

    def run(self):
        """Execute target in background, respecting cancellation."""
        try:
            result = self._target(*self._args, **self._kwargs)
            if not self.cancelled:
                self.result_ready.emit(result)
        except Exception as e:
            if not self.cancelled:
                self.error_occurred.emit(e)  # Full exception object

    def cancel(self):
        """Cancel task; signals won't emit after this."""
        self.cancelled = True


class BackgroundTaskManager:
    """
    Manages background task lifecycle for a widget, one slot per task kind.

    Handles:
    - Superseding the previous task of the same kind (its results are dropped)
    - Cleanup on widget close
    - Inline execution for headless use and tests

    Independent kinds (components, candidates, resolution) run side by side;
    a newer task of one kind never blocks on the older one.

    Usage in widget:
        self._tasks = BackgroundTaskManager()

        def refresh(self):
            self._tasks.run(
                "candidates",
                target=self.controller.fetch_candidates,
                args=(ticket,),
                on_success=self._on_candidates,
                on_error=self._on_candidates_failed,
            )

        def closeEvent(self, event):
            self._tasks.cleanup()
            super().closeEvent(event)
    """

    def __init__(self, inline: bool = False):
        self._inline = inline
        self._tasks: Dict[str, BackgroundTask] = {}
        self._retired: list = []

    @property
    def inline(self) -> bool:
        return self._inline

    def is_running(self, kind: str) -> bool:
        task = self._tasks.get(kind)
        return task is not None and task.isRunning()

    def run(
        self,
        kind: str,
        target: Callable[..., Any],
        args: Tuple = (),
        kwargs: dict = None,
        on_success: Callable[[Any], None] = None,
        on_error: Callable[[Exception], None] = None,
    ) -> Optional[BackgroundTask]:
        """
        Run a task of the given kind, superseding any previous one of that kind.

        Args:
            kind: Slot name; at most one live task per kind delivers results
            target: Blocking function to execute
            args: Positional arguments for target
            kwargs: Keyword arguments for target
            on_success: Callback for successful result
            on_error: Callback for error (receives Exception, not str)

        Returns:
            BackgroundTask if started on a thread, None when run inline
        """
        if self._inline:
            try:
                result = target(*args, **(kwargs or {}))
            except Exception as e:
                if on_error:
                    on_error(e)
                else:
                    logger.exception("Background task %s failed", kind)
                return None
            if on_success:
                on_success(result)
            return None

        previous = self._tasks.get(kind)
        if previous is not None and previous.isRunning():
            previous.cancel()
            # Keep a reference until the thread finishes
            self._retired.append(previous)
            previous.finished.connect(lambda p=previous: self._release(p))

        task = BackgroundTask(target=target, args=args, kwargs=kwargs)
        if on_success:
            task.result_ready.connect(on_success)
        if on_error:
            task.error_occurred.connect(on_error)

        self._tasks[kind] = task
        task.start()
        return task

    def _release(self, task: BackgroundTask):
        if task in self._retired:
            self._retired.remove(task)

    def cleanup(self):
        """Cancel and wait for all tasks. Call from closeEvent."""
        for task in list(self._tasks.values()) + self._retired:
            if task.isRunning():
                task.cancel()
                task.wait(CLEANUP_WAIT_MS)
        self._tasks.clear()
        self._retired.clear()
