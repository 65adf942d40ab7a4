"""Trailing debounce carrying the last value seen."""

from typing import Any, Callable, Optional
from PyQt6.QtCore import QTimer

from signature_browser.protocols.browser_config import get_browser_config

_UNSET = object()


class DebounceTimer:
    """
    Trailing debounce: the handler receives only the most recently settled value.

    Every trigger() restarts the delay and replaces the pending value, so a
    burst of keystrokes produces one call once input has been quiet for
    delay_ms.

    Usage:
        self._search_debounce = DebounceTimer(handler=self._apply_search)
        self.search_input.textChanged.connect(self._search_debounce.trigger)
    """

    def __init__(self, handler: Callable[[Any], None], delay_ms: Optional[int] = None):
        self._handler = handler
        self._value: Any = _UNSET
        self._timer = QTimer()
        self._timer.setSingleShot(True)
        self._timer.setInterval(delay_ms if delay_ms is not None else get_browser_config().debounce_ms)
        self._timer.timeout.connect(self._fire)

    @property
    def delay_ms(self) -> int:
        return self._timer.interval()

    @property
    def pending(self) -> bool:
        return self._value is not _UNSET

    def trigger(self, value: Any = None):
        """Replace the pending value and restart the delay."""
        self._value = value
        self._timer.start()

    def cancel(self):
        """Drop the pending value without calling the handler."""
        self._timer.stop()
        self._value = _UNSET

    def force(self):
        """Deliver the pending value now, if there is one."""
        self._timer.stop()
        self._fire()

    def _fire(self):
        if self._value is _UNSET:
            return
        value, self._value = self._value, _UNSET
        self._handler(value)
