"""
Core utilities.

Qt timing/threading helpers plus pure helpers with no domain state:
sorting, index labels and request sequencing.
"""

from .debounce_timer import DebounceTimer
from .background_task import BackgroundTask, BackgroundTaskManager
from .request_sequencer import RequestSequencer
from .sort_utils import compare_elements, make_collator, sort_elements, sort_components, sort_resolved
from .index_format import format_index, next_index_preview
from .log_utils import configure_logging, get_current_log_file_path

__all__ = [
    "DebounceTimer",
    "BackgroundTask",
    "BackgroundTaskManager",
    "RequestSequencer",
    "compare_elements",
    "make_collator",
    "sort_elements",
    "sort_components",
    "sort_resolved",
    "format_index",
    "next_index_preview",
    "configure_logging",
    "get_current_log_file_path",
]
