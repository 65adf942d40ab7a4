"""Base configuration for the signature browser.

Provides hooks for applications to tune timings, limits and display text.
"""

from typing import Optional
from dataclasses import dataclass


@dataclass
class BrowserConfig:
    """Configuration shared by the API client, services and widgets.

    Attributes:
        base_url: Backend root, e.g. ``https://archive.local``
        request_timeout: Per-request timeout in seconds
        debounce_ms: Settle time for the element search box
        max_search_results: Page size for candidate searches
        error_marker: Token used in placeholders for unresolved IDs
        path_separator: Separator between resolved path segments
        resolver_workers: Thread pool size for concurrent ID lookups
        log_dir: Directory for log files (None disables file logging)
        log_prefix: File name prefix for log files
        collation_locale: Locale name for sorting display strings (None uses the system locale)
    """

    base_url: str = "http://localhost:3000"
    request_timeout: float = 10.0
    debounce_ms: int = 300
    max_search_results: int = 200
    error_marker: str = "Error"
    path_separator: str = " / "
    resolver_workers: int = 4
    log_dir: Optional[str] = None
    log_prefix: str = "signature_browser_"
    collation_locale: Optional[str] = None


# Global config instance (set by application)
_browser_config: Optional[BrowserConfig] = None


def set_browser_config(config: BrowserConfig) -> None:
    """Set the global browser configuration.

    Args:
        config: BrowserConfig instance
    """
    global _browser_config
    _browser_config = config


def get_browser_config() -> BrowserConfig:
    """Get the current browser configuration.

    Returns:
        Current BrowserConfig or default if not set
    """
    if _browser_config is None:
        return BrowserConfig()
    return _browser_config
