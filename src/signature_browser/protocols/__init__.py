"""
Configuration and collaborator contracts.

Applications set a BrowserConfig once at startup and hand an object
satisfying SignatureApiProtocol to the services explicitly.
"""

from .browser_config import BrowserConfig, set_browser_config, get_browser_config
from .signature_api import SignatureApiProtocol

__all__ = [
    "BrowserConfig",
    "set_browser_config",
    "get_browser_config",
    "SignatureApiProtocol",
]
