"""
PyQt6 rendering adapters.

Each widget renders service state and forwards user input; none of them
hold path-building rules of their own.
"""

from .element_browser import ElementBrowserWidget, ElementBrowserDialog, CreateElementDialog
from .signature_path_selector import SignaturePathSelector
from .single_path_picker import SingleSignaturePathPicker

__all__ = [
    "ElementBrowserWidget",
    "ElementBrowserDialog",
    "CreateElementDialog",
    "SignaturePathSelector",
    "SingleSignaturePathPicker",
]
