"""Sorting utilities."""

import functools
import math
from typing import Iterable, List, Optional, TYPE_CHECKING

from PyQt6.QtCore import QCollator, QLocale

from signature_browser.protocols.browser_config import get_browser_config

if TYPE_CHECKING:
    from signature_browser.api.models import SignatureComponent, SignatureElement
    from signature_browser.services.path_resolver import ResolvedPath


def _as_number(value: str) -> Optional[float]:
    """Parse a plain finite number; ``nan``, ``inf`` and ``1_000`` are treated as text."""
    if "_" in value:
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def make_collator(locale_name: Optional[str] = None) -> QCollator:
    """
    Collator for display strings.

    Uses ``locale_name``, else the configured collation locale, else the
    system locale. The C locale collates by code point, so it is replaced
    by English.
    """
    name = locale_name or get_browser_config().collation_locale
    locale = QLocale(name) if name else QLocale()
    if locale.language() == QLocale.Language.C:
        locale = QLocale(QLocale.Language.English)
    return QCollator(locale)


def locale_compare(a: str, b: str, collator: Optional[QCollator] = None) -> int:
    """Locale-aware three-way string comparison."""
    result = (collator or make_collator()).compare(a, b)
    return (result > 0) - (result < 0)


def _compare_values(a: str, b: str, collator: QCollator) -> int:
    num_a, num_b = _as_number(a), _as_number(b)
    if num_a is not None and num_b is not None:
        return (num_a > num_b) - (num_a < num_b)
    return locale_compare(a, b, collator)


def compare_elements(a: "SignatureElement", b: "SignatureElement",
                     collator: Optional[QCollator] = None) -> int:
    """Order by index (falling back to name); numerically when both parse as numbers."""
    return _compare_values(a.index or a.name or "", b.index or b.name or "",
                           collator or make_collator())


def sort_elements(elements: Iterable["SignatureElement"]) -> List["SignatureElement"]:
    collator = make_collator()
    return sorted(elements, key=functools.cmp_to_key(
        lambda a, b: compare_elements(a, b, collator)))


def sort_components(components: Iterable["SignatureComponent"]) -> List["SignatureComponent"]:
    collator = make_collator()
    return sorted(components, key=functools.cmp_to_key(
        lambda a, b: locale_compare(a.name, b.name, collator)))


def sort_resolved(paths: Iterable["ResolvedPath"]) -> List["ResolvedPath"]:
    """Order resolved paths by display string, independent of resolution order."""
    collator = make_collator()
    return sorted(paths, key=functools.cmp_to_key(
        lambda a, b: locale_compare(a.display, b.display, collator)))
