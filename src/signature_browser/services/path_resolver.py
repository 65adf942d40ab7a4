"""
Turns stored ID paths into display strings.

Each ID is looked up independently; a failed lookup becomes a placeholder
segment instead of failing the path.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from signature_browser.api.exceptions import ApiError
from signature_browser.api.models import SignatureElement
from signature_browser.core.sort_utils import sort_resolved
from signature_browser.protocols.browser_config import get_browser_config
from signature_browser.protocols.signature_api import SignatureApiProtocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedPath:
    id_path: Tuple[int, ...]
    display: str


class PathResolver:
    """
    Resolves element-ID paths into ``[index] name / ...`` strings.

    Lookups within one call run concurrently on a small thread pool and are
    memoized for that call only, so an ID shared by several paths is
    fetched once.
    """

    def __init__(
        self,
        api: SignatureApiProtocol,
        error_marker: Optional[str] = None,
        separator: Optional[str] = None,
        max_workers: Optional[int] = None,
    ):
        config = get_browser_config()
        self._api = api
        self.error_marker = error_marker if error_marker is not None else config.error_marker
        self.separator = separator if separator is not None else config.path_separator
        self._max_workers = max_workers or config.resolver_workers

    def placeholder(self, element_id: int) -> str:
        return f"[{self.error_marker} ID: {element_id}]"

    def _lookup(self, element_id: int) -> Union[SignatureElement, ApiError]:
        try:
            return self._api.get_element_by_id(element_id)
        except ApiError as exc:
            logger.warning("Could not resolve element %s: %s", element_id, exc)
            return exc

    def _lookup_all(self, ids: Iterable[int]) -> Dict[int, Union[SignatureElement, ApiError]]:
        unique = list(dict.fromkeys(ids))
        if not unique:
            return {}
        if len(unique) == 1:
            return {unique[0]: self._lookup(unique[0])}
        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(unique))) as pool:
            return dict(zip(unique, pool.map(self._lookup, unique)))

    def _render(self, id_path: Sequence[int], lookups: Dict[int, Union[SignatureElement, ApiError]]) -> ResolvedPath:
        segments = []
        for element_id in id_path:
            found = lookups.get(element_id)
            if isinstance(found, SignatureElement):
                segments.append(found.display_label)
            else:
                segments.append(self.placeholder(element_id))
        return ResolvedPath(tuple(id_path), self.separator.join(segments))

    def resolve(self, id_path: Sequence[int]) -> ResolvedPath:
        """Resolve one path; an empty path yields an empty display."""
        if not id_path:
            return ResolvedPath((), "")
        return self._render(id_path, self._lookup_all(id_path))

    def resolve_many(self, paths: Iterable[Sequence[int]]) -> List[ResolvedPath]:
        """Resolve several paths, sorted by display string; empty paths are skipped."""
        paths = [tuple(p) for p in paths if p]
        lookups = self._lookup_all(element_id for path in paths for element_id in path)
        return sort_resolved(self._render(path, lookups) for path in paths)
