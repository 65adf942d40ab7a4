"""Collections of signature paths owned by an embedding form."""

import logging
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from signature_browser.services.path_resolver import PathResolver, ResolvedPath

logger = logging.getLogger(__name__)

Path = Tuple[int, ...]


class PathCollection:
    """
    A set of distinct paths; equality is structural and order-sensitive.

    Paths are never edited in place: removal plus re-adding is the only edit.
    ``on_change`` receives the full list after every effective change.
    """

    def __init__(self, paths: Iterable[Sequence[int]] = (),
                 on_change: Optional[Callable[[List[List[int]]], None]] = None):
        self._paths: List[Path] = []
        for path in paths:
            key = tuple(path)
            if key not in self._paths:
                self._paths.append(key)
        self._on_change = on_change

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, path: Sequence[int]) -> bool:
        return tuple(path) in self._paths

    @property
    def paths(self) -> List[List[int]]:
        return [list(p) for p in self._paths]

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self.paths)

    def add_path(self, path: Sequence[int]) -> bool:
        key = tuple(path)
        if not key or key in self._paths:
            return False
        self._paths.append(key)
        logger.debug("Added signature path %s", list(key))
        self._changed()
        return True

    def remove_path(self, path: Sequence[int]) -> bool:
        key = tuple(path)
        if key not in self._paths:
            return False
        self._paths.remove(key)
        logger.debug("Removed signature path %s", list(key))
        self._changed()
        return True

    def set_paths(self, paths: Iterable[Sequence[int]]) -> None:
        """Replace the contents without notifying (used when the owner pushes new data)."""
        self._paths = []
        for path in paths:
            key = tuple(path)
            if key and key not in self._paths:
                self._paths.append(key)

    def resolved(self, resolver: PathResolver) -> List[ResolvedPath]:
        return resolver.resolve_many(self._paths)


class SinglePathSelection:
    """Zero-or-one path; a new selection replaces the old one."""

    def __init__(self, path: Optional[Sequence[int]] = None,
                 on_change: Optional[Callable[[Optional[List[int]]], None]] = None):
        self._path: Optional[Path] = tuple(path) if path else None
        self._on_change = on_change

    @property
    def path(self) -> Optional[List[int]]:
        return list(self._path) if self._path is not None else None

    @property
    def initial_path(self) -> List[int]:
        """IDs to pre-seed the builder with when it is opened."""
        return list(self._path) if self._path is not None else []

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self.path)

    def select(self, path: Sequence[int]) -> bool:
        key = tuple(path)
        if not key:
            return False
        if key == self._path:
            return False
        self._path = key
        self._changed()
        return True

    def clear(self) -> bool:
        if self._path is None:
            return False
        self._path = None
        self._changed()
        return True

    def set_path(self, path: Optional[Sequence[int]]) -> None:
        self._path = tuple(path) if path else None

    def resolved(self, resolver: PathResolver) -> Optional[ResolvedPath]:
        if self._path is None:
            return None
        return resolver.resolve(self._path)
