"""
Service layer for signature path selection.

Framework-agnostic state machine, controller, resolver and path
collections. Nothing here imports a widget.
"""

from .path_builder import (
    BrowserMode,
    BuilderState,
    Idle,
    ComponentSelected,
    PathBuilding,
    Confirmed,
    transition,
    candidate_query,
    can_create_element,
)
from .browser_controller import ElementBrowserController, FetchTicket
from .path_resolver import PathResolver, ResolvedPath
from .path_collection import PathCollection, SinglePathSelection

__all__ = [
    "BrowserMode",
    "BuilderState",
    "Idle",
    "ComponentSelected",
    "PathBuilding",
    "Confirmed",
    "transition",
    "candidate_query",
    "can_create_element",
    "ElementBrowserController",
    "FetchTicket",
    "PathResolver",
    "ResolvedPath",
    "PathCollection",
    "SinglePathSelection",
]
