"""
signature-browser: signature path selection for archive classification.

Builds, validates and renders ordered paths of signature elements against
the archive backend's generic search API.

Architecture:
- Tier 1 (Core): Qt timers/threads plus pure helpers (sorting, index labels)
- Tier 2 (Protocols): Configuration and API collaborator contracts
- Tier 3 (API): httpx client and wire models for the REST backend
- Tier 4 (Services): Framework-agnostic path builder, resolver and collections
- Tier 5 (Widgets): Thin PyQt6 rendering adapters over the services

Key Features:
- Explicit state machine for hierarchical and free path building
- Stale-response discard via per-kind request sequencing
- Partial-failure tolerant path resolution
- All-or-nothing pre-seeding of an existing path
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
