"""
REST collaborator for the signature backend.

Wire models, search filter builders and the httpx client.
"""

from .exceptions import ApiError, ApiNetworkError, ValidationError
from .models import (
    IndexType,
    SearchCondition,
    SearchQueryElement,
    SearchRequest,
    SearchResponse,
    SignatureComponent,
    SignatureElement,
    CreateElementInput,
)
from .client import ApiSession, SignatureApiClient

__all__ = [
    "ApiError",
    "ApiNetworkError",
    "ValidationError",
    "IndexType",
    "SearchCondition",
    "SearchQueryElement",
    "SearchRequest",
    "SearchResponse",
    "SignatureComponent",
    "SignatureElement",
    "CreateElementInput",
    "ApiSession",
    "SignatureApiClient",
]
