"""
httpx client for the signature REST backend.

Every failure surfaces as ApiError so callers have exactly one exception
type to catch at the fetch boundary.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, TypeVar

import httpx

from signature_browser.api.exceptions import ApiError, ApiNetworkError
from signature_browser.api.models import (
    CreateElementInput,
    SearchRequest,
    SearchResponse,
    SignatureComponent,
    SignatureElement,
)
from signature_browser.protocols.browser_config import get_browser_config

logger = logging.getLogger(__name__)

POPULATE_OPTIONS = ("component", "parents")

T = TypeVar("T")


@dataclass(frozen=True)
class ApiSession:
    """Backend location and credentials, passed explicitly to the client."""
    base_url: str
    token: Optional[str] = None
    timeout: Optional[float] = None

    @classmethod
    def from_config(cls, token: Optional[str] = None) -> "ApiSession":
        config = get_browser_config()
        return cls(base_url=config.base_url, token=token, timeout=config.request_timeout)


def _parse(parse: Callable[[Any], T], data: Any, what: str) -> T:
    """Decode a JSON body into models; a body of the wrong shape is an ApiError."""
    try:
        return parse(data)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        logger.warning("Malformed %s in API response: %r", what, exc)
        raise ApiError(f"Malformed {what} in API response: {exc!r}") from exc


def _error_message(response: httpx.Response) -> str:
    """Pick the most useful message out of an error response."""
    default = f"API request failed: {response.status_code} {response.reason_phrase}".strip()
    text = response.text
    if not text:
        return default
    try:
        parsed = response.json()
    except ValueError:
        return text
    if isinstance(parsed, dict) and parsed.get("message"):
        return str(parsed["message"])
    return text


class SignatureApiClient:
    """
    Synchronous client for components, elements and element search.

    Usage:
        client = SignatureApiClient(ApiSession("https://archive.local", token))
        components = client.get_all_components()
        page = client.search_elements(request)
        client.close()
    """

    def __init__(self, session: ApiSession, transport: Optional[httpx.BaseTransport] = None):
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if session.token:
            headers["Authorization"] = session.token
        timeout = session.timeout if session.timeout is not None else get_browser_config().request_timeout
        self._session = session
        self._client = httpx.Client(
            base_url=session.base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> "SignatureApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Network error on %s %s: %s", method, path, exc)
            raise ApiNetworkError(f"Network error: {exc}") from exc

        if response.is_error:
            message = _error_message(response)
            logger.warning("API error on %s %s: %s %s", method, path, response.status_code, message)
            raise ApiError(message, status=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(
                f"Failed to parse API response: {exc}. Response text: {response.text}",
                status=response.status_code,
            ) from exc

    def get_all_components(self) -> List[SignatureComponent]:
        data = self._request("GET", "/api/signature/components") or []
        return _parse(lambda d: [SignatureComponent.from_json(item) for item in d], data, "component list")

    def get_component_by_id(self, component_id: int) -> SignatureComponent:
        data = self._request("GET", f"/api/signature/components/{component_id}")
        return _parse(SignatureComponent.from_json, data, "component")

    def get_element_by_id(self, element_id: int, populate: Sequence[str] = ()) -> SignatureElement:
        """Fetch one element; ``populate`` may name ``parents`` and/or ``component``."""
        unknown = [p for p in populate if p not in POPULATE_OPTIONS]
        if unknown:
            raise ValueError(f"Unsupported populate options: {unknown}")
        params = {"populate": ",".join(populate)} if populate else None
        data = self._request("GET", f"/api/signature/elements/{element_id}", params=params)
        if not data:
            raise ApiError(f"Element {element_id} not found", status=404)
        return _parse(SignatureElement.from_json, data, "element")

    def get_elements_by_component(self, component_id: int) -> List[SignatureElement]:
        data = self._request("GET", f"/api/signature/components/{component_id}/elements") or []
        return _parse(lambda d: [SignatureElement.from_json(item) for item in d], data, "element list")

    def search_elements(self, request: SearchRequest) -> SearchResponse:
        logger.debug("Searching elements with query: %s", request.to_json()["query"])
        data = self._request("POST", "/api/signature/elements/search", json=request.to_json())
        return _parse(SearchResponse.from_json, data or {}, "search response")

    def create_element(self, payload: CreateElementInput) -> SignatureElement:
        payload.validate()
        data = self._request("POST", "/api/signature/elements", json=payload.to_json())
        element = _parse(SignatureElement.from_json, data, "element")
        logger.info("Created element %s (%s)", element.signature_element_id, element.name)
        return element
