"""Protocol for the signature backend consumed by the services."""

from typing import Protocol, List, Sequence

from signature_browser.api.models import (
    CreateElementInput,
    SearchRequest,
    SearchResponse,
    SignatureComponent,
    SignatureElement,
)


class SignatureApiProtocol(Protocol):
    """Read/search/create operations the path builder and resolver need.

    Implementations raise ``ApiError`` for every failed call.
    """

    def get_all_components(self) -> List[SignatureComponent]:
        ...

    def get_element_by_id(self, element_id: int, populate: Sequence[str] = ()) -> SignatureElement:
        ...

    def get_elements_by_component(self, component_id: int) -> List[SignatureElement]:
        ...

    def search_elements(self, request: SearchRequest) -> SearchResponse:
        ...

    def create_element(self, payload: CreateElementInput) -> SignatureElement:
        ...
