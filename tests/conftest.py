"""pytest configuration and fixtures for signature-browser tests."""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtWidgets import QApplication

from signature_browser.api.exceptions import ApiError, ApiNetworkError
from signature_browser.api.models import (
    IndexType,
    SearchCondition,
    SearchResponse,
    SignatureComponent,
    SignatureElement,
)


@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for tests."""
    app = QApplication.instance() or QApplication([])
    yield app
    # Don't quit - may cause issues with other tests


class FakeSignatureApi:
    """In-memory backend honouring the search filters the builder sends."""

    def __init__(self):
        self.components = {}
        self.elements = {}
        self.search_requests = []
        self.lookups = []
        self.created = []
        self.fail_ids = set()
        self.fail_search = False
        self.fail_components = False
        self.fail_create = False
        self._next_id = 1000

    def add_component(self, component_id, name, index_type=IndexType.DECIMAL, index_count=0):
        component = SignatureComponent(component_id, name, index_count=index_count, index_type=index_type)
        self.components[component_id] = component
        return component

    def add_element(self, element_id, component_id, name, index=None, parents=()):
        element = SignatureElement(element_id, component_id, name, index=index, parent_ids=tuple(parents))
        self.elements[element_id] = element
        return element

    def get_all_components(self):
        if self.fail_components:
            raise ApiNetworkError("Network error: connection refused")
        return list(self.components.values())

    def get_element_by_id(self, element_id, populate=()):
        self.lookups.append(element_id)
        if element_id in self.fail_ids or element_id not in self.elements:
            raise ApiError("Element not found", status=404)
        return self.elements[element_id]

    def get_elements_by_component(self, component_id):
        return [e for e in self.elements.values() if e.signature_component_id == component_id]

    def _matches(self, element, flt):
        if flt.field == "name" and flt.condition is SearchCondition.FRAGMENT:
            return flt.value.lower() in element.name.lower()
        if flt.field == "signatureComponentId" and flt.condition is SearchCondition.EQ:
            return element.signature_component_id == flt.value
        if flt.field == "parentIds" and flt.condition is SearchCondition.ANY_OF:
            return any(p in element.parent_ids for p in flt.value)
        if flt.field == "hasParents" and flt.condition is SearchCondition.EQ:
            return bool(element.parent_ids) == flt.value
        raise AssertionError(f"Unexpected filter {flt}")

    def search_elements(self, request):
        self.search_requests.append(request)
        if self.fail_search:
            raise ApiError("Failed to load elements", status=500)
        data = [
            e for e in self.elements.values()
            if all(self._matches(e, flt) != flt.negated for flt in request.query)
        ]
        return SearchResponse(data=data[: request.page_size], page=1, page_size=request.page_size,
                              total_size=len(data), total_pages=1)

    def create_element(self, payload):
        if self.fail_create:
            raise ApiError("Failed to create element", status=500)
        payload.validate()
        self._next_id += 1
        element = self.add_element(self._next_id, payload.signature_component_id, payload.name,
                                   index=payload.index, parents=payload.parent_ids)
        self.created.append(element)
        return element


@pytest.fixture
def api():
    """Component C1 (dec) with roots A, B and child A1 of A; component C2 with Foo elements."""
    fake = FakeSignatureApi()
    fake.add_component(1, "C1", IndexType.DECIMAL, index_count=2)
    fake.add_component(2, "C2", IndexType.ROMAN, index_count=3)
    fake.add_element(10, 1, "A", index="1")
    fake.add_element(11, 1, "B", index="2")
    fake.add_element(12, 1, "A1", index="1", parents=(10,))
    fake.add_element(20, 2, "Foo bar", index="I")
    fake.add_element(21, 2, "Other", index="II")
    fake.add_element(22, 2, "Foobaz", index="III", parents=(20,))
    return fake
