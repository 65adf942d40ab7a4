"""Search filters used to compute element candidates."""

from signature_browser.api.models import SearchCondition, SearchQueryElement


def children_of(element_id: int) -> SearchQueryElement:
    """Elements that list ``element_id`` among their parents."""
    return SearchQueryElement("parentIds", SearchCondition.ANY_OF, (element_id,))


def roots_of(component_id: int) -> tuple:
    """Elements of a component that have no parents."""
    return (
        in_component(component_id),
        SearchQueryElement("hasParents", SearchCondition.EQ, False),
    )


def in_component(component_id: int) -> SearchQueryElement:
    return SearchQueryElement("signatureComponentId", SearchCondition.EQ, component_id)


def name_fragment(term: str) -> SearchQueryElement:
    return SearchQueryElement("name", SearchCondition.FRAGMENT, term)
