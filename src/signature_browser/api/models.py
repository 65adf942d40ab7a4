"""
Wire models for the signature backend.

Plain dataclasses mirroring the backend's camelCase JSON. Conversion lives
on the types themselves so services never touch raw dicts.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from signature_browser.api.exceptions import ValidationError

NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
INDEX_MAX_LENGTH = 255


class IndexType(Enum):
    """How a component auto-formats the index of its elements."""
    DECIMAL = "dec"
    ROMAN = "roman"
    SMALL_CHAR = "small_char"
    CAPITAL_CHAR = "capital_char"


class SearchCondition(Enum):
    EQ = "EQ"
    GT = "GT"
    GTE = "GTE"
    LT = "LT"
    LTE = "LTE"
    ANY_OF = "ANY_OF"
    FRAGMENT = "FRAGMENT"


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass(frozen=True)
class SignatureComponent:
    """Named namespace owning a set of elements."""
    signature_component_id: int
    name: str
    description: Optional[str] = None
    index_count: int = 0
    index_type: IndexType = IndexType.DECIMAL

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "SignatureComponent":
        return cls(
            signature_component_id=int(data["signatureComponentId"]),
            name=data.get("name") or "",
            description=data.get("description"),
            index_count=int(data.get("index_count") or 0),
            index_type=IndexType(data.get("index_type") or IndexType.DECIMAL.value),
        )


@dataclass(frozen=True)
class SignatureElement:
    """A node of the signature taxonomy, belonging to one component."""
    signature_element_id: int
    signature_component_id: int
    name: str
    description: Optional[str] = None
    index: Optional[str] = None
    parent_ids: Tuple[int, ...] = ()
    created_on: Optional[datetime] = field(default=None, compare=False)
    modified_on: Optional[datetime] = field(default=None, compare=False)

    @property
    def display_label(self) -> str:
        """``[index] name`` when an index is set, else just the name."""
        if self.index:
            return f"[{self.index}] {self.name}"
        return self.name

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "SignatureElement":
        parent_ids = data.get("parentIds")
        if parent_ids is None and data.get("parentElements"):
            parent_ids = [p["signatureElementId"] for p in data["parentElements"]]
        return cls(
            signature_element_id=int(data["signatureElementId"]),
            signature_component_id=int(data["signatureComponentId"]),
            name=data.get("name") or "",
            description=data.get("description"),
            index=data.get("index") or None,
            parent_ids=tuple(int(p) for p in (parent_ids or [])),
            created_on=_parse_timestamp(data.get("createdOn")),
            modified_on=_parse_timestamp(data.get("modifiedOn")),
        )


@dataclass(frozen=True)
class SearchQueryElement:
    """One ``field condition value`` filter; filters are ANDed by the backend."""
    field: str
    condition: SearchCondition
    value: Any
    negated: bool = False

    def to_json(self) -> Dict[str, Any]:
        value = list(self.value) if isinstance(self.value, tuple) else self.value
        return {
            "field": self.field,
            "condition": self.condition.value,
            "value": value,
            "not": self.negated,
        }


@dataclass(frozen=True)
class SearchRequest:
    query: Tuple[SearchQueryElement, ...]
    page: int = 1
    page_size: int = 10

    def to_json(self) -> Dict[str, Any]:
        return {
            "query": [q.to_json() for q in self.query],
            "page": self.page,
            "pageSize": self.page_size,
        }


@dataclass
class SearchResponse:
    data: List[SignatureElement]
    page: int = 1
    page_size: int = 10
    total_size: int = 0
    total_pages: int = 0

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "SearchResponse":
        return cls(
            data=[SignatureElement.from_json(item) for item in data.get("data") or []],
            page=int(data.get("page") or 1),
            page_size=int(data.get("pageSize") or 10),
            total_size=int(data.get("totalSize") or 0),
            total_pages=int(data.get("totalPages") or 0),
        )


@dataclass(frozen=True)
class CreateElementInput:
    """Payload for creating an element; validated before it is sent."""
    signature_component_id: int
    name: str
    description: Optional[str] = None
    index: Optional[str] = None
    parent_ids: Tuple[int, ...] = ()

    def validate(self) -> None:
        if self.signature_component_id <= 0:
            raise ValidationError("Invalid Component ID")
        name = self.name.strip()
        if not name:
            raise ValidationError("Name cannot be empty")
        if len(name) > NAME_MAX_LENGTH:
            raise ValidationError("Name too long")
        if self.description is not None and len(self.description) > DESCRIPTION_MAX_LENGTH:
            raise ValidationError("Description too long")
        if self.index is not None and len(self.index) > INDEX_MAX_LENGTH:
            raise ValidationError("Index too long")
        if any(pid <= 0 for pid in self.parent_ids):
            raise ValidationError("Invalid parent ID")

    def to_json(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "signatureComponentId": self.signature_component_id,
            "name": self.name.strip(),
            "parentIds": list(self.parent_ids),
        }
        if self.description:
            payload["description"] = self.description
        if self.index:
            payload["index"] = self.index
        return payload
