"""Data models."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import ValidationError
from .links import is_valid_link, sanitize

ALL = "all"
GENERAL_ID = "general"
BOOKMARKS_ID = "bookmarks"

DEFAULT_IMAGE_URL = "https://images.unsplash.com/photo-1551288049-bbda38a594a0?auto=format&fit=crop&q=80&w=600"
IMPORT_IMAGE_URL = "https://images.unsplash.com/photo-1460925895917-afdab827c52f?auto=format&fit=crop&q=80&w=600"

# JSON 키 <-> 속성 이름
RESOURCE_KEYS = {
    "id": "id",
    "title": "title",
    "description": "description",
    "url": "url",
    "domain": "domain",
    "imageUrl": "image_url",
    "addedDate": "added_date",
    "contributor": "contributor",
    "category": "category",
    "subCategory": "sub_category",
    "fileType": "file_type",
    "status": "status",
}


class ViewMode(str, Enum):
    GRID = "grid"
    LIST = "list"


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class Resource:
    id: str
    title: str = ""
    description: str = ""
    url: str = ""
    domain: str = ""
    image_url: str = ""
    added_date: str = ""
    contributor: str = ""
    category: str = GENERAL_ID
    sub_category: str = ALL
    file_type: Optional[str] = None
    status: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Resource":
        """저장된 딕셔너리에서 Resource 생성 (모르는 키는 extra에 보존)"""
        if not isinstance(raw, dict) or not isinstance(raw.get("id"), str):
            raise ValueError("resource entry needs a string id")
        values: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in raw.items():
            attr = RESOURCE_KEYS.get(key)
            if attr is None:
                extra[key] = value
            elif attr in ("file_type", "status"):
                values[attr] = value
            else:
                values[attr] = _text(value)
        if not values.get("sub_category"):
            values["sub_category"] = ALL
        return cls(extra=extra, **values)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for key, attr in RESOURCE_KEYS.items():
            value = getattr(self, attr)
            if attr in ("file_type", "status") and value is None:
                continue
            data[key] = value
        data.update(self.extra)
        return data


@dataclass(frozen=True)
class Collection:
    id: str
    name: str = ""
    icon: str = ""
    description: str = ""
    sub_categories: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Collection":
        if not isinstance(raw, dict) or not isinstance(raw.get("id"), str):
            raise ValueError("collection entry needs a string id")
        subs = raw.get("subCategories") or []
        if not isinstance(subs, list):
            raise ValueError(f"subCategories of '{raw['id']}' must be a list")
        return cls(
            id=raw["id"],
            name=_text(raw.get("name")),
            icon=_text(raw.get("icon")),
            description=_text(raw.get("description")),
            sub_categories=tuple(str(s) for s in subs),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "description": self.description,
            "subCategories": list(self.sub_categories),
        }


@dataclass(frozen=True)
class WorkingCopy:
    collections: Tuple[Collection, ...] = ()
    resources: Tuple[Resource, ...] = ()
    tagline_words: Tuple[str, ...] = ()
    version: int = 0

    def with_changes(self, **changes: Any) -> "WorkingCopy":
        return replace(self, **changes)

    def collection_ids(self) -> List[str]:
        return [c.id for c in self.collections]

    def find_collection(self, collection_id: str) -> Optional[Collection]:
        for collection in self.collections:
            if collection.id == collection_id:
                return collection
        return None

    def find_resource(self, resource_id: str) -> Optional[Resource]:
        for resource in self.resources:
            if resource.id == resource_id:
                return resource
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "collections": [c.to_dict() for c in self.collections],
            "resources": [r.to_dict() for r in self.resources],
            "taglineWords": list(self.tagline_words),
        }


@dataclass(frozen=True)
class Suggestion:
    """Visitor-suggested resource, one row of the contribution CSV."""

    title: str
    url: str
    description: str = ""
    contributor: str = ""
    category: str = GENERAL_ID
    wants_credit: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "title", sanitize(self.title))
        object.__setattr__(self, "url", self.url.strip())
        object.__setattr__(self, "description", sanitize(self.description))
        object.__setattr__(self, "contributor", sanitize(self.contributor))
        if not self.title or not self.url:
            raise ValidationError("Please provide at least a title and a valid URL.")
        if not is_valid_link(self.url):
            raise ValidationError("Please provide a secure and valid URL.")

    @property
    def sub_category(self) -> str:
        return ALL

    @property
    def credited_name(self) -> str:
        return self.contributor if self.wants_credit else "Anonymous"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "description": self.description,
            "contributor": self.contributor,
            "category": self.category,
            "wantsCredit": self.wants_credit,
        }


def collections_from_list(raw: Any) -> Tuple[Collection, ...]:
    """JSON 배열을 Collection 튜플로 변환 (형식이 다르면 ValueError)"""
    if not isinstance(raw, list):
        raise ValueError("collections must be a list")
    return tuple(Collection.from_dict(item) for item in raw)


def resources_from_list(raw: Any) -> Tuple[Resource, ...]:
    if not isinstance(raw, list):
        raise ValueError("resources must be a list")
    return tuple(Resource.from_dict(item) for item in raw)


def tagline_words_from_list(raw: Any) -> Tuple[str, ...]:
    if not isinstance(raw, list) or not all(isinstance(w, str) for w in raw):
        raise ValueError("tagline words must be a list of strings")
    return tuple(raw)
