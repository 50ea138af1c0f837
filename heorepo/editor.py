"""Catalog editing operations.

Every operation takes the current :class:`WorkingCopy` and returns a new one;
nothing is mutated in place. Operations that turn out to be no-ops (moving
past either end of a list, adding a sub-category that already exists) return
the very same object so callers can skip persisting. Rejected input raises a
:class:`ValidationError` and the caller keeps its old working copy.
"""

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from .errors import NotFoundError, ReservedNameError, ValidationError
from .links import derive_domain, sanitize
from .models import (
    ALL,
    DEFAULT_IMAGE_URL,
    GENERAL_ID,
    RESOURCE_KEYS,
    Collection,
    Resource,
    WorkingCopy,
)

DIRECTIONS = {"up": -1, "left": -1, "down": 1, "right": 1}

# 태그 제거 대상 자유 입력 필드
RESOURCE_TEXT_FIELDS = {"title", "description", "contributor"}
COLLECTION_FIELDS = {"name": "name", "icon": "icon", "description": "description"}
COLLECTION_TEXT_FIELDS = {"name", "description"}


def generate_id(length: int = 9) -> str:
    return uuid.uuid4().hex[:length]


def today_string(now: Optional[datetime] = None) -> str:
    """dd/mm/yyyy 형식의 날짜 문자열"""
    return (now or datetime.now()).strftime("%d/%m/%Y")


def _check_index(items: Tuple[Any, ...], index: int) -> None:
    if not 0 <= index < len(items):
        raise ValidationError(f"Index {index} is out of range")


def _swap(items: Tuple[Any, ...], index: int, direction: str) -> Optional[Tuple[Any, ...]]:
    """인접 항목과 자리 바꿈, 경계를 벗어나면 None"""
    step = DIRECTIONS.get(direction)
    if step is None:
        raise ValidationError(f"Unknown direction '{direction}'")
    _check_index(items, index)
    target = index + step
    if not 0 <= target < len(items):
        return None
    swapped = list(items)
    swapped[index], swapped[target] = swapped[target], swapped[index]
    return tuple(swapped)


def _require_resource(working_copy: WorkingCopy, resource_id: str) -> Resource:
    resource = working_copy.find_resource(resource_id)
    if resource is None:
        raise NotFoundError(f"Resource '{resource_id}' not found")
    return resource


def _require_collection(working_copy: WorkingCopy, collection_id: str) -> Collection:
    collection = working_copy.find_collection(collection_id)
    if collection is None:
        raise NotFoundError(f"Collection '{collection_id}' not found")
    return collection


def _replace_collection(working_copy: WorkingCopy, updated: Collection) -> WorkingCopy:
    return working_copy.with_changes(
        collections=tuple(updated if c.id == updated.id else c for c in working_copy.collections)
    )


# ---------- resources ----------

def add_resource(working_copy: WorkingCopy, now: Optional[datetime] = None, **defaults: Any) -> WorkingCopy:
    """새 리소스를 목록 맨 앞에 추가"""
    default_category = working_copy.collections[0].id if working_copy.collections else GENERAL_ID
    values: Dict[str, Any] = {
        "title": "New Resource",
        "description": "Enter description...",
        "contributor": "Admin",
        "url": "https://",
        "domain": "NEW.COM",
        "image_url": DEFAULT_IMAGE_URL,
        "added_date": today_string(now),
        "category": default_category,
        "sub_category": ALL,
    }
    values.update(defaults)
    values["id"] = generate_id()
    resource = Resource(**values)
    return working_copy.with_changes(resources=(resource,) + working_copy.resources)


def update_resource_field(working_copy: WorkingCopy, resource_id: str, field: str, value: Any) -> WorkingCopy:
    """리소스 필드 하나 수정 (url 변경 시 domain 재계산)"""
    attr = RESOURCE_KEYS.get(field, field if field in RESOURCE_KEYS.values() else None)
    if attr is None or attr == "id":
        raise ValidationError(f"Field '{field}' cannot be edited")
    resource = _require_resource(working_copy, resource_id)

    if attr in ("file_type", "status"):
        value = value.strip() if isinstance(value, str) and value.strip() else None
    elif attr in RESOURCE_TEXT_FIELDS:
        value = sanitize(value)
    elif isinstance(value, str):
        value = value.strip()
    else:
        raise ValidationError(f"Field '{field}' expects text")

    changes: Dict[str, Any] = {attr: value}
    if attr == "url":
        domain = derive_domain(value)
        # 파싱 실패 시 기존 domain 유지
        if domain:
            changes["domain"] = domain
    elif attr == "category":
        collection = working_copy.find_collection(value)
        if collection is None:
            raise ValidationError(f"Unknown collection '{value}'")
        if resource.sub_category not in collection.sub_categories:
            changes["sub_category"] = ALL
    elif attr == "sub_category":
        if not value or value.lower() == ALL:
            changes["sub_category"] = ALL
        else:
            owner = working_copy.find_collection(resource.category)
            if owner is None or value not in owner.sub_categories:
                raise ValidationError(f"'{value}' is not a sub-category of '{resource.category}'")

    updated = replace(resource, **changes)
    return working_copy.with_changes(
        resources=tuple(updated if r.id == resource_id else r for r in working_copy.resources)
    )


def delete_resource(working_copy: WorkingCopy, resource_id: str) -> WorkingCopy:
    _require_resource(working_copy, resource_id)
    return working_copy.with_changes(
        resources=tuple(r for r in working_copy.resources if r.id != resource_id)
    )


def move_resource(working_copy: WorkingCopy, index: int, direction: str) -> WorkingCopy:
    resources = _swap(working_copy.resources, index, direction)
    if resources is None:
        return working_copy
    return working_copy.with_changes(resources=resources)


# ---------- collections ----------

def add_collection(working_copy: WorkingCopy) -> WorkingCopy:
    taken = set(working_copy.collection_ids())
    collection_id = f"custom-{generate_id(5)}"
    while collection_id in taken:
        collection_id = f"custom-{generate_id(5)}"
    collection = Collection(
        id=collection_id,
        name="New Category",
        icon="📁",
        description="",
        sub_categories=("General",),
    )
    return working_copy.with_changes(collections=working_copy.collections + (collection,))


def update_collection_field(working_copy: WorkingCopy, collection_id: str, field: str, value: Any) -> WorkingCopy:
    attr = COLLECTION_FIELDS.get(field)
    if attr is None:
        raise ValidationError(f"Field '{field}' cannot be edited")
    if not isinstance(value, str):
        raise ValidationError(f"Field '{field}' expects text")
    collection = _require_collection(working_copy, collection_id)
    value = sanitize(value) if attr in COLLECTION_TEXT_FIELDS else value.strip()
    return _replace_collection(working_copy, replace(collection, **{attr: value}))


def delete_collection(working_copy: WorkingCopy, collection_id: str, default_id: str = GENERAL_ID) -> WorkingCopy:
    """컬렉션 삭제, 소속 리소스는 기본 컬렉션의 'all'로 이동"""
    _require_collection(working_copy, collection_id)
    resources = tuple(
        replace(r, category=default_id, sub_category=ALL)
        if r.category == collection_id
        else r
        for r in working_copy.resources
    )
    return working_copy.with_changes(
        collections=tuple(c for c in working_copy.collections if c.id != collection_id),
        resources=resources,
    )


def move_collection(working_copy: WorkingCopy, index: int, direction: str) -> WorkingCopy:
    collections = _swap(working_copy.collections, index, direction)
    if collections is None:
        return working_copy
    return working_copy.with_changes(collections=collections)


# ---------- sub-categories ----------

def move_sub_category(working_copy: WorkingCopy, collection_id: str, index: int, direction: str) -> WorkingCopy:
    collection = _require_collection(working_copy, collection_id)
    subs = _swap(collection.sub_categories, index, direction)
    if subs is None:
        return working_copy
    return _replace_collection(working_copy, replace(collection, sub_categories=subs))


def _reject_reserved(label: str) -> None:
    if label.lower() == ALL:
        raise ReservedNameError(
            "'All' is a reserved system filter and cannot be used as a custom subcategory."
        )


def add_sub_category(working_copy: WorkingCopy, collection_id: str, label: str) -> WorkingCopy:
    clean = sanitize(label)
    if not clean:
        return working_copy
    _reject_reserved(clean)
    collection = _require_collection(working_copy, collection_id)
    if clean in collection.sub_categories:
        return working_copy
    subs = collection.sub_categories + (clean,)
    return _replace_collection(working_copy, replace(collection, sub_categories=subs))


def remove_sub_category(working_copy: WorkingCopy, collection_id: str, index: int) -> WorkingCopy:
    """하위 분류 삭제, 해당 라벨을 가진 리소스는 'all'로 되돌림"""
    collection = _require_collection(working_copy, collection_id)
    _check_index(collection.sub_categories, index)
    label = collection.sub_categories[index]
    subs = collection.sub_categories[:index] + collection.sub_categories[index + 1:]
    resources = tuple(
        replace(r, sub_category=ALL)
        if r.category == collection_id and r.sub_category == label
        else r
        for r in working_copy.resources
    )
    updated = _replace_collection(working_copy, replace(collection, sub_categories=subs))
    return updated.with_changes(resources=resources)


def rename_sub_category(working_copy: WorkingCopy, collection_id: str, index: int, new_label: str) -> WorkingCopy:
    """라벨만 바꿈: 이미 옛 라벨을 가진 리소스는 갱신하지 않음"""
    collection = _require_collection(working_copy, collection_id)
    _check_index(collection.sub_categories, index)
    clean = sanitize(new_label)
    if not clean:
        raise ValidationError("Sub-category name cannot be empty")
    _reject_reserved(clean)
    if clean == collection.sub_categories[index]:
        return working_copy
    if clean in collection.sub_categories:
        raise ValidationError(f"'{clean}' already exists in '{collection_id}'")
    subs = list(collection.sub_categories)
    subs[index] = clean
    return _replace_collection(working_copy, replace(collection, sub_categories=tuple(subs)))


# ---------- tagline ----------

def add_tagline_word(working_copy: WorkingCopy, word: str) -> WorkingCopy:
    clean = sanitize(word)
    if not clean:
        return working_copy
    return working_copy.with_changes(tagline_words=working_copy.tagline_words + (clean,))


def remove_tagline_word(working_copy: WorkingCopy, index: int) -> WorkingCopy:
    words = working_copy.tagline_words
    _check_index(words, index)
    if len(words) <= 1:
        raise ValidationError("At least one tagline word must remain")
    return working_copy.with_changes(tagline_words=words[:index] + words[index + 1:])
