"""Resource filtering and sub-category filter chips."""

from typing import Iterable, List, Optional

from .models import ALL, Collection, Resource


def _matches_collection(resource: Resource, active_collection: str) -> bool:
    return active_collection == ALL or resource.category == active_collection


def _matches_sub_category(resource: Resource, sub_category: str) -> bool:
    if sub_category.lower() == ALL:
        return True
    return resource.sub_category.lower() == sub_category.lower()


def _matches_query(resource: Resource, query: str) -> bool:
    """제목 또는 설명에 검색어가 포함되는지 (대소문자 무시)"""
    needle = query.lower()
    if not needle:
        return True
    return needle in resource.title.lower() or needle in resource.description.lower()


def filter_resources(
    resources: Iterable[Resource],
    active_collection: str = ALL,
    sub_category: str = ALL,
    query: str = "",
    bookmarks_only: bool = False,
    bookmarks: Iterable[str] = (),
) -> List[Resource]:
    """보이는 리소스 목록 (저장 순서 유지, 점수 정렬 없음)

    북마크 모드에서는 컬렉션/하위 분류/검색어를 보지 않고 북마크 여부만 확인합니다.
    """
    if bookmarks_only:
        bookmark_set = set(bookmarks)
        return [r for r in resources if r.id in bookmark_set]

    return [
        r
        for r in resources
        if _matches_collection(r, active_collection)
        and _matches_sub_category(r, sub_category)
        and _matches_query(r, query)
    ]


def sub_category_filters(collection: Optional[Collection]) -> List[str]:
    """필터 칩 순서: 컬렉션의 하위 분류 다음에 'All'"""
    if collection is None:
        return []
    return list(collection.sub_categories) + ["All"]


def initial_sub_category(collection: Optional[Collection]) -> str:
    """컬렉션 선택 시 처음 활성화되는 하위 분류"""
    if collection is not None and collection.sub_categories:
        return collection.sub_categories[0]
    return ALL
