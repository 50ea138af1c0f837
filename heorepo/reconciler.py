"""Version reconciliation between the bundled seed and the local store."""

import logging

from .models import WorkingCopy
from .seed import SeedDataset
from .store import (
    Slot,
    Store,
    load_collections,
    load_resources,
    load_stored_version,
    load_tagline_words,
    save_collections,
    save_resources,
    save_stored_version,
    save_tagline_words,
)

LOGGER = logging.getLogger(__name__)

# 버전 초기화 시 지우는 slot (북마크, 보기 모드는 개인 데이터라 유지)
CONTENT_SLOTS = (Slot.COLLECTIONS, Slot.RESOURCES, Slot.TAGLINE, Slot.VERSION)


def read_stored_version(store: Store) -> int:
    return load_stored_version(store)


def should_use_seed(seed_version: int, stored_version: int) -> bool:
    """seed 버전이 저장된 버전보다 크면 캐시를 버리고 seed 사용 (같으면 캐시 유지)"""
    return seed_version > stored_version


def load_working_copy(store: Store, seed: SeedDataset) -> WorkingCopy:
    """앱 시작 시 한 번 호출: seed 또는 저장소에서 작업본 선택"""
    stored_version = read_stored_version(store)
    if should_use_seed(seed.version, stored_version):
        LOGGER.info(
            "seed 버전 %s > 저장 버전 %s: seed 데이터로 시작", seed.version, stored_version
        )
        return seed.working_copy()

    collections = load_collections(store)
    resources = load_resources(store)
    tagline_words = load_tagline_words(store)
    # slot별로 없거나 깨졌으면 seed 값으로 대체
    return WorkingCopy(
        collections=seed.collections if collections is None else collections,
        resources=seed.resources if resources is None else resources,
        tagline_words=seed.tagline_words if tagline_words is None else tagline_words,
        version=seed.version,
    )


def persist_working_copy(store: Store, working_copy: WorkingCopy, seed_version: int) -> None:
    """컬렉션/리소스/태그라인을 함께 저장하고 저장 버전을 seed 버전으로 기록

    세 slot은 물리적으로 별개 항목이라 중간에 실패하면 서로 어긋날 수 있음.
    """
    save_collections(store, working_copy.collections)
    save_resources(store, working_copy.resources)
    save_tagline_words(store, working_copy.tagline_words)
    save_stored_version(store, seed_version)


def reset_store(store: Store) -> None:
    """로컬 편집 내용을 모두 지움 (다음 로드 시 seed 사용)"""
    for slot in CONTENT_SLOTS:
        store.remove(slot)
    LOGGER.warning("로컬 카탈로그 캐시 초기화")
