"""Local store: per-installation key-value persistence for the working copy."""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .models import (
    Collection,
    Resource,
    ViewMode,
    collections_from_list,
    resources_from_list,
    tagline_words_from_list,
)

LOGGER = logging.getLogger(__name__)


class Slot(str, Enum):
    """Logical storage slots. Keys must stay stable across releases."""

    COLLECTIONS = "heo_collections"
    RESOURCES = "heo_resources"
    TAGLINE = "heo_tagline"
    BOOKMARKS = "heo_bookmarks"
    VIEW_MODE = "heo_view_mode"
    VERSION = "heo_repo_version"


class Store:
    """텍스트 기반 키-값 저장소 (값은 JSON 문자열로 저장)

    하위 클래스는 ``read_text``/``write_text``/``delete`` 만 구현합니다.
    ``load`` 는 절대 예외를 던지지 않고, 없거나 깨진 값은 None 으로 돌려줍니다.
    """

    def read_text(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def write_text(self, key: str, text: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def load(self, slot: Slot) -> Optional[Any]:
        try:
            text = self.read_text(slot.value)
        except (OSError, UnicodeDecodeError) as exc:
            LOGGER.warning("slot %s 읽기 실패: %s", slot.value, exc)
            return None
        if text is None:
            return None
        try:
            return json.loads(text)
        except ValueError:
            LOGGER.warning("slot %s 의 값이 올바른 JSON이 아님, 무시", slot.value)
            return None

    def save(self, slot: Slot, value: Any) -> None:
        self.write_text(slot.value, json.dumps(value, ensure_ascii=False, indent=2))

    def remove(self, slot: Slot) -> None:
        self.delete(slot.value)


class MemoryStore(Store):
    """프로세스 메모리에만 두는 저장소 (테스트, 임시 세션용)"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def read_text(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def write_text(self, key: str, text: str) -> None:
        self.data[key] = text

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore(Store):
    """디렉터리 하나에 slot별 ``<key>.json`` 파일로 저장"""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read_text(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write_text(self, key: str, text: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(text, encoding="utf-8")

    def delete(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()


def _decode(store: Store, slot: Slot, decoder):
    raw = store.load(slot)
    if raw is None:
        return None
    try:
        return decoder(raw)
    except (TypeError, ValueError, OverflowError) as exc:
        LOGGER.warning("slot %s 구조가 올바르지 않음 (%s), 무시", slot.value, exc)
        return None


def load_collections(store: Store) -> Optional[Tuple[Collection, ...]]:
    """저장된 컬렉션 로드 (없거나 깨졌으면 None)"""
    return _decode(store, Slot.COLLECTIONS, collections_from_list)


def load_resources(store: Store) -> Optional[Tuple[Resource, ...]]:
    """저장된 리소스 로드 (없거나 깨졌으면 None)"""
    return _decode(store, Slot.RESOURCES, resources_from_list)


def load_tagline_words(store: Store) -> Optional[Tuple[str, ...]]:
    return _decode(store, Slot.TAGLINE, tagline_words_from_list)


def _bookmark_list(raw: Any) -> List[str]:
    if not isinstance(raw, list):
        raise ValueError("bookmarks must be a list")
    ids: List[str] = []
    for item in raw:
        if isinstance(item, str) and item not in ids:
            ids.append(item)
    return ids


def load_bookmarks(store: Store) -> List[str]:
    """북마크 ID 목록 로드 (없으면 빈 목록)"""
    return _decode(store, Slot.BOOKMARKS, _bookmark_list) or []


def load_view_mode(store: Store) -> ViewMode:
    """보기 모드 로드 (기본 grid)"""
    return _decode(store, Slot.VIEW_MODE, ViewMode) or ViewMode.GRID


def load_stored_version(store: Store) -> int:
    """저장된 버전 번호 (없거나 숫자가 아니면 0)"""

    def _version(raw: Any) -> int:
        if isinstance(raw, bool):
            raise ValueError("boolean is not a version")
        return int(raw)

    return _decode(store, Slot.VERSION, _version) or 0


def save_collections(store: Store, collections) -> None:
    store.save(Slot.COLLECTIONS, [c.to_dict() for c in collections])


def save_resources(store: Store, resources) -> None:
    store.save(Slot.RESOURCES, [r.to_dict() for r in resources])


def save_tagline_words(store: Store, words) -> None:
    store.save(Slot.TAGLINE, list(words))


def save_bookmarks(store: Store, bookmark_ids) -> None:
    store.save(Slot.BOOKMARKS, list(bookmark_ids))


def save_view_mode(store: Store, view_mode: ViewMode) -> None:
    store.save(Slot.VIEW_MODE, ViewMode(view_mode).value)


def save_stored_version(store: Store, version: int) -> None:
    store.save(Slot.VERSION, int(version))
