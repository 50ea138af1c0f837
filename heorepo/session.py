"""Application session: the single owner of the working copy."""

import logging
import threading
from datetime import datetime
from typing import Any, Callable, List, Optional

from . import codec, reconciler
from .auth import Authenticator
from .errors import PermissionDenied, ValidationError
from .models import ALL, GENERAL_ID, Resource, Suggestion, ViewMode, WorkingCopy
from .query import filter_resources
from .seed import SeedDataset
from .store import Store, load_bookmarks, load_view_mode, save_bookmarks, save_view_mode

LOGGER = logging.getLogger(__name__)

ADMIN_KEYWORD = "admin"


class CatalogSession:
    """작업본, 북마크, 보기 모드, 관리자 상태, 제안 목록을 보관

    작업본이 바뀔 때마다 컬렉션/리소스/태그라인과 저장 버전을 한 번에 다시 저장합니다.
    관리자 상태와 제안 목록은 세션에만 있고 저장하지 않습니다.
    상태를 바꾸는 메서드는 ``_lock`` 으로 직렬화합니다 (라우트가 스레드풀에서 동시에 실행됨).
    """

    def __init__(
        self,
        store: Store,
        seed: SeedDataset,
        authenticator: Authenticator,
        default_collection: str = GENERAL_ID,
    ):
        self.store = store
        self.seed = seed
        self.authenticator = authenticator
        self.default_collection = default_collection
        self.is_admin = False
        self.suggestions: List[Suggestion] = []
        self._lock = threading.RLock()
        self.reload()

    def reload(self) -> None:
        """저장소에서 상태를 다시 읽음 (페이지 새로고침에 해당)"""
        with self._lock:
            self.working_copy: WorkingCopy = reconciler.load_working_copy(self.store, self.seed)
            self.bookmarks: List[str] = load_bookmarks(self.store)
            self.view_mode: ViewMode = load_view_mode(self.store)

    # ---------- working copy ----------

    def _commit(self, working_copy: WorkingCopy) -> WorkingCopy:
        if working_copy is not self.working_copy:
            self.working_copy = working_copy
            reconciler.persist_working_copy(self.store, working_copy, self.seed.version)
        return self.working_copy

    def apply(self, operation: Callable[..., WorkingCopy], *args: Any, **kwargs: Any) -> WorkingCopy:
        """편집 연산 적용 후 저장 (관리자 전용)"""
        self.require_admin()
        with self._lock:
            return self._commit(operation(self.working_copy, *args, **kwargs))

    def import_csv(self, text: str, now: Optional[datetime] = None) -> codec.ImportReport:
        self.require_admin()
        with self._lock:
            working_copy, report = codec.import_resources_csv(self.working_copy, text, now=now)
            self._commit(working_copy)
        return report

    def export_snapshot(self, now: Optional[float] = None) -> codec.Snapshot:
        self.require_admin()
        return codec.export_snapshot(self.working_copy, now=now)

    def reset_cache(self) -> None:
        """로컬 편집을 버리고 seed 에서 다시 시작"""
        self.require_admin()
        with self._lock:
            reconciler.reset_store(self.store)
            self.reload()

    def status(self) -> dict:
        stored_version = reconciler.read_stored_version(self.store)
        return {
            "seed_version": self.seed.version,
            "stored_version": stored_version,
            "out_of_sync": reconciler.should_use_seed(self.seed.version, stored_version),
            "collections": len(self.working_copy.collections),
            "resources": len(self.working_copy.resources),
            "tagline_words": len(self.working_copy.tagline_words),
        }

    # ---------- admin ----------

    def login(self, credential: str) -> bool:
        if not self.authenticator.verify(credential):
            return False
        self.is_admin = True
        LOGGER.info("admin mode enabled")
        return True

    def logout(self) -> None:
        self.is_admin = False

    def require_admin(self) -> None:
        if not self.is_admin:
            raise PermissionDenied("Admin login required")

    # ---------- visitor ----------

    def toggle_bookmark(self, resource_id: str) -> bool:
        """북마크 토글 후 바로 저장, 추가되었으면 True"""
        with self._lock:
            added = resource_id not in self.bookmarks
            if added:
                self.bookmarks = self.bookmarks + [resource_id]
            else:
                self.bookmarks = [b for b in self.bookmarks if b != resource_id]
            save_bookmarks(self.store, self.bookmarks)
        return added

    def set_view_mode(self, view_mode: str) -> ViewMode:
        try:
            mode = ViewMode(view_mode)
        except ValueError:
            raise ValidationError(f"Unknown view mode '{view_mode}'") from None
        with self._lock:
            self.view_mode = mode
            save_view_mode(self.store, mode)
        return self.view_mode

    def visible_resources(
        self,
        active_collection: str = ALL,
        sub_category: str = ALL,
        query: str = "",
        bookmarks_only: bool = False,
    ) -> List[Resource]:
        # 검색창에 'admin' 을 입력하면 검색 대신 로그인 창을 띄우므로 필터에 쓰지 않음
        if wants_admin_prompt(query):
            query = ""
        return filter_resources(
            self.working_copy.resources,
            active_collection=active_collection,
            sub_category=sub_category,
            query=query,
            bookmarks_only=bookmarks_only,
            bookmarks=self.bookmarks,
        )

    # ---------- contributions ----------

    def add_suggestion(self, **fields: Any) -> Suggestion:
        suggestion = Suggestion(**fields)
        with self._lock:
            self.suggestions = self.suggestions + [suggestion]
        return suggestion

    def remove_suggestion(self, index: int) -> None:
        with self._lock:
            if not 0 <= index < len(self.suggestions):
                raise ValidationError(f"Index {index} is out of range")
            self.suggestions = self.suggestions[:index] + self.suggestions[index + 1:]

    def export_suggestions(self) -> str:
        """제안 목록을 CSV로 내보내고 목록을 비움"""
        with self._lock:
            content = codec.build_contribution_csv(self.suggestions)
            LOGGER.info("exported %d suggestions", len(self.suggestions))
            self.suggestions = []
        return content


def wants_admin_prompt(query: str) -> bool:
    return query.strip().lower() == ADMIN_KEYWORD
