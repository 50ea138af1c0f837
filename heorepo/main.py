import threading
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, StreamingResponse
from fastapi.templating import Jinja2Templates

from . import editor
from .auth import SharedSecretAuthenticator
from .codec import TEMPLATE_FILENAME, build_template_csv, contribution_filename
from .config import TEMPLATES_DIR, load_app_config
from .errors import CatalogError, NotFoundError, PermissionDenied
from .models import ALL, BOOKMARKS_ID
from .query import initial_sub_category, sub_category_filters
from .seed import load_seed
from .session import CatalogSession, wants_admin_prompt
from .store import JsonFileStore

APP_CONFIG = load_app_config()

app = FastAPI(title=APP_CONFIG.app_title)
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

# 프로세스당 세션 하나 (관리자 상태는 재시작 시 초기화)
_session: Optional[CatalogSession] = None
_session_lock = threading.Lock()


def get_session() -> CatalogSession:
    """세션을 처음 요청할 때 생성"""
    global _session
    with _session_lock:
        if _session is None:
            _session = CatalogSession(
                store=JsonFileStore(APP_CONFIG.store_dir),
                seed=load_seed(APP_CONFIG.seed_path),
                authenticator=SharedSecretAuthenticator(APP_CONFIG.admin_password),
                default_collection=APP_CONFIG.default_collection,
            )
    return _session


def _run(func, *args, **kwargs):
    """카탈로그 예외를 HTTP 오류로 변환"""
    try:
        return func(*args, **kwargs)
    except PermissionDenied as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except CatalogError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def _attachment(content: str, filename: str, media_type: str) -> StreamingResponse:
    return StreamingResponse(
        iter([content]),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _catalog_payload(session: CatalogSession) -> dict:
    payload = session.working_copy.to_dict()
    payload["bookmarks"] = list(session.bookmarks)
    payload["viewMode"] = session.view_mode.value
    return payload


# ---------- visitor ----------

@app.get("/", response_class=HTMLResponse)
def read_home(
    request: Request,
    collection: str = ALL,
    sub: Optional[str] = None,
    q: str = "",
    session: CatalogSession = Depends(get_session),
) -> HTMLResponse:
    """카탈로그 페이지"""
    bookmarks_only = collection == BOOKMARKS_ID
    active = session.working_copy.find_collection(collection)
    # 컬렉션만 고르면 첫 번째 하위 분류가 활성화됨
    sub_category = sub if sub is not None else initial_sub_category(active)
    show_login = wants_admin_prompt(q)

    resources = session.visible_resources(
        active_collection=collection,
        sub_category=sub_category,
        query=q,
        bookmarks_only=bookmarks_only,
    )
    return templates.TemplateResponse(
        request,
        "home.html",
        {
            "app_title": APP_CONFIG.app_title,
            "collections": session.working_copy.collections,
            "tagline_words": session.working_copy.tagline_words,
            "active_collection": active,
            "active_collection_id": collection,
            "sub_category": sub_category,
            "sub_category_filters": [] if bookmarks_only else sub_category_filters(active),
            "search_query": "" if show_login else q,
            "show_login": show_login,
            "resources": resources,
            "bookmarks": session.bookmarks,
            "view_mode": session.view_mode.value,
            "is_admin": session.is_admin,
            "version": session.seed.version,
        },
    )


@app.get("/api/resources")
def list_resources(
    collection: str = ALL,
    sub: str = ALL,
    q: str = "",
    bookmarks: bool = False,
    session: CatalogSession = Depends(get_session),
) -> dict:
    resources = session.visible_resources(
        active_collection=collection,
        sub_category=sub,
        query=q,
        bookmarks_only=bookmarks or collection == BOOKMARKS_ID,
    )
    return {"count": len(resources), "resources": [r.to_dict() for r in resources]}


@app.get("/api/catalog")
def read_catalog(session: CatalogSession = Depends(get_session)) -> dict:
    return _catalog_payload(session)


@app.post("/bookmarks/{resource_id}")
def toggle_bookmark(resource_id: str, session: CatalogSession = Depends(get_session)) -> dict:
    added = session.toggle_bookmark(resource_id)
    return {"bookmarked": added, "bookmarks": list(session.bookmarks)}


@app.post("/view-mode")
def set_view_mode(mode: str = Form(...), session: CatalogSession = Depends(get_session)) -> dict:
    view_mode = _run(session.set_view_mode, mode)
    return {"viewMode": view_mode.value}


# ---------- contributions ----------

@app.get("/contributions")
def list_contributions(session: CatalogSession = Depends(get_session)) -> dict:
    return {"suggestions": [s.to_dict() for s in session.suggestions]}


@app.post("/contributions")
def add_contribution(
    title: str = Form(""),
    url: str = Form(""),
    description: str = Form(""),
    user_name: str = Form(""),
    category: str = Form("general"),
    wants_credit: bool = Form(True),
    session: CatalogSession = Depends(get_session),
) -> dict:
    suggestion = _run(
        session.add_suggestion,
        title=title,
        url=url,
        description=description,
        contributor=user_name,
        category=category,
        wants_credit=wants_credit,
    )
    return {"suggestion": suggestion.to_dict(), "count": len(session.suggestions)}


@app.delete("/contributions/{index}")
def remove_contribution(index: int, session: CatalogSession = Depends(get_session)) -> dict:
    _run(session.remove_suggestion, index)
    return {"count": len(session.suggestions)}


@app.get("/export/contributions")
def export_contributions(session: CatalogSession = Depends(get_session)) -> StreamingResponse:
    """제안 목록 CSV 다운로드"""
    content = _run(session.export_suggestions)
    return _attachment(content, contribution_filename(), "text/csv; charset=utf-8")


@app.get("/export/template")
def export_template() -> StreamingResponse:
    return _attachment(build_template_csv(), TEMPLATE_FILENAME, "text/csv; charset=utf-8")


# ---------- admin ----------

@app.post("/admin/login")
def admin_login(password: str = Form(""), session: CatalogSession = Depends(get_session)) -> dict:
    if not session.login(password):
        raise HTTPException(status_code=401, detail="Incorrect Password")
    return {"admin": True}


@app.post("/admin/logout")
def admin_logout(session: CatalogSession = Depends(get_session)) -> dict:
    session.logout()
    return {"admin": False}


@app.get("/admin/status")
def admin_status(session: CatalogSession = Depends(get_session)) -> dict:
    _run(session.require_admin)
    return session.status()


@app.post("/admin/resources")
def admin_add_resource(session: CatalogSession = Depends(get_session)) -> dict:
    working_copy = _run(session.apply, editor.add_resource)
    return {"resource": working_copy.resources[0].to_dict()}


@app.patch("/admin/resources/{resource_id}")
def admin_update_resource(
    resource_id: str,
    field: str = Form(...),
    value: str = Form(""),
    session: CatalogSession = Depends(get_session),
) -> dict:
    working_copy = _run(session.apply, editor.update_resource_field, resource_id, field, value)
    return {"resource": working_copy.find_resource(resource_id).to_dict()}


@app.delete("/admin/resources/{resource_id}")
def admin_delete_resource(resource_id: str, session: CatalogSession = Depends(get_session)) -> dict:
    working_copy = _run(session.apply, editor.delete_resource, resource_id)
    return {"count": len(working_copy.resources)}


@app.post("/admin/resources/move")
def admin_move_resource(
    index: int = Form(...),
    direction: str = Form(...),
    session: CatalogSession = Depends(get_session),
) -> dict:
    working_copy = _run(session.apply, editor.move_resource, index, direction)
    return {"order": [r.id for r in working_copy.resources]}


@app.post("/admin/collections")
def admin_add_collection(session: CatalogSession = Depends(get_session)) -> dict:
    working_copy = _run(session.apply, editor.add_collection)
    return {"collection": working_copy.collections[-1].to_dict()}


@app.patch("/admin/collections/{collection_id}")
def admin_update_collection(
    collection_id: str,
    field: str = Form(...),
    value: str = Form(""),
    session: CatalogSession = Depends(get_session),
) -> dict:
    working_copy = _run(session.apply, editor.update_collection_field, collection_id, field, value)
    return {"collection": working_copy.find_collection(collection_id).to_dict()}


@app.delete("/admin/collections/{collection_id}")
def admin_delete_collection(collection_id: str, session: CatalogSession = Depends(get_session)) -> dict:
    working_copy = _run(
        session.apply,
        editor.delete_collection,
        collection_id,
        default_id=session.default_collection,
    )
    return {"collections": working_copy.collection_ids()}


@app.post("/admin/collections/move")
def admin_move_collection(
    index: int = Form(...),
    direction: str = Form(...),
    session: CatalogSession = Depends(get_session),
) -> dict:
    working_copy = _run(session.apply, editor.move_collection, index, direction)
    return {"collections": working_copy.collection_ids()}


def _sub_categories(session: CatalogSession, collection_id: str) -> dict:
    collection = session.working_copy.find_collection(collection_id)
    return {"subCategories": list(collection.sub_categories) if collection else []}


@app.post("/admin/collections/{collection_id}/sub-categories")
def admin_add_sub_category(
    collection_id: str,
    label: str = Form(...),
    session: CatalogSession = Depends(get_session),
) -> dict:
    _run(session.apply, editor.add_sub_category, collection_id, label)
    return _sub_categories(session, collection_id)


@app.post("/admin/collections/{collection_id}/sub-categories/move")
def admin_move_sub_category(
    collection_id: str,
    index: int = Form(...),
    direction: str = Form(...),
    session: CatalogSession = Depends(get_session),
) -> dict:
    _run(session.apply, editor.move_sub_category, collection_id, index, direction)
    return _sub_categories(session, collection_id)


@app.patch("/admin/collections/{collection_id}/sub-categories/{index}")
def admin_rename_sub_category(
    collection_id: str,
    index: int,
    label: str = Form(...),
    session: CatalogSession = Depends(get_session),
) -> dict:
    _run(session.apply, editor.rename_sub_category, collection_id, index, label)
    return _sub_categories(session, collection_id)


@app.delete("/admin/collections/{collection_id}/sub-categories/{index}")
def admin_remove_sub_category(
    collection_id: str,
    index: int,
    session: CatalogSession = Depends(get_session),
) -> dict:
    _run(session.apply, editor.remove_sub_category, collection_id, index)
    return _sub_categories(session, collection_id)


@app.post("/admin/taglines")
def admin_add_tagline(word: str = Form(...), session: CatalogSession = Depends(get_session)) -> dict:
    working_copy = _run(session.apply, editor.add_tagline_word, word)
    return {"taglineWords": list(working_copy.tagline_words)}


@app.delete("/admin/taglines/{index}")
def admin_remove_tagline(index: int, session: CatalogSession = Depends(get_session)) -> dict:
    working_copy = _run(session.apply, editor.remove_tagline_word, index)
    return {"taglineWords": list(working_copy.tagline_words)}


@app.post("/admin/import")
async def admin_import(
    file: UploadFile = File(...),
    session: CatalogSession = Depends(get_session),
) -> dict:
    """CSV 일괄 가져오기 (결과는 파일을 다 읽은 뒤에만 알 수 있음)"""
    _run(session.require_admin)
    raw = await file.read()
    text = raw.decode("utf-8-sig", errors="replace")
    report = _run(session.import_csv, text)
    return {"imported": report.imported, "skipped": report.skipped}


@app.get("/admin/export/snapshot")
def admin_export_snapshot(session: CatalogSession = Depends(get_session)) -> StreamingResponse:
    """작업본을 새 seed 파일로 다운로드"""
    snapshot = _run(session.export_snapshot)
    return _attachment(snapshot.content, snapshot.filename, "application/json")


@app.post("/admin/reset")
def admin_reset(session: CatalogSession = Depends(get_session)) -> dict:
    _run(session.reset_cache)
    return _catalog_payload(session)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("heorepo.main:app", reload=True)
