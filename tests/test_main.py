"""Tests for the HTTP surface."""

import json

import pytest
from fastapi.testclient import TestClient

from heorepo.main import app, get_session
from heorepo.store import Slot


@pytest.fixture
def client(session):
    app.dependency_overrides[get_session] = lambda: session
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _login(client) -> None:
    response = client.post("/admin/login", data={"password": "secret"})
    assert response.status_code == 200


def test_home_page_lists_first_sub_category(client) -> None:
    response = client.get("/", params={"collection": "modelling"})
    assert response.status_code == 200
    assert "Decision tree tutorial" in response.text
    assert "Markov models" not in response.text


def test_home_page_admin_keyword_shows_login(client) -> None:
    response = client.get("/", params={"q": "admin"})
    assert response.status_code == 200
    assert "Admin Portal" in response.text


def test_resource_api_filters(client) -> None:
    data = client.get("/api/resources", params={"collection": "modelling", "sub": "all"}).json()
    assert [r["id"] for r in data["resources"]] == ["a", "b"]

    data = client.get("/api/resources", params={"q": "mailing"}).json()
    assert [r["id"] for r in data["resources"]] == ["c"]


def test_bookmark_toggle(client, session) -> None:
    assert client.post("/bookmarks/b").json()["bookmarked"] is True
    data = client.get("/api/resources", params={"collection": "bookmarks"}).json()
    assert [r["id"] for r in data["resources"]] == ["b"]
    assert session.store.load(Slot.BOOKMARKS) == ["b"]


def test_view_mode(client) -> None:
    assert client.post("/view-mode", data={"mode": "list"}).json() == {"viewMode": "list"}
    assert client.post("/view-mode", data={"mode": "tiles"}).status_code == 400


def test_admin_routes_require_login(client) -> None:
    assert client.post("/admin/resources").status_code == 403
    assert client.get("/admin/export/snapshot").status_code == 403
    assert client.post("/admin/login", data={"password": "nope"}).status_code == 401


def test_admin_resource_editing(client) -> None:
    _login(client)

    new = client.post("/admin/resources").json()["resource"]
    assert new["category"] == "modelling"

    updated = client.patch(f"/admin/resources/{new['id']}", data={"field": "url", "value": "example.net"})
    assert updated.json()["resource"]["domain"] == "EXAMPLE.NET"

    order = client.post("/admin/resources/move", data={"index": 0, "direction": "down"}).json()["order"]
    assert order[:2] == ["a", new["id"]]

    assert client.delete(f"/admin/resources/{new['id']}").json() == {"count": 3}
    assert client.delete("/admin/resources/missing").status_code == 404


def test_admin_collection_editing(client) -> None:
    _login(client)

    response = client.post("/admin/collections/modelling/sub-categories", data={"label": "All"})
    assert response.status_code == 400

    subs = client.post("/admin/collections/modelling/sub-categories", data={"label": "Microsim"}).json()
    assert subs["subCategories"][-1] == "Microsim"

    subs = client.delete("/admin/collections/modelling/sub-categories/0").json()
    assert subs["subCategories"] == ["Markov", "PSA", "Microsim"]

    collections = client.delete("/admin/collections/modelling").json()["collections"]
    assert collections == ["meta-analysis", "general"]
    catalog = client.get("/api/catalog").json()
    assert {r["category"] for r in catalog["resources"]} == {"general"}


def test_admin_taglines(client) -> None:
    _login(client)
    assert client.delete("/admin/taglines/0").json() == {"taglineWords": ["psa"]}
    assert client.delete("/admin/taglines/0").status_code == 400


def test_admin_import_and_snapshot(client) -> None:
    _login(client)
    csv_text = (
        "Title,Description,URL,Contributor,Category,SubCategory\r\n"
        '"Fresh","a, b","https://fresh.org","","general",""\r\n'
        '"Dup","","https://RPUBS.com/decision-tree","","general",""\r\n'
    )
    response = client.post("/admin/import", files={"file": ("import.csv", csv_text.encode("utf-8"), "text/csv")})
    assert response.json() == {"imported": 1, "skipped": 1}

    snapshot = client.get("/admin/export/snapshot")
    assert snapshot.status_code == 200
    assert 'filename="seed.json"' in snapshot.headers["content-disposition"]
    payload = json.loads(snapshot.text)
    assert payload["resources"][0]["title"] == "Fresh"
    assert payload["version"] > 100


def test_admin_import_header_only_fails(client) -> None:
    _login(client)
    response = client.post("/admin/import", files={"file": ("empty.csv", b"Title,Description,URL\n", "text/csv")})
    assert response.status_code == 400


def test_contribution_flow(client) -> None:
    assert client.get("/export/contributions").status_code == 400

    bad = client.post("/contributions", data={"title": "x", "url": "https://"})
    assert bad.status_code == 400

    added = client.post(
        "/contributions",
        data={"title": "Guide", "url": "guide.org", "user_name": "Ann", "wants_credit": "false"},
    )
    assert added.json()["count"] == 1

    exported = client.get("/export/contributions")
    assert exported.status_code == 200
    assert exported.text.splitlines()[1] == '"Guide","","guide.org","Anonymous","general","all"'
    assert client.get("/contributions").json() == {"suggestions": []}


def test_template_download(client) -> None:
    response = client.get("/export/template")
    assert 'filename="heorepo_template.csv"' in response.headers["content-disposition"]
    assert response.text.startswith("Title,Description,URL,Contributor,Category,SubCategory\n")
