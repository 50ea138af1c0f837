"""Tests for the application session."""

import threading

import pytest

from heorepo import editor
from heorepo.auth import SharedSecretAuthenticator
from heorepo.errors import ExportError, PermissionDenied, ReservedNameError, ValidationError
from heorepo.models import ViewMode
from heorepo.reconciler import read_stored_version
from heorepo.session import CatalogSession
from heorepo.store import Slot, load_resources, save_stored_version


def test_editing_requires_admin(session) -> None:
    with pytest.raises(PermissionDenied):
        session.apply(editor.add_collection)
    assert session.store.load(Slot.COLLECTIONS) is None


def test_login_and_logout(session) -> None:
    assert not session.login("wrong")
    assert not session.is_admin
    assert session.login("  secret ")
    session.logout()
    assert not session.is_admin


def test_failed_login_keeps_admin_mode(admin_session) -> None:
    assert not admin_session.login("wrong")
    assert admin_session.is_admin


def test_mutation_persists_all_slots(admin_session, seed) -> None:
    admin_session.apply(editor.add_tagline_word, "survival")

    store = admin_session.store
    assert store.load(Slot.TAGLINE) == ["markov", "psa", "survival"]
    assert load_resources(store) == seed.resources
    assert store.load(Slot.COLLECTIONS) is not None
    assert read_stored_version(store) == seed.version


def test_no_op_does_not_persist(admin_session) -> None:
    admin_session.apply(editor.move_resource, 0, "up")
    assert admin_session.store.load(Slot.RESOURCES) is None


def test_concurrent_edits_are_all_kept(admin_session) -> None:
    barrier = threading.Barrier(20)

    def add_word(n: int) -> None:
        barrier.wait()
        admin_session.apply(editor.add_tagline_word, f"w{n}")

    threads = [threading.Thread(target=add_word, args=(n,)) for n in range(20)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    words = admin_session.working_copy.tagline_words
    assert len(words) == 22
    assert set(words) == {"markov", "psa"} | {f"w{n}" for n in range(20)}
    assert admin_session.store.load(Slot.TAGLINE) == list(words)


def test_rejection_leaves_working_copy(admin_session) -> None:
    before = admin_session.working_copy
    with pytest.raises(ReservedNameError):
        admin_session.apply(editor.add_sub_category, "modelling", "ALL")
    assert admin_session.working_copy is before


def test_edits_survive_reload(admin_session, seed) -> None:
    admin_session.apply(editor.delete_resource, "c")
    reopened = CatalogSession(admin_session.store, seed, SharedSecretAuthenticator("secret"))

    assert [r.id for r in reopened.working_copy.resources] == ["a", "b"]
    assert not reopened.is_admin


def test_stale_store_is_replaced_by_newer_seed(admin_session, seed) -> None:
    admin_session.apply(editor.delete_resource, "c")
    save_stored_version(admin_session.store, seed.version - 1)

    admin_session.reload()

    assert admin_session.working_copy == seed.working_copy()


def test_reset_cache_restores_seed_and_keeps_bookmarks(admin_session, seed) -> None:
    admin_session.toggle_bookmark("a")
    admin_session.apply(editor.delete_resource, "a")

    admin_session.reset_cache()

    assert admin_session.working_copy == seed.working_copy()
    assert admin_session.bookmarks == ["a"]
    assert admin_session.status()["stored_version"] == 0
    assert admin_session.status()["out_of_sync"] is True


def test_bookmarks_and_view_mode_persist_immediately(session, seed) -> None:
    assert session.toggle_bookmark("b") is True
    assert session.toggle_bookmark("a") is True
    assert session.toggle_bookmark("b") is False
    session.set_view_mode("list")

    reopened = CatalogSession(session.store, seed, SharedSecretAuthenticator("secret"))
    assert reopened.bookmarks == ["a"]
    assert reopened.view_mode is ViewMode.LIST
    with pytest.raises(ValidationError):
        session.set_view_mode("mosaic")


def test_visible_resources_in_bookmark_mode(session) -> None:
    session.toggle_bookmark("a")
    visible = session.visible_resources("general", "Markov", "zzz", bookmarks_only=True)
    assert [r.id for r in visible] == ["a"]


def test_admin_keyword_does_not_filter(session) -> None:
    assert len(session.visible_resources(query="Admin")) == 3


def test_import_and_snapshot(admin_session) -> None:
    report = admin_session.import_csv(
        'Title,Description,URL,Contributor,Category,SubCategory\n"New","","https://new.org","","general",""'
    )
    assert (report.imported, report.skipped) == (1, 0)
    assert admin_session.working_copy.resources[0].title == "New"
    assert admin_session.store.load(Slot.RESOURCES)[0]["title"] == "New"

    snapshot = admin_session.export_snapshot(now=2.0)
    assert snapshot.version == 2000


def test_suggestion_list(session) -> None:
    with pytest.raises(ExportError):
        session.export_suggestions()
    with pytest.raises(ValidationError):
        session.add_suggestion(title="No url", url="")

    session.add_suggestion(title="One", url="one.org", contributor="Ann", wants_credit=False)
    session.add_suggestion(title="Two", url="two.org")
    session.remove_suggestion(1)
    with pytest.raises(ValidationError):
        session.remove_suggestion(3)

    content = session.export_suggestions()
    assert content.splitlines()[1] == '"One","","one.org","Anonymous","general","all"'
    assert session.suggestions == []
