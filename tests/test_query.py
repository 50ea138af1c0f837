"""Tests for the resource filter."""

from heorepo.models import Collection, Resource
from heorepo.query import filter_resources, initial_sub_category, sub_category_filters


def _ids(resources):
    return [r.id for r in resources]


def test_single_resource_scenario() -> None:
    resources = [Resource(id="a", title="Tree", category="modelling", sub_category="Decision Tree")]

    assert _ids(filter_resources(resources, "modelling", "all", "")) == ["a"]
    assert _ids(filter_resources(resources, "modelling", "Markov", "")) == []


def test_all_collection_keeps_storage_order(working_copy) -> None:
    assert _ids(filter_resources(working_copy.resources)) == ["a", "b", "c"]


def test_collection_and_sub_category(working_copy) -> None:
    resources = working_copy.resources
    assert _ids(filter_resources(resources, "modelling")) == ["a", "b"]
    assert _ids(filter_resources(resources, "modelling", "markov")) == ["b"]
    assert _ids(filter_resources(resources, "general", "All")) == ["c"]
    assert _ids(filter_resources(resources, "meta-analysis")) == []


def test_search_matches_title_or_description(working_copy) -> None:
    resources = working_copy.resources
    assert _ids(filter_resources(resources, query="MARKOV")) == ["b"]
    assert _ids(filter_resources(resources, query="economists")) == ["c"]
    assert _ids(filter_resources(resources, "modelling", query="economists")) == []


def test_bookmark_mode_ignores_other_filters(working_copy) -> None:
    visible = filter_resources(
        working_copy.resources,
        active_collection="general",
        sub_category="Markov",
        query="nothing matches this",
        bookmarks_only=True,
        bookmarks=["a"],
    )
    assert _ids(visible) == ["a"]


def test_unknown_sub_category_only_shows_under_all() -> None:
    resources = [Resource(id="x", category="modelling", sub_category="Removed label")]
    assert _ids(filter_resources(resources, "modelling", "all")) == ["x"]
    assert _ids(filter_resources(resources, "modelling", "Markov")) == []


def test_filter_chips_and_initial_selection(working_copy) -> None:
    modelling = working_copy.find_collection("modelling")
    general = working_copy.find_collection("general")

    assert sub_category_filters(modelling) == ["Decision Tree", "Markov", "PSA", "All"]
    assert sub_category_filters(None) == []
    assert initial_sub_category(modelling) == "Decision Tree"
    assert initial_sub_category(general) == "all"
    assert initial_sub_category(Collection(id="empty")) == "all"
