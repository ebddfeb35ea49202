"""Tests for the schema registry, content graph and entity collections."""

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar

import pytest

from portico.collections import EntityCollection, SortOrder
from portico.errors import QueryError, SchemaError
from portico.graph import ContentGraph
from portico.schema import (
    BLOG_POST_SCHEMA,
    FieldSpec,
    SchemaRegistry,
    TypeSchema,
    register_default_types,
)


@dataclass(frozen=True)
class Note:
    type_name: ClassVar[str] = "Note"

    id: str
    parent: str | None
    title: str
    date: datetime
    tags: tuple = ()


@dataclass(frozen=True)
class Loose:
    type_name: ClassVar[str] = "Loose"

    id: str
    parent: str | None = None


NOTE_SCHEMA = TypeSchema(
    name="Note",
    fields=(
        FieldSpec("title", str, required=True, sortable=True),
        FieldSpec("date", datetime, required=True, sortable=True),
        FieldSpec("tags", tuple),
    ),
)


def make_graph() -> ContentGraph:
    registry = SchemaRegistry()
    registry.register(NOTE_SCHEMA)
    return ContentGraph(registry)


# --- Schema registry ---


def test_register_default_types_is_repeatable():
    registry = register_default_types(SchemaRegistry())
    register_default_types(registry)
    assert registry.names() == ["BlogPost", "PortfolioItem"]
    assert registry.get("BlogPost") is BLOG_POST_SCHEMA
    assert BLOG_POST_SCHEMA.sortable_fields == ("title", "date")
    assert registry.get("PortfolioItem").field("published_date").keys == (
        "publishedDate",
        "published_date",
    )


def test_conflicting_registration_fails():
    registry = SchemaRegistry()
    registry.register(NOTE_SCHEMA)
    changed = TypeSchema(name="Note", fields=(FieldSpec("title", str, required=True),))
    with pytest.raises(SchemaError, match="different shape"):
        registry.register(changed)


def test_malformed_schemas_are_rejected():
    registry = SchemaRegistry()
    with pytest.raises(SchemaError, match="more than once"):
        registry.register(
            TypeSchema(name="Dup", fields=(FieldSpec("a", str), FieldSpec("a", str)))
        )
    with pytest.raises(SchemaError, match="must be required or have a default"):
        registry.register(TypeSchema(name="Bad", fields=(FieldSpec("a", str, sortable=True),)))
    with pytest.raises(SchemaError, match="unsupported type"):
        registry.register(TypeSchema(name="Odd", fields=(FieldSpec("a", dict),)))
    with pytest.raises(SchemaError, match="Unknown type"):
        registry.get("Missing")


def test_field_coercion():
    tags = FieldSpec("tags", tuple)
    assert tags.coerce("a, b, a") == ("a", "b")
    assert tags.coerce(["x", 2]) == ("x", "2")
    with pytest.raises(ValueError):
        tags.coerce(5)
    title = FieldSpec("title", str)
    assert title.coerce(" Hi ") == "Hi"
    with pytest.raises(ValueError):
        title.coerce({"a": 1})
    assert FieldSpec("date", datetime).coerce("2024-05-01") == datetime(2024, 5, 1)


def test_validate_checks_required_and_types():
    registry = SchemaRegistry()
    registry.register(NOTE_SCHEMA)
    registry.validate("Note", Note("n1", None, "T", datetime(2024, 1, 1)))
    with pytest.raises(SchemaError, match="expected datetime"):
        registry.validate("Note", Note("n1", None, "T", "2024-01-01"))
    with pytest.raises(SchemaError, match="is required"):
        registry.validate("Note", Note("n1", None, None, datetime(2024, 1, 1)))


# --- Content graph ---


def test_insert_is_idempotent_and_updates_changed_nodes():
    graph = make_graph()
    note = Note("n1", None, "First", datetime(2024, 1, 1))
    assert graph.insert(note) is True
    assert graph.insert(Note("n1", None, "First", datetime(2024, 1, 1))) is False
    assert len(graph) == 1

    changed = Note("n1", None, "Renamed", datetime(2024, 1, 1))
    assert graph.insert(changed) is True
    assert len(graph) == 1
    assert graph.get("n1").title == "Renamed"


def test_insert_validates_typed_entities():
    graph = make_graph()
    with pytest.raises(SchemaError):
        graph.insert(Note("n1", None, "T", "not a date"))
    assert "n1" not in graph


def test_untyped_nodes_are_stored_without_validation():
    graph = make_graph()
    assert graph.insert(Loose("raw"))
    assert graph.get("raw") == Loose("raw")
    assert graph.get("other") is None


def test_parent_child_links():
    graph = make_graph()
    parent = Loose("raw")
    child = Note("n1", "raw", "T", datetime(2024, 1, 1))
    graph.insert(parent)
    graph.insert(child)
    graph.create_parent_child_link(parent, child)
    graph.create_parent_child_link(parent, child)
    assert graph.get_by_parent("raw") == [child]
    assert graph.get_by_parent("n1") == []

    with pytest.raises(KeyError):
        graph.create_parent_child_link(parent, Loose("ghost"))


def test_remove_deletes_descendants_and_links():
    graph = make_graph()
    file_node = Loose("file")
    raw = Loose("raw", "file")
    child = Note("n1", "raw", "T", datetime(2024, 1, 1))
    for node in (file_node, raw, child):
        graph.insert(node)
    graph.create_parent_child_link(file_node, raw)
    graph.create_parent_child_link(raw, child)

    graph.remove_children("raw")
    assert "n1" not in graph
    assert graph.get_by_parent("raw") == []
    assert graph.get_by_parent("file") == [raw]
    assert graph.insert(child) is True

    graph.create_parent_child_link(raw, child)
    graph.remove("file")
    assert len(graph) == 0
    graph.remove("file")


def test_find_by_field():
    graph = make_graph()
    graph.insert(Note("a", None, "Same", datetime(2024, 1, 1)))
    graph.insert(Note("b", None, "Other", datetime(2024, 1, 1)))
    graph.insert(Note("c", None, "Same", datetime(2024, 1, 2)))
    assert [n.id for n in graph.find_by_field("Note", "title", "Same")] == ["a", "c"]
    assert graph.find_by_field("Loose", "title", "Same") == []


def test_query_collection_sorted_descending_with_tiebreak():
    graph = make_graph()
    graph.insert(Note("a", None, "Alpha", datetime(2023, 6, 1)))
    graph.insert(Note("b", None, "Beta", datetime(2024, 1, 1)))
    graph.insert(Note("c", None, "Gamma", datetime(2023, 6, 1)))
    graph.insert(Loose("raw"))

    result = graph.query_collection_sorted("Note", ["date", "title"])
    assert [n.id for n in result] == ["b", "c", "a"]
    ascending = graph.query_collection_sorted("Note", ["date"], SortOrder.ASC)
    assert [n.id for n in ascending] == ["a", "c", "b"]


def test_query_failures_raise_query_error():
    graph = make_graph()
    with pytest.raises(QueryError, match="unregistered type"):
        graph.query_collection_sorted("BlogPost", ["date"])
    with pytest.raises(QueryError, match="not a sortable field"):
        graph.query_collection_sorted("Note", ["tags"])
    with pytest.raises(QueryError, match="at least one sort field"):
        graph.query_collection_sorted("Note", [])


# --- Entity collection ---


def test_sort_is_stable_for_full_ties_in_both_directions():
    notes = [Note(str(i), None, "Same", datetime(2024, 1, 1)) for i in range(5)]
    collection = EntityCollection(notes)
    for _ in range(3):
        desc = collection.sorted(["date", "title"], SortOrder.DESC)
        asc = collection.sorted(["date", "title"], SortOrder.ASC)
        assert [n.id for n in desc] == ["0", "1", "2", "3", "4"]
        assert [n.id for n in asc] == ["0", "1", "2", "3", "4"]


def test_edges_have_absent_neighbors_at_boundaries():
    notes = EntityCollection(
        [Note(str(i), None, f"N{i}", datetime(2024, 1, i + 1)) for i in range(3)]
    )
    edges = list(notes.edges())
    assert edges[0].previous is None
    assert edges[0].next.id == "1"
    assert edges[1].previous.id == "0"
    assert edges[1].next.id == "2"
    assert edges[2].next is None

    single = list(EntityCollection(notes[:1]).edges())
    assert single[0].previous is None and single[0].next is None
    assert list(EntityCollection([]).edges()) == []

