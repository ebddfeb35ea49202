from datetime import datetime

import pytest

from portico.collections import SortOrder
from portico.config import ThemeConfig, config_from_dict
from portico.errors import QueryError
from portico.graph import ContentGraph
from portico.nodes import BlogPost, PortfolioItem
from portico.pages import (
    BLOG_POST_TEMPLATE,
    COLLECTION_PAGES,
    PORTFOLIO_ITEM_TEMPLATE,
    CollectionPageSpec,
    NeighborSummary,
    PageDescriptor,
    auxiliary_pages,
    build_page_manifest,
    plan_collection,
    plan_pages,
)
from portico.schema import SchemaRegistry, register_default_types


def post(key: str, title: str, day: datetime) -> BlogPost:
    return BlogPost(id=key, parent=f"raw-{key}", slug=f"/blog/{key}/", title=title, date=day)


def make_graph(*entities) -> ContentGraph:
    graph = ContentGraph(register_default_types(SchemaRegistry()))
    for entity in entities:
        graph.insert(entity)
    return graph


def test_plan_pages_links_neighbors_in_sorted_order():
    a = post("a", "Alpha", datetime(2024, 1, 1))
    b = post("b", "Same", datetime(2023, 6, 1))
    c = post("c", "Same", datetime(2023, 6, 1))
    pages = plan_pages([b, a, c], ["date", "title"], SortOrder.DESC, BLOG_POST_TEMPLATE)

    assert [p.path for p in pages] == ["/blog/a/", "/blog/b/", "/blog/c/"]
    assert all(p.template == BLOG_POST_TEMPLATE for p in pages)
    first, middle, last = pages
    assert first.context["id"] == "a"
    assert first.context["previous"] is None
    assert first.context["next"] == NeighborSummary(id="b", slug="/blog/b/", title="Same")
    assert middle.context["previous"].id == "a"
    assert middle.context["next"].id == "c"
    assert last.context["previous"].id == "b"
    assert last.context["next"] is None


def test_plan_pages_is_stable_across_runs():
    entities = [post(k, "Same", datetime(2024, 1, 1)) for k in ("x", "y", "z")]
    runs = [[p.path for p in plan_pages(entities, ["date", "title"])] for _ in range(3)]
    assert runs[0] == ["/blog/x/", "/blog/y/", "/blog/z/"]
    assert runs[0] == runs[1] == runs[2]


def test_plan_pages_edge_cases():
    assert plan_pages([], ["date"]) == []
    single = plan_pages([post("solo", "Solo", datetime(2024, 1, 1))], ["date"])
    assert single[0].context == {"id": "solo", "previous": None, "next": None}


def test_plan_collection_queries_graph():
    graph = make_graph(
        post("old", "Old", datetime(2020, 1, 1)),
        post("new", "New", datetime(2024, 1, 1)),
    )
    pages = plan_collection(graph, COLLECTION_PAGES[0])
    assert [p.path for p in pages] == ["/blog/new/", "/blog/old/"]
    assert pages[0].context["next"].title == "Old"


def test_plan_collection_query_failure_is_fatal():
    graph = make_graph()
    bad = CollectionPageSpec(COLLECTION_PAGES[0].content_type, ("slug",), BLOG_POST_TEMPLATE)
    with pytest.raises(QueryError):
        plan_collection(graph, bad)

    unregistered = ContentGraph(SchemaRegistry())
    with pytest.raises(QueryError):
        build_page_manifest(unregistered, ThemeConfig())


def test_auxiliary_pages_use_configured_base_paths():
    config = config_from_dict({"base_paths": {"blog": "/writing", "services": "services"}})
    pages = {p.path: p for p in auxiliary_pages(config)}
    assert list(pages) == ["/", "/writing/", "/portfolio/", "/references/", "/services/"]
    assert pages["/"].context["heading"] == "Home"
    assert pages["/writing/"].template == "blog-posts"
    assert pages["/portfolio/"].template == "portfolio"
    assert pages["/references/"].template == "page"
    assert all(p.context["show_in_navigation"] for p in pages.values())
    assert "id" not in pages["/services/"].context


def test_build_page_manifest_orders_entities_then_auxiliary_pages():
    item = PortfolioItem(
        id="p1",
        parent="raw-p1",
        slug="/portfolio/p1/",
        title="Project",
        published_date=datetime(2022, 5, 5),
    )
    graph = make_graph(post("a", "A", datetime(2024, 1, 1)), item)
    manifest = build_page_manifest(graph, ThemeConfig())
    assert [(p.path, p.template) for p in manifest[:2]] == [
        ("/blog/a/", BLOG_POST_TEMPLATE),
        ("/portfolio/p1/", PORTFOLIO_ITEM_TEMPLATE),
    ]
    assert [p.path for p in manifest[2:]] == [
        "/",
        "/blog/",
        "/portfolio/",
        "/references/",
        "/services/",
    ]


def test_page_descriptor_to_dict():
    page = PageDescriptor(
        path="/blog/a/",
        template=BLOG_POST_TEMPLATE,
        context={"id": "a", "previous": None, "next": NeighborSummary("b", "/blog/b/", "B")},
    )
    assert page.to_dict() == {
        "path": "/blog/a/",
        "template": "blog-post",
        "context": {
            "id": "a",
            "previous": None,
            "next": {"id": "b", "slug": "/blog/b/", "title": "B"},
        },
    }
