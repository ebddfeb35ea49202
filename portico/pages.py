"""Page planning for Portico.

This module turns typed collections into page descriptors and merges them
with the fixed auxiliary pages (landing page and collection index pages)
into the manifest handed to the render layer.

Key members:
- PageDescriptor: A planned output page.
- NeighborSummary: Previous/next link data carried in a page's context.
- CollectionPageSpec: How one typed collection is queried and rendered.
- plan_pages: Emits descriptors for an already sorted collection.
- plan_collection: Queries the graph and plans one collection.
- auxiliary_pages: The static, author-configured single pages.
- build_page_manifest: Assembles the full manifest.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .collections import EntityCollection, SortOrder
from .config import Collection, ContentType, ThemeConfig
from .graph import ContentGraph
from .utils import join_url_path

PAGE_TEMPLATE = "page"
BLOG_POSTS_TEMPLATE = "blog-posts"
BLOG_POST_TEMPLATE = "blog-post"
PORTFOLIO_TEMPLATE = "portfolio"
PORTFOLIO_ITEM_TEMPLATE = "portfolio-item"


@dataclass(frozen=True)
class NeighborSummary:
    id: str
    slug: str
    title: str

    @classmethod
    def of(cls, entity: Any | None) -> NeighborSummary | None:
        if entity is None:
            return None
        return cls(id=entity.id, slug=entity.slug, title=entity.title)

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "slug": self.slug, "title": self.title}


@dataclass(frozen=True)
class PageDescriptor:
    """A planned output page.

    Attributes:
        path: URL path of the page.
        template: Name of the template the render layer should use.
        context: Values passed to the template. Entity pages carry ``id``,
            ``previous`` and ``next``; auxiliary pages carry static content.
    """

    path: str
    template: str
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        context = {
            key: value.to_dict() if isinstance(value, NeighborSummary) else value
            for key, value in self.context.items()
        }
        return {"path": self.path, "template": self.template, "context": context}


@dataclass(frozen=True)
class CollectionPageSpec:
    """How a typed collection is queried and which template renders it."""

    content_type: ContentType
    sort_fields: tuple[str, ...]
    template: str
    order: SortOrder = SortOrder.DESC


COLLECTION_PAGES: tuple[CollectionPageSpec, ...] = (
    CollectionPageSpec(ContentType.BLOG_POST, ("date", "title"), BLOG_POST_TEMPLATE),
    CollectionPageSpec(
        ContentType.PORTFOLIO_ITEM, ("published_date", "title"), PORTFOLIO_ITEM_TEMPLATE
    ),
)


def plan_pages(
    collection: Iterable[Any],
    sort_keys: Sequence[str],
    order: SortOrder = SortOrder.DESC,
    template: str = PAGE_TEMPLATE,
) -> list[PageDescriptor]:
    """Emit one page descriptor per entity with chronological neighbors.

    Args:
        collection: Entities in graph insertion order.
        sort_keys: Attribute names to sort by, primary first.
        order: Sort direction.
        template: Template for every emitted page.

    Returns:
        Descriptors in sorted order. The first has no ``previous`` and the
        last has no ``next``.
    """
    entities = EntityCollection(collection).sorted(sort_keys, order)
    return _pages_from_edges(entities, template)


def _pages_from_edges(entities: EntityCollection, template: str) -> list[PageDescriptor]:
    return [
        PageDescriptor(
            path=edge.node.slug,
            template=template,
            context={
                "id": edge.node.id,
                "previous": NeighborSummary.of(edge.previous),
                "next": NeighborSummary.of(edge.next),
            },
        )
        for edge in entities.edges()
    ]


def plan_collection(graph: ContentGraph, spec: CollectionPageSpec) -> list[PageDescriptor]:
    """Query one typed collection from the graph and plan its pages.

    Raises:
        QueryError: If the query fails. This aborts page generation.
    """
    entities = graph.query_collection_sorted(
        spec.content_type.value, spec.sort_fields, spec.order
    )
    return _pages_from_edges(entities, spec.template)


def auxiliary_pages(config: ThemeConfig) -> list[PageDescriptor]:
    """Return the landing page and the collection index pages."""
    return [
        PageDescriptor(
            path="/",
            template=PAGE_TEMPLATE,
            context={
                "heading": "Home",
                "show_in_navigation": True,
                "content": "<p>Homepage gathers everything together</p>",
            },
        ),
        PageDescriptor(
            path=join_url_path(config.base_path(Collection.BLOG)),
            template=BLOG_POSTS_TEMPLATE,
            context={"heading": "Blog", "show_in_navigation": True},
        ),
        PageDescriptor(
            path=join_url_path(config.base_path(Collection.PORTFOLIO)),
            template=PORTFOLIO_TEMPLATE,
            context={"heading": "Portfolio", "show_in_navigation": True},
        ),
        PageDescriptor(
            path=join_url_path(config.base_path(Collection.REFERENCES)),
            template=PAGE_TEMPLATE,
            context={
                "heading": "References",
                "show_in_navigation": True,
                "content": "<p>Your cool references show up here</p>",
            },
        ),
        PageDescriptor(
            path=join_url_path(config.base_path(Collection.SERVICES)),
            template=PAGE_TEMPLATE,
            context={
                "heading": "Services",
                "show_in_navigation": True,
                "content": "<p>Show here what you can offer to customers</p>",
            },
        ),
    ]


def build_page_manifest(
    graph: ContentGraph,
    config: ThemeConfig,
    specs: Sequence[CollectionPageSpec] = COLLECTION_PAGES,
) -> list[PageDescriptor]:
    """Assemble the full, ordered page manifest.

    Entity pages come first, collection by collection, followed by the
    auxiliary pages. Any query failure propagates and no partial manifest
    is returned.

    Args:
        graph: Populated content graph.
        config: Theme configuration.
        specs: Typed collections to plan.

    Returns:
        Ordered list of page descriptors.
    """
    manifest: list[PageDescriptor] = []
    for spec in specs:
        manifest.extend(plan_collection(graph, spec))
    manifest.extend(auxiliary_pages(config))
    return manifest
