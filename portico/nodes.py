"""Typed content entities and node shaping.

Shaping turns a raw document into a typed entity: it derives a stable
identifier and a slug, reads the declared front-matter fields through the
type's schema, registers the entity in the content graph and links it back
to the raw document it came from.

Key classes:
- BlogPost / PortfolioItem: Typed entity variants.
- NodeShaper: Classifies and shapes raw documents into entities.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Union

from .config import ContentType, ThemeConfig, classify
from .errors import InvalidFieldError, InvalidSlugError, MissingRequiredFieldError
from .graph import ContentGraph
from .schema import SchemaRegistry, TypeSchema
from .sources import FileNode, RawDocument, create_node_id
from .utils import derive_slug, strip_extension

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlogPost:
    """A blog post shaped from a document in the blog content directory."""

    type_name: ClassVar[str] = ContentType.BLOG_POST.value

    id: str
    parent: str
    slug: str
    title: str
    date: datetime
    tags: tuple[str, ...] = ()
    excerpt: str = ""
    body: str = ""
    frontmatter: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PortfolioItem:
    """A portfolio item shaped from a document in the portfolio content directory."""

    type_name: ClassVar[str] = ContentType.PORTFOLIO_ITEM.value

    id: str
    parent: str
    slug: str
    title: str
    published_date: datetime
    tags: tuple[str, ...] = ()
    excerpt: str = ""
    body: str = ""
    frontmatter: dict[str, Any] = field(default_factory=dict)


ContentEntity = Union[BlogPost, PortfolioItem]

ENTITY_CLASSES: dict[ContentType, type] = {
    ContentType.BLOG_POST: BlogPost,
    ContentType.PORTFOLIO_ITEM: PortfolioItem,
}


def entity_id(content_type: ContentType, raw: RawDocument) -> str:
    """Derive a typed entity's identifier from its raw document."""
    return create_node_id(f"{raw.id} >>> {content_type.value}")


class NodeShaper:
    """Shapes raw documents into typed entities.

    Attributes:
        config: Theme configuration (base paths and content directories).
        graph: Content graph receiving new entities.
        registry: Schema registry describing each entity's fields.
    """

    def __init__(self, config: ThemeConfig, graph: ContentGraph, registry: SchemaRegistry):
        self.config = config
        self.graph = graph
        self.registry = registry

    def handle(self, raw: RawDocument) -> ContentEntity | None:
        """Classify a raw document and shape it when its directory is typed.

        Args:
            raw: Raw document already inserted into the graph.

        Returns:
            The new entity, or None when the document's source directory is
            not registered for typed ingestion.

        Raises:
            KeyError: If the document's parent file node is not in the graph.
            ShapingError: If the document cannot be shaped.
        """
        file_node = self.graph.get(raw.parent)
        if file_node is None:
            raise KeyError(f"Parent file node {raw.parent} of {raw.id} is not in the content graph")
        content_type = classify(file_node.source_instance_name, self.config)
        if content_type is None:
            logger.debug(
                "No content type for %s/%s, skipping",
                file_node.source_instance_name,
                file_node.relative_path,
            )
            return None
        return self.shape(raw, file_node, content_type)

    def shape(
        self, raw: RawDocument, file_node: FileNode, content_type: ContentType
    ) -> ContentEntity:
        """Build a typed entity, register it and link it to its raw document.

        Args:
            raw: The raw document.
            file_node: The raw document's parent file node.
            content_type: Classification of the document.

        Returns:
            The new entity.

        Raises:
            InvalidSlugError: If the document path yields no usable slug or
                another entity already owns the slug.
            MissingRequiredFieldError: If a required field is absent.
            InvalidFieldError: If a field value cannot be coerced.
        """
        source_path = f"{file_node.source_instance_name}/{file_node.relative_path}"
        try:
            slug = derive_slug(
                self.config.base_path(content_type.collection),
                strip_extension(file_node.relative_path),
            )
        except InvalidSlugError as exc:
            raise InvalidSlugError(source_path, exc.message) from exc
        new_id = entity_id(content_type, raw)
        for other in self._entities_with_slug(slug):
            if other.id != new_id:
                raise InvalidSlugError(
                    source_path,
                    f"slug '{slug}' is already used by {self._source_path_of(other)}",
                )
        schema = self.registry.get(content_type.value)
        values = self._read_fields(schema, raw, file_node, source_path)
        entity = ENTITY_CLASSES[content_type](
            id=new_id,
            parent=raw.id,
            slug=slug,
            body=raw.body,
            frontmatter=dict(raw.frontmatter),
            **values,
        )
        self.graph.insert(entity)
        self.graph.create_parent_child_link(raw, entity)
        return entity

    def _entities_with_slug(self, slug: str) -> list[ContentEntity]:
        return [
            entity
            for content_type in ENTITY_CLASSES
            for entity in self.graph.find_by_field(content_type.value, "slug", slug)
        ]

    def _source_path_of(self, entity: ContentEntity) -> str:
        raw = self.graph.get(entity.parent)
        file_node = self.graph.get(raw.parent) if raw is not None else None
        if file_node is None:
            return entity.id
        return f"{file_node.source_instance_name}/{file_node.relative_path}"

    def _read_fields(
        self,
        schema: TypeSchema,
        raw: RawDocument,
        file_node: FileNode,
        source_path: str,
    ) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for spec in schema.fields:
            present = [k for k in spec.keys if raw.frontmatter.get(k) not in (None, "")]
            if present:
                try:
                    values[spec.name] = spec.coerce(raw.frontmatter[present[0]])
                except ValueError as exc:
                    raise InvalidFieldError(source_path, present[0], str(exc)) from exc
            elif spec.required:
                raise MissingRequiredFieldError(source_path, spec.keys[0])
            elif spec.default is not None:
                values[spec.name] = spec.default(raw, file_node)
        return values
