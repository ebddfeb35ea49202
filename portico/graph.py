"""In-memory content graph for Portico.

The content graph stores every node created during a build: file nodes,
raw documents and typed entities. It indexes parent-child links and serves
sorted typed collections to the page planner.

Re-inserting a node with an unchanged digest is a no-op, so running
ingestion twice over the same source tree never duplicates entities.
Nodes are only removed when a document that shaped before fails on a
later ingestion. During planning the graph is read-only.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
import logging
from collections.abc import Sequence
from typing import Any

from .collections import EntityCollection, SortOrder
from .errors import QueryError
from .schema import SchemaRegistry

logger = logging.getLogger(__name__)


def content_digest(node: Any) -> str:
    """Return a digest of a node's field values."""
    payload = json.dumps(dataclasses.asdict(node), sort_keys=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class ContentGraph:
    """Indexed store of nodes and their parent-child links.

    Attributes:
        registry: Schema registry used to validate typed entities and to
            decide which fields collections may be sorted by.
    """

    def __init__(self, registry: SchemaRegistry | None = None):
        self.registry = registry or SchemaRegistry()
        self._nodes: dict[str, Any] = {}
        self._digests: dict[str, str] = {}
        self._children: dict[str, list[str]] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def insert(self, node: Any) -> bool:
        """Add a node to the graph.

        Typed entities (nodes whose ``type_name`` is registered) are
        validated against their schema first. A node whose id is already
        present is a no-op when its content is unchanged and replaces the
        stored node in place otherwise.

        Args:
            node: Dataclass instance with ``id`` and ``type_name``.

        Returns:
            True if the graph changed.

        Raises:
            SchemaError: If a typed entity does not match its schema.
        """
        if node.type_name in self.registry:
            self.registry.validate(node.type_name, node)
        digest = content_digest(node)
        if self._digests.get(node.id) == digest:
            logger.debug("Node %s (%s) unchanged, skipping", node.id, node.type_name)
            return False
        self._nodes[node.id] = node
        self._digests[node.id] = digest
        return True

    def get(self, node_id: str) -> Any | None:
        return self._nodes.get(node_id)

    def create_parent_child_link(self, parent: Any, child: Any) -> None:
        """Record ``child`` as owned by ``parent``.

        Raises:
            KeyError: If either node has not been inserted.
        """
        for node in (parent, child):
            if node.id not in self._nodes:
                raise KeyError(f"Node {node.id} is not in the content graph")
        children = self._children.setdefault(parent.id, [])
        if child.id not in children:
            children.append(child.id)

    def get_by_parent(self, parent_id: str) -> list[Any]:
        return [self._nodes[child_id] for child_id in self._children.get(parent_id, [])]

    def remove(self, node_id: str) -> None:
        """Delete a node, its descendants and every link pointing at it.

        Removing an id that is not in the graph is a no-op.
        """
        node = self._nodes.pop(node_id, None)
        if node is None:
            return
        self._digests.pop(node_id, None)
        for child_id in self._children.pop(node_id, []):
            self.remove(child_id)
        for children in self._children.values():
            if node_id in children:
                children.remove(node_id)
        logger.debug("Removed node %s (%s)", node_id, node.type_name)

    def remove_children(self, parent_id: str) -> None:
        """Delete every child of a node, leaving the node itself in place."""
        for child_id in list(self._children.get(parent_id, [])):
            self.remove(child_id)

    def find_by_field(self, type_name: str, name: str, value: Any) -> list[Any]:
        """Return nodes of one type whose attribute ``name`` equals ``value``."""
        return [n for n in self.nodes_of_type(type_name) if getattr(n, name, None) == value]

    def nodes_of_type(self, type_name: str) -> list[Any]:
        """Return nodes of one type in insertion order."""
        return [n for n in self._nodes.values() if n.type_name == type_name]

    def query_collection_sorted(
        self,
        type_name: str,
        fields: Sequence[str],
        order: SortOrder = SortOrder.DESC,
    ) -> EntityCollection:
        """Return all entities of a type, stably sorted by ``fields``.

        Args:
            type_name: Registered entity type, e.g. ``BlogPost``.
            fields: Sort keys in priority order.
            order: Sort direction applied to every key.

        Returns:
            Sorted EntityCollection.

        Raises:
            QueryError: If the type is not registered, no sort key is given,
                a key is not declared sortable, or values cannot be compared.
        """
        if type_name not in self.registry:
            raise QueryError(f"Cannot query unregistered type '{type_name}'")
        if not fields:
            raise QueryError(f"Query on '{type_name}' needs at least one sort field")
        sortable = self.registry.get(type_name).sortable_fields
        for name in fields:
            if name not in sortable:
                raise QueryError(
                    f"Field '{name}' is not a sortable field of '{type_name}' "
                    f"(sortable: {', '.join(sortable) or 'none'})"
                )
        collection = EntityCollection(self.nodes_of_type(type_name))
        try:
            return collection.sorted(fields, order)
        except TypeError as exc:
            raise QueryError(f"Cannot sort '{type_name}' by {list(fields)}: {exc}") from exc
