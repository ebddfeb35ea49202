from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class SortOrder(str, enum.Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class Edge(Generic[T]):
    """A node with its neighbors in a sorted collection."""

    node: T
    previous: T | None
    next: T | None


class EntityCollection(Sequence[T]):
    """Lightweight ordered view over typed entities from the content graph."""

    def __init__(self, entities: Iterable[T]):
        self._entities = list(entities)

    def __iter__(self) -> Iterator[T]:
        return iter(self._entities)

    def __len__(self) -> int:
        return len(self._entities)

    def __getitem__(self, item):
        return self._entities[item]

    def sorted(
        self, fields: Sequence[str], order: SortOrder = SortOrder.DESC
    ) -> EntityCollection[T]:
        """Sort entities by the given fields, primary key first.

        The sort is stable in both directions: entities that tie on every
        key keep their current relative order, including under DESC.

        Args:
            fields: Attribute names to sort by, in priority order.
            order: ASC or DESC, applied to all keys.

        Returns:
            A new EntityCollection with sorted entities.
        """

        def sort_key(entity: T) -> tuple[Any, ...]:
            return tuple(getattr(entity, name) for name in fields)

        return EntityCollection(
            sorted(self._entities, key=sort_key, reverse=order is SortOrder.DESC)
        )

    def edges(self) -> Iterator[Edge[T]]:
        """Yield each entity with its previous and next neighbor."""
        last = len(self._entities) - 1
        for index, entity in enumerate(self._entities):
            yield Edge(
                node=entity,
                previous=self._entities[index - 1] if index > 0 else None,
                next=self._entities[index + 1] if index < last else None,
            )

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"EntityCollection({len(self._entities)} entities)"
