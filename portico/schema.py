"""Schema declarations for typed content entities.

The schema registry tells the content graph which typed entities exist,
which fields they carry and which of those fields can be used as sort keys.
Node shaping reads front matter through the same declarations, so the
fields an entity is built from and the fields it is validated against
cannot drift apart.

Key classes:
- FieldSpec: One declared field of a typed entity.
- TypeSchema: The full field set of a typed entity.
- SchemaRegistry: Registry of type schemas, populated once per build.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from .config import ContentType
from .errors import SchemaError
from .utils import coerce_datetime, first_paragraph, titleize

if TYPE_CHECKING:
    from .sources import FileNode, RawDocument

DefaultFactory = Callable[["RawDocument", "FileNode"], Any]


def _coerce_str(value: Any) -> str:
    if isinstance(value, (dict, list, tuple)):
        raise ValueError(f"expected text, got {type(value).__name__}")
    return str(value).strip()


def _coerce_tags(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        raise ValueError(f"expected a list, got {type(value).__name__}")
    tags: list[str] = []
    for item in items:
        tag = str(item).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tuple(tags)


_COERCERS: dict[type, Callable[[Any], Any]] = {
    str: _coerce_str,
    datetime: coerce_datetime,
    tuple: _coerce_tags,
}


@dataclass(frozen=True)
class FieldSpec:
    """A declared field of a typed entity.

    Attributes:
        name: Attribute name on the entity.
        type: Python type of the stored value (``str``, ``datetime`` or ``tuple``).
        required: Whether a document without this field is rejected.
        sortable: Whether the field may be used as a sort key.
        default: Factory computing a value from the source document when the
            front matter omits the field.
        aliases: Front-matter keys to read, in priority order. Defaults to
            the field name.
    """

    name: str
    type: type
    required: bool = False
    sortable: bool = False
    default: DefaultFactory | None = field(default=None, compare=False)
    aliases: tuple[str, ...] = ()

    @property
    def keys(self) -> tuple[str, ...]:
        return self.aliases or (self.name,)

    def coerce(self, value: Any) -> Any:
        """Convert a raw front-matter value to the declared type.

        Raises:
            ValueError: If the value cannot be converted.
        """
        coercer = _COERCERS.get(self.type)
        if coercer is None:
            return value
        return coercer(value)


@dataclass(frozen=True)
class TypeSchema:
    """Field declarations for one typed entity."""

    name: str
    fields: tuple[FieldSpec, ...]

    def field(self, name: str) -> FieldSpec | None:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    @property
    def sortable_fields(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self.fields if spec.sortable)


class SchemaRegistry:
    """Registry of typed entity schemas.

    Registration order does not matter. Registering an identical schema twice
    is a no-op so the registrar can run on every build.
    """

    def __init__(self) -> None:
        self._schemas: dict[str, TypeSchema] = {}

    def register(self, *schemas: TypeSchema) -> None:
        """Declare one or more type schemas.

        Raises:
            SchemaError: If a schema is malformed or conflicts with an
                already registered schema of the same name.
        """
        for schema in schemas:
            self._check(schema)
            existing = self._schemas.get(schema.name)
            if existing is not None and existing != schema:
                raise SchemaError(f"Type '{schema.name}' is already registered with a different shape")
            self._schemas[schema.name] = schema

    def _check(self, schema: TypeSchema) -> None:
        names = [spec.name for spec in schema.fields]
        if len(names) != len(set(names)):
            raise SchemaError(f"Type '{schema.name}' declares a field more than once")
        for spec in schema.fields:
            if spec.type not in _COERCERS:
                raise SchemaError(
                    f"Field '{schema.name}.{spec.name}' has unsupported type {spec.type.__name__}"
                )
            if spec.sortable and not (spec.required or spec.default is not None):
                raise SchemaError(
                    f"Sortable field '{schema.name}.{spec.name}' must be required or have a default"
                )

    def get(self, name: str) -> TypeSchema:
        try:
            return self._schemas[name]
        except KeyError:
            raise SchemaError(f"Unknown type '{name}'") from None

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def names(self) -> list[str]:
        return sorted(self._schemas)

    def validate(self, type_name: str, values: Any) -> None:
        """Check an entity's attributes against its declared schema.

        Args:
            type_name: Registered type name.
            values: Object exposing the declared fields as attributes.

        Raises:
            SchemaError: If the type is unknown, a required field is missing
                or a value has the wrong type.
        """
        schema = self.get(type_name)
        for spec in schema.fields:
            value = getattr(values, spec.name, None)
            if value is None:
                if spec.required:
                    raise SchemaError(f"{type_name}.{spec.name} is required")
                continue
            if not isinstance(value, spec.type):
                raise SchemaError(
                    f"{type_name}.{spec.name} expected {spec.type.__name__}, "
                    f"got {type(value).__name__}"
                )


def _default_title(raw: RawDocument, file_node: FileNode) -> str:
    return titleize(file_node.relative_path)


def _default_excerpt(raw: RawDocument, file_node: FileNode) -> str:
    return first_paragraph(raw.body)


def _default_tags(raw: RawDocument, file_node: FileNode) -> tuple[str, ...]:
    return ()


BLOG_POST_SCHEMA = TypeSchema(
    name=ContentType.BLOG_POST.value,
    fields=(
        FieldSpec("title", str, sortable=True, default=_default_title),
        FieldSpec("date", datetime, required=True, sortable=True),
        FieldSpec("tags", tuple, default=_default_tags),
        FieldSpec("excerpt", str, default=_default_excerpt),
    ),
)

PORTFOLIO_ITEM_SCHEMA = TypeSchema(
    name=ContentType.PORTFOLIO_ITEM.value,
    fields=(
        FieldSpec("title", str, sortable=True, default=_default_title),
        FieldSpec(
            "published_date",
            datetime,
            required=True,
            sortable=True,
            aliases=("publishedDate", "published_date"),
        ),
        FieldSpec("tags", tuple, default=_default_tags),
        FieldSpec("excerpt", str, default=_default_excerpt),
    ),
)

DEFAULT_SCHEMAS: tuple[TypeSchema, ...] = (BLOG_POST_SCHEMA, PORTFOLIO_ITEM_SCHEMA)


def register_default_types(
    registry: SchemaRegistry, extra: Iterable[TypeSchema] = ()
) -> SchemaRegistry:
    """Declare the built-in entity types (and any extras) on a registry.

    Args:
        registry: Registry to populate.
        extra: Additional schemas to register alongside the defaults.

    Returns:
        The same registry, for chaining.
    """
    registry.register(*DEFAULT_SCHEMAS, *extra)
    return registry
