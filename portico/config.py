"""Theme configuration for Portico.

Configuration is read once at build start from ``portico.yaml`` and frozen
into a ``ThemeConfig`` value that is passed explicitly to every component.
Collection keys are validated against the closed ``Collection`` enum so a
typo fails loudly at startup instead of silently leaving a directory
unclassified.

Key members:
- Collection: Configurable site sections.
- ContentType: Typed entity variants produced by ingestion.
- ThemeConfig: Immutable configuration value.
- load_config: Reads and validates ``portico.yaml``.
- classify: Maps a source directory name to a ContentType.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from .errors import ConfigError

CONFIG_FILENAME = "portico.yaml"


class Collection(str, enum.Enum):
    """Site sections that own a base path and a content directory."""

    BLOG = "blog"
    PORTFOLIO = "portfolio"
    REFERENCES = "references"
    SERVICES = "services"


class ContentType(str, enum.Enum):
    """Typed entity variants.

    The value is the type name registered with the schema registry and used
    to namespace entity identifiers.
    """

    BLOG_POST = "BlogPost"
    PORTFOLIO_ITEM = "PortfolioItem"

    @property
    def collection(self) -> Collection:
        return _COLLECTION_FOR_TYPE[self]


_COLLECTION_FOR_TYPE = {
    ContentType.BLOG_POST: Collection.BLOG,
    ContentType.PORTFOLIO_ITEM: Collection.PORTFOLIO,
}

DEFAULT_BASE_PATHS = {
    Collection.BLOG: "/blog",
    Collection.PORTFOLIO: "/portfolio",
    Collection.REFERENCES: "/references",
    Collection.SERVICES: "/services",
}

DEFAULT_CONTENT_PATHS = {
    Collection.BLOG: "content/blog",
    Collection.PORTFOLIO: "content/portfolio",
    Collection.REFERENCES: "content/references",
    Collection.SERVICES: "content/services",
}

DEFAULT_CONFIG: dict[str, Any] = {
    "output_dir": "output",
    "asset_path": "content/assets",
    "base_paths": {},
    "content_paths": {},
}


def _freeze(mapping: Mapping[Collection, str]) -> Mapping[Collection, str]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class ThemeConfig:
    """Immutable theme configuration.

    Attributes:
        output_dir: Directory (relative to the project root) for build output.
        asset_path: Directory holding non-document assets.
        base_paths: URL base path per collection.
        content_paths: Source directory name per collection.
    """

    output_dir: str = "output"
    asset_path: str = "content/assets"
    base_paths: Mapping[Collection, str] = field(
        default_factory=lambda: _freeze(DEFAULT_BASE_PATHS)
    )
    content_paths: Mapping[Collection, str] = field(
        default_factory=lambda: _freeze(DEFAULT_CONTENT_PATHS)
    )

    def base_path(self, collection: Collection) -> str:
        return self.base_paths[collection]

    def content_dir(self, collection: Collection) -> str:
        return self.content_paths[collection]

    def source_dirs(self) -> list[str]:
        """Return every directory the source loader should scan, in order."""
        dirs = [self.content_paths[c] for c in Collection]
        if self.asset_path not in dirs:
            dirs.append(self.asset_path)
        return dirs


def classify(source_instance_name: str, config: ThemeConfig) -> ContentType | None:
    """Determine the content type of a document from its source directory.

    Args:
        source_instance_name: Name of the source the document was loaded from.
        config: Theme configuration.

    Returns:
        The matching ContentType, or None when the directory is not
        registered for typed ingestion.
    """
    for content_type in ContentType:
        if config.content_dir(content_type.collection) == source_instance_name:
            return content_type
    return None


def _collection_mapping(
    raw: Any, key: str, defaults: Mapping[Collection, str]
) -> Mapping[Collection, str]:
    """Validate a ``base_paths``/``content_paths`` section and merge defaults."""
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{key}' must be a mapping of collection name to path")
    known = {c.value for c in Collection}
    merged = dict(defaults)
    for name, value in raw.items():
        if name not in known:
            choices = ", ".join(sorted(known))
            raise ConfigError(
                f"Unknown collection '{name}' in '{key}' (expected one of: {choices})"
            )
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"'{key}.{name}' must be a non-empty string")
        merged[Collection(name)] = value.strip()
    return _freeze(merged)


def _check_unique(content_paths: Mapping[Collection, str]) -> None:
    seen: dict[str, Collection] = {}
    for collection, path in content_paths.items():
        if path in seen:
            raise ConfigError(
                f"Collections '{seen[path].value}' and '{collection.value}' "
                f"share the content path '{path}'"
            )
        seen[path] = collection


def config_from_dict(values: Mapping[str, Any]) -> ThemeConfig:
    """Build a validated ThemeConfig from plain configuration values.

    Args:
        values: Parsed configuration, typically from ``portico.yaml``.

    Returns:
        Frozen ThemeConfig.

    Raises:
        ConfigError: On unknown keys, unknown collections or malformed values.
    """
    unknown = sorted(str(key) for key in values if key not in DEFAULT_CONFIG)
    if unknown:
        raise ConfigError(
            f"Unknown configuration key(s): {', '.join(unknown)} "
            f"(expected one of: {', '.join(DEFAULT_CONFIG)})"
        )
    merged = {**DEFAULT_CONFIG, **values}
    for key in ("output_dir", "asset_path"):
        if not isinstance(merged[key], str) or not merged[key].strip():
            raise ConfigError(f"'{key}' must be a non-empty string")
    content_paths = _collection_mapping(
        merged["content_paths"], "content_paths", DEFAULT_CONTENT_PATHS
    )
    _check_unique(content_paths)
    return ThemeConfig(
        output_dir=merged["output_dir"],
        asset_path=merged["asset_path"],
        base_paths=_collection_mapping(
            merged["base_paths"], "base_paths", DEFAULT_BASE_PATHS
        ),
        content_paths=content_paths,
    )


def load_config(project_root: Path) -> ThemeConfig:
    """Load theme configuration from portico.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        ThemeConfig with defaults applied.

    Raises:
        ConfigError: If the file is not valid YAML or fails validation.
    """
    config_path = project_root / CONFIG_FILENAME
    loaded: Any = {}
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(f"Could not parse {CONFIG_FILENAME}: {exc}") from exc
        if not isinstance(loaded, dict):
            raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping")
    return config_from_dict(loaded)
