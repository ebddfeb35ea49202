"""Filesystem source loading for Portico.

This module discovers documents in the configured content directories and
turns each one into a File node plus a raw document node carrying parsed
front matter. It plays the role of a filesystem source plugin: nothing here
knows about blog posts or portfolio items.

Key classes:
- FileNode: A discovered file and the source directory it came from.
- RawDocument: A parsed document before type-specific shaping.
- FileSourceLoader: Walks content directories and yields node pairs.
"""

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar

import yaml

from .config import ThemeConfig
from .errors import SourceReadError
from .utils import is_markdown

logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---\s*(?:\n|$)", re.DOTALL)

# Namespace for every node identifier; changing it changes all ids.
NODE_NAMESPACE = uuid.UUID("6f1c4d0e-2b8a-5c3e-9f47-7a2d1e8b5c90")


def create_node_id(key: str) -> str:
    """Derive a deterministic node identifier from a namespaced key."""
    return str(uuid.uuid5(NODE_NAMESPACE, key))


def extract_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Extract YAML frontmatter from content.

    Args:
        text: Raw file content.

    Returns:
        Tuple of (frontmatter dict, remaining content). Invalid or
        non-mapping front matter is treated as absent.
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as exc:
        logger.warning("Ignoring unparseable front matter: %s", exc)
        return {}, text
    if not isinstance(data, dict):
        return {}, text
    return data, text[match.end() :]


@dataclass(frozen=True)
class FileNode:
    """A file discovered in a source directory.

    Attributes:
        id: Stable node identifier.
        source_instance_name: Configured source directory the file was found in.
        relative_path: POSIX path relative to the source directory.
        absolute_path: Location on disk.
    """

    type_name: ClassVar[str] = "File"

    id: str
    source_instance_name: str
    relative_path: str
    absolute_path: Path

    @property
    def parent(self) -> None:
        return None


@dataclass(frozen=True)
class RawDocument:
    """A parsed source document before type-specific shaping.

    Attributes:
        id: Stable node identifier.
        parent: Identifier of the FileNode this document was parsed from.
        frontmatter: Parsed YAML front matter.
        body: Document body with front matter removed.
    """

    type_name: ClassVar[str] = "Mdx"

    id: str
    parent: str
    frontmatter: dict[str, Any] = field(default_factory=dict)
    body: str = ""


def file_node_for(source_instance_name: str, relative_path: str, absolute_path: Path) -> FileNode:
    key = f"{source_instance_name}/{relative_path} >>> {FileNode.type_name}"
    return FileNode(
        id=create_node_id(key),
        source_instance_name=source_instance_name,
        relative_path=relative_path,
        absolute_path=absolute_path,
    )


def raw_document_for(file_node: FileNode, text: str) -> RawDocument:
    key = f"{file_node.source_instance_name}/{file_node.relative_path} >>> {RawDocument.type_name}"
    frontmatter, body = extract_frontmatter(text)
    return RawDocument(
        id=create_node_id(key),
        parent=file_node.id,
        frontmatter=frontmatter,
        body=body,
    )


class FileSourceLoader:
    """Loads documents from the configured content directories.

    Attributes:
        project_root: Root directory of the project.
        config: Theme configuration naming the source directories.
        errors: Files the last ``load`` could not read.
    """

    def __init__(self, project_root: Path, config: ThemeConfig):
        self.project_root = project_root
        self.config = config
        self.errors: list[SourceReadError] = []

    def iter_files(self, include_drafts: bool = False) -> Iterator[tuple[str, Path]]:
        """Iterate over document files in every source directory.

        Files and directories starting with ``_`` are drafts and are skipped
        unless requested. Files are yielded in sorted order per directory so
        graph insertion order is reproducible.

        Args:
            include_drafts: Whether to include draft files.

        Yields:
            Tuples of (source instance name, absolute path).
        """
        for source_name in self.config.source_dirs():
            source_dir = self.project_root / source_name
            if not source_dir.is_dir():
                logger.debug("Source directory %s does not exist, skipping", source_dir)
                continue
            for path in sorted(source_dir.rglob("*")):
                if path.is_dir() or not is_markdown(path):
                    continue
                rel = path.relative_to(source_dir)
                if any(part.startswith(".") for part in rel.parts):
                    continue
                if not include_drafts and any(part.startswith("_") for part in rel.parts):
                    continue
                yield source_name, path

    def load(self, include_drafts: bool = False) -> Iterator[tuple[FileNode, RawDocument]]:
        """Load and parse every document.

        Files that cannot be read or are not valid UTF-8 are skipped and
        recorded in ``errors``.

        Args:
            include_drafts: Whether to include draft files.

        Yields:
            Tuples of (FileNode, RawDocument).
        """
        self.errors = []
        for source_name, path in self.iter_files(include_drafts):
            rel = path.relative_to(self.project_root / source_name).as_posix()
            file_node = file_node_for(source_name, rel, path)
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Cannot read %s/%s: %s", source_name, rel, exc)
                self.errors.append(SourceReadError(f"{source_name}/{rel}", str(exc), file_node.id))
                continue
            yield file_node, raw_document_for(file_node, text)
