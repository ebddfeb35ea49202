"""Site building for Portico.

This module runs the whole pipeline for one build invocation:
load configuration, declare schemas, load source documents into the
content graph, shape typed entities, plan pages and write the manifest.

Key functions:
- ingest: Load and shape every document into a content graph.
- build_site: Run a full build and write ``manifest.json``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from .config import ThemeConfig, load_config
from .errors import BuildError, QueryError, ShapingError
from .graph import ContentGraph
from .nodes import ContentEntity, NodeShaper
from .pages import PageDescriptor, build_page_manifest
from .schema import SchemaRegistry, register_default_types
from .sources import FileSourceLoader

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"


@dataclass
class IngestResult:
    """Outcome of the ingestion phase.

    Attributes:
        graph: Populated content graph.
        entities: Typed entities created, in shaping order.
        warnings: Per-document errors; those documents produced no entity.
    """

    graph: ContentGraph
    entities: list[ContentEntity] = field(default_factory=list)
    warnings: list[ShapingError] = field(default_factory=list)


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        pages: Page manifest in render order.
        output_dir: Directory where the manifest was written.
        graph: Content graph the pages were planned from.
        warnings: Documents that failed shaping and were left out.
    """

    pages: list[PageDescriptor]
    output_dir: Path
    graph: ContentGraph
    warnings: list[ShapingError] = field(default_factory=list)


def ingest(
    project_root: Path,
    config: ThemeConfig,
    include_drafts: bool = False,
    graph: ContentGraph | None = None,
) -> IngestResult:
    """Load every source document and shape typed entities.

    A document that fails shaping or cannot be read is logged and recorded
    as a warning; ingestion continues with the remaining documents. Nodes
    such a document produced in an earlier ingestion into the same graph
    are removed.

    Args:
        project_root: Root directory of the project.
        config: Theme configuration.
        include_drafts: Whether to include draft documents.
        graph: Existing graph to ingest into, for incremental rebuilds.

    Returns:
        IngestResult with the populated graph.
    """
    if graph is None:
        graph = ContentGraph(register_default_types(SchemaRegistry()))
    else:
        register_default_types(graph.registry)
    shaper = NodeShaper(config, graph, graph.registry)
    result = IngestResult(graph=graph)

    loader = FileSourceLoader(project_root, config)
    for file_node, raw in loader.load(include_drafts):
        graph.insert(file_node)
        graph.insert(raw)
        graph.create_parent_child_link(file_node, raw)
        try:
            entity = shaper.handle(raw)
        except ShapingError as exc:
            graph.remove_children(raw.id)
            logger.warning("Skipping %s: %s", exc.source_path, exc.message)
            result.warnings.append(exc)
            continue
        if entity is not None:
            result.entities.append(entity)
    for error in loader.errors:
        graph.remove(error.file_id)
        result.warnings.append(error)
    logger.info(
        "Ingested %d entities (%d documents skipped with errors)",
        len(result.entities),
        len(result.warnings),
    )
    return result


def build_site(
    project_root: Path,
    include_drafts: bool = False,
    output_dir_override: Path | None = None,
    write_manifest: bool = True,
) -> BuildResult:
    """Build the page manifest for a project.

    Args:
        project_root: Root directory of the project.
        include_drafts: Whether to include draft documents (starting with _).
        output_dir_override: Optional path to write the manifest instead of
            the configured output_dir.
        write_manifest: Whether to write ``manifest.json``.

    Returns:
        BuildResult containing the manifest and any per-document warnings.

    Raises:
        ConfigError: If ``portico.yaml`` is invalid.
        BuildError: If page planning fails.
    """
    config = load_config(project_root)
    output_dir = output_dir_override or (project_root / config.output_dir)

    ingested = ingest(project_root, config, include_drafts=include_drafts)
    try:
        pages = build_page_manifest(ingested.graph, config)
    except QueryError as exc:
        raise BuildError(f"Page query failed: {exc}", original_error=exc) from exc

    if write_manifest:
        _write_manifest(output_dir, pages)
    return BuildResult(
        pages=pages,
        output_dir=output_dir,
        graph=ingested.graph,
        warnings=ingested.warnings,
    )


def _write_manifest(output_dir: Path, pages: list[PageDescriptor]) -> None:
    """Write the page manifest as JSON.

    Args:
        output_dir: Directory to write into; created if missing.
        pages: Page descriptors in render order.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    payload = [page.to_dict() for page in pages]
    with open(output_dir / MANIFEST_FILENAME, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
        f.write("\n")
