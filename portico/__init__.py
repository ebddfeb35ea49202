"""Portico static site theme core.

This package turns a tree of authored Markdown documents into typed content
entities (blog posts and portfolio items) and plans a page-per-entity site
with chronological previous/next navigation.

The pipeline runs in two phases:
- Ingestion: source files are loaded into a content graph, classified by the
  directory they came from, and shaped into typed entities.
- Planning: each typed collection is queried in sorted order and turned into
  page descriptors, which are merged with a fixed set of auxiliary pages.

The main entry point is the CLI module; ``build_site`` is the programmatic one.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
