"""Utility functions for Portico.

This module contains small, pure helpers used throughout the codebase:
URL path handling, slug derivation, title and excerpt extraction, and
date coercion for front-matter values.

Key functions:
    derive_slug: Build the canonical URL path for a document.
    join_url_path: Join URL path segments into a normalized absolute path.
    titleize: Convert filenames to human-readable titles.
    first_paragraph: Extract a plain-text excerpt from Markdown.
    coerce_datetime: Normalize front-matter dates to naive datetimes.
    is_markdown: Check if a path is a Markdown/MDX document.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from pathlib import Path, PurePosixPath

from .errors import InvalidSlugError

MARKDOWN_SUFFIXES = (".md", ".mdx", ".markdown")


def join_url_path(*segments: str) -> str:
    """Join URL path segments into an absolute path with a trailing slash.

    Empty segments and duplicate slashes are dropped, so ``("/blog/", "/a")``
    and ``("blog", "a")`` both give ``/blog/a/``.

    Args:
        *segments: Path fragments, each possibly containing slashes.

    Returns:
        Normalized URL path. ``/`` when no segment carries a name.

    Examples:
        >>> join_url_path("/portfolio", "first-item")
        '/portfolio/first-item/'
    """
    parts: list[str] = []
    for segment in segments:
        parts.extend(p for p in segment.replace("\\", "/").split("/") if p)
    path = "/".join(parts)
    return f"/{path}/" if path else "/"


def derive_slug(base_path: str, source_relative_path: str) -> str:
    """Derive the canonical URL path for a document.

    The relative path is taken from the document's source root with the
    extension already stripped. A trailing ``index`` segment stands for its
    directory, so ``post-a/index`` and ``post-a`` produce the same slug.
    Casing is passed through untouched.

    Args:
        base_path: Collection root, e.g. ``/blog``.
        source_relative_path: Directory segments plus filename stem.

    Returns:
        Absolute URL path starting and ending with a single slash.

    Raises:
        InvalidSlugError: If the relative path is empty or tries to escape
            its source root.

    Examples:
        >>> derive_slug("/blog", "post-a/index")
        '/blog/post-a/'
    """
    segments = [s for s in source_relative_path.replace("\\", "/").split("/") if s]
    if any(s in (".", "..") for s in segments):
        raise InvalidSlugError(
            source_relative_path, "relative path must not contain '.' or '..' segments"
        )
    if segments and segments[-1] == "index":
        segments = segments[:-1]
    if not segments:
        raise InvalidSlugError(
            source_relative_path or "<empty>", "relative path resolves to an empty slug"
        )
    return join_url_path(base_path, *segments)


def strip_extension(relative_path: str) -> str:
    """Remove the final suffix from a POSIX relative path."""
    path = PurePosixPath(relative_path)
    return path.with_suffix("").as_posix() if path.suffix else path.as_posix()


def titleize(filename: str) -> str:
    """Convert a filename to a human-readable title.

    Removes date prefixes (YYYY-MM-DD), replaces hyphens and underscores
    with spaces, and capitalizes each word. An ``index`` file is titled after
    its parent directory.

    Args:
        filename: Filename or relative path, with or without extension.

    Returns:
        Human-readable title string.

    Examples:
        >>> titleize("2024-01-15-hello-world.md")
        'Hello World'

        >>> titleize("getting-started/index.md")
        'Getting Started'
    """
    path = PurePosixPath(filename.replace("\\", "/"))
    base = path.stem
    if base == "index" and path.parent.name:
        base = path.parent.name
    if "-" in base:
        parts = base.split("-")
        if len(parts) >= 4 and all(p.isdigit() for p in parts[:3]):
            base = "-".join(parts[3:])
    words = re.split(r"[\s\-_]+", base)
    return " ".join(word.capitalize() for word in words if word) or "Untitled"


def first_paragraph(text: str, limit: int = 160) -> str:
    """Extract and clean the first prose paragraph from Markdown.

    Skips headings, images, code fences and JSX/HTML blocks, strips inline
    tags and collapses whitespace.

    Args:
        text: Markdown body.
        limit: Maximum character length of result.

    Returns:
        Cleaned first paragraph, truncated to limit characters.
    """
    paragraphs = [p.strip() for p in text.split("\n\n") if p.strip()]
    for para in paragraphs:
        if para.startswith(("#", "![", "```", "---", "<", "import ", "export ")):
            continue
        para = re.sub(r"<[^>]+>", "", para)
        collapsed = " ".join(para.split())
        return collapsed[:limit]
    return ""


def coerce_datetime(value: object) -> datetime:
    """Normalize a front-matter date value to a naive UTC datetime.

    PyYAML already turns unquoted ISO dates into ``date``/``datetime``
    objects; quoted values arrive as strings.

    Args:
        value: A ``date``, ``datetime`` or ISO 8601 string.

    Returns:
        Naive datetime, converted to UTC first when timezone-aware.

    Raises:
        ValueError: If the value cannot be interpreted as a date.
    """
    if isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        result = datetime.fromisoformat(text)
    else:
        raise ValueError(f"expected a date, got {type(value).__name__}")
    if result.tzinfo is not None:
        result = result.astimezone(timezone.utc).replace(tzinfo=None)
    return result


def is_markdown(path: Path) -> bool:
    """Check if a path is a Markdown or MDX document.

    Args:
        path: Path to check.

    Returns:
        True if the file has a Markdown extension (case-insensitive).
    """
    return path.suffix.lower() in MARKDOWN_SUFFIXES
