"""Exception hierarchy for Portico.

Errors fall into two groups:
- Per-document errors (``ShapingError`` and subclasses) fail a single
  document. The build reports them and keeps going.
- Build-fatal errors (``QueryError``, ``SchemaError``, ``ConfigError``) stop
  the build. ``BuildError`` wraps them for the CLI.
"""

from __future__ import annotations

from pathlib import Path


class PorticoError(Exception):
    """Base class for all Portico errors."""


class ConfigError(PorticoError):
    """Invalid theme configuration."""


class SchemaError(PorticoError):
    """A type schema is malformed or an entity does not match its schema."""


class QueryError(PorticoError):
    """A collection query against the content graph failed."""


class ShapingError(PorticoError):
    """A single document could not be shaped into a typed entity.

    Attributes:
        source_path: Path of the offending document relative to its source root.
        message: Human-readable error message.
    """

    def __init__(self, source_path: str | Path, message: str):
        self.source_path = str(source_path)
        self.message = message
        super().__init__(f"{self.source_path}: {message}")


class InvalidSlugError(ShapingError):
    """The derived slug is empty or malformed."""


class MissingRequiredFieldError(ShapingError):
    """A required front-matter field is absent.

    Attributes:
        field: Name of the missing field.
    """

    def __init__(self, source_path: str | Path, field: str):
        self.field = field
        super().__init__(source_path, f"missing required field '{field}'")


class InvalidFieldError(ShapingError):
    """A front-matter field is present but has an unusable value."""

    def __init__(self, source_path: str | Path, field: str, detail: str):
        self.field = field
        super().__init__(source_path, f"invalid value for field '{field}': {detail}")


class SourceReadError(ShapingError):
    """A document file exists but could not be read or decoded.

    Attributes:
        file_id: Identifier the file's node has in the content graph.
    """

    def __init__(self, source_path: str | Path, message: str, file_id: str | None = None):
        self.file_id = file_id
        super().__init__(source_path, f"cannot read file: {message}")


class BuildError(PorticoError):
    """Build-fatal error with optional file context.

    Attributes:
        message: Human-readable error message.
        source_path: Path to the source file involved, if any.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        message: str,
        source_path: Path | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.source_path = source_path
        self.original_error = original_error
        prefix = f"{source_path}: " if source_path is not None else ""
        super().__init__(f"{prefix}{message}")
