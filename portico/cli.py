"""Command-line interface for Portico.

This module defines the CLI commands using the Click framework.

Commands:
- build: Ingest content and write the page manifest.
- pages: Print the planned pages without writing anything.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from . import __version__
from .errors import BuildError, ConfigError


@click.group()
@click.version_option(version=__version__, prog_name="portico")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Portico static site theme core."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft content")
@click.option(
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    required=False,
    help="Directory for manifest.json (overrides portico.yaml output_dir)",
)
def build(drafts: bool, output: Path | None):
    """Build the page manifest into the output directory."""
    project_root = Path.cwd()
    from .build import build_site

    try:
        result = build_site(project_root, include_drafts=drafts, output_dir_override=output)
    except (BuildError, ConfigError) as exc:
        _report_failure(exc)
        raise SystemExit(1) from None
    _report_warnings(result.warnings)
    click.echo(f"Planned {len(result.pages)} pages into {result.output_dir}")


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft content")
def pages(drafts: bool):
    """List planned pages with their templates."""
    project_root = Path.cwd()
    from .build import build_site

    try:
        result = build_site(project_root, include_drafts=drafts, write_manifest=False)
    except (BuildError, ConfigError) as exc:
        _report_failure(exc)
        raise SystemExit(1) from None
    _report_warnings(result.warnings)
    width = max((len(page.path) for page in result.pages), default=0)
    for page in result.pages:
        click.echo(f"{page.path.ljust(width)}  {page.template}")


def _report_failure(exc: Exception) -> None:
    click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
    source_path = getattr(exc, "source_path", None)
    if source_path is not None:
        click.echo(click.style(f"  File: {source_path}", fg="yellow"), err=True)
    message = getattr(exc, "message", None) or str(exc)
    click.echo(click.style(f"  Error: {message}", fg="white"), err=True)


def _report_warnings(warnings) -> None:
    for warning in warnings:
        click.echo(
            click.style(f"Skipped {warning.source_path}: {warning.message}", fg="yellow"),
            err=True,
        )


def main():
    """Entry point for the CLI application."""
    cli()
