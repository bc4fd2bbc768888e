"""CLI entry point for api-doc-gen."""

import logging
import sys
import traceback
from pathlib import Path
from typing import Any

import click

from api_doc_gen.changelog.manager import ChangelogManager
from api_doc_gen.config import FORMATS, DocSettings, load_settings
from api_doc_gen.discovery.models import import_object
from api_doc_gen.discovery.routes import RouteRegistry
from api_doc_gen.errors import ApiDocError, ConfigurationError, VersionNotFoundError
from api_doc_gen.generator.base import MemorySink
from api_doc_gen.generator.detect import detect_dialect, load_document
from api_doc_gen.pipeline import DocumentationGenerator


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_settings(config: Path | None, output: Path | None = None) -> DocSettings:
    settings = load_settings(config)
    if output is not None:
        settings.output.path = output
    return settings


def _load_registry(target: str) -> RouteRegistry:
    """Resolve ``module:attribute`` to a route registry, calling it when it is a factory."""
    try:
        registry: Any = import_object(target)
    except ImportError as e:
        raise ConfigurationError(f"Cannot load routes from {target}: {e}") from e
    if not hasattr(registry, "list") and callable(registry):
        registry = registry()
    if not hasattr(registry, "list"):
        raise ConfigurationError(f"{target} is not a route registry")
    return registry


def _fail(message: str) -> None:
    click.echo(message, err=True)
    click.echo(traceback.format_exc(), err=True)
    sys.exit(1)


@click.group()
def main():
    """API Doc Gen: generate API documentation from your route table."""
    pass


@main.command()
@click.argument("routes")
@click.option("--config", "config", default=None, type=click.Path(exists=True, path_type=Path), help="YAML settings file.")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output directory (overrides the settings).")
@click.option("--format", "formats", multiple=True, type=click.Choice(FORMATS), help="Output format; repeat for several.")
@click.option("--reset", is_flag=True, help="Reset collected documentation and start fresh.")
@click.option("--auto", is_flag=True, help="Auto-generate documentation for routes that document nothing.")
@click.option("--no-apidoc", is_flag=True, help="Skip apiDoc HTML compilation.")
@click.option("--no-files-output", is_flag=True, help="Do not list the generated files.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
def generate(
    routes: str,
    config: Path | None,
    output: Path | None,
    formats: tuple[str, ...],
    reset: bool,
    auto: bool,
    no_apidoc: bool,
    no_files_output: bool,
    verbose: bool,
):
    """Generate API documentation for the routes in ROUTES (module:attribute)."""
    _configure_logging(verbose)
    settings = _load_settings(config, output)
    generator = DocumentationGenerator(settings)

    if settings.auth_headers:
        click.echo("Configured authentication headers:")
        for header in settings.auth_headers:
            click.echo(f"  - {header.name} ({'required' if header.required else 'optional'})")
    else:
        click.echo("No auth headers configured.")

    click.echo("Starting API documentation generation...")
    try:
        registry = _load_registry(routes)
        result = generator.run(
            registry,
            formats=list(formats) or None,
            reset=reset,
            auto=True if auto else None,
            compile_apidoc=not no_apidoc,
        )
    except ApiDocError as e:
        _fail(f"Error generating documentation: {e}")
        return

    report = result.report
    click.echo(f"Found {report.selected} API routes to document ({report.documented} documented, {report.skipped} skipped).")
    for warning in result.warnings:
        click.echo(f"  [WARN] {warning}")
    if not no_files_output:
        for generated in result.files:
            click.echo(f"  {generated.label}: {generated.path}")
    click.echo("[OK] API documentation generated successfully!")


@main.command()
@click.argument("routes")
@click.option("--config", "config", default=None, type=click.Path(exists=True, path_type=Path), help="YAML settings file.")
def cache(routes: str, config: Path | None):
    """Discover ROUTES and cache the collected endpoints."""
    settings = _load_settings(config)
    generator = DocumentationGenerator(settings, sink=MemorySink())
    try:
        generator.run(_load_registry(routes), formats=["swagger2"], compile_apidoc=False)
    except ApiDocError as e:
        _fail(f"Error caching documentation: {e}")
        return
    click.echo(f"Documentation cached to {settings.cache_file}")


@main.command("clear-cache")
@click.option("--config", "config", default=None, type=click.Path(exists=True, path_type=Path), help="YAML settings file.")
def clear_cache(config: Path | None):
    """Remove the cached endpoints."""
    generator = DocumentationGenerator(_load_settings(config), sink=MemorySink())
    if generator.clear_cache():
        click.echo("Documentation cache cleared!")
    else:
        click.echo("No documentation cache found.")


@main.group()
def changelog():
    """Save snapshots of a rendered document and compare them."""
    pass


def _manager(config: Path | None, document: Path | None = None) -> ChangelogManager:
    settings = _load_settings(config)
    manager = ChangelogManager(settings.changelog.path)
    if document is not None:
        data = load_document(document)
        if detect_dialect(data) not in ("swagger2", "openapi3"):
            raise click.BadParameter(f"{document} is not a Swagger or OpenAPI document", param_hint="DOCUMENT")
        manager.set_current(data)
    return manager


@changelog.command("save")
@click.argument("document", type=click.Path(exists=True, path_type=Path))
@click.option("--version", "version", default=None, help="Version label (defaults to a timestamp).")
@click.option("--config", "config", default=None, type=click.Path(exists=True, path_type=Path), help="YAML settings file.")
def changelog_save(document: Path, version: str | None, config: Path | None):
    """Save DOCUMENT as a new snapshot."""
    path = _manager(config, document).save(version)
    click.echo(f"Snapshot saved to {path}")


@changelog.command("diff")
@click.argument("document", type=click.Path(exists=True, path_type=Path))
@click.option("--against", "version", default=None, help="Version to compare with (defaults to the latest).")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Write the changelog Markdown here.")
@click.option("--config", "config", default=None, type=click.Path(exists=True, path_type=Path), help="YAML settings file.")
def changelog_diff(document: Path, version: str | None, output: Path | None, config: Path | None):
    """Compare DOCUMENT with a saved snapshot."""
    manager = _manager(config, document)
    try:
        diff = manager.compare_with(version) if version else manager.compare_with_latest()
    except VersionNotFoundError as e:
        click.echo(str(e), err=True)
        sys.exit(1)
    markdown = manager.generate_changelog(diff)
    if output is None:
        click.echo(markdown)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(markdown, encoding="utf-8")
    click.echo(f"Changelog saved to {output}")


@changelog.command("list")
@click.option("--config", "config", default=None, type=click.Path(exists=True, path_type=Path), help="YAML settings file.")
def changelog_list(config: Path | None):
    """List saved snapshots, newest first."""
    versions = _manager(config).get_versions()
    if not versions:
        click.echo("No versions saved.")
        return
    for info in versions:
        click.echo(f"{info.version}\t{info.timestamp or '-'}")


@changelog.command("prune")
@click.option("--keep", default=None, type=click.IntRange(min=0), help="Number of snapshots to keep.")
@click.option("--config", "config", default=None, type=click.Path(exists=True, path_type=Path), help="YAML settings file.")
def changelog_prune(keep: int | None, config: Path | None):
    """Delete all but the newest snapshots."""
    settings = _load_settings(config)
    deleted = ChangelogManager(settings.changelog.path).prune(settings.changelog.keep if keep is None else keep)
    click.echo(f"Deleted {deleted} snapshot(s).")


@changelog.command("clear")
@click.option("--config", "config", default=None, type=click.Path(exists=True, path_type=Path), help="YAML settings file.")
def changelog_clear(config: Path | None):
    """Delete every snapshot."""
    deleted = _manager(config).clear()
    click.echo(f"Deleted {deleted} snapshot(s).")
