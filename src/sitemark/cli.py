"""CLI interface for Sitemark.

Command-line tool for serving a markdown site and inspecting how its
pointers resolve.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import NoReturn

import click

from sitemark.config import Config
from sitemark.core.location import Location
from sitemark.core.name import Name
from sitemark.core.pointer import Entity, parse_pointer
from sitemark.core.resolver import ResolutionError, Resolver
from sitemark.core.site import SiteLoader, find_content_type

_config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover sitemark.toml)",
)
_source_dir_option = click.option(
    "--source-dir",
    "-s",
    type=click.Path(exists=True, path_type=Path, file_okay=False),
    default=None,
    help="Documentation source directory (overrides config)",
)


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (debug logging, unresolved pointer warnings)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Sitemark - Typed links for markdown sites."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@_config_option
@_source_dir_option
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--live-reload/--no-live-reload",
    default=None,
    help="Enable/disable live reload (overrides config, default: enabled)",
)
@click.pass_context
def serve(
    ctx: click.Context,
    config_path: Path | None,
    source_dir: Path | None,
    host: str | None,
    port: int | None,
    live_reload: bool | None,
) -> None:
    """Start the documentation server."""
    from sitemark.server import run_server

    config = _load_config(config_path).with_overrides(
        host=host,
        port=port,
        source_dir=source_dir,
        live_reload_enabled=live_reload,
    )

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Source directory: {config.docs.source_dir}")
    if config.live_reload.enabled:
        click.echo("Live reload: enabled")
    else:
        click.echo("Live reload: disabled")

    run_server(config, verbose=ctx.obj["verbose"])


@cli.command()
@_config_option
@_source_dir_option
def index(config_path: Path | None, source_dir: Path | None) -> None:
    """Build the site index and list every page with its names."""
    config = _load_config(config_path).with_overrides(source_dir=source_dir)
    loader = _site_loader(config)

    async def _collect() -> list[tuple[str, str, list[str]]]:
        site_index = await loader.index()
        names: dict[Location, list[str]] = {}
        for name, pages in site_index.pages_by_name.items():
            for page in pages:
                listed = names.setdefault(page.location, [])
                if str(name) not in listed:
                    listed.append(str(name))
        return [
            (str(page.location), await page.title(), names.get(page.location, []))
            for page in site_index.pages
        ]

    for location, title, page_names in asyncio.run(_collect()):
        suffix = f"  [{', '.join(page_names)}]" if page_names else ""
        click.echo(f"{location}  {title}{suffix}")


@cli.command()
@click.argument("pointer")
@click.option(
    "--from",
    "origin",
    default="/",
    show_default=True,
    help="Location of the page the pointer is written on",
)
@click.option(
    "--kind",
    "-k",
    "kind_name",
    default=None,
    help="Only match pages of this content type (see [site] in sitemark.toml)",
)
@_config_option
@_source_dir_option
def resolve(
    pointer: str,
    origin: str,
    kind_name: str | None,
    config_path: Path | None,
    source_dir: Path | None,
) -> None:
    """Resolve POINTER as written on the page at --from and print its href."""
    at = Location.parse(origin)
    if at is None:
        _fail(f"Location escapes the site root: {origin}")

    config = _load_config(config_path).with_overrides(source_dir=source_dir)
    loader = _site_loader(config)
    kind = _entity_kind(kind_name) if kind_name is not None else None

    async def _resolve() -> str:
        resolver = Resolver(await loader.index(), assets=loader)
        resolved = await resolver.resolve(parse_pointer(pointer, kind), at)
        return resolved.href

    try:
        href = asyncio.run(_resolve())
    except ResolutionError as e:
        _fail(str(e))

    click.echo(href)


def _site_loader(config: Config) -> SiteLoader:
    return SiteLoader.from_names(
        config.docs.source_dir,
        content_type=config.site.content_type,
        scopes=config.site.scopes,
    )


def _entity_kind(kind_name: str) -> Entity:
    name = Name.parse(kind_name)
    cls = find_content_type(name) if name is not None else None
    if cls is None:
        _fail(f"Unknown content type: {kind_name}")
    return Entity(cls)


def _load_config(config_path: Path | None) -> Config:
    try:
        return Config.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))


def _fail(message: str) -> NoReturn:
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(1)


if __name__ == "__main__":
    cli()
