"""aiohttp server for Sitemark.

Application factory and route registration for standalone server mode.
"""

import logging

from aiohttp import web

from sitemark.api.config import create_config_routes
from sitemark.api.navigation import create_navigation_routes
from sitemark.api.pages import create_pages_routes
from sitemark.api.resolve import create_resolve_routes
from sitemark.app_keys import (
    live_reload_enabled_key,
    live_reload_manager_key,
    site_loader_key,
    verbose_key,
)
from sitemark.config import Config
from sitemark.core.location import Location
from sitemark.core.pointer import Asset, External, Search, parse_pointer
from sitemark.core.resolver import ResolutionError, Resolver
from sitemark.core.site import SiteLoader

logger = logging.getLogger(__name__)


async def serve_content(request: web.Request) -> web.StreamResponse:
    """Serve whatever a site path points at.

    Paths are parsed as pointers from the root. Searches redirect to the
    canonical location of their match, asset files are streamed from the
    source directory and pages return their markdown source.
    """
    path = request.match_info["path"]
    loader = request.app[site_loader_key]

    # Request paths never leave the site
    pointer = parse_pointer(path)
    if isinstance(pointer, External):
        raise web.HTTPNotFound(text=f"Not found: /{path}")

    resolver = Resolver(await loader.index(), assets=loader)
    try:
        resolved = await resolver.resolve(pointer, Location.empty)
    except ResolutionError as e:
        if request.app[verbose_key]:
            logger.warning(f"/{path}: {e}")
        raise web.HTTPNotFound(text=f"Not found: /{path}") from e

    if isinstance(resolved, External):
        raise web.HTTPNotFound(text=f"Not found: /{path}")
    location = resolved.prefix.to_location(Location.empty)
    if location is None:
        raise web.HTTPNotFound(text=f"Not found: /{path}")

    if isinstance(pointer, Search):
        raise web.HTTPFound(f"{location}{resolved.suffix or ''}")

    if isinstance(resolved.kind, Asset) and resolved.suffix is not None:
        file_path = await loader.find_asset(location, resolved.suffix)
        if file_path is None:
            raise web.HTTPNotFound(text=f"Not found: /{path}")
        return web.FileResponse(file_path)

    page = await resolver.load(resolved, Location.empty)
    content = await page.read()
    return web.Response(text=content, content_type="text/markdown", charset="utf-8")


def create_app(config: Config, *, verbose: bool = False) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        verbose: Enable verbose output (log unresolved pointers)

    Returns:
        Configured aiohttp application
    """
    app = web.Application()

    loader = SiteLoader.from_names(
        config.docs.source_dir,
        content_type=config.site.content_type,
        scopes=config.site.scopes,
    )

    app[site_loader_key] = loader
    app[live_reload_enabled_key] = config.live_reload.enabled
    app[verbose_key] = verbose

    # API routes (must be registered first to take precedence over site content)
    app.router.add_routes(create_pages_routes())
    app.router.add_routes(create_navigation_routes())
    app.router.add_routes(create_config_routes())
    app.router.add_routes(create_resolve_routes())

    # Live reload WebSocket endpoint
    if config.live_reload.enabled:
        from sitemark.live import LiveReloadManager
        from sitemark.live.reload import create_live_reload_routes

        manager = LiveReloadManager(loader, watch_patterns=config.live_reload.watch_patterns)
        app[live_reload_manager_key] = manager
        app.router.add_routes(create_live_reload_routes(manager))
        app.on_startup.append(_start_live_reload)
        app.on_cleanup.append(_stop_live_reload)

    # Site content - must be last to catch all non-API routes
    app.router.add_get("/{path:.*}", serve_content)

    return app


async def _start_live_reload(app: web.Application) -> None:
    """Start live reload on application startup."""
    await app[live_reload_manager_key].start()


async def _stop_live_reload(app: web.Application) -> None:
    """Stop live reload on application cleanup."""
    await app[live_reload_manager_key].stop()


def run_server(config: Config, *, verbose: bool = False) -> None:
    """Run the server.

    Args:
        config: Application configuration
        verbose: Enable verbose output (log unresolved pointers)
    """
    app = create_app(config, verbose=verbose)
    logger.info(f"Serving {config.docs.source_dir} on http://{config.server.host}:{config.server.port}")
    web.run_app(app, host=config.server.host, port=config.server.port)
