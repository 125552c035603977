"""Pages API endpoint.

Looks pages up through the site index and returns JSON responses with
metadata, breadcrumbs and the markdown source.
"""

import logging
from datetime import UTC, datetime
from email.utils import formatdate
from hashlib import md5
from pathlib import Path

from aiohttp import web

from sitemark.app_keys import site_loader_key, verbose_key
from sitemark.core.location import Location
from sitemark.core.navigation import build_breadcrumbs
from sitemark.core.pointer import ANY_ENTITY, External
from sitemark.core.resolver import ResolutionError, Resolver

logger = logging.getLogger(__name__)


def create_pages_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/pages/{path:.*}", get_page),
    ]


async def get_page(request: web.Request) -> web.Response:
    path = request.match_info["path"]
    loader = request.app[site_loader_key]
    index = await loader.index()

    # "guide" searches from the root, "guide/" targets the page at /guide/
    pointer = ANY_ENTITY.parse(f"/{path}")
    if isinstance(pointer, External):
        return _not_found(path)

    try:
        page = await Resolver(index).load(pointer, Location.empty)
    except ResolutionError as e:
        if request.app[verbose_key]:
            logger.warning(f"{path}: {e}")
        return _not_found(path)

    content = await page.read()
    title = await page.title()

    last_modified = _last_modified(page.source_path or page.directory)

    etag = _compute_etag(f"{page.location}\n{title}\n{content}")

    if_none_match = request.headers.get("If-None-Match")
    if if_none_match == etag:
        return web.Response(status=304)

    breadcrumbs = [b.to_dict() for b in await build_breadcrumbs(index, page.location)]

    response_data = {
        "meta": {
            "title": title,
            "path": str(page.location),
            "source_file": str(page.source_path) if page.source_path else None,
            "last_modified": last_modified.isoformat(),
        },
        "breadcrumbs": breadcrumbs,
        "content": content,
    }

    return web.json_response(
        response_data,
        headers={
            "ETag": etag,
            "Last-Modified": formatdate(last_modified.timestamp(), usegmt=True),
            "Cache-Control": "private, max-age=60",
        },
    )


def _not_found(path: str) -> web.Response:
    return web.json_response(
        {"error": "Page not found", "path": path},
        status=404,
    )


def _last_modified(path: Path | None) -> datetime:
    if path is None:
        return datetime.now(tz=UTC)
    return datetime.fromtimestamp(path.stat().st_mtime, tz=UTC)


def _compute_etag(content: str) -> str:
    # First 16 hex chars (64 bits) are enough for cache validation
    content_hash = md5(content.encode("utf-8"), usedforsecurity=False).hexdigest()[:16]
    return f'"{content_hash}"'
