"""Navigation API endpoints.

Provides full navigation tree and subtree endpoints.
"""

from aiohttp import web

from sitemark.app_keys import site_loader_key
from sitemark.core.location import Location
from sitemark.core.navigation import build_navigation


def create_navigation_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/navigation", get_navigation),
        web.get("/api/navigation/{path:.*}", get_navigation_subtree),
    ]


async def get_navigation(request: web.Request) -> web.Response:
    index = await request.app[site_loader_key].index()
    nav_items = await build_navigation(index)
    return web.json_response({"items": [item.to_dict() for item in nav_items]})


async def get_navigation_subtree(request: web.Request) -> web.Response:
    path = request.match_info["path"]
    index = await request.app[site_loader_key].index()

    location = Location.parse(path)
    if location is None or location not in index:
        return web.json_response(
            {"error": "Section not found", "path": path},
            status=404,
        )

    subtree = await build_navigation(index, location)
    return web.json_response({"items": [item.to_dict() for item in subtree]})
