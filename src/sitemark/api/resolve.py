"""Resolve API endpoint.

Resolves a pointer as written on a page into the link it renders as.
An optional ``kind`` limits entity pointers to one configured content type.
"""

from aiohttp import web

from sitemark.app_keys import site_loader_key
from sitemark.core.location import Location
from sitemark.core.name import Name
from sitemark.core.pointer import Entity, External, parse_pointer
from sitemark.core.resolver import ResolutionError, Resolver
from sitemark.core.site import find_content_type


def create_resolve_routes() -> list[web.RouteDef]:
    return [web.get("/api/resolve", get_resolve)]


async def get_resolve(request: web.Request) -> web.Response:
    text = request.query.get("pointer")
    if text is None:
        return web.json_response({"error": "Missing pointer parameter"}, status=400)

    origin = request.query.get("from", "/")
    at = Location.parse(origin)
    if at is None:
        return web.json_response(
            {"error": "Location escapes the site root", "from": origin},
            status=400,
        )

    kind = None
    kind_name = request.query.get("kind")
    if kind_name is not None:
        name = Name.parse(kind_name)
        cls = find_content_type(name) if name is not None else None
        if cls is None:
            return web.json_response({"error": "Unknown content type", "kind": kind_name}, status=400)
        kind = Entity(cls)

    loader = request.app[site_loader_key]
    resolver = Resolver(await loader.index(), assets=loader)
    pointer = parse_pointer(text, kind)
    try:
        resolved = await resolver.resolve(pointer, at)
    except ResolutionError as e:
        return web.json_response(
            {"error": str(e), "pointer": text, "from": str(at)},
            status=404,
        )

    location = None
    if not isinstance(resolved, External):
        target = resolved.prefix.to_location(at)
        location = str(target) if target is not None else None

    return web.json_response(
        {
            "pointer": str(pointer),
            "kind": str(resolved.kind),
            "href": resolved.href,
            "location": location,
        }
    )
