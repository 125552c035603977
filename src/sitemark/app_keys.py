"""Application keys for type-safe app configuration access."""

from aiohttp import web

from sitemark.core.site import SiteLoader
from sitemark.live.reload import LiveReloadManager

site_loader_key = web.AppKey("site_loader", SiteLoader)
live_reload_enabled_key = web.AppKey("live_reload_enabled", bool)
live_reload_manager_key = web.AppKey("live_reload_manager", LiveReloadManager)
verbose_key = web.AppKey("verbose", bool)
