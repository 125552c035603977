"""WebSocket-based live reload for development mode.

Monitors source files for changes, invalidates the site index and notifies
connected clients via WebSocket to trigger page reloads.
"""

import asyncio
import json
import logging
import weakref
from pathlib import Path

from aiohttp import WSMsgType, web
from watchfiles import Change, awatch

from sitemark.core.location import Location
from sitemark.core.path import Path as SitePath
from sitemark.core.site import INDEX_FILENAME, SiteLoader

logger = logging.getLogger(__name__)


class LiveReloadManager:
    """Manages WebSocket connections and file watching for live reload.

    Any change below the source directory can alter the site tree, so the
    loader's index is dropped and rebuilt on the next request.
    """

    def __init__(
        self,
        loader: SiteLoader,
        watch_patterns: list[str] | None = None,
    ) -> None:
        """Initialize the live reload manager.

        Args:
            loader: Site loader whose index is invalidated on changes
            watch_patterns: Glob patterns to watch (default: ["**/*.md"])
        """
        self._loader = loader
        self._source_dir = loader.source_dir.resolve()
        self._watch_patterns = watch_patterns or ["**/*.md"]
        self._connections: weakref.WeakSet[web.WebSocketResponse] = weakref.WeakSet()
        self._watch_task: asyncio.Task[None] | None = None

    @property
    def connection_count(self) -> int:
        """Number of connected live reload clients."""
        return len(self._connections)

    async def start(self) -> None:
        """Start the file watcher."""
        if self._watch_task is not None:
            return
        self._watch_task = asyncio.create_task(self._watch_files())

    async def stop(self) -> None:
        """Stop the file watcher and close all connections."""
        if self._watch_task is not None:
            self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass
            self._watch_task = None

        for ws in list(self._connections):
            await ws.close()

    async def handle_websocket(self, request: web.Request) -> web.WebSocketResponse:
        """Handle WebSocket connection for live reload."""
        ws = web.WebSocketResponse()
        await ws.prepare(request)

        self._connections.add(ws)

        try:
            async for msg in ws:
                if msg.type == WSMsgType.ERROR:
                    break
        finally:
            self._connections.discard(ws)

        return ws

    async def _watch_files(self) -> None:
        """Watch for file changes and broadcast reload events."""
        async for changes in awatch(self._source_dir):
            await self.handle_changes(changes)

    async def handle_changes(self, changes: set[tuple[Change, str]]) -> None:
        """Invalidate the index and notify clients about changed files.

        Args:
            changes: Change events as reported by watchfiles
        """
        invalidated = False
        for _change_type, path_str in changes:
            path = Path(path_str)
            if not self._matches_patterns(path):
                continue

            if not invalidated:
                self._loader.invalidate()
                invalidated = True

            location = self.to_location(path)
            logger.info(f"Changed: {path} ({location})")
            await self._broadcast_reload(str(location))

    def _matches_patterns(self, path: Path) -> bool:
        try:
            relative = path.relative_to(self._source_dir)
        except ValueError:
            return False

        for pattern in self._watch_patterns:
            if relative.match(pattern):
                return True
            # "**/" also matches files directly in the source directory
            if pattern.startswith("**/") and relative.match(pattern[3:]):
                return True
        return False

    def to_location(self, file_path: Path) -> Location:
        """Convert a source file path to the location of its page.

        Examples:
            docs/guide/setup.md -> /guide/setup/
            docs/guide/index.md -> /guide/
        """
        relative = file_path.relative_to(self._source_dir)
        parts = list(relative.parts)
        if parts and parts[-1].lower() == INDEX_FILENAME:
            parts.pop()
        elif parts:
            parts[-1] = Path(parts[-1]).stem
        return Location.resolved(SitePath.of(*parts))

    async def _broadcast_reload(self, path: str) -> None:
        if not self._connections:
            return

        message = json.dumps({"type": "reload", "path": path})

        for ws in list(self._connections):
            if ws.closed:
                continue
            try:
                await ws.send_str(message)
            except ConnectionResetError:
                # Client disconnected mid-send, will be cleaned up by WeakSet
                pass


def create_live_reload_routes(manager: LiveReloadManager) -> list[web.RouteDef]:
    """Create routes for live reload WebSocket."""
    return [web.get("/ws/live-reload", manager.handle_websocket)]
