"""Pointer resolution against a site index.

Turns search and target pointers written on a page into targets whose
prefixes are the shortest way to reach the referenced page or file from
that page.
"""

import logging
from pathlib import Path as FilePath
from typing import Protocol

from sitemark.core.index import Index, Node
from sitemark.core.location import Location
from sitemark.core.name import Name
from sitemark.core.pointer import (
    Absolute,
    Asset,
    Entity,
    External,
    Pointer,
    Prefix,
    Search,
    Target,
)

logger = logging.getLogger(__name__)


class ResolutionError(LookupError):
    """Raised when a pointer does not lead to anything in the site."""


class AssetStore(Protocol):
    """Source of static files for asset pointers."""

    async def find_asset(self, location: Location, filename: str) -> FilePath | None: ...


class Resolver:
    """Resolves pointers used on pages of an indexed site.

    Example:
        resolver = Resolver(index, assets=loader)
        target = await resolver.resolve(parse_pointer("guide"), page.location)
        target.href  # "../guide/"
    """

    def __init__(self, index: Index, assets: AssetStore | None = None) -> None:
        """Initialize resolver.

        Args:
            index: Index of the site
            assets: Store used to find asset files, assets cannot be
                    resolved without one
        """
        self._index = index
        self._assets = assets

    async def resolve(self, pointer: Pointer, at: Location) -> Target | External:
        """Resolve a pointer used on the page at a location.

        Args:
            pointer: Pointer to resolve
            at: Location the pointer is used from

        Returns:
            External pointers unchanged, otherwise a target with the
            shortest prefix from ``at``

        Raises:
            ResolutionError: If nothing matches the pointer
        """
        match pointer:
            case External():
                return pointer
            case Search(Entity() as kind, prefix, name):
                page = self._search_entity(kind, prefix, name, at)
                return Target(kind, Prefix.between(at, page.location))
            case Target(Entity() as kind, prefix, _):
                page = self._target_entity(kind, prefix, at)
                return Target(kind, Prefix.between(at, page.location))
            case Search(Asset() as kind, prefix, name):
                location, filename = await self._search_asset(kind, prefix, name, at)
                return Target(kind, Prefix.between(at, location), filename)
            case Target(Asset() as kind, prefix, suffix):
                location = await self._target_asset(kind, prefix, suffix, at)
                return Target(kind, Prefix.between(at, location), suffix)
        raise TypeError(f"Cannot resolve {pointer!r}")

    async def load(self, pointer: Search | Target, at: Location) -> Node:
        """Return the page an entity pointer refers to.

        Raises:
            ResolutionError: If no page matches the pointer
            TypeError: If the pointer does not refer to an entity
        """
        match pointer:
            case Search(Entity() as kind, prefix, name):
                return self._search_entity(kind, prefix, name, at)
            case Target(Entity() as kind, prefix, _):
                return self._target_entity(kind, prefix, at)
        raise TypeError(f"Not an entity pointer: {pointer}")

    def _start(self, prefix: Prefix, at: Location) -> Location:
        location = prefix.to_location(at)
        if location is None:
            raise ResolutionError(f"In {at} prefix escapes the site root: {prefix}")
        return location

    def _target_entity(self, kind: Entity, prefix: Prefix, at: Location) -> Node:
        location = self._start(prefix, at)
        page = self._index.by_location(location, kind.cls)
        if page is None:
            raise ResolutionError(f"In {at} {kind} not found at {location}")
        return page

    def _search_entity(self, kind: Entity, prefix: Prefix, name: Name, at: Location) -> Node:
        start = self._start(prefix, at)
        matches = self._index.search(start, name, kind.cls)
        if not matches:
            raise ResolutionError(f"In {at} {kind} not found: {prefix}{name}")
        if len(matches) > 1:
            logger.debug(f"{prefix}{name} from {at} matched {len(matches)} pages, using nearest")
        return matches[0]

    async def _target_asset(self, kind: Asset, prefix: Prefix, filename: str, at: Location) -> Location:
        location = self._start(prefix, at)
        if await self._find(location, filename) is None:
            raise ResolutionError(f"In {at} {kind} not found: {location}{filename}")
        return location

    async def _search_asset(
        self, kind: Asset, prefix: Prefix, name: Name, at: Location
    ) -> tuple[Location, str]:
        """Look for name.<ext> from the start location up to the root.

        Each location is checked directly and then in the asset's directory.
        """
        start = self._start(prefix, at)
        for location in [start, *start.ancestors]:
            candidates = [location]
            if kind.directory is not None:
                candidates.append(location.append(kind.directory))
            for candidate in candidates:
                for extension in kind.extensions:
                    filename = f"{name}.{extension}"
                    if await self._find(candidate, filename) is not None:
                        return candidate, filename
        raise ResolutionError(f"In {at} {kind} not found: {Absolute(start)}{name}")

    async def _find(self, location: Location, filename: str) -> FilePath | None:
        if self._assets is None:
            raise ResolutionError(f"No asset store to find {location}{filename}")
        return await self._assets.find_asset(location, filename)
