"""Site tree loaded from a directory of markdown documents.

Conventions:
- ``index.md`` describes its directory; ``source_dir/index.md`` is the root
- every other ``*.md`` file is a leaf page named after its stem
- directories containing markdown are branch pages named after the directory
- entries starting with ``.`` or ``_`` are skipped
"""

import asyncio
import logging
from collections.abc import Mapping
from pathlib import Path

from sitemark.core.index import Index
from sitemark.core.location import Location
from sitemark.core.name import Name

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.md"


class Document:
    """Content type of a plain markdown document."""


_content_types: dict[Name, type] = {Name("document"): Document}


def register_content_type(name: Name) -> type:
    """Return the content type registered under name.

    Unknown names register a new subclass of ``Document``, so pages of every
    configured type are still found by ``index.by_type(Document)``.
    """
    cls = _content_types.get(name)
    if cls is None:
        class_name = "".join(part.capitalize() for part in name.normal.split("-"))
        cls = type(class_name, (Document,), {"__module__": __name__})
        _content_types[name] = cls
    return cls


def find_content_type(name: Name) -> type | None:
    """Return the content type registered under name, if any."""
    return _content_types.get(name)


class SitePage:
    """Page backed by a markdown file, a directory, or both."""

    __slots__ = ("_content_type", "_directory", "_loader", "_location", "_name", "_source_path")

    def __init__(
        self,
        loader: "SiteLoader",
        name: Name | None,
        location: Location,
        source_path: Path | None,
        directory: Path | None,
    ) -> None:
        """Initialize page.

        Args:
            loader: Loader the page belongs to
            name: Page name, None for the root
            location: Location in the site
            source_path: Markdown source, None for a directory without index.md
            directory: Directory holding child pages, None for leaves
        """
        self._loader = loader
        self._name = name
        self._location = location
        self._source_path = source_path
        self._directory = directory
        self._content_type = loader.content_type_for(location)

    @property
    def name(self) -> Name | None:
        return self._name

    @property
    def location(self) -> Location:
        return self._location

    @property
    def source_path(self) -> Path | None:
        return self._source_path

    @property
    def directory(self) -> Path | None:
        return self._directory

    @property
    def content_type(self) -> type:
        return self._content_type

    async def heading(self) -> str | None:
        """Return the text of the first line if it is a markdown heading."""
        if self._source_path is None:
            return None
        return await asyncio.to_thread(_read_heading, self._source_path)

    async def title(self) -> str:
        """Return the heading, or a title derived from the page name."""
        heading = await self.heading()
        if heading:
            return heading
        if self._name is None:
            return "Home"
        return self._name.display.replace("-", " ").replace("_", " ").title()

    async def titles(self) -> list[Name]:
        heading = await self.heading()
        name = Name.parse(heading) if heading else None
        return [name] if name is not None else []

    async def children(self) -> "list[SitePage]":
        if self._directory is None:
            return []
        return await asyncio.to_thread(self._scan)

    async def read(self) -> str:
        """Return the markdown source, empty when the page has none."""
        if self._source_path is None:
            return ""
        return await asyncio.to_thread(self._source_path.read_text, encoding="utf-8")

    def _scan(self) -> "list[SitePage]":
        if self._directory is None or not self._directory.is_dir():
            return []

        branches: dict[Name, SitePage] = {}
        leaves: dict[Name, SitePage] = {}
        for entry in sorted(self._directory.iterdir()):
            if entry.name.startswith((".", "_")):
                continue
            if entry.is_dir():
                name = Name.parse(entry.name)
                if name is None or not _has_markdown(entry):
                    continue
                index_path = entry / INDEX_FILENAME
                branches[name] = self._child(
                    name, index_path if index_path.is_file() else None, entry
                )
            elif entry.suffix.lower() == ".md" and entry.name.lower() != INDEX_FILENAME:
                name = Name.parse(entry.stem)
                if name is None:
                    continue
                leaves[name] = self._child(name, entry, None)

        children: list[SitePage] = []
        for name, page in sorted({**leaves, **branches}.items()):
            if name in leaves and name in branches:
                logger.warning(
                    f"{leaves[name].source_path} shadowed by directory {branches[name].directory}"
                )
            children.append(page)
        return children

    def _child(self, name: Name, source_path: Path | None, directory: Path | None) -> "SitePage":
        return SitePage(self._loader, name, self._location.append(name), source_path, directory)

    def __repr__(self) -> str:
        return f"SitePage({str(self._location)!r})"


class SiteLoader:
    """Loads the site tree and caches its index.

    The index is built on first use and kept until ``invalidate()`` is called.
    """

    def __init__(
        self,
        source_dir: Path,
        *,
        content_type: type = Document,
        scopes: Mapping[Location, type] | None = None,
    ) -> None:
        """Initialize loader.

        Args:
            source_dir: Root directory containing markdown sources
            content_type: Content type of pages outside any scope
            scopes: Content types for locations, inherited by descendants
        """
        self._source_dir = source_dir
        self._content_type = content_type
        self._scopes = dict(scopes or {})
        self._index: Index[SitePage] | None = None
        self._generation = 0
        self._lock = asyncio.Lock()

    @classmethod
    def from_names(
        cls,
        source_dir: Path,
        *,
        content_type: Name = Name("document"),
        scopes: Mapping[Location, Name] | None = None,
    ) -> "SiteLoader":
        """Create a loader with content types given by name (as in sitemark.toml)."""
        return cls(
            source_dir,
            content_type=register_content_type(content_type),
            scopes={location: register_content_type(name) for location, name in (scopes or {}).items()},
        )

    @property
    def source_dir(self) -> Path:
        """Root directory containing markdown sources."""
        return self._source_dir

    def root(self) -> SitePage:
        """Return the root page of the site."""
        index_path = self._source_dir / INDEX_FILENAME
        return SitePage(
            self,
            None,
            Location.empty,
            index_path if index_path.is_file() else None,
            self._source_dir,
        )

    def content_type_for(self, location: Location) -> type:
        """Return the content type of the nearest enclosing scope."""
        for candidate in [location, *location.ancestors]:
            if candidate in self._scopes:
                return self._scopes[candidate]
        return self._content_type

    async def index(self) -> Index[SitePage]:
        """Return the site index, building it if needed.

        A build that overlaps ``invalidate()`` is discarded and started over.
        """
        async with self._lock:
            while self._index is None:
                generation = self._generation
                logger.info(f"Building index for {self._source_dir}")
                index = await Index.build(self.root())
                if generation == self._generation:
                    self._index = index
                else:
                    logger.debug("Site changed while indexing, rebuilding")
            return self._index

    def invalidate(self) -> None:
        """Drop the cached index so the next lookup rebuilds it."""
        self._generation += 1
        self._index = None

    async def find_asset(self, location: Location, filename: str) -> Path | None:
        """Find a static file in the directory for location.

        Args:
            location: Location of the directory (a page or a folder below one)
            filename: Plain file name

        Returns:
            Path to the file, or None if it does not exist
        """
        index = await self.index()
        directory = self._directory_for(index, location)
        if directory is None:
            return None
        candidate = directory / filename
        exists = await asyncio.to_thread(candidate.is_file)
        return candidate if exists else None

    def _directory_for(self, index: Index[SitePage], location: Location) -> Path | None:
        remaining: list[Name] = []
        current = location
        while True:
            page = index.by_location(current)
            if page is not None:
                if page.directory is None:
                    return None
                return _descend(page.directory, remaining)
            parent = current.parent
            if parent is None:
                return None
            remaining.insert(0, current.names[-1])
            current = parent


def _descend(directory: Path, names: list[Name]) -> Path | None:
    for name in names:
        if not directory.is_dir():
            return None
        matches = [e for e in sorted(directory.iterdir()) if e.is_dir() and Name.parse(e.name) == name]
        if not matches:
            return None
        directory = matches[0]
    return directory


def _has_markdown(directory: Path) -> bool:
    return any(
        not any(part.startswith((".", "_")) for part in p.relative_to(directory).parts)
        for p in directory.rglob("*.md")
    )


def _read_heading(source_path: Path) -> str | None:
    with source_path.open(encoding="utf-8") as f:
        for line in f:
            stripped = line.strip()
            if not stripped:
                continue
            if stripped.startswith("#"):
                return stripped.lstrip("#").strip() or None
            return None
    return None
