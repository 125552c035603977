"""Site-wide page index.

The index is built once per site tree by walking it from the root page and
answers lookups by name, by location and by content type. It is an
immutable snapshot; a changed tree needs a new index.
"""

import asyncio
import logging
from collections.abc import Iterator, Mapping, Sequence
from types import MappingProxyType
from typing import Generic, Protocol, TypeVar, runtime_checkable

from sitemark.core.location import Location
from sitemark.core.name import Name

logger = logging.getLogger(__name__)


@runtime_checkable
class Node(Protocol):
    """Page in a site tree as seen by the index."""

    @property
    def name(self) -> Name | None:
        """Primary lookup name, None for the root."""
        ...

    @property
    def location(self) -> Location: ...

    @property
    def content_type(self) -> type:
        """Type of the content this page carries."""
        ...

    async def titles(self) -> Sequence[Name]:
        """Alternate lookup names."""
        ...

    async def children(self) -> "Sequence[Node]": ...


N = TypeVar("N", bound=Node)


def _assignable(page: Node, cls: type | None) -> bool:
    return cls is None or issubclass(page.content_type, cls)


class Index(Generic[N]):
    """Lookup table of every page in a site tree."""

    __slots__ = ("_by_location", "_by_name")

    def __init__(
        self,
        pages_by_name: Mapping[Name, Sequence[N]],
        pages_by_location: Mapping[Location, N],
    ) -> None:
        """Initialize index.

        Args:
            pages_by_name: Pages registered under each name, in registration order
            pages_by_location: Page at each location, in visitation order
        """
        self._by_name = MappingProxyType(
            {name: tuple(pages) for name, pages in pages_by_name.items()}
        )
        self._by_location = MappingProxyType(dict(pages_by_location))

    @classmethod
    async def build(cls, root: N) -> "Index[N]":
        """Index every page reachable from root.

        Pages are visited in pre-order: a page's children are indexed before
        its next sibling. Each page is registered under its name and then
        under each of its titles, so a title equal to its name registers the
        page twice. Any error raised while fetching titles or children aborts
        the build and cancels the other fetch.

        Args:
            root: Root page of the site tree

        Returns:
            Index of all visited pages
        """
        pages_by_name: dict[Name, list[N]] = {}
        pages_by_location: dict[Location, N] = {}

        pending: list[N] = [root]
        while pending:
            page = pending.pop()
            try:
                async with asyncio.TaskGroup() as group:
                    titles = group.create_task(page.titles())
                    children = group.create_task(page.children())
            except ExceptionGroup as e:
                raise e.exceptions[0] from None

            names: list[Name] = [page.name] if page.name is not None else []
            names.extend(titles.result())
            for name in names:
                pages_by_name.setdefault(name, []).append(page)
            pages_by_location[page.location] = page
            logger.debug(f"Indexed {page.location} as {', '.join(map(str, names)) or '(root)'}")

            pending.extend(reversed(children.result()))

        logger.info(f"Indexed {len(pages_by_location)} pages under {len(pages_by_name)} names")
        return cls(pages_by_name, pages_by_location)

    @property
    def pages_by_name(self) -> Mapping[Name, tuple[N, ...]]:
        return self._by_name

    @property
    def pages_by_location(self) -> Mapping[Location, N]:
        return self._by_location

    @property
    def pages(self) -> list[N]:
        """All pages in visitation order."""
        return list(self._by_location.values())

    def by_name(self, name: Name, assignable_to: type | None = None) -> list[N]:
        """Return the pages registered under name, in registration order.

        Args:
            name: Name to look up
            assignable_to: Only include pages whose content is of this type
        """
        return [p for p in self._by_name.get(name, ()) if _assignable(p, assignable_to)]

    def by_location(self, location: Location, assignable_to: type | None = None) -> N | None:
        """Return the page at location, if any."""
        page = self._by_location.get(location)
        if page is None or not _assignable(page, assignable_to):
            return None
        return page

    def by_type(self, assignable_to: type) -> list[N]:
        """Return all pages whose content is of the given type."""
        return [p for p in self._by_location.values() if _assignable(p, assignable_to)]

    def search(self, origin: Location, name: Name, assignable_to: type | None = None) -> list[N]:
        """Return the pages registered under name, nearest to origin first.

        Pages at the same distance keep their registration order.
        """
        return sorted(
            self.by_name(name, assignable_to),
            key=lambda page: origin.distance_to(page.location),
        )

    def __contains__(self, location: object) -> bool:
        return location in self._by_location

    def __iter__(self) -> Iterator[Location]:
        return iter(self._by_location)

    def __len__(self) -> int:
        return len(self._by_location)
