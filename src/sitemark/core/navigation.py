"""Navigation tree builder.

Builds navigation trees and breadcrumbs from a site index for UI
presentation. Navigation is a view layer over the indexed page hierarchy.
"""

from dataclasses import dataclass, field
from typing import TypedDict

from sitemark.core.index import Index
from sitemark.core.location import Location
from sitemark.core.site import SitePage


class NavItemDict(TypedDict, total=False):
    """Dictionary representation of a navigation item."""

    title: str
    path: str
    children: list["NavItemDict"]


@dataclass
class NavItem:
    """Navigation item with children for UI tree."""

    title: str
    path: str
    children: list["NavItem"] = field(default_factory=list)

    def to_dict(self) -> NavItemDict:
        """Convert to dictionary for JSON serialization."""
        result: NavItemDict = {"title": self.title, "path": self.path}
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


@dataclass(frozen=True)
class BreadcrumbItem:
    """Breadcrumb navigation item."""

    title: str
    path: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {"title": self.title, "path": self.path}


def _children_by_parent(index: Index[SitePage]) -> dict[Location, list[SitePage]]:
    children: dict[Location, list[SitePage]] = {}
    for page in index.pages:
        parent = page.location.parent
        if parent is not None:
            children.setdefault(parent, []).append(page)
    return children


async def build_navigation(
    index: Index[SitePage], location: Location = Location.empty
) -> list[NavItem]:
    """Build navigation trees for the children of a page.

    Args:
        index: Site index
        location: Location of the page whose children are listed (default: root)

    Returns:
        List of NavItem trees in site order, empty for unknown locations
    """
    children = _children_by_parent(index)

    async def build_item(page: SitePage) -> NavItem:
        return NavItem(
            title=await page.title(),
            path=str(page.location),
            children=[await build_item(child) for child in children.get(page.location, [])],
        )

    return [await build_item(page) for page in children.get(location, [])]


async def build_breadcrumbs(index: Index[SitePage], location: Location) -> list[BreadcrumbItem]:
    """Build breadcrumbs for a page.

    Returns "Home" followed by the indexed ancestors of the page; the page
    itself is not included. The root page gets no breadcrumbs.
    """
    if location == Location.empty:
        return []

    breadcrumbs = [BreadcrumbItem(title="Home", path="/")]
    for ancestor in reversed(location.ancestors[:-1]):
        page = index.by_location(ancestor)
        if page is not None:
            breadcrumbs.append(BreadcrumbItem(title=await page.title(), path=str(ancestor)))
    return breadcrumbs
