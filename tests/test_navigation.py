"""Tests for navigation and breadcrumbs."""

from pathlib import Path

import pytest

from sitemark.core.location import Location
from sitemark.core.navigation import BreadcrumbItem, NavItem, build_breadcrumbs, build_navigation
from sitemark.core.site import SiteLoader


def loc(text: str) -> Location:
    location = Location.parse(text)
    assert location is not None
    return location


class TestNavItem:
    def test__to_dict__omits_empty_children(self) -> None:
        item = NavItem(title="Guide", path="/guide/")

        assert item.to_dict() == {"title": "Guide", "path": "/guide/"}

    def test__to_dict__nests_children(self) -> None:
        item = NavItem(title="A", path="/a/", children=[NavItem(title="B", path="/a/b/")])

        assert item.to_dict() == {
            "title": "A",
            "path": "/a/",
            "children": [{"title": "B", "path": "/a/b/"}],
        }


class TestBuildNavigation:
    """Tests for build_navigation()."""

    @pytest.mark.asyncio
    async def test__full_tree(self, site_dir: Path) -> None:
        index = await SiteLoader(site_dir).index()

        items = [item.to_dict() for item in await build_navigation(index)]

        assert items == [
            {
                "title": "Domain",
                "path": "/domain/",
                "children": [
                    {
                        "title": "Api",
                        "path": "/domain/api/",
                        "children": [{"title": "Reference", "path": "/domain/api/reference/"}],
                    },
                    {"title": "Domain Guide", "path": "/domain/guide/"},
                ],
            },
            {"title": "Getting Started", "path": "/guide/"},
        ]

    @pytest.mark.asyncio
    async def test__subtree(self, site_dir: Path) -> None:
        index = await SiteLoader(site_dir).index()

        items = await build_navigation(index, loc("/domain/api/"))

        assert [item.path for item in items] == ["/domain/api/reference/"]

    @pytest.mark.asyncio
    async def test__leaf_or_unknown__is_empty(self, site_dir: Path) -> None:
        index = await SiteLoader(site_dir).index()

        assert await build_navigation(index, loc("/guide/")) == []
        assert await build_navigation(index, loc("/nowhere/")) == []


class TestBuildBreadcrumbs:
    """Tests for build_breadcrumbs()."""

    @pytest.mark.asyncio
    async def test__nested_page(self, site_dir: Path) -> None:
        index = await SiteLoader(site_dir).index()

        breadcrumbs = await build_breadcrumbs(index, loc("/domain/api/reference/"))

        assert breadcrumbs == [
            BreadcrumbItem(title="Home", path="/"),
            BreadcrumbItem(title="Domain", path="/domain/"),
            BreadcrumbItem(title="Api", path="/domain/api/"),
        ]

    @pytest.mark.asyncio
    async def test__top_level_page__only_home(self, site_dir: Path) -> None:
        index = await SiteLoader(site_dir).index()

        assert await build_breadcrumbs(index, loc("/guide/")) == [BreadcrumbItem(title="Home", path="/")]

    @pytest.mark.asyncio
    async def test__root__has_none(self, site_dir: Path) -> None:
        index = await SiteLoader(site_dir).index()

        assert await build_breadcrumbs(index, Location.empty) == []

    def test__to_dict(self) -> None:
        assert BreadcrumbItem(title="Home", path="/").to_dict() == {"title": "Home", "path": "/"}
