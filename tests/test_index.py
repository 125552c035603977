"""Tests for the site-wide page index."""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field

import pytest

from sitemark.core.index import Index, Node
from sitemark.core.location import Location
from sitemark.core.name import Name


class Article:
    pass


class Tutorial(Article):
    pass


@dataclass(eq=False)
class FakeNode:
    """In-memory tree node."""

    name: Name | None
    location: Location
    content_type: type = object
    title_names: list[Name] = field(default_factory=list)
    child_nodes: list["FakeNode"] = field(default_factory=list)
    fail: bool = False

    async def titles(self) -> Sequence[Name]:
        await asyncio.sleep(0)
        if self.fail:
            raise OSError(f"cannot read {self.location}")
        return self.title_names

    async def children(self) -> Sequence["FakeNode"]:
        await asyncio.sleep(0)
        return self.child_nodes


@dataclass(eq=False)
class SlowChildrenNode(FakeNode):
    """Node whose children take longer to list than its titles."""

    cancelled: bool = False

    async def children(self) -> Sequence["FakeNode"]:
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return self.child_nodes


def node(
    path: str,
    *children: FakeNode,
    content_type: type = object,
    titles: list[str] | None = None,
    fail: bool = False,
) -> FakeNode:
    location = Location.parse(path)
    assert location is not None
    return FakeNode(
        name=location.names[-1] if location.names else None,
        location=location,
        content_type=content_type,
        title_names=[Name.of(t) for t in titles or []],
        child_nodes=list(children),
        fail=fail,
    )


def loc(text: str) -> Location:
    location = Location.parse(text)
    assert location is not None
    return location


class TestNodeProtocol:
    def test__fake_node__satisfies_protocol(self) -> None:
        assert isinstance(node("/"), Node)


class TestBuild:
    """Tests for Index.build()."""

    @pytest.mark.asyncio
    async def test__two_children__indexes_every_location(self) -> None:
        a, b = node("/a/"), node("/b/")
        root = node("/", a, b)

        index = await Index.build(root)

        assert dict(index.pages_by_location) == {Location.empty: root, loc("/a/"): a, loc("/b/"): b}
        assert index.by_name(Name("a")) == [a]
        assert len(index) == 3

    @pytest.mark.asyncio
    async def test__visits_pages_in_pre_order(self) -> None:
        tree = node(
            "/",
            node("/a/", node("/a/x/"), node("/a/y/", node("/a/y/z/"))),
            node("/b/"),
        )

        index = await Index.build(tree)

        assert [str(p.location) for p in index.pages] == [
            "/",
            "/a/",
            "/a/x/",
            "/a/y/",
            "/a/y/z/",
            "/b/",
        ]
        assert list(index) == [p.location for p in index.pages]

    @pytest.mark.asyncio
    async def test__titles__register_alternate_names(self) -> None:
        guide = node("/guide/", titles=["Getting Started", "Guide"])
        index = await Index.build(node("/", guide))

        assert index.by_name(Name("guide")) == [guide, guide]
        assert index.by_name(Name("getting-started")) == [guide]

    @pytest.mark.asyncio
    async def test__title_matching_name__registers_page_twice(self) -> None:
        a = node("/a/", titles=["A"])
        index = await Index.build(node("/", a))

        assert index.by_name(Name("a")) == [a, a]
        assert index.search(Location.empty, Name("a")) == [a, a]

    @pytest.mark.asyncio
    async def test__shared_names__keep_registration_order(self) -> None:
        first = node("/a/guide/")
        second = node("/b/guide/")
        titled = node("/c/", titles=["Guide"])
        root = node("/", node("/a/", first), node("/b/", second), titled)

        index = await Index.build(root)

        assert index.by_name(Name("guide")) == [first, second, titled]

    @pytest.mark.asyncio
    async def test__root__has_no_name(self) -> None:
        index = await Index.build(node("/", titles=["Home"]))

        assert set(index.pages_by_name) == {Name("home")}

    @pytest.mark.asyncio
    async def test__failing_node__aborts_build(self) -> None:
        root = node("/", node("/a/", node("/a/b/", fail=True)), node("/c/"))

        with pytest.raises(OSError, match="cannot read /a/b/"):
            await Index.build(root)

    @pytest.mark.asyncio
    async def test__failing_titles__cancel_pending_children(self) -> None:
        root = SlowChildrenNode(name=None, location=Location.empty, fail=True)

        with pytest.raises(OSError, match="cannot read /"):
            await Index.build(root)

        assert root.cancelled


class TestLookups:
    """Tests for by_name(), by_location(), by_type() and search()."""

    @pytest.fixture
    def tree(self) -> dict[str, FakeNode]:
        pages = {
            "/": node("/"),
            "/a/": node("/a/", content_type=Article),
            "/a/guide/": node("/a/guide/", content_type=Tutorial),
            "/b/": node("/b/"),
            "/b/c/": node("/b/c/"),
            "/b/c/guide/": node("/b/c/guide/"),
            "/guide/": node("/guide/", content_type=Article),
        }
        pages["/"].child_nodes = [pages["/a/"], pages["/b/"], pages["/guide/"]]
        pages["/a/"].child_nodes = [pages["/a/guide/"]]
        pages["/b/"].child_nodes = [pages["/b/c/"]]
        pages["/b/c/"].child_nodes = [pages["/b/c/guide/"]]
        return pages

    @pytest.mark.asyncio
    async def test__by_name__filters_by_type(self, tree: dict[str, FakeNode]) -> None:
        index = await Index.build(tree["/"])

        assert index.by_name(Name("guide"), Article) == [tree["/a/guide/"], tree["/guide/"]]
        assert index.by_name(Name("guide"), Tutorial) == [tree["/a/guide/"]]
        assert index.by_name(Name("missing")) == []

    @pytest.mark.asyncio
    async def test__by_location(self, tree: dict[str, FakeNode]) -> None:
        index = await Index.build(tree["/"])

        assert index.by_location(loc("/b/c/")) is tree["/b/c/"]
        assert index.by_location(loc("/b/c/"), Article) is None
        assert index.by_location(loc("/nowhere/")) is None
        assert loc("/a/guide/") in index
        assert loc("/nowhere/") not in index

    @pytest.mark.asyncio
    async def test__by_type(self, tree: dict[str, FakeNode]) -> None:
        index = await Index.build(tree["/"])

        assert index.by_type(Article) == [tree["/a/"], tree["/a/guide/"], tree["/guide/"]]
        assert len(index.by_type(object)) == len(tree)

    @pytest.mark.asyncio
    async def test__search__nearest_first(self, tree: dict[str, FakeNode]) -> None:
        index = await Index.build(tree["/"])

        found = index.search(loc("/b/c/"), Name("guide"))

        assert found == [tree["/b/c/guide/"], tree["/guide/"], tree["/a/guide/"]]

    @pytest.mark.asyncio
    async def test__search__ties_keep_registration_order(self, tree: dict[str, FakeNode]) -> None:
        index = await Index.build(tree["/"])

        found = index.search(loc("/b/"), Name("guide"))

        # /b/c/guide/ and /guide/ are both two steps away
        assert found == [tree["/b/c/guide/"], tree["/guide/"], tree["/a/guide/"]]

    @pytest.mark.asyncio
    async def test__search__with_type_filter(self, tree: dict[str, FakeNode]) -> None:
        index = await Index.build(tree["/"])

        assert index.search(loc("/b/c/"), Name("guide"), Article) == [tree["/guide/"], tree["/a/guide/"]]


class TestConstructor:
    def test__mappings__are_read_only(self) -> None:
        root = node("/")
        index = Index({}, {Location.empty: root})

        with pytest.raises(TypeError):
            index.pages_by_location[loc("/a/")] = root  # type: ignore[index]
