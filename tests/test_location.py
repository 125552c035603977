"""Tests for root-anchored locations."""

import pytest

from sitemark.core.location import Location
from sitemark.core.name import Name
from sitemark.core.path import Path


def loc(text: str) -> Location:
    location = Location.parse(text)
    assert location is not None
    return location


class TestConstruction:
    """Tests for building locations from paths."""

    def test__of__resolves_path(self) -> None:
        assert Location.of(Path.of("a/../b")) == Location(Path.of("b"))

    def test__of__escaping_path__returns_none(self) -> None:
        assert Location.of(Path.of("..")) is None

    def test__of__empty_path__is_root(self) -> None:
        assert Location.of(Path.empty) == Location.empty

    def test__resolved__clamps_at_root(self) -> None:
        assert Location.resolved(Path.of("../a")) == Location.resolved(Path.of("a"))

    def test__constructor__rejects_navigation_elements(self) -> None:
        with pytest.raises(ValueError, match="only contain names"):
            Location(Path.of("a/.."))

    def test__str(self) -> None:
        assert str(Location.empty) == "/"
        assert str(loc("/a/b")) == "/a/b/"


class TestNavigation:
    def test__depth_and_parent(self) -> None:
        location = loc("/a/b/")

        assert location.depth == 2
        assert location.parent == loc("/a/")
        assert Location.empty.parent is None

    def test__ancestors__nearest_first(self) -> None:
        assert loc("/a/b/").ancestors == [loc("/a/"), Location.empty]
        assert Location.empty.ancestors == []

    def test__append(self) -> None:
        assert loc("/a/").append(Name("b")) == loc("/a/b/")

    def test__extend__follows_relative_path(self) -> None:
        assert loc("/a/b/").extend(Path.of("../c")) == loc("/a/c/")

    def test__extend__escaping_path__returns_none(self) -> None:
        assert loc("/a/b/").extend(Path.of("../../..")) is None


class TestDistance:
    """Tests for common_prefix_with() and distance_to()."""

    def test__common_prefix(self) -> None:
        assert loc("/a/b/").common_prefix_with(loc("/a/c/d/")) == loc("/a/")
        assert loc("/x/").common_prefix_with(loc("/y/")) == Location.empty

    def test__distance__counts_edges_through_common_ancestor(self) -> None:
        assert loc("/a/b/").distance_to(loc("/a/c/d/")) == 3
        assert loc("/a/c/d/").distance_to(loc("/a/b/")) == 3

    def test__distance_to_self__is_zero(self) -> None:
        assert loc("/a/b/").distance_to(loc("/a/b/")) == 0

    def test__ancestor_chain(self) -> None:
        a, b, c = loc("/x/"), loc("/x/y/"), loc("/x/y/z/")

        assert a.common_prefix_with(c) == a
        assert c.distance_to(a) == c.depth - a.depth
        assert a.is_ancestor_of(b)
        assert a.is_ancestor_of(a)
        assert not c.is_ancestor_of(a)


class TestOrdering:
    def test__sorted__by_names(self) -> None:
        locations = [loc("/b/"), loc("/a/b/"), Location.empty, loc("/a/")]

        assert sorted(locations) == [Location.empty, loc("/a/"), loc("/a/b/"), loc("/b/")]
