"""Root-anchored locations in the site tree."""

from dataclasses import dataclass
from functools import total_ordering
from typing import ClassVar

from sitemark.core.name import Name
from sitemark.core.path import Child, Path


@total_ordering
@dataclass(frozen=True)
class Location:
    """An absolute coordinate in the site tree.

    The wrapped path contains only named children; the empty path is the
    root. Use ``Location.of()`` to build a location from an arbitrary path.
    """

    path: Path = Path.empty

    empty: ClassVar["Location"]

    def __post_init__(self) -> None:
        if not all(isinstance(element, Child) for element in self.path):
            raise ValueError(f"Location path must only contain names: {self.path}")

    @classmethod
    def of(cls, path: Path) -> "Location | None":
        """Resolve a path against the root.

        Returns:
            Location, or None if the path ascends above the root
        """
        resolved = path.resolved
        if resolved.ascends:
            return None
        return cls(resolved)

    @classmethod
    def resolved(cls, path: Path) -> "Location":
        """Resolve a path against the root, clamping any ascent at the root."""
        return cls(Path.of(*path.resolved.names))

    @classmethod
    def parse(cls, text: str) -> "Location | None":
        """Parse a slash-separated location string (e.g., "/a/b/")."""
        return cls.of(Path.of(text))

    @property
    def names(self) -> tuple[Name, ...]:
        """Names from the root down to this location."""
        return self.path.names

    @property
    def depth(self) -> int:
        return len(self.path)

    @property
    def parent(self) -> "Location | None":
        """The enclosing location, None at the root."""
        if not self.path:
            return None
        return Location(Path(self.path.elements[:-1]))

    @property
    def ancestors(self) -> "list[Location]":
        """All enclosing locations, nearest first, ending with the root."""
        result: list[Location] = []
        current = self.parent
        while current is not None:
            result.append(current)
            current = current.parent
        return result

    def append(self, name: Name) -> "Location":
        """Return the child location with the given name."""
        return Location(self.path.append(name))

    def extend(self, path: Path) -> "Location | None":
        """Follow a relative path from this location.

        Returns:
            Location, or None if the path ascends above the root
        """
        return Location.of(self.path + path)

    def common_prefix_with(self, other: "Location") -> "Location":
        """Return the deepest location enclosing both this and other."""
        shared: list[Name] = []
        for ours, theirs in zip(self.names, other.names):
            if ours != theirs:
                break
            shared.append(ours)
        return Location(Path.of(*shared))

    def distance_to(self, other: "Location") -> int:
        """Count the tree edges between this and other."""
        common = self.common_prefix_with(other).depth
        return (self.depth - common) + (other.depth - common)

    def is_ancestor_of(self, other: "Location") -> bool:
        """True if this location encloses other or equals it."""
        return other.names[: self.depth] == self.names

    def __lt__(self, other: "Location") -> bool:
        if not isinstance(other, Location):
            return NotImplemented
        return self.names < other.names

    def __str__(self) -> str:
        return f"/{self.path}"


Location.empty = Location()
