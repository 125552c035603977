"""Relative paths within a site.

A path is a sequence of navigation elements: named children, the current
location (``.``) and the parent location (``..``). Paths are not anchored
anywhere; see ``sitemark.core.location`` for root-anchored coordinates.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Iterator

from sitemark.core.name import Name


class Step(Enum):
    """Navigation element that does not name a child."""

    CURRENT = "."
    PARENT = ".."

    def __str__(self) -> str:
        return self.value


CURRENT = Step.CURRENT
PARENT = Step.PARENT


@dataclass(frozen=True)
class Child:
    """Navigation element that descends into a named child."""

    name: Name

    def __str__(self) -> str:
        return str(self.name)


Element = Child | Step

# Any mix of forward and back slashes separates segments
_SEPARATORS = re.compile(r"[\\/]+")


def regularize(text: str) -> str:
    """Collapse every run of slashes or backslashes into a single '/'."""
    return _SEPARATORS.sub("/", text)


def parse_element(segment: str) -> Element | None:
    """Parse a single path segment.

    Returns:
        The element, or None when the segment is not a valid name
    """
    if segment == ".":
        return CURRENT
    if segment == "..":
        return PARENT
    name = Name.parse(segment)
    return Child(name) if name is not None else None


def _extract(text: str) -> tuple[Element, ...]:
    elements = (parse_element(segment) for segment in regularize(text).split("/"))
    return tuple(element for element in elements if element is not None)


def _elements_of(part: "str | Name | Element | Path") -> tuple[Element, ...]:
    if isinstance(part, Path):
        return part.elements
    if isinstance(part, Name):
        return (Child(part),)
    if isinstance(part, (Child, Step)):
        return (part,)
    if isinstance(part, str):
        return _extract(part)
    raise TypeError(f"Cannot build path elements from {type(part).__name__}")


@dataclass(frozen=True)
class Path:
    """An ordered sequence of navigation elements."""

    elements: tuple[Element, ...] = ()

    empty: ClassVar["Path"]

    def __post_init__(self) -> None:
        if not isinstance(self.elements, tuple):
            object.__setattr__(self, "elements", tuple(self.elements))

    @classmethod
    def of(cls, *parts: "str | Name | Element | Path") -> "Path":
        """Build a path from strings, names, elements or other paths.

        Strings are split on slashes; empty segments and segments without
        any letters or digits are dropped.
        """
        elements: tuple[Element, ...] = ()
        for part in parts:
            elements += _elements_of(part)
        return cls(elements)

    @classmethod
    def parse(cls, text: str) -> "tuple[Path, str | None]":
        """Split text into a path and any meaningful trailing segment.

        Text ending in '/' is all path. Otherwise the segment after the last
        '/' is returned separately unless it is '.' or '..', which navigate.

        Examples:
            "a/b/" -> (a/b/, None)
            "a/b"  -> (a/, "b")
            "a/.." -> (a/../, None)
        """
        text = regularize(text)
        if text.endswith("/"):
            return cls.of(text), None
        index = text.rfind("/") + 1
        path = cls.of(text[:index])
        suffix = text[index:]
        if suffix in (".", ".."):
            return path.append(suffix), None
        return path, suffix or None

    @property
    def parent(self) -> "Path":
        """This path followed by a parent element."""
        return self.append(PARENT)

    @property
    def names(self) -> tuple[Name, ...]:
        """Names of the child elements in order."""
        return tuple(e.name for e in self.elements if isinstance(e, Child))

    @property
    def normalized(self) -> "Path":
        """This path without redundant current elements."""
        elements = tuple(e for e in self.elements if e is not CURRENT)
        if not elements and self.elements:
            return Path((CURRENT,))
        if len(elements) == len(self.elements):
            return self
        return Path(elements)

    @property
    def is_normalized(self) -> bool:
        return self.normalized == self

    @property
    def resolved(self) -> "Path":
        """This path with each parent cancelling the nearest preceding child.

        Current elements are dropped. Leading parents that have nothing to
        cancel are kept, so a resolved path may still ascend.
        """
        result: list[Element] = []
        for element in self.elements:
            if element is CURRENT:
                continue
            if element is PARENT and result and result[-1] is not PARENT:
                result.pop()
            else:
                result.append(element)
        resolved = tuple(result)
        if resolved == self.elements:
            return self
        return Path(resolved)

    @property
    def is_resolved(self) -> bool:
        return self.resolved == self

    @property
    def ascends(self) -> bool:
        """True if the resolved path climbs above its starting point."""
        resolved = self.resolved.elements
        return bool(resolved) and resolved[0] is PARENT

    def prepend(self, part: "str | Name | Element | Path") -> "Path":
        """Return this path with the given part in front of it."""
        elements = _elements_of(part)
        if not elements:
            return self
        return Path(elements + self.elements)

    def append(self, part: "str | Name | Element | Path") -> "Path":
        """Return this path with the given part after it."""
        elements = _elements_of(part)
        if not elements:
            return self
        return Path(self.elements + elements)

    def __add__(self, other: "Path") -> "Path":
        if not isinstance(other, Path):
            return NotImplemented
        if not self.elements:
            return other
        if not other.elements:
            return self
        return Path(self.elements + other.elements)

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[Element]:
        return iter(self.elements)

    def __str__(self) -> str:
        return "".join(f"{element}/" for element in self.elements)


Path.empty = Path()
