"""Canonical names.

A name pairs the text a human wrote with a normalized form that is stable
under changes to case, punctuation and spacing. Only the normalized form
takes part in comparisons.
"""

import re
from dataclasses import dataclass, field

_QUOTES = re.compile(r"['\"`]")
_SEPARATORS = re.compile(r"[^a-z0-9]+")


def normalize(text: str) -> str:
    """Return the normalized form of a display string.

    Quote characters are removed, letters are lowercased and every run of
    other characters collapses into a single hyphen. Only ASCII letters and
    digits survive: "Über" becomes "ber" and text written entirely in
    other scripts normalizes to the empty string, so it is not a name.

    Args:
        text: Display text (e.g., "Getting Started!")

    Returns:
        Normalized text (e.g., "getting-started"), possibly empty
    """
    return _SEPARATORS.sub("-", _QUOTES.sub("", text).lower()).strip("-")


@dataclass(frozen=True, order=True)
class Name:
    """Identifier with a normalized and a display form.

    Equality, ordering and hashing use ``normal`` only.
    The normal form holds ASCII letters, digits and hyphens only.
    """

    normal: str
    display: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        if not self.normal or normalize(self.normal) != self.normal:
            raise ValueError(f"Not a normalized name: {self.normal!r}")
        if not self.display:
            object.__setattr__(self, "display", self.normal)

    @classmethod
    def parse(cls, text: str) -> "Name | None":
        """Create a name from display text.

        Args:
            text: Display text

        Returns:
            Name, or None if the text has no letters or digits
        """
        normal = normalize(text)
        if not normal:
            return None
        return cls(normal, text)

    @classmethod
    def of(cls, text: str) -> "Name":
        """Create a name from display text, failing on invalid input.

        Raises:
            ValueError: If the text has no letters or digits
        """
        name = cls.parse(text)
        if name is None:
            raise ValueError(f"Not a valid name: {text!r}")
        return name

    def __str__(self) -> str:
        return self.normal
