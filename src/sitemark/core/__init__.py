"""Address resolution for site content.

Names, paths and locations describe where pages live; pointers describe
what a page links to; the index and resolver connect the two.
"""

from sitemark.core.index import Index, Node
from sitemark.core.location import Location
from sitemark.core.name import Name, normalize
from sitemark.core.path import CURRENT, PARENT, Child, Path, Step
from sitemark.core.pointer import (
    ANY_ENTITY,
    ASSETS,
    IMAGE,
    PAGE,
    SCRIPT,
    STYLESHEET,
    Absolute,
    Asset,
    Entity,
    External,
    Internal,
    Pointer,
    Prefix,
    Relative,
    Search,
    Target,
    Variant,
    parse_pointer,
)
from sitemark.core.resolver import ResolutionError, Resolver

__all__ = [
    "ANY_ENTITY",
    "ASSETS",
    "CURRENT",
    "IMAGE",
    "PAGE",
    "PARENT",
    "SCRIPT",
    "STYLESHEET",
    "Absolute",
    "Asset",
    "Child",
    "Entity",
    "External",
    "Index",
    "Internal",
    "Location",
    "Name",
    "Node",
    "Path",
    "Pointer",
    "Prefix",
    "Relative",
    "ResolutionError",
    "Resolver",
    "Search",
    "Step",
    "Target",
    "Variant",
    "normalize",
    "parse_pointer",
]
