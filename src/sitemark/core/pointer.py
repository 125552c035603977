"""Typed references to entities and assets.

A pointer names something a page links to. Every pointer carries a kind:
either an entity kind tagged with the content type it expects, or one of
the fixed asset kinds (pages, images, stylesheets, scripts). Pointers come
in three shapes:

- ``Search``: find a thing of this kind called ``name`` somewhere from
  ``prefix``; resolved later against an index.
- ``Target``: the thing at ``prefix``, optionally a file named ``suffix``.
- ``External``: an absolute URL outside the site.

Text is converted to pointers with ``parse_pointer()`` or ``kind.parse()``
and back with ``str()``.
"""

import re
from dataclasses import dataclass, field, replace
from typing import ClassVar, Generic, TypeVar

from sitemark.core.location import Location
from sitemark.core.name import Name
from sitemark.core.path import CURRENT, PARENT, Child, Path, regularize

# Scheme-qualified ("https:", "mailto:") or protocol-relative ("//host") URLs
_EXTERNAL = re.compile(r"^(//|[A-Za-z][A-Za-z0-9+.\-]*:)")
MARKDOWN_EXTENSION = "md"


def is_external(text: str) -> bool:
    """True if the text is a URL outside the site."""
    return _EXTERNAL.match(text) is not None


class Prefix:
    """Anchor that a pointer is expressed against.

    Either ``Relative`` to the location a pointer is used from, or
    ``Absolute`` from the site root.
    """

    __slots__ = ()

    empty: ClassVar["Relative"]
    current: ClassVar["Relative"]
    root: ClassVar["Absolute"]

    @staticmethod
    def between(origin: Location, target: Location) -> "Prefix":
        """Return the shortest prefix that leads from origin to target.

        Walks up to the common ancestor and back down. The relative form is
        used unless it has more segments than the absolute one.
        """
        common = origin.common_prefix_with(target)
        up = (PARENT,) * (origin.depth - common.depth)
        down = tuple(Child(name) for name in target.names[common.depth :])
        path = Path(up + down)
        if len(path) <= target.depth:
            return Relative(path)
        return Absolute(target)

    @staticmethod
    def parse(text: str) -> "tuple[Prefix, str | None]":
        """Split text into a prefix and any trailing token.

        Text starting with '/' is absolute; ascent above the root is clamped.
        """
        text = regularize(text)
        path, suffix = Path.parse(text)
        if text.startswith("/"):
            return Absolute(Location.resolved(path)), suffix
        return Relative(path), suffix

    def to_location(self, base: Location) -> Location | None:
        raise NotImplementedError

    def typed(self) -> "tuple[Prefix, Asset] | None":
        raise NotImplementedError


@dataclass(frozen=True)
class Relative(Prefix):
    """Prefix relative to the location a pointer is used from."""

    path: Path = Path.empty

    def to_location(self, base: Location) -> Location | None:
        """Follow this prefix from base, None if it escapes the root."""
        return base.extend(self.path)

    def typed(self) -> "tuple[Relative, Asset] | None":
        """Split off a trailing asset directory (e.g., "images/")."""
        if not self.path or not isinstance(self.path.elements[-1], Child):
            return None
        asset = Asset.by_directory(self.path.elements[-1].name)
        if asset is None:
            return None
        return Relative(Path(self.path.elements[:-1])), asset

    def __str__(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class Absolute(Prefix):
    """Prefix anchored at the site root."""

    location: Location = Location.empty

    def to_location(self, base: Location) -> Location | None:
        return self.location

    def typed(self) -> "tuple[Absolute, Asset] | None":
        """Split off a trailing asset directory (e.g., "/images/")."""
        parent = self.location.parent
        if parent is None:
            return None
        asset = Asset.by_directory(self.location.names[-1])
        if asset is None:
            return None
        return Absolute(parent), asset

    def __str__(self) -> str:
        return str(self.location)


Prefix.empty = Relative(Path.empty)
Prefix.current = Relative(Path((CURRENT,)))
Prefix.root = Absolute(Location.empty)


class PointerType:
    """Base for pointer kinds."""

    __slots__ = ()

    def href(self, prefix: Prefix, suffix: str | None = None) -> str:
        raise NotImplementedError

    def parse(self, text: str) -> "Pointer":
        raise NotImplementedError


T = TypeVar("T")
K = TypeVar("K", bound=PointerType)


@dataclass(frozen=True)
class Entity(PointerType, Generic[T]):
    """Kind of pointers to pages carrying content of type ``cls``."""

    cls: type = object

    def __call__(self, *args: "Name | Path | Location | Prefix") -> "Search[Entity[T]] | Target[Entity[T]]":
        """Build a pointer the way parsing would.

        ``kind(name)`` and ``kind(at, name)`` search; ``kind(at)`` targets.
        """
        match args:
            case (Name() as name,):
                return Search(self, Prefix.empty, name)
            case (at, Name() as name):
                return Search(self, _as_prefix(at), name)
            case (at,):
                return Target(self, _as_prefix(at))
        raise TypeError(f"Unsupported entity pointer arguments: {args!r}")

    def href(self, prefix: Prefix, suffix: str | None = None) -> str:
        """Render the URL of the page at prefix.

        Always ends with '/'; the empty prefix renders as "./".
        """
        return str(Prefix.current if prefix == Prefix.empty else prefix)

    def parse(self, text: str) -> "Pointer[Entity[T]]":
        if is_external(text):
            return External(self, text)
        prefix, suffix = Prefix.parse(text)
        name = Name.parse(suffix) if suffix is not None else None
        if name is not None:
            return Search(self, prefix, name)
        return Target(self, prefix)

    def accepts(self, cls: type) -> bool:
        """True if content of type cls satisfies this kind."""
        return issubclass(cls, self.cls)

    def __str__(self) -> str:
        return f"entity[{self.cls.__name__}]"


@dataclass(frozen=True)
class Variant:
    """File format of an asset, identified by its extensions."""

    extensions: tuple[str, ...]


@dataclass(frozen=True)
class Asset(PointerType):
    """Kind of pointers to static files.

    Attributes:
        name: Default file name searched for (e.g., "stylesheet")
        directory: Conventional directory for this asset (e.g., "stylesheets")
        variants: Recognized file formats
        any_file: Whether targets may name files with any extension
    """

    name: Name
    directory: Name | None
    variants: tuple[Variant, ...] = field(compare=False)
    any_file: bool = field(default=False, compare=False)

    _by_directory: ClassVar[dict[Name, "Asset"]] = {}
    _by_extension: ClassVar[dict[str, "Asset"]] = {}

    def __post_init__(self) -> None:
        if not self.variants or not all(v.extensions for v in self.variants):
            raise ValueError(f"Asset {self.name} needs at least one extension")

    @classmethod
    def register(cls, asset: "Asset") -> "Asset":
        if asset.directory is not None:
            cls._by_directory[asset.directory] = asset
        for extension in asset.extensions:
            cls._by_extension[extension] = asset
        return asset

    @classmethod
    def by_directory(cls, directory: Name) -> "Asset | None":
        return cls._by_directory.get(directory)

    @classmethod
    def detect(cls, text: str) -> "Asset | None":
        """Detect the asset kind from the extension at the end of text."""
        filename = text[text.rfind("/") + 1 :]
        if "." not in filename:
            return None
        return cls._by_extension.get(filename[filename.rfind(".") + 1 :])

    @property
    def extensions(self) -> tuple[str, ...]:
        return tuple(e for variant in self.variants for e in variant.extensions)

    def recognizes(self, filename: str) -> bool:
        """True if filename is a plain file name with one of our extensions."""
        if not filename or "/" in filename or "." not in filename:
            return False
        stem, _, extension = filename.rpartition(".")
        return bool(stem) and extension in self.extensions

    def accepts_file(self, filename: str) -> bool:
        """True if a target of this kind may name filename."""
        if self.any_file:
            return _is_filename(filename)
        return self.recognizes(filename)

    def __call__(self, *args: "Name | str | Path | Location | Prefix") -> "Search[Asset] | Target[Asset]":
        """Build a pointer the way parsing would.

        ``kind(name)`` and ``kind(at, name)`` search; ``kind(filename)`` and
        ``kind(at, filename)`` target.
        """
        match args:
            case (Name() as name,):
                return Search(self, Prefix.empty, name)
            case (str() as filename,):
                return Target(self, Prefix.empty, filename)
            case (at, Name() as name):
                return Search(self, _as_prefix(at), name)
            case (at, str() as filename):
                return Target(self, _as_prefix(at), filename)
        raise TypeError(f"Unsupported {self.name} pointer arguments: {args!r}")

    def href(self, prefix: Prefix, suffix: str | None = None) -> str:
        return f"{prefix}{suffix or ''}"

    def parse(self, text: str) -> "Pointer[Asset]":
        """Parse text as a pointer to this kind of asset.

        A file name this kind accepts targets that file, any other trailing token
        searches by name, and a bare directory searches for the default name.
        """
        if is_external(text):
            return External(self, text)
        prefix, suffix = Prefix.parse(text)
        if suffix is not None:
            if self.accepts_file(suffix):
                return Target(self, prefix, suffix)
            name = Name.parse(suffix)
            if name is not None:
                return Search(self, prefix, name)
        return Search(self, prefix, self.name)

    def __str__(self) -> str:
        return str(self.name)


PAGE = Asset.register(Asset(Name("page"), None, (Variant(("html",)),), any_file=True))
IMAGE = Asset.register(
    Asset(
        Name("image"),
        Name("images"),
        (Variant(("gif",)), Variant(("jpg", "jpeg")), Variant(("png",))),
    )
)
STYLESHEET = Asset.register(Asset(Name("stylesheet"), Name("stylesheets"), (Variant(("css",)),)))
SCRIPT = Asset.register(Asset(Name("script"), Name("scripts"), (Variant(("js",)),)))

ASSETS: tuple[Asset, ...] = (PAGE, IMAGE, STYLESHEET, SCRIPT)

ANY_ENTITY: Entity[object] = Entity(object)


def _is_filename(text: str) -> bool:
    stem, dot, extension = text.rpartition(".")
    return bool(dot and stem and extension) and "/" not in text


def _as_prefix(at: "Path | Location | Prefix") -> Prefix:
    if isinstance(at, Prefix):
        return at
    if isinstance(at, Path):
        return Relative(at)
    if isinstance(at, Location):
        return Absolute(at)
    raise TypeError(f"Cannot use {type(at).__name__} as a pointer prefix")


def _narrow(kind: PointerType, cls: type) -> Entity:
    if not isinstance(kind, Entity):
        raise TypeError(f"Only entity pointers can be narrowed, not {kind}")
    if not kind.accepts(cls):
        raise TypeError(f"Cannot narrow {kind} to {cls.__name__}")
    return Entity(cls)


@dataclass(frozen=True)
class Search(Generic[K]):
    """Pointer to a thing named ``name`` found from ``prefix``."""

    kind: K
    prefix: Prefix
    name: Name

    def with_prefix(self, prefix: Prefix) -> "Search[K]":
        return replace(self, prefix=prefix)

    def narrow(self, cls: type) -> "Search[Entity]":
        """Require a more specific content type.

        Raises:
            TypeError: If this is not an entity pointer or cls is not a
                subclass of its content type
        """
        return Search(_narrow(self.kind, cls), self.prefix, self.name)

    def href(self, base: Location) -> str:
        """Render the searched-for name at the prefix as seen from base.

        Relative prefixes are followed from base and render without a
        leading '/'; ascent above the root is clamped.
        """
        match self.prefix:
            case Relative(path):
                start = Location.resolved(base.path + path)
                return f"{start.path}{self.name}"
            case Absolute(location):
                return f"{location}{self.name}"
        raise TypeError(f"Unknown prefix: {self.prefix!r}")

    def __str__(self) -> str:
        return f"{self.prefix}{self.name}"


@dataclass(frozen=True)
class Target(Generic[K]):
    """Pointer to the thing at ``prefix``.

    Entity targets have no suffix. Asset targets name a file with one of
    the asset's recognized extensions.
    """

    kind: K
    prefix: Prefix
    suffix: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.kind, Entity):
            if self.suffix is not None:
                raise ValueError(f"Entity targets take no suffix: {self.suffix!r}")
        elif isinstance(self.kind, Asset):
            if self.suffix is None or not self.kind.accepts_file(self.suffix):
                raise ValueError(f"Not a {self.kind} file name: {self.suffix!r}")

    @property
    def href(self) -> str:
        return self.kind.href(self.prefix, self.suffix)

    def with_prefix(self, prefix: Prefix) -> "Target[K]":
        return replace(self, prefix=prefix)

    def narrow(self, cls: type) -> "Target[Entity]":
        """Require a more specific content type.

        Raises:
            TypeError: If this is not an entity pointer or cls is not a
                subclass of its content type
        """
        return Target(_narrow(self.kind, cls), self.prefix)

    def __str__(self) -> str:
        return f"{self.prefix}{self.suffix or ''}"


@dataclass(frozen=True)
class External(Generic[K]):
    """Pointer to a URL outside the site."""

    kind: K
    url: str

    @property
    def href(self) -> str:
        return self.url

    def narrow(self, cls: type) -> "External[Entity]":
        return External(_narrow(self.kind, cls), self.url)

    def __str__(self) -> str:
        return self.url


Internal = Search | Target
Pointer = Search | Target | External


def parse_pointer(text: str, kind: PointerType | None = None) -> Pointer:
    """Parse a pointer from text.

    With a kind, parsing follows that kind's grammar (see ``Entity.parse``
    and ``Asset.parse``). Without one, the kind is inferred from the trailing
    token:

    - a file name with a known asset extension targets that asset
    - a markdown source ("guide.md") searches for the page named after its
      stem, and "index.md" targets its directory
    - any other file name targets a page file
    - in an asset directory such as "images/", a name searches for that asset
    - anything else points at an entity of any type

    Examples:
        ""           -> Target(entity, "")
        "/"          -> Target(entity, "/")
        "a/name"     -> Search(entity, "a/", name)
        "name/"      -> Target(entity, "name/")
        "style.css"  -> Target(stylesheet, "", "style.css")
        "a/guide.md" -> Search(entity, "a/", guide)
        "a/index.md" -> Target(entity, "a/")
        "notes.txt"  -> Target(page, "", "notes.txt")
        "images/"    -> Search(image, "", image)
        "https://x"  -> External(page, "https://x")
    """
    if kind is not None:
        return kind.parse(text)
    if is_external(text):
        return External(Asset.detect(text) or PAGE, text)
    prefix, suffix = Prefix.parse(text)
    if suffix is not None:
        asset = Asset.detect(suffix)
        if asset is not None and asset.recognizes(suffix):
            return Target(asset, prefix, suffix)
        if _is_filename(suffix):
            stem, _, extension = suffix.rpartition(".")
            if extension.lower() != MARKDOWN_EXTENSION:
                return Target(PAGE, prefix, suffix)
            stem_name = Name.parse(stem)
            if stem_name is None or stem.lower() == "index":
                return Target(ANY_ENTITY, prefix)
            return Search(ANY_ENTITY, prefix, stem_name)
    name = Name.parse(suffix) if suffix is not None else None
    typed = prefix.typed()
    if typed is not None:
        at, asset = typed
        return Search(asset, at, name or asset.name)
    if name is not None:
        return Search(ANY_ENTITY, prefix, name)
    return Target(ANY_ENTITY, prefix)
