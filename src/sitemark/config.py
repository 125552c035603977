"""Sitemark settings.

Settings are read from ``sitemark.toml``, found in the working directory or
the nearest parent that has one. Every table is optional::

    [server]
    host = "127.0.0.1"
    port = 8080

    [docs]
    source_dir = "docs"        # relative to sitemark.toml

    [site]
    content_type = "document"  # type of pages outside any scope

    [site.scopes]
    "/blog/" = "article"       # pages at and below /blog/ are articles

    [live_reload]
    enabled = true
    watch_patterns = ["**/*.md"]
"""

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, TypeVar

from sitemark.core.location import Location
from sitemark.core.name import Name

CONFIG_FILENAME = "sitemark.toml"

T = TypeVar("T")

_EXPECTED = {str: "a string", int: "an integer", bool: "a boolean"}


@dataclass
class ServerConfig:
    """Address the server listens on."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class DocsConfig:
    source_dir: Path = field(default_factory=lambda: Path("docs"))


@dataclass
class SiteConfig:
    """Content types of the site's pages.

    Attributes:
        content_type: Type of pages outside any scope
        scopes: Type of the page at each location and of every page below it;
                the nearest scope wins
    """

    content_type: Name = field(default_factory=lambda: Name("document"))
    scopes: dict[Location, Name] = field(default_factory=dict)


@dataclass
class LiveReloadConfig:
    enabled: bool = True
    watch_patterns: list[str] | None = None


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    docs: DocsConfig = field(default_factory=DocsConfig)
    site: SiteConfig = field(default_factory=SiteConfig)
    live_reload: LiveReloadConfig = field(default_factory=LiveReloadConfig)
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from config_path or a discovered sitemark.toml.

        Without a file every setting keeps its default.

        Raises:
            FileNotFoundError: If an explicit config_path doesn't exist
            ValueError: If the file is not valid TOML or a setting is invalid
        """
        if config_path is None:
            config_path = discover()
            if config_path is None:
                return cls()
        elif not config_path.is_file():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        return cls.from_file(config_path)

    @classmethod
    def from_file(cls, path: Path) -> "Config":
        """Read settings from a TOML file; relative paths start at its directory."""
        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {path}: {e}") from e

        server = _table(data, "server")
        docs = _table(data, "docs")
        site = _table(data, "site")
        live_reload = _table(data, "live_reload")

        return cls(
            server=ServerConfig(
                host=_value(server, "server.host", str, ServerConfig.host),
                port=_value(server, "server.port", int, ServerConfig.port),
            ),
            docs=DocsConfig(source_dir=path.parent / _value(docs, "docs.source_dir", str, "docs")),
            site=SiteConfig(
                content_type=_name(_value(site, "site.content_type", str, "document"), "site.content_type"),
                scopes=_scopes(_table(site, "site.scopes")),
            ),
            live_reload=LiveReloadConfig(
                enabled=_value(live_reload, "live_reload.enabled", bool, LiveReloadConfig.enabled),
                watch_patterns=_patterns(live_reload.get("watch_patterns")),
            ),
            config_path=path,
        )

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        source_dir: Path | None = None,
        live_reload_enabled: bool | None = None,
    ) -> "Config":
        """Return a copy with command-line values applied; None keeps a setting."""
        return replace(
            self,
            server=replace(self.server, **_given(host=host, port=port)),
            docs=replace(self.docs, **_given(source_dir=source_dir)),
            live_reload=replace(self.live_reload, **_given(enabled=live_reload_enabled)),
        )


def discover(start: Path | None = None) -> Path | None:
    """Return the sitemark.toml nearest to start (default: working directory)."""
    directory = start or Path.cwd()
    for candidate in [directory, *directory.parents]:
        path = candidate / CONFIG_FILENAME
        if path.is_file():
            return path
    return None


def _table(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    """Return the table at the last part of a dotted key, empty if absent."""
    table = data.get(key.rpartition(".")[2], {})
    if not isinstance(table, dict):
        raise ValueError(f"[{key}] must be a table")
    return table


def _value(table: Mapping[str, Any], key: str, expected: type[T], default: T) -> T:
    value = table.get(key.rpartition(".")[2], default)
    # TOML booleans are ints to isinstance
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise ValueError(f"{key} must be {_EXPECTED[expected]}")
    return value


def _name(text: str, key: str) -> Name:
    name = Name.parse(text)
    if name is None:
        raise ValueError(f"{key} is not a valid name: {text!r}")
    return name


def _scopes(table: Mapping[str, Any]) -> dict[Location, Name]:
    scopes: dict[Location, Name] = {}
    for key, type_name in table.items():
        location = Location.parse(key)
        if location is None:
            raise ValueError(f"site.scopes: {key!r} escapes the site root")
        if not isinstance(type_name, str):
            raise ValueError(f"site.scopes.{key!r} must be a string")
        scopes[location] = _name(type_name, f"site.scopes.{key!r}")
    return scopes


def _patterns(value: object) -> list[str] | None:
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError("live_reload.watch_patterns must be a list of strings")
    return list(value)


def _given(**values: Any) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}
