"""Shared test fixtures."""

from pathlib import Path

import pytest

from sitemark.config import Config, DocsConfig, LiveReloadConfig, ServerConfig


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Create a test configuration with tmp_path directories.

    Creates source_dir and returns a Config instance suitable for testing.
    Use exist_ok=True to allow other fixtures to also create the docs dir.
    """
    source_dir = tmp_path / "docs"
    source_dir.mkdir(exist_ok=True)

    return Config(
        server=ServerConfig(),
        docs=DocsConfig(source_dir=source_dir),
        live_reload=LiveReloadConfig(enabled=False),
    )


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """Create a small documentation tree.

    docs/
        index.md                  # Welcome
        guide.md                  # Getting Started
        images/logo.png
        stylesheets/stylesheet.css
        domain/
            index.md              # Domain
            guide.md              # Domain Guide
            api/reference.md
            images/diagram.png
    """
    docs = tmp_path / "docs"
    docs.mkdir(exist_ok=True)
    (docs / "index.md").write_text("# Welcome\n\nHome page.")
    (docs / "guide.md").write_text("# Getting Started\n\nFirst steps.")
    (docs / "images").mkdir()
    (docs / "images" / "logo.png").write_bytes(b"\x89PNG root logo")
    (docs / "stylesheets").mkdir()
    (docs / "stylesheets" / "stylesheet.css").write_text("body { margin: 0; }")

    domain = docs / "domain"
    domain.mkdir()
    (domain / "index.md").write_text("# Domain\n\nDomain overview.")
    (domain / "guide.md").write_text("# Domain Guide\n\nDomain specifics.")
    (domain / "api").mkdir()
    (domain / "api" / "reference.md").write_text("No heading here.")
    (domain / "images").mkdir()
    (domain / "images" / "diagram.png").write_bytes(b"\x89PNG diagram")
    return docs
