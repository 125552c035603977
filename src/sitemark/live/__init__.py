"""Live reload support for development mode."""

from sitemark.live.reload import LiveReloadManager

__all__ = ["LiveReloadManager"]
