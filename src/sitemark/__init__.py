"""Sitemark - Typed links for markdown sites."""

__version__ = "0.1.0"
