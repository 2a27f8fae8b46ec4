"""Spaces - parallel checkouts of remote repositories, one directory per branch."""

from __future__ import annotations

__version__ = "0.1.0"
