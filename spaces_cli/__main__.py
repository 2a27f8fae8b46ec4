"""Allow running ``python -m spaces_cli``."""

from __future__ import annotations

from spaces_cli.cli import app

if __name__ == "__main__":
    app()
