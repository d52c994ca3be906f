"""
CLI layer for tracespine.

Thin terminal transport over ``tracespine.core``: argument parsing,
logging setup and table formatting.

Entry point::

    tracespine --help
"""

from tracespine.cli.app import app

__all__ = ["app"]
