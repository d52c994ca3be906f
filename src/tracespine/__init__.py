"""
tracespine - requirements traceability for source trees.

Artifacts (requirements, specifications, tests) are declared in ``.rsk``
TOML files; ``tracespine.core`` discovers and loads them.
"""

__version__ = "0.1.0"

from tracespine.core import *  # noqa
