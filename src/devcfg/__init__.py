"""
devcfg - command-line front end for the device configuration store.

Parses one verb and its arguments, then makes a single call to the store.
"""

from __future__ import annotations

__version__ = "0.1.0"

from devcfg.devcfg import main, run

__all__ = ["main", "run", "__version__"]
