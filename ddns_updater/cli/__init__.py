"""
Command-line interface components.

This package contains the ``ddns-update`` entry point.
"""

from .main import main

__all__ = ["main"]
