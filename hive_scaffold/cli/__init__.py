"""
CLI module for Hive Scaffold.

Provides the ``hive`` console script and the create-app pipeline it drives.
"""

from .commands import main

__all__ = ["main"]
