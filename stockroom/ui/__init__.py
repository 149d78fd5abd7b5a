"""
User interface components for Stockroom.
"""

from .console import ConsoleMenu

__all__ = ["ConsoleMenu"]
