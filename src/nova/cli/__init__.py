"""
Command-line tools for nova.
"""

from .interactive import interactive_main, main

__all__ = ["interactive_main", "main"]
