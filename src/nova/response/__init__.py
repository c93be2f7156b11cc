"""
Response building for the dialogue layer.
"""

from .builder import ResponseBuilder

__all__ = ["ResponseBuilder"]
