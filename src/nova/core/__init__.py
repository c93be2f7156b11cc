"""
Core NLU pipeline.
"""

from .pipeline import NLUPipeline

__all__ = ["NLUPipeline"]
