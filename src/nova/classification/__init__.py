"""
Intent classification and context-aware adjustment.
"""

from .context import ContextAdjuster
from .intent_classifier import IntentClassifier, IntentScore

__all__ = ["ContextAdjuster", "IntentClassifier", "IntentScore"]
