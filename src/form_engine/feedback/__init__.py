"""
User-facing status message templates.
"""

from .messages import FeedbackGenerator

__all__ = ['FeedbackGenerator']
