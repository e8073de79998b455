"""
HTTP clients for the Estate Marketplace API.
"""

from .feedback_form import FeedbackFormClient, FeedbackResult

__all__ = ["FeedbackFormClient", "FeedbackResult"]
