"""Feedback Hub: AI-enriched feedback intake and analysis."""

from .config import AppConfig
from .pipeline import FeedbackHub

__all__ = ["AppConfig", "FeedbackHub"]
