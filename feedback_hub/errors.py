"""Error hierarchy for the feedback pipeline and chat path."""

from __future__ import annotations


class FeedbackHubError(Exception):
    """Base class for all feedback hub failures."""

    retryable = False


class ValidationError(FeedbackHubError):
    """Submission rejected before any downstream work."""


class InvalidInput(ValidationError):
    """Chat question rejected before calling the model."""


class TextGenerationError(FeedbackHubError):
    """The text-generation collaborator failed or could not be reached."""

    retryable = True


class EnrichmentError(FeedbackHubError):
    """Summarization failed or produced nothing usable."""

    retryable = True


class PersistenceError(FeedbackHubError):
    """The feedback store rejected or could not complete a write."""

    retryable = True


class ChatAdapterError(FeedbackHubError):
    """Chat collaborator failure, rendered as conversational text."""
