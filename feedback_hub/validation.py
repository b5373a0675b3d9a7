"""Submission validation and defaulting."""

from __future__ import annotations

from typing import Optional

from .errors import ValidationError
from .schemas import UNKNOWN, FeedbackSubmission, ValidatedSubmission


def _tag_or_unknown(value: Optional[str]) -> str:
    if value is None:
        return UNKNOWN
    cleaned = str(value).strip()
    return cleaned or UNKNOWN


def validate(submission: FeedbackSubmission) -> ValidatedSubmission:
    """Reject submissions without a message; default missing tags to "unknown".

    The message is kept verbatim; only its trimmed form is checked.
    """
    message = submission.message
    if not isinstance(message, str) or not message.strip():
        raise ValidationError("message required")
    return ValidatedSubmission(
        message=message,
        source=_tag_or_unknown(submission.source),
        product=_tag_or_unknown(submission.product),
    )
