import pytest

from feedback_hub.errors import ValidationError
from feedback_hub.schemas import FeedbackSubmission
from feedback_hub.validation import validate


@pytest.mark.parametrize("message", [None, "", "   ", "\n\t "])
def test_rejects_missing_or_blank_message(message):
    with pytest.raises(ValidationError, match="message required"):
        validate(FeedbackSubmission(message=message))


def test_rejects_non_string_message():
    with pytest.raises(ValidationError):
        validate(FeedbackSubmission(message=42))


def test_defaults_missing_tags_to_unknown():
    result = validate(FeedbackSubmission(message="Argo routing down"))
    assert result.source == "unknown"
    assert result.product == "unknown"


def test_blank_tags_become_unknown():
    result = validate(FeedbackSubmission(message="x", source="  ", product=""))
    assert (result.source, result.product) == ("unknown", "unknown")


def test_message_kept_verbatim():
    result = validate(FeedbackSubmission(message="  Argo down \n", source="GitHub", product="Workers"))
    assert result.message == "  Argo down \n"
    assert result.source == "GitHub"
    assert result.product == "Workers"
