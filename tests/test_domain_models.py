"""
Tests for domain models (data structures).
"""

import pytest
import sys
import os
from datetime import datetime, timezone

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from domain.models import (
    REJECT_PARSE,
    DeliveryPayload,
    EmailAddress,
    InboundMessage,
    ParsedEmail,
    PipelineOutcome,
    PipelineStage,
    ProcessingResult,
    SesNotification,
)


@pytest.fixture
def parsed_email():
    return ParsedEmail(
        subject="Hello",
        from_=EmailAddress(name="Ann", address="ann@example.com"),
        to="inbox@example.com",
        text="Body",
        message_id="<m1@example.com>",
        date=datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc),
    )


class TestParsedEmail:
    """Test ParsedEmail dataclass."""

    def test_defaults(self):
        """Test ParsedEmail with no fields set."""
        parsed = ParsedEmail()

        assert parsed.subject is None
        assert parsed.from_ == EmailAddress(None, None)
        assert parsed.to == ""
        assert parsed.text is None
        assert parsed.html is None
        assert parsed.date is None

    def test_is_immutable(self, parsed_email):
        """Test ParsedEmail cannot be modified after parsing."""
        with pytest.raises(AttributeError):
            parsed_email.text = "changed"


class TestInboundMessage:
    """Test InboundMessage rejection accessor."""

    def test_set_reject(self):
        message = InboundMessage(raw=b"raw", to="inbox@example.com")

        assert message.rejected is False
        message.set_reject(REJECT_PARSE)

        assert message.rejected is True
        assert message.rejection_reason == "Failed to parse email"


class TestDeliveryPayload:
    """Test DeliveryPayload construction and serialization."""

    def test_from_email(self, parsed_email):
        """Test payload fields are taken from the parsed email."""
        payload = DeliveryPayload.from_email(parsed_email, "Rewritten", reply_to="inbox@example.com")

        assert payload.subject == "Hello"
        assert payload.name == "Ann"
        assert payload.email == "ann@example.com"
        assert payload.message == "Rewritten"
        assert payload.source == "email"
        assert payload.reply_to == "inbox@example.com"
        assert payload.message_id == "<m1@example.com>"

    def test_to_dict_with_date(self, parsed_email):
        """Test sent_at is serialized as ISO 8601 when a date exists."""
        payload = DeliveryPayload.from_email(parsed_email, "Rewritten", reply_to="inbox@example.com")

        result = payload.to_dict()

        assert result == {
            'subject': "Hello",
            'name': "Ann",
            'email': "ann@example.com",
            'message': "Rewritten",
            'source': "email",
            'reply_to': "inbox@example.com",
            'message_id': "<m1@example.com>",
            'sent_at': "2025-01-01T12:00:00+00:00",
        }

    def test_to_dict_without_date(self):
        """Test sent_at key is omitted entirely when there is no date."""
        parsed = ParsedEmail(subject="No date", text="Body")
        payload = DeliveryPayload.from_email(parsed, "Rewritten", reply_to="inbox@example.com")

        result = payload.to_dict()

        assert 'sent_at' not in result
        assert result['name'] is None
        assert result['email'] is None

    @pytest.mark.parametrize("message", ["", "   ", "\n\t"])
    def test_from_email_rejects_blank_message(self, parsed_email, message):
        """Test a payload is never built for an empty message."""
        with pytest.raises(ValueError, match="without a message"):
            DeliveryPayload.from_email(parsed_email, message, reply_to="inbox@example.com")


class TestPipelineOutcome:
    """Test PipelineOutcome variants."""

    def test_success(self, parsed_email):
        payload = DeliveryPayload.from_email(parsed_email, "Rewritten", reply_to="x@example.com")
        outcome = PipelineOutcome.success(payload)

        assert outcome.delivered is True
        assert outcome.rejected is False
        assert outcome.reason is None
        assert outcome.payload is payload
        assert repr(outcome) == "PipelineOutcome(Delivered)"

    def test_rejection(self):
        outcome = PipelineOutcome.rejection(REJECT_PARSE, PipelineStage.EXTRACTING)

        assert outcome.delivered is False
        assert outcome.rejected is True
        assert outcome.reason == REJECT_PARSE
        assert outcome.payload is None
        assert "extracting" in repr(outcome)


class TestSesNotification:
    """Test SesNotification helpers."""

    def test_envelope_to(self):
        notification = SesNotification(
            message_id="msg-1",
            ses_message_id="ses-1",
            source="sender@example.com",
            recipients=["first@example.com", "second@example.com"],
            subject="Hi",
            bucket_name="bucket",
            object_key="key",
        )

        assert notification.envelope_to == "first@example.com"

    def test_envelope_to_without_recipients(self):
        notification = SesNotification("msg-1", "ses-1", "s@example.com", [], "Hi", "bucket", "key")

        assert notification.envelope_to == ""


class TestProcessingResult:
    """Test ProcessingResult dataclass."""

    def test_should_delete_message_always_true(self):
        """Test messages are always deleted from SQS."""
        assert ProcessingResult(success=True, message_id="a").should_delete_message is True
        assert ProcessingResult(success=False, message_id="b").should_delete_message is True

    def test_repr(self):
        result = ProcessingResult(success=False, message_id="msg-1", error_message=REJECT_PARSE)

        assert repr(result) == "ProcessingResult(success=False, message_id=msg-1, error=Failed to parse email)"
