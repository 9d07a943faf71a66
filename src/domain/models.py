"""
Data models for the email relay domain.

These type-safe data structures define clear contracts between pipeline stages.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Dict, Any


# Rejection reasons reported to the mail transport. Parse failures and empty
# bodies deliberately share the same reason.
REJECT_PARSE = "Failed to parse email"
REJECT_UNHANDLED = "Failed to handle email"
REJECT_DELIVERY_TRANSPORT = "Failed to send Discord webhook"
REJECT_DELIVERY_STATUS = "Discord webhook failed"


class PipelineStage(Enum):
    """Stages of a single pipeline run, in execution order."""
    PARSING = "parsing"
    EXTRACTING = "extracting"
    CLEANING = "cleaning"
    REWRITING = "rewriting"
    DELIVERING = "delivering"


@dataclass(frozen=True)
class EmailAddress:
    """Display name and address of a mailbox (either may be missing)."""
    name: Optional[str] = None
    address: Optional[str] = None


@dataclass(frozen=True)
class ParsedEmail:
    """
    Structured view of an inbound message, produced once by the MIME parser.

    Attributes:
        subject: Subject header, if any
        from_: Sender mailbox
        to: Raw To header ("" when absent)
        text: Preferred text/plain body, if any
        html: Preferred text/html body, if any
        message_id: Message-ID header, if any
        date: Parsed Date header (None if absent or unparseable)
    """
    subject: Optional[str] = None
    from_: EmailAddress = field(default_factory=EmailAddress)
    to: str = ""
    text: Optional[str] = None
    html: Optional[str] = None
    message_id: Optional[str] = None
    date: Optional[datetime] = None


@dataclass
class InboundMessage:
    """
    A raw message handed to the pipeline by the mail-receiving runtime.

    Attributes:
        raw: Raw RFC 5322 bytes
        to: Envelope recipient the message was delivered to (used as reply_to)
        message_id: Identifier used for logging (SQS/SES message id)
        rejection_reason: Set through set_reject() when the run is rejected
    """
    raw: bytes
    to: str
    message_id: str = "UNKNOWN"
    rejection_reason: Optional[str] = None

    @property
    def rejected(self) -> bool:
        return self.rejection_reason is not None

    def set_reject(self, reason: str) -> None:
        """Permanently reject this message with the given reason."""
        self.rejection_reason = reason


@dataclass(frozen=True)
class DeliveryPayload:
    """
    Record posted to the webhook endpoint.

    sent_at is only serialized when the parsed email carried a date.
    """
    subject: Optional[str]
    name: Optional[str]
    email: Optional[str]
    message: str
    reply_to: str
    message_id: Optional[str]
    sent_at: Optional[datetime] = None
    source: str = "email"

    @classmethod
    def from_email(cls, parsed: ParsedEmail, message: str, reply_to: str) -> "DeliveryPayload":
        """Build the payload for a rewritten message body."""
        if not message or not message.strip():
            raise ValueError("Cannot build a delivery payload without a message")

        return cls(
            subject=parsed.subject,
            name=parsed.from_.name,
            email=parsed.from_.address,
            message=message,
            reply_to=reply_to,
            message_id=parsed.message_id,
            sent_at=parsed.date,
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the JSON body expected by the webhook.

        Returns:
            Dict with the payload fields; sent_at is omitted when there is no date
        """
        result = {
            'subject': self.subject,
            'name': self.name,
            'email': self.email,
            'message': self.message,
            'source': self.source,
            'reply_to': self.reply_to,
            'message_id': self.message_id,
        }
        if self.sent_at is not None:
            result['sent_at'] = self.sent_at.isoformat()
        return result


@dataclass(frozen=True)
class SesNotification:
    """
    Metadata extracted from an SES receipt notification delivered through SQS.

    Attributes:
        message_id: SQS message identifier
        ses_message_id: SES message identifier (needed to bounce the message)
        source: Envelope sender (return path)
        recipients: Envelope recipients the message was delivered to
        subject: Subject from the SES common headers
        bucket_name: S3 bucket containing the raw email
        object_key: S3 object key for the raw email
    """
    message_id: str
    ses_message_id: str
    source: str
    recipients: List[str]
    subject: str
    bucket_name: str
    object_key: str

    @property
    def envelope_to(self) -> str:
        return self.recipients[0] if self.recipients else ""


@dataclass(frozen=True)
class PipelineOutcome:
    """
    Terminal result of one pipeline run: delivered, or rejected with a reason.

    Attributes:
        delivered: Whether the payload was accepted by the webhook
        reason: Rejection reason (None when delivered)
        stage: Last stage reached
        payload: The payload that was sent (only when delivered)
    """
    delivered: bool
    reason: Optional[str] = None
    stage: Optional[PipelineStage] = None
    payload: Optional[DeliveryPayload] = None

    @classmethod
    def success(cls, payload: DeliveryPayload) -> "PipelineOutcome":
        return cls(delivered=True, stage=PipelineStage.DELIVERING, payload=payload)

    @classmethod
    def rejection(cls, reason: str, stage: Optional[PipelineStage] = None) -> "PipelineOutcome":
        return cls(delivered=False, reason=reason, stage=stage)

    @property
    def rejected(self) -> bool:
        return not self.delivered

    def __repr__(self) -> str:
        if self.delivered:
            return "PipelineOutcome(Delivered)"
        stage = self.stage.value if self.stage else None
        return f"PipelineOutcome(Rejected, reason={self.reason!r}, stage={stage})"


@dataclass
class ProcessingResult:
    """
    Result of processing one SQS record.

    Attributes:
        success: Whether the message was delivered
        message_id: SQS message identifier
        notification: SES metadata (if the notification could be parsed)
        outcome: Pipeline outcome (if the pipeline ran)
        error_message: Rejection reason or error description
        bounced: Whether an SES bounce was sent for a rejected message
    """
    success: bool
    message_id: str
    notification: Optional[SesNotification] = None
    outcome: Optional[PipelineOutcome] = None
    error_message: Optional[str] = None
    bounced: bool = False

    @property
    def should_delete_message(self) -> bool:
        """Always True - rejection goes through SES bounces, never SQS redelivery."""
        return True

    def __repr__(self) -> str:
        if self.success:
            return f"ProcessingResult(success=True, message_id={self.message_id})"
        else:
            return f"ProcessingResult(success=False, message_id={self.message_id}, error={self.error_message})"
