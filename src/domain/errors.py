"""
Exception types for the email relay pipeline.

Each pipeline stage raises its own error kind so the orchestrator can map it
to the rejection reason reported back to the mail transport.
"""

from typing import Optional


class EmailRelayError(Exception):
    """Base class for all pipeline errors."""
    pass


class EmailParseError(EmailRelayError):
    """Raised when raw message bytes cannot be decoded into a structured email."""
    pass


class RewriteError(EmailRelayError):
    """Raised when the rewriting service fails or returns an unexpected shape."""
    pass


class DeliveryTransportError(EmailRelayError):
    """Raised when the webhook request could not be sent at all."""
    pass


class DeliveryRejectedError(EmailRelayError):
    """Raised when the webhook endpoint answers with a non-success status."""

    def __init__(self, status_code: int, response_text: Optional[str] = None):
        self.status_code = status_code
        self.response_text = response_text
        super().__init__(f"Webhook responded with HTTP {status_code}")
