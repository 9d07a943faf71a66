"""
Email relay pipeline - core business logic.

Each inbound message goes through:
1. Parse the raw MIME bytes
2. Extract a body (plain text, else converted HTML)
3. Clean the body (URLs, empty brackets, blank lines)
4. Rewrite it through the rewriting service (translate + clean up)
5. Deliver the rewritten message and its metadata to the webhook

Every failure is terminal for the message: the message is rejected with a
reason and nothing is retried. No exceptions propagate out of the public methods.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

from config import AppConfig
from .content import parse_content
from .errors import DeliveryRejectedError, DeliveryTransportError
from .models import (
    REJECT_DELIVERY_STATUS,
    REJECT_DELIVERY_TRANSPORT,
    REJECT_PARSE,
    REJECT_UNHANDLED,
    DeliveryPayload,
    InboundMessage,
    ParsedEmail,
    PipelineOutcome,
    PipelineStage,
    ProcessingResult,
    SesNotification,
)
from services import email as email_service
from services import s3 as s3_service
from services import ses as ses_service
from integrations.openrouter import RewriteClient
from integrations.webhook import DeliveryClient

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 200


def _preview(text: str) -> str:
    return text[:PREVIEW_LENGTH] + ('...' if len(text) > PREVIEW_LENGTH else '')


class EmailProcessor:
    """
    Runs the parse -> extract -> clean -> rewrite -> deliver pipeline.

    Collaborators are built from the config unless injected. The processor
    holds no per-message state, so one instance can serve concurrent runs.
    """

    def __init__(
        self,
        config: AppConfig,
        rewrite_client: Optional[RewriteClient] = None,
        delivery_client: Optional[DeliveryClient] = None,
        parser: Callable[[bytes], ParsedEmail] = email_service.parse_email,
    ):
        self.config = config
        self.rewrite_client = rewrite_client or RewriteClient(
            api_key=config.openrouter_api_key,
            model=config.rewrite_model,
            api_url=config.rewrite_api_url,
            timeout=config.http_timeout,
        )
        self.delivery_client = delivery_client or DeliveryClient(
            webhook_url=config.webhook_url,
            timeout=config.http_timeout,
        )
        self.parser = parser

    def process_message(self, message: InboundMessage) -> PipelineOutcome:
        """
        Run the pipeline for one inbound message.

        On rejection, message.set_reject() is called with the reason before
        returning, so the mail transport always learns about it.

        Args:
            message: Raw message plus envelope recipient

        Returns:
            PipelineOutcome: Delivered, or Rejected with the reason
        """
        start_time = time.time()
        stage = PipelineStage.PARSING
        logger.info(f"Processing message {message.message_id} ({len(message.raw):,} bytes)")

        try:
            try:
                parsed = self.parser(message.raw)
            except Exception as e:
                logger.error(f"Failed to parse email: {e}")
                return self._reject(message, REJECT_PARSE, stage)

            logger.info(f"Parsed: from={parsed.from_.address}, subject={parsed.subject}")

            stage = PipelineStage.EXTRACTING
            body = parse_content(parsed.text, parsed.html)
            if body is None:
                logger.warning("Email has neither a text nor an HTML body")
                return self._reject(message, REJECT_PARSE, stage)

            stage = PipelineStage.CLEANING
            if not body:
                logger.warning("Body is empty after cleaning")
                return self._reject(message, REJECT_PARSE, stage)
            logger.info(f"Cleaned body ({len(body)} characters): {_preview(body)}")

            stage = PipelineStage.REWRITING
            rewritten = self.rewrite_client.rewrite(body)
            logger.info(f"Rewritten body: {_preview(rewritten)}")

            stage = PipelineStage.DELIVERING
            payload = DeliveryPayload.from_email(parsed, rewritten, reply_to=message.to)
            try:
                self.delivery_client.deliver(payload)
            except DeliveryTransportError:
                return self._reject(message, REJECT_DELIVERY_TRANSPORT, stage)
            except DeliveryRejectedError as e:
                logger.error(f"Webhook rejected payload: HTTP {e.status_code}")
                return self._reject(message, REJECT_DELIVERY_STATUS, stage)

        except Exception as e:
            logger.error(f"Email handler error at stage {stage.value}: {e}", exc_info=True)
            return self._reject(message, REJECT_UNHANDLED, stage)

        logger.info(
            f"Delivered message {message.message_id} in {time.time() - start_time:.3f}s"
        )
        return PipelineOutcome.success(payload)

    def process_ses_record(self, record: Dict[str, Any]) -> ProcessingResult:
        """
        Process a single SQS record containing an SES receipt notification.

        Fetches the raw email from S3, runs the pipeline and bounces the
        message through SES when it is rejected.

        Args:
            record: SQS record dict

        Returns:
            ProcessingResult with success=True only if the message was delivered
        """
        message_id = record.get('messageId', 'UNKNOWN')
        logger.info(f"Processing SQS message: {message_id}")

        try:
            notification = ses_service.parse_notification(record)
        except Exception as e:
            logger.error(f"Invalid SES notification in {message_id}: {e}", exc_info=True)
            return ProcessingResult(success=False, message_id=message_id, error_message=str(e))

        logger.info(f"Notification: to={notification.recipients}, subject={notification.subject}")

        try:
            raw_email = s3_service.fetch_raw_email(notification.bucket_name, notification.object_key)
        except Exception as e:
            logger.error(f"Failed to fetch {message_id} from S3: {e}", exc_info=True)
            outcome = PipelineOutcome.rejection(REJECT_UNHANDLED)
        else:
            message = InboundMessage(
                raw=raw_email,
                to=notification.envelope_to,
                message_id=message_id,
            )
            outcome = self.process_message(message)

        bounced = False
        if outcome.rejected:
            bounced = self._bounce(notification, outcome.reason)

        return ProcessingResult(
            success=outcome.delivered,
            message_id=message_id,
            notification=notification,
            outcome=outcome,
            error_message=outcome.reason,
            bounced=bounced,
        )

    def _reject(
        self,
        message: InboundMessage,
        reason: str,
        stage: PipelineStage,
    ) -> PipelineOutcome:
        message.set_reject(reason)
        logger.warning(
            f"Rejected message {message.message_id} at stage {stage.value}: {reason}"
        )
        return PipelineOutcome.rejection(reason, stage)

    def _bounce(self, notification: SesNotification, reason: str) -> bool:
        if not self.config.bounce_sender:
            logger.warning(
                f"BOUNCE_SENDER not configured, rejection of {notification.message_id} "
                f"not bounced: {reason}"
            )
            return False
        return ses_service.send_bounce(notification, reason, self.config.bounce_sender)
