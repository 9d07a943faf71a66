"""
SES inbound notifications and bounces.

An SES receipt rule stores each message in S3 and publishes a notification to
SQS (optionally through SNS). Rejected messages are bounced back through SES
so the sender learns the message was refused.
"""

import json
import logging
from typing import Any, Dict

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from domain.models import SesNotification

logger = logging.getLogger(__name__)

ses_config = Config(
    retries={
        'max_attempts': 1,
        'mode': 'standard'
    },
    connect_timeout=10,
    read_timeout=30
)

ses_client = boto3.client('ses', config=ses_config)


def parse_notification(record: Dict[str, Any]) -> SesNotification:
    """
    Parse an SQS record carrying an SES receipt notification.

    Handles both direct SES->SQS and SNS-wrapped notifications.

    Args:
        record: SQS record dict

    Returns:
        SesNotification: Envelope and S3 location of the message

    Raises:
        ValueError: If the notification structure is invalid
        json.JSONDecodeError: If the body is not JSON
    """
    message_id = record.get('messageId', 'UNKNOWN')
    sqs_body = json.loads(record['body'])

    if sqs_body.get('Type') == 'Notification' and 'Message' in sqs_body:
        logger.info("Unwrapping SNS message (SES -> SNS -> SQS)")
        notification = json.loads(sqs_body['Message'])
    else:
        notification = sqs_body

    if 'mail' not in notification or 'receipt' not in notification:
        raise ValueError("SES notification missing 'mail' or 'receipt' fields")

    mail = notification['mail']
    receipt = notification['receipt']
    common_headers = mail.get('commonHeaders', {})

    # Envelope recipients of this receipt; fall back to the header recipients
    recipients = receipt.get('recipients') or mail.get('destination') or []
    if isinstance(recipients, str):
        recipients = [recipients]

    action = receipt.get('action', {})
    bucket_name = action.get('bucketName')
    object_key = action.get('objectKey')
    if not bucket_name or not object_key:
        raise ValueError("Missing S3 location in SES notification")

    return SesNotification(
        message_id=message_id,
        ses_message_id=mail.get('messageId', ''),
        source=mail.get('source', ''),
        recipients=list(recipients),
        subject=common_headers.get('subject', ''),
        bucket_name=bucket_name,
        object_key=object_key,
    )


def send_bounce(notification: SesNotification, reason: str, bounce_sender: str) -> bool:
    """
    Bounce a received message back to its sender.

    Args:
        notification: The rejected message's SES metadata
        reason: Rejection reason, used as the bounce explanation
        bounce_sender: Verified SES address the bounce is sent from

    Returns:
        bool: True if SES accepted the bounce, False if it could not be sent
    """
    if not notification.ses_message_id:
        logger.warning(f"Cannot bounce {notification.message_id}: no SES message id")
        return False

    recipients = notification.recipients or [bounce_sender]
    try:
        response = ses_client.send_bounce(
            OriginalMessageId=notification.ses_message_id,
            BounceSender=bounce_sender,
            Explanation=reason,
            BouncedRecipientInfoList=[
                {'Recipient': recipient, 'BounceType': 'ContentRejected'}
                for recipient in recipients
            ],
        )
    except ClientError as e:
        error_code = e.response.get('Error', {}).get('Code', 'Unknown')
        logger.error(
            f"Failed to bounce {notification.ses_message_id}: "
            f"error_code={error_code}, reason={reason!r}"
        )
        return False

    logger.info(
        f"Bounced {notification.ses_message_id} to {notification.source}: "
        f"reason={reason!r}, bounce_id={response.get('MessageId')}"
    )
    return True
