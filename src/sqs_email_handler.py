"""
AWS Lambda handler relaying SES inbound emails from SQS to the webhook.

Thin orchestration layer that delegates to EmailProcessor.
Policy: Always delete messages (no SQS retries). Rejected emails are bounced
through SES; errors are logged to CloudWatch.
"""

import logging
from typing import Dict, Any

from config import load_config
from domain.email_processor import EmailProcessor

config = load_config()

logger = logging.getLogger()
logger.setLevel(config.log_level)

# Add console handler for local testing (AWS Lambda provides handlers automatically)
if not logger.handlers:
    console_handler = logging.StreamHandler()
    console_handler.setLevel(config.log_level)
    formatter = logging.Formatter('%(levelname)s - %(name)s - %(message)s')
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

logger.info(f"Loaded {config!r}")

# Reused across invocations
email_processor = EmailProcessor(config)


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Relay SES email notifications from SQS.

    Args:
        event: Lambda event with SQS records
        context: Lambda context

    Returns:
        Dict with batchItemFailures for results that must not be deleted
        (always empty - rejections are bounced, never retried)
    """
    records = event.get('Records', [])
    logger.info(f"Processing batch of {len(records)} message(s)")

    results = []
    batch_item_failures = []
    for record in records:
        result = email_processor.process_ses_record(record)
        results.append(result)

        if not result.should_delete_message:
            batch_item_failures.append({"itemIdentifier": result.message_id})

        if result.success:
            logger.info(f"Delivered message {result.message_id}")
        else:
            logger.warning(
                f"Rejected message {result.message_id}: {result.error_message} "
                f"(bounced={result.bounced})"
            )

    delivered = sum(1 for r in results if r.success)
    logger.info(
        f"Batch complete: {len(results)} message(s), "
        f"delivered={delivered}, rejected={len(results) - delivered}"
    )

    return {"batchItemFailures": batch_item_failures}
