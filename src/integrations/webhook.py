"""
Delivery endpoint client.

Posts the DeliveryPayload as JSON to the configured webhook. Any 2xx status is
success; anything else, or a failed request, raises.
"""

import logging
from typing import Optional

import httpx

from domain.errors import DeliveryRejectedError, DeliveryTransportError
from domain.models import DeliveryPayload

logger = logging.getLogger(__name__)


class DeliveryClient:
    """Sends rewritten emails to the webhook endpoint."""

    def __init__(
        self,
        webhook_url: str,
        http_client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None,
    ):
        self.webhook_url = webhook_url
        if http_client is None:
            http_client = httpx.Client(timeout=timeout)
        self.http_client = http_client

    def deliver(self, payload: DeliveryPayload) -> None:
        """
        Post a payload to the webhook.

        Raises:
            DeliveryTransportError: If the request could not be completed
            DeliveryRejectedError: If the endpoint answered with a non-2xx status
        """
        try:
            response = self.http_client.post(
                self.webhook_url,
                headers={'Content-Type': 'application/json'},
                json=payload.to_dict(),
            )
        except httpx.HTTPError as e:
            logger.error(f"Failed to send webhook: {e.__class__.__name__}: {e}")
            raise DeliveryTransportError(f"Failed to send webhook: {e}") from e

        if not response.is_success:
            logger.error(
                f"Webhook failed: {response.status_code} {response.reason_phrase} "
                f"{response.text[:500]}"
            )
            raise DeliveryRejectedError(response.status_code, response.text)

        logger.info(f"Webhook sent successfully: HTTP {response.status_code}")
