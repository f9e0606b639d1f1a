"""Backend notification service.

Tells the main backend (the oracle) about confirmed offerings. Delivery is
attempted exactly once: failures are logged and reported to the caller as
False, never raised and never retried. The deposit record is already on
disk by the time a notification is sent.
"""

import logging
from typing import Optional

import httpx

from hermes.ledger.models import DepositRecord

logger = logging.getLogger(__name__)

TOKEN_RECEIVED_PATH = "/token-received"


class BackendNotifier:
    """Posts token-received notifications to the main backend."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the notifier.

        Args:
            base_url: Backend base URL (without the path)
            api_key: Shared secret sent in the x-api-key header
            timeout: Request timeout in seconds
            client: Optional shared httpx client (tests inject a mock transport)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._client = client

    @property
    def url(self) -> str:
        return f"{self.base_url}{TOKEN_RECEIVED_PATH}"

    @staticmethod
    def build_payload(record: DepositRecord) -> dict:
        return {
            "sender": record.sender,
            "tokenAddress": record.token_address,
            "amount": record.amount,
            "formattedAmount": record.formatted_amount,
            "txHash": record.tx_hash,
            "timestamp": record.received_at.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        }

    async def notify_token_received(self, record: DepositRecord) -> bool:
        """Notify the backend of a new deposit.

        Returns:
            True if the backend accepted the notification
        """
        payload = self.build_payload(record)
        headers = {"x-api-key": self.api_key}

        try:
            if self._client is not None:
                response = await self._client.post(
                    self.url, json=payload, headers=headers, timeout=self.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.url, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Backend rejected offering {record.tx_hash}: "
                f"{e.response.status_code} {e.response.text[:200]}"
            )
            return False
        except httpx.HTTPError as e:
            logger.error(f"Failed to notify backend of offering {record.tx_hash}: {e}")
            return False

        logger.info(f"Oracle notified successfully of offering {record.tx_hash}")
        return True

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
