"""Offering event sources.

WebSocketEventSource keeps an eth_subscribe("logs") subscription open on a
streaming provider. PollingEventSource calls eth_getLogs over the HTTP
provider on a fixed interval. Both deliver the same OfferingEvent objects.
"""

import asyncio
import logging
from typing import Callable, Optional

from web3 import AsyncWeb3, WebSocketProvider

from hermes.chain.abi import ZEPHYR_ABI
from hermes.chain.client import ZephyrClient
from hermes.listener.base import EventSource, OfferingEvent

logger = logging.getLogger(__name__)

OFFERING_SIGNATURE = "Offering(address,address,uint256,string)"


def offering_topic() -> str:
    """keccak256 topic of the Offering event."""
    return AsyncWeb3.to_hex(AsyncWeb3.keccak(text=OFFERING_SIGNATURE))


class PollingEventSource(EventSource):
    """Polls eth_getLogs for new Offering events."""

    name = "polling"

    def __init__(
        self,
        client: ZephyrClient,
        interval: float = 5.0,
        start_block: Optional[int] = None,
        max_block_range: int = 1000,
    ):
        """Initialize the polling source.

        Args:
            client: Contract client bound to the HTTP provider
            interval: Seconds between polls
            start_block: First block to scan (default: chain head at startup)
            max_block_range: Most blocks asked for in one eth_getLogs call
        """
        self.client = client
        self.interval = interval
        self.next_block = start_block
        self.max_block_range = max(1, max_block_range)

    async def run(
        self,
        queue: "asyncio.Queue[OfferingEvent]",
        on_subscribed: Callable[[], None],
    ) -> None:
        if self.next_block is None:
            self.next_block = await self.client.get_block_number()

        logger.info(
            f"Polling {self.client.provider_url} for offerings from block {self.next_block}"
        )
        on_subscribed()

        while True:
            latest = await self.client.get_block_number()
            while latest >= self.next_block:
                to_block = min(latest, self.next_block + self.max_block_range - 1)
                logs = await self.client.get_offering_logs(self.next_block, to_block)
                for log in logs:
                    await queue.put(OfferingEvent.from_log(log))
                # Advance only after the whole chunk is queued so a failed
                # poll is retried from the same block.
                self.next_block = to_block + 1

            await asyncio.sleep(self.interval)


class WebSocketEventSource(EventSource):
    """Streams Offering logs from a WebSocket provider."""

    name = "websocket"

    def __init__(self, ws_url: str, contract_address: str):
        self.ws_url = ws_url
        self.contract_address = AsyncWeb3.to_checksum_address(contract_address)

    async def run(
        self,
        queue: "asyncio.Queue[OfferingEvent]",
        on_subscribed: Callable[[], None],
    ) -> None:
        logger.info(f"Connecting via WebSocket: {self.ws_url}")

        async with AsyncWeb3(WebSocketProvider(self.ws_url)) as w3:
            contract = w3.eth.contract(address=self.contract_address, abi=ZEPHYR_ABI)
            offering = contract.events.Offering()

            subscription_id = await w3.eth.subscribe(
                "logs",
                {"address": self.contract_address, "topics": [offering_topic()]},
            )
            logger.info(f"Subscribed to offerings (subscription {subscription_id})")
            on_subscribed()

            async for message in w3.socket.process_subscriptions():
                if message.get("subscription") != subscription_id:
                    continue
                try:
                    decoded = offering.process_log(message["result"])
                except Exception as e:
                    logger.error(f"Could not decode offering log: {e}")
                    continue
                await queue.put(OfferingEvent.from_log(decoded))

        logger.warning("WebSocket subscription closed")
