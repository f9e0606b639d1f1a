"""Offering listener.

An event source fills an asyncio.Queue; a single consumer drains it and runs
each event through the pipeline:

1. resolve token decimals (18 on failure)
2. format the amount
3. skip transaction ids already in the log
4. append the deposit record
5. notify the backend once, logging any failure
"""

import asyncio
import logging
from typing import Optional, Protocol

from hermes.chain.units import format_units
from hermes.ledger.models import DepositRecord
from hermes.ledger.transaction_log import AppendResult, TransactionLog
from hermes.listener.base import EventSource, ListenerState, OfferingEvent
from hermes.notifications.backend import BackendNotifier

logger = logging.getLogger(__name__)


class DecimalsReader(Protocol):
    async def get_token_decimals(self, token_address: str) -> int: ...


class OfferingListener:
    """Consumes Offering events and relays them to the backend."""

    def __init__(
        self,
        source: EventSource,
        chain: DecimalsReader,
        transaction_log: TransactionLog,
        notifier: BackendNotifier,
        reconnect_delay: float = 5.0,
        queue_size: int = 0,
    ):
        self.source = source
        self.chain = chain
        self.transaction_log = transaction_log
        self.notifier = notifier
        self.reconnect_delay = reconnect_delay
        self.queue: asyncio.Queue[OfferingEvent] = asyncio.Queue(maxsize=queue_size)

        self._running = False
        self._stopped = False
        self._subscribed = False
        self._handling = False

        self.stats = {"processed": 0, "duplicates": 0, "notify_failures": 0, "errors": 0}

    @property
    def state(self) -> ListenerState:
        if self._stopped:
            return ListenerState.STOPPED
        if self._handling:
            return ListenerState.HANDLING
        if self._subscribed:
            return ListenerState.SUBSCRIBED
        return ListenerState.DISCONNECTED

    def _on_subscribed(self) -> None:
        self._subscribed = True
        logger.info("Hermes is listening for offerings...")

    async def handle_offering(self, event: OfferingEvent) -> Optional[DepositRecord]:
        """Process one Offering event.

        Returns:
            The new deposit record, or None if it was a duplicate or could
            not be written
        """
        logger.info(
            f"Offering received: {event.amount} of token {event.token_address} "
            f"from {event.sender}, txHash: {event.tx_hash}"
        )

        decimals = await self.chain.get_token_decimals(event.token_address)
        record = DepositRecord(
            sender=event.sender,
            token_address=event.token_address,
            amount=str(event.amount),
            formatted_amount=format_units(event.amount, decimals),
            tx_hash=event.tx_hash,
        )

        result = await self.transaction_log.record_if_new(record)
        if result == AppendResult.DUPLICATE:
            self.stats["duplicates"] += 1
            return None
        if result == AppendResult.FAILED:
            # A deposit that could not be logged is not notified
            self.stats["errors"] += 1
            return None

        self.stats["processed"] += 1

        if not await self.notifier.notify_token_received(record):
            self.stats["notify_failures"] += 1

        return record

    async def consume(self) -> None:
        """Drain the queue forever, one event at a time."""
        while True:
            event = await self.queue.get()
            self._handling = True
            try:
                await self.handle_offering(event)
            except Exception as e:
                self.stats["errors"] += 1
                logger.exception(f"Error in event handling for {event.tx_hash}: {e}")
            finally:
                self._handling = False
                self.queue.task_done()

    async def produce(self) -> None:
        """Keep the event source running, re-subscribing after failures."""
        while self._running:
            try:
                await self.source.run(self.queue, self._on_subscribed)
                logger.warning(f"{self.source.name} event source ended")
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"{self.source.name} event source failed: {e}")

            self._subscribed = False
            if self._running:
                logger.info(f"Re-subscribing in {self.reconnect_delay}s")
                await asyncio.sleep(self.reconnect_delay)

    async def run(self) -> None:
        """Run producer and consumer until stopped or cancelled."""
        self._running = True
        self._stopped = False
        consumer = asyncio.create_task(self.consume())
        try:
            await self.produce()
        finally:
            self._running = False
            self._subscribed = False
            consumer.cancel()
            await asyncio.gather(consumer, return_exceptions=True)
            await self.source.close()
            self._stopped = True
            logger.info("Offering listener stopped")

    def stop(self) -> None:
        """Ask the producer loop to exit after the current source run."""
        self._running = False
