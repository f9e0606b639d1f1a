"""Base types for the Offering event listener."""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional


class ListenerState(str, Enum):
    """Listener lifecycle.

    DISCONNECTED -> SUBSCRIBED -> HANDLING -> SUBSCRIBED ... until STOPPED.
    """

    DISCONNECTED = "disconnected"
    SUBSCRIBED = "subscribed"
    HANDLING = "handling"
    STOPPED = "stopped"


@dataclass(frozen=True)
class OfferingEvent:
    """Normalized Offering event."""

    sender: str
    token_address: str
    amount: int  # Raw base units
    tx_hash: str  # External transaction id from the event payload
    block_number: Optional[int] = None
    chain_tx_hash: Optional[str] = None  # Hash of the transaction that emitted the event

    @classmethod
    def from_log(cls, log: Any) -> "OfferingEvent":
        """Build an event from a web3-decoded Offering log."""
        args = log["args"]
        chain_tx_hash = log.get("transactionHash")
        return cls(
            sender=args["mortal"],
            token_address=args["tokenAddress"],
            amount=int(args["amount"]),
            tx_hash=args["txHash"],
            block_number=log.get("blockNumber"),
            chain_tx_hash=_to_hex(chain_tx_hash) if chain_tx_hash is not None else None,
        )


def _to_hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)


class EventSource(ABC):
    """Feeds Offering events into the listener queue.

    Implementations subscribe (or start polling), call ``on_subscribed`` once
    they are live, then put events on the queue until the connection drops.
    Returning or raising hands control back to the listener, which decides
    when to call ``run`` again.
    """

    name: str = "source"

    @abstractmethod
    async def run(
        self,
        queue: "asyncio.Queue[OfferingEvent]",
        on_subscribed: Callable[[], None],
    ) -> None:
        """Stream events into ``queue``."""
        pass

    async def close(self) -> None:
        """Release provider resources."""
        pass
