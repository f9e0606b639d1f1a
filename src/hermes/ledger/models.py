"""Persisted record types."""

import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class DepositRecord:
    """A processed Offering event.

    Serialized with the camelCase keys the backend and older log files use:
    timestamp, from, tokenAddress, amount, formattedAmount, txHash.
    """

    sender: str
    token_address: str
    amount: str  # Raw base units as a decimal string
    formatted_amount: str
    tx_hash: str  # External transaction id carried by the event
    timestamp: int = field(default_factory=_now_ms)  # ms since epoch

    @property
    def received_at(self) -> datetime:
        return _EPOCH + timedelta(milliseconds=self.timestamp)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "from": self.sender,
            "tokenAddress": self.token_address,
            "amount": self.amount,
            "formattedAmount": self.formatted_amount,
            "txHash": self.tx_hash,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DepositRecord":
        """Build a record from its JSON form.

        Raises:
            KeyError, TypeError, ValueError: If required fields are missing
        """
        return cls(
            sender=data["from"],
            token_address=data["tokenAddress"],
            amount=str(data["amount"]),
            formatted_amount=str(data["formattedAmount"]),
            tx_hash=data["txHash"],
            timestamp=int(data["timestamp"]),
        )
