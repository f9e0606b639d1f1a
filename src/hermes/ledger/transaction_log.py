"""Append-only log of processed deposit (Offering) events.

The log is the deduplication authority for the listener: an external
transaction id is processed at most once per log file.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from hermes.ledger.models import DepositRecord
from hermes.ledger.storage import SnapshotFile
from hermes.utils.locks import KeyedLocks

logger = logging.getLogger(__name__)


class AppendResult(str, Enum):
    """Outcome of writing a record to the log."""

    WRITTEN = "written"
    DUPLICATE = "duplicate"
    FAILED = "failed"


class TransactionLog:
    """Deposit records persisted as a JSON array."""

    def __init__(self, path: Union[str, Path], locks: Optional[KeyedLocks] = None):
        self.file = SnapshotFile(path)
        self.locks = locks or KeyedLocks("txlog")
        self._records: list[DepositRecord] = self.load()
        logger.info(f"Loaded {len(self._records)} transactions from {self.file.path}")

    def load(self) -> list[DepositRecord]:
        """Read all records from disk.

        Never raises: a missing or unreadable file yields an empty log.
        """
        if not self.file.exists():
            return []

        try:
            raw = self.file.read()
        except (OSError, ValueError) as e:
            logger.error(f"Error loading transaction DB {self.file.path}: {e}")
            return []

        if not isinstance(raw, list):
            logger.error(f"Transaction DB {self.file.path} is not a list, ignoring it")
            return []

        records = []
        for i, item in enumerate(raw):
            try:
                records.append(DepositRecord.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed transaction entry #{i}: {e}")
        return records

    @staticmethod
    def exists(tx_hash: str, records: list[DepositRecord]) -> bool:
        """Check if a transaction id is already present in ``records``."""
        return any(record.tx_hash == tx_hash for record in records)

    def contains(self, tx_hash: str) -> bool:
        """Check the in-memory view for a transaction id."""
        return self.exists(tx_hash, self._records)

    def append(self, record: DepositRecord) -> AppendResult:
        """Append a record unless its transaction id is already logged.

        Re-reads the file first so a record written since startup is still
        detected. The whole file is rewritten on success.

        Returns:
            WRITTEN, DUPLICATE, or FAILED if the file could not be saved
        """
        records = self.load()
        if self.exists(record.tx_hash, records):
            logger.info(f"[FILE] Transaction {record.tx_hash} already exists in {self.file.path}")
            return AppendResult.DUPLICATE

        records.append(record)
        try:
            self.file.write([r.to_dict() for r in records])
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving transaction {record.tx_hash} to {self.file.path}: {e}")
            return AppendResult.FAILED

        self._records = records
        logger.info(f"[FILE] Saved transaction {record.tx_hash} to {self.file.path}")
        return AppendResult.WRITTEN

    async def record_if_new(self, record: DepositRecord) -> AppendResult:
        """Check-and-append under the transaction id lock."""
        async with self.locks.hold(record.tx_hash, operation="record_deposit"):
            if self.contains(record.tx_hash):
                logger.info(f"Duplicate offering {record.tx_hash}, discarding")
                return AppendResult.DUPLICATE
            return self.append(record)

    def records(self, limit: Optional[int] = None) -> list[DepositRecord]:
        """Return logged records in arrival order (the last ``limit`` if given)."""
        if limit is not None:
            return list(self._records[-limit:]) if limit > 0 else []
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)
