"""File-backed state: deposit transaction log and divine token cache."""

from hermes.ledger.divine_cache import DivineTokenCache, normalize_address
from hermes.ledger.models import DepositRecord
from hermes.ledger.transaction_log import AppendResult, TransactionLog

__all__ = ["AppendResult", "DepositRecord", "DivineTokenCache", "TransactionLog", "normalize_address"]
