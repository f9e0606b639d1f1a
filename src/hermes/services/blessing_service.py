"""Blessing service: disbursements and allow-list management.

Every operation validates its input before touching the chain. Chain
failures surface as ChainInteractionError and are never retried here; the
caller resubmits.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from web3 import Web3

from hermes.chain.client import ZephyrClient
from hermes.chain.units import parse_units
from hermes.ledger.divine_cache import DivineTokenCache
from hermes.services.exceptions import InvalidRequestError
from hermes.utils.locks import KeyedLocks

logger = logging.getLogger(__name__)


@dataclass
class BlessingResult:
    """Confirmed disbursement."""

    token_address: str
    recipient: str
    amount: str
    reference: str
    tx_hash: str
    block_number: int


@dataclass
class AllowListResult:
    """Confirmed allow-list change."""

    token_address: str
    tx_hash: str
    block_number: int


def validate_address(value: Any, label: str) -> str:
    """Return the checksum address or raise InvalidRequestError."""
    if not isinstance(value, str) or not Web3.is_address(value):
        raise InvalidRequestError(f"Invalid {label} address")
    return Web3.to_checksum_address(value)


def validate_amount(value: Any) -> str:
    """Return the amount as a string if it is a positive finite number."""
    if value is None or isinstance(value, bool):
        raise InvalidRequestError("Invalid amount")

    text = str(value).strip()
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise InvalidRequestError("Invalid amount")

    if not amount.is_finite() or amount <= 0:
        raise InvalidRequestError("Invalid amount")
    return text


class BlessingService:
    """Disburses tokens and maintains the divine token allow-list."""

    def __init__(
        self,
        chain: ZephyrClient,
        divine_cache: DivineTokenCache,
        locks: Optional[KeyedLocks] = None,
    ):
        self.chain = chain
        self.divine_cache = divine_cache
        # Separate from the cache's own lookup locks: mutations call
        # is_eligible while holding this one.
        self.locks = locks or KeyedLocks("allowlist")

    async def bless_with_tokens(
        self,
        token_address: Any,
        recipient: Any,
        amount: Any,
        reference: Optional[str] = None,
    ) -> BlessingResult:
        """Send ``amount`` (decimal, token units) of a divine token to ``recipient``.

        Raises:
            InvalidRequestError: Bad input or token not divine
            ChainInteractionError: Submission or confirmation failed
        """
        token = validate_address(token_address, "token")
        to = validate_address(recipient, "recipient")
        amount_str = validate_amount(amount)
        reference = reference or ""

        if not await self.divine_cache.is_eligible(token):
            raise InvalidRequestError("Token not blessed by Olympus")

        decimals = await self.chain.get_token_decimals(token)
        try:
            amount_units = parse_units(amount_str, decimals)
        except ValueError as e:
            raise InvalidRequestError(str(e))

        receipt = await self.chain.bless_with_tokens(token, to, amount_units, reference)
        logger.info(
            f"Blessing bestowed: {amount_str} of token {token} to {to}, txHash: {receipt.tx_hash}"
        )

        return BlessingResult(
            token_address=token,
            recipient=to,
            amount=amount_str,
            reference=reference,
            tx_hash=receipt.tx_hash,
            block_number=receipt.block_number,
        )

    async def bless_token(self, token_address: Any) -> AllowListResult:
        """Add a token to the allow-list.

        Raises:
            InvalidRequestError: Bad address or token already divine
            ChainInteractionError: Submission or confirmation failed
        """
        token = validate_address(token_address, "token")

        async with self.locks.hold(token, operation="bless_token"):
            if await self.divine_cache.is_eligible(token):
                raise InvalidRequestError("Token already blessed")

            receipt = await self.chain.bless_token(token)
            self.divine_cache.set_eligible(token, True)

        logger.info(f"Token {token} has been blessed, txHash: {receipt.tx_hash}")
        return AllowListResult(token, receipt.tx_hash, receipt.block_number)

    async def unbless_token(self, token_address: Any) -> AllowListResult:
        """Remove a token from the allow-list.

        Raises:
            InvalidRequestError: Bad address or token not divine
            ChainInteractionError: Submission or confirmation failed
        """
        token = validate_address(token_address, "token")

        async with self.locks.hold(token, operation="unbless_token"):
            if not await self.divine_cache.is_eligible(token):
                raise InvalidRequestError("Token not blessed")

            receipt = await self.chain.unbless_token(token)
            # Dropped rather than set False so the next lookup re-reads the chain
            self.divine_cache.clear(token)

        logger.info(f"Token {token} has been unblessed, txHash: {receipt.tx_hash}")
        return AllowListResult(token, receipt.tx_hash, receipt.block_number)

    def list_divine_tokens(self) -> list[str]:
        """Tokens cached as divine. Does not consult the chain."""
        return self.divine_cache.eligible_tokens()
