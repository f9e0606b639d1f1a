"""Zephyr custody contract client.

Wraps an AsyncWeb3 instance bound to the JSON-RPC provider. Read calls go
straight to the node; state-changing calls are signed locally with the
Hermes wallet and block until the receipt is available.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from eth_account import Account
from web3 import AsyncWeb3

from hermes.chain.abi import ERC20_DECIMALS_ABI, ZEPHYR_ABI
from hermes.chain.units import DEFAULT_DECIMALS

logger = logging.getLogger(__name__)


class ChainInteractionError(Exception):
    """Raised when a contract call or transaction fails."""

    pass


@dataclass
class TxReceipt:
    """Confirmed transaction summary."""

    tx_hash: str
    block_number: int


class ZephyrClient:
    """Client for the Zephyr contract and the ERC20 tokens it holds."""

    def __init__(
        self,
        provider_url: str,
        contract_address: str,
        private_key: Optional[str] = None,
        receipt_timeout: Optional[float] = None,
        web3: Optional[AsyncWeb3] = None,
    ):
        """Initialize the client.

        Args:
            provider_url: HTTP JSON-RPC endpoint
            contract_address: Zephyr contract address
            private_key: Hermes wallet key (required for transactions)
            receipt_timeout: Seconds to wait for a receipt (None = web3 default)
            web3: Pre-built AsyncWeb3 instance (tests, custom providers)
        """
        self.provider_url = provider_url
        self.w3 = web3 or AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(provider_url))
        self.contract_address = AsyncWeb3.to_checksum_address(contract_address)
        self.contract = self.w3.eth.contract(address=self.contract_address, abi=ZEPHYR_ABI)
        self.receipt_timeout = receipt_timeout
        self._account = Account.from_key(private_key) if private_key else None
        # One signer, one nonce sequence
        self._send_lock = asyncio.Lock()

    @property
    def signer_address(self) -> Optional[str]:
        return self._account.address if self._account else None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def is_token_divine(self, token_address: str) -> bool:
        """Query the on-chain allow-list.

        Raises:
            ChainInteractionError: If the view call fails
        """
        try:
            result = await self.contract.functions.isTokenDivine(
                AsyncWeb3.to_checksum_address(token_address)
            ).call()
        except Exception as e:
            raise ChainInteractionError(f"isTokenDivine({token_address}) failed: {e}") from e
        return bool(result)

    async def is_paused(self) -> bool:
        """Check whether the contract is paused (Zeus is sleeping)."""
        try:
            return bool(await self.contract.functions.isZeusSleeping().call())
        except Exception as e:
            raise ChainInteractionError(f"isZeusSleeping() failed: {e}") from e

    async def get_token_decimals(self, token_address: str) -> int:
        """Get token decimals, falling back to 18 when the lookup fails."""
        try:
            token = self.w3.eth.contract(
                address=AsyncWeb3.to_checksum_address(token_address),
                abi=ERC20_DECIMALS_ABI,
            )
            return int(await token.functions.decimals().call())
        except Exception as e:
            logger.error(f"Error getting decimals for token {token_address}: {e}")
            return DEFAULT_DECIMALS

    async def get_block_number(self) -> int:
        return await self.w3.eth.block_number

    async def get_offering_logs(self, from_block: int, to_block: int) -> list[Any]:
        """Fetch decoded Offering events in an inclusive block range."""
        return await self.contract.events.Offering().get_logs(
            from_block=from_block,
            to_block=to_block,
        )

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def bless_with_tokens(
        self,
        token_address: str,
        recipient: str,
        amount: int,
        reference: str,
    ) -> TxReceipt:
        """Disburse ``amount`` base units of a token to ``recipient``."""
        fn = self.contract.functions.blessWithTokens(
            AsyncWeb3.to_checksum_address(token_address),
            AsyncWeb3.to_checksum_address(recipient),
            amount,
            reference,
        )
        return await self._transact(fn, "blessWithTokens")

    async def bless_token(self, token_address: str) -> TxReceipt:
        """Add a token to the on-chain allow-list."""
        fn = self.contract.functions.blessToken(AsyncWeb3.to_checksum_address(token_address))
        return await self._transact(fn, "blessToken")

    async def unbless_token(self, token_address: str) -> TxReceipt:
        """Remove a token from the on-chain allow-list."""
        fn = self.contract.functions.unBlessToken(AsyncWeb3.to_checksum_address(token_address))
        return await self._transact(fn, "unBlessToken")

    async def _transact(self, fn: Any, label: str) -> TxReceipt:
        """Sign, send and wait for a contract function call."""
        if self._account is None:
            raise ChainInteractionError("No signing wallet configured")

        async with self._send_lock:
            try:
                nonce = await self.w3.eth.get_transaction_count(self._account.address, "pending")
                tx_params = await fn.build_transaction(
                    {
                        "from": self._account.address,
                        "nonce": nonce,
                        "chainId": await self.w3.eth.chain_id,
                    }
                )
                signed = self._account.sign_transaction(tx_params)
                tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
            except Exception as e:
                logger.error(f"{label} submission failed: {e}")
                raise ChainInteractionError(str(e)) from e

        tx_hash_hex = AsyncWeb3.to_hex(tx_hash)
        logger.info(f"{label} submitted: {tx_hash_hex}")

        try:
            if self.receipt_timeout is not None:
                receipt = await self.w3.eth.wait_for_transaction_receipt(
                    tx_hash, timeout=self.receipt_timeout
                )
            else:
                receipt = await self.w3.eth.wait_for_transaction_receipt(tx_hash)
        except Exception as e:
            logger.error(f"{label} confirmation failed for {tx_hash_hex}: {e}")
            raise ChainInteractionError(str(e)) from e

        if receipt["status"] == 0:
            raise ChainInteractionError(f"Transaction {tx_hash_hex} reverted")

        return TxReceipt(
            tx_hash=AsyncWeb3.to_hex(receipt["transactionHash"]),
            block_number=int(receipt["blockNumber"]),
        )

    async def close(self) -> None:
        """Close the underlying provider session."""
        disconnect = getattr(self.w3.provider, "disconnect", None)
        if disconnect is not None:
            await disconnect()
