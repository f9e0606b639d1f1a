"""Local mirror of the Zephyr allow-list (divine tokens).

Reads go through the cache first and fall back to the contract's
isTokenDivine view. A token whose status cannot be read is reported as not
divine and is not cached, so the next lookup asks the chain again.

Entries are only changed by the allow-list mutation endpoints or by a
first-time chain lookup; changes made on-chain by other parties are not
picked up until the process restarts with a cleared cache file.
"""

import logging
from pathlib import Path
from typing import Optional, Protocol, Union

from web3 import Web3

from hermes.ledger.storage import SnapshotFile
from hermes.utils.locks import KeyedLocks

logger = logging.getLogger(__name__)


class DivinityReader(Protocol):
    async def is_token_divine(self, token_address: str) -> bool: ...


def normalize_address(address: str) -> str:
    """Return the checksum form of an address (unchanged if not an address)."""
    if Web3.is_address(address):
        return Web3.to_checksum_address(address)
    return address


class DivineTokenCache:
    """Token address -> divine flag, persisted as a JSON object."""

    def __init__(
        self,
        path: Union[str, Path],
        chain: DivinityReader,
        locks: Optional[KeyedLocks] = None,
    ):
        self.file = SnapshotFile(path)
        self.chain = chain
        self.locks = locks or KeyedLocks("divine")
        self._tokens: dict[str, bool] = self.load()

    def load(self) -> dict[str, bool]:
        """Read the cache file. Never raises."""
        if not self.file.exists():
            logger.warning("Divine tokens cache file not found, initializing empty cache.")
            return {}

        try:
            raw = self.file.read()
        except (OSError, ValueError) as e:
            logger.error(f"Error loading divine tokens cache: {e}")
            return {}

        if not isinstance(raw, dict):
            logger.error(f"Divine tokens cache {self.file.path} is not an object, ignoring it")
            return {}

        tokens = {}
        for token, flag in raw.items():
            if flag is not True and flag is not False:
                logger.warning(f"Skipping divine tokens cache entry {token}: {flag!r} is not a boolean")
                continue
            tokens[normalize_address(token)] = flag
        return tokens

    def save(self) -> bool:
        """Persist the current cache state. Write errors are logged only."""
        try:
            self.file.write(dict(self._tokens))
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving divine tokens cache: {e}")
            return False
        logger.debug("Divine tokens cache saved.")
        return True

    def get(self, token_address: str) -> Optional[bool]:
        """Cached flag for a token, or None if it was never looked up."""
        return self._tokens.get(normalize_address(token_address))

    async def is_eligible(self, token_address: str) -> bool:
        """Check whether a token is divine, asking the chain on a cache miss."""
        token = normalize_address(token_address)

        cached = self._tokens.get(token)
        if cached is not None:
            return cached

        async with self.locks.hold(token, operation="is_token_divine"):
            # Another lookup may have filled the entry while we waited
            cached = self._tokens.get(token)
            if cached is not None:
                return cached

            try:
                is_divine = await self.chain.is_token_divine(token)
            except Exception as e:
                logger.error(f"Error checking if token {token} is divine: {e}")
                return False

            self._tokens[token] = bool(is_divine)
            self.save()
            return self._tokens[token]

    def set_eligible(self, token_address: str, eligible: bool = True) -> None:
        """Record a confirmed allow-list change."""
        self._tokens[normalize_address(token_address)] = bool(eligible)
        self.save()

    def clear(self, token_address: str) -> None:
        """Forget a token so the next lookup goes back to the chain."""
        self._tokens.pop(normalize_address(token_address), None)
        self.save()

    def eligible_tokens(self) -> list[str]:
        """Addresses currently cached as divine."""
        return [token for token, divine in self._tokens.items() if divine]

    def __contains__(self, token_address: str) -> bool:
        return normalize_address(token_address) in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)
