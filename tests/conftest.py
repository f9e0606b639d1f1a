"""Pytest configuration and fixtures."""

import os
from typing import AsyncGenerator, Optional
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from web3 import Web3

# Set test environment
os.environ["API_KEY"] = "test-api-key"
os.environ["ZEPHYR_CONTRACT_ADDRESS"] = "0x" + "c" * 40
os.environ["DEBUG"] = "true"

from hermes.chain.client import ChainInteractionError, TxReceipt
from hermes.config import Settings
from hermes.container import ApplicationContainer
from hermes.ledger.divine_cache import DivineTokenCache
from hermes.ledger.transaction_log import TransactionLog
from hermes.notifications.backend import BackendNotifier
from hermes.services.blessing_service import BlessingService

API_KEY = "test-api-key"
TOKEN = "0x" + "a" * 40
SENDER = "0x" + "b" * 40
RECIPIENT = "0x" + "d" * 40
CONTRACT = "0x" + "c" * 40

TOKEN_CHECKSUM = Web3.to_checksum_address(TOKEN)
RECIPIENT_CHECKSUM = Web3.to_checksum_address(RECIPIENT)


class FakeZephyrClient:
    """In-memory stand-in for the Zephyr contract."""

    def __init__(self, divine: Optional[dict[str, bool]] = None, decimals: int = 18):
        self.divine = {Web3.to_checksum_address(k): v for k, v in (divine or {}).items()}
        self.decimals = decimals
        self.fail_reads = False
        self.fail_decimals = False
        self.fail_transactions = False
        self.paused = False
        self.block_number = 100
        self.calls: list[tuple] = []

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    def _receipt(self) -> TxReceipt:
        self.block_number += 1
        return TxReceipt(tx_hash="0x" + f"{self.block_number:064x}", block_number=self.block_number)

    async def is_token_divine(self, token_address: str) -> bool:
        self.calls.append(("is_token_divine", token_address))
        if self.fail_reads:
            raise ChainInteractionError("execution reverted")
        return self.divine.get(Web3.to_checksum_address(token_address), False)

    async def is_paused(self) -> bool:
        self.calls.append(("is_paused",))
        if self.fail_reads:
            raise ChainInteractionError("execution reverted")
        return self.paused

    async def get_token_decimals(self, token_address: str) -> int:
        self.calls.append(("get_token_decimals", token_address))
        if self.fail_decimals:
            return 18
        return self.decimals

    async def bless_with_tokens(self, token_address, recipient, amount, reference) -> TxReceipt:
        self.calls.append(("bless_with_tokens", token_address, recipient, amount, reference))
        if self.fail_transactions:
            raise ChainInteractionError("insufficient funds for gas")
        return self._receipt()

    async def bless_token(self, token_address: str) -> TxReceipt:
        self.calls.append(("bless_token", token_address))
        if self.fail_transactions:
            raise ChainInteractionError("caller is not Zeus")
        self.divine[Web3.to_checksum_address(token_address)] = True
        return self._receipt()

    async def unbless_token(self, token_address: str) -> TxReceipt:
        self.calls.append(("unbless_token", token_address))
        if self.fail_transactions:
            raise ChainInteractionError("caller is not Zeus")
        self.divine[Web3.to_checksum_address(token_address)] = False
        return self._receipt()

    async def close(self) -> None:
        pass


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing storage at a temporary directory."""
    return Settings(
        api_key=API_KEY,
        zephyr_contract_address=CONTRACT,
        main_backend_url="http://backend.test",
        transactions_db_path=str(tmp_path / "trdb.json"),
        divine_tokens_cache_path=str(tmp_path / "divineTokensCache.json"),
    )


@pytest.fixture
def chain() -> FakeZephyrClient:
    return FakeZephyrClient()


@pytest.fixture
def notifier() -> AsyncMock:
    mock = AsyncMock(spec=BackendNotifier)
    mock.notify_token_received.return_value = True
    return mock


@pytest.fixture
def transaction_log(settings) -> TransactionLog:
    return TransactionLog(settings.transactions_db_path)


@pytest.fixture
def divine_cache(settings, chain) -> DivineTokenCache:
    return DivineTokenCache(settings.divine_tokens_cache_path, chain)


@pytest.fixture
def container(settings, chain, transaction_log, divine_cache, notifier) -> ApplicationContainer:
    """Fresh container per test, no listener."""
    return ApplicationContainer(
        settings=settings,
        chain=chain,
        transaction_log=transaction_log,
        divine_cache=divine_cache,
        notifier=notifier,
        blessings=BlessingService(chain, divine_cache),
    )


@pytest_asyncio.fixture
async def client(container) -> AsyncGenerator[AsyncClient, None]:
    """Async test client for the API."""
    from hermes.api.app import create_app

    app = create_app(container)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers() -> dict:
    return {"x-api-key": API_KEY}
