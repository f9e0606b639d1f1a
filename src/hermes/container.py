"""Dependency container wiring the relay's stateful components.

The container owns the transaction log, the divine token cache and the
locks guarding them. Handlers reach it through ``app.state.container``;
tests build a fresh container per test.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from hermes.chain.client import ZephyrClient
from hermes.config import Settings
from hermes.ledger.divine_cache import DivineTokenCache
from hermes.ledger.transaction_log import TransactionLog
from hermes.listener.factory import get_event_source
from hermes.listener.runner import OfferingListener
from hermes.notifications.backend import BackendNotifier
from hermes.services.blessing_service import BlessingService

logger = logging.getLogger(__name__)


@dataclass
class ApplicationContainer:
    settings: Settings
    chain: ZephyrClient
    transaction_log: TransactionLog
    divine_cache: DivineTokenCache
    notifier: BackendNotifier
    blessings: BlessingService
    listener: Optional[OfferingListener] = None

    async def close(self) -> None:
        """Flush state and release network resources."""
        logger.info("Saving divine tokens cache and closing clients")
        self.divine_cache.save()
        await self.notifier.close()
        await self.chain.close()


def build_container(settings: Settings, with_listener: bool = True) -> ApplicationContainer:
    """Create all components from settings."""
    chain = ZephyrClient(
        provider_url=settings.provider_url,
        contract_address=settings.zephyr_contract_address,
        private_key=settings.wallet_private_key,
        receipt_timeout=settings.tx_receipt_timeout,
    )
    transaction_log = TransactionLog(settings.transactions_db_path)
    divine_cache = DivineTokenCache(settings.divine_tokens_cache_path, chain)
    notifier = BackendNotifier(
        base_url=settings.main_backend_url,
        api_key=settings.api_key,
        timeout=settings.notify_timeout,
    )

    listener = None
    if with_listener:
        listener = OfferingListener(
            source=get_event_source(settings, chain),
            chain=chain,
            transaction_log=transaction_log,
            notifier=notifier,
            reconnect_delay=settings.reconnect_delay,
        )

    return ApplicationContainer(
        settings=settings,
        chain=chain,
        transaction_log=transaction_log,
        divine_cache=divine_cache,
        notifier=notifier,
        blessings=BlessingService(chain, divine_cache),
        listener=listener,
    )


__all__ = ["ApplicationContainer", "build_container"]
