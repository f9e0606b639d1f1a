"""Factory for the Offering event source."""

import logging

from hermes.chain.client import ZephyrClient
from hermes.config import Settings
from hermes.listener.base import EventSource
from hermes.listener.sources import PollingEventSource, WebSocketEventSource

logger = logging.getLogger(__name__)


def get_event_source(settings: Settings, client: ZephyrClient) -> EventSource:
    """Pick the streaming source when a WebSocket URL is configured."""
    if settings.uses_websocket:
        return WebSocketEventSource(
            ws_url=settings.ws_provider_url,
            contract_address=client.contract_address,
        )

    logger.info("No WS_PROVIDER_URL provided, using JSON-RPC provider for events")
    return PollingEventSource(
        client,
        interval=settings.poll_interval,
        max_block_range=settings.max_block_range,
    )
