"""Health check endpoints."""

import logging

from fastapi import APIRouter, Depends

from hermes.api.deps import get_container, require_api_key
from hermes.container import ApplicationContainer

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    """Liveness probe (no auth)."""
    return {"status": "Olympus is in harmony"}


@router.get("/health/detailed", dependencies=[Depends(require_api_key)])
async def detailed_health(container: ApplicationContainer = Depends(get_container)):
    """Detailed health check with listener and storage info."""
    try:
        paused = await container.chain.is_paused()
    except Exception as e:
        logger.warning(f"Could not read contract pause state: {e}")
        paused = None

    listener = container.listener
    return {
        "status": "Olympus is in harmony",
        "service": "hermes",
        "contract_paused": paused,
        "listener": {
            "state": listener.state.value if listener else "disabled",
            "queued": listener.queue.qsize() if listener else 0,
            "stats": dict(listener.stats) if listener else {},
        },
        "transactions": len(container.transaction_log),
        "divine_tokens": len(container.divine_cache.eligible_tokens()),
        "config": container.settings.get_safe_dict(),
    }
