"""Read-only view of the deposit transaction log."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from hermes.api.deps import get_container, require_api_key
from hermes.container import ApplicationContainer

router = APIRouter(dependencies=[Depends(require_api_key)], tags=["Transactions"])


@router.get("/transactions")
async def list_transactions(
    limit: Optional[int] = Query(None, ge=1, le=10000, description="Return only the newest N"),
    container: ApplicationContainer = Depends(get_container),
):
    """Logged offerings in arrival order."""
    records = container.transaction_log.records(limit=limit)
    return {
        "success": True,
        "count": len(records),
        "transactions": [record.to_dict() for record in records],
    }
