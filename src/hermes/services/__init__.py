"""Application services."""

from hermes.services.blessing_service import AllowListResult, BlessingResult, BlessingService
from hermes.services.exceptions import BlessingError, ChainInteractionError, InvalidRequestError

__all__ = [
    "AllowListResult",
    "BlessingError",
    "BlessingResult",
    "BlessingService",
    "ChainInteractionError",
    "InvalidRequestError",
]
