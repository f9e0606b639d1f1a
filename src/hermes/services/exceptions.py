"""Blessing service errors."""

from hermes.chain.client import ChainInteractionError


class BlessingError(Exception):
    """Base class for blessing service errors."""


class InvalidRequestError(BlessingError):
    """Raised for malformed input or a violated business rule (HTTP 400)."""


__all__ = ["BlessingError", "ChainInteractionError", "InvalidRequestError"]
