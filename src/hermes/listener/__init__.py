"""Offering event listener."""

from hermes.listener.base import EventSource, ListenerState, OfferingEvent
from hermes.listener.factory import get_event_source
from hermes.listener.runner import OfferingListener

__all__ = [
    "EventSource",
    "ListenerState",
    "OfferingEvent",
    "OfferingListener",
    "get_event_source",
]
