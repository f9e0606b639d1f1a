"""Outbound notifications to the main backend."""

from hermes.notifications.backend import BackendNotifier

__all__ = ["BackendNotifier"]
