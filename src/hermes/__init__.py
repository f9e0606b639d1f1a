"""Hermes: relay between the Zephyr custody contract and the main backend."""

__version__ = "0.1.0"
