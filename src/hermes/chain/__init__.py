"""Chain access: Zephyr contract client and unit conversion."""

from hermes.chain.client import ChainInteractionError, TxReceipt, ZephyrClient
from hermes.chain.units import DEFAULT_DECIMALS, format_units, parse_units

__all__ = [
    "ChainInteractionError",
    "DEFAULT_DECIMALS",
    "TxReceipt",
    "ZephyrClient",
    "format_units",
    "parse_units",
]
