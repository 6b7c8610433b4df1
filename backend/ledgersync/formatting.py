"""
Display helpers for the presentation layer. Pure functions, no state.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from eth_utils import from_wei

from ledgersync.config import DATA_TYPES


def format_address(address: Optional[str]) -> str:
    """0x1234567890abcdef... -> 0x1234...cdef"""
    if not address:
        return ""
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"


def format_timestamp(timestamp: int, never_label: Optional[str] = None) -> str:
    """Unix seconds -> local time. A zero timestamp means "never" when never_label is given."""
    if not timestamp and never_label is not None:
        return never_label
    return datetime.fromtimestamp(int(timestamp)).strftime("%Y-%m-%d %H:%M:%S")


def data_type_name(data_type: int) -> str:
    return DATA_TYPES.get(int(data_type), "Unknown")


def format_ether(wei: Union[int, str]) -> str:
    if isinstance(wei, str):
        wei = int(wei, 16) if wei.startswith("0x") else int(wei)
    value = Decimal(from_wei(wei, "ether"))
    return f"{value.normalize():f}"
