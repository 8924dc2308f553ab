"""Runtime helpers for the xSuite Python SDK"""

from .address import Address, AddressError, ZERO_ADDRESS, address_like_to_bech, address_like_to_hex
from .errors import XsuiteError, InteractionError

__all__ = [
    "Address",
    "AddressError",
    "ZERO_ADDRESS",
    "address_like_to_bech",
    "address_like_to_hex",
    "XsuiteError",
    "InteractionError",
]
