"""
Services.

Wallet logic layer.
"""

from erc20.services.blockchain import Wallet

__all__ = [
    "Wallet",
]
