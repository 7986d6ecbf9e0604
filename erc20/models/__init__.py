"""Wallet data models."""

from .transfer import TransferEvent, UnsignedTransaction

__all__ = [
    "TransferEvent",
    "UnsignedTransaction",
]
