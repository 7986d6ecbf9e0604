"""Wallet configuration."""

from .settings import USDT, WalletConfig, WalletSettings

__all__ = [
    "USDT",
    "WalletConfig",
    "WalletSettings",
]
