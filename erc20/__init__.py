"""
ERC20 wallet.

Reads token and native balances, sends payments and streams incoming
Transfer events through an Ethereum JSON-RPC/WebSocket provider.
"""

from erc20.config import USDT, WalletConfig, WalletSettings
from erc20.exceptions import (
    BusinessError,
    ConfigurationError,
    ProtocolError,
    TransportError,
    ValidationError,
    WalletError,
)
from erc20.models import TransferEvent, UnsignedTransaction
from erc20.services.blockchain import EventMonitor, Wallet, WatchList

__version__ = "0.1.0"

__all__ = [
    "Wallet",
    "WalletConfig",
    "WalletSettings",
    "WatchList",
    "EventMonitor",
    "TransferEvent",
    "UnsignedTransaction",
    "USDT",
    "WalletError",
    "ConfigurationError",
    "ValidationError",
    "TransportError",
    "ProtocolError",
    "BusinessError",
]
