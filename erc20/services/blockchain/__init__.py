"""Blockchain services module."""

from .abi_codec import (
    address_topic,
    decode_transfer_log,
    decode_uint,
    encode_balance_of,
    encode_transfer,
)
from .constants import BALANCE_OF_SELECTOR, TRANSFER_SELECTOR, TRANSFER_TOPIC
from .deposit_processor import DepositProcessor
from .event_monitor import (
    ConnectionState,
    EventMonitor,
    SubscriptionState,
    immediate,
)
from .nonce_manager import NonceManager
from .payment_sender import PaymentSender
from .provider_manager import ProviderManager
from .signer import EthAccountSigner, Signer
from .wallet import Wallet
from .watch_list import WatchList

__all__ = [
    "Wallet",
    "ProviderManager",
    "NonceManager",
    "PaymentSender",
    "DepositProcessor",
    "EventMonitor",
    "ConnectionState",
    "SubscriptionState",
    "WatchList",
    "Signer",
    "EthAccountSigner",
    "immediate",
    "address_topic",
    "decode_transfer_log",
    "decode_uint",
    "encode_balance_of",
    "encode_transfer",
    "BALANCE_OF_SELECTOR",
    "TRANSFER_SELECTOR",
    "TRANSFER_TOPIC",
]
