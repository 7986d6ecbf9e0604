"""
Nonce Manager for blockchain transactions.

Prevents race conditions when sending multiple transactions from one wallet
by holding a lock from the nonce lookup until the broadcast is done.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger

from .abi_codec import decode_uint
from .constants import PENDING
from .provider_manager import ProviderManager


class NonceManager:
    """
    Grants nonces to transactions of one wallet, one at a time.

    The "pending" transaction count and the broadcast are not atomic at the
    provider, so the lock spans both. This manager is the only nonce
    authority for its wallet; other processes using the same account are
    not coordinated.
    """

    def __init__(self, provider: ProviderManager, log: Any = None) -> None:
        """
        Initialize nonce manager.

        Args:
            provider: JSON-RPC gateway
            log: Logger, loguru's by default
        """
        self.provider = provider
        self.log = log or logger
        self._lock = threading.Lock()

    @contextmanager
    def reserve(self, address: str) -> Iterator[int]:
        """
        Hold the lock and yield the next nonce of address.

        The caller must sign and broadcast inside the with-block.

        Args:
            address: Sender address

        Yields:
            Next nonce value
        """
        with self._lock:
            nonce = decode_uint(
                self.provider.eth_get_transaction_count(address, PENDING)
            )
            self.log.debug(f"Acquired nonce {nonce} for {address}")
            yield nonce
