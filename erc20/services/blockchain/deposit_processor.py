"""
Deposit Processor.

Finds the token amount moved by a mined transaction.
"""

from typing import Any

from loguru import logger

from erc20.exceptions import BusinessError
from erc20.utils.validation import normalize_transaction_hash

from .abi_codec import decode_transfer_log
from .constants import TRANSFER_TOPIC
from .provider_manager import ProviderManager


class DepositProcessor:
    """Reads Transfer events of the wallet's contract from receipts."""

    def __init__(
        self,
        provider: ProviderManager,
        contract: str,
        log: Any = None,
    ) -> None:
        """
        Initialize deposit processor.

        Args:
            provider: JSON-RPC gateway
            contract: ERC20 contract address (lowercase)
            log: Logger, loguru's by default
        """
        self.provider = provider
        self.contract = contract
        self.log = log or logger

    def sum_of(self, tx_hash: str) -> int:
        """
        Get the amount of tokens sent in a transaction.

        Args:
            tx_hash: Transaction hash

        Returns:
            Amount of the first Transfer event emitted by our contract

        Raises:
            BusinessError: If the receipt is absent or has no such event
        """
        tx_hash = normalize_transaction_hash(tx_hash)
        receipt = self.provider.eth_get_transaction_receipt(tx_hash)
        if not receipt:
            raise BusinessError(
                f"Transaction {tx_hash} not found (not mined yet?)"
            )

        for log in receipt.get("logs") or []:
            if not self._is_transfer(log):
                continue
            event = decode_transfer_log(
                log["topics"], log.get("data", "0x"), tx_hash
            )
            self.log.debug(
                f"Transaction {tx_hash} moved {event.amount} "
                f"from {event.from_address} to {event.to_address}"
            )
            return event.amount

        raise BusinessError(
            f"No Transfer event of {self.contract} in transaction {tx_hash}"
        )

    def _is_transfer(self, log: dict[str, Any]) -> bool:
        topics = log.get("topics") or []
        return (
            len(topics) >= 3
            and str(topics[0]).lower() == TRANSFER_TOPIC
            and str(log.get("address", "")).lower() == self.contract
        )
