"""Transfer and transaction models."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class TransferEvent:
    """ERC20 Transfer event decoded from a log."""

    amount: int
    from_address: str
    to_address: str
    tx_hash: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "amount": self.amount,
            "from": self.from_address,
            "to": self.to_address,
            "txn": self.tx_hash,
        }


@dataclass(frozen=True)
class UnsignedTransaction:
    """Legacy (EIP-155) transaction ready to be signed."""

    nonce: int
    gas_price: int
    gas_limit: int
    to: str
    value: int
    data: str
    chain_id: int

    def to_dict(self) -> dict[str, Any]:
        """Field names as eth_account expects them."""
        return {
            "nonce": self.nonce,
            "gasPrice": self.gas_price,
            "gas": self.gas_limit,
            "to": self.to,
            "value": self.value,
            "data": self.data,
            "chainId": self.chain_id,
        }
