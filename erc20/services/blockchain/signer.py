"""
Transaction signer.

Key handling is delegated to eth_account; the rest of the wallet only sees
the Signer protocol.
"""

from typing import Protocol

from eth_account import Account
from web3 import Web3

from erc20.models import UnsignedTransaction


class Signer(Protocol):
    """Derives addresses from private keys and signs transactions."""

    def address(self, priv: str) -> str:
        """Public address (lowercase) of a private key."""
        ...

    def sign(self, priv: str, tx: UnsignedTransaction) -> str:
        """Signed raw transaction, 0x-prefixed hex."""
        ...


class EthAccountSigner:
    """Signer backed by eth_account (legacy EIP-155 transactions)."""

    def address(self, priv: str) -> str:
        return Account.from_key(priv).address.lower()

    def sign(self, priv: str, tx: UnsignedTransaction) -> str:
        payload = tx.to_dict()
        payload["to"] = Web3.to_checksum_address(tx.to)
        signed = Account.sign_transaction(payload, priv)
        return Web3.to_hex(signed.raw_transaction)
