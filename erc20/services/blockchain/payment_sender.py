"""
Payment Sender.

Reads balances, estimates gas, builds, signs and broadcasts ERC20 and
native transfers. All methods block; pay() and eth_pay() may be called
from many threads at once.
"""

from typing import Any

from loguru import logger

from erc20.exceptions import BusinessError, ProtocolError, ValidationError
from erc20.models import UnsignedTransaction
from erc20.utils.validation import (
    normalize_address,
    require_amount,
    require_gas,
    require_private_key,
    validate_transaction_hash,
)

from .abi_codec import decode_uint, encode_balance_of, encode_transfer
from .constants import ETH_TRANSFER_GAS_LIMIT, LATEST
from .nonce_manager import NonceManager
from .provider_manager import ProviderManager
from .signer import Signer


class PaymentSender:
    """
    Handles token and native payments of a wallet.

    Features:
    - Balance reads (token and native)
    - Gas estimation and base fee lookup
    - Nonce sequencing through NonceManager
    """

    def __init__(
        self,
        provider: ProviderManager,
        contract: str,
        chain_id: int,
        nonce_manager: NonceManager,
        signer: Signer,
        log: Any = None,
    ) -> None:
        """
        Initialize payment sender.

        Args:
            provider: JSON-RPC gateway
            contract: ERC20 contract address (lowercase)
            chain_id: Chain ID, used for EIP-155 signatures
            nonce_manager: Nonce lock owned by the wallet
            signer: Signs transactions with private keys
            log: Logger, loguru's by default
        """
        self.provider = provider
        self.contract = contract
        self.chain_id = chain_id
        self.nonce_manager = nonce_manager
        self.signer = signer
        self.log = log or logger

    # === Reads ===

    def balance(self, address: str) -> int:
        """
        Get token balance of an address.

        Args:
            address: Public address, 0x-prefixed

        Returns:
            Balance in the smallest token unit (0 if none)
        """
        data = encode_balance_of(address)
        result = self.provider.eth_call(
            {"to": self.contract, "data": data}, LATEST
        )
        balance = decode_uint(result)
        self.log.debug(f"Balance of {address} is {balance}")
        return balance

    def eth_balance(self, address: str) -> int:
        """Get native balance of an address, in wei."""
        address = normalize_address(address)
        balance = decode_uint(self.provider.eth_get_balance(address, LATEST))
        self.log.debug(f"ETH balance of {address} is {balance}")
        return balance

    def gas_estimate(self, sender: str, recipient: str, amount: int) -> int:
        """
        Estimate gas of a token transfer.

        Args:
            sender: Address paying
            recipient: Address receiving
            amount: Token amount

        Returns:
            Gas units
        """
        sender = normalize_address(sender)
        data = encode_transfer(recipient, amount)
        gas = decode_uint(
            self.provider.eth_estimate_gas(
                {"from": sender, "to": self.contract, "data": data}, LATEST
            )
        )
        self.log.debug(
            f"Estimated {gas} gas to send {amount} from {sender} to {recipient}"
        )
        return gas

    def gas_price(self) -> int:
        """
        Get base fee of the latest block.

        Returns:
            Gas price in wei

        Raises:
            BusinessError: If the node has no latest block for us
        """
        block = self.provider.eth_get_block_by_number(LATEST, False)
        if block is None:
            raise BusinessError("Can't get gas price, try again later")
        if not isinstance(block, dict) or block.get("baseFeePerGas") is None:
            raise ProtocolError("Latest block has no baseFeePerGas")
        price = decode_uint(block["baseFeePerGas"])
        self.log.debug(f"Current gas price is {price} wei")
        return price

    # === Payments ===

    def pay(
        self,
        priv: str,
        address: str,
        amount: int,
        gas_limit: int | None = None,
        gas_price: int | None = None,
    ) -> str:
        """
        Send tokens from a private key to a public address.

        Args:
            priv: Private key of the sender, in hex
            address: Recipient
            amount: Token amount, in the smallest unit
            gas_limit: Gas limit (estimated if None)
            gas_price: Gas price in wei (latest base fee if None)

        Returns:
            Transaction hash, lowercase
        """
        require_private_key(priv)
        recipient = normalize_address(address)
        require_amount(amount)
        require_gas(gas_limit, "Gas limit")
        require_gas(gas_price, "Gas price")
        sender = self._sender(priv)
        data = encode_transfer(recipient, amount)

        with self.nonce_manager.reserve(sender) as nonce:
            price = gas_price or self.gas_price()
            limit = gas_limit or self.gas_estimate(sender, recipient, amount)
            tx = UnsignedTransaction(
                nonce=nonce,
                gas_price=price,
                gas_limit=limit,
                to=self.contract,
                value=0,
                data=data,
                chain_id=self.chain_id,
            )
            tx_hash = self._broadcast(priv, tx)

        self.log.info(
            f"Sent {amount} tokens from {sender} to {recipient}: {tx_hash}"
        )
        return tx_hash

    def eth_pay(
        self,
        priv: str,
        address: str,
        amount: int,
        gas_price: int | None = None,
    ) -> str:
        """
        Send native currency from a private key to a public address.

        Args:
            priv: Private key of the sender, in hex
            address: Recipient
            amount: Amount in wei
            gas_price: Gas price in wei (latest base fee if None)

        Returns:
            Transaction hash, lowercase
        """
        require_private_key(priv)
        recipient = normalize_address(address)
        require_amount(amount)
        require_gas(gas_price, "Gas price")
        sender = self._sender(priv)

        with self.nonce_manager.reserve(sender) as nonce:
            price = gas_price or self.gas_price()
            tx = UnsignedTransaction(
                nonce=nonce,
                gas_price=price,
                gas_limit=ETH_TRANSFER_GAS_LIMIT,
                to=recipient,
                value=amount,
                data="0x",
                chain_id=self.chain_id,
            )
            tx_hash = self._broadcast(priv, tx)

        self.log.info(
            f"Sent {amount} wei from {sender} to {recipient}: {tx_hash}"
        )
        return tx_hash

    def _sender(self, priv: str) -> str:
        try:
            return normalize_address(self.signer.address(priv))
        except ValidationError:
            raise
        except Exception as e:
            raise ValidationError(
                f"Invalid private key ({type(e).__name__})"
            ) from e

    def _broadcast(self, priv: str, tx: UnsignedTransaction) -> str:
        raw = self.signer.sign(priv, tx)
        tx_hash = self.provider.eth_send_raw_transaction(raw)
        if not validate_transaction_hash(tx_hash):
            raise ProtocolError(
                f"eth_sendRawTransaction returned {tx_hash!r}, not a hash"
            )
        self.log.debug(
            f"Broadcast nonce {tx.nonce} to {tx.to} "
            f"(gas {tx.gas_limit} at {tx.gas_price} wei): {tx_hash}"
        )
        return tx_hash.lower()
