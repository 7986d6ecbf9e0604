"""Argument validation utilities."""

import re

from erc20.exceptions import ValidationError

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")
TX_HASH_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")
PRIVATE_KEY_PATTERN = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")

UINT256_MAX = 2**256 - 1


def validate_address(address: str) -> bool:
    """
    Validate Ethereum address.

    Args:
        address: Wallet or contract address

    Returns:
        True if valid (0x + 40 hex chars, any case)
    """
    if not address or not isinstance(address, str):
        return False
    return bool(ADDRESS_PATTERN.fullmatch(address))


def normalize_address(address: str) -> str:
    """
    Normalize address to its canonical lowercase form.

    Args:
        address: Wallet address

    Returns:
        Lowercase address

    Raises:
        ValidationError: If invalid address
    """
    if not validate_address(address):
        raise ValidationError(f"Invalid address: {address!r}")
    return address.lower()


def validate_transaction_hash(tx_hash: str) -> bool:
    """
    Validate transaction hash.

    Args:
        tx_hash: Transaction hash

    Returns:
        True if valid (0x + 64 hex chars)
    """
    if not tx_hash or not isinstance(tx_hash, str):
        return False
    return bool(TX_HASH_PATTERN.fullmatch(tx_hash))


def normalize_transaction_hash(tx_hash: str) -> str:
    """Lowercase a transaction hash, raising ValidationError if malformed."""
    if not validate_transaction_hash(tx_hash):
        raise ValidationError(f"Invalid transaction hash: {tx_hash!r}")
    return tx_hash.lower()


def validate_private_key(priv: str) -> bool:
    """Check that priv is 32 bytes of hex, with or without 0x."""
    if not priv or not isinstance(priv, str):
        return False
    return bool(PRIVATE_KEY_PATTERN.fullmatch(priv))


def require_private_key(priv: str) -> str:
    # The key itself must never end up in the message
    if not validate_private_key(priv):
        raise ValidationError("Invalid private key: expected 64 hex chars")
    return priv


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def require_amount(amount: int) -> int:
    """
    Check a transfer amount.

    Args:
        amount: Amount in the smallest unit (wei or token units)

    Returns:
        The amount

    Raises:
        ValidationError: If not a positive integer fitting in uint256
    """
    if not _is_int(amount):
        raise ValidationError(
            f"Amount must be an integer, got {type(amount).__name__}"
        )
    if amount <= 0:
        raise ValidationError(f"Amount must be positive, got {amount}")
    if amount > UINT256_MAX:
        raise ValidationError(f"Amount {amount} doesn't fit into uint256")
    return amount


def require_gas(value: int | None, name: str) -> int | None:
    """Check an optional gas limit/price: None or a positive integer."""
    if value is None:
        return None
    if not _is_int(value) or value <= 0:
        raise ValidationError(f"{name} must be a positive integer, got {value!r}")
    return value
