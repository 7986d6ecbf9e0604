"""
ABI Codec.

Encodes call data for the two ERC20 functions the wallet uses and decodes
Transfer event logs. Every ABI word is 32 bytes, big-endian, left-padded
with zeros.
"""

import re
from collections.abc import Sequence

from erc20.exceptions import ProtocolError
from erc20.models import TransferEvent
from erc20.utils.validation import normalize_address, require_amount

from .constants import BALANCE_OF_SELECTOR, TRANSFER_SELECTOR

WORD_HEX = 64

HEX_DIGITS = re.compile(r"[0-9a-fA-F]*")
TOPIC_DIGITS = re.compile(r"[0-9a-fA-F]{64}")


def _word(hex_digits: str) -> str:
    return hex_digits.rjust(WORD_HEX, "0")


def address_topic(address: str) -> str:
    """
    Pad an address to a 32-byte topic.

    Args:
        address: 0x-prefixed 20-byte address

    Returns:
        0x-prefixed 64 hex chars, lowercase
    """
    return "0x" + _word(normalize_address(address)[2:])


def encode_balance_of(address: str) -> str:
    """Call data of balanceOf(address)."""
    return BALANCE_OF_SELECTOR + _word(normalize_address(address)[2:])


def encode_transfer(address: str, amount: int) -> str:
    """
    Call data of transfer(address,uint256).

    Args:
        address: Recipient
        amount: Token amount, in the smallest unit

    Returns:
        0x-prefixed call data

    Raises:
        ValidationError: If address is malformed or amount isn't positive
    """
    recipient = normalize_address(address)
    amount = require_amount(amount)
    return TRANSFER_SELECTOR + _word(recipient[2:]) + _word(format(amount, "x"))


def decode_uint(value: str | None) -> int:
    """
    Decode a big-endian unsigned integer from hex.

    Empty input (None, "", "0x") is zero.
    """
    if not value:
        return 0
    if not isinstance(value, str):
        raise ProtocolError(f"Not a hex number: {value!r}")
    digits = value[2:] if value.startswith(("0x", "0X")) else value
    if not HEX_DIGITS.fullmatch(digits):
        raise ProtocolError(f"Not a hex number: {value!r}")
    return int(digits, 16) if digits else 0


def _topic_address(topic: str) -> str:
    if not isinstance(topic, str):
        raise ProtocolError(f"Topic is not a 32-byte word: {topic!r}")
    digits = topic[2:] if topic.startswith("0x") else topic
    if not TOPIC_DIGITS.fullmatch(digits):
        raise ProtocolError(f"Topic is not a 32-byte word: {topic!r}")
    return "0x" + digits[-40:].lower()


def decode_transfer_log(
    topics: Sequence[str],
    data: str,
    tx_hash: str,
) -> TransferEvent:
    """
    Decode a Transfer(address,address,uint256) log.

    Args:
        topics: [signature, from, to], each a 32-byte hex word
        data: Amount as a 32-byte hex word
        tx_hash: Hash of the transaction that emitted the log

    Returns:
        TransferEvent with lowercase addresses and hash
    """
    if len(topics) < 3:
        raise ProtocolError(
            f"Transfer log must have 3 topics, got {len(topics)}"
        )
    return TransferEvent(
        amount=decode_uint(data),
        from_address=_topic_address(topics[1]),
        to_address=_topic_address(topics[2]),
        tx_hash=str(tx_hash or "").lower(),
    )
