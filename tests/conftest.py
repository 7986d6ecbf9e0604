"""
Pytest configuration and shared fixtures.

The node is faked in memory (FakeProvider) and keys are faked by
FakeSigner, so unit tests never touch the network.
"""

import itertools
import threading
import time
from typing import Any

import pytest

from erc20.config import WalletConfig
from erc20.models import UnsignedTransaction
from erc20.services.blockchain import (
    DepositProcessor,
    NonceManager,
    PaymentSender,
    Wallet,
)

# Hardhat's first default account
JEFF = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
JEFF_ADDRESS = "0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266"

WALTER = "0x" + "2" * 64
WALTER_ADDRESS = "0x" + "ab" * 20

CONTRACT = "0x5fbdb2315678afecb367f032d93f642f64180aa3"
STABLE = "0xEB2fE8872A6f1eDb70a2632EA1f869AB131532f6"


# ==================== PYTEST CONFIGURATION ====================


def pytest_configure(config: Any) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )
    config.addinivalue_line(
        "markers", "blockchain: marks tests that talk to a (fake) node"
    )
    config.addinivalue_line("markers", "integration: marks integration tests")


# ==================== FAKES ====================


class FakeProvider:
    """
    In-memory JSON-RPC node.

    The pending nonce of every sender grows by one with each raw
    transaction, after a short delay that makes unsynchronized callers
    collide.
    """

    def __init__(self, config: WalletConfig, delay: float = 0.0) -> None:
        self.config = config
        self.delay = delay
        self.calls: list[tuple[str, list[Any]]] = []
        self.call_result = "0x"
        self.balance_result = "0x0"
        self.gas_result = hex(50_000)
        self.block: dict[str, Any] | None = {"baseFeePerGas": hex(7_000_000_000)}
        self.receipts: dict[str, Any] = {}
        self.hash_case = str.lower
        self.pending = 0
        self.broadcast: list[str] = []
        self._hashes = itertools.count(1)
        self._lock = threading.Lock()

    def _record(self, method: str, params: list[Any]) -> None:
        with self._lock:
            self.calls.append((method, params))

    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]

    def eth_call(self, tx: dict[str, Any], block: str = "latest") -> str:
        self._record("eth_call", [tx, block])
        return self.call_result

    def eth_estimate_gas(self, tx: dict[str, Any], block: str = "latest") -> str:
        self._record("eth_estimateGas", [tx, block])
        return self.gas_result

    def eth_get_balance(self, address: str, block: str = "latest") -> str:
        self._record("eth_getBalance", [address, block])
        return self.balance_result

    def eth_get_transaction_count(self, address: str, block: str) -> str:
        self._record("eth_getTransactionCount", [address, block])
        nonce = self.pending
        time.sleep(self.delay)
        return hex(nonce)

    def eth_send_raw_transaction(self, raw: str) -> str:
        self._record("eth_sendRawTransaction", [raw])
        time.sleep(self.delay)
        with self._lock:
            self.pending += 1
            self.broadcast.append(raw)
        return self.hash_case("0x" + format(next(self._hashes), "064x"))

    def eth_get_block_by_number(
        self, block: str = "latest", full: bool = False
    ) -> dict[str, Any] | None:
        self._record("eth_getBlockByNumber", [block, full])
        return self.block

    def eth_get_transaction_receipt(self, tx_hash: str) -> dict[str, Any] | None:
        self._record("eth_getTransactionReceipt", [tx_hash])
        return self.receipts.get(tx_hash)


class FakeSigner:
    """Signer that records transactions instead of signing them."""

    ADDRESSES = {JEFF: JEFF_ADDRESS, WALTER: WALTER_ADDRESS}

    def __init__(self) -> None:
        self.signed: list[UnsignedTransaction] = []
        self._lock = threading.Lock()

    def address(self, priv: str) -> str:
        return self.ADDRESSES[priv]

    def sign(self, priv: str, tx: UnsignedTransaction) -> str:
        with self._lock:
            self.signed.append(tx)
        return "0x" + format(tx.nonce, "064x")


# ==================== FIXTURES ====================


@pytest.fixture
def config() -> WalletConfig:
    """Wallet config of a local node."""
    return WalletConfig(
        contract=CONTRACT,
        chain=4242,
        host="localhost",
        port=8545,
        ssl=False,
    )


@pytest.fixture
def provider(config: WalletConfig) -> FakeProvider:
    return FakeProvider(config)


@pytest.fixture
def signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def payment_sender(provider: FakeProvider, signer: FakeSigner) -> PaymentSender:
    """Payment sender on the fake node."""
    return PaymentSender(
        provider=provider,
        contract=CONTRACT,
        chain_id=4242,
        nonce_manager=NonceManager(provider),
        signer=signer,
    )


@pytest.fixture
def deposit_processor(provider: FakeProvider) -> DepositProcessor:
    return DepositProcessor(provider=provider, contract=CONTRACT)


@pytest.fixture
def wallet(
    config: WalletConfig, provider: FakeProvider, signer: FakeSigner
) -> Wallet:
    """Wallet wired to the fake node and signer."""
    return Wallet(config, provider=provider, signer=signer)
