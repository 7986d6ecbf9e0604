"""Unit tests for EthAccountSigner."""

from eth_account import Account

from erc20.models import UnsignedTransaction
from erc20.services.blockchain import EthAccountSigner
from tests.conftest import CONTRACT, JEFF, JEFF_ADDRESS, WALTER_ADDRESS


class TestEthAccountSigner:
    """Signing with real keys, offline."""

    def test_address_is_lowercase(self):
        assert EthAccountSigner().address(JEFF) == JEFF_ADDRESS

    def test_address_without_prefix(self):
        assert EthAccountSigner().address(JEFF[2:]) == JEFF_ADDRESS

    def test_signature_recovers_sender(self):
        """Raw transaction is signed by the key's own address."""
        tx = UnsignedTransaction(
            nonce=3,
            gas_price=7_000_000_000,
            gas_limit=60_000,
            to=CONTRACT,
            value=0,
            data="0xa9059cbb" + "0" * 24 + WALTER_ADDRESS[2:] + format(1, "064x"),
            chain_id=4242,
        )

        raw = EthAccountSigner().sign(JEFF, tx)

        assert raw.startswith("0x")
        assert Account.recover_transaction(raw).lower() == JEFF_ADDRESS

    def test_native_transfer(self):
        tx = UnsignedTransaction(
            nonce=0,
            gas_price=1,
            gas_limit=22_000,
            to=WALTER_ADDRESS,
            value=10**15,
            data="0x",
            chain_id=1,
        )

        raw = EthAccountSigner().sign(JEFF, tx)

        assert Account.recover_transaction(raw).lower() == JEFF_ADDRESS
