"""Unit tests for NonceManager."""

import threading
import time

from erc20.services.blockchain import NonceManager
from tests.conftest import JEFF_ADDRESS


class TestReserve:
    """Tests for nonce reservation."""

    def test_yields_pending_nonce(self, provider):
        provider.pending = 7
        manager = NonceManager(provider)

        with manager.reserve(JEFF_ADDRESS) as nonce:
            assert nonce == 7

        assert provider.calls == [
            ("eth_getTransactionCount", [JEFF_ADDRESS, "pending"])
        ]

    def test_lock_spans_the_block(self, provider):
        """A second reservation waits until the first block exits."""
        manager = NonceManager(provider)
        order: list[str] = []
        entered = threading.Event()

        def first() -> None:
            with manager.reserve(JEFF_ADDRESS):
                entered.set()
                time.sleep(0.05)
                order.append("first done")

        def second() -> None:
            entered.wait(5)
            with manager.reserve(JEFF_ADDRESS):
                order.append("second in")

        threads = [threading.Thread(target=first), threading.Thread(target=second)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(5)

        assert order == ["first done", "second in"]

    def test_lock_released_on_error(self, provider):
        manager = NonceManager(provider)

        try:
            with manager.reserve(JEFF_ADDRESS):
                raise RuntimeError("broadcast failed")
        except RuntimeError:
            pass

        with manager.reserve(JEFF_ADDRESS) as nonce:
            assert nonce == 0
