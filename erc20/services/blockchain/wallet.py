"""
Wallet - Main Interface.

Wires the gateway, payment sender, deposit processor and event monitor
behind one object.
"""

import asyncio
from typing import Any

from loguru import logger

from erc20.config import WalletConfig, WalletSettings
from erc20.exceptions import ConfigurationError

from .constants import DEFAULT_POLL_INTERVAL, DEFAULT_SUBSCRIPTION_ID
from .deposit_processor import DepositProcessor
from .event_monitor import (
    ActiveSink,
    AddressSource,
    Consumer,
    EventMonitor,
    ReconnectDelay,
    immediate,
)
from .nonce_manager import NonceManager
from .payment_sender import PaymentSender
from .provider_manager import ProviderManager
from .signer import EthAccountSigner, Signer


class Wallet:
    """
    ERC20 wallet bound to one contract on one node.

    Balance, gas and receipt reads are safe to call from many threads.
    pay() and eth_pay() are too: nonce lookup through broadcast is
    serialized per Wallet instance. accept() blocks forever; run it in its
    own thread.

    Example:
        wallet = Wallet(host="mainnet.infura.io", http_path="/v3/KEY")
        wallet.balance("0xEB2fE8872A6f1eDb70a2632EA1f869AB131532f6")
    """

    def __init__(
        self,
        config: WalletConfig | None = None,
        *,
        provider: ProviderManager | None = None,
        signer: Signer | None = None,
        reconnect_delay: ReconnectDelay = immediate,
        **fields: Any,
    ) -> None:
        """
        Initialize wallet.

        Args:
            config: Ready configuration, or None to build one from fields
            provider: JSON-RPC gateway (built from config by default)
            signer: Transaction signer (eth_account by default)
            reconnect_delay: Delay policy of accept() reconnects
            **fields: WalletConfig fields (contract, chain, host, port,
                http_path, ws_path, ssl, proxy, log)

        Raises:
            ConfigurationError: If any field is invalid
        """
        if config is not None and fields:
            raise ConfigurationError(
                f"Pass either a config or its fields, not both: {sorted(fields)}"
            )
        self.config = config if config is not None else WalletConfig(**fields)
        self.log = self.config.log or logger.bind(wallet=self.config.host)

        self.provider = provider or ProviderManager(self.config)
        self.nonce_manager = NonceManager(self.provider, log=self.log)
        self.payment_sender = PaymentSender(
            provider=self.provider,
            contract=self.config.contract,
            chain_id=self.config.chain,
            nonce_manager=self.nonce_manager,
            signer=signer or EthAccountSigner(),
            log=self.log,
        )
        self.deposit_processor = DepositProcessor(
            provider=self.provider,
            contract=self.config.contract,
            log=self.log,
        )
        self.event_monitor = EventMonitor(
            provider=self.provider,
            contract=self.config.contract,
            log=self.log,
            reconnect_delay=reconnect_delay,
        )

    @classmethod
    def from_settings(
        cls,
        settings: WalletSettings | None = None,
        **kwargs: Any,
    ) -> "Wallet":
        """Build a wallet from ERC20_* environment variables."""
        settings = settings or WalletSettings()
        return cls(settings.to_wallet_config(log=kwargs.pop("log", None)), **kwargs)

    # === Read-only config ===

    @property
    def contract(self) -> str:
        return self.config.contract

    @property
    def chain(self) -> int:
        return self.config.chain

    @property
    def host(self) -> str:
        return self.config.host

    @property
    def port(self) -> int:
        return self.config.port

    @property
    def ssl(self) -> bool:
        return self.config.ssl

    @property
    def http_path(self) -> str:
        return self.config.http_path

    @property
    def ws_path(self) -> str:
        return self.config.ws_path

    # === Reads ===

    def balance(self, address: str) -> int:
        """Token balance of address, in the smallest unit."""
        return self.payment_sender.balance(address)

    def eth_balance(self, address: str) -> int:
        """Native balance of address, in wei."""
        return self.payment_sender.eth_balance(address)

    def sum_of(self, tx_hash: str) -> int:
        """Tokens moved by a mined transaction of our contract."""
        return self.deposit_processor.sum_of(tx_hash)

    def gas_estimate(self, sender: str, recipient: str, amount: int) -> int:
        """Gas units a token transfer would take."""
        return self.payment_sender.gas_estimate(sender, recipient, amount)

    def gas_price(self) -> int:
        """Base fee of the latest block, in wei."""
        return self.payment_sender.gas_price()

    # === Payments ===

    def pay(
        self,
        priv: str,
        address: str,
        amount: int,
        gas_limit: int | None = None,
        gas_price: int | None = None,
    ) -> str:
        """Send tokens; returns the transaction hash."""
        return self.payment_sender.pay(
            priv, address, amount, gas_limit=gas_limit, gas_price=gas_price
        )

    def eth_pay(
        self,
        priv: str,
        address: str,
        amount: int,
        gas_price: int | None = None,
    ) -> str:
        """Send native currency; returns the transaction hash."""
        return self.payment_sender.eth_pay(
            priv, address, amount, gas_price=gas_price
        )

    # === Event Monitoring ===

    def accept(
        self,
        addresses: AddressSource,
        consumer: Consumer,
        active: ActiveSink | None = None,
        raw: bool = False,
        interval: float = DEFAULT_POLL_INTERVAL,
        subscription_id: int = DEFAULT_SUBSCRIPTION_ID,
    ) -> None:
        """
        Wait for incoming transfers and pass them to consumer.

        Blocks forever on its own event loop; stop it by terminating the
        thread or process that hosts it. See EventMonitor.run() for the
        arguments.
        """
        asyncio.run(
            self.accept_async(
                addresses,
                consumer,
                active=active,
                raw=raw,
                interval=interval,
                subscription_id=subscription_id,
            )
        )

    async def accept_async(
        self,
        addresses: AddressSource,
        consumer: Consumer,
        active: ActiveSink | None = None,
        raw: bool = False,
        interval: float = DEFAULT_POLL_INTERVAL,
        subscription_id: int = DEFAULT_SUBSCRIPTION_ID,
    ) -> None:
        """Same as accept(), for an existing event loop; cancel the task to stop."""
        await self.event_monitor.run(
            addresses,
            consumer,
            active=active,
            raw=raw,
            interval=interval,
            subscription_id=subscription_id,
        )
