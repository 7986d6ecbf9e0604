"""
Event Monitor for ERC20 Transfer events.

Keeps one WebSocket connection to the provider, subscribes to Transfer logs
of the contract sent to a changing list of addresses, and passes every
event to a consumer. The connection is re-opened whenever it closes, for as
long as the monitor runs.
"""

import asyncio
import contextlib
import inspect
import json
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from loguru import logger
from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed

from erc20.exceptions import ProtocolError, ValidationError
from erc20.utils.validation import normalize_address

from .abi_codec import address_topic, decode_transfer_log
from .constants import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_SUBSCRIPTION_ID,
    TRANSFER_TOPIC,
)
from .provider_manager import ProviderManager
from .watch_list import WatchList


class ConnectionState(Enum):
    """Phases of one connection attempt."""

    CONNECTING = "connecting"
    STREAMING = "streaming"  # Subscribing and receiving events
    CLOSED = "closed"
    RECONNECTING = "reconnecting"


@dataclass
class SubscriptionState:
    """State of one connection attempt, dropped when it closes."""

    subscription_id: int
    raw: bool
    interval: float
    requested: list[str] = field(default_factory=list)
    phase: ConnectionState = ConnectionState.CONNECTING


class ActiveSink(Protocol):
    """Addresses the provider is actually watching for us."""

    def append(self, address: str) -> None: ...

    def clear(self) -> None: ...

    def __iter__(self) -> Iterator[str]: ...


# A list/set/WatchList of addresses, or a function returning one
AddressSource = Iterable[str] | Callable[[], Iterable[str]]

# Receives a TransferEvent, or the raw log dict in raw mode
Consumer = Callable[[Any], Any]

# Seconds to wait before the n-th consecutive reconnect
ReconnectDelay = Callable[[int], float]


def immediate(attempt: int) -> float:
    """Reconnect right away, without limit."""
    return 0.0


class EventMonitor:
    """
    Streams Transfer events to watched addresses over WebSocket.

    Every tick the desired addresses are read from the source; if they
    differ from the active ones, eth_subscribe is sent for the whole set
    (the new filter replaces the previous one). Acknowledged addresses go
    to the active sink, which is cleared when the connection closes.
    """

    def __init__(
        self,
        provider: ProviderManager,
        contract: str,
        log: Any = None,
        reconnect_delay: ReconnectDelay = immediate,
    ) -> None:
        """
        Initialize event monitor.

        Args:
            provider: Gateway giving the WebSocket URL and proxy
            contract: ERC20 contract address (lowercase)
            log: Logger, loguru's by default
            reconnect_delay: Delay policy between connection attempts
        """
        self.provider = provider
        self.contract = contract
        self.log = log or logger
        self.reconnect_delay = reconnect_delay
        self.state: SubscriptionState | None = None

    async def run(
        self,
        addresses: AddressSource,
        consumer: Consumer,
        active: ActiveSink | None = None,
        raw: bool = False,
        interval: float = DEFAULT_POLL_INTERVAL,
        subscription_id: int = DEFAULT_SUBSCRIPTION_ID,
    ) -> None:
        """
        Monitor transfers until cancelled.

        Never returns and never raises, except on cancellation.

        Args:
            addresses: Desired addresses, re-read every tick
            consumer: Called with every event (may be a coroutine function)
            active: Sink of acknowledged addresses
            raw: Pass raw log dicts instead of TransferEvent
            interval: Seconds between subscription checks
            subscription_id: JSON-RPC id of the first eth_subscribe
        """
        if not callable(consumer):
            raise ValidationError("Consumer must be callable")
        if (
            isinstance(interval, bool)
            or not isinstance(interval, (int, float))
            or interval <= 0
        ):
            raise ValidationError(f"Interval must be positive, got {interval!r}")
        if isinstance(subscription_id, bool) or not isinstance(subscription_id, int):
            raise ValidationError(
                f"Subscription ID must be an integer, got {subscription_id!r}"
            )
        if active is None:
            active = WatchList()

        failures = 0
        while True:
            state = SubscriptionState(
                subscription_id=subscription_id, raw=raw, interval=interval
            )
            self.state = state
            try:
                await self._session(state, addresses, active, consumer)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.log.error(
                    f"Error at {self.provider.config.host}: "
                    f"{type(e).__name__}: {e}"
                )
            finally:
                streamed = state.phase is ConnectionState.STREAMING
                state.phase = ConnectionState.CLOSED
                try:
                    active.clear()
                except Exception as e:
                    self.log.error(
                        f"Can't clear active addresses: {type(e).__name__}: {e}"
                    )

            self.log.info(
                f"Disconnected from {self.provider.config.host}:"
                f"{self.provider.config.port}"
            )
            failures = 0 if streamed else failures + 1
            state.phase = ConnectionState.RECONNECTING
            subscription_id += 1
            try:
                delay = max(0.0, self.reconnect_delay(failures))
            except Exception as e:
                self.log.error(f"Reconnect delay failed: {type(e).__name__}: {e}")
                delay = 0.0
            # Always yield to the loop, even with no delay
            await asyncio.sleep(delay)

    async def _session(
        self,
        state: SubscriptionState,
        addresses: AddressSource,
        active: ActiveSink,
        consumer: Consumer,
    ) -> None:
        config = self.provider.config
        self.log.debug(f"Connecting to {config.host}:{config.port}...")
        async with connect(self.provider.ws_url, proxy=self.provider.ws_proxy) as ws:
            state.phase = ConnectionState.STREAMING
            self.log.info(
                f"Connected to {config.host}:{config.port} "
                f"(subscription #{state.subscription_id})"
            )
            ticker = asyncio.create_task(
                self._tick(ws, state, addresses, active)
            )
            try:
                async for message in ws:
                    await self._on_message(message, state, active, consumer)
            finally:
                ticker.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await ticker

    async def _tick(
        self,
        ws: ClientConnection,
        state: SubscriptionState,
        addresses: AddressSource,
        active: ActiveSink,
    ) -> None:
        while True:
            try:
                await self._subscribe(ws, state, addresses, active)
            except ConnectionClosed:
                return
            except Exception as e:
                self.log.error(f"Can't subscribe: {type(e).__name__}: {e}")
            await asyncio.sleep(state.interval)

    async def _subscribe(
        self,
        ws: ClientConnection,
        state: SubscriptionState,
        addresses: AddressSource,
        active: ActiveSink,
    ) -> None:
        desired = self._desired(addresses)
        current = {a.lower() for a in active}
        if set(desired) == current:
            return
        if not desired:
            # There is no empty filter; a fresh connection drops the old one
            self.log.debug("No addresses to watch anymore, reconnecting")
            await ws.close()
            return
        state.requested = desired
        await ws.send(
            json.dumps(
                {
                    "jsonrpc": "2.0",
                    "id": state.subscription_id,
                    "method": "eth_subscribe",
                    "params": [
                        "logs",
                        {
                            "address": self.contract,
                            "topics": [
                                TRANSFER_TOPIC,
                                None,
                                [address_topic(a) for a in desired],
                            ],
                        },
                    ],
                }
            )
        )
        self.log.debug(
            f"Requested subscription #{state.subscription_id} "
            f"for {len(desired)} addresses"
        )

    def _desired(self, addresses: AddressSource) -> list[str]:
        source = addresses() if callable(addresses) else addresses
        desired: list[str] = []
        for address in list(source):
            try:
                address = normalize_address(address)
            except ValidationError as e:
                self.log.warning(f"Not watching it: {e}")
                continue
            if address not in desired:
                desired.append(address)
        return desired

    async def _on_message(
        self,
        message: str | bytes,
        state: SubscriptionState,
        active: ActiveSink,
        consumer: Consumer,
    ) -> None:
        try:
            data = json.loads(message)
        except ValueError:
            self.log.debug(f"Ignoring a message that is not JSON: {message!r:.80}")
            return
        if not isinstance(data, dict):
            return
        if data.get("id") == state.subscription_id:
            self._on_ack(data, state, active)
            return
        if data.get("method") != "eth_subscription":
            return
        params = data.get("params")
        result = params.get("result") if isinstance(params, dict) else None
        if isinstance(result, dict):
            await self._deliver(result, state, consumer)

    def _on_ack(
        self,
        data: dict[str, Any],
        state: SubscriptionState,
        active: ActiveSink,
    ) -> None:
        if data.get("error") is not None:
            self.log.warning(
                f"Subscription #{state.subscription_id} rejected: "
                f"{data['error']}"
            )
            return
        requested = set(state.requested)
        current = [a.lower() for a in active]
        if any(a not in requested for a in current):
            active.clear()
            current = []
        for address in state.requested:
            if address not in current:
                active.append(address)
                current.append(address)
        self.log.debug(
            f"Subscribed to {len(current)} addresses "
            f"(subscription #{state.subscription_id}: {data.get('result')})"
        )

    async def _deliver(
        self,
        result: dict[str, Any],
        state: SubscriptionState,
        consumer: Consumer,
    ) -> None:
        if state.raw:
            event: Any = result
            self.log.debug(f"New event arrived from {result.get('address')}")
        else:
            try:
                event = decode_transfer_log(
                    result.get("topics") or [],
                    result.get("data"),
                    result.get("transactionHash"),
                )
            except ProtocolError as e:
                self.log.error(f"Can't decode event: {e}")
                return
            self.log.debug(
                f"Payment of {event.amount} from {event.from_address} "
                f"to {event.to_address}"
            )
        try:
            outcome = consumer(event)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            self.log.error(f"Consumer failed: {type(e).__name__}: {e}")
