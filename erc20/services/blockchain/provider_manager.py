"""
Provider Manager for Web3.

Builds HTTP and WebSocket endpoint URLs from the wallet config, wires the
optional proxy and forwards JSON-RPC calls to web3's HTTPProvider. There is
no retry logic here: failures propagate to the caller.
"""

import logging
from typing import Any

import requests
from web3 import HTTPProvider

from erc20.config import WalletConfig
from erc20.exceptions import ProtocolError, TransportError

from .constants import LATEST

# Transport libraries log every request; the wallet logs on its own
QUIET_LOGGERS = ("web3", "urllib3", "websockets")


class ProviderManager:
    """
    JSON-RPC gateway of one wallet.

    Handles:
    - http(s)/ws(s) URL selection by the TLS flag
    - Proxy wiring for both HTTP and WebSocket
    - One call per RPC method the wallet uses
    """

    def __init__(self, config: WalletConfig) -> None:
        """
        Initialize provider manager.

        Args:
            config: Wallet configuration
        """
        self.config = config

        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        request_kwargs: dict[str, Any] = {}
        if config.proxy:
            request_kwargs["proxies"] = {
                "http": config.proxy,
                "https": config.proxy,
            }
        self._provider = HTTPProvider(
            self.http_url,
            request_kwargs=request_kwargs,
            exception_retry_configuration=None,
        )

    @property
    def http_url(self) -> str:
        scheme = "https" if self.config.ssl else "http"
        return (
            f"{scheme}://{self.config.host}:{self.config.port}"
            f"{self.config.http_path}"
        )

    @property
    def ws_url(self) -> str:
        scheme = "wss" if self.config.ssl else "ws"
        return (
            f"{scheme}://{self.config.host}:{self.config.port}"
            f"{self.config.ws_path}"
        )

    @property
    def ws_proxy(self) -> str | None:
        """Proxy for the websockets client (None disables env lookup)."""
        return self.config.proxy

    def request(self, method: str, params: list[Any]) -> Any:
        """
        Send one JSON-RPC request and return its result.

        Args:
            method: RPC method name, e.g. "eth_call"
            params: Positional params

        Returns:
            The "result" member of the response

        Raises:
            TransportError: Network failure or JSON-RPC error
            ProtocolError: Response without a result
        """
        try:
            response = self._provider.make_request(method, params)
        except requests.exceptions.RequestException as e:
            raise TransportError(
                f"{method} failed at {self.config.host}: {e}"
            ) from e
        except ValueError as e:
            raise ProtocolError(
                f"{method} returned a malformed response: {e}"
            ) from e

        if not isinstance(response, dict):
            raise ProtocolError(
                f"{method} returned {type(response).__name__}, not an object"
            )
        error = response.get("error")
        if error:
            if isinstance(error, dict):
                raise TransportError(
                    f"{method} failed: {error.get('message', error)}",
                    code=error.get("code"),
                )
            raise TransportError(f"{method} failed: {error}")
        if "result" not in response:
            raise ProtocolError(f"{method} returned no result")
        return response["result"]

    # === RPC methods ===

    def eth_call(self, tx: dict[str, Any], block: str = LATEST) -> str:
        return self.request("eth_call", [tx, block])

    def eth_estimate_gas(self, tx: dict[str, Any], block: str = LATEST) -> str:
        return self.request("eth_estimateGas", [tx, block])

    def eth_get_balance(self, address: str, block: str = LATEST) -> str:
        return self.request("eth_getBalance", [address, block])

    def eth_get_transaction_count(self, address: str, block: str) -> str:
        return self.request("eth_getTransactionCount", [address, block])

    def eth_send_raw_transaction(self, raw: str) -> str:
        return self.request("eth_sendRawTransaction", [raw])

    def eth_get_block_by_number(
        self, block: str = LATEST, full: bool = False
    ) -> dict[str, Any] | None:
        return self.request("eth_getBlockByNumber", [block, full])

    def eth_get_transaction_receipt(self, tx_hash: str) -> dict[str, Any] | None:
        return self.request("eth_getTransactionReceipt", [tx_hash])
