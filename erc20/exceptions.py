"""
Wallet exceptions.

Every error raised by the package derives from WalletError.
"""


class WalletError(Exception):
    """Base class for all wallet errors."""


class ConfigurationError(WalletError, ValueError):
    """Invalid wallet configuration (contract, host, port, chain, paths...)."""


class ValidationError(WalletError, ValueError):
    """Invalid argument to a wallet call, detected before any network access."""


class TransportError(WalletError):
    """
    RPC or WebSocket failure reported by the transport or the node.

    Attributes:
        code: JSON-RPC error code, if the node returned one
    """

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class ProtocolError(WalletError):
    """Malformed or unexpected RPC response."""


class BusinessError(WalletError):
    """Domain-level failure, e.g. no Transfer event in a transaction."""
