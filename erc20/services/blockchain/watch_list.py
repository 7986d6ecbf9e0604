"""
Watch list of addresses.

A thread-safe ordered set of lowercase addresses. It serves both as the
address source of EventMonitor (other threads add and remove addresses)
and as the sink of addresses the provider has acknowledged.
"""

import threading
from collections.abc import Iterable, Iterator

from erc20.utils.validation import normalize_address


class WatchList:
    """Ordered, de-duplicated, lowercase addresses."""

    def __init__(self, addresses: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        self._items: list[str] = []
        for address in addresses:
            self.append(address)

    def append(self, address: str) -> None:
        """Add an address; already present ones are ignored."""
        address = normalize_address(address)
        with self._lock:
            if address not in self._items:
                self._items.append(address)

    def remove(self, address: str) -> None:
        """Drop an address if present."""
        address = normalize_address(address)
        with self._lock:
            if address in self._items:
                self._items.remove(address)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def to_list(self) -> list[str]:
        with self._lock:
            return list(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self.to_list())

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, address: object) -> bool:
        if not isinstance(address, str):
            return False
        with self._lock:
            return address.lower() in self._items

    def __repr__(self) -> str:
        return f"WatchList({self.to_list()!r})"
