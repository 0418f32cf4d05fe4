"""Registry of NAT traversal entries, looked up by the domain they serve."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass


@dataclass
class NAT:
    """A NAT traversal entry that forwards a domain to a host behind an agent."""

    id: int
    domain: str
    name: str = ""
    server_id: int = 0
    host: str = ""
    enabled: bool = True


class NATRegistry:
    """Keeps NAT entries indexed by domain and a list of them sorted by id."""

    def __init__(self, nats: Iterable[NAT] = ()) -> None:
        self._lock = threading.RLock()
        self._by_domain: dict[str, NAT] = {}
        self._id_to_domain: dict[int, str] = {}
        self.nats: list[NAT] = []
        self.load(nats)

    def load(self, nats: Iterable[NAT]) -> None:
        """Replace every entry with nats."""
        with self._lock:
            self.nats = list(nats)
            self._by_domain = {nat.domain: nat for nat in self.nats}
            self._id_to_domain = {nat.id: nat.domain for nat in self.nats}

    def update(self, nat: NAT) -> None:
        """Add nat or replace the entry with the same id, dropping its old domain."""
        with self._lock:
            old_domain = self._id_to_domain.get(nat.id)
            if old_domain is not None and old_domain != nat.domain:
                self._by_domain.pop(old_domain, None)
            self._by_domain[nat.domain] = nat
            self._id_to_domain[nat.id] = nat.domain

    def delete(self, ids: Iterable[int]) -> None:
        """Remove the entries with the given ids; unknown ids are ignored."""
        with self._lock:
            for nat_id in ids:
                domain = self._id_to_domain.pop(nat_id, None)
                if domain is not None:
                    self._by_domain.pop(domain, None)

    def refresh_list(self) -> list[NAT]:
        """Rebuild and return the list of entries sorted by id."""
        with self._lock:
            self.nats = sorted(self._by_domain.values(), key=lambda nat: nat.id)
            return list(self.nats)

    def get_by_domain(self, domain: str) -> NAT | None:
        with self._lock:
            return self._by_domain.get(domain)