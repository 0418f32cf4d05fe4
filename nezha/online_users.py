"""Tracking of users connected to the dashboard."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class OnlineUser:
    """A connected user; conn, when set, is closed if the user's address is blocked."""

    user_id: int
    ip: str
    connected_at: datetime
    conn: Any = None


class OnlineUserRegistry:
    """Connections keyed by connection id."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: dict[str, OnlineUser] = {}

    def add(self, conn_id: str, user: OnlineUser) -> None:
        with self._lock:
            self._users[conn_id] = user

    def remove(self, conn_id: str) -> None:
        with self._lock:
            self._users.pop(conn_id, None)

    def block_by_ips(self, ip_list: Iterable[str], block: Callable[[str], Any]) -> None:
        """Block each address with block(ip) and close the connections coming from it.

        An exception from block stops the run and propagates.
        """
        with self._lock:
            for ip in ip_list:
                block(ip)
                for user in self._users.values():
                    if user.ip == ip and user.conn is not None:
                        user.conn.close()

    def get(self, limit: int, offset: int) -> list[OnlineUser]:
        """Return up to limit users, oldest connection first, skipping offset of them."""
        with self._lock:
            users = sorted(self._users.values(), key=lambda user: user.connected_at)
        if offset > len(users):
            return []
        return users[offset : offset + limit]

    def count(self) -> int:
        with self._lock:
            return len(self._users)