"""A named chat channel and its members."""

from __future__ import annotations

import logging
import threading

from .client import Client

log = logging.getLogger(__name__)


class Channel:
    """A channel: a name and a thread-safe set of member clients."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._members: set[Client] = set()
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"Channel({self.name!r})"

    @property
    def member_count(self) -> int:
        """Number of clients in the channel."""
        with self._lock:
            return len(self._members)

    def member_nicknames(self) -> list[str]:
        """Nicknames of all members."""
        with self._lock:
            return [member.nickname for member in self._members]

    def add_client(self, client: Client) -> None:
        """Add a client to the channel."""
        with self._lock:
            self._members.add(client)
        log.info("Client %s joined channel %s", client.nickname, self.name)

    def remove_client(self, client: Client) -> None:
        """Remove a client from the channel, if present."""
        with self._lock:
            self._members.discard(client)
        log.info("Client %s left channel %s", client.nickname, self.name)

    def broadcast(self, message: str) -> None:
        """Queue a message, newline-terminated, for every member."""
        line = message + "\n"
        with self._lock:
            for member in self._members:
                member.push_message(line)