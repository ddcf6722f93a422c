"""Registry of connected clients, indexed by identity and by nickname."""

from __future__ import annotations

import threading
from collections.abc import Callable

from .client import Client

MAX_NICKNAME_LENGTH = 32

ClientCallback = Callable[[Client], object]


def is_valid_nickname(nickname: str) -> bool:
    """Whether a nickname is 1 to 32 ASCII letters, digits or underscores."""
    if not nickname or len(nickname) > MAX_NICKNAME_LENGTH:
        return False
    return all(char.isascii() and (char.isalnum() or char == "_") for char in nickname)


class ClientManager:
    """Tracks connected clients up to a maximum count."""

    def __init__(self, max_clients: int) -> None:
        self.max_clients = max_clients
        self.on_client_added: ClientCallback | None = None
        self.on_client_removed: ClientCallback | None = None
        self._clients: set[Client] = set()
        self._by_nickname: dict[str, Client] = {}
        self._total_connections = 0
        self._lock = threading.Lock()

    def add_client(self, client: Client | None) -> bool:
        """Register a client; False if the limit is reached or it is already known."""
        if client is None:
            return False
        with self._lock:
            if len(self._clients) >= self.max_clients or client in self._clients:
                return False
            self._clients.add(client)
            self._by_nickname[client.nickname] = client
        if self.on_client_added is not None:
            self.on_client_added(client)
        return True

    def remove_client(self, client: Client | None) -> bool:
        """Close and forget a client; False if it was not registered."""
        if client is None:
            return False
        with self._lock:
            if client not in self._clients:
                return False
            client.close()
            if self._by_nickname.get(client.nickname) is client:
                del self._by_nickname[client.nickname]
            self._clients.discard(client)
        if self.on_client_removed is not None:
            self.on_client_removed(client)
        return True

    def client_exists(self, client: Client | None) -> bool:
        if client is None:
            return False
        with self._lock:
            return client in self._clients

    def client_exists_by_nickname(self, nickname: str) -> bool:
        with self._lock:
            return nickname in self._by_nickname

    def update_client_nickname(self, client: Client | None, new_nickname: str) -> bool:
        """Rename a client; False if the name is invalid or already taken."""
        if client is None or not is_valid_nickname(new_nickname):
            return False
        with self._lock:
            if new_nickname in self._by_nickname:
                return False
            self._by_nickname.pop(client.nickname, None)
            client.nickname = new_nickname
            self._by_nickname[new_nickname] = client
            return True

    def get_client_by_nickname(self, nickname: str) -> Client | None:
        """The client using a nickname, or None."""
        with self._lock:
            return self._by_nickname.get(nickname)

    def all_clients(self) -> list[Client]:
        """A snapshot of every registered client."""
        with self._lock:
            return list(self._clients)

    def broadcast_message(self, message: str, sender: Client | None = None) -> None:
        """Queue a line for every client except the sender, prefixed with its nickname."""
        with self._lock:
            text = f"<{sender.nickname}> {message}" if sender is not None else message
            line = text + "\n"
            for client in self._clients:
                if client is not sender:
                    client.push_message(line)

    def send_message_to_client(self, client: Client | None, message: str) -> None:
        """Queue a message for one client, adding a newline if it lacks one."""
        if client is None:
            return
        client.push_message(message if message.endswith("\n") else message + "\n")

    @property
    def client_count(self) -> int:
        with self._lock:
            return len(self._clients)

    @property
    def total_connections(self) -> int:
        """Number of connections accepted since start."""
        with self._lock:
            return self._total_connections

    def increment_total_connections(self) -> None:
        with self._lock:
            self._total_connections += 1

    def can_accept_new_connection(self) -> bool:
        with self._lock:
            return len(self._clients) < self.max_clients