"""State kept for one connected chat client."""

from __future__ import annotations

import socket
import threading
from collections import deque


class Client:
    """A connected client: nickname, channels, input buffer and output queue.

    Clients compare and hash by identity, so they can live in sets.
    """

    def __init__(self, fd: int, connection: socket.socket | None = None) -> None:
        self.fd = fd
        self.connection = connection
        self.nickname = f"guest{fd}"
        self.active_channel = ""
        self.joined_channels: set[str] = set()
        self.read_buffer = bytearray()
        self._outbox: deque[str] = deque()
        self._outbox_lock = threading.Lock()

    def __repr__(self) -> str:
        return f"Client(fd={self.fd}, nickname={self.nickname!r})"

    def join_channel(self, channel_name: str) -> None:
        """Record membership of a channel."""
        self.joined_channels.add(channel_name)

    def leave_channel(self, channel_name: str) -> None:
        """Forget a channel; clear it as the active channel if it was."""
        self.joined_channels.discard(channel_name)
        if self.active_channel == channel_name:
            self.active_channel = ""

    def append_to_buffer(self, data: bytes) -> None:
        """Append received bytes to the input buffer."""
        self.read_buffer.extend(data)

    def take_lines(self) -> list[str]:
        """Remove every complete line from the input buffer and return the non-empty ones."""
        *complete, rest = self.read_buffer.split(b"\n")
        self.read_buffer = bytearray(rest)
        return [line.decode("utf-8", errors="replace") for line in complete if line]

    @property
    def pending_messages(self) -> int:
        """Number of messages waiting to be sent."""
        with self._outbox_lock:
            return len(self._outbox)

    def push_message(self, message: str) -> None:
        """Queue a message for sending."""
        with self._outbox_lock:
            self._outbox.append(message)

    def next_message(self) -> str | None:
        """Return the oldest queued message without removing it, or None."""
        with self._outbox_lock:
            return self._outbox[0] if self._outbox else None

    def pop_message(self) -> None:
        """Drop the oldest queued message, if there is one."""
        with self._outbox_lock:
            if self._outbox:
                self._outbox.popleft()

    def close(self) -> None:
        """Shut down and close the underlying connection, if any."""
        if self.connection is None:
            return
        try:
            self.connection.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        try:
            self.connection.close()
        except OSError:
            pass