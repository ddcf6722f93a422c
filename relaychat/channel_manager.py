"""Registry of channels and the clients that belong to them."""

from __future__ import annotations

import threading

from .channel import Channel
from .client import Client

MAX_CHANNEL_NAME_LENGTH = 50


def is_valid_channel_name(channel_name: str) -> bool:
    """Whether a name starts with '#', is at most 50 characters and holds only visible ASCII."""
    if not channel_name or len(channel_name) > MAX_CHANNEL_NAME_LENGTH:
        return False
    if " " in channel_name or "," in channel_name:
        return False
    if channel_name[0] != "#":
        return False
    return all("!" <= char <= "~" for char in channel_name[1:])


class ChannelManager:
    """Creates, looks up and removes channels, up to a maximum count."""

    def __init__(self, max_channels: int = 1000) -> None:
        self.max_channels = max_channels
        self._channels: dict[str, Channel] = {}
        self._lock = threading.Lock()

    def _create_unlocked(self, channel_name: str) -> bool:
        if (
            not is_valid_channel_name(channel_name)
            or channel_name in self._channels
            or len(self._channels) >= self.max_channels
        ):
            return False
        self._channels[channel_name] = Channel(channel_name)
        return True

    def create_channel(self, channel_name: str) -> bool:
        """Create a channel; False if the name is invalid, taken, or the limit is reached."""
        with self._lock:
            return self._create_unlocked(channel_name)

    def remove_channel(self, channel_name: str) -> bool:
        """Remove a channel; False if it does not exist."""
        with self._lock:
            return self._channels.pop(channel_name, None) is not None

    def channel_exists(self, channel_name: str) -> bool:
        with self._lock:
            return channel_name in self._channels

    def get_channel(self, channel_name: str) -> Channel | None:
        """The channel of that name, or None."""
        with self._lock:
            return self._channels.get(channel_name)

    def join_channel(self, client: Client | None, channel_name: str) -> bool:
        """Add a client to a channel, creating the channel if needed."""
        if client is None or not is_valid_channel_name(channel_name):
            return False
        with self._lock:
            if channel_name not in self._channels and not self._create_unlocked(channel_name):
                return False
            self._channels[channel_name].add_client(client)
            client.join_channel(channel_name)
            return True

    def leave_channel(self, client: Client | None, channel_name: str) -> bool:
        """Remove a client from a channel; False if the channel does not exist."""
        if client is None:
            return False
        with self._lock:
            channel = self._channels.get(channel_name)
            if channel is None:
                return False
            channel.remove_client(client)
            client.leave_channel(channel_name)
            return True

    def remove_client_from_all_channels(self, client: Client | None) -> None:
        """Take a client out of every channel it has joined."""
        if client is None:
            return
        for channel_name in list(client.joined_channels):
            self.leave_channel(client, channel_name)

    def broadcast_to_channel(self, channel_name: str, message: str) -> None:
        """Send a message to every member of one channel, if it exists."""
        with self._lock:
            channel = self._channels.get(channel_name)
            if channel is not None:
                channel.broadcast(message)

    def broadcast_to_all_channels(self, message: str) -> None:
        """Send a message to the members of every channel."""
        with self._lock:
            for channel in self._channels.values():
                channel.broadcast(message)

    def channel_list(self) -> list[str]:
        """Names of all channels, sorted."""
        with self._lock:
            return sorted(self._channels)

    def client_channels(self, client: Client | None) -> list[str]:
        """Names of the channels a client has joined, sorted."""
        if client is None:
            return []
        return sorted(client.joined_channels)

    @property
    def channel_count(self) -> int:
        with self._lock:
            return len(self._channels)

    def channel_member_count(self, channel_name: str) -> int:
        """Number of members of a channel; 0 if it does not exist."""
        with self._lock:
            channel = self._channels.get(channel_name)
            return channel.member_count if channel is not None else 0