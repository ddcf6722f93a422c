"""Dispatch of chat lines and slash commands sent by clients."""

from __future__ import annotations

import threading
from collections.abc import Callable

from .channel_manager import ChannelManager
from .client import Client
from .client_manager import ClientManager

CommandHandler = Callable[[Client, list[str]], object]

HELP_LINES = (
    "Available commands:",
    "/nick <name>              - Change your nickname",
    "/join <#channel>          - Join a channel",
    "/part <#channel>          - Leave a channel",
    "/msg <#channel|user> <msg> - Send a message to a channel or user",
    "/list                     - List all active channels",
    "/who [#channel]           - List users on server or in a channel",
    "/motd                     - Show the Message of the Day",
    "/quit [message]           - Disconnect from the server",
    "/help                     - Show this help message",
)


def _as_channel_name(name: str) -> str:
    return name if name.startswith("#") else "#" + name


class MessageManager:
    """Routes client input to channels, users and command handlers."""

    def __init__(self, client_manager: ClientManager, channel_manager: ChannelManager) -> None:
        self.client_manager = client_manager
        self.channel_manager = channel_manager
        self.motd = ""
        self._handlers: dict[str, CommandHandler] = {}
        self._stats_lock = threading.Lock()
        self._processed_messages = 0
        self._processed_commands = 0
        self._sent_messages = 0
        self._received_bytes = 0
        self._sent_bytes = 0
        for name, handler in (
            ("nick", self._cmd_nick),
            ("join", self._cmd_join),
            ("part", self._cmd_part),
            ("quit", self._cmd_quit),
            ("list", self._cmd_list),
            ("who", self._cmd_who),
            ("msg", self._cmd_msg),
            ("motd", self._cmd_motd),
            ("help", self._cmd_help),
        ):
            self.register_command(name, handler)

    @property
    def processed_messages(self) -> int:
        with self._stats_lock:
            return self._processed_messages

    @property
    def processed_commands(self) -> int:
        with self._stats_lock:
            return self._processed_commands

    @property
    def sent_messages(self) -> int:
        with self._stats_lock:
            return self._sent_messages

    @property
    def received_bytes(self) -> int:
        with self._stats_lock:
            return self._received_bytes

    @property
    def sent_bytes(self) -> int:
        with self._stats_lock:
            return self._sent_bytes

    def _count_sent(self, message: str) -> None:
        with self._stats_lock:
            self._sent_messages += 1
            self._sent_bytes += len(message.encode("utf-8"))

    def handle_message(self, sender: Client | None, message: str) -> None:
        """Handle one line from a client: a command or a message to its active channel."""
        if sender is None:
            return
        with self._stats_lock:
            self._processed_messages += 1
            self._received_bytes += len(message.encode("utf-8"))
        text = message[:-1] if message.endswith("\r") else message
        if not text:
            return
        if text.startswith("/"):
            self.handle_command(sender, text)
        elif sender.active_channel:
            self.send_channel_message(sender, sender.active_channel, text)
        else:
            self.send_server_message(
                sender,
                "You are not in any channel. Join one with /join <#channel> "
                "or send a private message with /msg <user> <message>.",
            )

    def handle_command(self, sender: Client | None, command_line: str) -> None:
        """Run the handler registered for a slash command."""
        if sender is None or not command_line:
            return
        with self._stats_lock:
            self._processed_commands += 1
        args = command_line.split()
        if not args:
            return
        command, *rest = args
        command = command[1:]
        handler = self._handlers.get(command)
        if handler is None:
            self.send_server_message(sender, f"Unknown command: {command}")
        else:
            handler(sender, rest)

    def broadcast_message(self, sender: Client | None, message: str) -> None:
        """Send a message from a client to every other client."""
        if sender is None:
            return
        self._count_sent(message)
        self.client_manager.broadcast_message(message, sender)

    def send_private_message(self, sender: Client | None, recipient: str, message: str) -> None:
        """Send a message to one user and a copy back to the sender."""
        if sender is None:
            return
        target = self.client_manager.get_client_by_nickname(recipient)
        if target is None:
            self.send_server_message(sender, f"User {recipient} not found.")
            return
        self._count_sent(message)
        self.client_manager.send_message_to_client(
            target, f"*Private from {sender.nickname}: {message}"
        )
        self.client_manager.send_message_to_client(sender, f"*Private to {recipient}: {message}")

    def send_channel_message(self, sender: Client | None, channel_name: str, message: str) -> None:
        """Send a message to a channel the sender belongs to."""
        if sender is None:
            return
        if not self.channel_manager.channel_exists(channel_name):
            self.send_server_message(sender, f"Channel {channel_name} does not exist.")
            return
        if channel_name not in self.channel_manager.client_channels(sender):
            self.send_server_message(sender, f"You are not in channel {channel_name}")
            return
        self._count_sent(message)
        self.channel_manager.broadcast_to_channel(
            channel_name, f"<{sender.nickname}@{channel_name}> {message}"
        )

    def send_server_message(self, client: Client | None, message: str) -> None:
        """Send a '*** '-prefixed notice to one client."""
        if client is None:
            return
        self._count_sent(message)
        self.client_manager.send_message_to_client(client, f"*** {message}")

    def register_command(self, name: str, handler: CommandHandler) -> None:
        """Register or replace the handler for '/name'."""
        self._handlers[name] = handler

    def unregister_command(self, name: str) -> None:
        self._handlers.pop(name, None)

    def _cmd_nick(self, client: Client, args: list[str]) -> None:
        if not args:
            self.send_server_message(client, "Usage: /nick <new_nick>")
            return
        new_nickname = args[0]
        owner = self.client_manager.get_client_by_nickname(new_nickname)
        if owner is not None and owner is not client:
            self.send_server_message(client, f"Nickname '{new_nickname}' already in use.")
            return
        old_nickname = client.nickname
        if not self.client_manager.update_client_nickname(client, new_nickname):
            self.send_server_message(
                client, f"Nickname '{new_nickname}' is not valid or already in use."
            )
            return
        self.send_server_message(client, f"Nickname switched to '{new_nickname}'")
        self.client_manager.broadcast_message(
            f"User '{old_nickname}' is now known as '{new_nickname}'"
        )

    def _cmd_join(self, client: Client, args: list[str]) -> None:
        if not args:
            self.send_server_message(client, "Usage: /join <#channel>")
            return
        channel_name = _as_channel_name(args[0])
        if self.channel_manager.join_channel(client, channel_name):
            client.active_channel = channel_name
            self.send_server_message(client, f"You joined {channel_name} (now active).")
            self.channel_manager.broadcast_to_channel(
                channel_name, f"*** {client.nickname} joined the channel."
            )
        else:
            self.send_server_message(client, f"Could not join {channel_name}")

    def _cmd_part(self, client: Client, args: list[str]) -> None:
        if not args:
            self.send_server_message(client, "Usage: /part <#channel>")
            return
        channel_name = _as_channel_name(args[0])
        if channel_name not in self.channel_manager.client_channels(client):
            self.send_server_message(client, f"You are not in channel {channel_name}")
            return
        self.channel_manager.broadcast_to_channel(
            channel_name, f"*** {client.nickname} left the channel."
        )
        if self.channel_manager.leave_channel(client, channel_name):
            self.send_server_message(client, f"You have left {channel_name}")
        else:
            self.send_server_message(client, f"Error leaving channel {channel_name}")

    def _cmd_quit(self, client: Client, args: list[str]) -> None:
        quit_message = " ".join(args) if args else "Client quit."
        notice = f"*** {client.nickname} left the server: {quit_message}"
        for channel_name in self.channel_manager.client_channels(client):
            self.channel_manager.broadcast_to_channel(channel_name, notice)
        self.client_manager.remove_client(client)

    def _cmd_list(self, client: Client, args: list[str]) -> None:
        channels = self.channel_manager.channel_list()
        if not channels:
            self.send_server_message(client, "No active channels.")
            return
        self.send_server_message(client, "Active channels:")
        for channel_name in channels:
            count = self.channel_manager.channel_member_count(channel_name)
            self.send_server_message(client, f"- {channel_name} ({count} members)")

    def _cmd_who(self, client: Client, args: list[str]) -> None:
        if not args:
            clients = self.client_manager.all_clients()
            if not clients:
                self.send_server_message(client, "No users online.")
                return
            self.send_server_message(client, f"Online users ({len(clients)}):")
            for other in clients:
                channels = self.channel_manager.client_channels(other)
                where = " in: " + ", ".join(channels) if channels else ""
                self.send_server_message(client, f"- {other.nickname}{where}")
            return
        channel_name = _as_channel_name(args[0])
        channel = self.channel_manager.get_channel(channel_name)
        if channel is None:
            self.send_server_message(client, f"Channel {channel_name} does not exist.")
            return
        nicknames = channel.member_nicknames()
        self.send_server_message(client, f"Users in {channel_name} ({len(nicknames)}):")
        for nickname in nicknames:
            self.send_server_message(client, f"- {nickname}")

    def _cmd_msg(self, client: Client, args: list[str]) -> None:
        if len(args) < 2:
            self.send_server_message(client, "Usage: /msg <#channel_or_user> <message>")
            return
        recipient, *words = args
        message = " ".join(words)
        if recipient.startswith("#"):
            self.send_channel_message(client, recipient, message)
        else:
            self.send_private_message(client, recipient, message)

    def _cmd_motd(self, client: Client, args: list[str]) -> None:
        if not self.motd:
            self.send_server_message(client, "No MOTD available.")
        else:
            self.send_server_message(client, "Message of the Day:")
            self.send_server_message(client, self.motd)

    def _cmd_help(self, client: Client, args: list[str]) -> None:
        for line in HELP_LINES:
            self.send_server_message(client, line)