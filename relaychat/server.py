"""The chat server: accepts TCP connections and serves each client on a worker thread."""

from __future__ import annotations

import logging
import os
import re
import socket
import threading
import time
from dataclasses import dataclass

from .channel_manager import ChannelManager
from .client import Client
from .client_manager import ClientManager
from .config import read_config
from .message_manager import MessageManager
from .thread_pool import ThreadPool

log = logging.getLogger(__name__)

MIN_PORT = 1024
MAX_PORT = 65535
MIN_USERS = 1
MAX_USERS = 10000
MIN_CHANNELS = 0
MAX_CHANNELS = 1000
DEFAULT_PORT = 4040
DEFAULT_MAX_USERS = 2000
DEFAULT_MAX_CHANNELS = 1000
DEFAULT_THREAD_POOL_SIZE = 10
DEFAULT_SERVER_NAME = "Test-Server"
DEFAULT_MOTD = "Welcome to test Server!"
RECV_BUFFER_SIZE = 4096
MAX_CLIENT_BUFFER_SIZE = 8192

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1

_MISSING_PARAMETER = "Missing required configuration parameter"
_INVALID_VALUE = "Invalid configuration parameter value"


class ServerError(RuntimeError):
    """Raised for configuration problems of the server."""


@dataclass(frozen=True)
class ServerStats:
    """A snapshot of the server's counters."""

    active_connections: int
    total_connections: int
    bytes_received: int
    bytes_sent: int
    active_threads: int
    pending_tasks: int


def _parse_int(text: str) -> int:
    """Read the leading integer of a value, ignoring anything after it."""
    match = _INT_PREFIX.match(text)
    if match is None:
        raise ServerError(_INVALID_VALUE)
    value = int(match.group(1))
    if not _INT_MIN <= value <= _INT_MAX:
        raise ServerError(_MISSING_PARAMETER)
    return value


def _require(config: dict[str, str], key: str) -> str:
    try:
        return config[key]
    except KeyError:
        raise ServerError(_MISSING_PARAMETER) from None


class Server:
    """A line-based chat server with channels and private messages."""

    def __init__(self, config_path: str | os.PathLike[str] | None = None) -> None:
        if config_path is None:
            self.port = DEFAULT_PORT
            self.max_users = DEFAULT_MAX_USERS
            self.max_channels = DEFAULT_MAX_CHANNELS
            self.server_name = DEFAULT_SERVER_NAME
            self.motd = DEFAULT_MOTD
            self.config = {
                "port": str(DEFAULT_PORT),
                "maxchannels": str(DEFAULT_MAX_CHANNELS),
                "maxusers": str(DEFAULT_MAX_USERS),
                "servername": DEFAULT_SERVER_NAME,
                "motd": DEFAULT_MOTD,
            }
        else:
            self._load_config(config_path)

        self.channel_manager = ChannelManager(self.max_channels)
        self.client_manager = ClientManager(self.max_users)
        self.message_manager = MessageManager(self.client_manager, self.channel_manager)
        self.message_manager.motd = self.motd
        self.client_manager.on_client_removed = self.channel_manager.remove_client_from_all_channels

        self._listener: socket.socket | None = None
        self._running = threading.Event()
        self._state_lock = threading.Lock()
        self._pool = ThreadPool(DEFAULT_THREAD_POOL_SIZE)

    def __enter__(self) -> Server:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _load_config(self, config_path: str | os.PathLike[str]) -> None:
        try:
            entries = read_config(config_path)
        except (OSError, ValueError):
            raise ServerError(f"Failed to read configuration file: {config_path}") from None
        self.config = dict(entries)
        self.port = _parse_int(_require(self.config, "port"))
        self.max_users = _parse_int(_require(self.config, "maxusers"))
        self.max_channels = _parse_int(_require(self.config, "maxchannels"))
        self.server_name = _require(self.config, "servername")
        self.motd = _require(self.config, "motd")
        self._validate_config()

    def _validate_config(self) -> None:
        if not MIN_PORT <= self.port <= MAX_PORT:
            raise ServerError("Invalid port number.")
        if not MIN_USERS <= self.max_users <= MAX_USERS:
            raise ServerError("Invalid max users value")
        if not MIN_CHANNELS <= self.max_channels <= MAX_CHANNELS:
            raise ServerError("Invalid max channels value")
        if not self.server_name:
            raise ServerError("Server name cannot be empty")

    @property
    def running(self) -> bool:
        """Whether the accept loop is running."""
        return self._running.is_set()

    def _open_listener(self) -> socket.socket:
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            listener.setblocking(False)
            listener.bind(("", self.port))
            listener.listen(socket.SOMAXCONN)
        except OSError:
            listener.close()
            raise
        return listener

    def start(self) -> None:
        """Listen on the configured port and serve clients until stopped."""
        try:
            self._validate_config()
            self._listener = self._open_listener()
            self._running.set()
            log.info("%s listening on port %d", self.server_name, self.port)
            while self._running.is_set():
                if not self.client_manager.can_accept_new_connection():
                    time.sleep(0.1)
                    continue
                listener = self._listener
                if listener is None:
                    break
                try:
                    connection, _ = listener.accept()
                except OSError:
                    time.sleep(0.02)
                    continue
                self._accept(connection)
        except Exception:
            self.stop()
            raise

    def _accept(self, connection: socket.socket) -> None:
        connection.setblocking(False)
        client = Client(connection.fileno(), connection)
        self.client_manager.add_client(client)
        self.client_manager.increment_total_connections()
        if not self._pool.enqueue(lambda: self._handle_client(client)):
            self.client_manager.remove_client(client)
            client.close()

    def stop(self) -> None:
        """Stop accepting, close the listening socket and drop every client."""
        with self._state_lock:
            if not self._running.is_set():
                return
            self._running.clear()
            listener, self._listener = self._listener, None
        if listener is not None:
            try:
                listener.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            listener.close()
        for client in self.client_manager.all_clients():
            self.client_manager.remove_client(client)

    def close(self) -> None:
        """Stop the server and wait for the worker threads to finish."""
        self.stop()
        self._pool.shutdown()

    def _handle_client(self, client: Client) -> None:
        try:
            self.message_manager.send_server_message(client, f"Welcome to {self.server_name}!")
            self.message_manager.send_server_message(
                client, "Type /help for a list of available commands."
            )
            connection = client.connection
            while self._running.is_set() and self.client_manager.client_exists(client):
                try:
                    data = connection.recv(RECV_BUFFER_SIZE)
                except BlockingIOError:
                    data = None
                except OSError:
                    break
                if data is not None:
                    if not data:
                        break
                    client.append_to_buffer(data)
                    if len(client.read_buffer) > MAX_CLIENT_BUFFER_SIZE:
                        break
                    for line in client.take_lines():
                        self.message_manager.handle_message(client, line)
                self._process_output(client)
                time.sleep(0.01)
        except Exception:
            log.exception("Error while serving %r", client)
        if not self.client_manager.remove_client(client):
            client.close()

    def _process_output(self, client: Client) -> None:
        connection = client.connection
        while (message := client.next_message()) is not None:
            try:
                sent = connection.send(message.encode("utf-8"))
            except BlockingIOError:
                break
            except OSError:
                self.client_manager.remove_client(client)
                break
            if sent <= 0:
                break
            client.pop_message()

    def stats(self) -> ServerStats:
        """Current connection, traffic and worker counters."""
        return ServerStats(
            active_connections=self.client_manager.client_count,
            total_connections=self.client_manager.total_connections,
            bytes_received=self.message_manager.received_bytes,
            bytes_sent=self.message_manager.sent_bytes,
            active_threads=self._pool.active_thread_count,
            pending_tasks=self._pool.task_count,
        )