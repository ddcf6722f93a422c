from unittest.mock import Mock

import pytest

from relaychat.client import Client
from relaychat.client_manager import ClientManager, is_valid_nickname


def drain(client):
    out = []
    while (message := client.next_message()) is not None:
        out.append(message)
        client.pop_message()
    return out


@pytest.mark.parametrize(
    "nickname, expected",
    [
        ("alice_1", True),
        ("a" * 32, True),
        ("", False),
        ("a" * 33, False),
        ("bad-name", False),
        ("bad name", False),
        ("\u00fcber", False),
    ],
)
def test_is_valid_nickname(nickname, expected):
    assert is_valid_nickname(nickname) is expected


def test_add_and_lookup():
    manager = ClientManager(5)
    client = Client(7)
    assert manager.add_client(client) is True
    assert manager.client_exists(client)
    assert manager.client_exists_by_nickname("guest7")
    assert manager.get_client_by_nickname("guest7") is client
    assert manager.client_count == 1


def test_add_same_client_twice_fails():
    manager = ClientManager(5)
    client = Client(1)
    manager.add_client(client)
    assert manager.add_client(client) is False
    assert manager.client_count == 1


def test_add_none_fails():
    manager = ClientManager(5)
    assert manager.add_client(None) is False
    assert manager.remove_client(None) is False
    assert manager.client_exists(None) is False


def test_limit_is_enforced():
    manager = ClientManager(2)
    assert manager.add_client(Client(1))
    assert manager.add_client(Client(2))
    assert manager.can_accept_new_connection() is False
    assert manager.add_client(Client(3)) is False
    assert manager.client_count == 2


def test_remove_closes_and_notifies():
    manager = ClientManager(5)
    connection = Mock()
    client = Client(3, connection=connection)
    removed = []
    manager.on_client_removed = removed.append
    manager.add_client(client)
    assert manager.remove_client(client) is True
    assert removed == [client]
    assert connection.close.called
    assert not manager.client_exists(client)
    assert manager.get_client_by_nickname("guest3") is None
    assert manager.remove_client(client) is False


def test_added_callback():
    manager = ClientManager(5)
    added = []
    manager.on_client_added = added.append
    client = Client(4)
    manager.add_client(client)
    assert added == [client]


def test_update_nickname():
    manager = ClientManager(5)
    client = Client(1)
    manager.add_client(client)
    assert manager.update_client_nickname(client, "alice") is True
    assert client.nickname == "alice"
    assert manager.get_client_by_nickname("alice") is client
    assert manager.client_exists_by_nickname("guest1") is False


def test_update_nickname_rejects_taken_and_invalid():
    manager = ClientManager(5)
    first, second = Client(1), Client(2)
    manager.add_client(first)
    manager.add_client(second)
    assert manager.update_client_nickname(second, "guest1") is False
    assert manager.update_client_nickname(second, "no way") is False
    assert second.nickname == "guest2"


def test_broadcast_skips_sender():
    manager = ClientManager(5)
    sender, other = Client(1), Client(2)
    manager.add_client(sender)
    manager.add_client(other)
    manager.broadcast_message("hi", sender)
    assert drain(other) == ["<guest1> hi\n"]
    assert drain(sender) == []


def test_broadcast_without_sender_reaches_everyone():
    manager = ClientManager(5)
    clients = [Client(n) for n in range(3)]
    for client in clients:
        manager.add_client(client)
    manager.broadcast_message("hi")
    assert [drain(client) for client in clients] == [["hi\n"]] * 3


def test_send_message_adds_newline_once():
    manager = ClientManager(5)
    client = Client(1)
    manager.send_message_to_client(client, "one")
    manager.send_message_to_client(client, "two\n")
    assert drain(client) == ["one\n", "two\n"]


def test_total_connections_and_all_clients():
    manager = ClientManager(5)
    clients = {Client(1), Client(2)}
    for client in clients:
        manager.add_client(client)
        manager.increment_total_connections()
    assert manager.total_connections == 2
    assert set(manager.all_clients()) == clients