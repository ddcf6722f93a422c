import socket

from relaychat.client import Client


def test_default_nickname_uses_descriptor():
    assert Client(7).nickname == "guest7"


def test_join_and_leave_channel():
    client = Client(1)
    client.join_channel("#a")
    client.join_channel("#b")
    assert client.joined_channels == {"#a", "#b"}
    client.leave_channel("#a")
    assert client.joined_channels == {"#b"}


def test_leaving_active_channel_clears_it():
    client = Client(1)
    client.join_channel("#a")
    client.active_channel = "#a"
    client.leave_channel("#a")
    assert client.active_channel == ""


def test_leaving_other_channel_keeps_active():
    client = Client(1)
    client.join_channel("#a")
    client.join_channel("#b")
    client.active_channel = "#a"
    client.leave_channel("#b")
    assert client.active_channel == "#a"


def test_take_lines_keeps_partial_line():
    client = Client(1)
    client.append_to_buffer(b"hello\nwor")
    assert client.take_lines() == ["hello"]
    assert bytes(client.read_buffer) == b"wor"
    client.append_to_buffer(b"ld\n")
    assert client.take_lines() == ["world"]
    assert bytes(client.read_buffer) == b""


def test_take_lines_skips_empty_lines():
    client = Client(1)
    client.append_to_buffer(b"\n\nabc\n\n")
    assert client.take_lines() == ["abc"]


def test_take_lines_keeps_carriage_return():
    client = Client(1)
    client.append_to_buffer(b"hi\r\n")
    assert client.take_lines() == ["hi\r"]


def test_take_lines_without_newline_returns_nothing():
    client = Client(1)
    client.append_to_buffer(b"partial")
    assert client.take_lines() == []
    assert bytes(client.read_buffer) == b"partial"


def test_output_queue_is_fifo():
    client = Client(1)
    assert client.next_message() is None
    client.push_message("one")
    client.push_message("two")
    assert client.pending_messages == 2
    assert client.next_message() == "one"
    assert client.next_message() == "one"
    client.pop_message()
    assert client.next_message() == "two"
    client.pop_message()
    assert client.next_message() is None


def test_pop_on_empty_queue_is_harmless():
    client = Client(1)
    client.pop_message()
    assert client.pending_messages == 0


def test_clients_hash_by_identity():
    first, second = Client(3), Client(3)
    assert len({first, second}) == 2


def test_close_closes_connection():
    left, right = socket.socketpair()
    try:
        client = Client(left.fileno(), left)
        client.close()
        assert left.fileno() == -1
        assert right.recv(16) == b""
    finally:
        right.close()


def test_close_twice_is_harmless():
    left, right = socket.socketpair()
    right.close()
    client = Client(left.fileno(), left)
    client.close()
    client.close()
    assert left.fileno() == -1