import socket
import threading
import time

import pytest

from netlab.tcp_chatroom import ChatHub, make_server


@pytest.fixture
def pairs():
    created = [socket.socketpair() for _ in range(3)]
    yield created
    for server_end, client_end in created:
        server_end.close()
        client_end.close()


@pytest.fixture
def server():
    srv = make_server("127.0.0.1", 0)
    thread = threading.Thread(target=srv.serve_forever, daemon=True)
    thread.start()
    yield srv
    srv.shutdown()
    srv.server_close()
    thread.join(5)


def _wait_for(predicate, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def _wait_for_members(hub, count, timeout=3.0):
    _wait_for(lambda: len(hub) == count, timeout)
    return len(hub)


def test_broadcast_skips_sender(pairs):
    hub = ChatHub()
    for server_end, _ in pairs:
        hub.add(server_end)
    (a_srv, a_cli), (_, b_cli), (_, c_cli) = pairs
    assert hub.broadcast(a_srv, b"hi") == 2
    b_cli.settimeout(1)
    c_cli.settimeout(1)
    assert b_cli.recv(16) == b"hi"
    assert c_cli.recv(16) == b"hi"
    a_cli.setblocking(False)
    with pytest.raises(BlockingIOError):
        a_cli.recv(16)


def test_add_twice_keeps_one_member(pairs):
    hub = ChatHub()
    server_end = pairs[0][0]
    hub.add(server_end)
    hub.add(server_end)
    assert len(hub) == 1


def test_removed_member_gets_nothing(pairs):
    hub = ChatHub()
    (a_srv, _), (b_srv, b_cli), (c_srv, _) = pairs
    for conn in (a_srv, b_srv, c_srv):
        hub.add(conn)
    hub.remove(b_srv)
    assert len(hub) == 2
    assert hub.broadcast(a_srv, b"x") == 1
    b_cli.setblocking(False)
    with pytest.raises(BlockingIOError):
        b_cli.recv(16)


def test_remove_unknown_member_leaves_room(pairs):
    hub = ChatHub()
    hub.add(pairs[0][0])
    hub.remove(pairs[1][0])
    assert len(hub) == 1


def test_broadcast_skips_closed_connections(pairs):
    hub = ChatHub()
    closed = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    closed.close()
    (a_srv, _), (b_srv, b_cli), _ = pairs
    hub.add(closed)
    hub.add(b_srv)
    assert hub.broadcast(a_srv, b"ok") == 1
    b_cli.settimeout(1)
    assert b_cli.recv(16) == b"ok"


def test_server_relays_between_clients(server):
    address = server.server_address
    first = socket.create_connection(address, timeout=3)
    second = socket.create_connection(address, timeout=3)
    try:
        assert _wait_for_members(server.hub, 2) == 2
        first.sendall(b"hello\n")
        assert second.recv(1024) == b"hello\n"
        first.settimeout(0.2)
        with pytest.raises(socket.timeout):
            first.recv(1024)
    finally:
        first.close()
        second.close()


def test_server_forgets_disconnected_client(server):
    address = server.server_address
    first = socket.create_connection(address, timeout=3)
    second = socket.create_connection(address, timeout=3)
    try:
        assert _wait_for_members(server.hub, 2) == 2
        second.close()
        assert _wait_for_members(server.hub, 1) == 1
    finally:
        first.close()
        second.close()
    assert _wait_for_members(server.hub, 0) == 0