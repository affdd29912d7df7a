import io
import socket
import threading

import pytest

from netlab.udp_echo import client_loop, main, make_server


@pytest.fixture
def client_sock():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(5)
    yield sock
    sock.close()


@pytest.fixture
def server(client_sock):
    srv = make_server("127.0.0.1", 0, client_sock.getsockname()[1])
    thread = threading.Thread(target=srv.serve_forever, daemon=True)
    thread.start()
    yield srv
    srv.shutdown()
    srv.server_close()
    thread.join(5)


def test_client_loop_receives_echoes(server, client_sock):
    out = io.StringIO()
    count = client_loop(["hello", "world\n"], client_sock, server.server_address, out)
    assert count == 2
    assert out.getvalue() == "Response from server: hello\nResponse from server: world\n"


def test_reply_goes_to_reply_port(server, client_sock):
    client_sock.sendto(b"ping\n", server.server_address)
    data, _ = client_sock.recvfrom(1024)
    assert data == b"ping\n"
    assert server.reply_port == client_sock.getsockname()[1]


def test_client_loop_with_no_lines(server, client_sock):
    out = io.StringIO()
    assert client_loop([], client_sock, server.server_address, out) == 0
    assert out.getvalue() == ""


def test_main_without_mode_fails():
    assert main([]) == 1


def test_main_with_unknown_mode_fails():
    assert main(["sideways"]) == 1