import socket
import threading
import urllib.parse

import pytest

from netlab.listing_server import (
    ERROR_PAGE,
    FAVICON,
    ListingHandler,
    favicon_response,
    handle_request,
    html_response,
    list_directory,
    make_server,
    render_directory_page,
    url_encode,
)


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "sub").mkdir()
    (tmp_path / "zeta.txt").write_text("z")
    (tmp_path / "alpha file.txt").write_text("a")
    return tmp_path


@pytest.fixture
def server(tree):
    srv = make_server("127.0.0.1", 0, str(tree))
    thread = threading.Thread(target=srv.serve_forever, daemon=True)
    thread.start()
    yield srv
    srv.shutdown()
    srv.server_close()
    thread.join()


def _fetch(srv, request):
    with socket.create_connection(srv.server_address, timeout=5) as conn:
        conn.sendall(request)
        chunks = []
        while chunk := conn.recv(4096):
            chunks.append(chunk)
    return b"".join(chunks)


def _split(response):
    head, _, body = response.partition(b"\r\n\r\n")
    return head.decode("ascii"), body


def _content_length(head):
    for line in head.split("\r\n"):
        if line.startswith("Content-Length: "):
            return int(line.split(": ", 1)[1])
    raise AssertionError("no Content-Length")


def test_url_encode_space():
    assert url_encode("a b") == "a%20b"


def test_url_encode_keeps_safe_characters():
    text = "Az09-_.~/"
    assert url_encode(text) == text


@pytest.mark.parametrize("text", ["héllo wörld", "a&b=c?d", "日本/語"])
def test_url_encode_round_trip(text):
    encoded = url_encode(text)
    assert urllib.parse.unquote(encoded) == text
    assert " " not in encoded


def test_url_encode_is_bounded():
    text = "a" * 600
    encoded = url_encode(text)
    assert len(encoded) < len(text)
    assert text.startswith(encoded)


def test_list_directory_order(tree):
    entries = list_directory(tree)
    assert [entry.name for entry in entries] == ["sub", "alpha file.txt", "zeta.txt"]
    assert entries[0].is_dir is True


def test_render_page(tree):
    page = render_directory_page(str(tree))
    folder = '        <li class="folder"><a href="/files/sub/">sub/</a></li>\n'
    document = '        <li class="file"><a href="/files/alpha%20file.txt">alpha file.txt</a></li>\n'
    assert page.startswith("<!DOCTYPE html>\n")
    assert page.endswith("</html>\n")
    assert folder in page
    assert document in page
    assert page.index(folder) < page.index(document)


def test_render_page_error(tmp_path):
    assert render_directory_page(str(tmp_path / "missing")) == ERROR_PAGE


def test_favicon_response():
    head, body = _split(favicon_response())
    assert head.startswith("HTTP/1.1 200 OK\r\nContent-Type: image/x-icon\r\n")
    assert body == FAVICON
    assert _content_length(head) == len(body)
    assert body.startswith(b"\x00\x00\x01\x00")


def test_html_response_length_counts_bytes():
    head, body = _split(html_response("<p>é</p>"))
    assert "Content-Type: text/html; charset=UTF-8" in head
    assert body.decode("utf-8") == "<p>é</p>"
    assert _content_length(head) == len(body)


def test_handle_request_favicon(tree):
    assert handle_request(b"GET /favicon.ico HTTP/1.1\r\n\r\n", str(tree)) == favicon_response()


def test_handle_request_listing(tree):
    response = handle_request(b"GET /anything HTTP/1.1\r\n\r\n", str(tree))
    assert response == html_response(render_directory_page(str(tree)))


def test_handle_request_empty(tree):
    assert handle_request(b"", str(tree)) == html_response(render_directory_page(str(tree)))


def test_server_serves_favicon(server):
    assert _fetch(server, b"GET /favicon.ico HTTP/1.1\r\n\r\n") == favicon_response()


def test_server_serves_listing(server, tree):
    response = _fetch(server, b"GET / HTTP/1.1\r\n\r\n")
    assert response == html_response(render_directory_page(str(tree)))
    assert server.RequestHandlerClass is ListingHandler