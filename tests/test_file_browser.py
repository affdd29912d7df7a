import socket
import threading

import pytest

from netlab.file_browser import (
    NOT_FOUND,
    get_response,
    make_server,
    parse_request_head,
    render_directory,
    upload_filename,
    upload_response,
    url_decode,
)


def _split(response):
    head, _, body = response.partition(b"\r\n\r\n")
    return head.decode(), body


def _content_length(head):
    for line in head.split("\r\n"):
        if line.startswith("Content-Length: "):
            return int(line.split(": ", 1)[1])
    raise AssertionError("no Content-Length")


@pytest.mark.parametrize(
    "raw, decoded",
    [
        ("a%20b+c", "a b c"),
        ("%2f%2F", "//"),
        ("%zz", "%zz"),
        ("end%4", "end%4"),
        ("%C3%A9", "\u00e9"),
        ("/plain/path", "/plain/path"),
    ],
)
def test_url_decode(raw, decoded):
    assert url_decode(raw) == decoded


def test_render_directory_orders_and_links(tmp_path):
    (tmp_path / "sub").mkdir()
    (tmp_path / "a.txt").write_text("x")
    page = render_directory(str(tmp_path))
    root = str(tmp_path)
    assert f"<h2>Current Directory: {root}</h2>" in page
    sub_link = f'<a href="{root}/sub"><b>sub</b></a><br>'
    file_link = f'<a href="{root}/a.txt?"><i>a.txt</i></a><br>'
    assert sub_link in page
    assert file_link in page
    assert page.index(f"{root}/..") < page.index(sub_link) < page.index(file_link)
    assert page.endswith("</body></html>")


def test_render_directory_trailing_slash_not_doubled(tmp_path):
    (tmp_path / "f").write_text("x")
    page = render_directory(str(tmp_path) + "/")
    assert f'<a href="{tmp_path}/f?">' in page


def test_render_missing_directory_has_no_links(tmp_path):
    page = render_directory(str(tmp_path / "missing"))
    assert "<a href" not in page
    assert 'name="file1"' in page


def test_parse_request_head():
    head = (
        b"POST /x%20y HTTP/1.1\r\n"
        b"Content-Length: 42\r\n"
        b"Content-Type: multipart/form-data; boundary=----abc\r\n\r\n"
    )
    request = parse_request_head(head)
    assert request.method == "POST"
    assert request.path == "/x y"
    assert request.content_length == 42
    assert request.boundary == "----abc"


def test_parse_request_head_without_length():
    request = parse_request_head(b"GET / HTTP/1.1\r\n\r\n")
    assert (request.method, request.path, request.content_length) == ("GET", "/", 0)


def test_download_file(tmp_path):
    target = tmp_path / "data.bin"
    target.write_bytes(b"\x00\x01payload")
    head, body = _split(b"".join(get_response(f"{target}?")))
    assert head.startswith("HTTP/1.1 200 OK")
    assert 'Content-Disposition: attachment; filename="data.bin"' in head
    assert body == b"\x00\x01payload"
    assert _content_length(head) == len(body)


def test_download_missing_file(tmp_path):
    assert b"".join(get_response(f"{tmp_path}/nope?")) == NOT_FOUND


def test_favicon_missing_and_present(tmp_path):
    icon = tmp_path / "icon.ico"
    assert b"".join(get_response("/favicon.ico", str(icon))) == NOT_FOUND
    icon.write_bytes(b"ICONDATA")
    head, body = _split(b"".join(get_response("/favicon.ico", str(icon))))
    assert "Content-Type: image/x-icon" in head
    assert body == b"ICONDATA"


def test_directory_response_length_matches(tmp_path):
    head, body = _split(b"".join(get_response(str(tmp_path))))
    assert "Content-Type: text/html" in head
    assert _content_length(head) == len(body)
    assert body.decode() == render_directory(str(tmp_path))


def test_upload_filename():
    part = b'Content-Disposition: form-data; name="file1"; filename="up.txt"\r\n\r\n'
    assert upload_filename(part) == "up.txt"


def test_upload_filename_errors():
    with pytest.raises(ValueError, match="No file selected"):
        upload_filename(b'Content-Disposition: form-data; name="file1"\r\n\r\n')
    with pytest.raises(ValueError, match="Invalid filename format"):
        upload_filename(b'filename="broken\r\n\r\n')


def test_upload_response():
    head, body = _split(upload_response("up.txt", 5, "/d/up.txt", "/d"))
    assert head.startswith("HTTP/1.1 200 OK")
    assert _content_length(head) == len(body)
    assert b"<h2>Upload Successful!</h2>" in body
    assert b'<a href="/d">Back to directory</a>' in body


def _exchange(request):
    server = make_server("127.0.0.1", 0)
    worker = threading.Thread(target=server.handle_request)
    worker.start()
    try:
        with socket.create_connection(server.server_address[:2], timeout=5) as conn:
            conn.sendall(request)
            chunks = []
            while data := conn.recv(4096):
                chunks.append(data)
    finally:
        worker.join(5)
        server.server_close()
    return b"".join(chunks)


def test_upload_through_server(tmp_path):
    part_head = (
        b"------abc\r\n"
        b'Content-Disposition: form-data; name="file1"; filename="up.txt"\r\n'
        b"Content-Type: text/plain\r\n\r\n"
    )
    body = part_head + b"hello" + b"\r\n------abc--\r\n"
    head = (
        f"POST {tmp_path} HTTP/1.1\r\n"
        f"Content-Type: multipart/form-data; boundary=----abc\r\n"
        f"Content-Length: {len(body)}\r\n\r\n"
    ).encode()
    response = _exchange(head + body)
    saved = tmp_path / "up.txt"
    assert saved.read_bytes().startswith(b"hello")
    assert response.startswith(b"HTTP/1.1 200 OK")
    assert f"<b>{saved.stat().st_size}</b>".encode() in response


def test_get_through_server(tmp_path):
    (tmp_path / "note.txt").write_bytes(b"contents")
    response = _exchange(f"GET {tmp_path}/note.txt? HTTP/1.1\r\n\r\n".encode())
    _, body = _split(response)
    assert body == b"contents"