"""A threaded HTTP file browser: list directories, download files and upload into them."""

import argparse
import os
import re
import socketserver
import sys
from dataclasses import dataclass

from netlab.scandir_html import sorted_entries

PORT = 8888
BLOCK_SIZE = 1024 * 1024
RECV_SIZE = 1024
HEAD_END = b"\r\n\r\n"
NOT_FOUND = b"HTTP/1.1 404 NOT FOUND\r\n\r\n"

_HEX = "0123456789abcdefABCDEF"

_PAGE_HEAD = (
    "<html>"
    "<head><style>"
    "body { font-family: Arial; margin: 20px; }"
    ".upload-form { background: #f0f0f0; padding: 15px; border-radius: 5px; margin-bottom: 20px; }"
    "input[type=file] { margin: 10px 0; }"
    "input[type=submit] { background: #4CAF50; color: white; padding: 10px 20px; border: none; cursor: pointer; }"
    "</style></head><body>"
)

_UPLOAD_FORM = (
    '<div class="upload-form">'
    "<h3>Upload File</h3>"
    '<form method="post" enctype="multipart/form-data">'
    '<input type="file" id="file1" name="file1" required/><br>'
    '<input type="submit" value="Upload to this directory">'
    "</form></div>"
    "<h3>Directory Contents:</h3>"
)


def _encode(text):
    return text.encode("utf-8", "surrogateescape")


def _decode(data):
    return data.decode("utf-8", "surrogateescape")


def url_decode(text):
    """Decode ``%XX`` escapes and ``+`` as space; malformed escapes are kept as they are."""
    source = _encode(text)
    out = bytearray()
    pos = 0
    while pos < len(source):
        byte = source[pos]
        if (
            byte == ord("%")
            and pos + 2 < len(source) + 0
            and chr(source[pos + 1]) in _HEX
            and chr(source[pos + 2]) in _HEX
        ):
            out.append(int(source[pos + 1 : pos + 3].decode("ascii"), 16))
            pos += 3
        elif byte == ord("+"):
            out.append(ord(" "))
            pos += 1
        else:
            out.append(byte)
            pos += 1
    return _decode(bytes(out))


def _join(path, name):
    return path + name if path.endswith("/") else f"{path}/{name}"


def render_directory(path):
    """Return the HTML page for ``path``: an upload form and links to every entry."""
    parts = [_PAGE_HEAD, f"<h2>Current Directory: {path}</h2>", _UPLOAD_FORM]
    try:
        entries = sorted_entries(path)
    except OSError:
        entries = []
    for entry in entries:
        target = _join(path, entry.name)
        if entry.is_dir:
            parts.append(f'<a href="{target}"><b>{entry.name}</b></a><br>')
        else:
            parts.append(f'<a href="{target}?"><i>{entry.name}</i></a><br>')
    parts.append("</body></html>")
    return "".join(parts)


@dataclass(frozen=True)
class RequestHead:
    """The parts of a request head that the browser uses."""

    method: str
    path: str
    content_length: int = 0
    boundary: str = ""


def parse_request_head(head):
    """Parse the raw request head bytes into a :class:`RequestHead` with a decoded path."""
    text = _decode(head)
    content_length = 0
    at = text.find("Content-Length: ")
    if at >= 0:
        match = re.match(r"\s*([+-]?\d+)", text[at + len("Content-Length: ") :])
        if match:
            content_length = int(match.group(1))
    boundary = ""
    at = text.find("boundary=")
    if at >= 0:
        words = text[at + len("boundary=") :].split(maxsplit=1)
        boundary = words[0] if words else ""
    words = text.split(maxsplit=2)
    method = words[0] if words else ""
    path = url_decode(words[1]) if len(words) > 1 else ""
    return RequestHead(method, path, content_length, boundary)


def _header(status, fields):
    lines = [f"HTTP/1.1 {status}"] + [f"{key}: {value}" for key, value in fields]
    return _encode("\r\n".join(lines) + "\r\n\r\n")


def _favicon(favicon_path):
    try:
        with open(favicon_path, "rb") as icon:
            data = icon.read()
    except OSError:
        yield NOT_FOUND
        return
    yield _header("200 OK", [("Content-Length", len(data)), ("Content-Type", "image/x-icon")])
    yield data


def _download(path):
    try:
        stream = open(path, "rb")
    except OSError:
        yield NOT_FOUND
        return
    with stream:
        length = os.fstat(stream.fileno()).st_size
        filename = path.rsplit("/", 1)[-1]
        yield _header(
            "200 OK",
            [
                ("Content-Length", length),
                ("Content-Type", "application/octet-stream"),
                ("Content-Disposition", f'attachment; filename="{filename}"'),
            ],
        )
        while block := stream.read(BLOCK_SIZE):
            yield block


def get_response(path, favicon_path="favicon.ico"):
    """Yield the chunks of the response to a GET of the decoded ``path``.

    A path containing ``favicon.ico`` gets the icon file, a path ending in ``?``
    downloads the file it names, anything else gets the directory page.
    """
    if "favicon.ico" in path:
        yield from _favicon(favicon_path)
    elif path.endswith("?"):
        yield from _download(path[:-1])
    else:
        body = _encode(render_directory(path))
        yield _header("200 OK", [("Content-Length", len(body)), ("Content-Type", "text/html")])
        yield body


def upload_filename(part_head):
    """Return the ``filename`` of a multipart part head; raise ValueError if it has none."""
    text = _decode(part_head) if isinstance(part_head, bytes) else part_head
    marker = 'filename="'
    start = text.find(marker)
    if start < 0:
        raise ValueError("No file selected")
    start += len(marker)
    end = text.find('"', start)
    if end < 0:
        raise ValueError("Invalid filename format")
    return text[start:end]


def upload_response(name, size, fullpath, directory):
    """Return the HTTP response that reports a finished upload."""
    page = (
        "<html><body>"
        "<h2>Upload Successful!</h2>"
        f"<p>File: <b>{name}</b></p>"
        f"<p>Size: <b>{size}</b> bytes</p>"
        f"<p>Location: <b>{fullpath}</b></p>"
        f'<a href="{directory}">Back to directory</a>'
        "</body></html>"
    )
    body = _encode(page)
    return _header("200 OK", [("Content-Type", "text/html"), ("Content-Length", len(body))]) + body


def _error_response(status, message):
    return _header(status, [("Content-Type", "text/html")]) + _encode(
        f"<html><body><h2>Error: {message}</h2></body></html>"
    )


class FileBrowserHandler(socketserver.BaseRequestHandler):
    """Serves one request on a connection, then closes it."""

    def _read_head(self):
        data = bytearray()
        while not data.endswith(HEAD_END):
            byte = self.request.recv(1)
            if not byte:
                return None
            data += byte
        return bytes(data)

    def handle(self):
        head = self._read_head()
        if head is None:
            return
        print(_decode(head), end="")
        request = parse_request_head(head)
        if request.method == "GET":
            for chunk in get_response(request.path, self.server.favicon_path):
                self.request.sendall(chunk)
        elif request.method == "POST":
            self.request.sendall(self._upload(request))

    def _upload(self, request):
        part_head = self._read_head()
        if part_head is None:
            return _error_response("400 BAD REQUEST", "Invalid request format")
        content_read = len(part_head)
        try:
            name = upload_filename(part_head)
        except ValueError as error:
            return _error_response("400 BAD REQUEST", str(error))
        print(f"Uploading file: {name} to directory: {request.path}")
        fullpath = _join(request.path, name)
        try:
            target = open(fullpath, "wb")
        except OSError:
            return _error_response("500 INTERNAL SERVER ERROR", "Could not create file")
        with target:
            while content_read < request.content_length:
                data = self.request.recv(RECV_SIZE)
                if not data:
                    break
                target.write(data)
                content_read += len(data)
        try:
            size = os.path.getsize(fullpath)
        except OSError:
            return _error_response("500 INTERNAL SERVER ERROR", "Could not verify uploaded file")
        print(f"File written: {fullpath} (size: {size} bytes)")
        return upload_response(name, size, fullpath, request.path)


class _FileBrowserServer(socketserver.ThreadingTCPServer):
    daemon_threads = True

    def __init__(self, address, favicon_path="favicon.ico"):
        self.favicon_path = favicon_path
        super().__init__(address, FileBrowserHandler)


def make_server(host="0.0.0.0", port=PORT):
    """Create a bound, listening file browser server."""
    return _FileBrowserServer((host, port))


def main(argv=None):
    """Serve the file browser until interrupted."""
    parser = argparse.ArgumentParser(
        prog="file-browser",
        description="Browse, download and upload files over HTTP.",
    )
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=PORT)
    args = parser.parse_args(argv)
    try:
        server = make_server(args.host, args.port)
    except OSError:
        print("Failed to bind")
        return 1
    with server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())