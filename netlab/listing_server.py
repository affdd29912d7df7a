"""A threaded HTTP server that answers every request with a listing of one directory."""

import argparse
import itertools
import os
import socketserver
import string
import sys

from netlab.scandir_html import Entry

PORT = 8080
ROOT_FOLDER = "."
BUFFER_SIZE = 8192
MAX_ENTRIES = 1024
MAX_NAME = 255
_ENCODE_LIMIT = 508

_SAFE = frozenset((string.ascii_letters + string.digits + "-_.~/").encode("ascii"))

ERROR_PAGE = "<html><body><h1>Error opening directory</h1></body></html>"

PAGE_HEAD = (
    "<!DOCTYPE html>\n"
    "<html>\n"
    "<head>\n"
    '    <meta charset="UTF-8">\n'
    "    <title>File Browser</title>\n"
    '    <link rel="icon" href="/favicon.ico" type="image/x-icon">\n'
    "    <style>\n"
    "        body { font-family: Arial, sans-serif; margin: 20px; }\n"
    "        h1 { color: #333; }\n"
    "        ul { list-style-type: none; padding: 0; }\n"
    "        li { margin: 5px 0; }\n"
    "        a { text-decoration: none; color: #0066cc; }\n"
    "        a:hover { text-decoration: underline; }\n"
    "        .folder { font-weight: bold; }\n"
    "        .file { font-style: italic; }\n"
    "    </style>\n"
    "</head>\n"
    "<body>\n"
    "    <h1>Directory Listing</h1>\n"
    "    <ul>\n"
)

PAGE_TAIL = "    </ul>\n</body>\n</html>\n"

FAVICON = bytes.fromhex(
    "000001000100101000000100"
    "1800680300001600000028 00".replace(" ", "")
    + "000010000000200000000100"
    "180000000000000300000000"
    "000000000000000000000000"
    "0000FFFFFFFFFFFFFFFFFFFF"
    "FFFFFFFFFF69E14169E14169"
    "E1FFFFFFFFFFFFFFFFFFFFFF"
    "FFFFFFFF0000000000000000"
)


def url_encode(text):
    """Percent-encode the UTF-8 bytes of ``text``, keeping letters, digits and ``-_.~/``."""
    pieces = []
    length = 0
    for byte in text.encode("utf-8", "surrogateescape"):
        if length >= _ENCODE_LIMIT:
            break
        piece = chr(byte) if byte in _SAFE else f"%{byte:02X}"
        pieces.append(piece)
        length += len(piece)
    return "".join(pieces)


def list_directory(root):
    """Return the entries of ``root``, directories first, then by name."""
    with os.scandir(root) as found:
        entries = [
            Entry(item.name[:MAX_NAME], item.is_dir())
            for item in itertools.islice(found, MAX_ENTRIES)
        ]
    entries.sort(key=lambda entry: (not entry.is_dir, entry.name))
    return entries


def render_directory_page(root=ROOT_FOLDER):
    """Return the HTML page listing ``root``, or an error page if it cannot be read."""
    try:
        entries = list_directory(root)
    except OSError:
        return ERROR_PAGE
    lines = [PAGE_HEAD]
    for entry in entries:
        encoded = url_encode(entry.name)
        if entry.is_dir:
            lines.append(
                f'        <li class="folder"><a href="/files/{encoded}/">{entry.name}/</a></li>\n'
            )
        else:
            lines.append(
                f'        <li class="file"><a href="/files/{encoded}">{entry.name}</a></li>\n'
            )
    lines.append(PAGE_TAIL)
    return "".join(lines)


def favicon_response():
    """Return the full HTTP response carrying the built-in icon."""
    header = (
        "HTTP/1.1 200 OK\r\n"
        "Content-Type: image/x-icon\r\n"
        f"Content-Length: {len(FAVICON)}\r\n"
        "Connection: close\r\n"
        "\r\n"
    )
    return header.encode("ascii") + FAVICON


def html_response(content):
    """Return the full HTTP response carrying the HTML ``content``."""
    body = content.encode("utf-8", "surrogateescape")
    header = (
        "HTTP/1.1 200 OK\r\n"
        "Content-Type: text/html; charset=UTF-8\r\n"
        f"Content-Length: {len(body)}\r\n"
        "Connection: close\r\n"
        "\r\n"
    )
    return header.encode("ascii") + body


def _request_line(data):
    words = data.decode("latin-1").split(maxsplit=2)
    method = words[0] if words else ""
    path = words[1] if len(words) > 1 else ""
    return method, path


def handle_request(data, root=ROOT_FOLDER):
    """Answer the raw request ``data``: the icon for ``/favicon.ico``, else the listing."""
    _, path = _request_line(data)
    if path == "/favicon.ico":
        return favicon_response()
    return html_response(render_directory_page(root))


class ListingHandler(socketserver.BaseRequestHandler):
    """Reads one request from the connection and sends one response."""

    def handle(self):
        host, port = self.client_address[:2]
        print(f"Client connected from {host}:{port}")
        data = self.request.recv(BUFFER_SIZE - 1)
        if not data:
            return
        method, path = _request_line(data)
        print(f"Request: {method} {path}")
        self.request.sendall(handle_request(data, self.server.root))


class _ListingServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, address, root):
        self.root = root
        super().__init__(address, ListingHandler)


def make_server(host="0.0.0.0", port=PORT, root=ROOT_FOLDER):
    """Create a bound, listening listing server."""
    return _ListingServer((host, port), root)


def main(argv=None):
    """Serve a directory listing over HTTP until interrupted."""
    parser = argparse.ArgumentParser(
        prog="listing-server",
        description="Serve an HTML listing of a directory.",
    )
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--root", default=ROOT_FOLDER)
    args = parser.parse_args(argv)
    try:
        server = make_server(args.host, args.port, args.root)
    except OSError:
        print("Bind failed")
        return 1
    with server:
        print(f"HTTP Server listening on port {args.port}...")
        print(f"Open http://localhost:{args.port} in your browser")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())