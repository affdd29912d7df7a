"""A UDP echo server that replies on a fixed port, and a client that talks to it."""

import socket
import socketserver
import sys
import threading
import time

SERVER_PORT = 5000
REPLY_PORT = 6000
BUFFER_SIZE = 1024
SERVER_HOST = "127.0.0.1"


class EchoHandler(socketserver.BaseRequestHandler):
    """Sends each datagram back to its sender's address on the server's reply port."""

    def handle(self):
        data, sock = self.request
        host = self.client_address[0]
        text = data.split(b"\0", 1)[0].decode("utf-8", "replace")
        print(f"Received from {host}: {text}", end="", flush=True)
        try:
            sock.sendto(data, (host, self.server.reply_port))
        except OSError as error:
            print(f"sendto failed: {error}", file=sys.stderr)
        else:
            print(f"Sent back to client on port {self.server.reply_port}")


class _EchoServer(socketserver.UDPServer):
    max_packet_size = BUFFER_SIZE - 1

    def __init__(self, address, reply_port):
        self.reply_port = reply_port
        super().__init__(address, EchoHandler)


def make_server(host="0.0.0.0", port=SERVER_PORT, reply_port=REPLY_PORT):
    """Create a bound echo server that replies on ``reply_port``."""
    return _EchoServer((host, port), reply_port)


def client_loop(lines, sock, server_address, out):
    """Send each of ``lines`` to the server and write each reply to ``out``; return the replies."""
    replies = 0
    for line in lines:
        if line.endswith("\n"):
            line = line[:-1]
        try:
            sock.sendto((line + "\n").encode("utf-8"), server_address)
        except OSError as error:
            print(f"sendto failed: {error}", file=sys.stderr)
            continue
        try:
            data, _ = sock.recvfrom(BUFFER_SIZE - 1)
        except OSError as error:
            print(f"recvfrom failed: {error}", file=sys.stderr)
            continue
        text = data.split(b"\0", 1)[0].decode("utf-8", "replace")
        out.write("Response from server: " + text)
        out.flush()
        replies += 1
    return replies


def _run_server():
    try:
        server = make_server()
    except OSError as error:
        print(f"Server bind failed: {error}", file=sys.stderr)
        return
    with server:
        print(f"UDP Server is listening on port {SERVER_PORT}...")
        server.serve_forever()


def _run_client():
    time.sleep(0.5)
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        try:
            sock.bind(("", REPLY_PORT))
        except OSError as error:
            print(f"Client bind failed: {error}", file=sys.stderr)
            return
        print("UDP Client ready. Enter text to send to server (Ctrl+D to quit):")
        client_loop(sys.stdin, sock, (SERVER_HOST, SERVER_PORT), sys.stdout)


def main(argv=None):
    """Run the server, the client, or both, chosen by the first argument."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("Usage: udp-echo <server|client|both>", file=sys.stderr)
        return 1
    mode = args[0]
    try:
        if mode == "server":
            _run_server()
        elif mode == "client":
            _run_client()
        elif mode == "both":
            threading.Thread(target=_run_server, daemon=True).start()
            _run_client()
        else:
            print("Invalid mode. Use 'server', 'client', or 'both'", file=sys.stderr)
            return 1
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())