"""A threaded TCP chatroom: what one client sends is relayed to all the others."""

import argparse
import socketserver
import sys
import threading

PORT = 9999
BUFFER_SIZE = 1024


class ChatHub:
    """The connected clients, shared between the handler threads."""

    def __init__(self):
        self._lock = threading.Lock()
        self._members = []

    def __len__(self):
        with self._lock:
            return len(self._members)

    def add(self, conn):
        """Add ``conn`` to the room; adding it twice has no effect."""
        with self._lock:
            if conn not in self._members:
                self._members.append(conn)

    def remove(self, conn):
        """Take ``conn`` out of the room if it is there."""
        with self._lock:
            if conn in self._members:
                self._members.remove(conn)

    def broadcast(self, sender, data):
        """Send ``data`` to every member except ``sender``; return how many got it."""
        with self._lock:
            recipients = [conn for conn in self._members if conn is not sender]
        delivered = 0
        for conn in recipients:
            try:
                conn.sendall(data)
            except OSError:
                continue
            delivered += 1
        return delivered


class ChatHandler(socketserver.BaseRequestHandler):
    """Relays everything one client sends until it disconnects."""

    def _receive(self):
        try:
            return self.request.recv(BUFFER_SIZE - 1)
        except OSError:
            return b""

    def handle(self):
        ident = self.request.fileno()
        hub = self.server.hub
        print(f"Client connected: {ident}")
        hub.add(self.request)
        try:
            while True:
                data = self._receive()
                if not data:
                    print(f"Client {ident} disconnected")
                    break
                text = data.split(b"\0", 1)[0].decode("utf-8", "replace")
                print(f"Received from client {ident}: {text}", end="", flush=True)
                hub.broadcast(self.request, data)
        finally:
            hub.remove(self.request)


class _ChatServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, address):
        self.hub = ChatHub()
        super().__init__(address, ChatHandler)


def make_server(host="0.0.0.0", port=PORT):
    """Create a bound, listening chatroom server."""
    return _ChatServer((host, port))


def main(argv=None):
    """Run the chatroom until interrupted."""
    parser = argparse.ArgumentParser(
        prog="tcp-chatroom",
        description="Relay what each TCP client sends to all the others.",
    )
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=PORT)
    args = parser.parse_args(argv)
    try:
        server = make_server(args.host, args.port)
    except OSError:
        print("Failed to bind!")
        return 1
    with server:
        print(f"Server listening on port {args.port}...")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            print("Ctrl+C!")
    return 0


if __name__ == "__main__":
    sys.exit(main())