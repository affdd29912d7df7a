"""A TCP server that greets each client and prints one message from it."""

import argparse
import socketserver
import sys

PORT = 8888
WELCOME = b"Welcome to my first TCP server!\n"
BUFFER_SIZE = 1024


class WelcomeHandler(socketserver.BaseRequestHandler):
    """Sends the greeting, reads one message, and closes the connection."""

    def handle(self):
        host, port = self.client_address[:2]
        print(f"New connection from {host}:{port}")
        try:
            self.request.sendall(WELCOME)
            data = self.request.recv(BUFFER_SIZE - 1)
            if data:
                print("Message from client: " + data.decode("utf-8", "replace"), end="")
        finally:
            print("Connection closed, waiting for a new client...\n")


class _WelcomeServer(socketserver.TCPServer):
    allow_reuse_address = True


def make_server(host="0.0.0.0", port=PORT):
    """Create a bound, listening server that handles one client at a time."""
    return _WelcomeServer((host, port), WelcomeHandler)


def main(argv=None):
    """Serve clients one after another until interrupted."""
    parser = argparse.ArgumentParser(
        prog="tcp-server",
        description="Greet TCP clients and print their first message.",
    )
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=PORT)
    args = parser.parse_args(argv)
    try:
        server = make_server(args.host, args.port)
    except OSError as error:
        print(f"Bind failed: {error}", file=sys.stderr)
        return 1
    with server:
        print(f"Server is listening on port {args.port}...")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())