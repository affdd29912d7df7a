"""A UDP chatroom: every datagram is forwarded to all other known senders."""

import argparse
import socket
import sys

PORT = 5000
BUFFER_SIZE = 4096


def format_message(address, text):
    """Prefix ``text`` with ``[ip:port] `` of its sender; return bytes."""
    if isinstance(text, str):
        text = text.encode("utf-8")
    host, port = address[:2]
    return f"[{host}:{port}] ".encode("utf-8") + bytes(text)


class Chatroom:
    """The senders seen so far, in the order they first wrote."""

    def __init__(self):
        self.clients = []

    def receive(self, data, address):
        """Record ``address`` and return the forwarded message and the addresses it goes to."""
        address = tuple(address[:2])
        if address not in self.clients:
            self.clients.append(address)
        text = bytes(data).split(b"\0", 1)[0]
        message = format_message(address, text)
        recipients = [client for client in self.clients if client != address]
        return message, recipients


def serve(sock, room):
    """Receive datagrams on ``sock`` and forward them through ``room`` until the socket closes."""
    while True:
        try:
            data, address = sock.recvfrom(BUFFER_SIZE - 1)
        except OSError as error:
            if sock.fileno() == -1:
                return
            print(f"recvfrom: {error}", file=sys.stderr)
            continue
        host, port = address[:2]
        is_new = tuple(address[:2]) not in room.clients
        message, recipients = room.receive(data, address)
        if is_new:
            print(f"New client added: {host}:{port} (Total clients: {len(room.clients)})")
        text = data.split(b"\0", 1)[0].decode("utf-8", "replace")
        print(f"Received from {host}:{port}: {text}", end="", flush=True)
        for recipient in recipients:
            try:
                sock.sendto(message, recipient)
            except OSError:
                pass
        print(f"Message forwarded to {len(room.clients) - 1} other client(s)")


def main(argv=None):
    """Run the chatroom until interrupted."""
    parser = argparse.ArgumentParser(
        prog="udp-chatroom",
        description="Forward UDP messages between all clients that have written.",
    )
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=PORT)
    args = parser.parse_args(argv)
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        try:
            sock.bind((args.host, args.port))
        except OSError as error:
            print(f"bind: {error}", file=sys.stderr)
            return 1
        print(f"UDP Chatroom Server listening on port {args.port}...")
        try:
            serve(sock, Chatroom())
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())