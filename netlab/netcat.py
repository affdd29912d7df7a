"""A minimal netcat: relay standard input to a TCP peer and the peer's output to standard output."""

import os
import select
import socket
import sys

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5000
BUFFER_SIZE = 4096


def connect(host, port):
    """Connect to the IPv4 address ``host`` on ``port``; raise ValueError for a bad address."""
    try:
        socket.inet_pton(socket.AF_INET, host)
    except OSError as error:
        raise ValueError(f"Invalid host: {host}") from error
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.connect((host, port))
    except BaseException:
        sock.close()
        raise
    return sock


def relay(sock, stdin, stdout):
    """Copy ``stdin`` to ``sock`` and ``sock`` to ``stdout`` until the peer closes.

    When ``stdin`` reaches its end the socket's sending side is shut down and
    reading from the peer goes on. Returns the number of bytes written to ``stdout``.
    """
    stdin_fd = stdin.fileno()
    stdin_open = True
    received = 0
    while True:
        readers = [sock, stdin_fd] if stdin_open else [sock]
        ready, _, _ = select.select(readers, [], [])
        if stdin_open and stdin_fd in ready:
            data = os.read(stdin_fd, BUFFER_SIZE)
            if data:
                sock.sendall(data)
            else:
                stdin_open = False
                sock.shutdown(socket.SHUT_WR)
        if sock in ready:
            data = sock.recv(BUFFER_SIZE)
            if not data:
                break
            stdout.write(data)
            stdout.flush()
            received += len(data)
    return received


def _port(text):
    digits = ""
    for char in text.strip():
        if char.isdigit() or (not digits and char in "+-"):
            digits += char
        else:
            break
    try:
        return int(digits)
    except ValueError:
        return 0


def main(argv=None):
    """Connect to ``[host] [port]`` and relay standard input and output."""
    args = sys.argv[1:] if argv is None else list(argv)
    host = args[0] if args else DEFAULT_HOST
    port = _port(args[1]) if len(args) > 1 else DEFAULT_PORT
    try:
        sock = connect(host, port)
    except ValueError as error:
        print(error, file=sys.stderr)
        return 1
    except (OSError, OverflowError) as error:
        print(f"connect: {error}", file=sys.stderr)
        return 1
    print(f"✅ Connected to {host}:{port}", file=sys.stderr)
    with sock:
        try:
            relay(sock, sys.stdin, sys.stdout.buffer)
        except OSError as error:
            print(f"relay: {error}", file=sys.stderr)
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())