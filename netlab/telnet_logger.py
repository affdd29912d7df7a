"""A threaded TCP server that prints what clients send and appends it to a log file."""

import argparse
import socketserver
import sys
import threading

PORT = 9999
LOG_PATH = "tmp.txt"
BUFFER_SIZE = 1024


class LoggingHandler(socketserver.BaseRequestHandler):
    """Reads from one client until it disconnects, logging every chunk."""

    def _receive(self):
        try:
            return self.request.recv(BUFFER_SIZE - 1)
        except OSError:
            return b""

    def handle(self):
        print("[New client connected]")
        while True:
            data = self._receive()
            if not data:
                print("[Client disconnected]")
                break
            text = data.split(b"\0", 1)[0]
            print("[Received] " + text.decode("utf-8", "replace"), end="", flush=True)
            with self.server.lock:
                try:
                    with open(self.server.log_path, "ab") as log:
                        log.write(text + b"\n")
                except OSError:
                    pass


class _LoggingServer(socketserver.ThreadingTCPServer):
    daemon_threads = True

    def __init__(self, address, log_path):
        self.log_path = log_path
        self.lock = threading.Lock()
        super().__init__(address, LoggingHandler)


def make_server(host="0.0.0.0", port=PORT, log_path=LOG_PATH):
    """Create a bound, listening server that appends to ``log_path``."""
    return _LoggingServer((host, port), log_path)


def main(argv=None):
    """Log clients' input until interrupted."""
    parser = argparse.ArgumentParser(
        prog="telnet-logger",
        description="Print and log what TCP clients send.",
    )
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--log", default=LOG_PATH)
    args = parser.parse_args(argv)
    try:
        server = make_server(args.host, args.port, args.log)
    except OSError as error:
        print(f"bind: {error}", file=sys.stderr)
        return 1
    with server:
        print("=== Telnet Multi-Client Server Started ===")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())