"""A TCP server that runs each line a client sends as a shell command and returns its output."""

import argparse
import socketserver
import subprocess
import sys

PORT = 9999
BUFFER_SIZE = 4096
WELCOME = b"Welcome to SSH Simulation. Enter commands to execute (type 'exit' to quit):\n"
GOODBYE = b"Closing connection. Goodbye!\n"
BLOCKED = "Error: Potentially dangerous command blocked\n"
NO_OUTPUT = "Command executed successfully (no output)\n"
EXEC_FAILED = "Error executing command"

_DANGEROUS = ("rm -rf", ":(){ :|:& };:")


def is_blocked(command):
    """Return True if ``command`` contains a pattern that is refused."""
    return any(pattern in command for pattern in _DANGEROUS)


def run_command(command):
    """Run ``command`` through the shell and return what it wrote to standard output."""
    try:
        result = subprocess.run(command, shell=True, stdout=subprocess.PIPE, check=False)
    except OSError:
        return EXEC_FAILED
    return result.stdout.decode("utf-8", "replace")


def _reply(command):
    if is_blocked(command):
        return BLOCKED
    return run_command(command) or NO_OUTPUT


class ShellHandler(socketserver.BaseRequestHandler):
    """Runs commands for one client until it types ``exit`` or disconnects."""

    def handle(self):
        host, port = self.client_address[:2]
        print(f"New connection from {host}:{port}")
        try:
            self._session()
        finally:
            print("Connection closed, waiting for a new client...\n")

    def _session(self):
        self.request.sendall(WELCOME)
        while True:
            try:
                data = self.request.recv(BUFFER_SIZE - 1)
            except OSError:
                data = b""
            if not data:
                print("Client disconnected")
                return
            data = data.split(b"\0", 1)[0]
            if data.endswith(b"\n"):
                data = data[:-1]
            command = data.decode("utf-8", "replace")
            print(f"Received command: {command}")
            if command == "exit":
                self.request.sendall(GOODBYE)
                return
            self.request.sendall(_reply(command).encode("utf-8"))


class _ShellServer(socketserver.TCPServer):
    allow_reuse_address = True


def make_server(host="0.0.0.0", port=PORT):
    """Create a bound, listening server that serves one client at a time."""
    return _ShellServer((host, port), ShellHandler)


def main(argv=None):
    """Serve shell sessions until interrupted."""
    parser = argparse.ArgumentParser(
        prog="ssh-sim",
        description="Run commands sent by TCP clients and return their output.",
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
        print(f"SSH Simulation Server is listening on port {args.port}...")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())