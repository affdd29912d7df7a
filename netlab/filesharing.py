"""Register peers by broadcast, list them, and send files directly between peers."""

import random
import selectors
import socket
import struct
import sys
import threading
import time

REG_PORT = 5000
LIST_PORT = 6000
SEND_PORT = 7000
BROADCAST_IP = "255.255.255.255"
BUFFER_SIZE = 1024
LIST_BUFFER_SIZE = 4096
FILE_CHUNK = 4096
LIST_TIMEOUT = 2.0
SEND_TIMEOUT = 3.0
LOCAL_IP = "127.0.0.1"

_SIZE = struct.Struct("!I")


def _text(message):
    """Return ``message`` as text, cut at the first NUL like a C string."""
    if isinstance(message, (bytes, bytearray)):
        return bytes(message).split(b"\0", 1)[0].decode("utf-8", "replace")
    return message.split("\0", 1)[0]


def broadcast(message, port):
    """Send ``message`` as one UDP datagram to the broadcast address on ``port``."""
    if isinstance(message, str):
        message = message.encode("utf-8")
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            sock.sendto(message, (BROADCAST_IP, port))
    except OSError:
        pass


def parse_registration(message):
    """Return the name in a ``REG <name>`` message; raise ValueError for anything else."""
    text = _text(message)
    if not text.startswith("REG "):
        raise ValueError(f"not a registration: {text!r}")
    return text[4:]


def format_list(clients):
    """Return the ``LIST`` reply for a mapping of names to addresses, sorted by name."""
    parts = [f"LIST {len(clients)}"]
    parts.extend(f"{name} {clients[name]}" for name in sorted(clients))
    return " ".join(parts)


def parse_list(message):
    """Return the ``(name, ip)`` pairs of a ``LIST`` reply; an unreadable reply has none."""
    words = _text(message).split()
    if len(words) < 2:
        return []
    try:
        count = int(words[1])
    except ValueError:
        return []
    if count <= 0:
        return []
    fields = words[2 : 2 + 2 * count]
    return list(zip(fields[0::2], fields[1::2]))


def parse_send_request(message):
    """Return ``(filename, target)`` of a ``SEND`` request; raise ValueError otherwise."""
    words = _text(message).split()
    command, filename, target = (words + ["", "", ""])[:3]
    if command != "SEND":
        raise ValueError(f"not a send request: {command!r}")
    return filename, target


class RegistryServer:
    """Keeps the names peers register with and answers requests for the list."""

    def __init__(self, reg_sock, list_sock):
        self.reg_sock = reg_sock
        self.list_sock = list_sock
        self.clients = {}

    def handle_registration(self, data, address):
        """Record a registration from ``address``; return the name, or None if ``data`` is not one."""
        try:
            name = parse_registration(data)
        except ValueError:
            return None
        ip = address[0]
        self.clients[name] = ip
        print(f"Registered: {name} from {ip}")
        return name

    def handle_list(self, data):
        """Return the encoded list reply for a ``LIST`` request, or None for anything else."""
        if _text(data) != "LIST":
            return None
        return format_list(self.clients).encode("utf-8")

    def _on_registration(self):
        data, address = self.reg_sock.recvfrom(BUFFER_SIZE)
        self.handle_registration(data, address)

    def _on_list(self):
        data, address = self.list_sock.recvfrom(BUFFER_SIZE)
        reply = self.handle_list(data)
        if reply is not None:
            self.list_sock.sendto(reply, address)

    def serve_forever(self):
        """Answer registrations and list requests on both sockets, without end."""
        with selectors.DefaultSelector() as selector:
            selector.register(self.reg_sock, selectors.EVENT_READ, self._on_registration)
            selector.register(self.list_sock, selectors.EVENT_READ, self._on_list)
            while True:
                for key, _ in selector.select():
                    key.data()


def send_file(conn, path):
    """Send the size of ``path`` as four big-endian bytes, then its content; return the size."""
    with open(path, "rb") as stream:
        size = _file_size(stream)
        conn.sendall(_SIZE.pack(size & 0xFFFFFFFF))
        while chunk := stream.read(FILE_CHUNK):
            conn.sendall(chunk)
    return size


def _file_size(stream):
    stream.seek(0, 2)
    size = stream.tell()
    stream.seek(0)
    return size


def _recv_exact(conn, count):
    data = bytearray()
    while len(data) < count:
        chunk = conn.recv(count - len(data))
        if not chunk:
            break
        data += chunk
    return bytes(data)


def receive_file(conn, destination):
    """Read a size-prefixed file from ``conn`` into ``destination``; return the bytes written."""
    header = _recv_exact(conn, _SIZE.size)
    if len(header) < _SIZE.size:
        raise ConnectionError("connection closed before the file size arrived")
    (size,) = _SIZE.unpack(header)
    received = 0
    with open(destination, "wb") as target:
        while received < size:
            chunk = conn.recv(min(FILE_CHUNK, size - received))
            if not chunk:
                break
            target.write(chunk)
            received += len(chunk)
    return received


def run_server():
    """Run the registry on the registration and list ports until interrupted."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as reg_sock, socket.socket(
        socket.AF_INET, socket.SOCK_DGRAM
    ) as list_sock:
        reg_sock.bind(("", REG_PORT))
        list_sock.bind(("", LIST_PORT))
        print(f"Server running on ports {REG_PORT} and {LIST_PORT}")
        RegistryServer(reg_sock, list_sock).serve_forever()


def _accept_transfer(sock, sender, filename):
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as listener:
        listener.bind(("", 0))
        listener.listen(1)
        port = listener.getsockname()[1]
        sock.sendto(f"{LOCAL_IP} {port}".encode("utf-8"), sender)
        print(f"Waiting for file on port {port}")
        conn, _ = listener.accept()
        destination = "received_" + filename
        with conn:
            received = receive_file(conn, destination)
    print(f"File received: {destination} ({received} bytes)")


def _transfer_listener(my_name):
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        try:
            sock.bind(("", SEND_PORT))
        except OSError as error:
            print(f"Cannot listen on port {SEND_PORT}: {error}", file=sys.stderr)
            return
        print(f"Listening for transfers on port {SEND_PORT}")
        while True:
            data, sender = sock.recvfrom(BUFFER_SIZE)
            try:
                filename, target = parse_send_request(data)
            except ValueError:
                continue
            if target != my_name:
                continue
            try:
                _accept_transfer(sock, sender, filename)
            except OSError as error:
                print(f"Transfer failed: {error}", file=sys.stderr)


def _receive_reply(port, timeout, size):
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.bind(("", port))
            sock.settimeout(timeout)
            data, _ = sock.recvfrom(size)
            return data
    except OSError:
        return b""


def _request_list():
    broadcast("LIST", LIST_PORT)
    reply = _receive_reply(LIST_PORT + 1000, LIST_TIMEOUT, LIST_BUFFER_SIZE)
    print("\nClients in network:")
    for number, (name, ip) in enumerate(parse_list(reply), 1):
        print(f"{number} {name} {ip}")


def _request_send(command):
    filename, _ = parse_send_request(command)
    broadcast(command, SEND_PORT)
    reply = _receive_reply(SEND_PORT + 1000, SEND_TIMEOUT, BUFFER_SIZE)
    if not reply:
        print("Error: No response from target")
        return
    words = _text(reply).split()
    ip = words[0] if words else ""
    try:
        port = int(words[1]) if len(words) > 1 else 0
    except ValueError:
        port = 0
    print(f"Connecting to {ip}:{port}")
    try:
        conn = socket.create_connection((ip, port))
    except (OSError, OverflowError):
        print("Error: Cannot connect to target")
        return
    with conn:
        try:
            size = send_file(conn, filename)
        except OSError:
            print(f"Error: Cannot open file {filename}")
            return
    print(f"File sent successfully ({size} bytes)")


def run_client():
    """Register under a random name, accept transfers, and run commands from standard input."""
    my_name = f"uname_{random.randrange(10000)}"
    print(f"My name: {my_name}")
    broadcast(f"REG {my_name}", REG_PORT)
    print("Broadcasted registration")
    threading.Thread(target=_transfer_listener, args=(my_name,), daemon=True).start()
    time.sleep(1)
    while True:
        print("\nEnter command (LIST or SEND <file> <name>): ", end="", flush=True)
        line = sys.stdin.readline()
        if not line:
            break
        command = line.rstrip("\n")
        if command == "LIST":
            _request_list()
        elif command.startswith("SEND "):
            _request_send(command)


def main(argv=None):
    """Start the registry server or a peer, chosen by the first argument."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("Usage: filesharing [server|client]")
        return 1
    mode = args[0]
    try:
        if mode == "server":
            run_server()
        elif mode == "client":
            run_client()
        else:
            print("Invalid mode. Use 'server' or 'client'")
            return 1
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())