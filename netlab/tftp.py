"""A TFTP client that downloads and uploads files in octet mode."""

import socket
import struct
import sys
from dataclasses import dataclass

TFTP_PORT = 69
BLOCK_SIZE = 512
BUFFER_SIZE = 516
TIMEOUT = 5.0
MAX_RETRIES = 5
MODE = "octet"

OP_RRQ = 1
OP_WRQ = 2
OP_DATA = 3
OP_ACK = 4
OP_ERROR = 5

_OPCODE = struct.Struct("!H")
_HEADER = struct.Struct("!HH")


class TftpError(Exception):
    """An ERROR packet sent by the peer."""

    def __init__(self, code, message):
        super().__init__(f"Error {code}: {message}")
        self.code = code
        self.message = message


@dataclass(frozen=True)
class Packet:
    """A decoded TFTP packet; only the fields of its opcode are set."""

    opcode: int
    block: int = 0
    data: bytes = b""
    filename: str = ""
    mode: str = ""
    error_code: int = 0
    message: str = ""


def _encode(text):
    return text.encode("utf-8", "surrogateescape")


def _decode(data):
    return data.decode("utf-8", "surrogateescape")


def build_request(opcode, filename, mode=MODE):
    """Return a read (RRQ) or write (WRQ) request for ``filename``."""
    if opcode not in (OP_RRQ, OP_WRQ):
        raise ValueError(f"not a request opcode: {opcode}")
    return _OPCODE.pack(opcode) + _encode(filename) + b"\0" + _encode(mode) + b"\0"


def build_ack(block):
    """Return the acknowledgement of ``block``."""
    return _HEADER.pack(OP_ACK, block & 0xFFFF)


def build_data(block, payload):
    """Return the DATA packet carrying ``payload`` as ``block``."""
    payload = bytes(payload)
    if len(payload) > BLOCK_SIZE:
        raise ValueError(f"payload longer than {BLOCK_SIZE} bytes")
    return _HEADER.pack(OP_DATA, block & 0xFFFF) + payload


def build_error(code, message):
    """Return an ERROR packet with ``code`` and ``message``."""
    return _HEADER.pack(OP_ERROR, code & 0xFFFF) + _encode(message) + b"\0"


def parse_packet(data):
    """Decode ``data`` into a :class:`Packet`; raise ValueError if it is malformed."""
    data = bytes(data)
    if len(data) < _OPCODE.size:
        raise ValueError("packet too short")
    (opcode,) = _OPCODE.unpack_from(data)
    if opcode in (OP_RRQ, OP_WRQ):
        fields = data[_OPCODE.size :].split(b"\0")
        if len(fields) < 3:
            raise ValueError("malformed request")
        return Packet(opcode, filename=_decode(fields[0]), mode=_decode(fields[1]))
    if opcode not in (OP_DATA, OP_ACK, OP_ERROR):
        raise ValueError(f"unknown opcode {opcode}")
    if len(data) < _HEADER.size:
        raise ValueError("packet too short")
    _, number = _HEADER.unpack_from(data)
    rest = data[_HEADER.size :]
    if opcode == OP_DATA:
        return Packet(opcode, block=number, data=rest)
    if opcode == OP_ACK:
        return Packet(opcode, block=number)
    return Packet(opcode, error_code=number, message=_decode(rest.split(b"\0", 1)[0]))


def _receive(sock):
    try:
        return sock.recvfrom(BUFFER_SIZE)
    except socket.timeout:
        return None


def _parsed(data):
    try:
        return parse_packet(data)
    except ValueError:
        return None


def _download(sock, server_address, remote_file, target):
    print(f"Requesting file '{remote_file}' from {server_address[0]}...")
    sock.sendto(build_request(OP_RRQ, remote_file), server_address)
    peer = server_address
    expected = 1
    retries = 0
    total = 0
    while True:
        received = _receive(sock)
        if received is None:
            retries += 1
            if retries > MAX_RETRIES:
                raise TimeoutError("Max retries reached. Download failed.")
            print(f"Timeout, retrying ({retries}/{MAX_RETRIES})...")
            sock.sendto(build_ack(expected - 1), peer)
            continue
        data, peer = received
        retries = 0
        packet = _parsed(data)
        if packet is None:
            continue
        if packet.opcode == OP_ERROR:
            raise TftpError(packet.error_code, packet.message)
        if packet.opcode != OP_DATA:
            continue
        if packet.block == expected:
            target.write(packet.data)
            total += len(packet.data)
            print(f"Received block {packet.block} ({len(packet.data)} bytes)")
            sock.sendto(build_ack(packet.block), peer)
            expected = (expected + 1) & 0xFFFF
            if len(packet.data) < BLOCK_SIZE:
                print("Transfer complete!")
                return total
        elif packet.block < expected:
            sock.sendto(build_ack(packet.block), peer)


def get(server, remote_file, local_file=None, port=TFTP_PORT, timeout=TIMEOUT):
    """Download ``remote_file`` from ``server`` into ``local_file``; return the bytes received."""
    if local_file is None:
        local_file = remote_file
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.settimeout(timeout)
        try:
            target = open(local_file, "wb")
        except OSError as error:
            raise OSError(f"Cannot open file {local_file} for writing") from error
        with target:
            return _download(sock, (server, port), remote_file, target)


def _final_ack(sock, block):
    received = _receive(sock)
    if received is None:
        return False
    packet = _parsed(received[0])
    return packet is not None and packet.opcode == OP_ACK and packet.block == block


def _upload(sock, server_address, local_file, remote_file, source):
    request = build_request(OP_WRQ, remote_file)
    print(f"Sending file '{local_file}' to {server_address[0]} as '{remote_file}'...")
    sock.sendto(request, server_address)
    peer = server_address
    last = request
    block = 0
    retries = 0
    total = 0
    while True:
        received = _receive(sock)
        if received is None:
            retries += 1
            if retries > MAX_RETRIES:
                raise TimeoutError("Max retries reached. Upload failed.")
            print(f"Timeout, retrying ({retries}/{MAX_RETRIES})...")
            sock.sendto(last, server_address if block == 0 else peer)
            continue
        data, peer = received
        retries = 0
        packet = _parsed(data)
        if packet is None:
            continue
        if packet.opcode == OP_ERROR:
            raise TftpError(packet.error_code, packet.message)
        if packet.opcode != OP_ACK or packet.block != block:
            continue
        block = (block + 1) & 0xFFFF
        payload = source.read(BLOCK_SIZE)
        last = build_data(block, payload)
        print(f"Sending block {block} ({len(payload)} bytes)")
        sock.sendto(last, peer)
        total += len(payload)
        if len(payload) < BLOCK_SIZE:
            if _final_ack(sock, block):
                print("Transfer complete!")
            return total


def put(server, local_file, remote_file=None, port=TFTP_PORT, timeout=TIMEOUT):
    """Upload ``local_file`` to ``server`` as ``remote_file``; return the bytes sent."""
    if remote_file is None:
        remote_file = local_file
    try:
        source = open(local_file, "rb")
    except OSError as error:
        raise OSError(f"Cannot open file {local_file} for reading") from error
    with source, socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.settimeout(timeout)
        return _upload(sock, (server, port), local_file, remote_file, source)


def _usage(prog):
    return (
        "Usage:\n"
        f"  {prog} get <server_ip> <remote_file> [local_file]\n"
        f"  {prog} put <server_ip> <local_file> [remote_file]\n"
        "\nExamples:\n"
        f"  {prog} get 192.168.1.100 test.txt\n"
        f"  {prog} put 192.168.1.100 myfile.txt server_file.txt"
    )


def main(argv=None):
    """Run ``get`` or ``put`` as given on the command line."""
    args = sys.argv[1:] if argv is None else list(argv)
    prog = "tftp"
    if len(args) < 3:
        print(_usage(prog))
        return 1
    command, server, first = args[:3]
    second = args[3] if len(args) > 3 else first
    try:
        if command == "get":
            get(server, first, second)
        elif command == "put":
            put(server, first, second)
        else:
            print(_usage(prog))
            return 1
    except (TftpError, OSError) as error:
        print(error)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())