"""Show the four bytes of a single-precision float, most significant first."""

import argparse
import math
import re
import struct
import sys

FLT_MAX = struct.unpack(">f", bytes.fromhex("7f7fffff"))[0]

_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def float_to_hex(value):
    """Return ``value`` as a big-endian float32, as space-separated upper-case hex pairs."""
    try:
        packed = struct.pack(">f", value)
    except OverflowError:
        packed = struct.pack(">f", math.copysign(math.inf, value))
    return " ".join(f"{byte:02X}" for byte in packed)


def _parse(token):
    """Read the leading number of ``token`` the way a stream extraction does."""
    match = _NUMBER.match(token)
    if match is None:
        return 0.0
    value = float(match.group())
    if math.isinf(value) or abs(value) > FLT_MAX:
        return math.copysign(FLT_MAX, value)
    return value


def main(argv=None):
    """Read one number from standard input and print its float32 bytes."""
    parser = argparse.ArgumentParser(
        prog="floatbytes",
        description="Print the bytes of a float read from standard input.",
    )
    parser.parse_args(argv)
    tokens = sys.stdin.read().split()
    value = _parse(tokens[0]) if tokens else 0.0
    print(float_to_hex(value) + " ")
    return 0


if __name__ == "__main__":
    sys.exit(main())