"""Sum single-precision numbers up to the first zero."""

import argparse
import math
import struct
import sys


def _to_float32(value):
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def sum_until_zero(values):
    """Add ``values`` in float32 arithmetic, stopping at the first zero."""
    total = 0.0
    for value in values:
        number = _to_float32(float(value))
        if number == 0:
            break
        total = _to_float32(total + number)
    return total


def _numbers(stream):
    for line in stream:
        for token in line.split():
            try:
                yield float(token)
            except ValueError:
                return


def main(argv=None):
    """Read numbers from standard input until a zero and print their sum."""
    parser = argparse.ArgumentParser(
        prog="floatsum",
        description="Sum numbers read from standard input until a zero.",
    )
    parser.parse_args(argv)
    print(f"{sum_until_zero(_numbers(sys.stdin)):.6f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())