"""Join input lines until the first blank one."""

import argparse
import sys


def join_until_blank(lines):
    """Concatenate ``lines`` (without line ends) up to the first empty one."""
    parts = []
    for line in lines:
        if not line:
            break
        parts.append(line)
    return "".join(parts)


def _stripped(stream):
    for line in stream:
        yield line[:-1] if line.endswith("\n") else line


def main(argv=None):
    """Read lines from standard input until a blank line and print them joined."""
    parser = argparse.ArgumentParser(
        prog="joinlines",
        description="Join lines from standard input until a blank line.",
    )
    parser.parse_args(argv)
    print(join_until_blank(_stripped(sys.stdin)))
    return 0


if __name__ == "__main__":
    sys.exit(main())