"""Render a directory as a small HTML listing and browse directories interactively."""

import argparse
import os
import sys
from dataclasses import dataclass
from pathlib import Path

DEFAULT_ROOT = "/mnt/c"
DEFAULT_OUTPUT = "output.html"
_TOKEN_LIMIT = 255


@dataclass(frozen=True)
class Entry:
    """One directory entry."""

    name: str
    is_dir: bool


def _sort_key(entry):
    return (not entry.is_dir, entry.name)


def sorted_entries(path):
    """List ``path`` including ``.`` and ``..``, directories first, then by name."""
    entries = [Entry(".", True), Entry("..", True)]
    with os.scandir(path) as found:
        entries.extend(Entry(item.name, item.is_dir(follow_symlinks=False)) for item in found)
    entries.sort(key=_sort_key)
    return entries


def render_listing(root, include_dot=False):
    """Return the HTML listing of ``root``.

    With ``include_dot`` every entry is listed and no heading is written;
    otherwise the page starts with the directory as a heading and ``.`` is left out.
    """
    parts = ["<html>"]
    if not include_dot:
        parts.append(f"<h2>{root}</h2>")
    try:
        entries = sorted_entries(root)
    except OSError:
        entries = []
    for entry in entries:
        if entry.name == "." and not include_dot:
            continue
        tag = "b" if entry.is_dir else "i"
        parts.append(f'<a href="{entry.name}"><{tag}>{entry.name}</{tag}></a><br>')
    parts.append("</html>")
    return "".join(parts)


def write_listing(root, destination=DEFAULT_OUTPUT, include_dot=False):
    """Write the listing of ``root`` to ``destination`` and return it."""
    html = render_listing(root, include_dot)
    Path(destination).write_bytes(html.encode("utf-8", "surrogateescape"))
    return html


class Navigator:
    """A current directory that can move up and down by name."""

    def __init__(self, root=DEFAULT_ROOT):
        self.root = str(root)

    def up(self):
        """Drop the last path component; the root ``/`` stays where it is."""
        if len(self.root) > 1:
            cut = self.root.rfind("/")
            if cut == 0:
                self.root = "/"
            elif cut > 0:
                self.root = self.root[:cut]
        return self.root

    def down(self, folder):
        """Append ``folder`` to the current directory."""
        if not self.root.endswith("/"):
            self.root += "/"
        self.root += folder
        return self.root

    def enter(self, name):
        """Go up for ``..``, otherwise into ``name``; raise if it is not a directory."""
        if name == "..":
            return self.up()
        if not os.path.isdir(f"{self.root}/{name}"):
            raise NotADirectoryError(name)
        return self.down(name)


def _tokens(stream):
    for line in stream:
        for word in line.split():
            while word:
                yield word[:_TOKEN_LIMIT]
                word = word[_TOKEN_LIMIT:]


def main(argv=None):
    """Browse directories from standard input, writing each listing to a file."""
    parser = argparse.ArgumentParser(
        prog="scandir-html",
        description="Write HTML listings of directories while browsing them.",
    )
    parser.add_argument("root", nargs="?", default=DEFAULT_ROOT)
    parser.add_argument("-o", "--output", default=DEFAULT_OUTPUT)
    parser.add_argument(
        "--plain",
        action="store_true",
        help="write one listing of every entry of ROOT and exit",
    )
    args = parser.parse_args(argv)

    if args.plain:
        write_listing(args.root, args.output, include_dot=True)
        return 0

    navigator = Navigator(args.root)
    words = _tokens(sys.stdin)
    while True:
        print(f"\nCurrent directory: {navigator.root}")
        write_listing(navigator.root, args.output)
        print(f"HTML output written to {args.output}")
        print("Enter folder name (or '..' to go up, 'q' to quit): ", end="", flush=True)
        word = next(words, None)
        if word is None or word == "q":
            break
        try:
            navigator.enter(word)
        except NotADirectoryError:
            print(f"'{word}' is not a valid directory!")
    print("Program terminated.")
    return 0


if __name__ == "__main__":
    sys.exit(main())