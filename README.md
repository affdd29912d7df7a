# netlab

A set of small socket programs for learning and experimenting with
networking. It has TCP and UDP servers, chat rooms, a LAN file-sharing tool,
a TFTP client, directory-listing HTTP servers and a few console utilities.
It needs nothing beyond the Python standard library. The servers use IPv4.

## Install

    pip install .

## Commands

| Command | What it does |
| --- | --- |
| `netlab-floatbytes` | Reads a number from stdin and prints its 32-bit float bytes in upper-case hex, most significant first |
| `netlab-floatsum` | Reads numbers from stdin until a `0`, adds them in 32-bit float arithmetic and prints the sum with six decimals |
| `netlab-joinlines` | Reads lines until a blank one and prints them joined together |
| `netlab-scandir [root] [-o FILE] [--plain]` | Writes an HTML listing of `root` (default `/mnt/c`) to `output.html`. It then reads folder names from stdin to move around: `..` goes up and `q` quits. `--plain` writes a single listing of every entry and exits |
| `netlab-listing-server [--host] [--port] [--root]` | HTTP server on port 8080. It answers every request with a listing of `--root` (default `.`) and serves a built-in icon at `/favicon.ico` |
| `netlab-file-browser [--host] [--port]` | HTTP server on port 8888. It lists the directory named by the URL path. A path ending in `?` downloads that file, and a multipart POST uploads a file into that directory. It serves `favicon.ico` from the working directory |
| `netlab-tcp-server [--host] [--port]` | TCP server on port 8888. It serves one client at a time: it greets the client, prints the client's first message and closes the connection |
| `netlab-filesharing server` / `netlab-filesharing client` | LAN registry on UDP ports 5000 and 6000, with peers that send files to each other over TCP |
| `netlab-telnet-logger [--host] [--port] [--log]` | Threaded TCP server on port 9999. It prints what clients send and appends it to `tmp.txt` |
| `netlab-udp-chatroom [--host] [--port]` | UDP chat room on port 5000. It forwards each message, prefixed with `[ip:port]`, to every other client that has written |
| `netlab-tftp get <server> <remote> [local]` / `netlab-tftp put <server> <local> [remote]` | TFTP client for octet-mode transfers on port 69 |
| `netlab-tcp-chatroom [--host] [--port]` | Threaded TCP chat room on port 9999. It relays what each client sends to all the others |
| `netlab-netcat [host] [port]` | Connects to an IPv4 host (default `127.0.0.1`, port 5000) and relays stdin and stdout |
| `netlab-ssh-sim [--host] [--port]` | TCP server on port 9999. It runs each line a client sends as a shell command and returns the output; `exit` ends the session |
| `netlab-udp-echo server\|client\|both` | UDP echo server on port 5000 that replies to port 6000, and a client that reads lines from stdin and prints the replies |

## Examples

Start a chat room, then connect two clients from other terminals:

    netlab-tcp-chatroom
    netlab-netcat 127.0.0.1 9999

Fetch a file from a TFTP server:

    netlab-tftp get 192.0.2.10 test.txt

Share files on the local network. Run one registry server, and one client on
each machine:

    netlab-filesharing server
    netlab-filesharing client

Each client registers under a random name of the form `uname_<n>`. At the
prompt, type `LIST` or `SEND <file> <name>`. The receiving peer saves the file
as `received_<file>`.

## Using it as a library

The command modules can also be imported:

- `netlab.tftp`
  - `get(server, remote_file, local_file=None, port=69, timeout=5.0)` and `put(...)` run transfers. They return the number of bytes moved. An ERROR packet raises `TftpError`, and running out of retries raises `TimeoutError`.
  - `build_request`, `build_ack`, `build_data`, `build_error` and `parse_packet` encode and decode packets.
- `netlab.filesharing`
  - `format_list` / `parse_list`, `parse_registration` and `parse_send_request` handle the message formats.
  - `send_file` / `receive_file` move a file with a 4-byte big-endian size prefix.
- `netlab.udp_chatroom.Chatroom` and `netlab.tcp_chatroom.ChatHub` keep the list of members and choose who gets each message.
- The TCP servers each have a `make_server(...)` function. It returns a bound `socketserver` server, ready for `serve_forever()`.

## What it does not do

- `netlab-listing-server` always lists the same directory. Its `/files/...` links lead back to the listing; they do not serve the files.
- There is no TFTP server, only a client.
- In the file-sharing tool, a receiving peer announces its address as `127.0.0.1`, so transfers between different machines do not connect.
- None of the servers have authentication or encryption.

## Caution

`netlab-ssh-sim` runs whatever commands its clients send. It refuses only
commands that contain `rm -rf` or the classic fork bomb. `netlab-file-browser`
reads and writes any path the server process can reach. Run both only on a
trusted machine and network.

## Tests

    pip install ".[test]"
    pytest