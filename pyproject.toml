[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netlab"
version = "0.1.0"
description = "Small networking programs: chat rooms, file sharing, a TFTP client, directory-listing HTTP servers and console utilities"
requires-python = ">=3.10"
dependencies = []
keywords = ["networking", "sockets", "tcp", "udp", "tftp", "http", "chat", "netcat"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
netlab-floatbytes = "netlab.floatbytes:main"
netlab-floatsum = "netlab.floatsum:main"
netlab-joinlines = "netlab.joinlines:main"
netlab-scandir = "netlab.scandir_html:main"
netlab-listing-server = "netlab.listing_server:main"
netlab-file-browser = "netlab.file_browser:main"
netlab-tcp-server = "netlab.tcp_server:main"
netlab-filesharing = "netlab.filesharing:main"
netlab-telnet-logger = "netlab.telnet_logger:main"
netlab-udp-chatroom = "netlab.udp_chatroom:main"
netlab-tftp = "netlab.tftp:main"
netlab-tcp-chatroom = "netlab.tcp_chatroom:main"
netlab-netcat = "netlab.netcat:main"
netlab-ssh-sim = "netlab.ssh_sim:main"
netlab-udp-echo = "netlab.udp_echo:main"

[tool.hatch.build.targets.wheel]
packages = ["netlab"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
