"""Small networking programs: TCP and UDP servers, chat rooms, file sharing, a TFTP client and console utilities."""

__version__ = "0.1.0"