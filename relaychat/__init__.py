"""A small multi-user text chat server with channels, nicknames and private messages."""

__version__ = "0.1.0"