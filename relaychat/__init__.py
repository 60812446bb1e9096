"""A TCP chat relay: a broadcast server, a terminal client and their wire format."""

__version__ = "0.1.0"
__all__ = ["protocol", "users", "server", "client"]