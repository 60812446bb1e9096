"""The set of connected users kept by the server."""

import socket
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from relaychat.protocol import BUFFER_SIZE


@dataclass
class User:
    """A connected client."""

    sock: socket.socket
    address: Any = None
    name: str = ""


class Users:
    """Thread-safe collection of connected users."""

    def __init__(self) -> None:
        self._users: list[User] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    def add_user(self, sock: socket.socket, address: Any) -> User:
        """Register a newly accepted connection."""
        user = User(sock, address)
        with self._lock:
            self._users.append(user)
        return user

    def max_socket(self) -> int:
        """The highest file descriptor among the users, or -1 if none."""
        with self._lock:
            return max((u.sock.fileno() for u in self._users), default=-1)

    def sockets(self) -> list[socket.socket]:
        """The users' sockets, to wait on for incoming data."""
        with self._lock:
            return [u.sock for u in self._users]

    def read_message(self, ready: Iterable[socket.socket]) -> tuple[socket.socket, str] | None:
        """Read from the first user whose socket is in ``ready``.

        Returns the socket and the text read (empty if the peer went away),
        or None if none of the users' sockets is ready.
        """
        ready = set(ready)
        with self._lock:
            user = next((u for u in self._users if u.sock in ready), None)
            if user is None:
                return None
            try:
                data = user.sock.recv(BUFFER_SIZE)
            except ConnectionResetError:
                data = b""
            except OSError as exc:
                raise ConnectionError("Server: read() failed!") from exc
            return user.sock, data.decode("utf-8", errors="replace")

    def broadcast_message(self, sender: socket.socket, msg: str) -> None:
        """Send ``msg`` to every user except the sender."""
        payload = msg.encode("utf-8")
        with self._lock:
            for user in self._users:
                if user.sock is sender:
                    continue
                try:
                    user.sock.sendall(payload)
                except OSError as exc:
                    raise ConnectionError("Server: write() failed!") from exc

    def close(self, sock: socket.socket) -> None:
        """Remove the user owning ``sock`` and close its connection."""
        with self._lock:
            user = next((u for u in self._users if u.sock is sock), None)
            if user is None:
                return
            self._users.remove(user)
        user.sock.close()

    def close_sockets(self) -> None:
        """Close every user's connection."""
        with self._lock:
            for user in self._users:
                user.sock.close()