"""Chat server relaying each client's messages to all other clients."""

import argparse
import select
import socket
import sys
import threading
from collections.abc import Iterable
from typing import TextIO

from relaychat.protocol import DEFAULT_PORT, MessageKind, parse_message
from relaychat.users import Users

SELECT_TIMEOUT = 5.0005


class ChatServer:
    """A listening socket plus the users connected through it."""

    def __init__(
        self,
        port: int = DEFAULT_PORT,
        host: str = "",
        *,
        verbose: bool = True,
        out: TextIO | None = None,
        poll_interval: float = SELECT_TIMEOUT,
    ) -> None:
        self.users = Users()
        self.verbose = verbose
        self._out = out if out is not None else sys.stdout
        self._poll_interval = poll_interval
        self._closed = threading.Event()
        self._accept_thread: threading.Thread | None = None
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            self._listener.bind((host, port))
        except OSError as exc:
            self._listener.close()
            raise OSError(f"Server: bind() failed! ({exc})") from exc
        try:
            self._listener.listen(5)
        except OSError as exc:
            self._listener.close()
            raise OSError(f"Server: listen() failed! ({exc})") from exc
        self._log(f"Server: listening on the port {self.port}")

    @property
    def port(self) -> int:
        """The port the server is bound to."""
        return self._listener.getsockname()[1]

    def _log(self, text: str, *, always: bool = False) -> None:
        if always or self.verbose:
            print(text, file=self._out, flush=True)

    def __enter__(self) -> "ChatServer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def accept_connections(self) -> None:
        """Accept new clients until the server is closed or accept fails."""
        while not self._closed.is_set():
            try:
                ready, _, _ = select.select([self._listener], [], [], self._poll_interval)
            except (OSError, ValueError):
                break
            if not ready:
                continue
            try:
                conn, address = self._listener.accept()
            except OSError as exc:
                if not self._closed.is_set():
                    print(f"Server: accept() failed! (errno: {exc.errno})", file=sys.stderr)
                break
            self._log("Server: connection accepted!")
            self.users.add_user(conn, address)
            self._log(f"Server: added client with socket {conn.fileno()}")

    def handle_ready(self, ready: Iterable[socket.socket]) -> str | None:
        """Read one message from a ready client and relay it.

        Returns the text broadcast to the other users, or None if nothing
        was relayed.
        """
        received = self.users.read_message(ready)
        if received is None:
            return None
        sock, msg = received
        if not msg:
            self._log(f"Server: client with socket {sock.fileno()} disconnected")
            self.users.close(sock)
            return None
        self._log(f"recv: {msg}", always=True)
        incoming = parse_message(msg)
        if incoming.kind is MessageKind.QUIT:
            self._log(f"Quitting the user {incoming.username} as requested.", always=True)
            self.users.close(sock)
        text = incoming.broadcast
        self.users.broadcast_message(sock, text)
        self._log("Server: broadcasted the message to all.")
        return text

    def serve_forever(self) -> None:
        """Accept clients in the background and relay messages until closed."""
        if self._accept_thread is None:
            self._accept_thread = threading.Thread(target=self.accept_connections, daemon=True)
            self._accept_thread.start()
        while not self._closed.is_set():
            socks = self.users.sockets()
            if not socks:
                self._closed.wait(self._poll_interval)
                continue
            try:
                ready, _, _ = select.select(socks, [], [], self._poll_interval)
                if ready:
                    self.handle_ready(ready)
            except (OSError, ValueError) as exc:
                if self._closed.is_set():
                    break
                if isinstance(exc, ConnectionError):
                    raise
                raise RuntimeError("Server: select() failed!") from exc

    def close(self) -> None:
        """Stop accepting, and close the listener and all client connections."""
        self._closed.set()
        if self._accept_thread is not None and self._accept_thread is not threading.current_thread():
            self._accept_thread.join()
        self._listener.close()
        self.users.close_sockets()


def run_server(port: int = DEFAULT_PORT) -> None:
    """Run a chat server on ``port`` until interrupted."""
    with ChatServer(port) as server:
        server.serve_forever()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Relay chat server.")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(argv)
    print("$$ echoserver $$")
    try:
        run_server(args.port)
    except KeyboardInterrupt:
        pass
    except (OSError, RuntimeError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())