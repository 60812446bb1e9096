"""Interactive chat client."""

import argparse
import queue
import select
import socket
import sys
import threading
from typing import TextIO

from relaychat.protocol import (
    BUFFER_SIZE,
    DEFAULT_PORT,
    chat_message,
    is_exit_command,
    register_message,
)

HOST = "127.0.0.1"
VERBOSE = True


def _read_lines(stdin: TextIO, lines: queue.Queue, wake: socket.socket) -> None:
    for line in iter(stdin.readline, ""):
        lines.put(line[:-1] if line.endswith("\n") else line)
        try:
            wake.send(b"\0")
        except OSError:
            return
    lines.put(None)
    try:
        wake.send(b"\0")
    except OSError:
        pass


def run_client(uname: str, port: int = DEFAULT_PORT, stdin: TextIO | None = None,
               stdout: TextIO | None = None) -> None:
    """Chat as ``uname`` with the server on localhost until quit or disconnect."""
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout

    def say(*parts: str, end: str = "\n") -> None:
        print(*parts, sep="", end=end, file=stdout, flush=True)

    try:
        sock = socket.create_connection((HOST, port))
    except OSError as exc:
        raise ConnectionError("Client: connect() failed!") from exc

    wake_r, wake_w = socket.socketpair()
    lines: queue.Queue = queue.Queue()
    with sock, wake_r, wake_w:
        if VERBOSE:
            say("Client: connected to server!")
        try:
            sock.sendall(register_message(uname).encode("utf-8"))
        except OSError as exc:
            raise ConnectionError("Client: send() username failed!") from exc

        reader = threading.Thread(target=_read_lines, args=(stdin, lines, wake_w), daemon=True)
        reader.start()

        while True:
            say(f"{uname}(you): ", end="")
            ready, _, _ = select.select([sock, wake_r], [], [])

            if wake_r in ready:
                wake_r.recv(1)
                msg = lines.get()
                if msg is None:
                    break
                try:
                    sock.sendall(chat_message(uname, msg).encode("utf-8"))
                except OSError as exc:
                    raise ConnectionError("Client: send() failed!") from exc
                if VERBOSE:
                    say(f"Client:: sent message '{msg}'")
                if is_exit_command(msg):
                    break

            if sock in ready:
                try:
                    data = sock.recv(BUFFER_SIZE - 1)
                except OSError as exc:
                    raise ConnectionError("Client: recv() failed!") from exc
                if not data:
                    say("\nServer disconnected.")
                    break
                say("\n", data.decode("utf-8", errors="replace"))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Relay chat client.")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(argv)
    print("### client for echoserver ###")
    print("# Enter your username when prompted.")
    print("# Type 'exit' to exit the chat.")
    print("Enter your username: ", end="", flush=True)
    uname = sys.stdin.readline().rstrip("\n")
    if not uname:
        print("Invalid username. Aborting.", file=sys.stderr)
        return 1
    try:
        run_client(uname, args.port)
    except KeyboardInterrupt:
        pass
    except OSError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())