import io
import socket
import threading

import pytest

from relaychat.client import main, run_client


class _BlockingInput:
    """Input that yields nothing until released, then reports end of input."""

    def __init__(self):
        self.released = threading.Event()

    def readline(self):
        self.released.wait(10)
        return ""


@pytest.fixture
def listener():
    srv = socket.socket()
    srv.bind(("127.0.0.1", 0))
    srv.listen(1)
    srv.settimeout(5)
    yield srv
    srv.close()


def _collect_all(listener, received):
    conn, _ = listener.accept()
    with conn:
        conn.settimeout(5)
        chunks = []
        while data := conn.recv(1024):
            chunks.append(data)
    received.append(b"".join(chunks))


def test_client_sends_register_then_messages(listener):
    received = []
    thread = threading.Thread(target=_collect_all, args=(listener, received))
    thread.start()
    out = io.StringIO()
    run_client("bob", listener.getsockname()[1], io.StringIO("hello\nquit\n"), out)
    thread.join(5)
    assert received == [b"<REGISTER>:bobbob:hellobob:quit"]
    assert "Client:: sent message 'quit'" in out.getvalue()


def test_client_stops_at_end_of_input(listener):
    received = []
    thread = threading.Thread(target=_collect_all, args=(listener, received))
    thread.start()
    out = io.StringIO()
    run_client("dave", listener.getsockname()[1], io.StringIO(""), out)
    thread.join(5)
    assert received == [b"<REGISTER>:dave"]
    assert "Client: connected to server!" in out.getvalue()


def test_client_prints_server_messages_and_disconnect(listener):
    registered = []

    def serve():
        conn, _ = listener.accept()
        with conn:
            conn.settimeout(5)
            registered.append(conn.recv(256))
            conn.sendall(b"hi there")

    thread = threading.Thread(target=serve)
    thread.start()
    stdin = _BlockingInput()
    out = io.StringIO()
    try:
        run_client("carol", listener.getsockname()[1], stdin, out)
    finally:
        stdin.released.set()
        thread.join(5)
    text = out.getvalue()
    assert registered == [b"<REGISTER>:carol"]
    assert "carol(you): " in text
    assert "\nhi there\n" in text
    assert text.rstrip().endswith("Server disconnected.")


def test_connect_failure_raises():
    probe = socket.socket()
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    with pytest.raises(ConnectionError, match="connect"):
        run_client("erin", port, io.StringIO(""), io.StringIO())


def test_main_rejects_empty_username(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("\n"))
    assert main([]) == 1
    assert "Invalid username. Aborting." in capsys.readouterr().err


def test_main_reports_connection_error(monkeypatch, capsys):
    probe = socket.socket()
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    monkeypatch.setattr("sys.stdin", io.StringIO("frank\n"))
    assert main(["--port", str(port)]) == 0
    assert "ERROR: Client: connect() failed!" in capsys.readouterr().err