# relaychat

A small real-time chat over TCP. The server accepts any number of clients and
relays each message to everyone connected except the one who sent it. The
terminal client sends the lines you type and prints what the others say.

## Install

```
pip install .
```

For the tests:

```
pip install .[test]
pytest
```

## Running a chat

Start the server. It listens on port 7007 on all interfaces; `--port` picks
another port:

```
relaychat-server
relaychat-server --port 9000
```

In other terminals, start as many clients as you like. Each one connects to
`127.0.0.1` on port 7007 (or the one given with `--port`) and first asks for a
username. An empty username aborts with exit status 1.

```
relaychat-client
relaychat-client --port 9000
```

When a client joins, the others see `<name> joined the chat!`. Each line you
type is sent as `<name>:<text>` and shown as such to the others.

- Typing `quit` sends `<name>:quit`; the server closes your connection and
  tells the others `<name> quits the chat!`. Your client then stops.
- Typing `exit` sends `<name>:exit`, which the others see as an ordinary line,
  and your client stops.
- Closing standard input (Ctrl-D) stops the client without sending anything.
- If the server goes away, the client prints `Server disconnected.` and stops.

A client that disconnects without `quit` is dropped by the server without a
message to the others. Stop the server with Ctrl-C.

## Wire format

Messages are plain UTF-8 text with no framing; the server reads at most 256
bytes at a time and the client at most 255.

| Message            | Meaning                            |
|--------------------|------------------------------------|
| `<REGISTER>:alice` | sent once after connecting         |
| `alice:hello`      | a chat line from `alice`           |
| `alice:quit`       | `alice` asks to leave the chat     |

`relaychat.protocol` builds and parses these. `register_message` and
`chat_message` build outgoing messages, and `is_exit_command` tells whether a
typed line (`quit` or `exit`) ends the client. `parse_message` splits a message
at its first colon and returns an `Incoming` whose `kind` is a `MessageKind`
(`REGISTER`, `QUIT` or `CHAT`); its `broadcast` property is the text the server
relays to the others. A message without a colon is a chat line with the prefix
`<unknown>`.

## Use from Python

```python
from relaychat.server import ChatServer, run_server
from relaychat.client import run_client

run_server(7007)                              # blocks, serving clients
run_client("alice", 7007, stdin, stdout)      # session on the given text streams
```

`ChatServer(port, host="", *, verbose=True, out=None, poll_interval=...)`
binds and listens when created; port 0 picks a free port, available as
`server.port`. It is a context manager whose exit calls `close()`, which stops
accepting and closes the listener and every client connection.

- `serve_forever()` starts `accept_connections()` in a background thread and
  relays messages until the server is closed.
- `handle_ready(sockets)` reads one message from the first ready client,
  relays it, and returns the broadcast text (or `None` if nothing was relayed).

`relaychat.users.Users` is the thread-safe set of connected `User`s:
`add_user`, `sockets`, `max_socket`, `read_message`, `broadcast_message`,
`close` and `close_sockets`. Read and write failures raise `ConnectionError`.

## What it does not do

There are no accounts, private messages, rooms or message history, and
usernames are neither checked nor kept unique. The client only connects to the
local machine, and nothing is encrypted.