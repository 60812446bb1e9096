"""Wire format of the chat: registration, chat lines and the quit command."""

from dataclasses import dataclass
from enum import Enum

DEFAULT_PORT = 7007
BUFFER_SIZE = 256
REGISTER_PREFIX = "<REGISTER>"
UNKNOWN_PREFIX = "<unknown>"
EXIT_COMMANDS = frozenset({"quit", "exit"})


class MessageKind(Enum):
    """What a message received by the server asks for."""

    REGISTER = "register"
    QUIT = "quit"
    CHAT = "chat"


@dataclass(frozen=True)
class Incoming:
    """A message received from a client, split at its first colon."""

    raw: str
    prefix: str
    text: str
    kind: MessageKind
    username: str | None = None

    @property
    def broadcast(self) -> str:
        """The text the server relays to the other users."""
        if self.kind is MessageKind.REGISTER:
            return f"{self.username} joined the chat!"
        if self.kind is MessageKind.QUIT:
            return f"{self.username} quits the chat!"
        return self.raw


def parse_message(msg: str) -> Incoming:
    """Split a raw message into prefix and text and classify it."""
    prefix, sep, text = msg.partition(":")
    if not sep:
        prefix, text = UNKNOWN_PREFIX, msg
    if prefix == REGISTER_PREFIX:
        return Incoming(msg, prefix, text, MessageKind.REGISTER, username=text)
    if text == "quit":
        return Incoming(msg, prefix, text, MessageKind.QUIT, username=prefix)
    return Incoming(msg, prefix, text, MessageKind.CHAT)


def register_message(uname: str) -> str:
    """The message a client sends first to announce its user name."""
    return f"{REGISTER_PREFIX}:{uname}"


def chat_message(uname: str, text: str) -> str:
    """A chat line as sent by a client."""
    return f"{uname}:{text}"


def is_exit_command(text: str) -> bool:
    """Whether the user's input ends the client session."""
    return text in EXIT_COMMANDS