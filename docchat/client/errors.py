"""Exception types raised inside the chat client."""


class ChatClientError(Exception):
    """Base class for chat client failures."""

    pass


class TransportError(ChatClientError):
    """Raised when a request cannot be delivered or the server rejects it."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProtocolError(ChatClientError):
    """Raised when the backend violates the wire contract."""

    pass
