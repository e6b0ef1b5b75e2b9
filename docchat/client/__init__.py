"""Session controller and its collaborators.

Talks to a remote conversational backend over HTTP and keeps the
conversation state for one chat session.

Responsibilities:
    - Message history and active collection tracking
    - Request construction for /chat (JSON) and /ingest (multipart)
    - Server instruction processing and access-code caching
    - Scheduled-query auto-continuation

Has no knowledge of the presentation layer. The UI drives it through
``SessionController`` and observes state through its properties.
"""

from docchat.client.access_codes import AccessCodeCache, derive_user_id
from docchat.client.config import ClientConfig, get_client_config
from docchat.client.controller import SCHEDULED_QUERY_MESSAGE, SessionController
from docchat.client.errors import ChatClientError, ProtocolError, TransportError
from docchat.client.transport import HttpxTransport, Transport

__all__ = [
    "SCHEDULED_QUERY_MESSAGE",
    "AccessCodeCache",
    "ChatClientError",
    "ClientConfig",
    "HttpxTransport",
    "ProtocolError",
    "SessionController",
    "Transport",
    "TransportError",
    "derive_user_id",
    "get_client_config",
]
