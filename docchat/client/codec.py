"""Request and response codec for the chat backend.

Builds the payload shared by both request shapes and encodes it either as a
single JSON body for ``/chat`` or as a multipart form for ``/ingest``.
"""

import json
import logging
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from docchat.client.errors import ProtocolError
from docchat.models import (
    Attachment,
    BotSettings,
    ChatRequest,
    ChatResponse,
    EncodedRequest,
    HistoryEntry,
    Message,
    Role,
)

logger = logging.getLogger(__name__)

CHAT_PATH = "/chat"
INGEST_PATH = "/ingest"

# Multipart field name for uploaded files
FILES_FIELD = "files"


def encode_chat_history(history: Sequence[HistoryEntry]) -> list[Message]:
    """Translate the transcript for transmission.

    The backend has no system turn, so ``system`` entries are sent as
    ``user``. Sources are dropped.
    """
    encoded: list[Message] = []
    for entry in history:
        role = Role.USER if entry.role == Role.SYSTEM else entry.role
        encoded.append(Message(role=role, content=entry.content))
    return encoded


def has_attachments(files: Sequence[Attachment] | None) -> bool:
    """Return True when the submission must use the multipart shape."""
    return files is not None and len(files) > 0


def build_request(
    *,
    message: str,
    api_key: str,
    history: Sequence[HistoryEntry],
    collection_name: str,
    openai_api_key: str | None = None,
    access_codes: dict[str, str] | None = None,
    scheduled_queries_str: str | None = None,
    bot_settings: BotSettings | None = None,
) -> ChatRequest:
    """Assemble the payload for one turn.

    Args:
        message: Text of the current turn.
        api_key: Backend API key.
        history: Transcript to replay, before encoding.
        collection_name: Internal name of the active collection.
        openai_api_key: Optional OpenAI key.
        access_codes: Current user's cached access codes.
        scheduled_queries_str: Pending scheduled-query token.
        bot_settings: Model settings passed through verbatim.

    Returns:
        The ChatRequest shared by both encoders.
    """
    return ChatRequest(
        message=message,
        api_key=api_key,
        openai_api_key=openai_api_key,
        chat_history=encode_chat_history(history),
        collection_name=collection_name,
        access_codes_cache=access_codes or None,
        scheduled_queries_str=scheduled_queries_str,
        bot_settings=bot_settings,
    )


def _payload_fields(payload: ChatRequest) -> dict[str, Any]:
    return payload.model_dump(mode="json", exclude_none=True)


def encode_json_request(payload: ChatRequest) -> EncodedRequest:
    """Encode the payload as a JSON body for ``/chat``."""
    return EncodedRequest(path=CHAT_PATH, json_body=json.dumps(_payload_fields(payload)))


def encode_form_request(
    payload: ChatRequest, files: Sequence[Attachment]
) -> EncodedRequest:
    """Encode the payload as a multipart form for ``/ingest``.

    Every non-file field is JSON-encoded, plain strings included, so that an
    empty string still arrives as a non-empty form value.
    """
    form_fields = {
        key: json.dumps(value) for key, value in _payload_fields(payload).items()
    }
    return EncodedRequest(path=INGEST_PATH, form_fields=form_fields, files=list(files))


def encode_request(
    payload: ChatRequest, files: Sequence[Attachment] | None = None
) -> EncodedRequest:
    """Pick the request shape based on whether files are attached."""
    if has_attachments(files):
        return encode_form_request(payload, files)
    return encode_json_request(payload)


def decode_response(data: Any) -> ChatResponse:
    """Validate a parsed response body.

    Raises:
        ProtocolError: If the body does not match the response contract.
    """
    try:
        return ChatResponse.model_validate(data)
    except ValidationError as e:
        logger.error(f"Malformed response from server: {e.error_count()} validation error(s)")
        raise ProtocolError(f"Malformed response from server: {e}") from e
