"""Pydantic models for the chat client.

Provides type safety and validation for everything the session controller
sends, receives, and keeps in memory.

Models:
    - Message / HistoryEntry: transcript entries
    - CollectionInfo: active backend collection
    - Instruction: server-issued side-channel instruction
    - ChatRequest / ChatResponse: wire payloads for /chat and /ingest
    - Attachment / EncodedRequest: outbound files and encoded requests
    - SessionState: controller-owned conversation state
"""

from docchat.models.schemas import (
    Attachment,
    BotSettings,
    ChatRequest,
    ChatResponse,
    CollectionInfo,
    EncodedRequest,
    HistoryEntry,
    Instruction,
    InstructionType,
    Message,
    Role,
    SessionState,
)

__all__ = [
    "Attachment",
    "BotSettings",
    "ChatRequest",
    "ChatResponse",
    "CollectionInfo",
    "EncodedRequest",
    "HistoryEntry",
    "Instruction",
    "InstructionType",
    "Message",
    "Role",
    "SessionState",
]
