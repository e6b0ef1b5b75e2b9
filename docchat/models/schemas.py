from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Speaker roles in the conversation transcript."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class InstructionType(str, Enum):
    """Side-channel instruction types issued by the backend."""

    SHOW_UPLOADER = "SHOW_UPLOADER"
    CACHE_ACCESS_CODE = "CACHE_ACCESS_CODE"


class Message(BaseModel):
    """A single chat message as transmitted to the backend.

    Attributes:
        role: The speaker identifier (user, assistant, or system).
        content: The message text.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    role: Role
    content: str


class HistoryEntry(Message):
    """A transcript entry, optionally carrying citations.

    Attributes:
        sources: Citations attached to an assistant turn.
    """

    sources: list[str] | None = None


class CollectionInfo(BaseModel):
    """Backend-side document collection bound to the conversation."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    user_facing_name: str = "default"


class Instruction(BaseModel):
    """Server-issued instruction attached to a response.

    ``type`` is a plain string so that instruction types this client does not
    know yet still validate and can be skipped.
    """

    type: str
    user_id: str | None = None
    access_code: str | None = None


class BotSettings(BaseModel):
    """Model settings passed through verbatim on every request."""

    llm_model_name: str
    temperature: float = Field(ge=0.0, le=2.0)


class ChatRequest(BaseModel):
    """Payload shared by the JSON and multipart encoders.

    Attributes:
        message: The current turn's message text.
        api_key: Backend API key (opaque).
        openai_api_key: Optional user-supplied OpenAI key.
        chat_history: Prior transcript, already encoded for transmission.
        collection_name: Internal name of the active collection.
        access_codes_cache: The current user's collection -> access code map.
        scheduled_queries_str: Pending scheduled-query token, if any.
        bot_settings: Model name and temperature.
    """

    message: str
    api_key: str
    openai_api_key: str | None = None
    chat_history: list[Message] = Field(default_factory=list)
    collection_name: str = ""
    access_codes_cache: dict[str, str] | None = None
    scheduled_queries_str: str | None = None
    bot_settings: BotSettings | None = None


class ChatResponse(BaseModel):
    """Response body of both ``/chat`` and ``/ingest``."""

    model_config = ConfigDict(extra="ignore")

    content: str
    collection_name: str | None = None
    user_facing_collection_name: str | None = None
    sources: list[str] | None = None
    instructions: list[Instruction] | None = None
    scheduled_queries_str: str | None = None


class Attachment(BaseModel):
    """A file selected for upload with the next submission."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


class EncodedRequest(BaseModel):
    """An outbound request ready for the transport.

    Exactly one of ``json_body`` or ``form_fields`` is used, depending on
    whether files are attached.
    """

    path: str
    json_body: str | None = None
    form_fields: dict[str, str] = Field(default_factory=dict)
    files: list[Attachment] = Field(default_factory=list)

    @property
    def is_multipart(self) -> bool:
        return self.json_body is None


class SessionState(BaseModel):
    """Conversation state owned by the session controller.

    Attributes:
        history: Append-only transcript in chronological order.
        collection: Active collection; replaced wholesale.
        busy: True exactly while a request is in flight.
        pending_scheduled_query: Token of a backend-issued deferred query.
        last_error: Human-readable error for the current turn.
        instructions: Instructions carried by the last response.
    """

    history: list[HistoryEntry] = Field(default_factory=list)
    collection: CollectionInfo = Field(default_factory=CollectionInfo)
    busy: bool = False
    pending_scheduled_query: str | None = None
    last_error: str | None = None
    instructions: list[Instruction] = Field(default_factory=list)
