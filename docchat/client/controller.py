"""Session controller for the chat client.

Owns the conversation state and is the only component that talks to the
transport. One turn is one submit/response cycle:

1. **Guarded entry** - ``busy`` is checked and set with no ``await`` in
   between, so user submissions and the scheduled-query continuation can
   never put two requests in flight.

2. **Request construction** - the full transcript is replayed every turn,
   together with the active collection, the current user's cached access
   codes and any pending scheduled-query token. Attached files switch the
   request from JSON on ``/chat`` to a multipart form on ``/ingest``.

3. **Response handling** - the assistant reply is appended, instructions
   are processed, the collection is replaced if the response names one, and
   the scheduled-query token is refreshed or cleared.

4. **Auto-continuation** - when the backend leaves a scheduled query
   pending, a single task is queued that re-submits with a synthetic system
   message as soon as the controller is idle.

Failures never escape ``submit``. They become the turn's ``last_error`` and
the session returns to idle so the user can retry.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence

from docchat.client.access_codes import AccessCodeCache, derive_user_id
from docchat.client.codec import build_request, decode_response, encode_request
from docchat.client.config import ClientConfig
from docchat.client.errors import ChatClientError, TransportError
from docchat.client.instructions import process_instructions
from docchat.client.transport import Transport
from docchat.models import (
    Attachment,
    BotSettings,
    ChatResponse,
    CollectionInfo,
    EncodedRequest,
    HistoryEntry,
    Instruction,
    InstructionType,
    Role,
    SessionState,
)

logger = logging.getLogger(__name__)

# Synthetic system message sent when the backend leaves a query pending
SCHEDULED_QUERY_MESSAGE = "run scheduled query"


class SessionController:
    """Conversation state machine driving one chat session.

    Args:
        transport: Delivers encoded requests to the backend.
        config: Session configuration; read, never mutated.
        on_update: Called after every state change, e.g. to re-render.
        timeout: Seconds before an in-flight request is abandoned.
            Defaults to ``config.request_timeout``.
    """

    def __init__(
        self,
        transport: Transport,
        config: ClientConfig,
        *,
        on_update: Callable[[], None] | None = None,
        timeout: float | None = None,
    ) -> None:
        self._transport = transport
        self._config = config
        self._bot_settings = config.bot_settings()
        self._timeout = timeout if timeout is not None else config.request_timeout
        self._on_update = on_update

        self._state = SessionState()
        self._access_codes = AccessCodeCache()
        self._user_id = derive_user_id(config.api_key)
        self._selected_files: list[Attachment] = []

        self._tasks: set[asyncio.Task[None]] = set()
        self._continuation_scheduled = False

    # --- read-only views ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state.busy

    @property
    def history(self) -> tuple[HistoryEntry, ...]:
        return tuple(self._state.history)

    @property
    def collection(self) -> CollectionInfo:
        return self._state.collection

    @property
    def last_error(self) -> str | None:
        return self._state.last_error

    @property
    def pending_scheduled_query(self) -> str | None:
        return self._state.pending_scheduled_query

    @property
    def instructions(self) -> tuple[Instruction, ...]:
        return tuple(self._state.instructions)

    @property
    def show_uploader(self) -> bool:
        """Whether the last response asked the UI to show the uploader."""
        return any(
            i.type == InstructionType.SHOW_UPLOADER for i in self._state.instructions
        )

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def access_codes(self) -> AccessCodeCache:
        return self._access_codes

    @property
    def bot_settings(self) -> BotSettings:
        return self._bot_settings

    @property
    def selected_files(self) -> tuple[Attachment, ...]:
        return tuple(self._selected_files)

    # --- inputs from the presentation layer ---

    def update_settings(self, bot_settings: BotSettings) -> None:
        """Use new model settings from the next turn on."""
        self._bot_settings = bot_settings
        self._notify()

    def select_files(self, files: Sequence[Attachment]) -> None:
        self._selected_files = list(files)
        self._notify()

    def add_file(self, file: Attachment) -> None:
        self._selected_files.append(file)
        self._notify()

    def clear_files(self) -> None:
        self._selected_files = []
        self._notify()

    async def submit(
        self,
        message: str = "",
        files: Sequence[Attachment] | None = None,
        *,
        system_message: str | None = None,
    ) -> bool:
        """Submit one turn.

        Args:
            message: User text; may be empty when a system message or
                files accompany the submission.
            files: Files to attach. Defaults to the current selection, which
                is cleared once it has been sent.
            system_message: Internal directive appended before the user turn.

        Returns:
            True once the turn has been processed, False if it was refused
            because a request is already in flight or there is nothing to send.
        """
        if self._state.busy:
            logger.warning("Submission refused: a request is already in flight")
            return False

        use_selection = files is None
        attachments = list(self._selected_files) if use_selection else list(files)
        if not message and not system_message and not attachments:
            logger.warning("Submission refused: nothing to send")
            return False

        self._state.busy = True
        self._state.last_error = None

        succeeded = False
        try:
            request = self._start_turn(message, system_message, attachments)
            self._notify()
            response = await self._dispatch(request)
            self._apply_response(response)
            succeeded = True
        except ChatClientError as e:
            logger.error(f"Error getting response: {e}")
            self._state.last_error = str(e)
        finally:
            if use_selection:
                self._selected_files = []
            self._state.busy = False
            self._notify()

        if succeeded and self._state.pending_scheduled_query:
            self._schedule_continuation()
        return True

    async def wait_idle(self) -> None:
        """Wait until no scheduled-query continuation is queued or running."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # --- turn internals ---

    def _start_turn(
        self,
        message: str,
        system_message: str | None,
        attachments: list[Attachment],
    ) -> EncodedRequest:
        """Append this turn's entries and encode the outbound request."""
        replay = list(self._state.history)

        if system_message:
            system_entry = HistoryEntry(role=Role.SYSTEM, content=system_message)
            self._state.history.append(system_entry)
            if message:
                # The directive precedes the user message it accompanies
                replay.append(system_entry)
        if message:
            self._state.history.append(HistoryEntry(role=Role.USER, content=message))

        text = message or system_message or ""
        mode = "ingest" if attachments else "chat"
        logger.info(
            f"Submitting turn ({mode}, {len(replay)} history entries, "
            f"{len(attachments)} file(s))"
        )

        payload = build_request(
            message=text,
            api_key=self._config.api_key,
            openai_api_key=self._config.openai_api_key,
            history=replay,
            collection_name=self._state.collection.name,
            access_codes=self._access_codes.for_user(self._user_id),
            scheduled_queries_str=self._state.pending_scheduled_query,
            bot_settings=self._bot_settings,
        )
        return encode_request(payload, attachments)

    async def _dispatch(self, request: EncodedRequest) -> ChatResponse:
        try:
            data = await asyncio.wait_for(
                self._transport.send(request), timeout=self._timeout
            )
        except TimeoutError as e:
            raise TransportError(f"Request timed out after {self._timeout:g}s") from e
        return decode_response(data)

    def _apply_response(self, response: ChatResponse) -> None:
        self._state.history.append(
            HistoryEntry(
                role=Role.ASSISTANT,
                content=response.content,
                sources=response.sources,
            )
        )

        anomalies = process_instructions(
            response.instructions,
            collection_name=response.collection_name,
            local_user_id=self._user_id,
            cache=self._access_codes,
        )

        if response.collection_name and response.user_facing_collection_name:
            collection = CollectionInfo(
                name=response.collection_name,
                user_facing_name=response.user_facing_collection_name,
            )
            if collection != self._state.collection:
                logger.info(f"Switched to collection '{collection.user_facing_name}'")
            self._state.collection = collection

        self._state.pending_scheduled_query = response.scheduled_queries_str or None
        self._state.instructions = list(response.instructions or [])

        if anomalies:
            self._state.last_error = "\n\n".join(anomalies)
        logger.info(f"Turn complete ({len(self._state.history)} history entries)")

    # --- scheduled-query continuation ---

    def _schedule_continuation(self) -> None:
        if self._continuation_scheduled:
            return
        self._continuation_scheduled = True
        task = asyncio.create_task(self._run_scheduled_query())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_scheduled_query(self) -> None:
        self._continuation_scheduled = False
        if self._state.busy:
            # The in-flight request already carries the pending token
            logger.info("Scheduled query deferred: a request is already in flight")
            return
        if not self._state.pending_scheduled_query:
            return
        logger.info("Running scheduled query")
        await self.submit(files=[], system_message=SCHEDULED_QUERY_MESSAGE)

    def _notify(self) -> None:
        if self._on_update is not None:
            self._on_update()
