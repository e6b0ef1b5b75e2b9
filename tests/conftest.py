"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - config: ClientConfig that never touches the environment
    - fake_transport: in-memory Transport recording every request
    - controller: SessionController wired to fake_transport
    - stub_backend: FastAPI app implementing /chat and /ingest
    - http_transport: HttpxTransport routed to stub_backend via ASGITransport
"""

import asyncio
from typing import Any

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from httpx import ASGITransport

from docchat.client import ClientConfig, HttpxTransport, SessionController
from docchat.models import EncodedRequest

API_KEY = "sk-test-key-abc123"
USER_ID = "abc123"


class FakeTransport:
    """Transport double that replays queued replies.

    A queued reply is either a response dict or an exception to raise.
    When ``gate`` is set, every send waits for it before replying.
    """

    def __init__(self) -> None:
        self.requests: list[EncodedRequest] = []
        self.replies: list[Any] = []
        self.gate: asyncio.Event | None = None
        self.in_flight = 0
        self.max_in_flight = 0

    def queue(self, *replies: Any) -> None:
        self.replies.extend(replies)

    async def send(self, request: EncodedRequest) -> Any:
        self.requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            reply = self.replies.pop(0) if self.replies else {"content": "ok"}
            if isinstance(reply, Exception):
                raise reply
            return reply
        finally:
            self.in_flight -= 1


class StubBackend:
    """Records what the backend received and replays queued replies.

    A queued reply is a response dict, or a ``(status_code, body)`` tuple
    for an error response.
    """

    def __init__(self) -> None:
        self.received: list[dict[str, Any]] = []
        self.replies: list[Any] = []
        self.app = self._create_app()

    def queue(self, *replies: Any) -> None:
        self.replies.extend(replies)

    def _reply(self) -> JSONResponse:
        reply = self.replies.pop(0) if self.replies else {"content": "ok"}
        if isinstance(reply, tuple):
            status_code, body = reply
            return JSONResponse(status_code=status_code, content=body)
        return JSONResponse(content=reply)

    def _create_app(self) -> FastAPI:
        app = FastAPI()

        @app.post("/chat")
        async def chat(request: Request) -> JSONResponse:
            self.received.append({"path": "/chat", "body": await request.json()})
            return self._reply()

        @app.post("/ingest")
        async def ingest(request: Request) -> JSONResponse:
            form = await request.form()
            fields: dict[str, str] = {}
            files: list[tuple[str, bytes]] = []
            for key, value in form.multi_items():
                if isinstance(value, str):
                    fields[key] = value
                else:
                    files.append((value.filename, await value.read()))
            self.received.append({"path": "/ingest", "fields": fields, "files": files})
            return self._reply()

        return app


@pytest.fixture
def config() -> ClientConfig:
    """Session configuration with explicit values for every field."""
    return ClientConfig(
        api_url="http://backend.test/",
        api_key=API_KEY,
        openai_api_key=None,
        model_name="gpt-4o-mini",
        temperature=0.3,
        request_timeout=5.0,
    )


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def controller(fake_transport: FakeTransport, config: ClientConfig) -> SessionController:
    return SessionController(fake_transport, config)


@pytest.fixture
def stub_backend() -> StubBackend:
    return StubBackend()


@pytest.fixture
def http_transport(stub_backend: StubBackend, config: ClientConfig) -> HttpxTransport:
    """HttpxTransport that talks to the stub backend in-process."""
    return HttpxTransport(
        config.api_url,
        timeout=config.request_timeout,
        transport=ASGITransport(app=stub_backend.app),
    )
