"""Test configuration and fixtures."""
import asyncio
import json

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketState

from chat_relay.config import AppConfig, SessionsConfig
from chat_relay.main import create_app
from chat_relay.session import Session


class FakeWebSocket:
    """Stands in for a Starlette WebSocket; only connection state is read."""

    def __init__(self, connected: bool = True):
        state = WebSocketState.CONNECTED if connected else WebSocketState.DISCONNECTED
        self.client_state = state
        self.application_state = state


class ScriptedWebSocket(FakeWebSocket):
    """Fake WebSocket whose sends can fail or wait on a gate."""

    def __init__(self, error: Exception | None = None, gate: asyncio.Event | None = None):
        super().__init__()
        self.error = error
        self.gate = gate
        self.sent = []
        self.hangup = asyncio.Event()

    async def receive(self):
        await self.hangup.wait()
        return {"type": "websocket.disconnect", "code": 1000}

    async def send_text(self, data):
        await self._send(data)

    async def send_bytes(self, data):
        await self._send(data)

    async def _send(self, data):
        if self.error is not None:
            raise self.error
        if self.gate is not None:
            await self.gate.wait()
        self.sent.append(data)


async def settle(rounds: int = 10):
    """Let writer tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


def make_session(connected: bool = True) -> Session:
    return Session(FakeWebSocket(connected))


def drain(session: Session) -> list:
    """Pop every queued outbound frame of a session."""
    frames = []
    while not session._outbound.empty():
        frames.append(session._outbound.get_nowait())
    return frames


def drain_json(session: Session) -> list[dict]:
    return [json.loads(frame) for frame in drain(session)]


@pytest.fixture
def app():
    return create_app(AppConfig())


@pytest.fixture
def client(app):
    # one portal, so every WebSocket session shares the same event loop
    with TestClient(app) as client:
        yield client


@pytest.fixture
def ghost_client():
    """Client for an app that keeps users on the roster after disconnect."""
    config = AppConfig(sessions=SessionsConfig(remove_on_disconnect=False))
    with TestClient(create_app(config)) as client:
        yield client
