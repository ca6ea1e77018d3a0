"""WebSocket handler for chat channels."""

import asyncio
import logging

from fastapi import WebSocket

from chat_relay.manager import SessionManager

logger = logging.getLogger(__name__)


async def websocket_channel(websocket: WebSocket):
    """Chat channel: presence updates and broadcast messages.

    On connect the server pushes the roster:
      {"type": "users-list", "users": [{"id": "...", "name": "..."}]}

    Then the client may send:
      {"type": "new-user", "user": {"id": "...", "name": "Bob"}}
      {"type": "exit", "user": {"name": "Bob"}}
      {"type": "get-users"}
      {"type": "send", ...}
    """
    await websocket.accept()
    manager: SessionManager = websocket.app.state.sessions
    session = manager.open(websocket)

    try:
        await session.run(manager.dispatch)
    except asyncio.CancelledError:
        raise
    except Exception:
        logger.exception("Unexpected error in chat channel %s", session.id)
    finally:
        manager.close(session)
