"""Channel session: one per open WebSocket.

Owns the read loop on the socket and an outbound queue flushed by its own
writer task, so queuing a frame never waits on the network.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Union

from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from chat_relay.models import User

if TYPE_CHECKING:
    from chat_relay.manager import DispatchResult

logger = logging.getLogger(__name__)

Frame = Union[str, bytes]
Dispatch = Callable[["Session", Frame, bool], Awaitable["DispatchResult"]]


class Session:
    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket
        self._outbound: asyncio.Queue[Frame] = asyncio.Queue()
        self._closed = False
        self.id = uuid.uuid4().hex[:12]
        # user announced through this channel, if any
        self.user: Optional[User] = None

    @property
    def is_open(self) -> bool:
        return (
            not self._closed
            and self._websocket.client_state == WebSocketState.CONNECTED
            and self._websocket.application_state == WebSocketState.CONNECTED
        )

    def enqueue(self, frame: Frame) -> bool:
        """Queue a frame for delivery. Returns False if the channel is not open."""
        if not self.is_open:
            return False
        self._outbound.put_nowait(frame)
        return True

    async def run(self, dispatch: Dispatch) -> None:
        """Main loop: read frames from the client + flush outbound queue concurrently."""
        write_task = asyncio.create_task(self._write_loop())

        try:
            while True:
                message = await self._websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break

                text = message.get("text")
                if text is not None:
                    frame, is_binary = text, False
                else:
                    frame, is_binary = message.get("bytes") or b"", True

                result = await dispatch(self, frame, is_binary)
                if not result.ok:
                    logger.warning("Session %s: dropped message: %s", self.id, result.reason)
        except WebSocketDisconnect:
            pass
        except (ConnectionResetError, BrokenPipeError) as e:
            logger.debug("Session %s: connection closed: %s", self.id, e)
        finally:
            self._closed = True
            write_task.cancel()

    async def _write_loop(self) -> None:
        try:
            while True:
                frame = await self._outbound.get()
                if isinstance(frame, bytes):
                    await self._websocket.send_bytes(frame)
                else:
                    await self._websocket.send_text(frame)
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            logger.debug("Session %s: send failed, closing: %s", self.id, e)
            self._closed = True
