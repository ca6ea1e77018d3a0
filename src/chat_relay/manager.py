"""Session manager: maps open channels to sessions and dispatches control messages.

Single-instance, event-loop owned. Every handler runs to completion between
socket reads, and the registry serializes its own check-and-insert, so two
channels announcing the same name cannot both succeed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from starlette.websockets import WebSocket

from chat_relay import protocol
from chat_relay.broadcast import Broadcaster
from chat_relay.models import User
from chat_relay.protocol import ProtocolError
from chat_relay.registry import NameTaken, UserRegistry
from chat_relay.session import Frame, Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchResult:
    ok: bool = True
    reason: Optional[str] = None

    @classmethod
    def failed(cls, reason: str) -> "DispatchResult":
        return cls(ok=False, reason=reason)


OK = DispatchResult()


class SessionManager:
    def __init__(self, registry: UserRegistry, remove_on_disconnect: bool = True) -> None:
        self._registry = registry
        self._remove_on_disconnect = remove_on_disconnect
        self._sessions: set[Session] = set()
        self.broadcaster = Broadcaster(registry, lambda: self._sessions)

    @property
    def sessions(self) -> list[Session]:
        return list(self._sessions)

    def open(self, websocket: WebSocket) -> Session:
        """Track a freshly accepted channel and greet it with the roster."""
        session = Session(websocket)
        self.broadcaster.send_roster(session)
        self._sessions.add(session)
        logger.info("Session %s opened (total: %d)", session.id, len(self._sessions))
        return session

    def close(self, session: Session) -> None:
        self._sessions.discard(session)
        logger.info("Client disconnected: session %s (total: %d)", session.id, len(self._sessions))

        user, session.user = session.user, None
        if self._remove_on_disconnect and user is not None:
            # the name may have been released and claimed by someone else since
            if self._registry.remove(user.name, user_id=user.id) is not None:
                self.broadcaster.broadcast_roster()

    async def dispatch(self, session: Session, raw: Frame, is_binary: bool = False) -> DispatchResult:
        """Handle one inbound frame. Never raises."""
        try:
            envelope = protocol.decode(raw)
            logger.info("Message received on session %s: %s", session.id, envelope)

            msg_type = envelope.get("type")
            if msg_type == protocol.NEW_USER:
                return self._handle_new_user(session, envelope)
            elif msg_type == protocol.EXIT:
                return self._handle_exit(session, envelope)
            elif msg_type == protocol.GET_USERS:
                return self._handle_get_users(session)
            elif msg_type == protocol.SEND:
                return self._handle_send(raw, is_binary)

            logger.debug("Ignoring message of unknown type %r", msg_type)
            return OK
        except ProtocolError as e:
            return DispatchResult.failed(f"Error processing message: {e}")
        except Exception as e:
            logger.exception("Unexpected error handling message on session %s", session.id)
            return DispatchResult.failed(f"Unexpected error: {e}")

    # ------------------------------------------------------------------
    # Control message handlers
    # ------------------------------------------------------------------

    def _handle_new_user(self, session: Session, envelope: dict[str, Any]) -> DispatchResult:
        user = protocol.parse_user(envelope).to_user()
        existing = self._registry.find(user.name)
        if existing is not None and existing.id == user.id and not self._bound_elsewhere(session, existing):
            # registered over HTTP, now announced on its channel
            session.user = existing
        else:
            try:
                session.user = self._registry.register_existing(user)
            except NameTaken:
                session.enqueue(protocol.nickname_error())
                return DispatchResult.failed(f"User with name {user.name!r} already exists")

        self.broadcaster.broadcast_roster()
        return OK

    def _bound_elsewhere(self, session: Session, user: User) -> bool:
        return any(
            other is not session and other.user is not None and other.user.id == user.id
            for other in self._sessions
        )

    def _handle_exit(self, session: Session, envelope: dict[str, Any]) -> DispatchResult:
        name = protocol.parse_user(envelope).name
        removed = self._registry.remove(name)
        if removed is None:
            return OK

        if session.user is not None and session.user.id == removed.id:
            session.user = None
        self.broadcaster.broadcast_roster()
        return OK

    def _handle_get_users(self, session: Session) -> DispatchResult:
        self.broadcaster.send_roster(session)
        return OK

    def _handle_send(self, raw: Frame, is_binary: bool) -> DispatchResult:
        self.broadcaster.broadcast_raw(raw, is_binary)
        return OK
