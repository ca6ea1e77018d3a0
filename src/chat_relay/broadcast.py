"""Fan-out of roster snapshots and raw frames to every open session."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Iterable

from chat_relay import protocol
from chat_relay.registry import UserRegistry

if TYPE_CHECKING:
    from chat_relay.session import Frame, Session

logger = logging.getLogger(__name__)


class Broadcaster:
    def __init__(
        self,
        registry: UserRegistry,
        sessions: Callable[[], Iterable[Session]],
    ) -> None:
        self._registry = registry
        self._sessions = sessions

    def send_roster(self, session: Session) -> bool:
        """Send the current roster to one session only."""
        return session.enqueue(protocol.users_list(self._registry.snapshot()))

    def broadcast_roster(self) -> int:
        """Send the current roster to all open sessions."""
        delivered = self._fan_out(protocol.users_list(self._registry.snapshot()))
        logger.info("Broadcast users list to %d sessions", delivered)
        return delivered

    def broadcast_raw(self, payload: Frame, is_binary: bool = False) -> int:
        """Forward a frame verbatim to all open sessions, the sender included."""
        if is_binary and isinstance(payload, str):
            payload = payload.encode("utf-8")
        elif not is_binary and isinstance(payload, bytes):
            payload = payload.decode("utf-8")
        delivered = self._fan_out(payload)
        logger.info("Message broadcasted to %d sessions", delivered)
        return delivered

    def _fan_out(self, frame: Frame) -> int:
        delivered = 0
        for session in list(self._sessions()):
            # closed or closing sessions refuse the frame
            if session.enqueue(frame):
                delivered += 1
        return delivered
