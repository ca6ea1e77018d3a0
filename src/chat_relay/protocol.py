"""Channel wire protocol: JSON envelopes with a "type" field.

Client -> server:
  {"type": "new-user", "user": {"id": "...", "name": "..."}}
  {"type": "exit", "user": {"name": "..."}}
  {"type": "get-users"}
  {"type": "send", ...}          forwarded verbatim to every channel

Server -> client:
  {"type": "users-list", "users": [{"id": "...", "name": "..."}, ...]}
  {"type": "nickname-error", "message": "..."}
"""

from __future__ import annotations

import json
import uuid
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from chat_relay.models import User

NEW_USER = "new-user"
EXIT = "exit"
GET_USERS = "get-users"
SEND = "send"

USERS_LIST = "users-list"
NICKNAME_ERROR = "nickname-error"

NICKNAME_TAKEN_MESSAGE = "This nickname is already taken"


class ProtocolError(Exception):
    """An inbound frame that cannot be understood."""


class UserPayload(BaseModel):
    """User record as sent by a client. The id is optional on exit."""

    id: Optional[str] = None
    name: str = Field(..., min_length=1)

    def to_user(self) -> User:
        return User(id=self.id or str(uuid.uuid4()), name=self.name)


class UsersListMessage(BaseModel):
    type: Literal["users-list"] = USERS_LIST
    users: list[User]


class NicknameErrorMessage(BaseModel):
    type: Literal["nickname-error"] = NICKNAME_ERROR
    message: str = NICKNAME_TAKEN_MESSAGE


def decode(raw: Union[str, bytes]) -> dict[str, Any]:
    """Parse a text or binary frame into an envelope dict."""
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise ProtocolError(f"Malformed JSON: {e}") from e
    if not isinstance(data, dict):
        raise ProtocolError(f"Envelope must be a JSON object, got {type(data).__name__}")
    return data


def parse_user(envelope: dict[str, Any]) -> UserPayload:
    """Extract the ``user`` member of a new-user/exit envelope."""
    try:
        return UserPayload.model_validate(envelope.get("user"))
    except ValidationError as e:
        raise ProtocolError(f"Invalid user payload in {envelope.get('type')!r} message: {e}") from e


def users_list(users: list[User]) -> str:
    return UsersListMessage(users=users).model_dump_json()


def nickname_error(message: str = NICKNAME_TAKEN_MESSAGE) -> str:
    return NicknameErrorMessage(message=message).model_dump_json()
