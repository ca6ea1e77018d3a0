"""User registration REST endpoint."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from chat_relay.models import ErrorResponse, RegisterRequest, RegisterResponse
from chat_relay.registry import NameTaken, UserRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])

NAME_REQUIRED_MESSAGE = "A name is required!"
NAME_TAKEN_MESSAGE = "This name is already taken!"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message).model_dump(),
    )


@router.post(
    "/new-user",
    response_model=RegisterResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def register_user(request: Request) -> JSONResponse:
    """Claim a display name.

    The body is read as JSON whatever its content type. Registering here does
    not put the user on any channel: the client still has to announce itself
    with a ``new-user`` message once its channel is open.
    """
    raw = await request.body()
    body = None
    if raw.strip():
        try:
            body = RegisterRequest.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Rejected registration body: %s", e)

    if body is None or not body.name or not body.name.strip():
        return _error(400, NAME_REQUIRED_MESSAGE)

    registry: UserRegistry = request.app.state.registry
    try:
        user = registry.register(body.name)
    except NameTaken:
        logger.error("User with name %r already exists", body.name)
        return _error(409, NAME_TAKEN_MESSAGE)

    return JSONResponse(content=RegisterResponse(user=user).model_dump())
