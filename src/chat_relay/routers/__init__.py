"""Relay routers for REST endpoints."""

from chat_relay.routers.users import router as users_router

__all__ = ["users_router"]
