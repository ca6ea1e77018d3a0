"""FastAPI application entry point."""
from __future__ import annotations

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chat_relay.config import AppConfig, load_config
from chat_relay.logging import setup_logging
from chat_relay.manager import SessionManager
from chat_relay.models import HealthResponse, RootResponse
from chat_relay.registry import UserRegistry
from chat_relay.routers import users_router
from chat_relay.websockets import websocket_channel

logger = logging.getLogger(__name__)


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Build the relay app with its own registry and session manager."""
    config = config or load_config()

    app = FastAPI(title="Chat Relay", description="Real-time chat relay backend")
    app.state.config = config
    app.state.registry = UserRegistry()
    app.state.sessions = SessionManager(
        app.state.registry,
        remove_on_disconnect=config.sessions.remove_on_disconnect,
    )

    # Configure CORS (from config)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors.origins,
        allow_credentials=config.cors.allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(users_router)
    app.add_api_websocket_route("/", websocket_channel)
    app.add_api_websocket_route("/ws", websocket_channel)

    @app.get("/", response_model=RootResponse)
    async def root() -> RootResponse:
        """Root endpoint, doubles as the health check for the chat frontend."""
        return RootResponse(status="ok", message="Chat backend is running!")

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="ok")

    return app


def main() -> None:
    config = load_config()
    setup_logging(config.logging, service_name="chat-relay")
    logger.info("Server is running on http://localhost:%d", config.server.port)
    uvicorn.run(create_app(config), host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
