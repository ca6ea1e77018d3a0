"""Relay WebSocket handlers."""

from chat_relay.websockets.channel import websocket_channel

__all__ = ["websocket_channel"]
